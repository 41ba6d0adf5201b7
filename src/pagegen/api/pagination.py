"""Keyset pagination for list endpoints.

Lists are ordered newest first by ``(created_at, id)``; a cursor carries that
key for the last item of a page and the next page starts strictly after it.
"""

import base64
import binascii
import json
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 50


@dataclass(frozen=True)
class PageCursor:
    created_at: datetime
    id: uuid.UUID

    def encode(self) -> str:
        payload = json.dumps({"id": str(self.id), "sv": self.created_at.isoformat()}, sort_keys=True)
        return base64.urlsafe_b64encode(payload.encode()).decode()

    @classmethod
    def decode(cls, token: str) -> "PageCursor":
        """Parse a token produced by encode(). Raises ValueError for anything else."""
        try:
            data = json.loads(base64.urlsafe_b64decode(token.encode()))
            return cls(created_at=datetime.fromisoformat(data["sv"]), id=uuid.UUID(data["id"]))
        except (binascii.Error, ValueError, KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"Invalid cursor: {token!r}") from e


class PaginatedResponse(BaseModel, Generic[T]):
    items: list[T]
    total: int
    cursor: str = ""
