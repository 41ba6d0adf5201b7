"""Abstract base classes for the document and settings stores."""

import uuid
from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager

from pagegen.common.models import DocumentRecord


class BaseDocumentStore(ABC):
    """Document persistence used by the engines.

    Write methods raise PersistenceError when the store rejects the change.
    """

    @abstractmethod
    def atomic(self) -> AbstractAsyncContextManager[None]:
        """Group writes so that either all of them apply or none do.

        On PersistenceError inside the block every write made in it is undone
        and the error propagates.
        """
        ...

    @abstractmethod
    async def get_document(self, document_id: uuid.UUID) -> DocumentRecord | None:
        """Return the document, or None if it does not exist."""
        ...

    @abstractmethod
    async def create_document(
        self,
        title: str,
        content: str,
        status: str,
        parent_id: uuid.UUID | None = None,
    ) -> uuid.UUID:
        """Create a document and return its ID."""
        ...

    @abstractmethod
    async def update_document(
        self,
        document_id: uuid.UUID,
        title: str,
        content: str,
        parent_id: uuid.UUID | None = None,
    ) -> None:
        """Replace title, content and parent of an existing document."""
        ...

    @abstractmethod
    async def delete_document(self, document_id: uuid.UUID, permanent: bool = True) -> bool:
        """Delete a document (or move it to trash). Returns False if it did not exist."""
        ...

    @abstractmethod
    async def add_meta(self, document_id: uuid.UUID, key: str, value: str) -> None:
        """Attach a metadata entry, keeping any existing entries for the key."""
        ...

    @abstractmethod
    async def set_meta(self, document_id: uuid.UUID, key: str, value: str) -> None:
        """Set every entry for the key to value, adding one if none exists."""
        ...

    @abstractmethod
    async def get_meta(self, document_id: uuid.UUID, key: str) -> str | None:
        """Return the first value stored for the key, or None."""
        ...

    @abstractmethod
    async def get_all_meta(self, document_id: uuid.UUID) -> dict[str, str]:
        """Return the first value of every key stored on the document."""
        ...

    @abstractmethod
    async def find_by_meta(
        self,
        key: str,
        value: str | None = None,
        title: str | None = None,
        limit: int | None = None,
    ) -> list[DocumentRecord]:
        """Documents carrying the metadata key (and value, and exact title when given).

        Ordered by creation time, then ID.
        """
        ...

    @abstractmethod
    async def list_meta_values(self, key: str) -> list[str]:
        """Distinct non-empty values stored under the key, sorted."""
        ...


class BaseSettingsStore(ABC):
    @abstractmethod
    async def get_option(self, key: str, default: str | None = None) -> str | None:
        ...

    @abstractmethod
    async def set_option(self, key: str, value: str) -> None:
        ...
