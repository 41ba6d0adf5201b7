"""Per-row outcomes and batch summaries returned by the engines."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pagegen.generation.preferences import GeneratorPreferences

CREATED = "created"
UPDATED = "updated"
UNCHANGED = "unchanged"
UNMATCHED = "unmatched"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass
class RowOutcome:
    row: int
    title: str
    action: str
    document_id: uuid.UUID | None = None
    error: str | None = None


@dataclass
class BatchReport:
    operation: str
    source_filename: str
    outcomes: list[RowOutcome] = field(default_factory=list)
    preferences: GeneratorPreferences | None = None

    def count(self, action: str) -> int:
        return sum(1 for o in self.outcomes if o.action == action)

    @property
    def created(self) -> int:
        return self.count(CREATED)

    @property
    def updated(self) -> int:
        return self.count(UPDATED)

    @property
    def failed(self) -> int:
        return self.count(FAILED)

    @property
    def document_ids(self) -> list[uuid.UUID]:
        return [o.document_id for o in self.outcomes if o.document_id is not None and o.action in (CREATED, UPDATED)]

    @property
    def message(self) -> str:
        if self.operation == "generate":
            text = f"{self.created} documents generated from {self.source_filename}."
        else:
            text = f"{self.updated} documents updated from {self.source_filename}."
        if self.failed:
            text += f" {self.failed} rows failed."
        return text


@dataclass
class DeletionReport:
    deleted: int = 0
    failed: int = 0
    source_filename: str | None = None

    @property
    def message(self) -> str:
        if self.source_filename is None:
            text = f"All generated documents deleted ({self.deleted})."
        else:
            text = f"{self.deleted} documents from {self.source_filename} deleted."
        if self.failed:
            text += f" {self.failed} could not be deleted."
        return text
