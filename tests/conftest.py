"""Shared test fixtures for the pagegen test suite."""

import itertools
import uuid
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from pagegen.common.errors import PersistenceError
from pagegen.common.models import DocumentRecord
from pagegen.stores.base import BaseDocumentStore, BaseSettingsStore

_EPOCH = datetime(2026, 1, 1, tzinfo=UTC)


class InMemoryDocumentStore(BaseDocumentStore):
    """Dict-backed document store with the same ordering rules as the Postgres store.

    ``atomic`` restores a snapshot on PersistenceError. Titles listed in
    ``fail_titles`` make create/update raise PersistenceError;
    IDs in ``fail_deletes`` make delete raise.
    """

    def __init__(self) -> None:
        self.documents: dict[uuid.UUID, DocumentRecord] = {}
        self.meta: list[tuple[uuid.UUID, str, str]] = []
        self.fail_titles: set[str] = set()
        self.fail_deletes: set[uuid.UUID] = set()
        self._tick = itertools.count()

    def insert(self, title: str, content: str = "", status: str = "publish", **meta: str) -> DocumentRecord:
        doc = DocumentRecord(
            id=uuid.uuid4(),
            title=title,
            content=content,
            status=status,
            created_at=_EPOCH + timedelta(seconds=next(self._tick)),
        )
        self.documents[doc.id] = doc
        for key, value in meta.items():
            self.meta.append((doc.id, key, value))
        return doc

    @asynccontextmanager
    async def atomic(self):
        documents, meta = dict(self.documents), list(self.meta)
        try:
            yield
        except PersistenceError:
            self.documents, self.meta = documents, meta
            raise

    def meta_for(self, document_id: uuid.UUID) -> dict[str, list[str]]:
        result: dict[str, list[str]] = {}
        for doc_id, key, value in self.meta:
            if doc_id == document_id:
                result.setdefault(key, []).append(value)
        return result

    async def get_document(self, document_id):
        return self.documents.get(document_id)

    async def create_document(self, title, content, status, parent_id=None):
        if title in self.fail_titles:
            raise PersistenceError(f"Could not create document '{title}'")
        doc = self.insert(title, content, status)
        self.documents[doc.id] = doc.model_copy(update={"parent_id": parent_id})
        return doc.id

    async def update_document(self, document_id, title, content, parent_id=None):
        if document_id not in self.documents or title in self.fail_titles:
            raise PersistenceError(f"Could not update document {document_id}")
        self.documents[document_id] = self.documents[document_id].model_copy(
            update={"title": title, "content": content, "parent_id": parent_id}
        )

    async def delete_document(self, document_id, permanent=True):
        if document_id in self.fail_deletes:
            raise PersistenceError(f"Could not delete document {document_id}")
        if document_id not in self.documents:
            return False
        if permanent:
            del self.documents[document_id]
            self.meta = [m for m in self.meta if m[0] != document_id]
        else:
            self.documents[document_id] = self.documents[document_id].model_copy(update={"status": "trash"})
        return True

    async def add_meta(self, document_id, key, value):
        self.meta.append((document_id, key, value))

    async def set_meta(self, document_id, key, value):
        found = False
        for i, (doc_id, k, _) in enumerate(self.meta):
            if doc_id == document_id and k == key:
                self.meta[i] = (doc_id, k, value)
                found = True
        if not found:
            self.meta.append((document_id, key, value))

    async def get_meta(self, document_id, key):
        values = self.meta_for(document_id).get(key)
        return values[0] if values else None

    async def get_all_meta(self, document_id):
        return {key: values[0] for key, values in self.meta_for(document_id).items()}

    async def find_by_meta(self, key, value=None, title=None, limit=None):
        matching_ids = {
            doc_id for doc_id, k, v in self.meta if k == key and (value is None or v == value)
        }
        docs = [
            doc
            for doc in self.documents.values()
            if doc.id in matching_ids and (title is None or doc.title == title)
        ]
        docs.sort(key=lambda d: (d.created_at, d.id))
        return docs[:limit] if limit is not None else docs

    async def list_meta_values(self, key):
        return sorted({v for _, k, v in self.meta if k == key and v})


class InMemorySettingsStore(BaseSettingsStore):
    def __init__(self) -> None:
        self.options: dict[str, str] = {}

    async def get_option(self, key, default=None):
        return self.options.get(key, default)

    async def set_option(self, key, value):
        self.options[key] = value


@pytest.fixture
def memory_store():
    return InMemoryDocumentStore()


@pytest.fixture
def memory_settings_store():
    return InMemorySettingsStore()


@pytest.fixture
def template(memory_store):
    """A template document with two placeholders."""
    return memory_store.insert("Product template", "<h1>{{title}}</h1><p>{{description}}</p>")


@pytest.fixture
def mock_db_session():
    """Mock async SQLAlchemy session."""
    session = AsyncMock(spec=AsyncSession)
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock(return_value=None)
    session.add = MagicMock()
    savepoint = MagicMock()
    savepoint.__aenter__ = AsyncMock()
    savepoint.__aexit__ = AsyncMock(return_value=False)
    session.begin_nested = MagicMock(return_value=savepoint)
    return session
