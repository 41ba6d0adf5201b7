"""PostgreSQL storage for documents, document metadata, and options."""

import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pagegen.common.errors import PersistenceError
from pagegen.common.models import Document, DocumentMeta, DocumentRecord, Option
from pagegen.stores.base import BaseDocumentStore, BaseSettingsStore

logger = structlog.get_logger()


class PostgresDocumentStore(BaseDocumentStore):
    """Every write runs in a savepoint so a rejected row leaves the session usable."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        """Outer savepoint around several writes; their own savepoints nest inside it."""
        try:
            async with self.session.begin_nested():
                yield
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not complete write: {e}") from e

    async def get_document(self, document_id: uuid.UUID) -> DocumentRecord | None:
        doc = await self.session.get(Document, document_id)
        if doc is None:
            return None
        return DocumentRecord.model_validate(doc)

    async def create_document(
        self,
        title: str,
        content: str,
        status: str,
        parent_id: uuid.UUID | None = None,
    ) -> uuid.UUID:
        doc_id = uuid.uuid4()
        try:
            async with self.session.begin_nested():
                self.session.add(
                    Document(id=doc_id, title=title, content=content, status=status, parent_id=parent_id)
                )
                await self.session.flush()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not create document '{title}': {e}") from e

        logger.info("create_document", document_id=str(doc_id), status=status)
        return doc_id

    async def update_document(
        self,
        document_id: uuid.UUID,
        title: str,
        content: str,
        parent_id: uuid.UUID | None = None,
    ) -> None:
        stmt = (
            update(Document)
            .where(Document.id == document_id)
            .values(title=title, content=content, parent_id=parent_id, updated_at=func.now())
        )
        try:
            async with self.session.begin_nested():
                result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not update document {document_id}: {e}") from e

        if result.rowcount == 0:
            raise PersistenceError(f"Document {document_id} does not exist")
        logger.info("update_document", document_id=str(document_id))

    async def delete_document(self, document_id: uuid.UUID, permanent: bool = True) -> bool:
        if permanent:
            stmt = delete(Document).where(Document.id == document_id)
        else:
            stmt = update(Document).where(Document.id == document_id).values(status="trash")
        try:
            async with self.session.begin_nested():
                result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not delete document {document_id}: {e}") from e

        logger.info("delete_document", document_id=str(document_id), permanent=permanent, found=result.rowcount > 0)
        return result.rowcount > 0

    async def add_meta(self, document_id: uuid.UUID, key: str, value: str) -> None:
        try:
            async with self.session.begin_nested():
                self.session.add(DocumentMeta(document_id=document_id, meta_key=key, meta_value=value))
                await self.session.flush()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not add meta {key} to {document_id}: {e}") from e

    async def set_meta(self, document_id: uuid.UUID, key: str, value: str) -> None:
        stmt = (
            update(DocumentMeta)
            .where(DocumentMeta.document_id == document_id, DocumentMeta.meta_key == key)
            .values(meta_value=value)
        )
        try:
            async with self.session.begin_nested():
                result = await self.session.execute(stmt)
                if result.rowcount == 0:
                    self.session.add(DocumentMeta(document_id=document_id, meta_key=key, meta_value=value))
                    await self.session.flush()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not set meta {key} on {document_id}: {e}") from e

    async def get_meta(self, document_id: uuid.UUID, key: str) -> str | None:
        result = await self.session.execute(
            select(DocumentMeta.meta_value)
            .where(DocumentMeta.document_id == document_id, DocumentMeta.meta_key == key)
            .order_by(DocumentMeta.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_all_meta(self, document_id: uuid.UUID) -> dict[str, str]:
        result = await self.session.execute(
            select(DocumentMeta.meta_key, DocumentMeta.meta_value)
            .where(DocumentMeta.document_id == document_id)
            .order_by(DocumentMeta.id)
        )
        meta: dict[str, str] = {}
        for key, value in result.all():
            meta.setdefault(key, value)
        return meta

    async def find_by_meta(
        self,
        key: str,
        value: str | None = None,
        title: str | None = None,
        limit: int | None = None,
    ) -> list[DocumentRecord]:
        meta_filter = select(DocumentMeta.document_id).where(DocumentMeta.meta_key == key)
        if value is not None:
            meta_filter = meta_filter.where(DocumentMeta.meta_value == value)

        stmt = select(Document).where(Document.id.in_(meta_filter))
        if title is not None:
            stmt = stmt.where(Document.title == title)
        stmt = stmt.order_by(Document.created_at, Document.id)
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self.session.execute(stmt)
        return [DocumentRecord.model_validate(doc) for doc in result.scalars().all()]

    async def list_meta_values(self, key: str) -> list[str]:
        result = await self.session.execute(
            select(DocumentMeta.meta_value)
            .where(DocumentMeta.meta_key == key, DocumentMeta.meta_value != "")
            .distinct()
            .order_by(DocumentMeta.meta_value)
        )
        return list(result.scalars().all())


class PostgresSettingsStore(BaseSettingsStore):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_option(self, key: str, default: str | None = None) -> str | None:
        result = await self.session.execute(select(Option.value).where(Option.key == key))
        value: str | None = result.scalar_one_or_none()
        return default if value is None else value

    async def set_option(self, key: str, value: str) -> None:
        stmt = insert(Option).values(key=key, value=value)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Option.key],
            set_={"value": stmt.excluded.value, "updated_at": func.now()},
        )
        try:
            async with self.session.begin_nested():
                await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not save option {key}: {e}") from e
        logger.info("set_option", key=key)
