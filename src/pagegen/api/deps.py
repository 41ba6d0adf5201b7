"""FastAPI dependency injection."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pagegen.common.database import get_db
from pagegen.stores.base import BaseDocumentStore, BaseSettingsStore
from pagegen.stores.postgres_store import PostgresDocumentStore, PostgresSettingsStore

__all__ = ["get_db", "get_document_store", "get_settings_store"]


def get_document_store(db: AsyncSession = Depends(get_db)) -> BaseDocumentStore:
    return PostgresDocumentStore(db)


def get_settings_store(db: AsyncSession = Depends(get_db)) -> BaseSettingsStore:
    return PostgresSettingsStore(db)
