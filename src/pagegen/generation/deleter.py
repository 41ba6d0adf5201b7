"""Deletion engine: bulk-remove generated documents."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from pagegen.common.errors import InvalidInput, PersistenceError, Unauthorized
from pagegen.common.models import GENERATED_FLAG_KEY, SOURCE_FILENAME_KEY, DocumentRecord
from pagegen.common.utils import sanitize_file_name
from pagegen.generation.results import DeletionReport
from pagegen.stores.base import BaseDocumentStore

logger = structlog.get_logger()


@dataclass
class DeletionEngine:
    store: BaseDocumentStore

    async def delete_all(self, *, authorized: bool) -> DeletionReport:
        """Permanently delete every generated document. Requires the admin capability."""
        if not authorized:
            raise Unauthorized("Unauthorized")

        docs = await self.store.find_by_meta(GENERATED_FLAG_KEY)
        report = await self._delete(docs, DeletionReport())
        logger.info("delete_all_complete", deleted=report.deleted, failed=report.failed)
        return report

    async def delete_by_source(self, filename: str) -> DeletionReport:
        """Permanently delete the documents generated from one CSV file."""
        filename = sanitize_file_name(filename)
        if not filename:
            raise InvalidInput("A source filename is required.")

        docs = await self.store.find_by_meta(SOURCE_FILENAME_KEY, value=filename)
        report = await self._delete(docs, DeletionReport(source_filename=filename))
        logger.info("delete_by_source_complete", source=filename, deleted=report.deleted, failed=report.failed)
        return report

    async def _delete(self, docs: list[DocumentRecord], report: DeletionReport) -> DeletionReport:
        for doc in docs:
            try:
                if await self.store.delete_document(doc.id, permanent=True):
                    report.deleted += 1
            except PersistenceError as e:
                logger.error("delete_document_failed", document_id=str(doc.id), error=str(e))
                report.failed += 1
        return report
