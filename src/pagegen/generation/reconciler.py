"""Reconciliation engine: update previously generated documents whose title matches a CSV row."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

import structlog

from pagegen.common.config import settings
from pagegen.common.errors import PersistenceError
from pagegen.common.models import GENERATED_FLAG_KEY, ROW_FINGERPRINT_KEY, SOURCE_FILENAME_KEY
from pagegen.common.utils import sanitize_file_name
from pagegen.generation.fingerprint import row_fingerprint
from pagegen.generation.generator import load_template, row_title, write_seo_meta
from pagegen.generation.normalizer import CsvSource, parse_csv
from pagegen.generation.renderer import HtmlSanitizer, render_template, sanitize_html
from pagegen.generation.results import (
    FAILED,
    SKIPPED,
    UNCHANGED,
    UNMATCHED,
    UPDATED,
    BatchReport,
    RowOutcome,
)
from pagegen.stores.base import BaseDocumentStore

logger = structlog.get_logger()


@dataclass
class ReconciliationEngine:
    """Never creates documents. Matching is exact title equality; the oldest match wins.

    With ``skip_unchanged`` a match whose stored fingerprint equals the row's
    fingerprint is left untouched.
    """

    store: BaseDocumentStore
    sanitizer: HtmlSanitizer = sanitize_html
    skip_unchanged: bool = field(default_factory=lambda: settings.skip_unchanged_rows)

    async def reconcile(
        self,
        template_id: uuid.UUID,
        csv_file: CsvSource,
        source_filename: str = "",
        parent_id: uuid.UUID | None = None,
    ) -> BatchReport:
        template = await load_template(self.store, template_id)
        rows = parse_csv(csv_file)
        filename = sanitize_file_name(source_filename)

        report = BatchReport(operation="update", source_filename=filename)
        logger.info("reconcile_start", template_id=str(template_id), source=filename, rows=len(rows))

        for index, row in enumerate(rows, start=1):
            title = row_title(row)
            if not title:
                report.outcomes.append(RowOutcome(row=index, title="", action=SKIPPED))
                continue

            matches = await self.store.find_by_meta(GENERATED_FLAG_KEY, title=title, limit=1)
            if not matches:
                logger.info("reconcile_row_unmatched", row=index, title=title)
                report.outcomes.append(RowOutcome(row=index, title=title, action=UNMATCHED))
                continue

            doc = matches[0]
            fingerprint = row_fingerprint(row)
            if self.skip_unchanged and await self.store.get_meta(doc.id, ROW_FINGERPRINT_KEY) == fingerprint:
                report.outcomes.append(RowOutcome(row=index, title=title, action=UNCHANGED, document_id=doc.id))
                continue

            try:
                async with self.store.atomic():
                    await self.store.update_document(
                        doc.id,
                        title=title,
                        content=render_template(template.content, row, self.sanitizer),
                        parent_id=parent_id,
                    )
                    await self.store.set_meta(doc.id, SOURCE_FILENAME_KEY, filename)
                    await self.store.set_meta(doc.id, ROW_FINGERPRINT_KEY, fingerprint)
                    await write_seo_meta(self.store, doc.id, row)
            except PersistenceError as e:
                logger.error("reconcile_row_failed", row=index, title=title, document_id=str(doc.id), error=str(e))
                report.outcomes.append(
                    RowOutcome(row=index, title=title, action=FAILED, document_id=doc.id, error=str(e))
                )
                continue

            report.outcomes.append(RowOutcome(row=index, title=title, action=UPDATED, document_id=doc.id))

        logger.info(
            "reconcile_complete",
            source=filename,
            updated=report.updated,
            unmatched=report.count(UNMATCHED),
            unchanged=report.count(UNCHANGED),
            failed=report.failed,
        )
        return report
