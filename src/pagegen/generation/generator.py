"""Generation engine: create one document per CSV row from a template document."""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass

import structlog

from pagegen.common.config import settings
from pagegen.common.errors import InvalidInput, PersistenceError, TemplateNotFound
from pagegen.common.models import (
    GENERATED_FLAG_KEY,
    META_DESCRIPTION_KEY,
    META_TITLE_KEY,
    PUBLISHABLE_STATUSES,
    ROW_FINGERPRINT_KEY,
    SOURCE_FILENAME_KEY,
    DocumentRecord,
)
from pagegen.common.utils import sanitize_file_name, sanitize_text_field
from pagegen.generation.fingerprint import row_fingerprint
from pagegen.generation.normalizer import CsvSource, parse_csv
from pagegen.generation.preferences import GeneratorPreferences
from pagegen.generation.renderer import HtmlSanitizer, render_template, sanitize_html
from pagegen.generation.results import CREATED, FAILED, SKIPPED, BatchReport, RowOutcome
from pagegen.stores.base import BaseDocumentStore

logger = structlog.get_logger()

SEO_COLUMNS = (
    ("meta_title", META_TITLE_KEY),
    ("meta_description", META_DESCRIPTION_KEY),
)


async def load_template(store: BaseDocumentStore, template_id: uuid.UUID) -> DocumentRecord:
    template = await store.get_document(template_id)
    if template is None:
        raise TemplateNotFound("Template not found.")
    return template


def row_title(row: Mapping[str, str]) -> str:
    return sanitize_text_field(row.get("title", ""))


async def write_seo_meta(store: BaseDocumentStore, document_id: uuid.UUID, row: Mapping[str, str]) -> None:
    """Store ``meta_title``/``meta_description`` when the row has those columns."""
    for column, key in SEO_COLUMNS:
        if column in row:
            await store.set_meta(document_id, key, sanitize_text_field(row[column]))


@dataclass
class GenerationEngine:
    store: BaseDocumentStore
    sanitizer: HtmlSanitizer = sanitize_html

    async def generate(
        self,
        template_id: uuid.UUID,
        csv_file: CsvSource,
        status: str | None = None,
        source_filename: str = "",
        parent_id: uuid.UUID | None = None,
    ) -> BatchReport:
        """Create a document for every CSV row that has a title.

        1. Resolve the template (TemplateNotFound)
        2. Parse and normalize the CSV (InvalidInput)
        3. Per row: render, create, attach provenance and SEO metadata

        A row the store rejects is recorded as failed; later rows still run.
        """
        status = status or settings.default_post_status
        if status not in PUBLISHABLE_STATUSES:
            raise InvalidInput(f"Unsupported status: {status}")

        template = await load_template(self.store, template_id)
        rows = parse_csv(csv_file)
        filename = sanitize_file_name(source_filename)

        report = BatchReport(
            operation="generate",
            source_filename=filename,
            preferences=GeneratorPreferences(last_template_id=template_id),
        )
        logger.info("generation_start", template_id=str(template_id), source=filename, rows=len(rows))

        for index, row in enumerate(rows, start=1):
            title = row_title(row)
            if not title:
                report.outcomes.append(RowOutcome(row=index, title="", action=SKIPPED))
                continue

            content = render_template(template.content, row, self.sanitizer)
            try:
                async with self.store.atomic():
                    doc_id = await self.store.create_document(
                        title=title,
                        content=content,
                        status=status,
                        parent_id=parent_id,
                    )
                    await self.store.add_meta(doc_id, GENERATED_FLAG_KEY, "1")
                    await self.store.add_meta(doc_id, SOURCE_FILENAME_KEY, filename)
                    await self.store.add_meta(doc_id, ROW_FINGERPRINT_KEY, row_fingerprint(row))
                    await write_seo_meta(self.store, doc_id, row)
            except PersistenceError as e:
                # The document and its metadata were rolled back together.
                logger.error("generation_row_failed", row=index, title=title, error=str(e))
                report.outcomes.append(RowOutcome(row=index, title=title, action=FAILED, error=str(e)))
                continue

            logger.debug("generation_row_created", row=index, title=title, document_id=str(doc_id))
            report.outcomes.append(RowOutcome(row=index, title=title, action=CREATED, document_id=doc_id))

        logger.info(
            "generation_complete",
            source=filename,
            created=report.created,
            failed=report.failed,
        )
        return report
