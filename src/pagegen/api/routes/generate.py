"""Generate and update documents from an uploaded CSV file."""

from __future__ import annotations

import io
import uuid
from pathlib import PurePath

import structlog
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from pagegen.api.auth import require_role
from pagegen.api.deps import get_db, get_document_store, get_settings_store
from pagegen.common.config import settings
from pagegen.common.models import BatchResponse, PreferencesResponse, RowOutcomeResponse, User
from pagegen.generation.generator import GenerationEngine
from pagegen.generation.preferences import PreferencesService
from pagegen.generation.reconciler import ReconciliationEngine
from pagegen.generation.results import SKIPPED, UNCHANGED, UNMATCHED, BatchReport
from pagegen.stores.base import BaseDocumentStore, BaseSettingsStore

logger = structlog.get_logger()

router = APIRouter()


async def _read_upload(upload: UploadFile) -> tuple[bytes, str]:
    data = await upload.read(settings.max_csv_bytes + 1)
    if len(data) > settings.max_csv_bytes:
        raise HTTPException(status_code=413, detail="CSV file too large")
    return data, PurePath(upload.filename or "").name


def _batch_response(report: BatchReport) -> BatchResponse:
    return BatchResponse(
        operation=report.operation,
        source_filename=report.source_filename,
        message=report.message,
        created=report.created,
        updated=report.updated,
        unchanged=report.count(UNCHANGED),
        skipped=report.count(SKIPPED) + report.count(UNMATCHED),
        failed=report.failed,
        outcomes=[
            RowOutcomeResponse(
                row=o.row,
                title=o.title,
                action=o.action,
                document_id=o.document_id,
                error=o.error,
            )
            for o in report.outcomes
        ],
    )


@router.post("/generate", response_model=BatchResponse, status_code=201)
async def generate_documents(
    csv_file: UploadFile = File(...),
    template_id: uuid.UUID = Form(...),
    status: str | None = Form(default=None),
    parent_id: uuid.UUID | None = Form(default=None),
    db: AsyncSession = Depends(get_db),
    store: BaseDocumentStore = Depends(get_document_store),
    settings_store: BaseSettingsStore = Depends(get_settings_store),
    _user: User | None = Depends(require_role("editor")),
):
    """Create one document per CSV row from the template document."""
    data, filename = await _read_upload(csv_file)

    report = await GenerationEngine(store).generate(
        template_id,
        io.BytesIO(data),
        status=status,
        source_filename=filename,
        parent_id=parent_id,
    )
    if report.preferences is not None:
        await PreferencesService(settings_store).save(report.preferences)
    await db.commit()

    logger.info("generate_request_complete", source=report.source_filename, created=report.created)
    return _batch_response(report)


@router.post("/update", response_model=BatchResponse)
async def update_documents(
    csv_file: UploadFile = File(...),
    template_id: uuid.UUID = Form(...),
    parent_id: uuid.UUID | None = Form(default=None),
    db: AsyncSession = Depends(get_db),
    store: BaseDocumentStore = Depends(get_document_store),
    _user: User | None = Depends(require_role("editor")),
):
    """Update previously generated documents whose titles match CSV rows. Never creates documents."""
    data, filename = await _read_upload(csv_file)

    report = await ReconciliationEngine(store).reconcile(
        template_id,
        io.BytesIO(data),
        source_filename=filename,
        parent_id=parent_id,
    )
    await db.commit()

    logger.info("update_request_complete", source=report.source_filename, updated=report.updated)
    return _batch_response(report)


@router.get("/preferences", response_model=PreferencesResponse)
async def get_preferences(
    settings_store: BaseSettingsStore = Depends(get_settings_store),
    _user: User | None = Depends(require_role("editor")),
):
    """Last-used template, for pre-filling the generation form."""
    prefs = await PreferencesService(settings_store).load()
    return PreferencesResponse(last_template_id=prefs.last_template_id)
