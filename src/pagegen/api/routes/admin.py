"""Admin routes: bulk deletion of generated documents."""

import structlog
from fastapi import APIRouter, Depends, Form, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pagegen.api.auth import create_csrf_token, get_current_user, user_can_manage, verify_csrf_token
from pagegen.api.deps import get_db, get_document_store
from pagegen.common.models import CsrfTokenResponse, DeletionResponse, User
from pagegen.generation.deleter import DeletionEngine
from pagegen.generation.results import DeletionReport
from pagegen.stores.base import BaseDocumentStore

logger = structlog.get_logger()

router = APIRouter()

DELETE_BY_SOURCE_ACTION = "delete_by_source"


def _deletion_response(report: DeletionReport) -> DeletionResponse:
    return DeletionResponse(
        message=report.message,
        deleted=report.deleted,
        failed=report.failed,
        source_filename=report.source_filename,
    )


@router.get("/admin/csrf-token", response_model=CsrfTokenResponse)
async def issue_csrf_token(
    action: str = Query(default=DELETE_BY_SOURCE_ACTION),
    user: User | None = Depends(get_current_user),
):
    """Issue an anti-forgery token for a destructive form action."""
    return CsrfTokenResponse(csrf_token=create_csrf_token(action, user), action=action)


@router.delete("/admin/documents", response_model=DeletionResponse)
async def delete_all_documents(
    db: AsyncSession = Depends(get_db),
    store: BaseDocumentStore = Depends(get_document_store),
    user: User | None = Depends(get_current_user),
):
    """Permanently delete every generated document. Requires the admin role."""
    report = await DeletionEngine(store).delete_all(authorized=user_can_manage(user))
    await db.commit()
    logger.info("delete_all_request_complete", deleted=report.deleted, user=str(user.id) if user else None)
    return _deletion_response(report)


@router.post("/admin/documents/delete-by-source", response_model=DeletionResponse)
async def delete_documents_by_source(
    csv_filename: str = Form(...),
    csrf_token: str = Form(...),
    db: AsyncSession = Depends(get_db),
    store: BaseDocumentStore = Depends(get_document_store),
    user: User | None = Depends(get_current_user),
):
    """Permanently delete the documents generated from one CSV file."""
    if not verify_csrf_token(csrf_token, DELETE_BY_SOURCE_ACTION, user):
        raise HTTPException(status_code=403, detail="Invalid or expired anti-forgery token")

    report = await DeletionEngine(store).delete_by_source(csv_filename)
    await db.commit()
    return _deletion_response(report)
