"""Documents endpoint: list generated documents, their sources, and head metadata."""

import uuid

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from pagegen.api.auth import get_current_user
from pagegen.api.deps import get_db, get_document_store
from pagegen.api.pagination import DEFAULT_PAGE_SIZE, PageCursor, PaginatedResponse
from pagegen.common.models import (
    GENERATED_FLAG_KEY,
    SOURCE_FILENAME_KEY,
    Document,
    DocumentMeta,
    DocumentResponse,
    HeadMetaResponse,
    SourcesResponse,
    User,
)
from pagegen.seo import render_head_tags, resolve_head_meta
from pagegen.stores.base import BaseDocumentStore

logger = structlog.get_logger()
router = APIRouter()


@router.get("/documents", response_model=PaginatedResponse[DocumentResponse])
async def list_documents(
    source: str | None = Query(default=None, description="Only documents generated from this CSV file"),
    cursor: str = "",
    limit: int = Query(default=DEFAULT_PAGE_SIZE, le=200),
    db: AsyncSession = Depends(get_db),
    _user: User | None = Depends(get_current_user),
):
    """List generated documents, newest first, with cursor-based pagination."""
    generated = select(DocumentMeta.document_id).where(DocumentMeta.meta_key == GENERATED_FLAG_KEY)
    source_meta = (
        select(DocumentMeta.meta_value)
        .where(DocumentMeta.document_id == Document.id, DocumentMeta.meta_key == SOURCE_FILENAME_KEY)
        .limit(1)
        .scalar_subquery()
    )

    filters = [Document.id.in_(generated)]
    if source:
        filters.append(source_meta == source)

    # Count total
    count_result = await db.execute(select(func.count()).select_from(Document).where(*filters))
    total = count_result.scalar() or 0

    stmt = (
        select(Document, source_meta.label("source_filename"))
        .where(*filters)
        .order_by(Document.created_at.desc(), Document.id.desc())
    )

    # Apply cursor filter for keyset pagination
    if cursor:
        try:
            after = PageCursor.decode(cursor)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid cursor")
        stmt = stmt.where(
            or_(
                Document.created_at < after.created_at,
                (Document.created_at == after.created_at) & (Document.id < after.id),
            )
        )

    # Fetch limit + 1 to detect next page
    result = await db.execute(stmt.limit(limit + 1))
    rows = result.all()

    has_next = len(rows) > limit
    rows = rows[:limit]

    items = [
        DocumentResponse(
            id=doc.id,
            title=doc.title,
            status=doc.status,
            parent_id=doc.parent_id,
            source_filename=source_filename,
            created_at=doc.created_at,
            updated_at=doc.updated_at,
        )
        for doc, source_filename in rows
    ]

    next_cursor = ""
    if has_next and rows:
        last_doc = rows[-1][0]
        next_cursor = PageCursor(created_at=last_doc.created_at, id=last_doc.id).encode()

    return PaginatedResponse(items=items, total=total, cursor=next_cursor)


@router.get("/documents/sources", response_model=SourcesResponse)
async def list_sources(
    store: BaseDocumentStore = Depends(get_document_store),
    _user: User | None = Depends(get_current_user),
):
    """Distinct source filenames of generated documents (choices for delete-by-source)."""
    return SourcesResponse(sources=await store.list_meta_values(SOURCE_FILENAME_KEY))


@router.get("/documents/{document_id}/head", response_model=HeadMetaResponse)
async def get_head_meta(
    document_id: uuid.UUID,
    store: BaseDocumentStore = Depends(get_document_store),
    _user: User | None = Depends(get_current_user),
):
    """Title and description tags for a document's ``<head>``."""
    if await store.get_document(document_id) is None:
        raise HTTPException(status_code=404, detail="Document not found")

    meta = await resolve_head_meta(store, document_id)
    return HeadMetaResponse(
        document_id=document_id,
        title=meta.title,
        description=meta.description,
        html=render_head_tags(meta),
    )
