"""SQLAlchemy ORM models and Pydantic schemas."""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel
from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Index, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# ── Metadata keys ───────────────────────────────────────────────────────

GENERATED_FLAG_KEY = "_pagegen_generated"
SOURCE_FILENAME_KEY = "_pagegen_source_filename"
ROW_FINGERPRINT_KEY = "_pagegen_row_fingerprint"
META_TITLE_KEY = "_pagegen_meta_title"
META_DESCRIPTION_KEY = "_pagegen_meta_description"

LAST_TEMPLATE_OPTION = "pagegen_last_template"

PUBLISHABLE_STATUSES = ("publish", "draft", "pending", "private")


# ── SQLAlchemy ORM ──────────────────────────────────────────────────────


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="editor")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class Document(Base):
    __tablename__ = "documents"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="publish")
    parent_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("documents.id", ondelete="SET NULL")
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("ix_documents_title", "title"),
        {"comment": "Template and generated documents"},
    )

    meta: Mapped[list["DocumentMeta"]] = relationship(
        back_populates="document", cascade="all, delete-orphan", passive_deletes=True
    )


class DocumentMeta(Base):
    __tablename__ = "document_meta"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    document_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False
    )
    meta_key: Mapped[str] = mapped_column(String(255), nullable=False)
    meta_value: Mapped[str] = mapped_column(Text, nullable=False, default="")

    __table_args__ = (
        Index("ix_document_meta_key", "meta_key"),
        Index("ix_document_meta_document_id", "document_id"),
    )

    document: Mapped[Document] = relationship(back_populates="meta")


class Option(Base):
    __tablename__ = "options"

    key: Mapped[str] = mapped_column(String(191), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


# ── Pydantic Schemas ────────────────────────────────────────────────────


class DocumentRecord(BaseModel):
    """Store-level view of a document, independent of the ORM session."""

    id: uuid.UUID
    title: str
    content: str
    status: str
    parent_id: uuid.UUID | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class DocumentResponse(BaseModel):
    id: uuid.UUID
    title: str
    status: str
    parent_id: uuid.UUID | None
    source_filename: str | None
    created_at: datetime | None
    updated_at: datetime | None


class RowOutcomeResponse(BaseModel):
    row: int
    title: str
    action: str
    document_id: uuid.UUID | None = None
    error: str | None = None


class BatchResponse(BaseModel):
    operation: str
    source_filename: str
    message: str
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0
    failed: int = 0
    outcomes: list[RowOutcomeResponse] = []


class DeletionResponse(BaseModel):
    message: str
    deleted: int
    failed: int
    source_filename: str | None = None


class PreferencesResponse(BaseModel):
    last_template_id: uuid.UUID | None = None


class HeadMetaResponse(BaseModel):
    document_id: uuid.UUID
    title: str | None
    description: str | None
    html: str


class CsrfTokenResponse(BaseModel):
    csrf_token: str
    action: str


class SourcesResponse(BaseModel):
    sources: list[str]


class UserResponse(BaseModel):
    id: uuid.UUID
    email: str
    name: str
    role: str
    is_active: bool
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class DevLoginRequest(BaseModel):
    """Dev-only: login with just an email (no password). Only works when auth_required=False."""

    email: str
    name: str = "Dev User"
    role: Literal["viewer", "editor", "admin"] = "editor"
