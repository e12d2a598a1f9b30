from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, pg_enum
from src.models.enums import OwnerType


class Document(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """An uploaded compliance document.

    Re-uploading a document type creates a new row; earlier rows are kept.
    ``verification_status`` is free text so values written by newer clients
    do not break reads.
    """

    __tablename__ = "documents"

    owner_type: Mapped[OwnerType] = mapped_column(pg_enum(OwnerType, "owner_type"), nullable=False)
    owner_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    doc_type: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(String(512), nullable=False)
    file_size: Mapped[int | None] = mapped_column(Integer)
    mime_type: Mapped[str | None] = mapped_column(String(100))
    uploaded_by: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True))
    verification_status: Mapped[str] = mapped_column(
        String(32), nullable=False, server_default="pending"
    )
    verified_by: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True))
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    expiry_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    notes: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (
        Index("ix_documents_owner", "owner_type", "owner_id"),
        Index("ix_documents_verification_status", "verification_status"),
    )
