"""Compliance document uploads, verification and expiry tracking."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.exceptions import BusinessRuleException, NotFoundException
from src.models.document import Document
from src.models.enums import DocumentType, OwnerType, VerificationStatus

logger = logging.getLogger(__name__)

# Statuses a reviewer may set on a document
_REVIEW_STATUSES = {VerificationStatus.VERIFIED, VerificationStatus.REJECTED}


class DocumentService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add_document(
        self,
        owner_type: OwnerType,
        owner_id: uuid.UUID,
        doc_type: DocumentType,
        title: str,
        file_path: str,
        uploaded_by: uuid.UUID | None = None,
        file_size: int | None = None,
        mime_type: str | None = None,
        expiry_date: datetime | None = None,
    ) -> Document:
        """Record an upload. A re-upload adds a new pending row and keeps the old one."""
        document = Document(
            owner_type=owner_type,
            owner_id=owner_id,
            doc_type=doc_type.value,
            title=title,
            file_path=file_path,
            file_size=file_size,
            mime_type=mime_type,
            uploaded_by=uploaded_by,
            verification_status=VerificationStatus.PENDING.value,
            expiry_date=expiry_date,
        )
        self.db.add(document)
        await self.db.flush()

        logger.info(
            "Added %s document %s for %s %s", doc_type.value, document.id, owner_type.value, owner_id
        )
        return document

    async def get_document(self, document_id: uuid.UUID) -> Document:
        result = await self.db.execute(select(Document).where(Document.id == document_id))
        document = result.scalar_one_or_none()
        if document is None:
            raise NotFoundException(f"Document {document_id} not found")
        return document

    async def list_documents(self, owner_type: OwnerType, owner_id: uuid.UUID) -> list[Document]:
        """All documents of one owner, newest first."""
        result = await self.db.execute(
            select(Document)
            .where(Document.owner_type == owner_type, Document.owner_id == owner_id)
            .order_by(Document.created_at.desc())
        )
        return list(result.scalars().all())

    async def review_document(
        self,
        document_id: uuid.UUID,
        status: VerificationStatus,
        reviewer_id: uuid.UUID,
        notes: str | None = None,
    ) -> Document:
        """Mark a document verified or rejected."""
        if status not in _REVIEW_STATUSES:
            raise BusinessRuleException(
                f"Documents can only be reviewed as "
                f"{sorted(s.value for s in _REVIEW_STATUSES)}, got '{status.value}'"
            )

        document = await self.get_document(document_id)
        previous = document.verification_status

        document.verification_status = status.value
        document.verified_by = reviewer_id
        document.verified_at = datetime.now(UTC)
        if notes is not None:
            document.notes = notes

        await self.db.flush()

        logger.info(
            "Document %s reviewed by %s: %s -> %s", document_id, reviewer_id, previous, status.value
        )
        return document

    async def find_expiring_documents(
        self, within_days: int, now: datetime | None = None
    ) -> list[Document]:
        """Verified documents whose expiry falls after ``now`` and within ``within_days``."""
        now = now or datetime.now(UTC)
        cutoff = now + timedelta(days=within_days)
        result = await self.db.execute(
            select(Document)
            .where(
                Document.verification_status == VerificationStatus.VERIFIED.value,
                Document.expiry_date.is_not(None),
                Document.expiry_date > now,
                Document.expiry_date <= cutoff,
            )
            .order_by(Document.expiry_date.asc())
        )
        return list(result.scalars().all())
