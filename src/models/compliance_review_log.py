from __future__ import annotations

import uuid

from sqlalchemy import Index, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, pg_enum
from src.models.enums import OwnerType, ReviewAction


class ComplianceReviewLog(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "compliance_review_logs"

    actor_type: Mapped[OwnerType] = mapped_column(pg_enum(OwnerType, "owner_type"), nullable=False)
    actor_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    reviewer_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True))
    action: Mapped[ReviewAction] = mapped_column(
        pg_enum(ReviewAction, "review_action"), nullable=False
    )
    from_status: Mapped[str] = mapped_column(String(32), nullable=False)
    to_status: Mapped[str] = mapped_column(String(32), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (
        Index("ix_compliance_review_logs_actor", "actor_type", "actor_id"),
        Index("ix_compliance_review_logs_action", "action"),
    )
