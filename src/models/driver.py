from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Index, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, pg_enum
from src.models.enums import AccountStatus

if TYPE_CHECKING:
    from src.models.vehicle import Vehicle


class Driver(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "drivers"

    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, unique=True)
    status: Mapped[AccountStatus] = mapped_column(
        pg_enum(AccountStatus, "driver_status"),
        nullable=False,
        server_default=AccountStatus.PENDING_COMPLIANCE.value,
    )
    # Fuel-transport drivers need a PrDP and dangerous-goods training
    prdp_required: Mapped[bool] = mapped_column(Boolean, server_default="false", nullable=False)
    dg_training_required: Mapped[bool] = mapped_column(
        Boolean, server_default="false", nullable=False
    )
    compliance_status: Mapped[str] = mapped_column(
        String(32), nullable=False, server_default="pending"
    )
    compliance_reviewer_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True))
    compliance_review_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    compliance_rejection_reason: Mapped[str | None] = mapped_column(String(500))

    # Relationships
    vehicles: Mapped[list[Vehicle]] = relationship(
        "Vehicle", back_populates="driver", cascade="all, delete-orphan"
    )

    __table_args__ = (Index("ix_drivers_compliance_status", "compliance_status"),)
