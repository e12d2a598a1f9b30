from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Index, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, pg_enum
from src.models.enums import AccountStatus

if TYPE_CHECKING:
    from src.models.depot import Depot


class Supplier(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "suppliers"

    owner_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    registered_name: Mapped[str | None] = mapped_column(String(255))
    registration_number: Mapped[str | None] = mapped_column(String(50))
    vat_number: Mapped[str | None] = mapped_column(String(50))
    status: Mapped[AccountStatus] = mapped_column(
        pg_enum(AccountStatus, "supplier_status"),
        nullable=False,
        server_default=AccountStatus.PENDING_COMPLIANCE.value,
    )
    compliance_status: Mapped[str] = mapped_column(
        String(32), nullable=False, server_default="pending"
    )
    compliance_reviewer_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True))
    compliance_review_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    compliance_rejection_reason: Mapped[str | None] = mapped_column(String(500))

    # Relationships
    depots: Mapped[list[Depot]] = relationship(
        "Depot", back_populates="supplier", cascade="all, delete-orphan"
    )

    __table_args__ = (Index("ix_suppliers_compliance_status", "compliance_status"),)
