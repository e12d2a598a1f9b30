from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, pg_enum
from src.models.enums import AccountStatus

if TYPE_CHECKING:
    from src.models.driver import Driver


class Vehicle(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "vehicles"

    driver_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("drivers.id", ondelete="CASCADE"), nullable=False
    )
    registration_number: Mapped[str] = mapped_column(String(20), nullable=False)
    make: Mapped[str | None] = mapped_column(String(100))
    model: Mapped[str | None] = mapped_column(String(100))
    capacity_litres: Mapped[int | None] = mapped_column(Integer)
    vehicle_status: Mapped[AccountStatus] = mapped_column(
        pg_enum(AccountStatus, "vehicle_status"),
        nullable=False,
        server_default=AccountStatus.PENDING_COMPLIANCE.value,
    )
    dg_vehicle_permit_required: Mapped[bool] = mapped_column(
        Boolean, server_default="false", nullable=False
    )
    # Letter of authority is needed when the vehicle is not registered in the driver's name
    loa_required: Mapped[bool] = mapped_column(Boolean, server_default="false", nullable=False)

    # Relationships
    driver: Mapped[Driver] = relationship("Driver", back_populates="vehicles")

    __table_args__ = (Index("ix_vehicles_driver_id", "driver_id"),)
