from __future__ import annotations

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Numeric, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from src.models.depot import Depot
    from src.models.fuel_type import FuelType


class DepotPrice(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """One pricing tier: the price per litre for orders of at least ``min_litres``."""

    __tablename__ = "depot_prices"

    depot_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("depots.id", ondelete="CASCADE"), nullable=False
    )
    fuel_type_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("fuel_types.id"), nullable=False
    )
    price_per_litre: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    min_litres: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), server_default="0", nullable=False
    )
    # Stock is shared by every tier of the same depot + fuel type
    available_litres: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))

    # Relationships
    depot: Mapped[Depot] = relationship("Depot", back_populates="prices")
    fuel_type: Mapped[FuelType] = relationship("FuelType")

    __table_args__ = (
        UniqueConstraint(
            "depot_id", "fuel_type_id", "min_litres",
            name="uq_depot_prices_depot_fuel_min_litres",
        ),
        Index("ix_depot_prices_depot_fuel_min_litres", "depot_id", "fuel_type_id", "min_litres"),
    )
