"""Depot management, tiered pricing maintenance and order quoting."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.exceptions import (
    BusinessRuleException,
    ConflictException,
    NoTiersConfiguredException,
    NotFoundException,
    ValidationException,
)
from src.models.depot import Depot
from src.models.depot_price import DepotPrice
from src.models.fuel_type import FuelType
from src.modules.pricing.tiers import PriceTier, compute_tier_ranges, format_volume, select_tier

logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class OrderQuote:
    depot_id: uuid.UUID
    fuel_type_id: uuid.UUID
    litres: Decimal
    tier_id: uuid.UUID
    price_per_litre: Decimal
    total_price: Decimal
    currency: str
    range_label: str


def to_price_tier(row: DepotPrice) -> PriceTier:
    return PriceTier(
        id=str(row.id),
        fuel_type_id=str(row.fuel_type_id),
        min_volume=row.min_litres,
        price_per_unit=row.price_per_litre,
    )


def tier_labels(rows: list[DepotPrice], unit: str | None = None) -> dict[str, str]:
    """Map tier id -> range label for the tiers of one fuel type."""
    ranges = compute_tier_ranges(
        [to_price_tier(row) for row in rows], unit=unit or settings.volume_unit
    )
    return {r.tier.id: r.label for r in ranges}


class DepotPricingService:
    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------
    # Depots
    # ------------------------------------------------------------------

    async def list_depots(self, supplier_id: uuid.UUID) -> list[Depot]:
        result = await self.db.execute(
            select(Depot).where(Depot.supplier_id == supplier_id).order_by(Depot.name)
        )
        return list(result.scalars().all())

    async def create_depot(self, supplier_id: uuid.UUID, name: str, **fields) -> Depot:
        depot = Depot(supplier_id=supplier_id, name=name, **fields)
        self.db.add(depot)
        await self.db.flush()
        logger.info("Created depot %s for supplier %s", depot.id, supplier_id)
        return depot

    async def get_owned_depot(self, supplier_id: uuid.UUID, depot_id: uuid.UUID) -> Depot:
        """Get a depot that belongs to ``supplier_id``. Raises NotFoundException otherwise."""
        result = await self.db.execute(
            select(Depot).where(Depot.id == depot_id, Depot.supplier_id == supplier_id)
        )
        depot = result.scalar_one_or_none()
        if depot is None:
            raise NotFoundException(f"Depot {depot_id} not found")
        return depot

    # ------------------------------------------------------------------
    # Pricing tiers
    # ------------------------------------------------------------------

    async def list_tiers(self, depot_id: uuid.UUID, fuel_type_id: uuid.UUID) -> list[DepotPrice]:
        result = await self.db.execute(
            select(DepotPrice)
            .where(DepotPrice.depot_id == depot_id, DepotPrice.fuel_type_id == fuel_type_id)
            .order_by(DepotPrice.min_litres.asc())
        )
        return list(result.scalars().all())

    async def _get_tier(self, depot_id: uuid.UUID, tier_id: uuid.UUID) -> DepotPrice:
        result = await self.db.execute(
            select(DepotPrice).where(DepotPrice.id == tier_id, DepotPrice.depot_id == depot_id)
        )
        tier = result.scalar_one_or_none()
        if tier is None:
            raise NotFoundException(f"Pricing tier {tier_id} not found")
        return tier

    async def _ensure_min_litres_free(
        self,
        depot_id: uuid.UUID,
        fuel_type_id: uuid.UUID,
        min_litres: Decimal,
        exclude_tier_id: uuid.UUID | None = None,
    ) -> None:
        query = select(DepotPrice.id).where(
            DepotPrice.depot_id == depot_id,
            DepotPrice.fuel_type_id == fuel_type_id,
            DepotPrice.min_litres == min_litres,
        )
        if exclude_tier_id is not None:
            query = query.where(DepotPrice.id != exclude_tier_id)
        result = await self.db.execute(query)
        if result.scalar_one_or_none() is not None:
            raise ConflictException(
                f"A pricing tier with minimum {format_volume(min_litres)}"
                f"{settings.volume_unit} already exists for this fuel type"
            )

    async def get_depot_pricing(self, supplier_id: uuid.UUID, depot_id: uuid.UUID) -> list[dict]:
        """Active fuel types, each with its tiers sorted ascending and labelled."""
        await self.get_owned_depot(supplier_id, depot_id)

        fuel_result = await self.db.execute(
            select(FuelType).where(FuelType.active.is_(True)).order_by(FuelType.label)
        )
        fuel_types = list(fuel_result.scalars().all())

        price_result = await self.db.execute(
            select(DepotPrice)
            .where(DepotPrice.depot_id == depot_id)
            .order_by(DepotPrice.fuel_type_id, DepotPrice.min_litres.asc())
        )
        by_fuel_type: dict[uuid.UUID, list[DepotPrice]] = {}
        for row in price_result.scalars().all():
            by_fuel_type.setdefault(row.fuel_type_id, []).append(row)

        pricing = []
        for fuel_type in fuel_types:
            rows = by_fuel_type.get(fuel_type.id, [])
            labels = tier_labels(rows)
            rows = sorted(rows, key=lambda r: r.min_litres)
            pricing.append(
                {
                    "id": fuel_type.id,
                    "code": fuel_type.code,
                    "label": fuel_type.label,
                    "pricing_tiers": [
                        {
                            "id": row.id,
                            "depot_id": row.depot_id,
                            "fuel_type_id": row.fuel_type_id,
                            "price_per_litre": row.price_per_litre,
                            "min_litres": row.min_litres,
                            "available_litres": row.available_litres,
                            "range_label": labels.get(str(row.id)),
                        }
                        for row in rows
                    ],
                }
            )
        return pricing

    async def create_tier(
        self,
        supplier_id: uuid.UUID,
        depot_id: uuid.UUID,
        fuel_type_id: uuid.UUID,
        price_per_litre: Decimal,
        min_litres: Decimal = Decimal("0"),
    ) -> DepotPrice:
        """Add a pricing tier. ``min_litres`` must be unique per depot and fuel type."""
        if price_per_litre <= 0:
            raise ValidationException("Price per litre must be greater than zero")
        if min_litres < 0:
            raise ValidationException("Minimum litres must be a non-negative number")

        await self.get_owned_depot(supplier_id, depot_id)

        fuel_result = await self.db.execute(select(FuelType).where(FuelType.id == fuel_type_id))
        if fuel_result.scalar_one_or_none() is None:
            raise NotFoundException(f"Fuel type {fuel_type_id} not found")

        await self._ensure_min_litres_free(depot_id, fuel_type_id, min_litres)

        # Stock is shared across tiers; a new tier starts with the current stock
        stock_result = await self.db.execute(
            select(DepotPrice.available_litres)
            .where(DepotPrice.depot_id == depot_id, DepotPrice.fuel_type_id == fuel_type_id)
            .limit(1)
        )
        stock = stock_result.scalar_one_or_none()

        tier = DepotPrice(
            depot_id=depot_id,
            fuel_type_id=fuel_type_id,
            price_per_litre=price_per_litre,
            min_litres=min_litres,
            available_litres=stock,
        )
        self.db.add(tier)
        await self.db.flush()
        logger.info(
            "Created pricing tier %s (min %s, price %s) at depot %s",
            tier.id,
            min_litres,
            price_per_litre,
            depot_id,
        )
        return tier

    async def update_tier(
        self,
        supplier_id: uuid.UUID,
        depot_id: uuid.UUID,
        tier_id: uuid.UUID,
        price_per_litre: Decimal | None = None,
        min_litres: Decimal | None = None,
        available_litres: Decimal | None = None,
    ) -> DepotPrice:
        """Update a tier. A stock change applies to every tier of the same fuel type."""
        await self.get_owned_depot(supplier_id, depot_id)
        tier = await self._get_tier(depot_id, tier_id)

        if price_per_litre is not None:
            if price_per_litre <= 0:
                raise ValidationException("Price per litre must be greater than zero")
            tier.price_per_litre = price_per_litre

        if min_litres is not None and min_litres != tier.min_litres:
            if min_litres < 0:
                raise ValidationException("Minimum litres must be a non-negative number")
            await self._ensure_min_litres_free(
                depot_id, tier.fuel_type_id, min_litres, exclude_tier_id=tier.id
            )
            tier.min_litres = min_litres

        if available_litres is not None:
            await self.db.execute(
                update(DepotPrice)
                .where(
                    DepotPrice.depot_id == depot_id,
                    DepotPrice.fuel_type_id == tier.fuel_type_id,
                )
                .values(available_litres=available_litres)
            )
            tier.available_litres = available_litres

        await self.db.flush()
        return tier

    async def delete_tier(
        self, supplier_id: uuid.UUID, depot_id: uuid.UUID, tier_id: uuid.UUID
    ) -> None:
        await self.get_owned_depot(supplier_id, depot_id)
        tier = await self._get_tier(depot_id, tier_id)
        await self.db.delete(tier)
        await self.db.flush()
        logger.info("Deleted pricing tier %s at depot %s", tier_id, depot_id)

    async def update_stock(
        self,
        supplier_id: uuid.UUID,
        depot_id: uuid.UUID,
        fuel_type_id: uuid.UUID,
        available_litres: Decimal,
    ) -> DepotPrice:
        """Set stock for a fuel type, creating a default tier when none exists yet."""
        if available_litres < 0:
            raise ValidationException("Available litres must be a non-negative number")

        await self.get_owned_depot(supplier_id, depot_id)
        tiers = await self.list_tiers(depot_id, fuel_type_id)

        if tiers:
            for tier in tiers:
                tier.available_litres = available_litres
            await self.db.flush()
            return tiers[0]

        tier = DepotPrice(
            depot_id=depot_id,
            fuel_type_id=fuel_type_id,
            price_per_litre=settings.default_tier_price,
            min_litres=Decimal("0"),
            available_litres=available_litres,
        )
        self.db.add(tier)
        await self.db.flush()
        logger.info(
            "Created default pricing tier %s for fuel type %s at depot %s",
            tier.id,
            fuel_type_id,
            depot_id,
        )
        return tier

    # ------------------------------------------------------------------
    # Quoting
    # ------------------------------------------------------------------

    async def quote_order(
        self, depot_id: uuid.UUID, fuel_type_id: uuid.UUID, litres: Decimal
    ) -> OrderQuote:
        """Price an order of ``litres`` at the tier that applies to that volume."""
        if litres <= 0:
            raise ValidationException("Order quantity must be greater than zero")

        result = await self.db.execute(select(Depot).where(Depot.id == depot_id))
        depot = result.scalar_one_or_none()
        if depot is None:
            raise NotFoundException(f"Depot {depot_id} not found")
        if not depot.is_active:
            raise BusinessRuleException("Depot is not active")

        rows = await self.list_tiers(depot_id, fuel_type_id)
        if not rows:
            raise NoTiersConfiguredException(
                "This fuel type is not available at this depot or pricing is not set"
            )

        tier = select_tier([to_price_tier(row) for row in rows], litres)
        row = next(r for r in rows if str(r.id) == tier.id)

        stock = row.available_litres or Decimal("0")
        if stock > 0 and litres >= stock:
            unit = settings.volume_unit
            raise BusinessRuleException(
                f"You can only order less than {format_volume(stock)}{unit}. "
                f"Available stock: {format_volume(stock)}{unit}"
            )

        total = (tier.price_per_unit * litres).quantize(_CENTS, rounding=ROUND_HALF_UP)
        return OrderQuote(
            depot_id=depot_id,
            fuel_type_id=fuel_type_id,
            litres=litres,
            tier_id=row.id,
            price_per_litre=tier.price_per_unit,
            total_price=total,
            currency=settings.currency,
            range_label=tier_labels(rows)[tier.id],
        )
