"""Unit tests for DepotPricingService."""

from __future__ import annotations

import uuid
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.config import settings
from src.exceptions import (
    BusinessRuleException,
    ConflictException,
    NoTiersConfiguredException,
    NotFoundException,
    ValidationException,
)
from src.models.depot_price import DepotPrice
from src.modules.pricing.service import DepotPricingService


def _result(scalar=None, scalars=None):
    result = MagicMock()
    result.scalar_one_or_none.return_value = scalar
    result.scalars.return_value.all.return_value = scalars or []
    return result


def _make_db(*results):
    db = AsyncMock()
    db.add = MagicMock()
    db.flush = AsyncMock()
    db.delete = AsyncMock()
    db.execute.side_effect = list(results)
    return db


def _make_depot(supplier_id: uuid.UUID | None = None, is_active: bool = True):
    depot = MagicMock()
    depot.id = uuid.uuid4()
    depot.supplier_id = supplier_id or uuid.uuid4()
    depot.name = "Germiston Depot"
    depot.is_active = is_active
    return depot


def _make_tier(
    depot_id: uuid.UUID,
    fuel_type_id: uuid.UUID,
    min_litres: str,
    price: str,
    available: str | None = None,
):
    tier = MagicMock()
    tier.id = uuid.uuid4()
    tier.depot_id = depot_id
    tier.fuel_type_id = fuel_type_id
    tier.min_litres = Decimal(min_litres)
    tier.price_per_litre = Decimal(price)
    tier.available_litres = Decimal(available) if available is not None else None
    return tier


def _standard_tiers(depot_id, fuel_type_id, available="20000"):
    return [
        _make_tier(depot_id, fuel_type_id, "0", "18.50", available),
        _make_tier(depot_id, fuel_type_id, "1000", "17.90", available),
        _make_tier(depot_id, fuel_type_id, "5000", "17.20", available),
    ]


# ---------------------------------------------------------------------------
# create_tier
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_tier_inherits_shared_stock():
    """A new tier starts with the stock already recorded for the fuel type."""
    depot = _make_depot()
    fuel_type = MagicMock(id=uuid.uuid4())
    db = _make_db(
        _result(depot),  # get_owned_depot
        _result(fuel_type),  # fuel type lookup
        _result(None),  # no tier with that min_litres yet
        _result(Decimal("8000")),  # current stock
    )

    svc = DepotPricingService(db)
    tier = await svc.create_tier(
        depot.supplier_id, depot.id, fuel_type.id, Decimal("17.90"), Decimal("1000")
    )

    assert isinstance(tier, DepotPrice)
    assert tier.available_litres == Decimal("8000")
    assert tier.min_litres == Decimal("1000")
    db.add.assert_called_once_with(tier)
    assert db.flush.call_count == 1


@pytest.mark.asyncio
async def test_create_tier_duplicate_min_litres():
    depot = _make_depot()
    fuel_type = MagicMock(id=uuid.uuid4())
    db = _make_db(_result(depot), _result(fuel_type), _result(uuid.uuid4()))

    svc = DepotPricingService(db)
    with pytest.raises(ConflictException, match="minimum 1000L already exists"):
        await svc.create_tier(
            depot.supplier_id, depot.id, fuel_type.id, Decimal("17.90"), Decimal("1000")
        )
    db.add.assert_not_called()


@pytest.mark.asyncio
async def test_create_tier_on_foreign_depot():
    """A depot owned by another supplier is reported as not found."""
    db = _make_db(_result(None))

    svc = DepotPricingService(db)
    with pytest.raises(NotFoundException):
        await svc.create_tier(uuid.uuid4(), uuid.uuid4(), uuid.uuid4(), Decimal("18.00"))


@pytest.mark.asyncio
async def test_create_tier_rejects_non_positive_price():
    db = _make_db()

    svc = DepotPricingService(db)
    with pytest.raises(ValidationException):
        await svc.create_tier(uuid.uuid4(), uuid.uuid4(), uuid.uuid4(), Decimal("0"))
    db.execute.assert_not_called()


# ---------------------------------------------------------------------------
# update_tier / delete_tier
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_update_tier_stock_applies_to_fuel_type():
    depot = _make_depot()
    tier = _make_tier(depot.id, uuid.uuid4(), "0", "18.50", "100")
    db = _make_db(_result(depot), _result(tier), MagicMock())

    svc = DepotPricingService(db)
    updated = await svc.update_tier(
        depot.supplier_id, depot.id, tier.id, available_litres=Decimal("4500")
    )

    assert updated.available_litres == Decimal("4500")
    # depot, tier and one bulk UPDATE across the fuel type's tiers
    assert db.execute.call_count == 3


@pytest.mark.asyncio
async def test_update_tier_min_litres_collision():
    depot = _make_depot()
    tier = _make_tier(depot.id, uuid.uuid4(), "0", "18.50")
    db = _make_db(_result(depot), _result(tier), _result(uuid.uuid4()))

    svc = DepotPricingService(db)
    with pytest.raises(ConflictException):
        await svc.update_tier(depot.supplier_id, depot.id, tier.id, min_litres=Decimal("5000"))
    assert tier.min_litres == Decimal("0")


@pytest.mark.asyncio
async def test_update_tier_price():
    depot = _make_depot()
    tier = _make_tier(depot.id, uuid.uuid4(), "0", "18.50")
    db = _make_db(_result(depot), _result(tier))

    svc = DepotPricingService(db)
    updated = await svc.update_tier(
        depot.supplier_id, depot.id, tier.id, price_per_litre=Decimal("18.95")
    )

    assert updated.price_per_litre == Decimal("18.95")
    assert db.execute.call_count == 2


@pytest.mark.asyncio
async def test_delete_tier_not_found():
    depot = _make_depot()
    db = _make_db(_result(depot), _result(None))

    svc = DepotPricingService(db)
    with pytest.raises(NotFoundException, match="Pricing tier"):
        await svc.delete_tier(depot.supplier_id, depot.id, uuid.uuid4())
    db.delete.assert_not_called()


@pytest.mark.asyncio
async def test_delete_tier():
    depot = _make_depot()
    tier = _make_tier(depot.id, uuid.uuid4(), "0", "18.50")
    db = _make_db(_result(depot), _result(tier))

    svc = DepotPricingService(db)
    await svc.delete_tier(depot.supplier_id, depot.id, tier.id)

    db.delete.assert_awaited_once_with(tier)


# ---------------------------------------------------------------------------
# update_stock
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_update_stock_sets_every_tier():
    depot = _make_depot()
    fuel_type_id = uuid.uuid4()
    tiers = _standard_tiers(depot.id, fuel_type_id, available="100")
    db = _make_db(_result(depot), _result(scalars=tiers))

    svc = DepotPricingService(db)
    await svc.update_stock(depot.supplier_id, depot.id, fuel_type_id, Decimal("12000"))

    assert all(t.available_litres == Decimal("12000") for t in tiers)
    db.add.assert_not_called()


@pytest.mark.asyncio
async def test_update_stock_creates_default_tier():
    depot = _make_depot()
    fuel_type_id = uuid.uuid4()
    db = _make_db(_result(depot), _result(scalars=[]))

    svc = DepotPricingService(db)
    tier = await svc.update_stock(depot.supplier_id, depot.id, fuel_type_id, Decimal("3000"))

    db.add.assert_called_once_with(tier)
    assert tier.min_litres == Decimal("0")
    assert tier.price_per_litre == settings.default_tier_price
    assert tier.available_litres == Decimal("3000")


@pytest.mark.asyncio
async def test_update_stock_rejects_negative():
    svc = DepotPricingService(_make_db())
    with pytest.raises(ValidationException):
        await svc.update_stock(uuid.uuid4(), uuid.uuid4(), uuid.uuid4(), Decimal("-1"))


# ---------------------------------------------------------------------------
# get_depot_pricing
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_get_depot_pricing_groups_and_labels():
    depot = _make_depot()
    diesel = MagicMock(id=uuid.uuid4(), code="diesel", label="Diesel 50ppm")
    petrol = MagicMock(id=uuid.uuid4(), code="petrol95", label="Petrol 95")
    tiers = _standard_tiers(depot.id, diesel.id)
    db = _make_db(
        _result(depot),
        _result(scalars=[diesel, petrol]),
        _result(scalars=list(reversed(tiers))),
    )

    svc = DepotPricingService(db)
    pricing = await svc.get_depot_pricing(depot.supplier_id, depot.id)

    assert [p["code"] for p in pricing] == ["diesel", "petrol95"]
    diesel_tiers = pricing[0]["pricing_tiers"]
    assert [t["min_litres"] for t in diesel_tiers] == [
        Decimal("0"),
        Decimal("1000"),
        Decimal("5000"),
    ]
    assert [t["range_label"] for t in diesel_tiers] == ["0L - 999L", "1000L - 4999L", "5000L+"]
    assert pricing[1]["pricing_tiers"] == []


# ---------------------------------------------------------------------------
# quote_order
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_quote_order_uses_volume_tier():
    depot = _make_depot()
    fuel_type_id = uuid.uuid4()
    tiers = _standard_tiers(depot.id, fuel_type_id)
    db = _make_db(_result(depot), _result(scalars=tiers))

    svc = DepotPricingService(db)
    quote = await svc.quote_order(depot.id, fuel_type_id, Decimal("1500"))

    assert quote.tier_id == tiers[1].id
    assert quote.price_per_litre == Decimal("17.90")
    assert quote.total_price == Decimal("26850.00")
    assert quote.range_label == "1000L - 4999L"
    assert quote.currency == settings.currency


@pytest.mark.asyncio
async def test_quote_order_rounds_total_half_up():
    depot = _make_depot()
    fuel_type_id = uuid.uuid4()
    tiers = [_make_tier(depot.id, fuel_type_id, "0", "18.55")]
    db = _make_db(_result(depot), _result(scalars=tiers))

    svc = DepotPricingService(db)
    quote = await svc.quote_order(depot.id, fuel_type_id, Decimal("0.5"))

    # 18.55 * 0.5 = 9.275
    assert quote.total_price == Decimal("9.28")


@pytest.mark.asyncio
async def test_quote_order_exceeding_stock():
    depot = _make_depot()
    fuel_type_id = uuid.uuid4()
    tiers = _standard_tiers(depot.id, fuel_type_id, available="1000")
    db = _make_db(_result(depot), _result(scalars=tiers))

    svc = DepotPricingService(db)
    with pytest.raises(BusinessRuleException, match="less than 1000L"):
        await svc.quote_order(depot.id, fuel_type_id, Decimal("1500"))


@pytest.mark.asyncio
async def test_quote_order_without_tiers():
    depot = _make_depot()
    db = _make_db(_result(depot), _result(scalars=[]))

    svc = DepotPricingService(db)
    with pytest.raises(NoTiersConfiguredException):
        await svc.quote_order(depot.id, uuid.uuid4(), Decimal("100"))


@pytest.mark.asyncio
async def test_quote_order_inactive_depot():
    depot = _make_depot(is_active=False)
    db = _make_db(_result(depot))

    svc = DepotPricingService(db)
    with pytest.raises(BusinessRuleException, match="not active"):
        await svc.quote_order(depot.id, uuid.uuid4(), Decimal("100"))


@pytest.mark.asyncio
async def test_quote_order_requires_positive_litres():
    svc = DepotPricingService(_make_db())
    with pytest.raises(ValidationException):
        await svc.quote_order(uuid.uuid4(), uuid.uuid4(), Decimal("0"))
