"""Depot and tiered pricing API router."""

from __future__ import annotations

import uuid
from decimal import Decimal

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.session import get_db
from src.models.depot_price import DepotPrice
from src.models.driver import Driver
from src.models.supplier import Supplier
from src.modules.compliance.guards import (
    get_current_supplier,
    require_driver_access,
    require_supplier_access,
)
from src.modules.compliance.service import ComplianceService
from src.modules.pricing.schemas import (
    DepotCreate,
    DepotResponse,
    FuelTypePricingResponse,
    OrderQuoteResponse,
    PricingTierCreate,
    PricingTierResponse,
    PricingTierUpdate,
    StockUpdate,
)
from src.modules.pricing.service import DepotPricingService, tier_labels
from src.schemas.responses import ErrorResponse

router = APIRouter(
    prefix="/depots",
    tags=["pricing"],
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)


async def _tier_response(svc: DepotPricingService, tier: DepotPrice) -> PricingTierResponse:
    """Tier response with its range label computed against its siblings."""
    siblings = await svc.list_tiers(tier.depot_id, tier.fuel_type_id)
    labels = tier_labels(siblings)
    response = PricingTierResponse.model_validate(tier)
    return response.model_copy(update={"range_label": labels.get(str(tier.id))})


# ---------------------------------------------------------------------------
# Depots
# ---------------------------------------------------------------------------


@router.get("/", response_model=list[DepotResponse])
async def list_depots(
    supplier: Supplier = Depends(get_current_supplier),
    db: AsyncSession = Depends(get_db),
):
    """Depots of the caller's supplier. Empty until compliance is approved."""
    status = await ComplianceService(db).get_supplier_status(supplier)
    if not status.can_access_platform:
        return []
    depots = await DepotPricingService(db).list_depots(supplier.id)
    return [DepotResponse.model_validate(d) for d in depots]


@router.post("/", response_model=DepotResponse, status_code=201)
async def create_depot(
    body: DepotCreate,
    supplier: Supplier = Depends(require_supplier_access),
    db: AsyncSession = Depends(get_db),
):
    svc = DepotPricingService(db)
    depot = await svc.create_depot(supplier.id, **body.model_dump())
    return DepotResponse.model_validate(depot)


# ---------------------------------------------------------------------------
# Pricing tiers
# ---------------------------------------------------------------------------


@router.get("/{depot_id}/pricing", response_model=list[FuelTypePricingResponse])
async def get_depot_pricing(
    depot_id: uuid.UUID,
    supplier: Supplier = Depends(require_supplier_access),
    db: AsyncSession = Depends(get_db),
):
    """Every active fuel type with this depot's pricing tiers, lowest volume first."""
    svc = DepotPricingService(db)
    pricing = await svc.get_depot_pricing(supplier.id, depot_id)
    return [FuelTypePricingResponse.model_validate(p) for p in pricing]


@router.post(
    "/{depot_id}/pricing/{fuel_type_id}/tiers",
    response_model=PricingTierResponse,
    status_code=201,
)
async def create_pricing_tier(
    depot_id: uuid.UUID,
    fuel_type_id: uuid.UUID,
    body: PricingTierCreate,
    supplier: Supplier = Depends(require_supplier_access),
    db: AsyncSession = Depends(get_db),
):
    svc = DepotPricingService(db)
    tier = await svc.create_tier(
        supplier.id,
        depot_id,
        fuel_type_id,
        price_per_litre=body.price_per_litre,
        min_litres=body.min_litres,
    )
    return await _tier_response(svc, tier)


@router.put("/{depot_id}/pricing/{fuel_type_id}/stock", response_model=PricingTierResponse)
async def update_stock(
    depot_id: uuid.UUID,
    fuel_type_id: uuid.UUID,
    body: StockUpdate,
    supplier: Supplier = Depends(require_supplier_access),
    db: AsyncSession = Depends(get_db),
):
    """Set the stock shared by every tier of a fuel type at this depot."""
    svc = DepotPricingService(db)
    tier = await svc.update_stock(supplier.id, depot_id, fuel_type_id, body.available_litres)
    return await _tier_response(svc, tier)


@router.put("/{depot_id}/pricing/tiers/{tier_id}", response_model=PricingTierResponse)
async def update_pricing_tier(
    depot_id: uuid.UUID,
    tier_id: uuid.UUID,
    body: PricingTierUpdate,
    supplier: Supplier = Depends(require_supplier_access),
    db: AsyncSession = Depends(get_db),
):
    svc = DepotPricingService(db)
    tier = await svc.update_tier(
        supplier.id, depot_id, tier_id, **body.model_dump(exclude_unset=True)
    )
    return await _tier_response(svc, tier)


@router.delete("/{depot_id}/pricing/tiers/{tier_id}", status_code=204)
async def delete_pricing_tier(
    depot_id: uuid.UUID,
    tier_id: uuid.UUID,
    supplier: Supplier = Depends(require_supplier_access),
    db: AsyncSession = Depends(get_db),
):
    svc = DepotPricingService(db)
    await svc.delete_tier(supplier.id, depot_id, tier_id)
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Quoting
# ---------------------------------------------------------------------------


@router.get("/{depot_id}/pricing/{fuel_type_id}/quote", response_model=OrderQuoteResponse)
async def quote_order(
    depot_id: uuid.UUID,
    fuel_type_id: uuid.UUID,
    litres: Decimal = Query(..., gt=0),
    driver: Driver = Depends(require_driver_access),
    db: AsyncSession = Depends(get_db),
):
    """Price a driver's depot order of ``litres`` at the tier for that volume.

    Only drivers whose compliance has been approved may quote orders.
    """
    svc = DepotPricingService(db)
    quote = await svc.quote_order(depot_id, fuel_type_id, litres)
    return OrderQuoteResponse.model_validate(quote)
