"""Pydantic v2 schemas for depot and pricing-tier endpoints."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class DepotCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    lat: Decimal | None = Field(None, ge=-90, le=90)
    lng: Decimal | None = Field(None, ge=-180, le=180)
    open_hours: str | None = Field(None, max_length=255)
    notes: str | None = None
    address_street: str | None = Field(None, max_length=255)
    address_city: str | None = Field(None, max_length=100)
    address_province: str | None = Field(None, max_length=100)
    address_postal_code: str | None = Field(None, max_length=10)


class PricingTierCreate(BaseModel):
    price_per_litre: Decimal = Field(..., gt=0, decimal_places=2)
    min_litres: Decimal = Field(Decimal("0"), ge=0)


class PricingTierUpdate(BaseModel):
    price_per_litre: Decimal | None = Field(None, gt=0, decimal_places=2)
    min_litres: Decimal | None = Field(None, ge=0)
    available_litres: Decimal | None = Field(None, ge=0)


class StockUpdate(BaseModel):
    available_litres: Decimal = Field(..., ge=0)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class DepotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    supplier_id: uuid.UUID
    name: str
    lat: Decimal | None = None
    lng: Decimal | None = None
    open_hours: str | None = None
    notes: str | None = None
    is_active: bool
    address_street: str | None = None
    address_city: str | None = None
    address_province: str | None = None
    address_postal_code: str | None = None
    created_at: datetime
    updated_at: datetime


class PricingTierResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    depot_id: uuid.UUID
    fuel_type_id: uuid.UUID
    price_per_litre: Decimal
    min_litres: Decimal
    available_litres: Decimal | None = None
    range_label: str | None = None


class FuelTypePricingResponse(BaseModel):
    id: uuid.UUID
    code: str
    label: str
    pricing_tiers: list[PricingTierResponse] = Field(default_factory=list)


class OrderQuoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    depot_id: uuid.UUID
    fuel_type_id: uuid.UUID
    litres: Decimal
    tier_id: uuid.UUID
    price_per_litre: Decimal
    total_price: Decimal
    currency: str
    range_label: str
