"""Tiered depot pricing: range labels and price selection by order volume.

Every function here is pure. Input tiers are never mutated and every call
builds fresh output, so the functions can be shared freely between request
handlers.

Raw tier rows go through :func:`normalize_tiers` first, which is the only
place a malformed ``min_volume`` is repaired (coerced to ``0``). The
resolver functions accept raw rows as well and normalize them on the way in.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, localcontext
from typing import Any, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from src.exceptions import NoTiersConfiguredException, ValidationException

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")
_ONE = Decimal("1")


def coerce_min_volume(value: Any) -> Decimal:
    """Best-effort parse of a user-entered minimum volume.

    Anything that is not a finite, non-negative number (``None``, blank or
    non-numeric strings, NaN, booleans, negatives) becomes ``0``.
    """
    if value is None or isinstance(value, bool):
        return _ZERO
    if isinstance(value, Decimal):
        parsed = value
    else:
        try:
            parsed = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return _ZERO
    if not parsed.is_finite() or parsed < 0:
        return _ZERO
    return parsed


class PriceTier(BaseModel):
    """A price bracket that applies from ``min_volume`` upwards."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str | None = None
    fuel_type_id: str = Field(validation_alias=AliasChoices("fuel_type_id", "fuelTypeId"))
    min_volume: Decimal = Field(
        default=_ZERO, validation_alias=AliasChoices("min_volume", "minVolume")
    )
    price_per_unit: Decimal = Field(
        gt=0, validation_alias=AliasChoices("price_per_unit", "pricePerUnit")
    )

    @field_validator("id", "fuel_type_id", mode="before")
    @classmethod
    def _stringify_ids(cls, value: Any) -> Any:
        # UUID primary keys arrive from the ORM as uuid.UUID
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("min_volume", mode="before")
    @classmethod
    def _coerce_min_volume(cls, value: Any) -> Decimal:
        return coerce_min_volume(value)


TierInput = Union[PriceTier, Mapping[str, Any]]


@dataclass(frozen=True)
class TierRange:
    """A tier together with the volume span it covers."""

    tier: PriceTier
    label: str
    min_volume: Decimal
    max_volume: Decimal | None  # None for the open-ended top tier


def _to_tier(raw: TierInput) -> PriceTier:
    if isinstance(raw, PriceTier):
        return raw
    return PriceTier.model_validate(raw)


def normalize_tiers(tiers: Iterable[TierInput]) -> tuple[PriceTier, ...]:
    """Validate tiers and sort them ascending by ``min_volume``.

    The sort is stable: tiers sharing a ``min_volume`` keep their input
    order. Such duplicates are a data-entry problem that writes should
    prevent; they are logged here but not corrected.
    """
    ordered = tuple(sorted((_to_tier(t) for t in tiers), key=lambda t: t.min_volume))
    for previous, current in zip(ordered, ordered[1:]):
        if previous.min_volume == current.min_volume:
            logger.warning(
                "Duplicate min_volume %s for fuel type %s (tiers %s and %s)",
                current.min_volume,
                current.fuel_type_id,
                previous.id,
                current.id,
            )
    return ordered


def format_volume(value: Decimal) -> str:
    """Render a volume without exponent or trailing zeros (``1000``, ``999.5``)."""
    if value == value.to_integral_value():
        return format(value.to_integral_value(), "f")
    return format(value.normalize(), "f")


def compute_tier_ranges(tiers: Iterable[TierInput], unit: str = "L") -> list[TierRange]:
    """Label every tier with the volume range it applies to, lowest first.

    A tier followed by one with a strictly greater ``min_volume`` covers
    ``[min, next_min - 1]``; the last tier, or one followed by a duplicate,
    is open-ended.
    """
    ordered = normalize_tiers(tiers)
    ranges: list[TierRange] = []
    for index, tier in enumerate(ordered):
        following = ordered[index + 1] if index + 1 < len(ordered) else None
        if following is not None and following.min_volume > tier.min_volume:
            with localcontext() as ctx:
                ctx.prec = max(ctx.prec, following.min_volume.adjusted() + 2)
                upper = following.min_volume - _ONE
            label = f"{format_volume(tier.min_volume)}{unit} - {format_volume(upper)}{unit}"
        else:
            upper = None
            label = f"{format_volume(tier.min_volume)}{unit}+"
        ranges.append(
            TierRange(tier=tier, label=label, min_volume=tier.min_volume, max_volume=upper)
        )
    return ranges


def _parse_volume(value: Decimal | int | float | str) -> Decimal:
    try:
        volume = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationException(f"Requested volume {value!r} is not a number") from exc
    if not volume.is_finite():
        raise ValidationException(f"Requested volume {value!r} is not a finite number")
    return volume


def select_tier(
    tiers: Iterable[TierInput], requested_volume: Decimal | int | float | str
) -> PriceTier:
    """Pick the tier with the greatest ``min_volume`` not above the requested volume.

    Volumes below every threshold are priced at the lowest tier. A single
    tier therefore acts as a flat price.
    """
    ordered = normalize_tiers(tiers)
    if not ordered:
        raise NoTiersConfiguredException("No pricing tiers are configured for this fuel type")

    volume = _parse_volume(requested_volume)
    selected = ordered[0]
    for tier in ordered:
        if tier.min_volume <= volume:
            selected = tier
        else:
            break
    return selected


def price_for_volume(
    tiers: Iterable[TierInput], requested_volume: Decimal | int | float | str
) -> Decimal:
    """Return the per-unit price that applies to ``requested_volume``."""
    return select_tier(tiers, requested_volume).price_per_unit
