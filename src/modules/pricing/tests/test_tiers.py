"""Unit tests for the pricing tier resolver."""

from __future__ import annotations

import itertools
import logging
from decimal import Decimal

import pytest

from src.exceptions import NoTiersConfiguredException, ValidationException
from src.modules.pricing.tiers import (
    PriceTier,
    coerce_min_volume,
    compute_tier_ranges,
    format_volume,
    normalize_tiers,
    price_for_volume,
    select_tier,
)

DIESEL = "diesel-50ppm"


def _tiers():
    return [
        {"id": "t0", "fuel_type_id": DIESEL, "min_volume": 0, "price_per_unit": "18.50"},
        {"id": "t1", "fuel_type_id": DIESEL, "min_volume": 1000, "price_per_unit": "17.90"},
        {"id": "t2", "fuel_type_id": DIESEL, "min_volume": 5000, "price_per_unit": "17.20"},
    ]


# ---------------------------------------------------------------------------
# Range labels
# ---------------------------------------------------------------------------


def test_three_tier_labels():
    ranges = compute_tier_ranges(_tiers())

    assert [r.label for r in ranges] == ["0L - 999L", "1000L - 4999L", "5000L+"]
    assert [r.max_volume for r in ranges] == [Decimal("999"), Decimal("4999"), None]


def test_single_tier_is_open_ended():
    ranges = compute_tier_ranges(
        [{"fuel_type_id": DIESEL, "min_volume": 0, "price_per_unit": "20.00"}]
    )

    assert len(ranges) == 1
    assert ranges[0].label == "0L+"


def test_labels_use_given_unit():
    ranges = compute_tier_ranges(_tiers(), unit=" gal")
    assert ranges[-1].label == "5000 gal+"


def test_empty_tiers_give_no_ranges():
    assert compute_tier_ranges([]) == []


def test_ranges_sorted_regardless_of_input_order():
    expected = [r.label for r in compute_tier_ranges(_tiers())]
    for permutation in itertools.permutations(_tiers()):
        assert [r.label for r in compute_tier_ranges(list(permutation))] == expected


def test_fractional_threshold_label():
    ranges = compute_tier_ranges(
        [
            {"fuel_type_id": DIESEL, "min_volume": "0", "price_per_unit": "19"},
            {"fuel_type_id": DIESEL, "min_volume": "500.5", "price_per_unit": "18"},
        ]
    )
    assert ranges[0].label == "0L - 499.5L"
    assert ranges[1].label == "500.5L+"


def test_duplicate_min_volume_is_logged_and_left_open(caplog):
    tiers = [
        {"id": "a", "fuel_type_id": DIESEL, "min_volume": None, "price_per_unit": "19"},
        {"id": "b", "fuel_type_id": DIESEL, "min_volume": "abc", "price_per_unit": "18"},
    ]
    with caplog.at_level(logging.WARNING, logger="src.modules.pricing.tiers"):
        ranges = compute_tier_ranges(tiers)

    assert "Duplicate min_volume" in caplog.text
    # Stable sort keeps input order; neither tier gets an upper bound
    assert [r.tier.id for r in ranges] == ["a", "b"]
    assert [r.label for r in ranges] == ["0L+", "0L+"]


# ---------------------------------------------------------------------------
# Price selection
# ---------------------------------------------------------------------------


def test_price_for_volume_in_middle_tier():
    assert price_for_volume(_tiers(), 1500) == Decimal("17.90")


def test_price_for_volume_in_lowest_tier():
    assert price_for_volume(_tiers(), 50) == Decimal("18.50")


def test_price_at_exact_threshold_uses_that_tier():
    assert price_for_volume(_tiers(), 1000) == Decimal("17.90")
    assert price_for_volume(_tiers(), 999) == Decimal("18.50")
    assert price_for_volume(_tiers(), 5000) == Decimal("17.20")


def test_flat_price_applies_to_any_volume():
    tiers = [{"fuel_type_id": DIESEL, "min_volume": 0, "price_per_unit": "20.00"}]
    assert price_for_volume(tiers, 999999) == Decimal("20.00")


def test_volume_below_every_threshold_uses_lowest_tier():
    tiers = [
        {"id": "low", "fuel_type_id": DIESEL, "min_volume": 100, "price_per_unit": "19"},
        {"id": "high", "fuel_type_id": DIESEL, "min_volume": 500, "price_per_unit": "18"},
    ]
    assert select_tier(tiers, 10).id == "low"


def test_price_is_non_increasing_with_volume():
    tiers = _tiers()
    prices = [price_for_volume(tiers, v) for v in range(0, 8000, 250)]
    assert all(a >= b for a, b in zip(prices, prices[1:]))


def test_empty_tiers_raise():
    with pytest.raises(NoTiersConfiguredException):
        price_for_volume([], 100)


def test_non_numeric_volume_rejected():
    with pytest.raises(ValidationException):
        select_tier(_tiers(), "lots")


def test_nan_volume_rejected():
    with pytest.raises(ValidationException):
        select_tier(_tiers(), float("nan"))


def test_inputs_are_not_mutated():
    tiers = list(reversed(_tiers()))
    snapshot = [dict(t) for t in tiers]

    compute_tier_ranges(tiers)
    price_for_volume(tiers, 1500)

    assert tiers == snapshot


# ---------------------------------------------------------------------------
# Input handling
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, Decimal("0")),
        ("", Decimal("0")),
        ("abc", Decimal("0")),
        (float("nan"), Decimal("0")),
        (True, Decimal("0")),
        (-5, Decimal("0")),
        ("250", Decimal("250")),
        (1000, Decimal("1000")),
        (Decimal("12.5"), Decimal("12.5")),
    ],
)
def test_coerce_min_volume(raw, expected):
    assert coerce_min_volume(raw) == expected


def test_camel_case_fields_and_extra_keys_accepted():
    tier = PriceTier.model_validate(
        {
            "id": "t9",
            "fuelTypeId": DIESEL,
            "minVolume": "2000",
            "pricePerUnit": "17.50",
            "createdAt": "2026-01-01",
        }
    )
    assert tier.min_volume == Decimal("2000")
    assert tier.price_per_unit == Decimal("17.50")


def test_normalize_tiers_sorts_ascending():
    ordered = normalize_tiers(list(reversed(_tiers())))
    assert [t.id for t in ordered] == ["t0", "t1", "t2"]


def test_format_volume():
    assert format_volume(Decimal("1000.00")) == "1000"
    assert format_volume(Decimal("1E+3")) == "1000"
    assert format_volume(Decimal("999.50")) == "999.5"


def test_format_volume_beyond_context_precision():
    assert format_volume(Decimal("1e30")) == "1" + "0" * 30


def test_huge_threshold_is_labelled_without_error():
    tiers = [
        {"id": "t0", "fuel_type_id": DIESEL, "min_volume": 0, "price_per_unit": "18.50"},
        {"id": "t1", "fuel_type_id": DIESEL, "minVolume": "1e30", "pricePerUnit": "17.90"},
    ]

    ranges = compute_tier_ranges(tiers)

    assert ranges[0].label == f"0L - {'9' * 30}L"
    assert ranges[1].label == f"1{'0' * 30}L+"


@pytest.mark.parametrize(
    "thresholds",
    [
        [0],
        [0, 1000, 5000],
        [0, 1, 2, 3],
        [0, 250, 10000, 20000, 1000000],
    ],
)
def test_integer_thresholds_cover_from_zero_without_gaps(thresholds):
    tiers = [
        {"id": f"t{i}", "fuel_type_id": DIESEL, "min_volume": m, "price_per_unit": "18.00"}
        for i, m in enumerate(reversed(thresholds))
    ]

    ranges = compute_tier_ranges(tiers)

    assert ranges[0].min_volume == Decimal("0")
    for current, following in zip(ranges, ranges[1:]):
        assert current.max_volume is not None
        assert current.max_volume + 1 == following.min_volume
    assert ranges[-1].max_volume is None
