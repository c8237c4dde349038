"""Tests for engine/calculator.py — price resolution.

Covers:
  - End-to-end Benidorm scenario (monthly price, Easter on request,
    invalid duration, uncovered group size)
  - Tier boundaries, open-ended tiers, unconfigured tiers
  - Special-period precedence and recurring ranges
  - Missing cell vs on-request
  - Determinism and Decimal arithmetic
  - compare_price
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

import pytest

from package_pricing.engine.calculator import calculate_price, compare_price, resolve_period
from package_pricing.engine.errors import (
    CalculationError,
    InvalidDurationError,
    NoMatchingPeriodError,
    NoMatchingTierError,
    PriceNotDefinedError,
    TierConfigurationError,
)
from package_pricing.models import (
    Amount,
    DatedRangePeriod,
    DurationOption,
    GroupSizeTier,
    MonthPeriod,
    OnRequest,
    PriceCell,
    PricingMatrix,
)


JUNE_10 = dt.date(2025, 6, 10)


def _single_cell_matrix(tiers: list[GroupSizeTier], price=None) -> PricingMatrix:
    """Every tier priced at 100 for 2 nights in June."""
    price = price or Amount(value=Decimal("100"))
    return PricingMatrix(
        tiers=tiers,
        durations=[DurationOption(nights=2)],
        periods=[MonthPeriod(month=6)],
        cells=[
            PriceCell(tier_index=i, nights=2, period_key="month:06", price=price)
            for i in range(len(tiers))
        ],
    )


# ═══════════════════════════════════════════════════════════════════════════
# End-to-end scenario
# ═══════════════════════════════════════════════════════════════════════════

class TestEndToEnd:
    def test_june_price(self, easter_matrix: PricingMatrix):
        result = calculate_price(easter_matrix, 8, 2, JUNE_10)
        assert result.tier.label == "6-11 People"
        assert result.tier_index == 0
        assert result.period == MonthPeriod(month=6)
        assert result.period_label == "June"
        assert result.price_per_person == Decimal("150")
        assert result.total_price == Decimal("1200")
        assert result.was_on_request is False

    def test_easter_on_request(self, easter_matrix: PricingMatrix):
        result = calculate_price(easter_matrix, 8, 2, dt.date(2025, 4, 3))
        assert isinstance(result.period, DatedRangePeriod)
        assert result.period_label == "Easter"
        assert result.was_on_request is True
        assert result.price_per_person is None
        assert result.total_price is None

    def test_invalid_duration(self, easter_matrix: PricingMatrix):
        with pytest.raises(InvalidDurationError) as exc_info:
            calculate_price(easter_matrix, 8, 5, JUNE_10)
        assert exc_info.value.valid_nights == [2, 3, 4]
        assert exc_info.value.code == "invalid_duration"

    def test_group_too_large(self, easter_matrix: PricingMatrix):
        with pytest.raises(NoMatchingTierError) as exc_info:
            calculate_price(easter_matrix, 20, 2, JUNE_10)
        assert type(exc_info.value) is NoMatchingTierError
        assert exc_info.value.code == "no_matching_tier"

    def test_three_nights_june(self, easter_matrix: PricingMatrix):
        result = calculate_price(easter_matrix, 6, 3, JUNE_10)
        assert result.total_price == Decimal("1200")
        assert result.price_per_person == Decimal("200")


# ═══════════════════════════════════════════════════════════════════════════
# Tiers
# ═══════════════════════════════════════════════════════════════════════════

class TestTiers:
    @pytest.mark.parametrize("people", [6, 11])
    def test_boundaries_inclusive(self, easter_matrix: PricingMatrix, people: int):
        assert calculate_price(easter_matrix, people, 2, JUNE_10).tier_index == 0

    @pytest.mark.parametrize("people", [5, 12])
    def test_outside_boundaries(self, easter_matrix: PricingMatrix, people: int):
        with pytest.raises(NoMatchingTierError):
            calculate_price(easter_matrix, people, 2, JUNE_10)

    def test_open_ended_tier(self, two_tier_matrix: PricingMatrix):
        result = calculate_price(two_tier_matrix, 250, 2, JUNE_10)
        assert result.tier.label == "12+ People"
        assert result.total_price == Decimal("32500")

    def test_gap_between_tiers(self):
        matrix = _single_cell_matrix([
            GroupSizeTier(label="2-4 People", min_people=2, max_people=4),
            GroupSizeTier(label="8-10 People", min_people=8, max_people=10),
        ])
        with pytest.raises(NoMatchingTierError):
            calculate_price(matrix, 6, 2, JUNE_10)

    def test_unconfigured_tier_reported_when_nothing_matches(self):
        matrix = _single_cell_matrix([
            GroupSizeTier(label="2-4 People", min_people=2, max_people=4),
            GroupSizeTier(label="Big groups"),
        ])
        with pytest.raises(TierConfigurationError) as exc_info:
            calculate_price(matrix, 20, 2, JUNE_10)
        assert exc_info.value.tier_labels == ["Big groups"]
        assert exc_info.value.code == "tier_configuration"

    def test_unconfigured_tier_does_not_block_other_tiers(self):
        matrix = _single_cell_matrix([
            GroupSizeTier(label="Big groups"),
            GroupSizeTier(label="2-4 People", min_people=2, max_people=4),
        ])
        result = calculate_price(matrix, 3, 2, JUNE_10)
        assert result.tier_index == 1

    def test_first_matching_tier_wins(self):
        matrix = _single_cell_matrix([
            GroupSizeTier(label="2-6 People", min_people=2, max_people=6),
            GroupSizeTier(label="5-9 People", min_people=5, max_people=9),
        ])
        assert calculate_price(matrix, 5, 2, JUNE_10).tier_index == 0

    @pytest.mark.parametrize("people, nights", [(0, 2), (8, 0), (-1, 2)])
    def test_non_positive_inputs(self, easter_matrix: PricingMatrix, people: int, nights: int):
        with pytest.raises(ValueError):
            calculate_price(easter_matrix, people, nights, JUNE_10)


# ═══════════════════════════════════════════════════════════════════════════
# Periods
# ═══════════════════════════════════════════════════════════════════════════

class TestPeriods:
    def test_special_beats_month(self, two_tier_matrix: PricingMatrix):
        # April month period and Easter (02/04–06/04) both cover 3 April.
        result = calculate_price(two_tier_matrix, 8, 2, dt.date(2025, 4, 3))
        assert result.period_label == "Easter"
        assert result.price_per_person == Decimal("175")

    @pytest.mark.parametrize("day", [2, 6])
    def test_special_range_inclusive(self, two_tier_matrix: PricingMatrix, day: int):
        result = calculate_price(two_tier_matrix, 8, 2, dt.date(2025, 4, day))
        assert result.period_label == "Easter"

    @pytest.mark.parametrize("day", [1, 7])
    def test_month_outside_special(self, two_tier_matrix: PricingMatrix, day: int):
        result = calculate_price(two_tier_matrix, 8, 2, dt.date(2025, 4, day))
        assert result.period == MonthPeriod(month=4)
        assert result.price_per_person == Decimal("100")

    def test_year_specific_range_does_not_recur(self, two_tier_matrix: PricingMatrix):
        result = calculate_price(two_tier_matrix, 8, 2, dt.date(2026, 4, 3))
        assert result.period == MonthPeriod(month=4)

    def test_no_period_for_month(self, easter_matrix: PricingMatrix):
        with pytest.raises(NoMatchingPeriodError) as exc_info:
            calculate_price(easter_matrix, 8, 2, dt.date(2025, 3, 15))
        assert "March" in str(exc_info.value)

    def test_recurring_range_reanchored(self):
        christmas = DatedRangePeriod(
            label="Christmas",
            start_date=dt.date(2000, 12, 20),
            end_date=dt.date(2000, 1, 5),
            recurring=True,
        )
        matrix = PricingMatrix(
            tiers=[GroupSizeTier(label="1-10 People", min_people=1, max_people=10)],
            durations=[DurationOption(nights=2)],
            periods=[MonthPeriod(month=12), MonthPeriod(month=1), christmas],
            cells=[
                PriceCell(tier_index=0, nights=2, period_key="month:12", price=Amount(value=Decimal("50"))),
                PriceCell(tier_index=0, nights=2, period_key="month:01", price=Amount(value=Decimal("40"))),
                PriceCell(tier_index=0, nights=2, period_key=christmas.key, price=Amount(value=Decimal("90"))),
            ],
        )
        assert calculate_price(matrix, 2, 2, dt.date(2031, 12, 24)).period_label == "Christmas"
        assert calculate_price(matrix, 2, 2, dt.date(2032, 1, 3)).period_label == "Christmas"
        assert calculate_price(matrix, 2, 2, dt.date(2031, 12, 10)).period_label == "December"
        assert calculate_price(matrix, 2, 2, dt.date(2032, 1, 6)).period_label == "January"

    def test_first_special_in_list_order_wins(self):
        early = DatedRangePeriod(label="A", start_date=dt.date(2025, 7, 1), end_date=dt.date(2025, 7, 10))
        late = DatedRangePeriod(label="B", start_date=dt.date(2025, 7, 5), end_date=dt.date(2025, 7, 20))
        matrix = PricingMatrix(periods=[MonthPeriod(month=7), late, early])
        assert resolve_period(matrix, dt.date(2025, 7, 7)) == late

    def test_datetime_arrival_accepted(self, easter_matrix: PricingMatrix):
        result = calculate_price(easter_matrix, 8, 2, dt.datetime(2025, 6, 10, 15, 30))
        assert result.total_price == Decimal("1200")


# ═══════════════════════════════════════════════════════════════════════════
# Cells
# ═══════════════════════════════════════════════════════════════════════════

class TestCells:
    def test_missing_cell_is_not_on_request(self, easter_matrix: PricingMatrix):
        # 4 nights is a valid duration but June has no 4-night price.
        with pytest.raises(PriceNotDefinedError) as exc_info:
            calculate_price(easter_matrix, 8, 4, JUNE_10)
        assert exc_info.value.code == "price_not_defined"

    def test_on_request_never_numeric(self):
        matrix = _single_cell_matrix(
            [GroupSizeTier(label="1-4 People", min_people=1, max_people=4)],
            price=OnRequest(),
        )
        result = calculate_price(matrix, 2, 2, JUNE_10)
        assert result.was_on_request
        assert result.price_per_person is None
        assert result.total_price is None

    def test_zero_amount_is_a_price(self):
        matrix = _single_cell_matrix(
            [GroupSizeTier(label="1-4 People", min_people=1, max_people=4)],
            price=Amount(value=Decimal("0")),
        )
        result = calculate_price(matrix, 3, 2, JUNE_10)
        assert not result.was_on_request
        assert result.total_price == Decimal("0")

    def test_decimal_multiplication_exact(self, two_tier_matrix: PricingMatrix):
        result = calculate_price(two_tier_matrix, 13, 3, dt.date(2025, 4, 20))
        assert result.price_per_person == Decimal("125.50")
        assert result.total_price == Decimal("1631.50")

    def test_repeated_calls_identical(self, two_tier_matrix: PricingMatrix):
        first = calculate_price(two_tier_matrix, 13, 3, dt.date(2025, 4, 20))
        for _ in range(50):
            again = calculate_price(two_tier_matrix, 13, 3, dt.date(2025, 4, 20))
            assert again == first
            assert str(again.total_price) == str(first.total_price)


# ═══════════════════════════════════════════════════════════════════════════
# Errors & comparison
# ═══════════════════════════════════════════════════════════════════════════

class TestErrors:
    def test_all_errors_are_calculation_errors(self):
        for cls in (
            NoMatchingTierError, TierConfigurationError, InvalidDurationError,
            NoMatchingPeriodError, PriceNotDefinedError,
        ):
            assert issubclass(cls, CalculationError)

    def test_error_carries_booking(self, easter_matrix: PricingMatrix):
        with pytest.raises(PriceNotDefinedError) as exc_info:
            calculate_price(easter_matrix, 9, 4, JUNE_10)
        err = exc_info.value
        assert err.number_of_people == 9
        assert err.number_of_nights == 4
        assert err.arrival_date == JUNE_10
        payload = err.to_dict()
        assert payload["code"] == "price_not_defined"
        assert payload["arrival_date"] == "2025-06-10"
        assert "9 people, 4 nights" in payload["message"]
        assert "June" in payload["message"]


class TestComparePrice:
    def test_increase(self, easter_matrix: PricingMatrix):
        result = calculate_price(easter_matrix, 8, 2, JUNE_10)
        comparison = compare_price(1000, result)
        assert comparison.new_price == Decimal("1200")
        assert comparison.difference == Decimal("200")
        assert comparison.percentage_change == Decimal("20.00")

    def test_unchanged(self, easter_matrix: PricingMatrix):
        result = calculate_price(easter_matrix, 8, 2, JUNE_10)
        comparison = compare_price("1200.00", result)
        assert comparison.difference == Decimal("0")
        assert comparison.percentage_change == Decimal("0")

    def test_from_zero(self, easter_matrix: PricingMatrix):
        result = calculate_price(easter_matrix, 8, 2, JUNE_10)
        assert compare_price(0, result).percentage_change == Decimal("0")

    def test_on_request(self, easter_matrix: PricingMatrix):
        result = calculate_price(easter_matrix, 8, 2, dt.date(2025, 4, 3))
        comparison = compare_price(900, result)
        assert comparison.was_on_request
        assert comparison.new_price is None
        assert comparison.difference is None
