"""Price calculation — booking request → PriceResult.

Strict sequential resolution; every step either narrows to exactly one
candidate or raises a distinct ``CalculationError``:

  1. tier      — first tier whose people range contains the group size
  2. duration  — nights must be one of the package's duration options
  3. period    — dated special ranges first (list order), then the month
  4. cell      — (tier, nights, period) must exist in the grid
  5. total     — per-person amount × people, in Decimal

Pure and stateless: identical inputs always give identical results.
"""

from __future__ import annotations

import datetime as dt
from decimal import ROUND_HALF_UP, Decimal

from loguru import logger

from package_pricing.config.locale import ENGLISH_MONTH_NAMES
from package_pricing.engine.errors import (
    CalculationError,
    InvalidDurationError,
    NoMatchingPeriodError,
    NoMatchingTierError,
    PriceNotDefinedError,
    TierConfigurationError,
)
from package_pricing.models.matrix import (
    DatedRangePeriod,
    GroupSizeTier,
    MonthPeriod,
    OnRequest,
    PricingMatrix,
)
from package_pricing.models.results import PriceComparison, PriceResult


def calculate_price(
    matrix: PricingMatrix,
    number_of_people: int,
    number_of_nights: int,
    arrival_date: dt.date,
) -> PriceResult:
    """Resolve the price of one booking.

    Parameters
    ----------
    matrix : PricingMatrix
        The package's price grid.
    number_of_people : int
        Group size, ≥ 1.
    number_of_nights : int
        Length of stay, ≥ 1; must be one of the package's duration options.
    arrival_date : datetime.date
        First night of the stay.  A ``datetime`` is reduced to its date.

    Returns
    -------
    PriceResult
        ``was_on_request=True`` (and no prices) when the cell is on request.

    Raises
    ------
    NoMatchingTierError, TierConfigurationError, InvalidDurationError,
    NoMatchingPeriodError, PriceNotDefinedError
        See module docstring.
    ValueError
        ``number_of_people`` or ``number_of_nights`` below 1.
    """
    if number_of_people < 1:
        raise ValueError(f"number_of_people must be >= 1, got {number_of_people}")
    if number_of_nights < 1:
        raise ValueError(f"number_of_nights must be >= 1, got {number_of_nights}")
    if isinstance(arrival_date, dt.datetime):
        arrival_date = arrival_date.date()

    booking = dict(
        number_of_people=number_of_people,
        number_of_nights=number_of_nights,
        arrival_date=arrival_date,
    )
    try:
        tier_index, tier = _resolve_tier(matrix, number_of_people, booking)
        _check_duration(matrix, number_of_nights, booking)
        period = _resolve_period(matrix, arrival_date, booking)
        cell = matrix.get_cell(tier_index, number_of_nights, period.key)
        if cell is None:
            raise PriceNotDefinedError(
                f"No price is defined for '{tier.label}', {number_of_nights} nights "
                f"in {period.label}; please contact the package owner",
                **booking,
            )
    except CalculationError as exc:
        logger.info(f"Price calculation failed [{exc.code}]: {exc}")
        raise

    if isinstance(cell.price, OnRequest):
        logger.debug(f"'{tier.label}' / {number_of_nights} nights / {period.label} is on request")
        return PriceResult(
            tier=tier,
            tier_index=tier_index,
            period=period,
            period_label=period.label,
            number_of_people=number_of_people,
            number_of_nights=number_of_nights,
            was_on_request=True,
        )

    price_per_person = cell.price.value
    total_price = price_per_person * number_of_people
    logger.debug(
        f"'{tier.label}' / {number_of_nights} nights / {period.label}: "
        f"{price_per_person} × {number_of_people} = {total_price}"
    )
    return PriceResult(
        tier=tier,
        tier_index=tier_index,
        period=period,
        period_label=period.label,
        number_of_people=number_of_people,
        number_of_nights=number_of_nights,
        price_per_person=price_per_person,
        total_price=total_price,
    )


def resolve_period(
    matrix: PricingMatrix,
    arrival_date: dt.date,
) -> MonthPeriod | DatedRangePeriod | None:
    """Period that prices an arrival on ``arrival_date``, or ``None``.

    A special (dated-range) period always wins over the month period.
    """
    for period in matrix.periods:
        if isinstance(period, DatedRangePeriod) and period.contains(arrival_date):
            return period
    for period in matrix.periods:
        if isinstance(period, MonthPeriod) and period.contains(arrival_date):
            return period
    return None


def compare_price(previous_total: Decimal | int | float | str, result: PriceResult) -> PriceComparison:
    """Old quoted total vs the freshly calculated ``result``.

    Used when re-pricing an existing quote; the percentage change is rounded
    to two places and is 0 when the old total was 0.
    """
    old = Decimal(str(previous_total))
    if result.was_on_request or result.total_price is None:
        return PriceComparison(
            old_price=old, new_price=None, difference=None,
            percentage_change=None, was_on_request=True,
        )
    difference = result.total_price - old
    percentage = (
        (difference / old * 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        if old > 0 else Decimal("0")
    )
    return PriceComparison(
        old_price=old,
        new_price=result.total_price,
        difference=difference,
        percentage_change=percentage,
    )


# ═══════════════════════════════════════════════════════════════════════════
# Steps
# ═══════════════════════════════════════════════════════════════════════════

def _resolve_tier(
    matrix: PricingMatrix,
    people: int,
    booking: dict,
) -> tuple[int, GroupSizeTier]:
    for index, tier in enumerate(matrix.tiers):
        if tier.contains(people):
            return index, tier

    unconfigured = [tier.label for tier in matrix.tiers if not tier.has_range]
    if unconfigured:
        labels = ", ".join(f"'{label}'" for label in unconfigured)
        raise TierConfigurationError(
            f"No group-size tier covers {people} people, and tier(s) {labels} "
            "have no readable people range; please fix the tier labels",
            tier_labels=unconfigured,
            **booking,
        )
    raise NoMatchingTierError(
        f"This package has no pricing for a group of {people} people",
        **booking,
    )


def _check_duration(matrix: PricingMatrix, nights: int, booking: dict) -> None:
    valid = matrix.night_options()
    if nights not in valid:
        options = ", ".join(str(n) for n in valid) or "none"
        raise InvalidDurationError(
            f"This package cannot be booked for {nights} nights (available: {options})",
            valid_nights=valid,
            **booking,
        )


def _resolve_period(
    matrix: PricingMatrix,
    arrival_date: dt.date,
    booking: dict,
) -> MonthPeriod | DatedRangePeriod:
    period = resolve_period(matrix, arrival_date)
    if period is None:
        raise NoMatchingPeriodError(
            f"This package has no pricing period for arrivals in "
            f"{ENGLISH_MONTH_NAMES[arrival_date.month - 1]}",
            **booking,
        )
    return period
