"""Exceptions raised by the pricing engine.

Row/column/cell problems found while importing are *not* exceptions — they
are collected as ``ParseIssue`` records.  Only a table with no recognisable
pricing header raises.
"""

from __future__ import annotations

import datetime as dt


class PricingError(Exception):
    """Base class for all engine errors."""


class TableStructureError(PricingError, ValueError):
    """The input has no recognisable pricing table at all."""


# ═══════════════════════════════════════════════════════════════════════════
# Calculation failures
# ═══════════════════════════════════════════════════════════════════════════

class CalculationError(PricingError):
    """A booking request that the matrix cannot price.

    Each subclass has a stable ``code`` so callers can show a specific
    remedy.  ``str(error)`` is a plain-language sentence.
    """

    code = "calculation_error"

    def __init__(
        self,
        detail: str,
        *,
        number_of_people: int,
        number_of_nights: int,
        arrival_date: dt.date,
    ) -> None:
        self.detail = detail
        self.number_of_people = number_of_people
        self.number_of_nights = number_of_nights
        self.arrival_date = arrival_date
        super().__init__(self.message)

    @property
    def booking(self) -> str:
        return (
            f"{self.number_of_people} people, {self.number_of_nights} nights, "
            f"arriving {self.arrival_date:%d %B %Y}"
        )

    @property
    def message(self) -> str:
        return f"{self.detail} ({self.booking})"

    def to_dict(self) -> dict[str, object]:
        return {
            "code": self.code,
            "message": self.message,
            "number_of_people": self.number_of_people,
            "number_of_nights": self.number_of_nights,
            "arrival_date": self.arrival_date.isoformat(),
        }


class NoMatchingTierError(CalculationError):
    code = "no_matching_tier"


class TierConfigurationError(NoMatchingTierError):
    """No usable tier matched and some tiers have no parseable people range."""

    code = "tier_configuration"

    def __init__(self, detail: str, *, tier_labels: list[str], **booking) -> None:
        self.tier_labels = tier_labels
        super().__init__(detail, **booking)


class InvalidDurationError(CalculationError):
    code = "invalid_duration"

    def __init__(self, detail: str, *, valid_nights: list[int], **booking) -> None:
        self.valid_nights = valid_nights
        super().__init__(detail, **booking)


class NoMatchingPeriodError(CalculationError):
    code = "no_matching_period"


class PriceNotDefinedError(CalculationError):
    """The matrix has a gap at the resolved cell (not the same as on-request)."""

    code = "price_not_defined"
