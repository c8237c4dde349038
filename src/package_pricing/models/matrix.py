"""Pricing matrix — tiers × durations × periods → price cells.

A package's prices form a grid:

  - **GroupSizeTier**   — a named people range ("6-11 People", "12+ People")
  - **DurationOption**  — a bookable number of nights
  - **PricingPeriod**   — a calendar month, or a dated special range that
    overrides the monthly rate
  - **PriceCell**       — one (tier, nights, period) entry holding either an
    amount per person or an explicit "on request" marker

Cells that are simply absent mean "no price defined", which is not the same
thing as "on request".
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, model_validator

from package_pricing.config.locale import ENGLISH_MONTH_NAMES


# ═══════════════════════════════════════════════════════════════════════════
# Tiers & durations
# ═══════════════════════════════════════════════════════════════════════════

class GroupSizeTier(BaseModel):
    """One group-size column of the matrix.

    ``min_people=None`` marks a tier whose label could not be turned into a
    numeric range; it never matches a booking.  ``max_people=None`` with a
    ``min_people`` set is an open-ended "N+" tier.
    """

    label: str
    min_people: int | None = Field(default=None, ge=1)
    max_people: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def _check_range(self) -> GroupSizeTier:
        if self.min_people is None and self.max_people is not None:
            raise ValueError(f"tier '{self.label}': max_people set without min_people")
        if (
            self.min_people is not None
            and self.max_people is not None
            and self.max_people < self.min_people
        ):
            raise ValueError(
                f"tier '{self.label}': max_people ({self.max_people}) "
                f"< min_people ({self.min_people})"
            )
        return self

    @property
    def has_range(self) -> bool:
        return self.min_people is not None

    @property
    def upper_bound(self) -> int | float:
        """Inclusive upper bound; ``inf`` for open-ended tiers."""
        return float("inf") if self.max_people is None else self.max_people

    def contains(self, people: int) -> bool:
        if self.min_people is None:
            return False
        return self.min_people <= people <= self.upper_bound

    def overlaps(self, other: GroupSizeTier) -> bool:
        if not (self.has_range and other.has_range):
            return False
        return self.min_people <= other.upper_bound and other.min_people <= self.upper_bound


class DurationOption(BaseModel):
    """A bookable length of stay."""

    nights: int = Field(ge=1)


# ═══════════════════════════════════════════════════════════════════════════
# Periods
# ═══════════════════════════════════════════════════════════════════════════

class MonthPeriod(BaseModel):
    """Default rate for a calendar month, every year."""

    kind: Literal["month"] = "month"
    month: int = Field(ge=1, le=12)

    @property
    def key(self) -> str:
        return f"month:{self.month:02d}"

    @property
    def label(self) -> str:
        return ENGLISH_MONTH_NAMES[self.month - 1]

    def contains(self, day: dt.date) -> bool:
        return day.month == self.month


RECURRING_ANCHOR_YEAR = 2000
"""Year stored for recurring special periods (a leap year, so 29 Feb fits)."""


class DatedRangePeriod(BaseModel):
    """Special period overriding the monthly rate inside an inclusive range.

    With ``recurring=True`` the year of the stored dates is meaningless (it is
    normalised to ``RECURRING_ANCHOR_YEAR``): the range is re-anchored to the
    year of the date being tested, and a range whose end falls before its
    start (``20/12 - 05/01``) wraps over New Year.
    """

    kind: Literal["dated-range"] = "dated-range"
    label: str
    start_date: dt.date
    end_date: dt.date
    recurring: bool = False

    @model_validator(mode="after")
    def _check_order(self) -> DatedRangePeriod:
        if self.recurring:
            self.start_date = _anchor(self.start_date, RECURRING_ANCHOR_YEAR)
            self.end_date = _anchor(self.end_date, RECURRING_ANCHOR_YEAR)
        elif self.end_date < self.start_date:
            raise ValueError(
                f"period '{self.label}': end date {self.end_date} is before "
                f"start date {self.start_date}"
            )
        return self

    @property
    def key(self) -> str:
        if self.recurring:
            return f"range:{self.label}:{self.start_date:%m-%d}:{self.end_date:%m-%d}"
        return f"range:{self.label}:{self.start_date.isoformat()}:{self.end_date.isoformat()}"

    def contains(self, day: dt.date) -> bool:
        if not self.recurring:
            return self.start_date <= day <= self.end_date
        start = _anchor(self.start_date, day.year)
        end = _anchor(self.end_date, day.year)
        if start <= end:
            return start <= day <= end
        return day >= start or day <= end


def _anchor(day: dt.date, year: int) -> dt.date:
    """Move ``day`` into ``year``; 29 Feb becomes 28 Feb in common years."""
    try:
        return day.replace(year=year)
    except ValueError:
        return day.replace(year=year, day=28)


PricingPeriod = Annotated[Union[MonthPeriod, DatedRangePeriod], Field(discriminator="kind")]


# ═══════════════════════════════════════════════════════════════════════════
# Cells
# ═══════════════════════════════════════════════════════════════════════════

class Amount(BaseModel):
    """A per-person price."""

    kind: Literal["amount"] = "amount"
    value: Decimal = Field(ge=0)


class OnRequest(BaseModel):
    """Price intentionally left for manual quotation."""

    kind: Literal["on-request"] = "on-request"


CellPrice = Annotated[Union[Amount, OnRequest], Field(discriminator="kind")]

CellKey = tuple[int, int, str]


class PriceCell(BaseModel):
    tier_index: int = Field(ge=0)
    nights: int = Field(ge=1)
    period_key: str
    price: CellPrice

    @property
    def key(self) -> CellKey:
        return (self.tier_index, self.nights, self.period_key)

    @property
    def is_on_request(self) -> bool:
        return isinstance(self.price, OnRequest)


# ═══════════════════════════════════════════════════════════════════════════
# Aggregate
# ═══════════════════════════════════════════════════════════════════════════

class PricingMatrix(BaseModel):
    """The full price grid of one package.

    Built by the tabular parser or directly by an editor; read-only for the
    calculator.  Changes are made by replacing the whole matrix.
    """

    tiers: list[GroupSizeTier] = Field(default_factory=list)
    durations: list[DurationOption] = Field(default_factory=list)
    periods: list[PricingPeriod] = Field(default_factory=list)
    cells: list[PriceCell] = Field(default_factory=list)

    def night_options(self) -> list[int]:
        return [d.nights for d in self.durations]

    def period_by_key(self, key: str) -> MonthPeriod | DatedRangePeriod | None:
        for period in self.periods:
            if period.key == key:
                return period
        return None

    def cell_index(self) -> dict[CellKey, PriceCell]:
        return {cell.key: cell for cell in self.cells}

    def get_cell(self, tier_index: int, nights: int, period_key: str) -> PriceCell | None:
        for cell in self.cells:
            if cell.key == (tier_index, nights, period_key):
                return cell
        return None

    def canonical(self) -> dict[str, Any]:
        """JSON-mode dump with the cell grid in key order.

        Two matrices holding the same cells in a different list order, or the
        same amounts written with a different scale (``150`` / ``150.00``),
        have equal canonical forms.
        """
        data = self.model_dump(mode="json")
        for cell in data["cells"]:
            if cell["price"]["kind"] == "amount":
                cell["price"]["value"] = f"{Decimal(cell['price']['value']).normalize():f}"
        data["cells"] = sorted(
            data["cells"],
            key=lambda c: (c["tier_index"], c["nights"], c["period_key"]),
        )
        return data
