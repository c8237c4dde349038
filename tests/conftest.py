"""Shared test fixtures — the Benidorm sample package."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

import pytest

from package_pricing.models import (
    Amount,
    DatedRangePeriod,
    DurationOption,
    GroupSizeTier,
    MonthPeriod,
    OnRequest,
    PackageMetadata,
    PriceCell,
    PricingMatrix,
)


EASTER_KEY = "range:Easter:2025-04-02:2025-04-06"
JUNE_KEY = "month:06"

BENIDORM_CSV = """\
Package: Benidorm Super Package
Destination: Benidorm
Resort: Costa Blanca
Currency: EUR

Period,6-11 People - 2 Nights,6-11 People - 3 Nights,12+ People - 2 Nights,12+ People - 3 Nights
January,€150.00,€200.00,€120.00,€160.00
June,"€1,150.50",€210,€130,€170
Easter (02/04/2025 - 06/04/2025),ON REQUEST,on request,€180.00,

Inclusions:
- Airport transfers
- 3-star hotel accommodation
- Welcome drink
Accommodation:
- Hotel Benidorm Plaza
- Hotel RH Princesa
Sales Notes:
Perfect for groups looking for sun and fun!
Book early for Easter.
"""


@pytest.fixture
def easter_matrix() -> PricingMatrix:
    """One tier (6-11), nights {2,3,4}; June priced, Easter on request."""
    return PricingMatrix(
        tiers=[GroupSizeTier(label="6-11 People", min_people=6, max_people=11)],
        durations=[DurationOption(nights=n) for n in (2, 3, 4)],
        periods=[
            MonthPeriod(month=6),
            DatedRangePeriod(
                label="Easter",
                start_date=dt.date(2025, 4, 2),
                end_date=dt.date(2025, 4, 6),
            ),
        ],
        cells=[
            PriceCell(tier_index=0, nights=2, period_key=JUNE_KEY, price=Amount(value=Decimal("150"))),
            PriceCell(tier_index=0, nights=3, period_key=JUNE_KEY, price=Amount(value=Decimal("200"))),
            PriceCell(tier_index=0, nights=2, period_key=EASTER_KEY, price=OnRequest()),
        ],
    )


@pytest.fixture
def two_tier_matrix() -> PricingMatrix:
    """Two tiers (6-11, 12+), nights {2,3}, April + June + Easter special."""
    april_key = "month:04"
    return PricingMatrix(
        tiers=[
            GroupSizeTier(label="6-11 People", min_people=6, max_people=11),
            GroupSizeTier(label="12+ People", min_people=12),
        ],
        durations=[DurationOption(nights=2), DurationOption(nights=3)],
        periods=[
            MonthPeriod(month=4),
            MonthPeriod(month=6),
            DatedRangePeriod(
                label="Easter",
                start_date=dt.date(2025, 4, 2),
                end_date=dt.date(2025, 4, 6),
            ),
        ],
        cells=[
            PriceCell(tier_index=0, nights=2, period_key=april_key, price=Amount(value=Decimal("100"))),
            PriceCell(tier_index=0, nights=3, period_key=april_key, price=Amount(value=Decimal("140"))),
            PriceCell(tier_index=1, nights=2, period_key=april_key, price=Amount(value=Decimal("90"))),
            PriceCell(tier_index=1, nights=3, period_key=april_key, price=Amount(value=Decimal("125.50"))),
            PriceCell(tier_index=0, nights=2, period_key=JUNE_KEY, price=Amount(value=Decimal("150"))),
            PriceCell(tier_index=1, nights=2, period_key=JUNE_KEY, price=Amount(value=Decimal("130"))),
            PriceCell(tier_index=0, nights=2, period_key=EASTER_KEY, price=Amount(value=Decimal("175"))),
            PriceCell(tier_index=1, nights=2, period_key=EASTER_KEY, price=OnRequest()),
        ],
    )


@pytest.fixture
def benidorm_metadata() -> PackageMetadata:
    return PackageMetadata(
        name="Benidorm Super Package",
        destination="Benidorm",
        resort="Costa Blanca",
        currency="EUR",
        inclusions=["Airport transfers", "3-star hotel accommodation", "Welcome drink"],
        accommodation_examples=["Hotel Benidorm Plaza", "Hotel RH Princesa"],
        sales_notes="Perfect for groups looking for sun and fun!",
    )


@pytest.fixture
def benidorm_csv() -> str:
    return BENIDORM_CSV
