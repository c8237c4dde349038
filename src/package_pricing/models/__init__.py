"""Data models — pricing matrix, package metadata, result contracts."""

from package_pricing.models.matrix import (
    Amount,
    DatedRangePeriod,
    DurationOption,
    GroupSizeTier,
    MonthPeriod,
    OnRequest,
    PriceCell,
    PricingMatrix,
    PricingPeriod,
)
from package_pricing.models.package import (
    Inclusion,
    PackageMetadata,
    PackageSnapshot,
    categorize_inclusion,
)
from package_pricing.models.results import (
    AuditTrail,
    FieldChange,
    MatrixIssue,
    ParseIssue,
    ParseResult,
    PriceComparison,
    PriceResult,
    VersionDiff,
    VersionHistoryEntry,
)

__all__ = [
    "Amount",
    "DatedRangePeriod",
    "DurationOption",
    "GroupSizeTier",
    "MonthPeriod",
    "OnRequest",
    "PriceCell",
    "PricingMatrix",
    "PricingPeriod",
    "Inclusion",
    "PackageMetadata",
    "PackageSnapshot",
    "categorize_inclusion",
    "AuditTrail",
    "FieldChange",
    "MatrixIssue",
    "ParseIssue",
    "ParseResult",
    "PriceComparison",
    "PriceResult",
    "VersionDiff",
    "VersionHistoryEntry",
]
