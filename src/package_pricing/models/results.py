"""Result types — what the parser, calculator and differ hand back.

All are plain pydantic models so callers can serialise them straight into
an API response or an audit record.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, Field

from package_pricing.models.matrix import GroupSizeTier, PricingMatrix, PricingPeriod
from package_pricing.models.package import PackageMetadata


# ═══════════════════════════════════════════════════════════════════════════
# Import
# ═══════════════════════════════════════════════════════════════════════════

ParseIssueKind = Literal[
    "missing_metadata",
    "invalid_currency",
    "invalid_column",
    "duplicate_column",
    "invalid_period",
    "invalid_date_range",
    "duplicate_period",
    "invalid_price",
    "structure",
    "empty_matrix",
]


class ParseIssue(BaseModel):
    """One problem found while importing a table.

    ``row`` is 1-based, matching what a spreadsheet shows.
    """

    kind: ParseIssueKind
    message: str
    row: int | None = None
    column: str | None = None
    value: str | None = None

    def __str__(self) -> str:
        where = []
        if self.row is not None:
            where.append(f"row {self.row}")
        if self.column:
            where.append(f"column '{self.column}'")
        prefix = f"[{', '.join(where)}] " if where else ""
        return f"{prefix}{self.message}"


class ParseResult(BaseModel):
    """Best-effort import: whatever could be built, plus every issue found."""

    metadata: PackageMetadata
    matrix: PricingMatrix
    issues: list[ParseIssue] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    @property
    def cell_count(self) -> int:
        return len(self.matrix.cells)


class MatrixIssue(BaseModel):
    """A structural defect of a pricing matrix."""

    code: Literal[
        "tier_overlap",
        "tier_order",
        "duplicate_duration",
        "duplicate_period",
        "orphan_cell",
        "duplicate_cell",
    ]
    message: str


# ═══════════════════════════════════════════════════════════════════════════
# Calculation
# ═══════════════════════════════════════════════════════════════════════════

class PriceResult(BaseModel):
    """Resolved price for one booking request.

    When ``was_on_request`` is true both prices are ``None`` and the caller
    must get a human to enter a price.
    """

    tier: GroupSizeTier
    tier_index: int
    period: PricingPeriod
    period_label: str
    number_of_people: int
    number_of_nights: int
    price_per_person: Decimal | None = None
    total_price: Decimal | None = None
    was_on_request: bool = False


class PriceComparison(BaseModel):
    """Old quoted total vs freshly calculated total."""

    old_price: Decimal
    new_price: Decimal | None
    difference: Decimal | None
    percentage_change: Decimal | None
    """Rounded to 2 places; 0 when the old price was 0."""
    was_on_request: bool = False


# ═══════════════════════════════════════════════════════════════════════════
# Versioning
# ═══════════════════════════════════════════════════════════════════════════

class VersionDiff(BaseModel):
    changed_fields: set[str] = Field(default_factory=set)
    summary: str
    next_version: int


ChangeType = Literal["added", "removed", "modified"]


class FieldChange(BaseModel):
    field: str
    old_value: Any = None
    new_value: Any = None
    change_type: ChangeType = "modified"


class VersionHistoryEntry(BaseModel):
    """One stored version as listed by the persistence layer."""

    version: int = Field(ge=1)
    modified_by: str
    modified_at: dt.datetime
    change_description: str | None = None
    changed_fields: list[str] = Field(default_factory=list)


class AuditTrail(BaseModel):
    total_versions: int
    first_created: dt.datetime
    last_modified: dt.datetime
    unique_modifiers: int
    recent_changes: list[VersionHistoryEntry]
