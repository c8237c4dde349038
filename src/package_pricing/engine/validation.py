"""Structural integrity checks for a pricing matrix.

Field-level rules (people ≥ 1, max ≥ min, month 1..12, special periods not
ending before they start) are enforced by the models themselves.  The checks
here span several entries:

  - tiers with known ranges must not overlap and must ascend by min_people
  - durations must be unique
  - period keys must be unique
  - every cell must reference an existing tier, duration and period,
    and no two cells may share a key

Tiers whose label gave no people range are not reported; they only matter
when a booking would need them (see the calculator).
"""

from __future__ import annotations

from package_pricing.models.matrix import PricingMatrix
from package_pricing.models.results import MatrixIssue


def validate_matrix(matrix: PricingMatrix) -> list[MatrixIssue]:
    """Return every structural defect found in ``matrix`` (empty if sound)."""
    issues: list[MatrixIssue] = []
    issues.extend(_check_tiers(matrix))
    issues.extend(_check_durations(matrix))
    issues.extend(_check_periods(matrix))
    issues.extend(_check_cells(matrix))
    return issues


def _check_tiers(matrix: PricingMatrix) -> list[MatrixIssue]:
    issues: list[MatrixIssue] = []
    ranged = [tier for tier in matrix.tiers if tier.has_range]
    for position, tier in enumerate(ranged):
        for other in ranged[position + 1:]:
            if tier.overlaps(other):
                issues.append(MatrixIssue(
                    code="tier_overlap",
                    message=f"Tiers '{tier.label}' and '{other.label}' cover overlapping group sizes",
                ))
        if position > 0 and tier.min_people < ranged[position - 1].min_people:
            issues.append(MatrixIssue(
                code="tier_order",
                message=f"Tier '{tier.label}' is listed after '{ranged[position - 1].label}' "
                        "but starts at a smaller group size",
            ))
    return issues


def _check_durations(matrix: PricingMatrix) -> list[MatrixIssue]:
    seen: set[int] = set()
    issues: list[MatrixIssue] = []
    for option in matrix.durations:
        if option.nights in seen:
            issues.append(MatrixIssue(
                code="duplicate_duration",
                message=f"Duration of {option.nights} nights is listed more than once",
            ))
        seen.add(option.nights)
    return issues


def _check_periods(matrix: PricingMatrix) -> list[MatrixIssue]:
    seen: set[str] = set()
    issues: list[MatrixIssue] = []
    for period in matrix.periods:
        if period.key in seen:
            issues.append(MatrixIssue(
                code="duplicate_period",
                message=f"Period '{period.label}' is defined more than once",
            ))
        seen.add(period.key)
    return issues


def _check_cells(matrix: PricingMatrix) -> list[MatrixIssue]:
    nights = set(matrix.night_options())
    period_keys = {p.key for p in matrix.periods}
    seen: set[tuple[int, int, str]] = set()
    issues: list[MatrixIssue] = []
    for cell in matrix.cells:
        if (
            cell.tier_index >= len(matrix.tiers)
            or cell.nights not in nights
            or cell.period_key not in period_keys
        ):
            issues.append(MatrixIssue(
                code="orphan_cell",
                message=f"Price cell (tier {cell.tier_index}, {cell.nights} nights, "
                        f"period '{cell.period_key}') does not match any tier/duration/period",
            ))
        if cell.key in seen:
            issues.append(MatrixIssue(
                code="duplicate_cell",
                message=f"Price cell (tier {cell.tier_index}, {cell.nights} nights, "
                        f"period '{cell.period_key}') is defined more than once",
            ))
        seen.add(cell.key)
    return issues
