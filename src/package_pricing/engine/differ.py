"""Version diffing for the package audit trail.

``diff_snapshots`` tells the persistence layer which top-level fields an
update touched and what the next version number is.  The pricing matrix is
treated as one opaque field: any cell change marks ``pricing_matrix``.
Storing snapshots and history entries is the caller's job.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from loguru import logger

from package_pricing.models.package import PackageMetadata, PackageSnapshot
from package_pricing.models.results import (
    AuditTrail,
    ChangeType,
    FieldChange,
    VersionDiff,
    VersionHistoryEntry,
)


MATRIX_FIELD = "pricing_matrix"
METADATA_FIELDS: tuple[str, ...] = tuple(PackageMetadata.model_fields)
TRACKED_FIELDS: tuple[str, ...] = (*METADATA_FIELDS, MATRIX_FIELD)
INITIAL_SUMMARY = "Initial version"


def diff_snapshots(
    previous: PackageSnapshot | None,
    current: PackageSnapshot,
    summary: str | None = None,
) -> VersionDiff:
    """Changed fields, summary and next version number for an update.

    ``previous=None`` means ``current`` is the first version.  A caller-supplied
    ``summary`` is passed through unchanged; otherwise one is generated from
    the changed fields.  ``current.version`` is not consulted.
    """
    if previous is None:
        return VersionDiff(
            changed_fields=set(),
            summary=summary if summary is not None else INITIAL_SUMMARY,
            next_version=1,
        )

    old_values = _snapshot_values(previous)
    new_values = _snapshot_values(current)
    changed = {name for name in TRACKED_FIELDS if old_values[name] != new_values[name]}

    if summary is None:
        summary = describe_changes(changed)
    logger.debug(f"Version {previous.version} -> {previous.version + 1}: {sorted(changed)}")
    return VersionDiff(changed_fields=changed, summary=summary, next_version=previous.version + 1)


def describe_changes(changed_fields: set[str] | Sequence[str]) -> str:
    """Fallback summary listing changed fields in a stable order."""
    ordered = [name for name in TRACKED_FIELDS if name in changed_fields]
    ordered += sorted(set(changed_fields) - set(ordered))
    if not ordered:
        return "No changes"
    return "Updated fields: " + ", ".join(ordered)


def compare_snapshots(old: PackageSnapshot, new: PackageSnapshot) -> list[FieldChange]:
    """Old and new values of every changed field (JSON-mode values).

    A field going from empty (``""``, ``[]``) to filled is ``added``, the
    reverse ``removed``; anything else ``modified``.
    """
    old_values = _snapshot_values(old)
    new_values = _snapshot_values(new)
    return [
        FieldChange(
            field=name,
            old_value=old_values[name],
            new_value=new_values[name],
            change_type=_change_type(old_values[name], new_values[name]),
        )
        for name in TRACKED_FIELDS
        if old_values[name] != new_values[name]
    ]


def build_audit_trail(entries: Sequence[VersionHistoryEntry], recent: int = 10) -> AuditTrail:
    """Summarise a package's stored version history.

    Raises
    ------
    ValueError
        ``entries`` is empty.
    """
    if not entries:
        raise ValueError("No history found for package")
    ordered = sorted(entries, key=lambda e: e.version, reverse=True)
    return AuditTrail(
        total_versions=len(ordered),
        first_created=ordered[-1].modified_at,
        last_modified=ordered[0].modified_at,
        unique_modifiers=len({e.modified_by for e in ordered}),
        recent_changes=ordered[:recent],
    )


def _snapshot_values(snapshot: PackageSnapshot) -> dict[str, Any]:
    values = snapshot.metadata.model_dump(mode="json")
    values[MATRIX_FIELD] = snapshot.matrix.canonical()
    return values


def _change_type(old: Any, new: Any) -> ChangeType:
    if old in ("", []):
        return "added"
    if new in ("", []):
        return "removed"
    return "modified"
