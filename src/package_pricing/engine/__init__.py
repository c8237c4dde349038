"""Engine — import parser, price calculator, version differ, exporter."""

from package_pricing.engine.calculator import calculate_price, compare_price, resolve_period
from package_pricing.engine.differ import build_audit_trail, compare_snapshots, diff_snapshots
from package_pricing.engine.errors import (
    CalculationError,
    InvalidDurationError,
    NoMatchingPeriodError,
    NoMatchingTierError,
    PriceNotDefinedError,
    PricingError,
    TableStructureError,
    TierConfigurationError,
)
from package_pricing.engine.exporter import format_csv, format_csv_many, format_table
from package_pricing.engine.parser import parse_csv_text, parse_table
from package_pricing.engine.tabular import read_rows
from package_pricing.engine.validation import validate_matrix

__all__ = [
    # Import / export
    "parse_table",
    "parse_csv_text",
    "read_rows",
    "format_table",
    "format_csv",
    "format_csv_many",
    "validate_matrix",
    # Calculation
    "calculate_price",
    "compare_price",
    "resolve_period",
    # Versioning
    "diff_snapshots",
    "compare_snapshots",
    "build_audit_trail",
    # Errors
    "PricingError",
    "TableStructureError",
    "CalculationError",
    "NoMatchingTierError",
    "TierConfigurationError",
    "InvalidDurationError",
    "NoMatchingPeriodError",
    "PriceNotDefinedError",
]
