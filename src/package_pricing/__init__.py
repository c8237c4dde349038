"""Seasonal pricing engine for bundled travel packages."""

from package_pricing.config import DEFAULT_LOCALE, ImportLocale
from package_pricing.engine import (
    CalculationError,
    TableStructureError,
    calculate_price,
    diff_snapshots,
    format_table,
    parse_table,
)
from package_pricing.models import PackageMetadata, PackageSnapshot, PricingMatrix, PriceResult

__version__ = "1.0.0"

__all__ = [
    "DEFAULT_LOCALE",
    "ImportLocale",
    "CalculationError",
    "TableStructureError",
    "calculate_price",
    "diff_snapshots",
    "format_table",
    "parse_table",
    "PackageMetadata",
    "PackageSnapshot",
    "PricingMatrix",
    "PriceResult",
]
