"""Configuration models — import/export locale."""

from package_pricing.config.locale import (
    DEFAULT_LOCALE,
    ENGLISH_MONTH_ABBREVIATIONS,
    ENGLISH_MONTH_NAMES,
    ImportLocale,
)

__all__ = [
    "DEFAULT_LOCALE",
    "ENGLISH_MONTH_ABBREVIATIONS",
    "ENGLISH_MONTH_NAMES",
    "ImportLocale",
]
