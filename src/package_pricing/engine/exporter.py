"""Export — PackageMetadata + PricingMatrix → tabular rows.

Writes exactly the layout ``parse_table`` reads, so an exported package can
be edited in a spreadsheet and imported again.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence
from decimal import Decimal

from package_pricing.config.locale import DEFAULT_LOCALE, ImportLocale
from package_pricing.models.matrix import Amount, DatedRangePeriod, MonthPeriod, PriceCell, PricingMatrix
from package_pricing.models.package import PackageMetadata


PACKAGE_DIVIDER = "=" * 80

_TWO_PLACES = Decimal("0.01")


def format_table(
    metadata: PackageMetadata,
    matrix: PricingMatrix,
    locale: ImportLocale | None = None,
) -> list[list[str]]:
    """Rows for one package: header block, price table, trailing sections."""
    locale = locale or DEFAULT_LOCALE
    rows: list[list[str]] = [
        [f"Package: {metadata.name}"],
        [f"Destination: {metadata.destination}"],
        [f"Resort: {metadata.resort}"],
        [f"Currency: {metadata.currency}"],
        [],
    ]

    header = [locale.period_column_label]
    columns: list[tuple[int, int]] = []
    for tier_index, tier in enumerate(matrix.tiers):
        for option in matrix.durations:
            header.append(f"{tier.label} - {option.nights} {locale.nights_label}")
            columns.append((tier_index, option.nights))
    rows.append(header)

    cells = matrix.cell_index()
    symbol = locale.currency_symbol(metadata.currency)
    for period in matrix.periods:
        row = [format_period(period, locale)]
        for tier_index, nights in columns:
            row.append(_format_cell(cells.get((tier_index, nights, period.key)), symbol, locale))
        rows.append(row)

    rows.append([])
    rows.append(["Inclusions:"])
    rows.extend([f"- {item}"] for item in metadata.inclusions)
    rows.append([])
    rows.append(["Accommodation:"])
    rows.extend([f"- {item}"] for item in metadata.accommodation_examples)
    rows.append([])
    rows.append(["Sales Notes:"])
    rows.extend([line] for line in metadata.sales_notes.splitlines())
    return rows


def format_csv(
    metadata: PackageMetadata,
    matrix: PricingMatrix,
    locale: ImportLocale | None = None,
) -> str:
    """``format_table`` rendered as CSV text."""
    return _to_csv(format_table(metadata, matrix, locale))


def format_csv_many(
    packages: Sequence[tuple[PackageMetadata, PricingMatrix]],
    locale: ImportLocale | None = None,
) -> str:
    """Several packages in one CSV document, separated by a divider line."""
    parts = [format_csv(metadata, matrix, locale) for metadata, matrix in packages]
    return f"\n{PACKAGE_DIVIDER}\n\n".join(parts)


def format_period(period: MonthPeriod | DatedRangePeriod, locale: ImportLocale | None = None) -> str:
    """Month name, or ``"<label> (<start> - <end>)"`` for a special period."""
    locale = locale or DEFAULT_LOCALE
    if isinstance(period, MonthPeriod):
        return locale.month_name(period.month)
    date_format = locale.recurring_date_format if period.recurring else locale.date_format
    dates = f"({period.start_date.strftime(date_format)} - {period.end_date.strftime(date_format)})"
    return f"{period.label} {dates}" if period.label else dates


def format_amount(value: Decimal, symbol: str = "", locale: ImportLocale | None = None) -> str:
    """``€150.00`` style; keeps extra decimal places rather than rounding them away.

    No thousands grouping is written; the decimal point follows ``locale``.
    """
    locale = locale or DEFAULT_LOCALE
    if value == value.quantize(_TWO_PLACES):
        text = f"{value.quantize(_TWO_PLACES):f}"
    else:
        text = f"{value.normalize():f}"
    return f"{symbol}{text.replace('.', locale.decimal_separator)}"


def _format_cell(cell: PriceCell | None, symbol: str, locale: ImportLocale) -> str:
    if cell is None:
        return ""
    if isinstance(cell.price, Amount):
        return format_amount(cell.price.value, symbol, locale)
    return locale.on_request_label


def _to_csv(rows: list[list[str]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()
