"""Tabular import — spreadsheet rows → PackageMetadata + PricingMatrix.

Expected layout (cells shown comma-separated):

    Package: Benidorm Super Package
    Destination: Benidorm
    Resort: Costa Blanca
    Currency: EUR

    Period,6-11 People - 2 Nights,6-11 People - 3 Nights,12+ People - 2 Nights
    January,€150.00,€200.00,€120.00
    Easter (02/04/2025 - 06/04/2025),ON REQUEST,ON REQUEST,€180.00

    Inclusions:
    - Airport transfers
    Accommodation:
    - Hotel Benidorm Plaza
    Sales Notes:
    Perfect for groups looking for sun and fun!

Steps:
  1. locate the table header (first row with a "<tier> - <n> Nights" cell)
  2. read ``Key: Value`` lines above it into metadata
  3. split header columns into (tier label, nights)
  4. read one pricing period per row until the first section title
  5. read the trailing Inclusions / Accommodation / Sales Notes sections

Problems with single rows, columns or cells are collected as ``ParseIssue``
and the offending piece is left out; parsing always continues.  Only a table
with no header row raises ``TableStructureError``.
"""

from __future__ import annotations

import csv
import datetime as dt
import io
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from loguru import logger
from pydantic import ValidationError

from package_pricing.config.locale import DEFAULT_LOCALE, ImportLocale
from package_pricing.engine.errors import TableStructureError
from package_pricing.engine.validation import validate_matrix
from package_pricing.models.matrix import (
    Amount,
    DatedRangePeriod,
    DurationOption,
    GroupSizeTier,
    MonthPeriod,
    OnRequest,
    PriceCell,
    PricingMatrix,
    RECURRING_ANCHOR_YEAR,
)
from package_pricing.models.package import SUPPORTED_CURRENCIES, PackageMetadata
from package_pricing.models.results import ParseIssue, ParseResult


_DASH = "[-–—]"
_REQUIRED_METADATA = ("name", "destination", "resort", "currency")


@dataclass(frozen=True)
class _Column:
    index: int
    label: str
    tier_index: int
    nights: int


class _Patterns:
    """Regexes compiled for one locale."""

    def __init__(self, locale: ImportLocale) -> None:
        nights_word = re.escape(locale.nights_label.rstrip("sS"))
        people = "|".join(re.escape(word) for word in locale.people_labels)
        self.compound = re.compile(
            rf"^(?P<tier>.+?)\s*{_DASH}\s*(?P<nights>\d+)\s*{nights_word}s?\s*$",
            re.IGNORECASE,
        )
        self.closed_tier = re.compile(
            rf"^\s*(?P<min>\d+)\s*{_DASH}\s*(?P<max>\d+)\s*(?:{people})\s*$",
            re.IGNORECASE,
        )
        self.open_tier = re.compile(
            rf"^\s*(?P<min>\d+)\s*\+\s*(?:{people})\s*$",
            re.IGNORECASE,
        )
        self.dated_range = re.compile(r"^(?P<label>.*?)\s*\((?P<inner>[^()]*)\)\s*$")
        self.dash = re.compile(_DASH)


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def parse_table(
    rows: Iterable[Sequence[object]],
    locale: ImportLocale | None = None,
) -> ParseResult:
    """Rebuild package metadata and pricing matrix from tabular rows.

    Parameters
    ----------
    rows : Iterable[Sequence[object]]
        Rows of cells, already tokenised (CSV reader, spreadsheet export).
        Non-string cells are converted with ``str``; ``None`` is empty.
    locale : ImportLocale | None
        Month names, date formats and tokens.  Defaults to English / DD/MM/YYYY.

    Returns
    -------
    ParseResult
        Best-effort metadata and matrix plus every issue found.

    Raises
    ------
    TableStructureError
        No row looks like a pricing table header.
    """
    locale = locale or DEFAULT_LOCALE
    patterns = _Patterns(locale)
    table = [_normalise_row(row) for row in rows]

    header_index = _find_table_header(table, patterns)
    if header_index is None:
        raise TableStructureError(
            "No pricing table found: expected a header row with columns like "
            f"'6-11 People - 2 {locale.nights_label}'"
        )
    table_end = _find_first_section(table, header_index + 1, locale)

    issues: list[ParseIssue] = []
    header_values = _parse_header_block(table[:header_index], locale, issues)

    tiers, durations, columns = _parse_columns(table[header_index], header_index + 1, patterns, issues)

    periods, cells = _parse_price_rows(
        table, header_index + 1, table_end, columns, patterns, locale, issues,
    )

    sections = _parse_sections(table, table_end, locale)

    currency = header_values.get("currency")
    if currency is None:
        currency = detect_currency(table[header_index + 1:table_end], locale)

    metadata = PackageMetadata(
        name=header_values.get("name", ""),
        destination=header_values.get("destination", ""),
        resort=header_values.get("resort", ""),
        currency=currency,
        **sections,
    )
    matrix = PricingMatrix(tiers=tiers, durations=durations, periods=periods, cells=cells)

    for defect in validate_matrix(matrix):
        issues.append(ParseIssue(kind="structure", message=defect.message))

    if not matrix.cells:
        issues.append(ParseIssue(
            kind="empty_matrix",
            message="No price cells could be read from the pricing table",
        ))

    for issue in issues:
        logger.debug(f"Import issue: {issue}")
    logger.info(
        "Parsed pricing table: {tiers} tiers, {durations} durations, "
        "{periods} periods, {cells} cells, {issues} issues",
        tiers=len(tiers), durations=len(durations), periods=len(periods),
        cells=len(cells), issues=len(issues),
    )
    return ParseResult(metadata=metadata, matrix=matrix, issues=issues)


def parse_csv_text(text: str, locale: ImportLocale | None = None) -> ParseResult:
    """Tokenise CSV text with the ``csv`` module, then ``parse_table``."""
    return parse_table(csv.reader(io.StringIO(text)), locale)


def detect_currency(rows: Iterable[Sequence[str]], locale: ImportLocale | None = None) -> str:
    """Currency whose symbol first appears in ``rows``; EUR when none does."""
    locale = locale or DEFAULT_LOCALE
    for row in rows:
        for cell in row:
            for code, symbol in locale.currency_symbols.items():
                if symbol and symbol in cell:
                    return code
    return "EUR"


# ═══════════════════════════════════════════════════════════════════════════
# Layout detection
# ═══════════════════════════════════════════════════════════════════════════

def _normalise_row(row: Sequence[object]) -> list[str]:
    return ["" if cell is None else str(cell) for cell in row]


def _line(row: Sequence[str]) -> str:
    """A row read as one line of text (cells re-joined, trailing blanks dropped)."""
    return ",".join(row).strip().rstrip(",").strip()


def _find_table_header(table: list[list[str]], patterns: _Patterns) -> int | None:
    for index, row in enumerate(table):
        if any(patterns.compound.match(cell.strip()) for cell in row[1:]):
            return index
    return None


def _section_title(line: str, locale: ImportLocale) -> tuple[str, str] | None:
    """Return (metadata field, text after the colon) for a section title line."""
    lower = line.lower()
    for title, field in locale.section_headers.items():
        if lower.startswith(f"{title}:"):
            return field, line[len(title) + 1:].strip(" ,")
    return None


def _find_first_section(table: list[list[str]], start: int, locale: ImportLocale) -> int:
    for index in range(start, len(table)):
        if _section_title(_line(table[index]), locale):
            return index
    return len(table)


# ═══════════════════════════════════════════════════════════════════════════
# Header block
# ═══════════════════════════════════════════════════════════════════════════

def _parse_header_block(
    rows: list[list[str]],
    locale: ImportLocale,
    issues: list[ParseIssue],
) -> dict[str, str]:
    values: dict[str, str] = {}
    for offset, row in enumerate(rows):
        key, sep, value = _line(row).partition(":")
        if not sep:
            continue
        field = locale.metadata_keys.get(key.strip().lower())
        if field is None or field in values:
            continue
        value = value.strip(" ,")
        if field == "currency":
            code = value.upper()
            if code not in SUPPORTED_CURRENCIES:
                issues.append(ParseIssue(
                    kind="invalid_currency",
                    message=f"Unsupported currency '{value}' "
                            f"(expected one of {', '.join(SUPPORTED_CURRENCIES)})",
                    row=offset + 1,
                    value=value,
                ))
                continue
            value = code
        values[field] = value

    for field in _REQUIRED_METADATA:
        if field not in values and not _reported_currency(field, issues):
            issues.append(ParseIssue(
                kind="missing_metadata",
                message=f"Missing required header field '{field}'",
                value=field,
            ))
    return values


def _reported_currency(field: str, issues: list[ParseIssue]) -> bool:
    return field == "currency" and any(i.kind == "invalid_currency" for i in issues)


# ═══════════════════════════════════════════════════════════════════════════
# Table header → tiers, durations, columns
# ═══════════════════════════════════════════════════════════════════════════

def _parse_columns(
    header: list[str],
    row_number: int,
    patterns: _Patterns,
    issues: list[ParseIssue],
) -> tuple[list[GroupSizeTier], list[DurationOption], list[_Column]]:
    tiers: list[GroupSizeTier] = []
    tier_positions: dict[str, int] = {}
    nights_seen: list[int] = []
    columns: list[_Column] = []
    seen_pairs: set[tuple[int, int]] = set()

    for index in range(1, len(header)):
        label = header[index].strip()
        if not label:
            continue
        match = patterns.compound.match(label)
        nights = int(match.group("nights")) if match else 0
        if not match or nights < 1:
            issues.append(ParseIssue(
                kind="invalid_column",
                message=f"Column label '{label}' is not of the form '<tier> - <n> Nights'; column skipped",
                row=row_number,
                column=label,
            ))
            continue

        tier_label = " ".join(match.group("tier").split())
        if tier_label not in tier_positions:
            tier_positions[tier_label] = len(tiers)
            tiers.append(tier_from_label(tier_label, patterns))
        tier_index = tier_positions[tier_label]

        if (tier_index, nights) in seen_pairs:
            issues.append(ParseIssue(
                kind="duplicate_column",
                message=f"Column '{label}' repeats an earlier tier/nights column; column skipped",
                row=row_number,
                column=label,
            ))
            continue
        seen_pairs.add((tier_index, nights))
        if nights not in nights_seen:
            nights_seen.append(nights)
        columns.append(_Column(index=index, label=label, tier_index=tier_index, nights=nights))

    durations = [DurationOption(nights=n) for n in nights_seen]
    return tiers, durations, columns


def tier_from_label(label: str, patterns: _Patterns | None = None) -> GroupSizeTier:
    """Derive a tier's people range from its label.

    ``"6-11 People"`` → 6..11, ``"12+ People"`` → 12..∞.  Anything else
    (including an inverted range) gives a tier with an unknown range.
    """
    patterns = patterns or _Patterns(DEFAULT_LOCALE)
    closed = patterns.closed_tier.match(label)
    if closed:
        low, high = int(closed.group("min")), int(closed.group("max"))
        if 1 <= low <= high:
            return GroupSizeTier(label=label, min_people=low, max_people=high)
        return GroupSizeTier(label=label)
    open_ended = patterns.open_tier.match(label)
    if open_ended and int(open_ended.group("min")) >= 1:
        return GroupSizeTier(label=label, min_people=int(open_ended.group("min")))
    return GroupSizeTier(label=label)


# ═══════════════════════════════════════════════════════════════════════════
# Price rows
# ═══════════════════════════════════════════════════════════════════════════

def _parse_price_rows(
    table: list[list[str]],
    start: int,
    end: int,
    columns: list[_Column],
    patterns: _Patterns,
    locale: ImportLocale,
    issues: list[ParseIssue],
) -> tuple[list[MonthPeriod | DatedRangePeriod], list[PriceCell]]:
    periods: list[MonthPeriod | DatedRangePeriod] = []
    period_keys: set[str] = set()
    cells: list[PriceCell] = []

    for index in range(start, end):
        row = [cell.strip() for cell in table[index]]
        row_number = index + 1
        if not any(row):
            continue

        period = _parse_period(row[0], row_number, patterns, locale, issues)
        if period is None:
            continue
        if period.key in period_keys:
            issues.append(ParseIssue(
                kind="duplicate_period",
                message=f"Period '{row[0]}' appears more than once; row skipped",
                row=row_number,
                value=row[0],
            ))
            continue
        period_keys.add(period.key)
        periods.append(period)

        for column in columns:
            text = row[column.index] if column.index < len(row) else ""
            try:
                price = parse_price(text, locale)
            except ValueError as exc:
                issues.append(ParseIssue(
                    kind="invalid_price",
                    message=str(exc),
                    row=row_number,
                    column=column.label,
                    value=text,
                ))
                continue
            if price is None:
                continue
            cells.append(PriceCell(
                tier_index=column.tier_index,
                nights=column.nights,
                period_key=period.key,
                price=price,
            ))

    return periods, cells


def _parse_period(
    text: str,
    row_number: int,
    patterns: _Patterns,
    locale: ImportLocale,
    issues: list[ParseIssue],
) -> MonthPeriod | DatedRangePeriod | None:
    month = locale.month_number(text)
    if month is not None:
        return MonthPeriod(month=month)

    match = patterns.dated_range.match(text)
    if not match:
        issues.append(ParseIssue(
            kind="invalid_period",
            message=f"'{text}' is neither a month name nor '<label> (<start> - <end>)'; row skipped",
            row=row_number,
            value=text,
        ))
        return None

    inner = match.group("inner")
    dates = _split_date_range(inner, patterns, locale)
    if dates is None:
        issues.append(ParseIssue(
            kind="invalid_date_range",
            message=f"Could not read a date range from '({inner})' "
                    f"(expected {locale.date_format} - {locale.date_format}); row skipped",
            row=row_number,
            value=text,
        ))
        return None

    start, end, recurring = dates
    label = match.group("label").strip()
    try:
        return DatedRangePeriod(label=label, start_date=start, end_date=end, recurring=recurring)
    except ValidationError:
        issues.append(ParseIssue(
            kind="invalid_date_range",
            message=f"Special period '{label}' ends before it starts; row skipped",
            row=row_number,
            value=text,
        ))
        return None


def _split_date_range(
    inner: str,
    patterns: _Patterns,
    locale: ImportLocale,
) -> tuple[dt.date, dt.date, bool] | None:
    """Try every dash in ``inner`` as the start/end separator."""
    for dash in patterns.dash.finditer(inner):
        left = inner[:dash.start()].strip()
        right = inner[dash.end():].strip()
        start, end = _parse_date(left, locale), _parse_date(right, locale)
        if start is not None and end is not None:
            return start, end, False
        start, end = _parse_recurring_date(left, locale), _parse_recurring_date(right, locale)
        if start is not None and end is not None:
            return start, end, True
    return None


def _parse_date(text: str, locale: ImportLocale) -> dt.date | None:
    try:
        return dt.datetime.strptime(text, locale.date_format).date()
    except ValueError:
        return None


def _parse_recurring_date(text: str, locale: ImportLocale) -> dt.date | None:
    # Parse with an explicit year so 29/02 is valid.
    try:
        parsed = dt.datetime.strptime(f"{text} {RECURRING_ANCHOR_YEAR}", f"{locale.recurring_date_format} %Y")
    except ValueError:
        return None
    return parsed.date()


# ═══════════════════════════════════════════════════════════════════════════
# Trailing sections
# ═══════════════════════════════════════════════════════════════════════════

def _parse_sections(
    table: list[list[str]],
    start: int,
    locale: ImportLocale,
) -> dict[str, list[str] | str]:
    """Inclusions / accommodation bullet lists and the sales-notes blob.

    Sales notes are free text: every line after their title belongs to them,
    including lines that look like another section title.
    """
    lines: dict[str, list[str]] = {}
    current: str | None = None
    for row in table[start:]:
        if current == "sales_notes":
            lines[current].append(_note_line(row))
            continue
        line = _line(row)
        title = _section_title(line, locale)
        if title is not None:
            current, rest = title
            lines.setdefault(current, [])
            if rest:
                lines[current].append(rest)
            continue
        if current is not None:
            lines[current].append(line)

    sections: dict[str, list[str] | str] = {}
    for field, content in lines.items():
        if field == "sales_notes":
            sections[field] = "\n".join(content).strip()
        else:
            items = [_strip_bullet(text, locale) for text in content]
            sections[field] = [item for item in items if item]
    return sections


def _note_line(row: Sequence[str]) -> str:
    """A sales-notes row as written: only trailing empty cells are dropped."""
    cells = list(row)
    while cells and cells[-1] == "":
        cells.pop()
    return ",".join(cells)


def _strip_bullet(text: str, locale: ImportLocale) -> str:
    text = text.strip()
    for prefix in locale.bullet_prefixes:
        if text.startswith(prefix):
            return text[len(prefix):].strip()
    return text


# ═══════════════════════════════════════════════════════════════════════════
# Cells
# ═══════════════════════════════════════════════════════════════════════════

def parse_price(text: str, locale: ImportLocale | None = None) -> Amount | OnRequest | None:
    """Read one data cell.

    Returns ``None`` for an empty cell (no price defined), ``OnRequest`` for
    an on-request token, otherwise an ``Amount``.  Raises ``ValueError`` for
    anything unreadable.
    """
    locale = locale or DEFAULT_LOCALE
    token = re.sub(r"[\s_]", "", text).upper()
    if not token:
        return None
    accepted = {re.sub(r"[\s_]", "", locale.on_request_label).upper(), *locale.on_request_tokens}
    if token in accepted:
        return OnRequest()

    cleaned = text
    for code, symbol in locale.currency_symbols.items():
        if symbol:
            cleaned = cleaned.replace(symbol, "")
        cleaned = re.sub(rf"(?i)\b{re.escape(code)}\b", "", cleaned)
    cleaned = re.sub(r"\s", "", cleaned)
    if locale.thousands_separator:
        cleaned = cleaned.replace(locale.thousands_separator, "")
    if locale.decimal_separator != ".":
        cleaned = cleaned.replace(locale.decimal_separator, ".")

    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Unreadable price '{text}'") from None
    if not value.is_finite():
        raise ValueError(f"Unreadable price '{text}'")
    if value < 0:
        raise ValueError(f"Negative price '{text}'")
    return Amount(value=value)
