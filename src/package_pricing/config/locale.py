"""Import/export locale — month names, date formats, tokens.

Everything the tabular parser and exporter would otherwise take from ambient
conventions (English month names, ``DD/MM/YYYY`` dates, ``€1,500.00`` style
amounts) lives here so an alternate spreadsheet dialect can be injected.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


ENGLISH_MONTH_NAMES: tuple[str, ...] = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

ENGLISH_MONTH_ABBREVIATIONS: tuple[str, ...] = tuple(name[:3] for name in ENGLISH_MONTH_NAMES)


class ImportLocale(BaseModel):
    """Spreadsheet dialect used when reading and writing price tables."""

    model_config = ConfigDict(frozen=True)

    month_names: tuple[str, ...] = Field(
        default=ENGLISH_MONTH_NAMES,
        description="Full month names, January first. Matched case-insensitively.",
    )
    month_abbreviations: tuple[str, ...] = Field(
        default=ENGLISH_MONTH_ABBREVIATIONS,
        description="Short month names accepted on import (never written on export).",
    )
    date_format: str = Field(
        default="%d/%m/%Y",
        description="strptime/strftime format of year-specific special period dates",
    )
    recurring_date_format: str = Field(
        default="%d/%m",
        description="Format of special period dates without a year (recur every year)",
    )
    nights_label: str = Field(default="Nights", description="Duration word in compound column labels")
    people_labels: tuple[str, ...] = Field(
        default=("People", "Pax"),
        description="Group-size words in tier labels; the first one is used on export.",
    )
    period_column_label: str = Field(default="Period", description="Title of the first table column")
    on_request_label: str = Field(default="ON REQUEST", description="Token written for on-request cells")
    on_request_tokens: tuple[str, ...] = Field(
        default=("ONREQUEST", "REQUEST", "POA"),
        description="Accepted on-request tokens, compared after upper-casing and "
                    "removing whitespace and underscores.",
    )
    thousands_separator: str = Field(default=",")
    decimal_separator: str = Field(default=".")
    currency_symbols: dict[str, str] = Field(
        default_factory=lambda: {"EUR": "€", "GBP": "£", "USD": "$"},
        description="Currency code → symbol. Symbols are stripped from price cells on import.",
    )
    metadata_keys: dict[str, str] = Field(
        default_factory=lambda: {
            "package": "name",
            "name": "name",
            "destination": "destination",
            "resort": "resort",
            "currency": "currency",
        },
        description="Lower-case header-block key → PackageMetadata field",
    )
    section_headers: dict[str, str] = Field(
        default_factory=lambda: {
            "inclusions": "inclusions",
            "accommodation": "accommodation_examples",
            "hotels": "accommodation_examples",
            "sales notes": "sales_notes",
            "notes": "sales_notes",
        },
        description="Lower-case trailing section title (without colon) → PackageMetadata field",
    )
    bullet_prefixes: tuple[str, ...] = Field(default=("-", "•", "*"))

    @field_validator("month_names", "month_abbreviations")
    @classmethod
    def _twelve_months(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if len(value) != 12:
            raise ValueError(f"expected 12 month names, got {len(value)}")
        return value

    @field_validator("people_labels")
    @classmethod
    def _at_least_one_people_label(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("people_labels must not be empty")
        return value

    def month_number(self, text: str) -> int | None:
        """Return 1..12 for a month name or abbreviation, else ``None``."""
        needle = text.strip().casefold()
        if not needle:
            return None
        for index, name in enumerate(self.month_names):
            if name.casefold() == needle:
                return index + 1
        for index, name in enumerate(self.month_abbreviations):
            if name.casefold() == needle:
                return index + 1
        return None

    def month_name(self, month: int) -> str:
        return self.month_names[month - 1]

    def currency_symbol(self, currency: str) -> str:
        return self.currency_symbols.get(currency, "")


DEFAULT_LOCALE = ImportLocale()
