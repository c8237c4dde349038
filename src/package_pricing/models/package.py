"""Package metadata and versioned snapshots."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from package_pricing.models.matrix import PricingMatrix


Currency = Literal["EUR", "GBP", "USD"]
SUPPORTED_CURRENCIES: tuple[str, ...] = ("EUR", "GBP", "USD")

PackageStatus = Literal["active", "inactive"]

InclusionCategory = Literal["transfer", "accommodation", "activity", "service", "other"]

# First matching category wins.
_INCLUSION_KEYWORDS: tuple[tuple[InclusionCategory, tuple[str, ...]], ...] = (
    ("transfer", ("transfer", "airport", "transport")),
    ("accommodation", ("hotel", "accommodation", "room")),
    ("activity", ("activity", "excursion", "tour", "ticket")),
    ("service", ("service", "assistance", "support")),
)


def categorize_inclusion(text: str) -> InclusionCategory:
    """Keyword-based category for an inclusion line."""
    lower = text.lower()
    for category, keywords in _INCLUSION_KEYWORDS:
        if any(word in lower for word in keywords):
            return category
    return "other"


class Inclusion(BaseModel):
    text: str
    category: InclusionCategory = "other"


class PackageMetadata(BaseModel):
    """Descriptive fields carried alongside the matrix (pass-through)."""

    name: str = ""
    destination: str = ""
    resort: str = ""
    currency: Currency = "EUR"
    inclusions: list[str] = Field(default_factory=list)
    accommodation_examples: list[str] = Field(default_factory=list)
    sales_notes: str = ""
    status: PackageStatus = "active"

    def categorized_inclusions(self) -> list[Inclusion]:
        return [Inclusion(text=t, category=categorize_inclusion(t)) for t in self.inclusions]


class PackageSnapshot(BaseModel):
    """Immutable copy of a package at one version, as stored by the audit log."""

    model_config = ConfigDict(frozen=True)

    version: int = Field(ge=1)
    metadata: PackageMetadata = Field(default_factory=PackageMetadata)
    matrix: PricingMatrix = Field(default_factory=PricingMatrix)
