"""FastAPI server — stateless HTTP wrapper around the pricing engine.

Run with:
    uvicorn package_pricing.api.server:app --reload --port 8000

Or:
    python -m package_pricing.api.server

Endpoints:
    GET  /health     — liveness probe
    GET  /locale     — default import/export locale
    POST /parse      — spreadsheet rows or CSV text → metadata + matrix + issues
    POST /calculate  — matrix + booking parameters → price
    POST /diff       — previous/current snapshots → changed fields + next version
    POST /export     — metadata + matrix → CSV text

Nothing is stored: every request carries the data it needs.
"""

from __future__ import annotations

import datetime as dt
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, Field, model_validator

from package_pricing import __version__
from package_pricing.config.locale import DEFAULT_LOCALE, ImportLocale
from package_pricing.engine.calculator import calculate_price
from package_pricing.engine.differ import diff_snapshots
from package_pricing.engine.errors import CalculationError, TableStructureError
from package_pricing.engine.exporter import format_csv
from package_pricing.engine.parser import parse_csv_text, parse_table
from package_pricing.logger import setup_logger
from package_pricing.models.matrix import PricingMatrix
from package_pricing.models.package import PackageMetadata, PackageSnapshot
from package_pricing.models.results import ParseIssue, PriceResult, VersionDiff


# ═══════════════════════════════════════════════════════════════════════════
# App setup
# ═══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure log sinks when the server starts (not on import)."""
    setup_logger(level=os.getenv("PACKAGE_PRICING_LOG_LEVEL", "INFO"))
    yield


app = FastAPI(
    title="Package Pricing Engine API",
    version=__version__,
    description=(
        "Import seasonal price tables for travel packages, price bookings "
        "against them, diff package versions and export tables back to CSV."
    ),
    lifespan=lifespan,
)


@app.exception_handler(CalculationError)
async def calculation_error_handler(request: Request, exc: CalculationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"error": exc.to_dict()})


# ═══════════════════════════════════════════════════════════════════════════
# Request / response models
# ═══════════════════════════════════════════════════════════════════════════

class ParseRequest(BaseModel):
    """Either ``rows`` (already tokenised) or ``csv_text``."""
    rows: list[list[str]] | None = Field(default=None, description="Table rows of string cells")
    csv_text: str | None = Field(default=None, description="Raw CSV document")
    locale: ImportLocale | None = Field(default=None, description="Defaults to English, DD/MM/YYYY")

    @model_validator(mode="after")
    def _one_source(self) -> ParseRequest:
        if (self.rows is None) == (self.csv_text is None):
            raise ValueError("provide exactly one of 'rows' or 'csv_text'")
        return self


class ParseResponse(BaseModel):
    metadata: PackageMetadata
    matrix: PricingMatrix
    issues: list[ParseIssue]
    ok: bool
    cell_count: int


class CalculateRequest(BaseModel):
    matrix: PricingMatrix
    number_of_people: int = Field(ge=1)
    number_of_nights: int = Field(ge=1)
    arrival_date: dt.date


class DiffRequest(BaseModel):
    previous: PackageSnapshot | None = None
    current: PackageSnapshot
    summary: str | None = None


class ExportRequest(BaseModel):
    metadata: PackageMetadata
    matrix: PricingMatrix
    locale: ImportLocale | None = None


class ExportResponse(BaseModel):
    csv_text: str


# ═══════════════════════════════════════════════════════════════════════════
# Endpoints
# ═══════════════════════════════════════════════════════════════════════════

@app.get("/health")
def health_check():
    """Health check for deployment platforms."""
    return {"status": "ok"}


@app.get("/locale", response_model=ImportLocale)
def get_locale():
    """The default locale. Post a modified copy with /parse or /export."""
    return DEFAULT_LOCALE


@app.post("/parse", response_model=ParseResponse)
def parse(req: ParseRequest):
    """Import a price table. Row-level problems come back as ``issues``."""
    try:
        if req.rows is not None:
            result = parse_table(req.rows, req.locale)
        else:
            result = parse_csv_text(req.csv_text, req.locale)
    except TableStructureError as exc:
        logger.warning(f"Rejected import: {exc}")
        raise HTTPException(status_code=422, detail={"code": "table_structure", "message": str(exc)})
    return ParseResponse(
        metadata=result.metadata,
        matrix=result.matrix,
        issues=result.issues,
        ok=result.ok,
        cell_count=result.cell_count,
    )


@app.post("/calculate", response_model=PriceResult)
def calculate(req: CalculateRequest):
    """Price a booking. Unpriceable requests return 422 with an error code."""
    return calculate_price(req.matrix, req.number_of_people, req.number_of_nights, req.arrival_date)


@app.post("/diff", response_model=VersionDiff)
def diff(req: DiffRequest):
    """Changed fields and next version number for a package update."""
    return diff_snapshots(req.previous, req.current, req.summary)


@app.post("/export", response_model=ExportResponse)
def export(req: ExportRequest):
    """Render a package as a CSV document ``/parse`` can read back."""
    return ExportResponse(csv_text=format_csv(req.metadata, req.matrix, req.locale))


# ═══════════════════════════════════════════════════════════════════════════
# CLI entry point
# ═══════════════════════════════════════════════════════════════════════════

def main():
    """Run the API server."""
    import uvicorn
    uvicorn.run(
        "package_pricing.api.server:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )


if __name__ == "__main__":
    main()
