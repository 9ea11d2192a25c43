"""Configuration helpers and Settings container.

This module provides the `PipelineLimits` bounds applied at every stage, the
`Source` descriptors for the three CSV extracts, and `get_settings` which
reads resource locations and overrides from the environment.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import os

from dotenv import load_dotenv

# Explicitly load .env from project root
PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(PROJECT_ROOT / ".env")

COMPANY_COLUMNS = ("Symbol", "CompanyName", "CIK")
FILING_COLUMNS = ("id", "FormName", "CIK", "ValueDate", "FilingDate", "FormURL")
METRIC_COLUMNS = (
    "Form_id",
    "TextListLen",
    "TableIndex",
    "SumDivider",
    "JsonTable",
    "ValueColumn",
    "CCP",
    "LTD",
)
DEFAULT_USER_AGENT = "edgar-metrics/0.1"


@dataclass(frozen=True)
class PipelineLimits:
    """Bounds enforced by the loader, sanitizers, join, filter and axis.

    Attributes:
        max_bytes: Ceiling on declared and actual CSV payload size.
        max_rows: Rows kept per CSV; also the upper bound for filing ids.
        timeout_seconds: Deadline for a single resource transfer.
        trusted_domain: Registry domain filing URLs must belong to.
        min_year: Earliest accepted calendar year.
        max_year: Latest accepted calendar year.
        max_cik: Largest accepted CIK.
        max_metric_value: Upper sanity bound for CCP/LTD in the join.
        max_companies: Sanitized company records allowed per run.
        max_filings: Sanitized filing records allowed per run.
        max_metrics: Sanitized metric records allowed per run.
        max_selected_companies: Companies a single filter call may name.
        max_results: Soft cap on records returned by a filter call.
        max_year_span: Widest quarter axis, in years.
    """
    max_bytes: int = 10 * 1024 * 1024
    max_rows: int = 10_000
    timeout_seconds: float = 30.0
    trusted_domain: str = "sec.gov"
    min_year: int = 1900
    max_year: int = 2030
    max_cik: int = 9_999_999_999
    max_metric_value: float = 1e12
    max_companies: int = 1_000
    max_filings: int = 5_000
    max_metrics: int = 10_000
    max_selected_companies: int = 50
    max_results: int = 5_000
    max_year_span: int = 50


@dataclass(frozen=True)
class Source:
    """One tabular input: a display name, where to read it, and its columns."""
    name: str
    resource: str
    columns: tuple[str, ...]


@dataclass(frozen=True)
class Settings:
    """Container for pipeline configuration read from the environment.

    Attributes:
        companies: Company extract (`Stocks.csv`).
        filings: Filing extract (`Forms.csv`).
        metrics: Metric extract (`Tasks.csv`).
        limits: Bounds applied throughout the run.
        user_agent: User-Agent header sent on HTTP fetches.
    """
    companies: Source
    filings: Source
    metrics: Source
    limits: PipelineLimits = field(default_factory=PipelineLimits)
    user_agent: str = DEFAULT_USER_AGENT

    @property
    def sources(self) -> tuple[Source, Source, Source]:
        return (self.companies, self.filings, self.metrics)


def _env_number(name: str, default: float, cast: type) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise RuntimeError(f"{name} must be positive, got {raw!r}")
    return value


def get_settings() -> Settings:
    """Read environment variables and return a frozen `Settings` object.

    Resource locations may be local paths or http(s) URLs.

    Raises:
        RuntimeError: if `MAX_ROWS` or `REQUEST_TIMEOUT` is not a positive number.
    """
    data_dir = Path(os.getenv("EDGAR_DATA_DIR", "data"))
    limits = PipelineLimits(
        max_rows=int(_env_number("MAX_ROWS", PipelineLimits.max_rows, int)),
        timeout_seconds=float(
            _env_number("REQUEST_TIMEOUT", PipelineLimits.timeout_seconds, float)
        ),
    )

    return Settings(
        companies=Source(
            name="companies",
            resource=os.getenv("COMPANIES_CSV", str(data_dir / "Stocks.csv")),
            columns=COMPANY_COLUMNS,
        ),
        filings=Source(
            name="filings",
            resource=os.getenv("FILINGS_CSV", str(data_dir / "Forms.csv")),
            columns=FILING_COLUMNS,
        ),
        metrics=Source(
            name="metrics",
            resource=os.getenv("METRICS_CSV", str(data_dir / "Tasks.csv")),
            columns=METRIC_COLUMNS,
        ),
        limits=limits,
        user_agent=os.getenv("SEC_USER_AGENT", "").strip() or DEFAULT_USER_AGENT,
    )
