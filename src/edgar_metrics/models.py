"""Pydantic models for sanitized, joined and aggregated records.

Sanitized entities (`Company`, `Filing`, `MetricRecord`) come out of the
sanitizers, `CombinedRecord` out of the join, and `Dataset` is what the
dashboard and CLI consume. All models are frozen.
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field


class _Record(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class Company(_Record):
    """A listed company keyed by CIK.

    Attributes:
        symbol: Ticker symbol.
        company_name: Display name; also the grouping key in a `Dataset`.
        cik: Central Index Key as a canonical decimal string.
    """
    symbol: str = Field(..., min_length=1, max_length=10)
    company_name: str = Field(..., min_length=1, max_length=200)
    cik: str = Field(..., pattern=r"^[1-9][0-9]*$")


class Filing(_Record):
    """An SEC filing linking a company to a reporting date.

    Attributes:
        id: Filing id referenced by metric rows.
        form_name: Form description (e.g. '10-Q').
        cik: Owning company's CIK.
        value_date: Period date the metrics refer to.
        filing_date: Date the form was filed.
        form_url: HTTPS URL of the document on the registry.
    """
    id: str = Field(..., pattern=r"^[1-9][0-9]*$")
    form_name: str = Field(..., min_length=1, max_length=100)
    cik: str = Field(..., pattern=r"^[1-9][0-9]*$")
    value_date: datetime.date
    filing_date: datetime.date
    form_url: str = Field(..., pattern=r"^https://")


class MetricRecord(_Record):
    """Metrics extracted from one filing.

    `ccp` and `ltd` are required; the remaining fields describe how the
    values were extracted and are kept only when they validated.
    """
    form_id: str = Field(..., pattern=r"^[1-9][0-9]*$")
    ccp: float = Field(..., ge=0)
    ltd: float = Field(..., ge=0)
    text_list_len: int | None = None
    table_index: int | None = None
    sum_divider: float | None = 1.0
    json_table: int | None = None
    value_column: int | None = None


class CombinedRecord(_Record):
    """Denormalized metric row with company, filing and calendar quarter."""
    id: str
    company: str
    symbol: str
    cik: str
    year: int
    quarter: int = Field(..., ge=1, le=4)
    date: datetime.date
    date_string: str
    quarter_label: str
    ccp: float = Field(..., ge=0)
    ltd: float = Field(..., ge=0)
    form_name: str
    form_url: str


class QuarterLabel(_Record):
    """One entry of the quarter axis, e.g. value='2023-Q4', label='Q4 2023'."""
    value: str
    label: str
    year: int
    quarter: int = Field(..., ge=1, le=4)


class DateRange(_Record):
    min: int
    max: int


class DataQuality(_Record):
    """Row counts before and after sanitization, per source."""
    original_companies: int = Field(0, ge=0)
    original_filings: int = Field(0, ge=0)
    original_metrics: int = Field(0, ge=0)
    companies_sanitized: int = Field(0, ge=0)
    filings_sanitized: int = Field(0, ge=0)
    metrics_sanitized: int = Field(0, ge=0)


class DatasetStats(_Record):
    total_records: int = Field(..., ge=0)
    companies_count: int = Field(..., ge=0)
    years_span: int = Field(..., ge=0)
    data_quality: DataQuality = Field(default_factory=DataQuality)


class Dataset(_Record):
    """Result of one processing run.

    Attributes:
        combined_data: Every record, sorted by date ascending.
        grouped_data: The same records partitioned by company name.
        companies: Company names, sorted.
        date_range: Smallest and largest year present.
        stats: Record counts for display.
    """
    combined_data: tuple[CombinedRecord, ...]
    grouped_data: dict[str, tuple[CombinedRecord, ...]]
    companies: tuple[str, ...]
    date_range: DateRange
    stats: DatasetStats
