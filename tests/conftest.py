"""
tests/conftest.py – Shared CSV fixtures and record factories.
"""
from __future__ import annotations

import datetime
import logging
from pathlib import Path
from typing import Callable

import pytest

from edgar_metrics.config import (
    COMPANY_COLUMNS,
    FILING_COLUMNS,
    METRIC_COLUMNS,
    PipelineLimits,
    Settings,
    Source,
)
from edgar_metrics.models import CombinedRecord

COMPANIES_CSV = (
    "Symbol,CompanyName,CIK\n"
    "AAPL,Apple Inc.,320193\n"
    "MSFT,Microsoft Corp,0000789019\n"
    ",Nameless Co,123\n"
)

FILINGS_CSV = (
    "id,FormName,CIK,ValueDate,FilingDate,FormURL\n"
    "1,10-K,320193,2023-12-30,2024-02-02,https://sec.gov/x\n"
    "2,10-Q,789019,2023-03-31,2023-04-25,https://www.sec.gov/Archives/y\n"
    "3,10-Q,320193,2022-06-30,2022-07-29,http://sec.gov/z\n"
    "4,10-Q,555555,2022-09-30,2022-10-29,https://sec.gov/w\n"
)

# form 3 has a non-https URL, form 4 an unknown company, form 99 no filing;
# the second form 1 row is a duplicate and must lose to the first.
METRICS_CSV = (
    "Form_id,TextListLen,TableIndex,SumDivider,JsonTable,ValueColumn,CCP,LTD\n"
    "1,12,3,1000,0,2,73100.0,106042.0\n"
    "2,,,,,,0,0\n"
    "3,,,,,,10,20\n"
    "4,,,,,,10,20\n"
    "99,,,,,,10,20\n"
    "1,,,,,,1,1\n"
)


@pytest.fixture()
def make_settings(tmp_path: Path) -> Callable[..., Settings]:
    """Write the three CSVs to `tmp_path` and return matching Settings."""

    def _make(
        companies: str = COMPANIES_CSV,
        filings: str = FILINGS_CSV,
        metrics: str = METRICS_CSV,
        limits: PipelineLimits | None = None,
    ) -> Settings:
        paths = {}
        for name, text in (
            ("Stocks.csv", companies),
            ("Forms.csv", filings),
            ("Tasks.csv", metrics),
        ):
            p = tmp_path / name
            p.write_text(text, encoding="utf-8")
            paths[name] = str(p)
        return Settings(
            companies=Source("companies", paths["Stocks.csv"], COMPANY_COLUMNS),
            filings=Source("filings", paths["Forms.csv"], FILING_COLUMNS),
            metrics=Source("metrics", paths["Tasks.csv"], METRIC_COLUMNS),
            limits=limits or PipelineLimits(),
        )

    return _make


@pytest.fixture()
def make_record() -> Callable[..., CombinedRecord]:
    """Build a CombinedRecord dated mid-way through the given quarter."""
    counter = iter(range(1, 1_000_000))

    def _make(
        company: str,
        year: int,
        quarter: int,
        ccp: float = 1.0,
        ltd: float = 2.0,
        day: int = 15,
    ) -> CombinedRecord:
        d = datetime.date(year, quarter * 3 - 1, day)
        return CombinedRecord(
            id=str(next(counter)),
            company=company,
            symbol=company[:4].upper(),
            cik="1",
            year=year,
            quarter=quarter,
            date=d,
            date_string=d.isoformat(),
            quarter_label=f"Q{quarter} {year}",
            ccp=ccp,
            ltd=ltd,
            form_name="10-Q",
            form_url="https://sec.gov/x",
        )

    return _make


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """configure_logging replaces root handlers; put the originals back."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for h in root.handlers:
        if h not in handlers:
            h.close()
    root.handlers[:] = handlers
    root.setLevel(level)
