"""Row sanitizers for the three CSV extracts.

Each sanitizer turns one raw row (column name -> cell) into a frozen model or
returns ``None``. A row is rejected when any required field fails
validation; optional metric fields fall back to ``None`` (or ``1.0`` for a
missing divisor) instead of rejecting the row.
"""
from __future__ import annotations

import math
from typing import Any, Callable, Iterable, Mapping, TypeVar

from pydantic import ValidationError

from edgar_metrics.clean.validate import (
    validate_date,
    validate_integer,
    validate_number,
    validate_string,
    validate_url,
)
from edgar_metrics.config import PipelineLimits
from edgar_metrics.models import Company, Filing, MetricRecord

T = TypeVar("T")

Row = Mapping[str, Any]

MAX_SAFE_INTEGER = 2**53 - 1


def _required_text(value: Any, max_length: int) -> str | None:
    text = validate_string(value, max_length)
    return text or None


def _present(row: Row, key: str) -> bool:
    value = row.get(key)
    if value is None:
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    return not (isinstance(value, str) and not value.strip())


def sanitize_company(row: Row, limits: PipelineLimits | None = None) -> Company | None:
    """Return a `Company` from a `Stocks.csv` row, or ``None`` if rejected."""
    limits = limits or PipelineLimits()
    symbol = _required_text(row.get("Symbol"), 10)
    company_name = _required_text(row.get("CompanyName"), 200)
    cik = validate_integer(row.get("CIK"), 1, limits.max_cik)

    if symbol is None or company_name is None or cik is None:
        return None

    try:
        return Company(symbol=symbol, company_name=company_name, cik=str(cik))
    except ValidationError:
        return None


def sanitize_filing(row: Row, limits: PipelineLimits | None = None) -> Filing | None:
    """Return a `Filing` from a `Forms.csv` row, or ``None`` if rejected.

    All six fields are required; a URL outside the trusted registry domain
    rejects the whole filing.
    """
    limits = limits or PipelineLimits()
    filing_id = validate_integer(row.get("id"), 1, limits.max_rows)
    form_name = _required_text(row.get("FormName"), 100)
    cik = validate_integer(row.get("CIK"), 1, limits.max_cik)
    value_date = validate_date(row.get("ValueDate"), limits.min_year, limits.max_year)
    filing_date = validate_date(row.get("FilingDate"), limits.min_year, limits.max_year)
    form_url = validate_url(row.get("FormURL"), limits.trusted_domain)

    fields = (filing_id, form_name, cik, value_date, filing_date, form_url)
    if any(f is None for f in fields):
        return None

    try:
        return Filing(
            id=str(filing_id),
            form_name=form_name,
            cik=str(cik),
            value_date=value_date,
            filing_date=filing_date,
            form_url=form_url,
        )
    except ValidationError:
        return None


def sanitize_metric(row: Row, limits: PipelineLimits | None = None) -> MetricRecord | None:
    """Return a `MetricRecord` from a `Tasks.csv` row, or ``None`` if rejected.

    Zero is a legitimate value for CCP and LTD.
    """
    limits = limits or PipelineLimits()
    form_id = validate_integer(row.get("Form_id"), 1, limits.max_rows)
    ccp = validate_number(row.get("CCP"), 0, MAX_SAFE_INTEGER)
    ltd = validate_number(row.get("LTD"), 0, MAX_SAFE_INTEGER)

    if form_id is None or ccp is None or ltd is None:
        return None

    def optional_int(key: str, low: int, high: int) -> int | None:
        return validate_integer(row.get(key), low, high) if _present(row, key) else None

    sum_divider = (
        validate_number(row.get("SumDivider"), 0.001, 10_000)
        if _present(row, "SumDivider")
        else 1.0
    )

    try:
        return MetricRecord(
            form_id=str(form_id),
            ccp=ccp,
            ltd=ltd,
            text_list_len=optional_int("TextListLen", 0, 1000),
            table_index=optional_int("TableIndex", 0, 100),
            sum_divider=sum_divider,
            json_table=optional_int("JsonTable", 0, 1),
            value_column=optional_int("ValueColumn", 0, 10),
        )
    except ValidationError:
        return None


def sanitize_rows(
    rows: Iterable[Row],
    sanitizer: Callable[[Row, PipelineLimits | None], T | None],
    limits: PipelineLimits | None = None,
) -> list[T]:
    """Apply `sanitizer` to every row and keep accepted records in order."""
    out: list[T] = []
    for row in rows:
        rec = sanitizer(row, limits)
        if rec is not None:
            out.append(rec)
    return out
