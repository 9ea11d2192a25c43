"""Join sanitized metrics to their filing and company.

Each metric row resolves `form_id -> Filing -> cik -> Company`. Rows that do
not resolve, carry an unusable date or fail the metric sanity bounds are
dropped without raising; the output is never longer than the input.
"""
from __future__ import annotations

import logging
import math
from typing import Iterable, Sequence

from edgar_metrics.clean.validate import validate_date
from edgar_metrics.config import PipelineLimits
from edgar_metrics.models import CombinedRecord, Company, Filing, MetricRecord

log = logging.getLogger(__name__)


def quarter_of(month: int) -> int:
    """Return the calendar quarter (1-4) of a 1-based month."""
    return math.ceil(month / 3)


def dedupe_metrics(metrics: Iterable[MetricRecord]) -> list[MetricRecord]:
    """Keep the first metric record seen for each `form_id`."""
    seen: set[str] = set()
    out: list[MetricRecord] = []
    for m in metrics:
        if m.form_id in seen:
            continue
        seen.add(m.form_id)
        out.append(m)
    return out


def join_records(
    companies: Sequence[Company],
    filings: Sequence[Filing],
    metrics: Sequence[MetricRecord],
    limits: PipelineLimits | None = None,
) -> list[CombinedRecord]:
    """Denormalize metrics into `CombinedRecord` rows.

    Args:
        companies: Sanitized companies; a later duplicate CIK replaces an earlier one.
        filings: Sanitized filings; a later duplicate id replaces an earlier one.
        metrics: Sanitized, already de-duplicated metric records.
        limits: Year and metric bounds (defaults to `PipelineLimits()`).

    Returns:
        Combined records in metric encounter order.
    """
    limits = limits or PipelineLimits()
    companies_by_cik = {c.cik: c for c in companies}
    filings_by_id = {f.id: f for f in filings}

    out: list[CombinedRecord] = []
    for m in metrics:
        filing = filings_by_id.get(m.form_id)
        if filing is None:
            continue
        company = companies_by_cik.get(filing.cik)
        if company is None:
            continue

        date_string = filing.value_date.isoformat()
        value_date = validate_date(date_string, limits.min_year, limits.max_year)
        if value_date is None:
            continue

        if not (0 <= m.ccp <= limits.max_metric_value):
            continue
        if not (0 <= m.ltd <= limits.max_metric_value):
            continue

        year = value_date.year
        quarter = quarter_of(value_date.month)
        out.append(
            CombinedRecord(
                id=m.form_id,
                company=company.company_name,
                symbol=company.symbol,
                cik=company.cik,
                year=year,
                quarter=quarter,
                date=value_date,
                date_string=date_string,
                quarter_label=f"Q{quarter} {year}",
                ccp=m.ccp,
                ltd=m.ltd,
                form_name=filing.form_name,
                form_url=filing.form_url,
            )
        )

    log.info("Joined %d of %d metric records", len(out), len(metrics))
    return out
