"""Dataset aggregation.

Functions in this module turn joined records into the `Dataset` consumed by
the filter, the CLI and the dashboard.

Expectations:
- Input: `CombinedRecord` rows in metric encounter order.
- Output: records sorted by date (ties keep encounter order), grouped by
  company, with the sorted company list and year range.
"""
from __future__ import annotations

from typing import Iterable, Sequence

import pandas as pd

from edgar_metrics.exceptions import ProcessingError
from edgar_metrics.models import (
    CombinedRecord,
    DataQuality,
    Dataset,
    DatasetStats,
    DateRange,
)

FRAME_COLUMNS = list(CombinedRecord.model_fields)


def sort_by_date(records: Iterable[CombinedRecord]) -> list[CombinedRecord]:
    """Return records ordered by date ascending; `sorted` is stable."""
    return sorted(records, key=lambda r: r.date)


def group_by_company(
    records: Iterable[CombinedRecord],
) -> dict[str, tuple[CombinedRecord, ...]]:
    """Partition records by company name, preserving order within each group."""
    groups: dict[str, list[CombinedRecord]] = {}
    for r in records:
        groups.setdefault(r.company, []).append(r)
    return {name: tuple(rows) for name, rows in groups.items()}


def build_dataset(
    records: Sequence[CombinedRecord],
    data_quality: DataQuality | None = None,
) -> Dataset:
    """Sort, group and summarize joined records.

    Args:
        records: Output of `join_records`.
        data_quality: Optional before/after sanitization counts for `stats`.

    Returns:
        A frozen `Dataset`.

    Raises:
        ProcessingError: if no records, companies or years remain.
    """
    if not records:
        raise ProcessingError("No valid data after processing and validation")

    combined = sort_by_date(records)
    grouped = group_by_company(combined)
    companies = sorted(grouped)
    years = sorted({r.year for r in combined})

    if not companies or not years:
        raise ProcessingError("No companies or years found in processed data")

    return Dataset(
        combined_data=tuple(combined),
        grouped_data=grouped,
        companies=tuple(companies),
        date_range=DateRange(min=years[0], max=years[-1]),
        stats=DatasetStats(
            total_records=len(combined),
            companies_count=len(companies),
            years_span=len(years),
            data_quality=data_quality or DataQuality(),
        ),
    )


def records_to_frame(records: Iterable[CombinedRecord]) -> pd.DataFrame:
    """Return records as a pandas DataFrame for charting and export.

    The `date` column is converted to datetime64 so Altair and
    `DataFrame.to_csv` treat it as a date; column order follows
    `CombinedRecord`.
    """
    df = pd.DataFrame([r.model_dump() for r in records], columns=FRAME_COLUMNS)
    df["date"] = pd.to_datetime(df["date"])
    return df
