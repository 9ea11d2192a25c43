"""Quarter axis used for range selection and chart labels."""
from __future__ import annotations

from typing import Any

from edgar_metrics.clean.validate import validate_integer
from edgar_metrics.config import PipelineLimits
from edgar_metrics.exceptions import InvalidRange
from edgar_metrics.models import QuarterLabel


def build_quarter_axis(
    min_year: Any,
    max_year: Any,
    *,
    limits: PipelineLimits | None = None,
) -> list[QuarterLabel]:
    """Enumerate every quarter from Q1 of `min_year` to Q4 of `max_year`.

    Raises:
        InvalidRange: if a year is out of bounds, `min_year > max_year`, or
            the span exceeds ``limits.max_year_span`` years.
    """
    limits = limits or PipelineLimits()
    lo = validate_integer(min_year, limits.min_year, limits.max_year)
    hi = validate_integer(max_year, limits.min_year, limits.max_year)

    if lo is None or hi is None:
        raise InvalidRange(
            f"Invalid year range: {min_year!r}-{max_year!r} "
            f"(years must be within {limits.min_year}-{limits.max_year})"
        )
    if lo > hi:
        raise InvalidRange(f"Invalid year range: min {lo} > max {hi}")
    if hi - lo > limits.max_year_span:
        raise InvalidRange(
            f"Year range too large: {hi - lo} years > {limits.max_year_span}"
        )

    return [
        QuarterLabel(value=f"{year}-Q{q}", label=f"Q{q} {year}", year=year, quarter=q)
        for year in range(lo, hi + 1)
        for q in (1, 2, 3, 4)
    ]


def recent_year_window(
    min_year: int,
    max_year: int,
    *,
    limits: PipelineLimits | None = None,
) -> tuple[int, int]:
    """Narrow ``[min_year, max_year]`` to its newest ``max_year_span`` years.

    Lets a caller build an axis for a dataset whose filings cover more years
    than one axis may hold.
    """
    limits = limits or PipelineLimits()
    return max(min_year, max_year - limits.max_year_span), max_year
