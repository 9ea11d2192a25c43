"""Filtering of a grouped dataset by company and quarter range."""
from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from edgar_metrics.clean.validate import validate_integer, validate_string
from edgar_metrics.config import PipelineLimits
from edgar_metrics.exceptions import InvalidFilterParameters
from edgar_metrics.models import CombinedRecord

log = logging.getLogger(__name__)


def _in_window(
    rec: CombinedRecord,
    start_year: int,
    end_year: int,
    start_quarter: int,
    end_quarter: int,
) -> bool:
    if rec.year < start_year or rec.year > end_year:
        return False
    # quarter bounds only apply at the edge years
    if rec.year == start_year and rec.quarter < start_quarter:
        return False
    if rec.year == end_year and rec.quarter > end_quarter:
        return False
    return True


def filter_dataset(
    grouped_data: Mapping[str, Sequence[CombinedRecord]],
    selected_companies: Sequence[str],
    start_year: Any,
    end_year: Any,
    start_quarter: Any = 1,
    end_quarter: Any = 4,
    *,
    limits: PipelineLimits | None = None,
) -> list[CombinedRecord]:
    """Return records of the selected companies inside a quarter range.

    An empty `selected_companies` selects every company. The range is
    inclusive; `start_quarter` constrains only `start_year` and `end_quarter`
    only `end_year`.

    Args:
        grouped_data: `Dataset.grouped_data`.
        selected_companies: Company names, at most ``limits.max_selected_companies``.
        start_year: First year of the range.
        end_year: Last year of the range.
        start_quarter: First quarter within `start_year`.
        end_quarter: Last quarter within `end_year`.
        limits: Bounds to apply (defaults to `PipelineLimits()`).

    Returns:
        Matching records sorted by date, capped at ``limits.max_results``.

    Raises:
        InvalidFilterParameters: on out-of-range years or quarters, a reversed
            year range, or an invalid company selection.
    """
    limits = limits or PipelineLimits()

    valid_start_year = validate_integer(start_year, limits.min_year, limits.max_year)
    valid_end_year = validate_integer(end_year, limits.min_year, limits.max_year)
    valid_start_quarter = validate_integer(start_quarter, 1, 4)
    valid_end_quarter = validate_integer(end_quarter, 1, 4)

    if (
        valid_start_year is None
        or valid_end_year is None
        or valid_start_quarter is None
        or valid_end_quarter is None
    ):
        raise InvalidFilterParameters(
            "Invalid filter parameters: years must be within "
            f"{limits.min_year}-{limits.max_year} and quarters within 1-4 "
            f"(got {start_year!r}-{end_year!r}, Q{start_quarter!r}-Q{end_quarter!r})"
        )
    if valid_start_year > valid_end_year:
        raise InvalidFilterParameters(
            f"Start year {valid_start_year} cannot be after end year {valid_end_year}"
        )

    if isinstance(selected_companies, (str, bytes)) or not isinstance(
        selected_companies, (list, tuple, set, frozenset)
    ):
        raise InvalidFilterParameters("Selected companies must be a list of names")
    if len(selected_companies) > limits.max_selected_companies:
        raise InvalidFilterParameters(
            f"Too many companies selected: {len(selected_companies)} > "
            f"{limits.max_selected_companies}"
        )

    wanted = {
        name
        for name in (validate_string(c, 200) for c in selected_companies)
        if name
    }

    matches: list[CombinedRecord] = []
    for company, rows in grouped_data.items():
        if wanted and company not in wanted:
            continue
        matches.extend(
            r
            for r in rows
            if _in_window(
                r, valid_start_year, valid_end_year, valid_start_quarter, valid_end_quarter
            )
        )

    matches.sort(key=lambda r: r.date)
    if len(matches) > limits.max_results:
        log.warning(
            "Large result set (%d records), limiting to first %d",
            len(matches),
            limits.max_results,
        )
        matches = matches[: limits.max_results]
    return matches
