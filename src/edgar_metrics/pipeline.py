"""End-to-end processing run: load -> sanitize -> join -> aggregate.

The three extracts are loaded concurrently. If any load fails the others are
cancelled and the run fails; there is no partial result and no retry.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from edgar_metrics.aggregate.build_dataset import build_dataset
from edgar_metrics.aggregate.join import dedupe_metrics, join_records
from edgar_metrics.clean.sanitize import (
    sanitize_company,
    sanitize_filing,
    sanitize_metric,
    sanitize_rows,
)
from edgar_metrics.config import Settings, get_settings
from edgar_metrics.exceptions import LoadError, ProcessingError
from edgar_metrics.ingest.load_csv import build_client, load_csv
from edgar_metrics.models import DataQuality, Dataset

log = logging.getLogger(__name__)


async def load_sources(
    settings: Settings,
    client: httpx.AsyncClient,
) -> tuple[list[dict[str, Any]], list[dict[str, Any]], list[dict[str, Any]]]:
    """Load the three extracts concurrently, failing fast on the first error."""
    tasks = [
        asyncio.create_task(
            load_csv(src.resource, src.columns, limits=settings.limits, client=client),
            name=f"load-{src.name}",
        )
        for src in settings.sources
    ]
    try:
        companies, filings, metrics = await asyncio.gather(*tasks)
    except BaseException:
        for t in tasks:
            t.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    return companies, filings, metrics


def _check_cap(kind: str, count: int, cap: int) -> None:
    if count > cap:
        raise ProcessingError(f"Too many {kind} records: {count} > {cap}")


async def process_dataset(
    settings: Settings | None = None,
    *,
    client: httpx.AsyncClient | None = None,
) -> Dataset:
    """Run the whole pipeline and return the aggregated `Dataset`.

    Args:
        settings: Sources and limits (defaults to `get_settings()`).
        client: Optional shared HTTP client; created and closed here if omitted.

    Raises:
        ProcessingError: for any run-level failure, chained to its cause.
    """
    s = settings or get_settings()
    limits = s.limits
    owns_client = client is None
    http = client or build_client(s.user_agent)

    try:
        log.info("Loading CSV files...")
        company_rows, filing_rows, metric_rows = await load_sources(s, http)
        log.info(
            "Loaded %d company records, %d filing records, %d metric records",
            len(company_rows),
            len(filing_rows),
            len(metric_rows),
        )

        companies = sanitize_rows(company_rows, sanitize_company, limits)
        filings = sanitize_rows(filing_rows, sanitize_filing, limits)
        metrics = sanitize_rows(metric_rows, sanitize_metric, limits)
        log.info(
            "After sanitization: %d companies, %d filings, %d metrics",
            len(companies),
            len(filings),
            len(metrics),
        )

        _check_cap("company", len(companies), limits.max_companies)
        _check_cap("filing", len(filings), limits.max_filings)
        _check_cap("metric", len(metrics), limits.max_metrics)

        records = join_records(companies, filings, dedupe_metrics(metrics), limits)
        dataset = build_dataset(
            records,
            DataQuality(
                original_companies=len(company_rows),
                original_filings=len(filing_rows),
                original_metrics=len(metric_rows),
                companies_sanitized=len(companies),
                filings_sanitized=len(filings),
                metrics_sanitized=len(metrics),
            ),
        )
    except (LoadError, ProcessingError) as exc:
        log.error("Data processing failed: %s", exc)
        raise ProcessingError(f"Data processing failed: {exc}") from exc
    finally:
        if owns_client:
            await http.aclose()

    log.info(
        "Successfully processed data for %d companies across %d years",
        dataset.stats.companies_count,
        dataset.stats.years_span,
    )
    return dataset


def load_dataset(settings: Settings | None = None) -> Dataset:
    """Synchronous wrapper around `process_dataset` for the CLI and dashboard."""
    return asyncio.run(process_dataset(settings))
