"""Bounded CSV loading from local paths or http(s) URLs.

`load_csv` enforces the transfer deadline, payload ceiling, content type and
column contract before any row reaches the sanitizers. Rows are returned as
plain dicts of strings, exactly as they appear in the file.
"""

from __future__ import annotations

import asyncio
import io
import logging
import ssl
from pathlib import Path
from typing import Any, Sequence

import certifi
import httpx
import pandas as pd

from edgar_metrics.config import DEFAULT_USER_AGENT, PipelineLimits
from edgar_metrics.exceptions import LoadError

log = logging.getLogger(__name__)

ACCEPT_HEADER = "text/csv,text/plain,*/*"


def build_client(user_agent: str = DEFAULT_USER_AGENT) -> httpx.AsyncClient:
    """Return an `httpx.AsyncClient` verifying TLS against the certifi bundle.

    Redirects are not followed, so a trusted URL cannot hand the transfer
    to another host.
    """
    return httpx.AsyncClient(
        verify=ssl.create_default_context(cafile=certifi.where()),
        headers={"User-Agent": user_agent},
        follow_redirects=False,
    )


def _is_url(resource: str) -> bool:
    return resource.lower().startswith(("http://", "https://"))


def _check_content_type(resource: str, content_type: str | None) -> None:
    if content_type and "text/" not in content_type and "application/" not in content_type:
        raise LoadError(resource, f"Invalid content type: {content_type}")


async def _fetch_url(
    url: str,
    client: httpx.AsyncClient,
    max_bytes: int,
) -> bytes:
    """Stream `url` into memory, giving up as soon as `max_bytes` is exceeded."""
    async with client.stream("GET", url, headers={"Accept": ACCEPT_HEADER}) as resp:
        if not resp.is_success:
            raise LoadError(url, f"HTTP {resp.status_code}: {resp.reason_phrase}")

        _check_content_type(url, resp.headers.get("content-type"))

        declared = resp.headers.get("content-length")
        if (
            declared is not None
            and declared.isascii()
            and declared.isdigit()
            and int(declared) > max_bytes
        ):
            raise LoadError(url, f"File too large: {declared} bytes > {max_bytes}")

        buf = bytearray()
        async for chunk in resp.aiter_bytes():
            buf.extend(chunk)
            if len(buf) > max_bytes:
                raise LoadError(url, f"File content too large: more than {max_bytes} bytes")
        return bytes(buf)


def _read_file(path: Path, max_bytes: int) -> bytes:
    try:
        size = path.stat().st_size
    except OSError as exc:
        raise LoadError(str(path), f"Cannot read file: {exc}") from exc
    if size > max_bytes:
        raise LoadError(str(path), f"File too large: {size} bytes > {max_bytes}")
    return path.read_bytes()


async def _fetch_bytes(
    resource: str,
    client: httpx.AsyncClient | None,
    max_bytes: int,
) -> bytes:
    if _is_url(resource):
        if client is None:
            async with build_client() as own:
                return await _fetch_url(resource, own, max_bytes)
        return await _fetch_url(resource, client, max_bytes)
    return await asyncio.to_thread(_read_file, Path(resource), max_bytes)


def parse_csv(
    resource: str,
    payload: bytes,
    expected_columns: Sequence[str],
    max_rows: int,
) -> list[dict[str, Any]]:
    """Parse CSV bytes into row dicts and enforce the column contract.

    Args:
        resource: Path or URL, used in error messages.
        payload: Raw CSV bytes (UTF-8, optional BOM).
        expected_columns: Columns that must all be present in the header.
        max_rows: Rows kept; the remainder is dropped silently.

    Returns:
        List of dicts mapping column name to the raw string cell.

    Raises:
        LoadError: if the table is empty, unparsable or missing a column.
    """
    if len(payload) > 0 and not payload.strip():
        raise LoadError(resource, "Empty CSV file")
    try:
        text = payload.decode("utf-8-sig")
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            nrows=max_rows,
        )
    except pd.errors.EmptyDataError:
        raise LoadError(resource, "Empty CSV file") from None
    except (pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise LoadError(resource, f"CSV parsing error: {exc}") from exc

    if df.empty:
        raise LoadError(resource, "Empty CSV file")

    actual = [str(c) for c in df.columns]
    missing = [c for c in expected_columns if c not in actual]
    if missing:
        raise LoadError(resource, f"Missing required columns: {', '.join(missing)}")

    unexpected = [c for c in actual if c not in expected_columns]
    if unexpected:
        log.warning("Unexpected columns found in %s: %s", resource, ", ".join(unexpected))

    return df.to_dict(orient="records")


async def load_csv(
    resource: str,
    expected_columns: Sequence[str],
    max_rows: int | None = None,
    *,
    limits: PipelineLimits | None = None,
    client: httpx.AsyncClient | None = None,
) -> list[dict[str, Any]]:
    """Fetch and parse one CSV resource under the configured bounds.

    The whole transfer runs under ``limits.timeout_seconds``; on expiry the
    in-flight transfer is cancelled and a `LoadError` is raised.

    Args:
        resource: Local path or http(s) URL.
        expected_columns: Required header columns.
        max_rows: Row cap (defaults to ``limits.max_rows``).
        limits: Bounds to apply (defaults to `PipelineLimits()`).
        client: Shared `httpx.AsyncClient` for URL resources.

    Returns:
        Raw row dicts, at most `max_rows` of them.
    """
    limits = limits or PipelineLimits()
    max_rows = limits.max_rows if max_rows is None else max_rows

    try:
        payload = await asyncio.wait_for(
            _fetch_bytes(resource, client, limits.max_bytes),
            timeout=limits.timeout_seconds,
        )
    except asyncio.TimeoutError:
        raise LoadError(
            resource, f"Request timeout after {limits.timeout_seconds:g}s"
        ) from None
    except httpx.TimeoutException as exc:
        raise LoadError(resource, f"Request timeout: {exc}") from exc
    except httpx.HTTPError as exc:
        raise LoadError(resource, f"Request failed: {exc}") from exc

    rows = parse_csv(resource, payload, expected_columns, max_rows)
    log.info("Loaded %d rows from %s", len(rows), resource)
    return rows
