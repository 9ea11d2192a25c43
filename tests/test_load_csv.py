from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import httpx
import pytest
import respx

from edgar_metrics.config import (
    COMPANY_COLUMNS,
    DEFAULT_USER_AGENT,
    FILING_COLUMNS,
    PipelineLimits,
)
from edgar_metrics.exceptions import LoadError
from edgar_metrics.ingest import load_csv as load_csv_mod
from edgar_metrics.ingest.load_csv import build_client, load_csv

URL = "https://data.example.com/Stocks.csv"
BODY = "Symbol,CompanyName,CIK\nAAPL,Apple Inc.,320193\nMSFT,Microsoft Corp,789019\n"


def _write(tmp_path: Path, text: str) -> str:
    p = tmp_path / "data.csv"
    p.write_text(text, encoding="utf-8")
    return str(p)


@pytest.mark.asyncio
async def test_local_file_rows_are_raw_strings(tmp_path: Path) -> None:
    rows = await load_csv(_write(tmp_path, BODY), COMPANY_COLUMNS)
    assert rows == [
        {"Symbol": "AAPL", "CompanyName": "Apple Inc.", "CIK": "320193"},
        {"Symbol": "MSFT", "CompanyName": "Microsoft Corp", "CIK": "789019"},
    ]


@pytest.mark.asyncio
async def test_rows_beyond_max_rows_are_dropped(tmp_path: Path) -> None:
    text = "Symbol,CompanyName,CIK\n" + "".join(f"S{i},Co {i},{i + 1}\n" for i in range(5))
    rows = await load_csv(_write(tmp_path, text), COMPANY_COLUMNS, max_rows=2)
    assert [r["Symbol"] for r in rows] == ["S0", "S1"]


@pytest.mark.asyncio
async def test_missing_column_is_fatal(tmp_path: Path) -> None:
    text = "id,FormName,CIK,ValueDate,FilingDate\n1,10-K,1,2023-01-01,2023-02-01\n"
    with pytest.raises(LoadError, match="Missing required columns: FormURL"):
        await load_csv(_write(tmp_path, text), FILING_COLUMNS)


@pytest.mark.asyncio
async def test_unexpected_columns_only_warn(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    text = "Symbol,CompanyName,CIK,Extra\nAAPL,Apple Inc.,320193,=cmd()\n"
    with caplog.at_level(logging.WARNING, logger="edgar_metrics.ingest.load_csv"):
        rows = await load_csv(_write(tmp_path, text), COMPANY_COLUMNS)
    assert len(rows) == 1
    assert "Unexpected columns" in caplog.text
    assert "Extra" in caplog.text


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "\n\n", "Symbol,CompanyName,CIK\n"])
async def test_empty_input_is_fatal(tmp_path: Path, text: str) -> None:
    with pytest.raises(LoadError, match="Empty CSV"):
        await load_csv(_write(tmp_path, text), COMPANY_COLUMNS)


@pytest.mark.asyncio
async def test_oversize_local_file(tmp_path: Path) -> None:
    with pytest.raises(LoadError, match="too large"):
        await load_csv(_write(tmp_path, BODY), COMPANY_COLUMNS, limits=PipelineLimits(max_bytes=10))


@pytest.mark.asyncio
async def test_missing_local_file(tmp_path: Path) -> None:
    with pytest.raises(LoadError, match="Cannot read file"):
        await load_csv(str(tmp_path / "nope.csv"), COMPANY_COLUMNS)


@pytest.mark.asyncio
async def test_timeout_cancels_transfer(monkeypatch: pytest.MonkeyPatch) -> None:
    cancelled: list[bool] = []

    async def slow_fetch(resource: str, client: object, max_bytes: int) -> bytes:
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            cancelled.append(True)
            raise
        return b""

    monkeypatch.setattr(load_csv_mod, "_fetch_bytes", slow_fetch)
    with pytest.raises(LoadError, match="timeout"):
        await load_csv("slow.csv", COMPANY_COLUMNS, limits=PipelineLimits(timeout_seconds=0.05))
    assert cancelled == [True]


@pytest.mark.asyncio
async def test_http_success() -> None:
    async with httpx.AsyncClient() as client:
        with respx.mock:
            route = respx.get(URL).mock(
                return_value=httpx.Response(200, text=BODY, headers={"content-type": "text/csv"})
            )
            rows = await load_csv(URL, COMPANY_COLUMNS, client=client)
            assert route.called
    assert [r["CIK"] for r in rows] == ["320193", "789019"]


@pytest.mark.asyncio
async def test_http_error_status() -> None:
    async with httpx.AsyncClient() as client:
        with respx.mock:
            respx.get(URL).mock(return_value=httpx.Response(404))
            with pytest.raises(LoadError, match="HTTP 404"):
                await load_csv(URL, COMPANY_COLUMNS, client=client)


@pytest.mark.asyncio
async def test_http_wrong_content_type() -> None:
    async with httpx.AsyncClient() as client:
        with respx.mock:
            respx.get(URL).mock(
                return_value=httpx.Response(200, content=b"\x89PNG", headers={"content-type": "image/png"})
            )
            with pytest.raises(LoadError, match="Invalid content type"):
                await load_csv(URL, COMPANY_COLUMNS, client=client)


@pytest.mark.asyncio
async def test_http_oversize_body() -> None:
    async with httpx.AsyncClient() as client:
        with respx.mock:
            respx.get(URL).mock(
                return_value=httpx.Response(200, text=BODY, headers={"content-type": "text/csv"})
            )
            with pytest.raises(LoadError, match="too large"):
                await load_csv(
                    URL, COMPANY_COLUMNS, client=client, limits=PipelineLimits(max_bytes=16)
                )


@pytest.mark.asyncio
async def test_http_transport_timeout() -> None:
    async with httpx.AsyncClient() as client:
        with respx.mock:
            respx.get(URL).mock(side_effect=httpx.ConnectTimeout)
            with pytest.raises(LoadError, match="timeout"):
                await load_csv(URL, COMPANY_COLUMNS, client=client)


@pytest.mark.asyncio
async def test_standalone_load_does_not_follow_redirects() -> None:
    with respx.mock:
        route = respx.get(URL).mock(
            return_value=httpx.Response(302, headers={"Location": "https://evil.example.com/x.csv"})
        )
        with pytest.raises(LoadError, match="HTTP 302"):
            await load_csv(URL, COMPANY_COLUMNS)
    assert route.calls.last.request.headers["User-Agent"] == DEFAULT_USER_AGENT


@pytest.mark.asyncio
async def test_build_client_settings() -> None:
    async with build_client("research bot admin@example.com") as client:
        assert client.follow_redirects is False
        assert client.headers["User-Agent"] == "research bot admin@example.com"
