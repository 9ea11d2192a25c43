from __future__ import annotations

import datetime
import pytest
from pydantic import ValidationError
from edgar_metrics.models import CombinedRecord, Company, MetricRecord


def _combined(**overrides: object) -> dict[str, object]:
    rec: dict[str, object] = {
        "id": "1",
        "company": "Apple Inc.",
        "symbol": "AAPL",
        "cik": "320193",
        "year": 2023,
        "quarter": 4,
        "date": datetime.date(2023, 12, 30),
        "date_string": "2023-12-30",
        "quarter_label": "Q4 2023",
        "ccp": 73100.0,
        "ltd": 106042.0,
        "form_name": "10-K",
        "form_url": "https://sec.gov/x",
    }
    rec.update(overrides)
    return rec


def test_combined_record_validates() -> None:
    CombinedRecord.model_validate(_combined())


def test_combined_record_rejects_bad_quarter() -> None:
    with pytest.raises(ValidationError):
        CombinedRecord.model_validate(_combined(quarter=5))


def test_company_rejects_extra_fields() -> None:
    with pytest.raises(ValidationError):
        Company.model_validate({"symbol": "A", "company_name": "A", "cik": "1", "sic": "7372"})


def test_records_are_frozen() -> None:
    m = MetricRecord(form_id="1", ccp=1.0, ltd=2.0)
    with pytest.raises(ValidationError):
        m.ccp = 5.0  # type: ignore[misc]


def test_metric_rejects_negative_values() -> None:
    with pytest.raises(ValidationError):
        MetricRecord(form_id="1", ccp=-1.0, ltd=0.0)
