"""edgar_metrics package.

Loads three CSV extracts (companies, SEC filings, per-filing metrics),
validates every field, joins them into a quarterly time series and serves
filtered slices of it to a Streamlit dashboard and a CLI.

Architecture:
- ingest: bounded, concurrent CSV loading (httpx / local files, pandas parsing)
- clean: field validators and row sanitizers producing Pydantic models
- aggregate: join by foreign key, sort and group into a `Dataset`
- query: company / quarter-range filtering and the quarter axis
"""

from edgar_metrics.pipeline import load_dataset, process_dataset
from edgar_metrics.query.filter import filter_dataset
from edgar_metrics.query.quarters import build_quarter_axis

__all__ = [
    "__version__",
    "build_quarter_axis",
    "filter_dataset",
    "load_dataset",
    "process_dataset",
]
__version__ = "0.1.0"
