from __future__ import annotations

import streamlit as st
import altair as alt

from edgar_metrics.aggregate.build_dataset import records_to_frame
from edgar_metrics.config import get_settings
from edgar_metrics.exceptions import EdgarMetricsError
from edgar_metrics.models import Dataset
from edgar_metrics.pipeline import load_dataset
from edgar_metrics.query.filter import filter_dataset
from edgar_metrics.query.quarters import build_quarter_axis, recent_year_window

# =====================================================
# Page config
# =====================================================
st.set_page_config(page_title="Liquidity & Leverage by Quarter", layout="wide")
st.title("📊 Current Cash Position vs Long Term Debt")

METRICS = {
    "Current Cash Position (CCP)": ["ccp"],
    "Long Term Debt (LTD)": ["ltd"],
    "Both": ["ccp", "ltd"],
}


# =====================================================
# Data (one processing run per session)
# =====================================================
@st.cache_resource(show_spinner="Loading and validating CSV extracts...")
def get_dataset() -> Dataset:
    """Run the pipeline once and keep the resulting dataset in memory."""
    return load_dataset(get_settings())


try:
    ds = get_dataset()
except EdgarMetricsError as exc:
    st.error(str(exc))
    st.stop()


def kpi(label: str, value) -> None:
    """Display a simple KPI metric in the dashboard."""
    st.metric(label, value)


# =====================================================
# SECTION 0 — OVERVIEW
# =====================================================
q = ds.stats.data_quality
c1, c2, c3, c4 = st.columns(4)
with c1:
    kpi("Records", ds.stats.total_records)
with c2:
    kpi("Companies", ds.stats.companies_count)
with c3:
    kpi("Years", f"{ds.date_range.min}–{ds.date_range.max}")
with c4:
    kpi("Metric rows kept", f"{q.metrics_sanitized}/{q.original_metrics}")

st.divider()

# =====================================================
# SECTION 1 — SELECTION
# =====================================================
first_year, last_year = recent_year_window(ds.date_range.min, ds.date_range.max)
if first_year > ds.date_range.min:
    st.caption(
        f"Showing {first_year}–{last_year}; earlier filings are outside the quarter range."
    )
try:
    axis = build_quarter_axis(first_year, last_year)
except EdgarMetricsError as exc:
    st.error(str(exc))
    st.stop()
labels = [a.label for a in axis]

selected = st.multiselect(
    "Companies (none selected = all)",
    list(ds.companies),
    default=list(ds.companies[: min(5, len(ds.companies))]),
    max_selections=50,
)
start_label, end_label = st.select_slider(
    "Quarter range",
    options=labels,
    value=(labels[0], labels[-1]),
)
metric_choice = st.radio("Metric", list(METRICS), horizontal=True)

start = axis[labels.index(start_label)]
end = axis[labels.index(end_label)]

try:
    rows = filter_dataset(
        ds.grouped_data, selected, start.year, end.year, start.quarter, end.quarter
    )
except EdgarMetricsError as exc:
    st.error(str(exc))
    st.stop()

# =====================================================
# SECTION 2 — CHART
# =====================================================
st.header("📈 Quarterly Trend")

df = records_to_frame(rows)
if df.empty:
    st.warning("No records match the current selection.")
else:
    cols = METRICS[metric_choice]
    df_long = df.melt(
        id_vars=["date", "quarter_label", "company", "form_name"],
        value_vars=cols,
        var_name="metric",
        value_name="value",
    )
    df_long["series"] = df_long["company"] + " · " + df_long["metric"].str.upper()

    chart = (
        alt.Chart(df_long)
        .mark_line(point=True)
        .encode(
            x=alt.X("date:T", title="Value Date"),
            y=alt.Y("value:Q", title="USD"),
            color=alt.Color("series:N", title="Company · Metric"),
            tooltip=["quarter_label:N", "company:N", "metric:N", "value:Q", "form_name:N"],
        )
        .properties(height=380)
    )
    st.altair_chart(chart, width="stretch")

    # =====================================================
    # SECTION 3 — RECORDS
    # =====================================================
    st.header("📘 Filings")
    table = df[["date_string", "quarter_label", "company", "symbol", "form_name", *cols, "form_url"]]
    st.dataframe(
        table,
        column_config={"form_url": st.column_config.LinkColumn("Filing")},
        width="stretch",
        hide_index=True,
    )

st.caption(
    f"{q.original_companies} company, {q.original_filings} filing and "
    f"{q.original_metrics} metric rows loaded; rows failing validation are skipped."
)
