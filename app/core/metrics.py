"""Prometheus metrics for the portfolio pipeline."""
from prometheus_client import Counter, Histogram

uploads_total = Counter(
    "portfolio_uploads_total",
    "Uploaded files by outcome",
    ["outcome"],
)

records_ingested_total = Counter(
    "portfolio_records_ingested_total",
    "Customer records written by uploads",
)

rows_skipped_total = Counter(
    "portfolio_rows_skipped_total",
    "Data rows dropped for having fewer cells than the header",
)

fields_defaulted_total = Counter(
    "portfolio_fields_defaulted_total",
    "Numeric cells that could not be parsed and were set to 0",
    ["field"],
)

analyses_total = Counter(
    "portfolio_analyses_total",
    "Customer analyses generated",
    ["status"],
)

risk_score_distribution = Histogram(
    "portfolio_risk_score",
    "Risk scores assigned at upload",
    buckets=[10, 20, 30, 40, 50, 60, 70, 80, 90, 100],
)
