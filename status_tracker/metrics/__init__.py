# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metric objects for the HTTP layer and the services.
"""
from prometheus_client import Counter, Histogram

# ── HTTP (MetricsMiddleware) ──
REQUEST_COUNT = Counter(
    "status_tracker_requests_total",
    "HTTP requests served, by route template and status",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "status_tracker_request_duration_seconds",
    "Time spent serving a request, by route template",
    ["method", "endpoint"],
)
HTTP_ERRORS = Counter(
    "status_tracker_http_errors_total",
    "Responses with a 4xx or 5xx status",
    ["method", "endpoint", "status"],
)

# ── Submissions and reports ──
STATUS_SUBMISSIONS = Counter(
    "status_submissions_total",
    "Status submissions by kind and outcome",
    ["kind", "outcome"],
)
REPORTS_GENERATED = Counter(
    "status_reports_generated_total",
    "Reports generated",
    ["format"],
)
REPORT_ROWS = Histogram(
    "status_report_rows",
    "Number of grid rows per generated report",
    buckets=[0, 10, 50, 100, 250, 500, 1000, 5000],
)
