"""Prometheus collectors shared by the middleware and the routers."""
from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "team_scheduler_requests_total", "Total HTTP requests", ["method", "path", "status"]
)
REQUEST_LATENCY = Histogram(
    "team_scheduler_request_latency_seconds", "Latency of HTTP requests", ["method", "path"]
)

# Application-level domain metrics
LAYOUT_DURATION = Histogram(
    "team_scheduler_layout_duration_seconds", "Time spent building a schedule view", ["view"]
)
LAYOUT_WARNINGS = Counter(
    "team_scheduler_layout_warnings_total", "Tasks routed to the untimed fallback", ["view"]
)
DROP_COUNT = Counter(
    "team_scheduler_drops_total", "Resolved drag/drop gestures", ["gesture", "view", "changed"]
)
