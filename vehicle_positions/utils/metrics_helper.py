from prometheus_client import Counter, Gauge, Histogram
from starlette.routing import Match

UNMATCHED_PATH = "unmatched"

http_request_duration = Histogram(
    "http_request_duration_seconds",
    "Duration of HTTP requests.",
    ["path"],
)

http_requests_total = Counter(
    "http_requests_total",
    "Total number of HTTP requests.",
    ["path", "status"],
)

bus_count = Gauge(
    "bus_count",
    "Total number of buses fetched from the API.",
)

def metric_path(routes, scope):
    """
    Label a request by the route template it matched, so the number of label
    values stays bounded by the number of routes. Everything under a mount
    (e.g. /assets/...) shares the mount's path.
    """
    for route in routes:
        match, _ = route.matches(scope)
        if match != Match.NONE:
            return route.path
    return UNMATCHED_PATH

def observe_request(path, status_code, duration):
    http_request_duration.labels(path=path).observe(duration)
    http_requests_total.labels(path=path, status=str(status_code)).inc()
