from __future__ import annotations

import re

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.requests import Request


http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)

scope_resolutions_total = Counter(
    "scope_resolutions_total",
    "Resolved user scopes by effective level",
    ["scope"],
)

scope_unresolved_total = Counter(
    "scope_unresolved_total",
    "Requests whose principal held no role assignment",
)

rls_denied_reads_count = Counter(
    "rls_denied_reads_count",
    "Total denied reads by RLS",
    ["resource", "scope_type"],
)

rls_denied_writes_count = Counter(
    "rls_denied_writes_count",
    "Total denied writes by RLS",
    ["resource", "scope_type"],
)


_INT_RE = re.compile(r"/\d+\b")
_PATH_PARAM_RE = re.compile(r"\{[^{}]+\}")


def _normalize_route_template(path: str) -> str:
    return _PATH_PARAM_RE.sub("{id}", path)


def _sanitize_path(path: str) -> str:
    return _INT_RE.sub("/{id}", path)


def resolve_http_path_label(request: Request) -> str:
    route = request.scope.get("route")
    if route is not None:
        path_format = getattr(route, "path_format", None)
        if isinstance(path_format, str) and path_format:
            return _normalize_route_template(path_format)
        route_path = getattr(route, "path", None)
        if isinstance(route_path, str) and route_path:
            return _normalize_route_template(route_path)
    return _sanitize_path(request.url.path)


def observe_http_request(method: str, path: str, status: int, duration: float) -> None:
    status_str = str(status)
    http_requests_total.labels(method=method, path=path, status=status_str).inc()
    http_request_duration_seconds.labels(method=method, path=path).observe(duration)


def observe_scope_resolution(scope: str | None) -> None:
    if scope is None:
        scope_unresolved_total.inc()
        return
    scope_resolutions_total.labels(scope=scope).inc()


def observe_rls_denied_read(resource: str, scope_type: str) -> None:
    rls_denied_reads_count.labels(resource=resource, scope_type=scope_type).inc()


def observe_rls_denied_write(resource: str, scope_type: str) -> None:
    rls_denied_writes_count.labels(resource=resource, scope_type=scope_type).inc()


def generate_metrics_payload() -> bytes:
    return generate_latest()


def metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
