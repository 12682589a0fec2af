from __future__ import annotations

import uuid

from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from app.context import (
    reset_correlation_id,
    reset_principal_id,
    reset_scope_level,
    set_correlation_id,
    set_principal_id,
    set_scope_level,
)

CORRELATION_HEADER = "x-correlation-id"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Binds a correlation id to the request and clears any principal or scope left in context."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[no-untyped-def]
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        correlation_token = set_correlation_id(correlation_id)
        principal_token = set_principal_id(None)
        scope_token = set_scope_level(None)
        span = trace.get_current_span()
        if span is not None and span.is_recording():
            span.set_attribute("correlation_id", correlation_id)
        try:
            response = await call_next(request)
        finally:
            reset_scope_level(scope_token)
            reset_principal_id(principal_token)
            reset_correlation_id(correlation_token)

        response.headers[CORRELATION_HEADER] = correlation_id
        return response
