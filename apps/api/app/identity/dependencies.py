from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request, status
from opentelemetry import trace
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.context import set_principal_id, set_scope_level
from app.core.auth import AuthUser, get_current_user
from app.core.database import get_db
from app.identity.source import get_role_source
from app.metrics import observe_scope_resolution
from app.otel import annotate_request_identity
from app.platform.security.context import UserScope
from app.platform.security.errors import UnauthenticatedError
from app.platform.security.scope import require_scope

logger = logging.getLogger("app.identity")
tracer = trace.get_tracer("app.identity")

_UNAUTHENTICATED_HEADERS = {"WWW-Authenticate": "Bearer"}


def _unauthenticated(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail, headers=_UNAUTHENTICATED_HEADERS)


async def get_user_scope(
    request: Request,
    user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserScope:
    """Resolve the effective scope of the calling principal.

    Responds 401 when the caller is anonymous or holds no role assignment,
    and 403 when a role entry cannot be parsed at all. The resolved scope is
    bound to the request for logs, spans and the request log line.
    """

    if user.is_anonymous:
        observe_scope_resolution(None)
        raise _unauthenticated("Not authenticated")

    set_principal_id(user.sub)
    request.state.principal_id = user.sub
    request_span = trace.get_current_span()
    source = get_role_source()
    role_source = type(source).__name__

    with tracer.start_as_current_span("identity.resolve_scope") as span:
        span.set_attribute("role_source", role_source)
        annotate_request_identity(span)

        try:
            assignments = await run_in_threadpool(source.get_role_assignments, db, user)
        except (TypeError, ValueError) as exc:
            logger.warning(
                "identity.scope_unresolved",
                extra={"principal_id": user.sub, "role_source": role_source, "error": str(exc)},
            )
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Malformed role assignment")

        try:
            user_scope = require_scope(assignments)
        except UnauthenticatedError as exc:
            observe_scope_resolution(None)
            logger.info(
                "identity.scope_unresolved",
                extra={"principal_id": user.sub, "role_source": role_source, "error": str(exc)},
            )
            raise _unauthenticated(str(exc))

        set_scope_level(user_scope.scope.value)
        request.state.scope = user_scope.scope.value
        annotate_request_identity(span)

    annotate_request_identity(request_span)
    observe_scope_resolution(user_scope.scope.value)
    return user_scope
