from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from app.api.routes import router as api_router
from app.core.config import get_settings
from app.identity.source import ClaimsRoleAssignmentSource, DbRoleAssignmentSource, set_role_source
from app.logging import configure_logging
from app.middleware.correlation_id import CorrelationIdMiddleware
from app.middleware.request_logging import RequestLoggingMiddleware
from app.otel import get_fastapi_server_request_hook, setup_otel


configure_logging()
logger = logging.getLogger("app.lifecycle")


def resolve_role_source_choice(role_source: str, app_env: str) -> str:
    choice = role_source.lower()
    if choice == "auto":
        choice = "db" if app_env.lower() in {"prod", "production"} else "claims"
    return choice


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info("system.started", extra={"status": settings.app_env})
    yield


app = FastAPI(title="Fellowship API", version="0.1.0", lifespan=lifespan)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(CorrelationIdMiddleware)
app.include_router(api_router)

settings = get_settings()
if resolve_role_source_choice(settings.role_source, settings.app_env) == "db":
    set_role_source(DbRoleAssignmentSource())
else:
    set_role_source(ClaimsRoleAssignmentSource())

if settings.otel_enabled:
    setup_otel("api", True)

if not getattr(app, "_is_instrumented_by_opentelemetry", False):
    FastAPIInstrumentor().instrument_app(app, server_request_hook=get_fastapi_server_request_hook())
