from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response

from app.core.config import get_settings
from app.identity.api import router as identity_router
from app.identity.dependencies import get_user_scope
from app.members.api import router as members_router
from app.metrics import generate_metrics_payload, metrics_content_type
from app.ministry.api import designations_router, events_router
from app.organization.api import router as organization_router
from app.platform.security.context import UserScope
from app.platform.security.errors import AuthorizationError
from app.platform.security.rls import require_unrestricted

router = APIRouter()

api_router = APIRouter(prefix="/api")
api_router.include_router(identity_router)
api_router.include_router(organization_router)
api_router.include_router(members_router)
api_router.include_router(events_router)
api_router.include_router(designations_router)
router.include_router(api_router)


@router.get("/health", tags=["system"])
def health() -> dict[str, str]:
    settings = get_settings()
    return {
        "status": "ok",
        "service": settings.app_name,
        "environment": settings.app_env,
    }


@router.get("/metrics", tags=["system"])
def metrics(user_scope: UserScope = Depends(get_user_scope)) -> Response:
    settings = get_settings()
    if not settings.metrics_enabled:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="not found")
    try:
        require_unrestricted("system.metrics", user_scope, action="read")
    except AuthorizationError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    return Response(content=generate_metrics_payload(), media_type=metrics_content_type())
