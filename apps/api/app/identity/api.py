from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.auth import AuthUser, get_current_user
from app.core.database import get_db
from app.identity.dependencies import get_user_scope
from app.identity.schemas import MyScopeRead, UserRoleCreate, UserRoleRead
from app.identity.service import user_role_admin_service
from app.platform.security.context import UserScope


router = APIRouter(tags=["identity"])


@router.get("/me/scope", response_model=MyScopeRead)
def read_my_scope(
    user: AuthUser = Depends(get_current_user),
    user_scope: UserScope = Depends(get_user_scope),
) -> MyScopeRead:
    return user_role_admin_service.describe_scope(user.sub, user_scope)


@router.get("/user-roles", response_model=list[UserRoleRead])
def list_user_roles(
    user_id: str | None = Query(default=None, alias="userId"),
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> list[UserRoleRead]:
    return user_role_admin_service.list_user_roles(db, user_scope, user_id=user_id)


@router.post("/user-roles", response_model=UserRoleRead, status_code=status.HTTP_201_CREATED)
def assign_user_role(
    dto: UserRoleCreate,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> UserRoleRead:
    return user_role_admin_service.assign_role(db, user_scope, dto)


@router.delete("/user-roles/{user_role_id}", status_code=status.HTTP_204_NO_CONTENT)
def revoke_user_role(
    user_role_id: int,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> None:
    user_role_admin_service.revoke_role(db, user_scope, user_role_id)
