from __future__ import annotations

from dataclasses import dataclass

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app import audit
from app.context import get_principal_id
from app.identity.models import UserRole
from app.identity.schemas import ConditionsRead, MyScopeRead, UserRoleCreate, UserRoleRead
from app.organization.service import verify_lineage
from app.platform.security.conditions import generate_conditions
from app.platform.security.context import ORG_FIELDS, UserScope
from app.platform.security.errors import AuthorizationError
from app.platform.security.rls import require_unrestricted

RESOURCE = "identity.user_role"


@dataclass(slots=True)
class UserRoleAdminService:
    def list_user_roles(self, session: Session, user_scope: UserScope, user_id: str | None = None) -> list[UserRoleRead]:
        self._require_admin(user_scope, action="read")
        stmt = select(UserRole).order_by(UserRole.user_id.asc(), UserRole.id.asc())
        if user_id is not None:
            stmt = stmt.where(UserRole.user_id == user_id)
        return [UserRoleRead.model_validate(row) for row in session.scalars(stmt).all()]

    def assign_role(self, session: Session, user_scope: UserScope, dto: UserRoleCreate) -> UserRoleRead:
        self._require_admin(user_scope, action="create")

        payload = dto.model_dump(exclude={"user_id", "scope"})
        defining_field = dto.scope.defining_field
        if defining_field is not None and payload[defining_field] is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"{dto.scope.value} scope requires {defining_field}",
            )
        if dto.scope.is_unrestricted and any(payload[name] is not None for name in ORG_FIELDS):
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"{dto.scope.value} scope does not take organizational identifiers",
            )
        verify_lineage(session, **payload)

        duplicate = session.scalar(
            select(UserRole).where(
                UserRole.user_id == dto.user_id,
                UserRole.scope == dto.scope.value,
                *[
                    getattr(UserRole, name).is_(None) if payload[name] is None else getattr(UserRole, name) == payload[name]
                    for name in ORG_FIELDS
                ],
            )
        )
        if duplicate is not None:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="role assignment already exists")

        row = UserRole(user_id=dto.user_id, scope=dto.scope.value, **payload)
        session.add(row)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="role assignment already exists")
        session.refresh(row)

        audit.record(
            actor_user_id=get_principal_id() or "anonymous",
            entity_type=RESOURCE,
            entity_id=str(row.id),
            action="user_role.assigned",
            before=None,
            after=UserRoleRead.model_validate(row).model_dump(mode="json"),
        )
        return UserRoleRead.model_validate(row)

    def revoke_role(self, session: Session, user_scope: UserScope, user_role_id: int) -> None:
        self._require_admin(user_scope, action="delete")
        row = session.get(UserRole, user_role_id)
        if row is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="role assignment not found")

        before = UserRoleRead.model_validate(row).model_dump(mode="json")
        session.delete(row)
        session.commit()
        audit.record(
            actor_user_id=get_principal_id() or "anonymous",
            entity_type=RESOURCE,
            entity_id=str(user_role_id),
            action="user_role.revoked",
            before=before,
            after=None,
        )

    @staticmethod
    def describe_scope(user_id: str, user_scope: UserScope) -> MyScopeRead:
        conditions = generate_conditions(user_scope)
        return MyScopeRead(
            user_id=user_id,
            scope=user_scope.as_dict(),
            well_formed=user_scope.is_well_formed,
            conditions=ConditionsRead(kind=conditions.kind, filters=conditions.as_filter()),
        )

    @staticmethod
    def _require_admin(user_scope: UserScope, *, action: str) -> None:
        try:
            require_unrestricted(RESOURCE, user_scope, action=action)
        except AuthorizationError as exc:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))


user_role_admin_service = UserRoleAdminService()
