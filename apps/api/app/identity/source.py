from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from threading import Lock
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.auth import AuthUser
from app.identity.models import UserRole
from app.platform.security.context import RoleAssignment

logger = logging.getLogger("app.identity")


class RoleAssignmentSource(Protocol):
    """Pluggable lookup of the role assignments held by an authenticated principal."""

    def get_role_assignments(self, session: Session, user: AuthUser) -> list[RoleAssignment]:
        ...


class ClaimsRoleAssignmentSource:
    """Reads role assignments embedded in the session token under ``roles``.

    Each entry is a mapping such as ``{"scope": "region", "regionId": 4}``.
    An entry with an unknown scope tag or a non-numeric identifier raises
    ``ValueError``; it is never skipped, so a broken entry cannot widen
    the resolved scope.
    """

    def __init__(self, claim: str = "roles") -> None:
        self._claim = claim

    def get_role_assignments(self, session: Session, user: AuthUser) -> list[RoleAssignment]:
        raw_roles = user.claims.get(self._claim) or []
        if isinstance(raw_roles, Mapping):
            raw_roles = [raw_roles]

        assignments: list[RoleAssignment] = []
        for raw in raw_roles:
            if not isinstance(raw, Mapping):
                logger.warning("identity.role_claim_invalid", extra={"principal_id": user.sub, "error": "not an object"})
                raise ValueError("role claim entry must be an object")
            try:
                assignments.append(RoleAssignment.from_mapping(raw))
            except (TypeError, ValueError) as exc:
                logger.warning("identity.role_claim_invalid", extra={"principal_id": user.sub, "error": str(exc)})
                raise
        return assignments


class DbRoleAssignmentSource:
    """Reads role assignments from the ``user_role`` table."""

    def get_role_assignments(self, session: Session, user: AuthUser) -> list[RoleAssignment]:
        rows = session.scalars(
            select(UserRole).where(UserRole.user_id == user.sub).order_by(UserRole.id.asc())
        ).all()
        return [
            RoleAssignment.from_mapping(
                {
                    "scope": row.scope,
                    "region_id": row.region_id,
                    "university_id": row.university_id,
                    "small_group_id": row.small_group_id,
                    "alumni_group_id": row.alumni_group_id,
                }
            )
            for row in rows
        ]


class InMemoryRoleAssignmentSource:
    """Fixed principal -> assignments table, for local runs and tests."""

    def __init__(self, assignments: Mapping[str, Iterable[RoleAssignment | Mapping[str, Any]]] | None = None) -> None:
        self._assignments: dict[str, list[RoleAssignment]] = {}
        for user_id, items in (assignments or {}).items():
            self._assignments[user_id] = [
                item if isinstance(item, RoleAssignment) else RoleAssignment.from_mapping(item) for item in items
            ]

    def get_role_assignments(self, session: Session, user: AuthUser) -> list[RoleAssignment]:
        return list(self._assignments.get(user.sub, []))


_ROLE_SOURCE: RoleAssignmentSource = ClaimsRoleAssignmentSource()
_ROLE_SOURCE_LOCK = Lock()


def get_role_source() -> RoleAssignmentSource:
    """Get the active role assignment source."""

    return _ROLE_SOURCE


def set_role_source(source: RoleAssignmentSource) -> None:
    """Set the active role assignment source."""

    global _ROLE_SOURCE
    with _ROLE_SOURCE_LOCK:
        _ROLE_SOURCE = source
