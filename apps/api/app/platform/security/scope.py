from __future__ import annotations

from collections.abc import Iterable

from app.platform.security.context import RoleAssignment, UserScope
from app.platform.security.errors import UnauthenticatedError


def resolve_scope(assignments: Iterable[RoleAssignment] | None) -> UserScope | None:
    """Collapse a principal's role assignments into one effective scope.

    The most restrictive assignment wins: a principal holding both a
    superadmin role and a small-group role is treated as a small-group
    leader. On equal precedence the first assignment seen is kept.
    Returns None when there are no assignments at all.
    """

    primary: RoleAssignment | None = None
    for assignment in assignments or ():
        if primary is None or assignment.scope.precedence > primary.scope.precedence:
            primary = assignment

    if primary is None:
        return None
    return UserScope.from_assignment(primary)


def require_scope(assignments: Iterable[RoleAssignment] | None) -> UserScope:
    """Like ``resolve_scope`` but raises ``UnauthenticatedError`` for an absent scope."""

    user_scope = resolve_scope(assignments)
    if user_scope is None:
        raise UnauthenticatedError("No role assignments for principal")
    return user_scope
