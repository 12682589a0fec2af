from app.identity.models import UserRole
from app.identity.source import (
    ClaimsRoleAssignmentSource,
    DbRoleAssignmentSource,
    InMemoryRoleAssignmentSource,
    RoleAssignmentSource,
    get_role_source,
    set_role_source,
)

__all__ = [
    "UserRole",
    "RoleAssignmentSource",
    "ClaimsRoleAssignmentSource",
    "DbRoleAssignmentSource",
    "InMemoryRoleAssignmentSource",
    "get_role_source",
    "set_role_source",
]
