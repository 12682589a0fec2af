from app.platform.security.access import ResourceType, can_access
from app.platform.security.conditions import RLSConditions, generate_conditions, table_conditions
from app.platform.security.context import RoleAssignment, ScopeLevel, UserScope
from app.platform.security.errors import AuthorizationError, MalformedScopeError, ScopeViolationError
from app.platform.security.repository import BaseRepository
from app.platform.security.rls import apply_rls_filter, validate_rls_read_scope, validate_rls_write
from app.platform.security.scope import resolve_scope

__all__ = [
    "AuthorizationError",
    "MalformedScopeError",
    "ScopeViolationError",
    "BaseRepository",
    "RLSConditions",
    "ResourceType",
    "RoleAssignment",
    "ScopeLevel",
    "UserScope",
    "apply_rls_filter",
    "can_access",
    "generate_conditions",
    "resolve_scope",
    "table_conditions",
    "validate_rls_read_scope",
    "validate_rls_write",
]
