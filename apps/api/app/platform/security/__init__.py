from app.platform.security.access import ResourceLineage, ResourceType, can_access
from app.platform.security.conditions import (
    DIRECTORY_LEVELS,
    ConditionKind,
    RLSConditions,
    RLSTable,
    TABLE_KEYS,
    directory_conditions,
    generate_conditions,
    table_conditions,
)
from app.platform.security.context import ORG_FIELDS, RoleAssignment, ScopeLevel, UserScope
from app.platform.security.errors import (
    AuthorizationError,
    MalformedScopeError,
    ScopeViolationError,
    UnauthenticatedError,
)
from app.platform.security.repository import BaseRepository, DirectoryRepository
from app.platform.security.rls import (
    apply_rls_filter,
    fill_scope_defaults,
    merge_requested_filters,
    require_unrestricted,
    validate_resource_access,
    validate_rls_read_scope,
    validate_rls_write,
)
from app.platform.security.scope import require_scope, resolve_scope

__all__ = [
    "DIRECTORY_LEVELS",
    "ORG_FIELDS",
    "TABLE_KEYS",
    "AuthorizationError",
    "BaseRepository",
    "ConditionKind",
    "DirectoryRepository",
    "MalformedScopeError",
    "RLSConditions",
    "RLSTable",
    "ResourceLineage",
    "ResourceType",
    "RoleAssignment",
    "ScopeLevel",
    "ScopeViolationError",
    "UnauthenticatedError",
    "UserScope",
    "apply_rls_filter",
    "can_access",
    "directory_conditions",
    "fill_scope_defaults",
    "generate_conditions",
    "merge_requested_filters",
    "require_unrestricted",
    "require_scope",
    "resolve_scope",
    "table_conditions",
    "validate_resource_access",
    "validate_rls_read_scope",
    "validate_rls_write",
]
