from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import false
from sqlalchemy.sql import Select

from app import audit
from app.context import get_principal_id
from app.metrics import observe_rls_denied_read, observe_rls_denied_write
from app.platform.security.access import ResourceLineage, ResourceType, can_access
from app.platform.security.conditions import RLSConditions, generate_conditions, table_conditions
from app.platform.security.context import ScopeLevel, UserScope
from app.platform.security.errors import MalformedScopeError, ScopeViolationError


_DIMENSION_LABELS = {
    "id": "region",
    "region_id": "region",
    "university_id": "university",
    "small_group_id": "small group",
    "alumni_group_id": "alumni group",
}

# Sibling branches a scope may not assign on write.
_FORBIDDEN_WRITE_FIELDS: dict[ScopeLevel, tuple[str, ...]] = {
    ScopeLevel.UNIVERSITY: ("alumni_group_id",),
    ScopeLevel.SMALLGROUP: ("alumni_group_id",),
    ScopeLevel.ALUMNISMALLGROUP: ("university_id", "small_group_id"),
}


def apply_rls_filter(query: Select[Any], model: type[Any], conditions: RLSConditions) -> Select[Any]:
    """Apply RLS conditions as equality filters on ``model``'s columns."""

    if conditions.is_unrestricted:
        return query
    if conditions.is_denied:
        return query.where(false())

    for column_name, value in conditions.filters.items():
        column = getattr(model, column_name, None)
        if column is None:
            raise ValueError(f"{model.__name__} has no column '{column_name}' for RLS filtering")
        query = query.where(column == value)
    return query


def merge_requested_filters(
    resource: str,
    user_scope: UserScope,
    conditions: RLSConditions,
    requested: Mapping[str, int | None],
) -> RLSConditions:
    """Merge client-supplied filters into the resolved conditions.

    A client filter may narrow the result but never contradict a resolved
    key: a region-scoped caller asking for another region is rejected.
    """

    _ensure_not_denied(resource, user_scope, conditions, is_read=True)

    merged = conditions.as_filter()
    for key, value in requested.items():
        if value is None:
            continue
        resolved = conditions.get(key)
        if resolved is not None and resolved != value:
            dimension = _DIMENSION_LABELS.get(key, key)
            _emit_rls_denied(
                resource=resource,
                action="list",
                scope_type=dimension,
                scope_value=str(value),
                user_scope=user_scope,
                is_read=True,
            )
            raise ScopeViolationError(resource, dimension)
        merged[key] = value

    if conditions.is_unrestricted and not merged:
        return conditions
    return RLSConditions.restricted(merged)


def fill_scope_defaults(payload: Mapping[str, Any], user_scope: UserScope) -> dict[str, Any]:
    """Copy the scope's own identifiers into organizational fields the payload leaves empty."""

    filled = dict(payload)
    for key, value in generate_conditions(user_scope).filters.items():
        if filled.get(key) is None:
            filled[key] = value
    return filled


def validate_rls_write(resource: str, payload: Mapping[str, Any], user_scope: UserScope, *, action: str = "write") -> None:
    """Validate that every organizational id in ``payload`` lies within scope."""

    conditions = generate_conditions(user_scope)
    _ensure_not_denied(resource, user_scope, conditions, is_read=False)
    if conditions.is_unrestricted:
        return

    for key, resolved in conditions.filters.items():
        value = payload.get(key)
        if value is not None and value != resolved:
            dimension = _DIMENSION_LABELS[key]
            _emit_rls_denied(
                resource=resource,
                action=action,
                scope_type=dimension,
                scope_value=str(value),
                user_scope=user_scope,
                is_read=False,
            )
            raise ScopeViolationError(resource, dimension, f"Access denied - {dimension} mismatch")

    for key in _FORBIDDEN_WRITE_FIELDS.get(user_scope.scope, ()):
        value = payload.get(key)
        if value is not None:
            dimension = _DIMENSION_LABELS[key]
            _emit_rls_denied(
                resource=resource,
                action=action,
                scope_type=dimension,
                scope_value=str(value),
                user_scope=user_scope,
                is_read=False,
            )
            raise ScopeViolationError(
                resource,
                dimension,
                f"Access denied - cannot assign {dimension} at {user_scope.scope.value} scope",
            )


def validate_rls_read_scope(
    resource: str,
    table: str,
    user_scope: UserScope,
    record: Mapping[str, Any],
    *,
    action: str = "read",
) -> None:
    """Validate a loaded record against the same conditions list queries use."""

    conditions = table_conditions(user_scope, table)
    _ensure_not_denied(resource, user_scope, conditions, is_read=action == "read")
    if conditions.is_unrestricted:
        return

    for key, resolved in conditions.filters.items():
        value = record.get(key)
        if value != resolved:
            dimension = _DIMENSION_LABELS.get(key, key)
            _emit_rls_denied(
                resource=resource,
                action=action,
                scope_type=dimension,
                scope_value=str(value),
                user_scope=user_scope,
                is_read=action == "read",
            )
            raise ScopeViolationError(resource, dimension, f"Access denied - {resource} not in your {dimension}")


def validate_resource_access(
    resource: str,
    user_scope: UserScope,
    resource_type: ResourceType,
    resource_id: int,
    *,
    lineage: ResourceLineage | None = None,
    action: str = "read",
) -> None:
    """Raise unless ``can_access`` grants the principal this organizational resource."""

    if not user_scope.is_well_formed:
        _ensure_not_denied(resource, user_scope, RLSConditions.denied(), is_read=action == "read")

    if can_access(user_scope, resource_type, resource_id, lineage):
        return

    dimension = resource_type.value
    _emit_rls_denied(
        resource=resource,
        action=action,
        scope_type=dimension,
        scope_value=str(resource_id),
        user_scope=user_scope,
        is_read=action == "read",
    )
    raise ScopeViolationError(resource, dimension, "Access denied")


def _ensure_not_denied(resource: str, user_scope: UserScope, conditions: RLSConditions, *, is_read: bool) -> None:
    if not conditions.is_denied:
        return
    _emit_rls_denied(
        resource=resource,
        action="resolve",
        scope_type="malformed",
        scope_value=user_scope.scope.value,
        user_scope=user_scope,
        is_read=is_read,
    )
    raise MalformedScopeError(user_scope.scope.value)


def _emit_rls_denied(
    *,
    resource: str,
    action: str,
    scope_type: str,
    scope_value: str,
    user_scope: UserScope,
    is_read: bool,
) -> None:
    if is_read:
        observe_rls_denied_read(resource=resource, scope_type=scope_type)
    else:
        observe_rls_denied_write(resource=resource, scope_type=scope_type)

    audit.record(
        actor_user_id=get_principal_id() or "anonymous",
        entity_type="security.rls",
        entity_id="scope",
        action="rls.denied",
        before=None,
        after={
            "resource": resource,
            "action": action,
            "scope_type": scope_type,
            "scope_value": scope_value,
            "user_scope": user_scope.as_dict(),
        },
    )


def require_unrestricted(resource: str, user_scope: UserScope, *, action: str = "write") -> None:
    """Raise unless the principal holds a superadmin or national scope."""

    if user_scope.scope.is_unrestricted:
        return
    _ensure_not_denied(resource, user_scope, generate_conditions(user_scope), is_read=False)
    _emit_rls_denied(
        resource=resource,
        action=action,
        scope_type="scope",
        scope_value=user_scope.scope.value,
        user_scope=user_scope,
        is_read=False,
    )
    raise ScopeViolationError(resource, "scope", f"Access denied - {action} requires national authority")
