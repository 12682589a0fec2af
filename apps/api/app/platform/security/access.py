from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from app.platform.security.context import ScopeLevel, UserScope


class ResourceType(StrEnum):
    REGION = "region"
    UNIVERSITY = "university"
    SMALLGROUP = "smallgroup"
    ALUMNISMALLGROUP = "alumnismallgroup"


@dataclass(frozen=True, slots=True)
class ResourceLineage:
    """Ancestors of a loaded organizational resource."""

    region_id: int | None = None
    university_id: int | None = None


def can_access(
    user_scope: UserScope,
    resource_type: ResourceType | str,
    resource_id: int,
    lineage: ResourceLineage | None = None,
) -> bool:
    """Point check: may this principal touch ``resource_type`` #``resource_id``.

    Region- and university-scoped principals are granted descendants on the
    strength of holding the ancestor id alone. Passing ``lineage`` switches
    those grants to verifying the descendant's actual ancestor.
    """

    resource_type = ResourceType(resource_type)
    scope = user_scope.scope

    if scope.is_unrestricted:
        return True

    if resource_type == ResourceType.REGION:
        return _owns(user_scope, ScopeLevel.REGION, user_scope.region_id, resource_id)

    if resource_type == ResourceType.UNIVERSITY:
        return _owns(user_scope, ScopeLevel.UNIVERSITY, user_scope.university_id, resource_id) or _region_grant(
            user_scope, lineage
        )

    if resource_type == ResourceType.SMALLGROUP:
        return (
            _owns(user_scope, ScopeLevel.SMALLGROUP, user_scope.small_group_id, resource_id)
            or _university_grant(user_scope, lineage)
            or _region_grant(user_scope, lineage)
        )

    if resource_type == ResourceType.ALUMNISMALLGROUP:
        return _owns(user_scope, ScopeLevel.ALUMNISMALLGROUP, user_scope.alumni_group_id, resource_id) or _region_grant(
            user_scope, lineage
        )

    return False


def _owns(user_scope: UserScope, level: ScopeLevel, owned_id: int | None, resource_id: int) -> bool:
    return user_scope.scope == level and owned_id is not None and owned_id == resource_id


def _region_grant(user_scope: UserScope, lineage: ResourceLineage | None) -> bool:
    if user_scope.scope != ScopeLevel.REGION or user_scope.region_id is None:
        return False
    return lineage is None or lineage.region_id == user_scope.region_id


def _university_grant(user_scope: UserScope, lineage: ResourceLineage | None) -> bool:
    if user_scope.scope != ScopeLevel.UNIVERSITY or user_scope.university_id is None:
        return False
    return lineage is None or lineage.university_id == user_scope.university_id
