from __future__ import annotations

from itertools import permutations

import pytest

from app.platform.security.conditions import ConditionKind, generate_conditions
from app.platform.security.context import RoleAssignment, ScopeLevel, UserScope
from app.platform.security.errors import AuthorizationError, UnauthenticatedError
from app.platform.security.scope import require_scope, resolve_scope


def test_resolve_scope_returns_none_without_assignments() -> None:
    assert resolve_scope([]) is None
    assert resolve_scope(None) is None


def test_most_restrictive_assignment_wins_over_superadmin() -> None:
    assignments = [
        RoleAssignment(scope=ScopeLevel.SUPERADMIN),
        RoleAssignment(scope=ScopeLevel.SMALLGROUP, small_group_id=3),
    ]

    user_scope = resolve_scope(assignments)

    assert user_scope == UserScope(scope=ScopeLevel.SMALLGROUP, small_group_id=3)
    conditions = generate_conditions(user_scope)
    assert conditions.kind == ConditionKind.RESTRICTED
    assert conditions.as_filter() == {"small_group_id": 3}


def test_resolution_does_not_depend_on_assignment_order() -> None:
    assignments = [
        RoleAssignment(scope=ScopeLevel.NATIONAL),
        RoleAssignment(scope=ScopeLevel.REGION, region_id=1),
        RoleAssignment(scope=ScopeLevel.UNIVERSITY, university_id=4, region_id=1),
    ]

    resolved = {resolve_scope(list(order)) for order in permutations(assignments)}

    assert resolved == {UserScope(scope=ScopeLevel.UNIVERSITY, university_id=4, region_id=1)}


def test_alumni_scope_is_the_narrowest_level() -> None:
    user_scope = resolve_scope(
        [
            RoleAssignment(scope=ScopeLevel.ALUMNISMALLGROUP, alumni_group_id=9, region_id=2),
            RoleAssignment(scope=ScopeLevel.SMALLGROUP, small_group_id=3),
        ]
    )

    assert user_scope is not None
    assert user_scope.scope == ScopeLevel.ALUMNISMALLGROUP
    assert user_scope.alumni_group_id == 9


def test_equal_precedence_keeps_first_assignment() -> None:
    user_scope = resolve_scope(
        [
            RoleAssignment(scope=ScopeLevel.REGION, region_id=1),
            RoleAssignment(scope=ScopeLevel.REGION, region_id=2),
        ]
    )

    assert user_scope is not None
    assert user_scope.region_id == 1


def test_require_scope_raises_unauthenticated_for_absent_scope() -> None:
    with pytest.raises(UnauthenticatedError):
        require_scope([])


def test_unauthenticated_is_not_an_authorization_error() -> None:
    assert not issubclass(UnauthenticatedError, AuthorizationError)


def test_precedence_ranks() -> None:
    ranks = [level.precedence for level in ScopeLevel]

    assert ranks == [1, 2, 3, 4, 5, 6]
    assert ScopeLevel.SUPERADMIN.is_unrestricted
    assert ScopeLevel.NATIONAL.is_unrestricted
    assert not ScopeLevel.REGION.is_unrestricted


def test_role_assignment_from_mapping_accepts_camel_and_snake_case() -> None:
    camel = RoleAssignment.from_mapping({"scope": "smallgroup", "smallGroupId": "3", "universityId": 4, "regionId": None})
    snake = RoleAssignment.from_mapping({"scope": "SMALLGROUP", "small_group_id": 3, "university_id": "4"})

    assert camel == snake == RoleAssignment(scope=ScopeLevel.SMALLGROUP, small_group_id=3, university_id=4)


def test_role_assignment_from_mapping_rejects_unknown_scope() -> None:
    with pytest.raises(ValueError):
        RoleAssignment.from_mapping({"scope": "galaxy", "regionId": 1})


@pytest.mark.parametrize("value", [True, False, 1.9, "1.5"])
def test_role_assignment_from_mapping_rejects_non_integral_identifiers(value: object) -> None:
    with pytest.raises(ValueError):
        RoleAssignment.from_mapping({"scope": "region", "regionId": value})


def test_role_assignment_from_mapping_accepts_whole_float_identifier() -> None:
    assert RoleAssignment.from_mapping({"scope": "region", "regionId": 2.0}).region_id == 2


def test_role_assignment_from_mapping_treats_blank_identifier_as_missing() -> None:
    assignment = RoleAssignment.from_mapping({"scope": "region", "regionId": ""})

    assert assignment.region_id is None
    assert not UserScope.from_assignment(assignment).is_well_formed
