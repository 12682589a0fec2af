from __future__ import annotations

import pytest

from app.platform.security.conditions import ConditionKind, RLSConditions, generate_conditions
from app.platform.security.context import ScopeLevel, UserScope


@pytest.mark.parametrize("scope", [ScopeLevel.SUPERADMIN, ScopeLevel.NATIONAL])
def test_superadmin_and_national_are_unrestricted(scope: ScopeLevel) -> None:
    conditions = generate_conditions(UserScope(scope=scope, region_id=7))

    assert conditions.is_unrestricted
    assert conditions.as_filter() == {}


def test_region_scope_yields_only_region_id() -> None:
    conditions = generate_conditions(UserScope(scope=ScopeLevel.REGION, region_id=1, university_id=5, small_group_id=6))

    assert conditions.kind == ConditionKind.RESTRICTED
    assert conditions.as_filter() == {"region_id": 1}


def test_university_scope_carries_region_when_present() -> None:
    with_region = generate_conditions(UserScope(scope=ScopeLevel.UNIVERSITY, university_id=4, region_id=1))
    without_region = generate_conditions(UserScope(scope=ScopeLevel.UNIVERSITY, university_id=4))

    assert with_region.as_filter() == {"university_id": 4, "region_id": 1}
    assert without_region.as_filter() == {"university_id": 4}


def test_smallgroup_scope_carries_known_ancestors() -> None:
    conditions = generate_conditions(
        UserScope(scope=ScopeLevel.SMALLGROUP, small_group_id=3, university_id=4, region_id=1)
    )

    assert conditions.as_filter() == {"small_group_id": 3, "university_id": 4, "region_id": 1}


def test_alumni_scope_carries_region_but_never_university() -> None:
    conditions = generate_conditions(
        UserScope(scope=ScopeLevel.ALUMNISMALLGROUP, alumni_group_id=9, region_id=2, university_id=4)
    )

    assert conditions.as_filter() == {"alumni_group_id": 9, "region_id": 2}


@pytest.mark.parametrize(
    "user_scope",
    [
        UserScope(scope=ScopeLevel.REGION),
        UserScope(scope=ScopeLevel.UNIVERSITY, region_id=1),
        UserScope(scope=ScopeLevel.SMALLGROUP, university_id=4, region_id=1),
        UserScope(scope=ScopeLevel.ALUMNISMALLGROUP, region_id=1),
    ],
)
def test_missing_defining_identifier_is_denied_not_unrestricted(user_scope: UserScope) -> None:
    conditions = generate_conditions(user_scope)

    assert conditions.is_denied
    assert not conditions.is_unrestricted
    assert conditions.as_filter() == {}
    assert not user_scope.is_well_formed


def test_restricted_constructor_drops_null_values() -> None:
    conditions = RLSConditions.restricted({"region_id": 1, "university_id": None})

    assert conditions.as_filter() == {"region_id": 1}
    assert conditions.get("university_id") is None


def test_only_narrows_restricted_and_passes_other_kinds_through() -> None:
    restricted = RLSConditions.restricted({"region_id": 1, "small_group_id": 3})

    assert restricted.only(["region_id"]).as_filter() == {"region_id": 1}
    assert RLSConditions.unrestricted().only(["region_id"]).is_unrestricted
    assert RLSConditions.denied().only(["region_id"]).is_denied
