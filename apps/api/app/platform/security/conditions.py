from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from app.platform.security.context import ScopeLevel, UserScope


class ConditionKind(StrEnum):
    UNRESTRICTED = "unrestricted"
    RESTRICTED = "restricted"
    DENIED = "denied"


class RLSTable(StrEnum):
    MEMBER = "member"
    TRAININGS = "trainings"
    PERMANENT_MINISTRY_EVENT = "permanentministryevent"
    BUDGET = "budget"
    DOCUMENT = "document"
    CONTRIBUTION_DESIGNATION = "contributiondesignation"
    UNIVERSITY = "university"
    SMALLGROUP = "smallgroup"
    ALUMNISMALLGROUP = "alumnismallgroup"
    REGION = "region"


# Foreign keys each table actually carries. The region table is handled separately.
TABLE_KEYS: dict[RLSTable, tuple[str, ...]] = {
    RLSTable.MEMBER: ("region_id", "university_id", "small_group_id", "alumni_group_id"),
    RLSTable.TRAININGS: ("region_id", "university_id", "small_group_id", "alumni_group_id"),
    RLSTable.PERMANENT_MINISTRY_EVENT: ("region_id", "university_id", "small_group_id", "alumni_group_id"),
    RLSTable.BUDGET: ("region_id", "university_id", "small_group_id", "alumni_group_id"),
    RLSTable.DOCUMENT: ("region_id", "university_id", "small_group_id", "alumni_group_id"),
    RLSTable.CONTRIBUTION_DESIGNATION: ("region_id", "university_id", "small_group_id", "alumni_group_id"),
    RLSTable.UNIVERSITY: ("region_id",),
    RLSTable.SMALLGROUP: ("region_id", "university_id"),
    RLSTable.ALUMNISMALLGROUP: ("region_id",),
}


@dataclass(frozen=True, slots=True)
class RLSConditions:
    """Tri-state row filter derived from a user scope.

    ``filters`` maps column names to the value rows must equal. It is empty
    for both UNRESTRICTED and DENIED results; ``kind`` tells them apart.
    """

    kind: ConditionKind
    filters: Mapping[str, int] = field(default_factory=dict)

    @classmethod
    def unrestricted(cls) -> RLSConditions:
        return cls(kind=ConditionKind.UNRESTRICTED)

    @classmethod
    def restricted(cls, filters: Mapping[str, int | None]) -> RLSConditions:
        return cls(
            kind=ConditionKind.RESTRICTED,
            filters={key: value for key, value in filters.items() if value is not None},
        )

    @classmethod
    def denied(cls) -> RLSConditions:
        return cls(kind=ConditionKind.DENIED)

    @property
    def is_unrestricted(self) -> bool:
        return self.kind == ConditionKind.UNRESTRICTED

    @property
    def is_denied(self) -> bool:
        return self.kind == ConditionKind.DENIED

    def get(self, key: str) -> int | None:
        return self.filters.get(key)

    def only(self, keys: Iterable[str]) -> RLSConditions:
        if self.kind != ConditionKind.RESTRICTED:
            return self
        allowed = set(keys)
        return RLSConditions.restricted({key: value for key, value in self.filters.items() if key in allowed})

    def as_filter(self) -> dict[str, int]:
        return dict(self.filters)


def generate_conditions(user_scope: UserScope) -> RLSConditions:
    """Map a resolved scope to the organizational subtree it may see.

    A scope missing its own defining identifier yields DENIED, never the
    unrestricted result reserved for superadmin and national roles.
    """

    scope = user_scope.scope

    if scope.is_unrestricted:
        return RLSConditions.unrestricted()

    if scope == ScopeLevel.REGION and user_scope.region_id is not None:
        return RLSConditions.restricted({"region_id": user_scope.region_id})

    if scope == ScopeLevel.UNIVERSITY and user_scope.university_id is not None:
        return RLSConditions.restricted(
            {
                "university_id": user_scope.university_id,
                "region_id": user_scope.region_id,
            }
        )

    if scope == ScopeLevel.SMALLGROUP and user_scope.small_group_id is not None:
        return RLSConditions.restricted(
            {
                "small_group_id": user_scope.small_group_id,
                "university_id": user_scope.university_id,
                "region_id": user_scope.region_id,
            }
        )

    if scope == ScopeLevel.ALUMNISMALLGROUP and user_scope.alumni_group_id is not None:
        return RLSConditions.restricted(
            {
                "alumni_group_id": user_scope.alumni_group_id,
                "region_id": user_scope.region_id,
            }
        )

    return RLSConditions.denied()


def table_conditions(user_scope: UserScope, table_name: str) -> RLSConditions:
    """Narrow the generated conditions to the foreign keys ``table_name`` has.

    Raises ``ValueError`` for a table outside the known set.
    """

    table = RLSTable(table_name)
    conditions = generate_conditions(user_scope)
    if conditions.is_denied:
        return conditions

    if table == RLSTable.REGION:
        if user_scope.scope == ScopeLevel.REGION:
            return RLSConditions.restricted({"id": user_scope.region_id})
        return RLSConditions.unrestricted()

    return conditions.only(TABLE_KEYS[table])


# Organizational tables and the scope level whose defining id is the row's own id.
DIRECTORY_LEVELS: dict[RLSTable, ScopeLevel] = {
    RLSTable.REGION: ScopeLevel.REGION,
    RLSTable.UNIVERSITY: ScopeLevel.UNIVERSITY,
    RLSTable.SMALLGROUP: ScopeLevel.SMALLGROUP,
    RLSTable.ALUMNISMALLGROUP: ScopeLevel.ALUMNISMALLGROUP,
}

# Directory tables whose rows a restricted scope may open individually.
_REACHABLE_DIRECTORIES: dict[ScopeLevel, frozenset[RLSTable]] = {
    ScopeLevel.REGION: frozenset(DIRECTORY_LEVELS),
    ScopeLevel.UNIVERSITY: frozenset({RLSTable.UNIVERSITY, RLSTable.SMALLGROUP}),
    ScopeLevel.SMALLGROUP: frozenset({RLSTable.SMALLGROUP}),
    ScopeLevel.ALUMNISMALLGROUP: frozenset({RLSTable.ALUMNISMALLGROUP}),
}


def directory_conditions(user_scope: UserScope, table_name: str, conditions: RLSConditions) -> RLSConditions:
    """Tighten list conditions on an organizational table to what ``can_access`` grants.

    The table adapter only carries ancestor foreign keys, so a small-group
    lead would otherwise see sibling groups and a leaf role without ancestor
    ids would see every row. Rows at the scope's own level are pinned to the
    scope's id; branches the scope cannot reach match nothing.
    """

    table = RLSTable(table_name)
    level = DIRECTORY_LEVELS.get(table)
    if level is None:
        raise ValueError(f"'{table.value}' is not an organizational directory table")

    if user_scope.scope.is_unrestricted or conditions.is_denied:
        return conditions
    if table not in _REACHABLE_DIRECTORIES[user_scope.scope]:
        return RLSConditions.denied()
    if user_scope.scope == level:
        own_id = getattr(user_scope, str(level.defining_field))
        return RLSConditions.restricted({**conditions.filters, "id": own_id})
    return conditions
