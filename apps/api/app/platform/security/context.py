from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from enum import StrEnum
from typing import Any


class ScopeLevel(StrEnum):
    SUPERADMIN = "superadmin"
    NATIONAL = "national"
    REGION = "region"
    UNIVERSITY = "university"
    SMALLGROUP = "smallgroup"
    ALUMNISMALLGROUP = "alumnismallgroup"

    @property
    def precedence(self) -> int:
        """Rank of the level; a higher number is a narrower scope."""

        return _PRECEDENCE[self]

    @property
    def defining_field(self) -> str | None:
        """Identifier a role at this level must carry, or None for unrestricted levels."""

        return _DEFINING_FIELD[self]

    @property
    def is_unrestricted(self) -> bool:
        return self in {ScopeLevel.SUPERADMIN, ScopeLevel.NATIONAL}


_PRECEDENCE: dict[ScopeLevel, int] = {
    ScopeLevel.SUPERADMIN: 1,
    ScopeLevel.NATIONAL: 2,
    ScopeLevel.REGION: 3,
    ScopeLevel.UNIVERSITY: 4,
    ScopeLevel.SMALLGROUP: 5,
    ScopeLevel.ALUMNISMALLGROUP: 6,
}

_DEFINING_FIELD: dict[ScopeLevel, str | None] = {
    ScopeLevel.SUPERADMIN: None,
    ScopeLevel.NATIONAL: None,
    ScopeLevel.REGION: "region_id",
    ScopeLevel.UNIVERSITY: "university_id",
    ScopeLevel.SMALLGROUP: "small_group_id",
    ScopeLevel.ALUMNISMALLGROUP: "alumni_group_id",
}

_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "region_id": ("region_id", "regionId"),
    "university_id": ("university_id", "universityId"),
    "small_group_id": ("small_group_id", "smallGroupId"),
    "alumni_group_id": ("alumni_group_id", "alumniGroupId"),
}

ORG_FIELDS: tuple[str, ...] = tuple(_FIELD_ALIASES)


def _optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"boolean is not an organizational id: {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"non-integral organizational id: {value!r}")
    return int(value)


@dataclass(frozen=True, slots=True)
class RoleAssignment:
    """One role row held by a principal, as supplied by the identity collaborator."""

    scope: ScopeLevel
    region_id: int | None = None
    university_id: int | None = None
    small_group_id: int | None = None
    alumni_group_id: int | None = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> RoleAssignment:
        """Build an assignment from session claims or a db row mapping.

        Accepts both camelCase (``regionId``) and snake_case keys. Raises
        ``ValueError`` for an unknown scope tag.
        """

        values: dict[str, int | None] = {}
        for field_name, aliases in _FIELD_ALIASES.items():
            values[field_name] = next(
                (_optional_int(raw[alias]) for alias in aliases if raw.get(alias) is not None),
                None,
            )
        return cls(scope=ScopeLevel(str(raw.get("scope", "")).lower()), **values)


@dataclass(frozen=True, slots=True)
class UserScope:
    """Effective authorization context of one principal for one request."""

    scope: ScopeLevel
    region_id: int | None = None
    university_id: int | None = None
    small_group_id: int | None = None
    alumni_group_id: int | None = None

    @classmethod
    def from_assignment(cls, assignment: RoleAssignment) -> UserScope:
        return cls(
            scope=assignment.scope,
            region_id=assignment.region_id,
            university_id=assignment.university_id,
            small_group_id=assignment.small_group_id,
            alumni_group_id=assignment.alumni_group_id,
        )

    @property
    def is_well_formed(self) -> bool:
        field_name = self.scope.defining_field
        return field_name is None or getattr(self, field_name) is not None

    def as_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["scope"] = self.scope.value
        return payload
