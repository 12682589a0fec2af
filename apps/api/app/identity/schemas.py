from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.platform.security.conditions import ConditionKind
from app.platform.security.context import ScopeLevel


class UserRoleCreate(BaseModel):
    user_id: str = Field(min_length=1, max_length=255)
    scope: ScopeLevel
    region_id: int | None = Field(default=None, gt=0)
    university_id: int | None = Field(default=None, gt=0)
    small_group_id: int | None = Field(default=None, gt=0)
    alumni_group_id: int | None = Field(default=None, gt=0)


class UserRoleRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    scope: str
    region_id: int | None
    university_id: int | None
    small_group_id: int | None
    alumni_group_id: int | None
    assigned_at: datetime


class ConditionsRead(BaseModel):
    kind: ConditionKind
    filters: dict[str, int]


class MyScopeRead(BaseModel):
    user_id: str
    scope: dict[str, Any]
    well_formed: bool
    conditions: ConditionsRead
