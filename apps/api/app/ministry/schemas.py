from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class EventCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    type: str = Field(min_length=1, max_length=64)
    is_active: bool = True
    region_id: int | None = Field(default=None, gt=0)
    university_id: int | None = Field(default=None, gt=0)
    small_group_id: int | None = Field(default=None, gt=0)
    alumni_group_id: int | None = Field(default=None, gt=0)


class EventRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: str
    is_active: bool
    region_id: int
    university_id: int | None
    small_group_id: int | None
    alumni_group_id: int | None
    created_at: datetime
    updated_at: datetime


class DesignationCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    target_amount: Decimal | None = Field(default=None, ge=0)
    current_amount: Decimal = Field(default=Decimal("0"), ge=0)
    is_active: bool = True
    region_id: int | None = Field(default=None, gt=0)
    university_id: int | None = Field(default=None, gt=0)
    small_group_id: int | None = Field(default=None, gt=0)
    alumni_group_id: int | None = Field(default=None, gt=0)


class DesignationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None
    target_amount: Decimal | None
    current_amount: Decimal
    is_active: bool
    region_id: int | None
    university_id: int | None
    small_group_id: int | None
    alumni_group_id: int | None
    created_at: datetime
    updated_at: datetime
