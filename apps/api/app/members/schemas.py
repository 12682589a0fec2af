from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

MEMBER_TYPE_PATTERN = "^(student|graduate|staff|volunteer|alumni)$"
MEMBER_STATUS_PATTERN = "^(active|pre_graduate|graduate|alumni|inactive)$"


class MemberCreate(BaseModel):
    first_name: str = Field(min_length=1, max_length=255)
    second_name: str = Field(min_length=1, max_length=255)
    gender: str | None = Field(default=None, pattern="^(male|female)$")
    birthdate: date | None = None
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=64)
    type: str = Field(pattern=MEMBER_TYPE_PATTERN)
    status: str = Field(default="active", pattern=MEMBER_STATUS_PATTERN)
    local_church: str | None = None
    faculty: str | None = None
    graduation_date: date | None = None
    region_id: int | None = Field(default=None, gt=0)
    university_id: int | None = Field(default=None, gt=0)
    small_group_id: int | None = Field(default=None, gt=0)
    alumni_group_id: int | None = Field(default=None, gt=0)


class MemberRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    second_name: str
    gender: str | None
    birthdate: date | None
    email: str | None
    phone: str | None
    type: str
    status: str
    local_church: str | None
    faculty: str | None
    graduation_date: date | None
    region_id: int | None
    university_id: int | None
    small_group_id: int | None
    alumni_group_id: int | None
    created_at: datetime
    updated_at: datetime
