from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RegionCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)


class RegionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    created_at: datetime


class UniversityCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    region_id: int = Field(gt=0)


class UniversityRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    region_id: int
    created_at: datetime


class SmallGroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    region_id: int = Field(gt=0)
    university_id: int = Field(gt=0)


class SmallGroupRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    region_id: int
    university_id: int
    created_at: datetime


class AlumniSmallGroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    region_id: int = Field(gt=0)


class AlumniSmallGroupRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    region_id: int
    created_at: datetime
