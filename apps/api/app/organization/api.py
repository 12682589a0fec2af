from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.identity.dependencies import get_user_scope
from app.organization.schemas import (
    AlumniSmallGroupCreate,
    AlumniSmallGroupRead,
    RegionCreate,
    RegionRead,
    SmallGroupCreate,
    SmallGroupRead,
    UniversityCreate,
    UniversityRead,
)
from app.organization.service import organization_service
from app.platform.security.context import UserScope


router = APIRouter(tags=["organization"])


@router.get("/regions", response_model=list[RegionRead])
def list_regions(
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> list[RegionRead]:
    return organization_service.list_regions(db, user_scope)


@router.post("/regions", response_model=RegionRead, status_code=status.HTTP_201_CREATED)
def create_region(
    dto: RegionCreate,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> RegionRead:
    return organization_service.create_region(db, user_scope, dto)


@router.get("/regions/{region_id}", response_model=RegionRead)
def get_region(
    region_id: int,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> RegionRead:
    return organization_service.get_region(db, user_scope, region_id)


@router.put("/regions/{region_id}", response_model=RegionRead)
def update_region(
    region_id: int,
    dto: RegionCreate,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> RegionRead:
    return organization_service.update_region(db, user_scope, region_id, dto)


@router.delete("/regions/{region_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_region(
    region_id: int,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> None:
    organization_service.delete_region(db, user_scope, region_id)


@router.get("/universities", response_model=list[UniversityRead])
def list_universities(
    region_id: int | None = Query(default=None, alias="regionId"),
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> list[UniversityRead]:
    return organization_service.list_universities(db, user_scope, region_id=region_id)


@router.post("/universities", response_model=UniversityRead, status_code=status.HTTP_201_CREATED)
def create_university(
    dto: UniversityCreate,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> UniversityRead:
    return organization_service.create_university(db, user_scope, dto)


@router.get("/universities/{university_id}", response_model=UniversityRead)
def get_university(
    university_id: int,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> UniversityRead:
    return organization_service.get_university(db, user_scope, university_id)


@router.put("/universities/{university_id}", response_model=UniversityRead)
def update_university(
    university_id: int,
    dto: UniversityCreate,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> UniversityRead:
    return organization_service.update_university(db, user_scope, university_id, dto)


@router.delete("/universities/{university_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_university(
    university_id: int,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> None:
    organization_service.delete_university(db, user_scope, university_id)


@router.get("/small-groups", response_model=list[SmallGroupRead])
def list_small_groups(
    region_id: int | None = Query(default=None, alias="regionId"),
    university_id: int | None = Query(default=None, alias="universityId"),
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> list[SmallGroupRead]:
    return organization_service.list_small_groups(db, user_scope, region_id=region_id, university_id=university_id)


@router.post("/small-groups", response_model=SmallGroupRead, status_code=status.HTTP_201_CREATED)
def create_small_group(
    dto: SmallGroupCreate,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> SmallGroupRead:
    return organization_service.create_small_group(db, user_scope, dto)


@router.get("/small-groups/{small_group_id}", response_model=SmallGroupRead)
def get_small_group(
    small_group_id: int,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> SmallGroupRead:
    return organization_service.get_small_group(db, user_scope, small_group_id)


@router.put("/small-groups/{small_group_id}", response_model=SmallGroupRead)
def update_small_group(
    small_group_id: int,
    dto: SmallGroupCreate,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> SmallGroupRead:
    return organization_service.update_small_group(db, user_scope, small_group_id, dto)


@router.delete("/small-groups/{small_group_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_small_group(
    small_group_id: int,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> None:
    organization_service.delete_small_group(db, user_scope, small_group_id)


@router.get("/alumni-small-groups", response_model=list[AlumniSmallGroupRead])
def list_alumni_groups(
    region_id: int | None = Query(default=None, alias="regionId"),
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> list[AlumniSmallGroupRead]:
    return organization_service.list_alumni_groups(db, user_scope, region_id=region_id)


@router.post("/alumni-small-groups", response_model=AlumniSmallGroupRead, status_code=status.HTTP_201_CREATED)
def create_alumni_group(
    dto: AlumniSmallGroupCreate,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> AlumniSmallGroupRead:
    return organization_service.create_alumni_group(db, user_scope, dto)


@router.get("/alumni-small-groups/{alumni_group_id}", response_model=AlumniSmallGroupRead)
def get_alumni_group(
    alumni_group_id: int,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> AlumniSmallGroupRead:
    return organization_service.get_alumni_group(db, user_scope, alumni_group_id)


@router.put("/alumni-small-groups/{alumni_group_id}", response_model=AlumniSmallGroupRead)
def update_alumni_group(
    alumni_group_id: int,
    dto: AlumniSmallGroupCreate,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> AlumniSmallGroupRead:
    return organization_service.update_alumni_group(db, user_scope, alumni_group_id, dto)


@router.delete("/alumni-small-groups/{alumni_group_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_alumni_group(
    alumni_group_id: int,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> None:
    organization_service.delete_alumni_group(db, user_scope, alumni_group_id)
