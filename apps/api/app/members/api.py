from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.identity.dependencies import get_user_scope
from app.members.schemas import MemberCreate, MemberRead
from app.members.service import member_service
from app.platform.security.context import UserScope


router = APIRouter(prefix="/members", tags=["members"])


@router.get("", response_model=list[MemberRead])
def list_members(
    region_id: int | None = Query(default=None, alias="regionId"),
    university_id: int | None = Query(default=None, alias="universityId"),
    small_group_id: int | None = Query(default=None, alias="smallGroupId"),
    alumni_group_id: int | None = Query(default=None, alias="alumniGroupId"),
    member_type: str | None = Query(default=None, alias="type"),
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> list[MemberRead]:
    return member_service.list_members(
        db,
        user_scope,
        region_id=region_id,
        university_id=university_id,
        small_group_id=small_group_id,
        alumni_group_id=alumni_group_id,
        member_type=member_type,
    )


@router.post("", response_model=MemberRead, status_code=status.HTTP_201_CREATED)
def create_member(
    dto: MemberCreate,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> MemberRead:
    return member_service.create_member(db, user_scope, dto)


@router.get("/{member_id}", response_model=MemberRead)
def get_member(
    member_id: int,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> MemberRead:
    return member_service.get_member(db, user_scope, member_id)


@router.put("/{member_id}", response_model=MemberRead)
def update_member(
    member_id: int,
    dto: MemberCreate,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> MemberRead:
    return member_service.update_member(db, user_scope, member_id, dto)


@router.delete("/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_member(
    member_id: int,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> None:
    member_service.delete_member(db, user_scope, member_id)
