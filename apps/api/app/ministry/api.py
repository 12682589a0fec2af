from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.identity.dependencies import get_user_scope
from app.ministry.schemas import DesignationCreate, DesignationRead, EventCreate, EventRead
from app.ministry.service import designation_service, event_service
from app.platform.security.context import UserScope


events_router = APIRouter(prefix="/events", tags=["ministry.events"])
designations_router = APIRouter(prefix="/designations", tags=["ministry.designations"])


@events_router.get("", response_model=list[EventRead])
def list_events(
    region_id: int | None = Query(default=None, alias="regionId"),
    university_id: int | None = Query(default=None, alias="universityId"),
    small_group_id: int | None = Query(default=None, alias="smallGroupId"),
    alumni_group_id: int | None = Query(default=None, alias="alumniGroupId"),
    event_type: str | None = Query(default=None, alias="type"),
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> list[EventRead]:
    return event_service.list_events(
        db,
        user_scope,
        region_id=region_id,
        university_id=university_id,
        small_group_id=small_group_id,
        alumni_group_id=alumni_group_id,
        event_type=event_type,
    )


@events_router.post("", response_model=EventRead, status_code=status.HTTP_201_CREATED)
def create_event(
    dto: EventCreate,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> EventRead:
    return event_service.create_event(db, user_scope, dto)


@events_router.get("/{event_id}", response_model=EventRead)
def get_event(
    event_id: int,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> EventRead:
    return event_service.get_event(db, user_scope, event_id)


@events_router.put("/{event_id}", response_model=EventRead)
def update_event(
    event_id: int,
    dto: EventCreate,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> EventRead:
    return event_service.update_event(db, user_scope, event_id, dto)


@events_router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: int,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> None:
    event_service.delete_event(db, user_scope, event_id)


@designations_router.get("", response_model=list[DesignationRead])
def list_designations(
    region_id: int | None = Query(default=None, alias="regionId"),
    university_id: int | None = Query(default=None, alias="universityId"),
    small_group_id: int | None = Query(default=None, alias="smallGroupId"),
    is_active: bool | None = Query(default=None, alias="isActive"),
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> list[DesignationRead]:
    return designation_service.list_designations(
        db,
        user_scope,
        region_id=region_id,
        university_id=university_id,
        small_group_id=small_group_id,
        is_active=is_active,
    )


@designations_router.post("", response_model=DesignationRead, status_code=status.HTTP_201_CREATED)
def create_designation(
    dto: DesignationCreate,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> DesignationRead:
    return designation_service.create_designation(db, user_scope, dto)


@designations_router.get("/{designation_id}", response_model=DesignationRead)
def get_designation(
    designation_id: int,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> DesignationRead:
    return designation_service.get_designation(db, user_scope, designation_id)


@designations_router.put("/{designation_id}", response_model=DesignationRead)
def update_designation(
    designation_id: int,
    dto: DesignationCreate,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> DesignationRead:
    return designation_service.update_designation(db, user_scope, designation_id, dto)


@designations_router.delete("/{designation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_designation(
    designation_id: int,
    db: Session = Depends(get_db),
    user_scope: UserScope = Depends(get_user_scope),
) -> None:
    designation_service.delete_designation(db, user_scope, designation_id)
