from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy import Select, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.ministry.models import ContributionDesignation, PermanentMinistryEvent
from app.ministry.repository import DesignationRepository, EventRepository
from app.ministry.schemas import DesignationCreate, DesignationRead, EventCreate, EventRead
from app.organization.service import verify_lineage
from app.platform.security.context import ORG_FIELDS, UserScope
from app.platform.security.errors import AuthorizationError
from app.platform.security.repository import BaseRepository
from app.platform.security.rls import fill_scope_defaults


def _scoped_payload(repository: BaseRepository, session: Session, user_scope: UserScope, dto: Any, *, action: str) -> dict[str, Any]:
    payload = fill_scope_defaults(dto.model_dump(mode="python"), user_scope)
    try:
        repository.validate_write_security(payload, user_scope, action=action)
    except AuthorizationError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    verify_lineage(session, **{name: payload[name] for name in ORG_FIELDS})
    return payload


def _load_scoped(repository: BaseRepository, session: Session, user_scope: UserScope, entity_id: int, *, label: str, action: str) -> Any:
    entity = session.get(repository.model, entity_id)
    if entity is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")

    record = {name: getattr(entity, name) for name in ORG_FIELDS}
    try:
        repository.validate_read_scope(user_scope, record, action=action)
    except AuthorizationError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    return entity


@dataclass(slots=True)
class EventService:
    event_repository: EventRepository = EventRepository()

    def list_events(
        self,
        session: Session,
        user_scope: UserScope,
        *,
        region_id: int | None = None,
        university_id: int | None = None,
        small_group_id: int | None = None,
        alumni_group_id: int | None = None,
        event_type: str | None = None,
    ) -> list[EventRead]:
        stmt: Select[tuple[PermanentMinistryEvent]] = select(PermanentMinistryEvent)
        try:
            stmt = self.event_repository.apply_scope_query(
                stmt,
                user_scope,
                requested={
                    "region_id": region_id,
                    "university_id": university_id,
                    "small_group_id": small_group_id,
                    "alumni_group_id": alumni_group_id,
                },
            )
        except AuthorizationError as exc:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))

        if event_type is not None:
            stmt = stmt.where(PermanentMinistryEvent.type == event_type)
        rows = session.scalars(
            stmt.order_by(PermanentMinistryEvent.created_at.desc(), PermanentMinistryEvent.id.desc())
        ).all()
        return [EventRead.model_validate(row) for row in rows]

    def get_event(self, session: Session, user_scope: UserScope, event_id: int) -> EventRead:
        event = _load_scoped(self.event_repository, session, user_scope, event_id, label="event", action="read")
        return EventRead.model_validate(event)

    def create_event(self, session: Session, user_scope: UserScope, dto: EventCreate) -> EventRead:
        payload = _scoped_payload(self.event_repository, session, user_scope, dto, action="create")
        if payload["region_id"] is None:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="region_id is required")

        payload["name"] = payload["name"].strip()
        payload["type"] = payload["type"].strip()
        event = PermanentMinistryEvent(**payload)
        session.add(event)
        session.commit()
        session.refresh(event)
        return EventRead.model_validate(event)

    def update_event(self, session: Session, user_scope: UserScope, event_id: int, dto: EventCreate) -> EventRead:
        event = _load_scoped(self.event_repository, session, user_scope, event_id, label="event", action="update")
        payload = _scoped_payload(self.event_repository, session, user_scope, dto, action="update")
        if payload["region_id"] is None:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="region_id is required")

        payload["name"] = payload["name"].strip()
        payload["type"] = payload["type"].strip()
        for key, value in payload.items():
            setattr(event, key, value)
        session.commit()
        session.refresh(event)
        return EventRead.model_validate(event)

    def delete_event(self, session: Session, user_scope: UserScope, event_id: int) -> None:
        event = _load_scoped(self.event_repository, session, user_scope, event_id, label="event", action="delete")
        session.delete(event)
        session.commit()


@dataclass(slots=True)
class DesignationService:
    designation_repository: DesignationRepository = DesignationRepository()

    def list_designations(
        self,
        session: Session,
        user_scope: UserScope,
        *,
        region_id: int | None = None,
        university_id: int | None = None,
        small_group_id: int | None = None,
        is_active: bool | None = None,
    ) -> list[DesignationRead]:
        stmt: Select[tuple[ContributionDesignation]] = select(ContributionDesignation)
        try:
            stmt = self.designation_repository.apply_scope_query(
                stmt,
                user_scope,
                requested={"region_id": region_id, "university_id": university_id, "small_group_id": small_group_id},
            )
        except AuthorizationError as exc:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))

        if is_active is not None:
            stmt = stmt.where(ContributionDesignation.is_active.is_(is_active))
        rows = session.scalars(
            stmt.order_by(ContributionDesignation.created_at.desc(), ContributionDesignation.id.desc())
        ).all()
        return [DesignationRead.model_validate(row) for row in rows]

    def get_designation(self, session: Session, user_scope: UserScope, designation_id: int) -> DesignationRead:
        designation = _load_scoped(
            self.designation_repository, session, user_scope, designation_id, label="designation", action="read"
        )
        return DesignationRead.model_validate(designation)

    def create_designation(self, session: Session, user_scope: UserScope, dto: DesignationCreate) -> DesignationRead:
        payload = _scoped_payload(self.designation_repository, session, user_scope, dto, action="create")
        payload["name"] = payload["name"].strip()

        designation = ContributionDesignation(**payload)
        session.add(designation)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="designation with this name already exists")
        session.refresh(designation)
        return DesignationRead.model_validate(designation)

    def update_designation(
        self,
        session: Session,
        user_scope: UserScope,
        designation_id: int,
        dto: DesignationCreate,
    ) -> DesignationRead:
        designation = _load_scoped(
            self.designation_repository, session, user_scope, designation_id, label="designation", action="update"
        )
        payload = _scoped_payload(self.designation_repository, session, user_scope, dto, action="update")
        payload["name"] = payload["name"].strip()

        for key, value in payload.items():
            setattr(designation, key, value)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="designation with this name already exists")
        session.refresh(designation)
        return DesignationRead.model_validate(designation)

    def delete_designation(self, session: Session, user_scope: UserScope, designation_id: int) -> None:
        designation = _load_scoped(
            self.designation_repository, session, user_scope, designation_id, label="designation", action="delete"
        )
        session.delete(designation)
        session.commit()


event_service = EventService()
designation_service = DesignationService()
