from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from fastapi import HTTPException, status
from sqlalchemy import Select, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.organization.models import AlumniSmallGroup, Region, SmallGroup, University
from app.organization.repository import (
    AlumniSmallGroupRepository,
    RegionRepository,
    SmallGroupRepository,
    UniversityRepository,
)
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
from app.platform.security.access import ResourceLineage, ResourceType
from app.platform.security.context import UserScope
from app.platform.security.errors import AuthorizationError
from app.platform.security.rls import require_unrestricted, validate_resource_access

T = TypeVar("T")


def verify_lineage(
    session: Session,
    *,
    region_id: int | None = None,
    university_id: int | None = None,
    small_group_id: int | None = None,
    alumni_group_id: int | None = None,
) -> None:
    """Check referenced organizational units exist and belong to one another."""

    if region_id is not None and session.get(Region, region_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="region not found")

    university = None
    if university_id is not None:
        university = session.get(University, university_id)
        if university is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="university not found")
        if region_id is not None and university.region_id != region_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="university does not belong to the selected region",
            )

    if small_group_id is not None:
        small_group = session.get(SmallGroup, small_group_id)
        if small_group is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="small group not found")
        if university is not None and small_group.university_id != university.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="small group does not belong to the selected university",
            )
        if region_id is not None and small_group.region_id != region_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="small group does not belong to the selected region",
            )

    if alumni_group_id is not None:
        alumni_group = session.get(AlumniSmallGroup, alumni_group_id)
        if alumni_group is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="alumni small group not found")
        if region_id is not None and alumni_group.region_id != region_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="alumni small group does not belong to the selected region",
            )


def _lineage(region_id: int | None = None, university_id: int | None = None) -> ResourceLineage | None:
    if not get_settings().rls_verify_lineage:
        return None
    return ResourceLineage(region_id=region_id, university_id=university_id)


def _enforce(check: Callable[[], None]) -> None:
    try:
        check()
    except AuthorizationError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))


def _load(session: Session, model: type[T], entity_id: int, label: str) -> T:
    entity = session.get(model, entity_id)
    if entity is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
    return entity


def _commit(session: Session, entity: Any, conflict_detail: str) -> None:
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=conflict_detail)
    session.refresh(entity)


def _delete(session: Session, entity: Any, label: str) -> None:
    session.delete(entity)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"{label} is still referenced")


@dataclass(slots=True)
class OrganizationService:
    region_repository: RegionRepository = RegionRepository()
    university_repository: UniversityRepository = UniversityRepository()
    small_group_repository: SmallGroupRepository = SmallGroupRepository()
    alumni_group_repository: AlumniSmallGroupRepository = AlumniSmallGroupRepository()

    # Regions

    def list_regions(self, session: Session, user_scope: UserScope) -> list[RegionRead]:
        stmt: Select[tuple[Region]] = select(Region)
        try:
            stmt = self.region_repository.apply_scope_query(stmt, user_scope)
        except AuthorizationError as exc:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
        rows = session.scalars(stmt.order_by(Region.name.asc())).all()
        return [RegionRead.model_validate(row) for row in rows]

    def get_region(self, session: Session, user_scope: UserScope, region_id: int) -> RegionRead:
        region = _load(session, Region, region_id, "region")
        _enforce(lambda: validate_resource_access(self.region_repository.resource, user_scope, ResourceType.REGION, region.id))
        return RegionRead.model_validate(region)

    def create_region(self, session: Session, user_scope: UserScope, dto: RegionCreate) -> RegionRead:
        _enforce(lambda: require_unrestricted(self.region_repository.resource, user_scope, action="create"))
        region = Region(name=dto.name.strip())
        session.add(region)
        _commit(session, region, "region with this name already exists")
        return RegionRead.model_validate(region)

    def update_region(self, session: Session, user_scope: UserScope, region_id: int, dto: RegionCreate) -> RegionRead:
        region = _load(session, Region, region_id, "region")
        _enforce(
            lambda: validate_resource_access(
                self.region_repository.resource, user_scope, ResourceType.REGION, region.id, action="update"
            )
        )
        region.name = dto.name.strip()
        _commit(session, region, "region with this name already exists")
        return RegionRead.model_validate(region)

    def delete_region(self, session: Session, user_scope: UserScope, region_id: int) -> None:
        region = _load(session, Region, region_id, "region")
        _enforce(lambda: require_unrestricted(self.region_repository.resource, user_scope, action="delete"))
        _delete(session, region, "region")

    # Universities

    def list_universities(self, session: Session, user_scope: UserScope, *, region_id: int | None = None) -> list[UniversityRead]:
        stmt: Select[tuple[University]] = select(University)
        try:
            stmt = self.university_repository.apply_scope_query(stmt, user_scope, requested={"region_id": region_id})
        except AuthorizationError as exc:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
        rows = session.scalars(stmt.order_by(University.name.asc())).all()
        return [UniversityRead.model_validate(row) for row in rows]

    def get_university(self, session: Session, user_scope: UserScope, university_id: int) -> UniversityRead:
        university = _load(session, University, university_id, "university")
        self._authorize_university(user_scope, university, action="read")
        return UniversityRead.model_validate(university)

    def create_university(self, session: Session, user_scope: UserScope, dto: UniversityCreate) -> UniversityRead:
        resource = self.university_repository.resource
        _enforce(lambda: self.university_repository.validate_write_security(dto.model_dump(), user_scope, action="create"))
        _enforce(lambda: validate_resource_access(resource, user_scope, ResourceType.REGION, dto.region_id, action="create"))
        verify_lineage(session, region_id=dto.region_id)

        university = University(name=dto.name.strip(), region_id=dto.region_id)
        session.add(university)
        _commit(session, university, "university with this name already exists in the selected region")
        return UniversityRead.model_validate(university)

    def update_university(
        self,
        session: Session,
        user_scope: UserScope,
        university_id: int,
        dto: UniversityCreate,
    ) -> UniversityRead:
        university = _load(session, University, university_id, "university")
        self._authorize_university(user_scope, university, action="update")
        _enforce(lambda: self.university_repository.validate_write_security(dto.model_dump(), user_scope, action="update"))
        verify_lineage(session, region_id=dto.region_id)

        university.name = dto.name.strip()
        university.region_id = dto.region_id
        _commit(session, university, "university with this name already exists in the selected region")
        return UniversityRead.model_validate(university)

    def delete_university(self, session: Session, user_scope: UserScope, university_id: int) -> None:
        university = _load(session, University, university_id, "university")
        self._authorize_university(user_scope, university, action="delete")
        _delete(session, university, "university")

    # Small groups

    def list_small_groups(
        self,
        session: Session,
        user_scope: UserScope,
        *,
        region_id: int | None = None,
        university_id: int | None = None,
    ) -> list[SmallGroupRead]:
        stmt: Select[tuple[SmallGroup]] = select(SmallGroup)
        try:
            stmt = self.small_group_repository.apply_scope_query(
                stmt,
                user_scope,
                requested={"region_id": region_id, "university_id": university_id},
            )
        except AuthorizationError as exc:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
        rows = session.scalars(stmt.order_by(SmallGroup.name.asc())).all()
        return [SmallGroupRead.model_validate(row) for row in rows]

    def get_small_group(self, session: Session, user_scope: UserScope, small_group_id: int) -> SmallGroupRead:
        small_group = _load(session, SmallGroup, small_group_id, "small group")
        self._authorize_small_group(user_scope, small_group, action="read")
        return SmallGroupRead.model_validate(small_group)

    def create_small_group(self, session: Session, user_scope: UserScope, dto: SmallGroupCreate) -> SmallGroupRead:
        resource = self.small_group_repository.resource
        _enforce(lambda: self.small_group_repository.validate_write_security(dto.model_dump(), user_scope, action="create"))
        _enforce(
            lambda: validate_resource_access(
                resource,
                user_scope,
                ResourceType.UNIVERSITY,
                dto.university_id,
                lineage=_lineage(region_id=dto.region_id),
                action="create",
            )
        )
        verify_lineage(session, region_id=dto.region_id, university_id=dto.university_id)

        small_group = SmallGroup(name=dto.name.strip(), region_id=dto.region_id, university_id=dto.university_id)
        session.add(small_group)
        _commit(session, small_group, "small group with this name already exists in the selected university")
        return SmallGroupRead.model_validate(small_group)

    def update_small_group(
        self,
        session: Session,
        user_scope: UserScope,
        small_group_id: int,
        dto: SmallGroupCreate,
    ) -> SmallGroupRead:
        small_group = _load(session, SmallGroup, small_group_id, "small group")
        self._authorize_small_group(user_scope, small_group, action="update")
        _enforce(lambda: self.small_group_repository.validate_write_security(dto.model_dump(), user_scope, action="update"))
        verify_lineage(session, region_id=dto.region_id, university_id=dto.university_id)

        small_group.name = dto.name.strip()
        small_group.region_id = dto.region_id
        small_group.university_id = dto.university_id
        _commit(session, small_group, "small group with this name already exists in the selected university")
        return SmallGroupRead.model_validate(small_group)

    def delete_small_group(self, session: Session, user_scope: UserScope, small_group_id: int) -> None:
        small_group = _load(session, SmallGroup, small_group_id, "small group")
        self._authorize_small_group(user_scope, small_group, action="delete")
        _delete(session, small_group, "small group")

    # Alumni small groups

    def list_alumni_groups(
        self,
        session: Session,
        user_scope: UserScope,
        *,
        region_id: int | None = None,
    ) -> list[AlumniSmallGroupRead]:
        stmt: Select[tuple[AlumniSmallGroup]] = select(AlumniSmallGroup)
        try:
            stmt = self.alumni_group_repository.apply_scope_query(stmt, user_scope, requested={"region_id": region_id})
        except AuthorizationError as exc:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
        rows = session.scalars(stmt.order_by(AlumniSmallGroup.name.asc())).all()
        return [AlumniSmallGroupRead.model_validate(row) for row in rows]

    def get_alumni_group(self, session: Session, user_scope: UserScope, alumni_group_id: int) -> AlumniSmallGroupRead:
        alumni_group = _load(session, AlumniSmallGroup, alumni_group_id, "alumni small group")
        self._authorize_alumni_group(user_scope, alumni_group, action="read")
        return AlumniSmallGroupRead.model_validate(alumni_group)

    def create_alumni_group(
        self,
        session: Session,
        user_scope: UserScope,
        dto: AlumniSmallGroupCreate,
    ) -> AlumniSmallGroupRead:
        resource = self.alumni_group_repository.resource
        _enforce(lambda: self.alumni_group_repository.validate_write_security(dto.model_dump(), user_scope, action="create"))
        _enforce(lambda: validate_resource_access(resource, user_scope, ResourceType.REGION, dto.region_id, action="create"))
        verify_lineage(session, region_id=dto.region_id)

        alumni_group = AlumniSmallGroup(name=dto.name.strip(), region_id=dto.region_id)
        session.add(alumni_group)
        _commit(session, alumni_group, "alumni small group with this name already exists in the selected region")
        return AlumniSmallGroupRead.model_validate(alumni_group)

    def update_alumni_group(
        self,
        session: Session,
        user_scope: UserScope,
        alumni_group_id: int,
        dto: AlumniSmallGroupCreate,
    ) -> AlumniSmallGroupRead:
        alumni_group = _load(session, AlumniSmallGroup, alumni_group_id, "alumni small group")
        self._authorize_alumni_group(user_scope, alumni_group, action="update")
        _enforce(lambda: self.alumni_group_repository.validate_write_security(dto.model_dump(), user_scope, action="update"))
        verify_lineage(session, region_id=dto.region_id)

        alumni_group.name = dto.name.strip()
        alumni_group.region_id = dto.region_id
        _commit(session, alumni_group, "alumni small group with this name already exists in the selected region")
        return AlumniSmallGroupRead.model_validate(alumni_group)

    def delete_alumni_group(self, session: Session, user_scope: UserScope, alumni_group_id: int) -> None:
        alumni_group = _load(session, AlumniSmallGroup, alumni_group_id, "alumni small group")
        self._authorize_alumni_group(user_scope, alumni_group, action="delete")
        _delete(session, alumni_group, "alumni small group")

    def _authorize_university(self, user_scope: UserScope, university: University, *, action: str) -> None:
        _enforce(
            lambda: validate_resource_access(
                self.university_repository.resource,
                user_scope,
                ResourceType.UNIVERSITY,
                university.id,
                lineage=_lineage(region_id=university.region_id),
                action=action,
            )
        )

    def _authorize_small_group(self, user_scope: UserScope, small_group: SmallGroup, *, action: str) -> None:
        _enforce(
            lambda: validate_resource_access(
                self.small_group_repository.resource,
                user_scope,
                ResourceType.SMALLGROUP,
                small_group.id,
                lineage=_lineage(region_id=small_group.region_id, university_id=small_group.university_id),
                action=action,
            )
        )

    def _authorize_alumni_group(self, user_scope: UserScope, alumni_group: AlumniSmallGroup, *, action: str) -> None:
        _enforce(
            lambda: validate_resource_access(
                self.alumni_group_repository.resource,
                user_scope,
                ResourceType.ALUMNISMALLGROUP,
                alumni_group.id,
                lineage=_lineage(region_id=alumni_group.region_id),
                action=action,
            )
        )


organization_service = OrganizationService()
