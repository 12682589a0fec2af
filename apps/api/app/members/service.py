from __future__ import annotations

from dataclasses import dataclass

from fastapi import HTTPException, status
from sqlalchemy import Select, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.members.models import Member
from app.members.repository import MemberRepository
from app.members.schemas import MemberCreate, MemberRead
from app.organization.service import verify_lineage
from app.platform.security.context import ORG_FIELDS, UserScope
from app.platform.security.errors import AuthorizationError
from app.platform.security.rls import fill_scope_defaults


@dataclass(slots=True)
class MemberService:
    member_repository: MemberRepository = MemberRepository()

    def list_members(
        self,
        session: Session,
        user_scope: UserScope,
        *,
        region_id: int | None = None,
        university_id: int | None = None,
        small_group_id: int | None = None,
        alumni_group_id: int | None = None,
        member_type: str | None = None,
    ) -> list[MemberRead]:
        stmt: Select[tuple[Member]] = select(Member)
        try:
            stmt = self.member_repository.apply_scope_query(
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

        if member_type is not None:
            stmt = stmt.where(Member.type == member_type.lower())
        rows = session.scalars(stmt.order_by(Member.second_name.asc(), Member.first_name.asc(), Member.id.asc())).all()
        return [MemberRead.model_validate(row) for row in rows]

    def get_member(self, session: Session, user_scope: UserScope, member_id: int) -> MemberRead:
        member = self._load_scoped(session, user_scope, member_id, action="read")
        return MemberRead.model_validate(member)

    def create_member(self, session: Session, user_scope: UserScope, dto: MemberCreate) -> MemberRead:
        payload = fill_scope_defaults(dto.model_dump(mode="python"), user_scope)
        try:
            self.member_repository.validate_write_security(payload, user_scope, action="create")
        except AuthorizationError as exc:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
        verify_lineage(session, **{name: payload[name] for name in ORG_FIELDS})

        member = Member(**payload)
        session.add(member)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="member with this email already exists")
        session.refresh(member)
        return MemberRead.model_validate(member)

    def update_member(self, session: Session, user_scope: UserScope, member_id: int, dto: MemberCreate) -> MemberRead:
        member = self._load_scoped(session, user_scope, member_id, action="update")

        payload = fill_scope_defaults(dto.model_dump(mode="python"), user_scope)
        try:
            self.member_repository.validate_write_security(payload, user_scope, action="update")
        except AuthorizationError as exc:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
        verify_lineage(session, **{name: payload[name] for name in ORG_FIELDS})

        for key, value in payload.items():
            setattr(member, key, value)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="member with this email already exists")
        session.refresh(member)
        return MemberRead.model_validate(member)

    def delete_member(self, session: Session, user_scope: UserScope, member_id: int) -> None:
        member = self._load_scoped(session, user_scope, member_id, action="delete")
        session.delete(member)
        session.commit()

    def _load_scoped(self, session: Session, user_scope: UserScope, member_id: int, *, action: str) -> Member:
        member = session.get(Member, member_id)
        if member is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="member not found")

        record = {name: getattr(member, name) for name in ORG_FIELDS}
        try:
            self.member_repository.validate_read_scope(user_scope, record, action=action)
        except AuthorizationError as exc:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
        return member


member_service = MemberService()
