from __future__ import annotations

from app.members.models import Member
from app.platform.security.conditions import RLSTable
from app.platform.security.repository import BaseRepository


class MemberRepository(BaseRepository):
    resource = "members.member"
    table = RLSTable.MEMBER
    model = Member
