from __future__ import annotations

from app.ministry.models import ContributionDesignation, PermanentMinistryEvent
from app.platform.security.conditions import RLSTable
from app.platform.security.repository import BaseRepository


class EventRepository(BaseRepository):
    resource = "ministry.event"
    table = RLSTable.PERMANENT_MINISTRY_EVENT
    model = PermanentMinistryEvent


class DesignationRepository(BaseRepository):
    resource = "ministry.designation"
    table = RLSTable.CONTRIBUTION_DESIGNATION
    model = ContributionDesignation
