from __future__ import annotations

from app.organization.models import AlumniSmallGroup, Region, SmallGroup, University
from app.platform.security.conditions import RLSTable
from app.platform.security.repository import DirectoryRepository


class RegionRepository(DirectoryRepository):
    resource = "organization.region"
    table = RLSTable.REGION
    model = Region


class UniversityRepository(DirectoryRepository):
    resource = "organization.university"
    table = RLSTable.UNIVERSITY
    model = University


class SmallGroupRepository(DirectoryRepository):
    resource = "organization.smallgroup"
    table = RLSTable.SMALLGROUP
    model = SmallGroup


class AlumniSmallGroupRepository(DirectoryRepository):
    resource = "organization.alumnismallgroup"
    table = RLSTable.ALUMNISMALLGROUP
    model = AlumniSmallGroup
