from app.organization.models import AlumniSmallGroup, Region, SmallGroup, University

__all__ = [
    "Region",
    "University",
    "SmallGroup",
    "AlumniSmallGroup",
]
