from app.ministry.models import ContributionDesignation, PermanentMinistryEvent

__all__ = ["PermanentMinistryEvent", "ContributionDesignation"]
