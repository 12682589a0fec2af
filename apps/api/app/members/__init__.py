from app.members.models import Member

__all__ = ["Member"]
