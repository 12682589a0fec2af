from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(Base):
    __tablename__ = "user_role"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    scope: Mapped[str] = mapped_column(String(32), nullable=False)
    region_id: Mapped[int | None] = mapped_column(ForeignKey("region.id", ondelete="CASCADE"), nullable=True)
    university_id: Mapped[int | None] = mapped_column(ForeignKey("university.id", ondelete="CASCADE"), nullable=True)
    small_group_id: Mapped[int | None] = mapped_column(ForeignKey("smallgroup.id", ondelete="CASCADE"), nullable=True)
    alumni_group_id: Mapped[int | None] = mapped_column(
        ForeignKey("alumnismallgroup.id", ondelete="CASCADE"),
        nullable=True,
    )
    assigned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (Index("ix_user_role_user", "user_id"),)
