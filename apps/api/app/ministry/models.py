from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PermanentMinistryEvent(Base):
    __tablename__ = "permanentministryevent"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    region_id: Mapped[int] = mapped_column(ForeignKey("region.id", ondelete="RESTRICT"), nullable=False)
    university_id: Mapped[int | None] = mapped_column(ForeignKey("university.id", ondelete="SET NULL"), nullable=True)
    small_group_id: Mapped[int | None] = mapped_column(ForeignKey("smallgroup.id", ondelete="SET NULL"), nullable=True)
    alumni_group_id: Mapped[int | None] = mapped_column(
        ForeignKey("alumnismallgroup.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_permanentministryevent_scope", "region_id", "university_id", "small_group_id"),
        Index("ix_permanentministryevent_alumni_group", "alumni_group_id"),
    )


class ContributionDesignation(Base):
    __tablename__ = "contributiondesignation"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    target_amount: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    current_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=0, server_default="0")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    region_id: Mapped[int | None] = mapped_column(ForeignKey("region.id", ondelete="SET NULL"), nullable=True)
    university_id: Mapped[int | None] = mapped_column(ForeignKey("university.id", ondelete="SET NULL"), nullable=True)
    small_group_id: Mapped[int | None] = mapped_column(ForeignKey("smallgroup.id", ondelete="SET NULL"), nullable=True)
    alumni_group_id: Mapped[int | None] = mapped_column(
        ForeignKey("alumnismallgroup.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (Index("ix_contributiondesignation_scope", "region_id", "university_id", "small_group_id"),)
