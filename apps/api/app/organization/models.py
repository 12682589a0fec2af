from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Region(Base):
    __tablename__ = "region"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    universities: Mapped[list[University]] = relationship("University", back_populates="region")
    alumni_groups: Mapped[list[AlumniSmallGroup]] = relationship("AlumniSmallGroup", back_populates="region")


class University(Base):
    __tablename__ = "university"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    region_id: Mapped[int] = mapped_column(ForeignKey("region.id", ondelete="RESTRICT"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    region: Mapped[Region] = relationship("Region", back_populates="universities")
    small_groups: Mapped[list[SmallGroup]] = relationship("SmallGroup", back_populates="university")

    __table_args__ = (
        UniqueConstraint("region_id", "name", name="uq_university_region_name"),
        Index("ix_university_region", "region_id"),
    )


class SmallGroup(Base):
    __tablename__ = "smallgroup"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    region_id: Mapped[int] = mapped_column(ForeignKey("region.id", ondelete="RESTRICT"), nullable=False)
    university_id: Mapped[int] = mapped_column(ForeignKey("university.id", ondelete="RESTRICT"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    university: Mapped[University] = relationship("University", back_populates="small_groups")

    __table_args__ = (
        UniqueConstraint("university_id", "name", name="uq_smallgroup_university_name"),
        Index("ix_smallgroup_scope", "region_id", "university_id"),
    )


class AlumniSmallGroup(Base):
    __tablename__ = "alumnismallgroup"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    region_id: Mapped[int] = mapped_column(ForeignKey("region.id", ondelete="RESTRICT"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    region: Mapped[Region] = relationship("Region", back_populates="alumni_groups")

    __table_args__ = (
        UniqueConstraint("region_id", "name", name="uq_alumnismallgroup_region_name"),
        Index("ix_alumnismallgroup_region", "region_id"),
    )
