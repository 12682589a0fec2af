"""create user roles, members, ministry events and designations

Revision ID: 202610190002
Revises: 202610190001
Create Date: 2026-10-19 09:30:00
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa


revision: str = "202610190002"
down_revision: str | None = "202610190001"
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def _scope_columns(*, region_nullable: bool = True, region_ondelete: str = "SET NULL") -> list[sa.SchemaItem]:
    return [
        sa.Column("region_id", sa.Integer(), nullable=region_nullable),
        sa.Column("university_id", sa.Integer(), nullable=True),
        sa.Column("small_group_id", sa.Integer(), nullable=True),
        sa.Column("alumni_group_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["region_id"], ["region.id"], ondelete=region_ondelete),
        sa.ForeignKeyConstraint(["university_id"], ["university.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["small_group_id"], ["smallgroup.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["alumni_group_id"], ["alumnismallgroup.id"], ondelete="SET NULL"),
    ]


def upgrade() -> None:
    op.create_table(
        "user_role",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("scope", sa.String(length=32), nullable=False),
        sa.Column("region_id", sa.Integer(), nullable=True),
        sa.Column("university_id", sa.Integer(), nullable=True),
        sa.Column("small_group_id", sa.Integer(), nullable=True),
        sa.Column("alumni_group_id", sa.Integer(), nullable=True),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["region_id"], ["region.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["university_id"], ["university.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["small_group_id"], ["smallgroup.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["alumni_group_id"], ["alumnismallgroup.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_role_user", "user_role", ["user_id"], unique=False)

    op.create_table(
        "member",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("first_name", sa.String(length=255), nullable=False),
        sa.Column("second_name", sa.String(length=255), nullable=False),
        sa.Column("gender", sa.String(length=16), nullable=True),
        sa.Column("birthdate", sa.Date(), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("phone", sa.String(length=64), nullable=True),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="active"),
        sa.Column("local_church", sa.String(length=255), nullable=True),
        sa.Column("faculty", sa.String(length=255), nullable=True),
        sa.Column("graduation_date", sa.Date(), nullable=True),
        *_scope_columns(),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_member_scope", "member", ["region_id", "university_id", "small_group_id"], unique=False)
    op.create_index("ix_member_alumni_group", "member", ["alumni_group_id"], unique=False)

    op.create_table(
        "permanentministryevent",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("type", sa.String(length=64), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        *_scope_columns(region_nullable=False, region_ondelete="RESTRICT"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_permanentministryevent_scope",
        "permanentministryevent",
        ["region_id", "university_id", "small_group_id"],
        unique=False,
    )
    op.create_index(
        "ix_permanentministryevent_alumni_group",
        "permanentministryevent",
        ["alumni_group_id"],
        unique=False,
    )

    op.create_table(
        "contributiondesignation",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("target_amount", sa.Numeric(18, 2), nullable=True),
        sa.Column("current_amount", sa.Numeric(18, 2), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        *_scope_columns(),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index(
        "ix_contributiondesignation_scope",
        "contributiondesignation",
        ["region_id", "university_id", "small_group_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_contributiondesignation_scope", table_name="contributiondesignation")
    op.drop_table("contributiondesignation")
    op.drop_index("ix_permanentministryevent_alumni_group", table_name="permanentministryevent")
    op.drop_index("ix_permanentministryevent_scope", table_name="permanentministryevent")
    op.drop_table("permanentministryevent")
    op.drop_index("ix_member_alumni_group", table_name="member")
    op.drop_index("ix_member_scope", table_name="member")
    op.drop_table("member")
    op.drop_index("ix_user_role_user", table_name="user_role")
    op.drop_table("user_role")
