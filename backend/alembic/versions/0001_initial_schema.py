"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17

Creates all tables for the volunteer slots service:
users, user_emails, organizations, organization_members, projects,
project_signups, anonymous_signups, slot_counters.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("default_timezone", sa.String(50), nullable=False, server_default="UTC"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- user_emails ---
    op.create_table(
        "user_emails",
        sa.Column("email_id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
    )

    # --- organizations ---
    op.create_table(
        "organizations",
        sa.Column("organization_id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("created_by", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("allowed_email_domains", sa.JSON, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- organization_members ---
    op.create_table(
        "organization_members",
        sa.Column("organization_id", sa.String(36), sa.ForeignKey("organizations.organization_id"), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id"), primary_key=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="member"),
        sa.Column("joined_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- projects ---
    op.create_table(
        "projects",
        sa.Column("project_id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("location", sa.String(500), nullable=True),
        sa.Column("creator_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("organization_id", sa.String(36), sa.ForeignKey("organizations.organization_id"), nullable=True),
        sa.Column("event_type", sa.String(30), nullable=False),
        sa.Column("schedule", sa.JSON, nullable=False),
        sa.Column("project_timezone", sa.String(50), nullable=False, server_default="UTC"),
        sa.Column("status", sa.String(20), nullable=False, server_default="upcoming"),
        sa.Column("pause_signups", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("require_login", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("restrict_to_org_domains", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("allowed_email_domains", sa.JSON, nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancellation_reason", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    # --- project_signups ---
    op.create_table(
        "project_signups",
        sa.Column("signup_id", sa.String(36), primary_key=True),
        sa.Column(
            "project_id", sa.String(36),
            sa.ForeignKey("projects.project_id", ondelete="CASCADE"), nullable=False, index=True,
        ),
        sa.Column("schedule_id", sa.String(255), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=True),
        sa.Column("identity_key", sa.String(320), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("check_in_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("check_out_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("project_id", "schedule_id", "identity_key", name="uq_signup_identity_slot"),
    )

    # --- anonymous_signups ---
    op.create_table(
        "anonymous_signups",
        sa.Column("anonymous_signup_id", sa.String(36), primary_key=True),
        sa.Column("project_id", sa.String(36), sa.ForeignKey("projects.project_id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "signup_id", sa.String(36),
            sa.ForeignKey("project_signups.signup_id", ondelete="CASCADE"), nullable=False, unique=True,
        ),
        sa.Column("email", sa.String(320), nullable=False, index=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("phone_number", sa.String(30), nullable=True),
        sa.Column("token_hash", sa.String(64), nullable=False, unique=True),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    # --- slot_counters ---
    op.create_table(
        "slot_counters",
        sa.Column("project_id", sa.String(36), sa.ForeignKey("projects.project_id", ondelete="CASCADE"), primary_key=True),
        sa.Column("schedule_id", sa.String(255), primary_key=True),
        sa.Column("reserved", sa.Integer, nullable=False, server_default="0"),
        sa.CheckConstraint("reserved >= 0", name="ck_slot_counters_reserved_non_negative"),
    )


def downgrade() -> None:
    op.drop_table("slot_counters")
    op.drop_table("anonymous_signups")
    op.drop_table("project_signups")
    op.drop_table("projects")
    op.drop_table("organization_members")
    op.drop_table("organizations")
    op.drop_table("user_emails")
    op.drop_table("users")
