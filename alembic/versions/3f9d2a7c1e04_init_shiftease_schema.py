"""Init ShiftEase schema

Revision ID: 3f9d2a7c1e04
Revises:
Create Date: 2026-10-19 09:12:44.318207

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f9d2a7c1e04"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "events",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.VARCHAR(), nullable=False),
        sa.Column("description", sa.VARCHAR(), nullable=False),
        sa.Column("event_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=True),
        sa.Column("end_time", sa.Time(), nullable=True),
        sa.Column("image_url", sa.VARCHAR(), nullable=True),
        sa.Column("capacity", sa.Integer(), server_default="0", nullable=False),
        sa.Column(
            "standby_capacity", sa.Integer(), server_default="0", nullable=False
        ),
        sa.Column(
            "registration_seq", sa.Integer(), server_default="0", nullable=False
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("capacity >= 0", name="ck_events_capacity_ge_0"),
        sa.CheckConstraint(
            "standby_capacity >= 0", name="ck_events_standby_capacity_ge_0"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_events_date_start", "events", ["event_date", "start_time"], unique=False
    )

    op.create_table(
        "event_registrations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("event_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.VARCHAR(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("confirmed", "standby", name="registration_status"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("registered_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "event_id", "user_id", name="uq_event_registrations_event_user"
        ),
    )
    op.create_index(
        op.f("ix_event_registrations_event_id"),
        "event_registrations",
        ["event_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_event_registrations_user_id"),
        "event_registrations",
        ["user_id"],
        unique=False,
    )
    op.create_index(
        "idx_event_registrations_event_position",
        "event_registrations",
        ["event_id", "position"],
        unique=False,
    )

    op.create_table(
        "users",
        sa.Column("id", sa.VARCHAR(), nullable=False),
        sa.Column("email", sa.VARCHAR(), nullable=True),
        sa.Column("first_name", sa.VARCHAR(), nullable=True),
        sa.Column("last_name", sa.VARCHAR(), nullable=True),
        sa.Column("full_name", sa.VARCHAR(), nullable=True),
        sa.Column("phone_number", sa.VARCHAR(), nullable=True),
        sa.Column("profile_picture", sa.VARCHAR(), nullable=True),
        sa.Column("avatar_color", sa.VARCHAR(), nullable=True),
        sa.Column("language", sa.VARCHAR(), nullable=True),
        sa.Column(
            "role",
            sa.Enum("admin", "user", name="user_role"),
            server_default="user",
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=False)

    op.create_table(
        "feedback",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.VARCHAR(), nullable=False),
        sa.Column("user_email", sa.VARCHAR(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("feedback", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "rating >= 1 AND rating <= 5", name="ck_feedback_rating_1_5"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_feedback_user_id"), "feedback", ["user_id"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f("ix_feedback_user_id"), table_name="feedback")
    op.drop_table("feedback")

    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")

    op.drop_index(
        "idx_event_registrations_event_position", table_name="event_registrations"
    )
    op.drop_index(
        op.f("ix_event_registrations_user_id"), table_name="event_registrations"
    )
    op.drop_index(
        op.f("ix_event_registrations_event_id"), table_name="event_registrations"
    )
    op.drop_table("event_registrations")

    op.drop_index("idx_events_date_start", table_name="events")
    op.drop_table("events")

    sa.Enum(name="registration_status").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="user_role").drop(op.get_bind(), checkfirst=True)
