"""initial_schema

Revision ID: 3f1c2a7b9d10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "3f1c2a7b9d10"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.current_timestamp(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.current_timestamp(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "event_groups",
        sa.Column("uuid", sa.UUID(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("is_current", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        "invitation_lists",
        sa.Column("uuid", sa.UUID(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column(
            "event_group_id",
            sa.UUID(),
            sa.ForeignKey("event_groups.uuid", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        *_timestamps(),
    )

    op.create_table(
        "executives",
        sa.Column("uuid", sa.UUID(), primary_key=True),
        sa.Column("first_name", sa.String(length=255), nullable=False),
        sa.Column("last_name", sa.String(length=255), nullable=False),
        sa.Column("salutation", sa.String(length=50), nullable=True),
        sa.Column("nickname", sa.String(length=255), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "guests",
        sa.Column("uuid", sa.UUID(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False, index=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("is_sponsored", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "executive_id",
            sa.UUID(),
            sa.ForeignKey("executives.uuid", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "list_id",
            sa.UUID(),
            sa.ForeignKey("invitation_lists.uuid", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("company", sa.String(length=255), nullable=True),
        sa.Column(
            "guest_type",
            sa.Enum("Invitado", "Reemplazo", name="guest_type_enum"),
            nullable=False,
            server_default="Invitado",
        ),
        sa.Column("salutation", sa.String(length=50), nullable=True),
        sa.Column("nickname", sa.String(length=255), nullable=True),
        sa.Column("zoom_email", sa.String(length=255), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "events",
        sa.Column("uuid", sa.UUID(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column(
            "modality",
            sa.Enum("Presencial", "Virtual", name="event_modality_enum"),
            nullable=False,
        ),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("location", sa.String(length=500), nullable=True),
        sa.Column("html_description", sa.Text(), nullable=True),
        sa.Column("zoom_webinar_id", sa.String(length=64), nullable=True),
        sa.Column("register_open", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        "event_lists",
        sa.Column(
            "event_id",
            sa.UUID(),
            sa.ForeignKey("events.uuid", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "list_id",
            sa.UUID(),
            sa.ForeignKey("invitation_lists.uuid", ondelete="CASCADE"),
            primary_key=True,
        ),
        *_timestamps(),
    )

    # The composite primary key is what makes registration an upsert
    op.create_table(
        "event_guests",
        sa.Column(
            "guest_id",
            sa.UUID(),
            sa.ForeignKey("guests.uuid", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "event_id",
            sa.UUID(),
            sa.ForeignKey("events.uuid", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("registered", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("zoom_email", sa.String(length=255), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "substitutions",
        sa.Column("uuid", sa.UUID(), primary_key=True),
        sa.Column(
            "event_group_id",
            sa.UUID(),
            sa.ForeignKey("event_groups.uuid", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("original_email", sa.String(length=255), nullable=False),
        sa.Column("new_email", sa.String(length=255), nullable=False, index=True),
        *_timestamps(),
        sa.UniqueConstraint("event_group_id", "original_email", name="uq_substitution_original"),
    )

    op.create_table(
        "email_logs",
        sa.Column("uuid", sa.UUID(), primary_key=True),
        sa.Column("provider_message_id", sa.String(length=255), nullable=True, index=True),
        sa.Column("to_address", sa.String(length=255), nullable=False, index=True),
        sa.Column("from_address", sa.String(length=255), nullable=False),
        sa.Column("template_id", sa.String(length=255), nullable=False),
        sa.Column(
            "email_type",
            sa.Enum("confirmation", name="email_type_enum"),
            nullable=False,
            index=True,
        ),
        sa.Column(
            "guest_id",
            sa.UUID(),
            sa.ForeignKey("guests.uuid", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
        sa.Column(
            "event_id",
            sa.UUID(),
            sa.ForeignKey("events.uuid", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
        sa.Column(
            "status",
            sa.Enum("pending", "sent", "failed", name="email_status_enum"),
            nullable=False,
            server_default="pending",
            index=True,
        ),
        sa.Column("error_message", sa.Text(), nullable=True),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table("email_logs")
    op.drop_table("substitutions")
    op.drop_table("event_guests")
    op.drop_table("event_lists")
    op.drop_table("events")
    op.drop_table("guests")
    op.drop_table("executives")
    op.drop_table("invitation_lists")
    op.drop_table("event_groups")
    op.execute("DROP TYPE IF EXISTS email_status_enum")
    op.execute("DROP TYPE IF EXISTS email_type_enum")
    op.execute("DROP TYPE IF EXISTS event_modality_enum")
    op.execute("DROP TYPE IF EXISTS guest_type_enum")
