"""ride reminders

Revision ID: 0002_ride_reminders
Revises: 0001_initial
Create Date: 2026-10-12

"""

from alembic import op
import sqlalchemy as sa

revision = "0002_ride_reminders"
down_revision = "0001_initial"
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "ride_reminders",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("booking_id", sa.String(length=36), sa.ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False),
        sa.Column("reminder_type", sa.String(length=40), nullable=False),
        sa.Column("scheduled_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="SCHEDULED"),
        sa.Column("notification_channel", sa.String(length=20), nullable=False, server_default="EMAIL"),
        sa.Column("recipient_email", sa.String(length=320), nullable=False),
        sa.Column("message", sa.String(length=500), nullable=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("error_message", sa.String(length=500), nullable=True),
        sa.Column("attempt_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("max_attempts", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("booking_id", "reminder_type", name="uq_ride_reminder_booking_type"),
    )
    op.create_index("ix_ride_reminders_booking_id", "ride_reminders", ["booking_id"])
    op.create_index("ix_ride_reminders_recipient_email", "ride_reminders", ["recipient_email"])
    op.create_index("ix_ride_reminders_scheduled_time", "ride_reminders", ["scheduled_time"])
    op.create_index("ix_ride_reminders_status", "ride_reminders", ["status"])
    # Due scan: status = SCHEDULED AND scheduled_time <= now
    op.create_index("ix_ride_reminders_status_scheduled_time", "ride_reminders", ["status", "scheduled_time"])


def downgrade() -> None:
    op.drop_index("ix_ride_reminders_status_scheduled_time", table_name="ride_reminders")
    op.drop_table("ride_reminders")
