"""users, accommodations, reservations, audit logs

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("phone_number", sa.String(length=40), nullable=False, server_default=""),
        sa.Column("role", sa.String(length=30), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "accommodations",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("package_type", sa.String(length=40), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("day_price", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("overnight_price", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("whole_resort_price", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("amenities", sa.JSON(), nullable=True),
        sa.Column("features", sa.JSON(), nullable=True),
        sa.Column("image", sa.String(length=512), nullable=False, server_default=""),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Active"),
    )
    op.create_index("ix_accommodations_type", "accommodations", ["type"])

    op.create_table(
        "reservations",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("reservation_id", sa.String(length=40), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("checked_in", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("check_in_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("qr_data", sa.JSON(), nullable=True),
        sa.Column("qr_verification_code", sa.String(length=64), nullable=True),
        sa.Column("user_id", sa.String(length=36), nullable=True),
        sa.Column("user_full_name", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("user_email", sa.String(length=320), nullable=False, server_default=""),
        sa.Column("accommodation_id", sa.String(length=36), nullable=True),
        sa.Column("room", sa.JSON(), nullable=True),
        sa.Column("is_whole_resort", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("date_str", sa.String(length=40), nullable=False, server_default=""),
        sa.Column("guests", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("day_hours", sa.String(length=40), nullable=False, server_default=""),
        sa.Column("overnight_hours", sa.String(length=40), nullable=False, server_default=""),
        sa.Column("payment_method", sa.String(length=30), nullable=False, server_default=""),
        sa.Column("total_amount", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_reservations_reservation_id", "reservations", ["reservation_id"], unique=True)
    op.create_index("ix_reservations_status", "reservations", ["status"])
    op.create_index("ix_reservations_user_id", "reservations", ["user_id"])
    op.create_index("ix_reservations_accommodation_id", "reservations", ["accommodation_id"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("actor_user_id", sa.String(length=36), nullable=False),
        sa.Column("action", sa.String(length=80), nullable=False),
        sa.Column("entity_type", sa.String(length=40), nullable=False),
        sa.Column("entity_id", sa.String(length=36), nullable=False),
        sa.Column("details_json", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_audit_logs_actor_user_id", "audit_logs", ["actor_user_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_entity_type", "audit_logs", ["entity_type"])
    op.create_index("ix_audit_logs_entity_id", "audit_logs", ["entity_id"])

def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("reservations")
    op.drop_table("accommodations")
    op.drop_table("users")
