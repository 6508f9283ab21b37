"""initial ledger, catalog and job tables

Revision ID: 3f9c1a7e2b10
Revises:
Create Date: 2026-10-17 09:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f9c1a7e2b10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("email", sa.String(length=255), unique=True),
        sa.Column("contact_name", sa.String(length=255)),
        sa.Column("company_name", sa.String(length=255)),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="client"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("balance_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime()),
        sa.CheckConstraint("balance_cents >= 0", name="ck_accounts_balance_non_negative"),
    )

    op.create_table(
        "service_catalog",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("code", sa.String(length=64), nullable=False, unique=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("category", sa.String(length=100)),
        sa.Column("price_cents", sa.Integer(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime()),
    )

    op.create_table(
        "jobs",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("reference_number", sa.String(length=32), nullable=False, unique=True),
        sa.Column("owner_id", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("assigned_admin_id", sa.String(length=36), sa.ForeignKey("accounts.id")),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="pending"),
        sa.Column("job_type", sa.String(length=10), nullable=False, server_default="ecu"),
        sa.Column("vehicle_brand", sa.String(length=100), nullable=False),
        sa.Column("vehicle_model", sa.String(length=100), nullable=False),
        sa.Column("vehicle_year", sa.String(length=20), nullable=False),
        sa.Column("engine_type", sa.String(length=100), nullable=False),
        sa.Column("engine_power_hp", sa.Integer()),
        sa.Column("ecu_type", sa.String(length=100)),
        sa.Column("tcu_type", sa.String(length=100)),
        sa.Column("gearbox_type", sa.String(length=100)),
        sa.Column("vin", sa.String(length=32)),
        sa.Column("mileage", sa.Integer()),
        sa.Column("fuel_type", sa.String(length=50)),
        sa.Column("credits_used_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("client_notes", sa.Text()),
        sa.Column("admin_notes", sa.Text()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("started_at", sa.DateTime()),
        sa.Column("completed_at", sa.DateTime()),
        sa.Column("revision_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
    )
    op.create_index("ix_jobs_owner_id", "jobs", ["owner_id"])
    op.create_index("ix_jobs_status", "jobs", ["status"])

    op.create_table(
        "job_priced_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("job_id", sa.String(length=36), sa.ForeignKey("jobs.id"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("price_cents", sa.Integer(), nullable=False),
        sa.UniqueConstraint("job_id", "code", name="uq_job_priced_items_job_code"),
    )
    op.create_index("ix_job_priced_items_job_id", "job_priced_items", ["job_id"])

    op.create_table(
        "job_messages",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("job_id", sa.String(length=36), sa.ForeignKey("jobs.id"), nullable=False),
        sa.Column("sender_id", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("internal", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_job_messages_job_created", "job_messages", ["job_id", "created_at"])

    op.create_table(
        "ledger_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("account_id", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("kind", sa.String(length=32), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("balance_before_cents", sa.Integer(), nullable=False),
        sa.Column("balance_after_cents", sa.Integer(), nullable=False),
        sa.Column("job_ref", sa.String(length=36), sa.ForeignKey("jobs.id")),
        sa.Column("external_ref", sa.String(length=255), unique=True),
        sa.Column("description", sa.String(length=255)),
        sa.Column("processed_by", sa.String(length=36), sa.ForeignKey("accounts.id")),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_ledger_entries_account_id", "ledger_entries", ["account_id"])
    op.create_index("ix_ledger_entries_job_ref", "ledger_entries", ["job_ref"])

    op.create_table(
        "payment_event_log",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("external_ref", sa.String(length=255), nullable=False),
        sa.Column("event_type", sa.String(length=64), nullable=False),
        sa.Column("account_id", sa.String(length=36)),
        sa.Column("amount_cents", sa.Integer()),
        sa.Column("outcome", sa.String(length=32), nullable=False),
        sa.Column("received_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_payment_event_log_external_ref", "payment_event_log", ["external_ref"])


def downgrade() -> None:
    op.drop_index("ix_payment_event_log_external_ref", table_name="payment_event_log")
    op.drop_table("payment_event_log")
    op.drop_index("ix_ledger_entries_job_ref", table_name="ledger_entries")
    op.drop_index("ix_ledger_entries_account_id", table_name="ledger_entries")
    op.drop_table("ledger_entries")
    op.drop_index("ix_job_messages_job_created", table_name="job_messages")
    op.drop_table("job_messages")
    op.drop_index("ix_job_priced_items_job_id", table_name="job_priced_items")
    op.drop_table("job_priced_items")
    op.drop_index("ix_jobs_status", table_name="jobs")
    op.drop_index("ix_jobs_owner_id", table_name="jobs")
    op.drop_table("jobs")
    op.drop_table("service_catalog")
    op.drop_table("accounts")
