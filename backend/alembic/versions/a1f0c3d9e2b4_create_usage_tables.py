"""Create usage ledger, charge event and batch job tables.

Revision ID: a1f0c3d9e2b4
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision = "a1f0c3d9e2b4"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.Column(
            "modified_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    ]


def upgrade():
    """Create user_ledger, charge_event, batch_job and batch_file."""
    op.create_table(
        "user_ledger",
        sa.Column("user_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("free_pages_remaining", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("credit_balance", sa.Numeric(14, 4), nullable=False, server_default="0"),
        sa.Column("pages_used_total", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("subscription_type", sa.String(20), nullable=False, server_default="free"),
        *_timestamps(),
        sa.CheckConstraint(
            "free_pages_remaining >= 0", name="ck_user_ledger_free_pages_non_negative"
        ),
        sa.CheckConstraint(
            "credit_balance >= 0", name="ck_user_ledger_credit_balance_non_negative"
        ),
        sa.CheckConstraint("pages_used_total >= 0", name="ck_user_ledger_pages_used_non_negative"),
    )

    op.create_table(
        "charge_event",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("sequence", sa.BigInteger(), sa.Identity(always=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("action", sa.String(32), nullable=False),
        sa.Column("pages_charged", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("free_pages_consumed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("credits_charged", sa.Numeric(14, 4), nullable=False, server_default="0"),
        sa.Column("pages_before", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("pages_after", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("processing_record_id", sa.String(64), nullable=True),
        sa.Column("client_ip", postgresql.INET(), nullable=True),
        sa.Column("client_user_agent", sa.Text(), nullable=True),
        sa.Column(
            "metadata",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["user_ledger.user_id"],
            name="fk_charge_event_user_id",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("sequence", name="uq_charge_event_sequence"),
    )
    op.create_index("idx_charge_event_user_sequence", "charge_event", ["user_id", "sequence"])
    op.create_index("idx_charge_event_user_action", "charge_event", ["user_id", "action"])

    op.create_table(
        "batch_job",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("total_files", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("estimated_pages", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("merge_output", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("merge_format", sa.String(10), nullable=True),
        sa.Column(
            "output_options",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        *_timestamps(),
    )
    op.create_index("idx_batch_job_user_id", "batch_job", ["user_id"])

    op.create_table(
        "batch_file",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("batch_job_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("original_filename", sa.String(512), nullable=False),
        sa.Column("file_size", sa.BigInteger(), nullable=False),
        sa.Column("estimated_pages", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["batch_job_id"],
            ["batch_job.id"],
            name="fk_batch_file_batch_job_id",
            ondelete="CASCADE",
        ),
    )
    op.create_index("idx_batch_file_batch_job_id", "batch_file", ["batch_job_id"])


def downgrade():
    """Drop the usage and batch tables."""
    op.drop_table("batch_file")
    op.drop_table("batch_job")
    op.drop_table("charge_event")
    op.drop_table("user_ledger")
