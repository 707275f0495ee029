"""initial schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


program_status = postgresql.ENUM("active", "restricted", name="program_status", create_type=False)
fact_kind = postgresql.ENUM("allocation", "utilization", name="fact_kind", create_type=False)
log_action = postgresql.ENUM("added", "edited", name="log_action", create_type=False)


def upgrade() -> None:
    program_status.create(op.get_bind(), checkfirst=True)
    fact_kind.create(op.get_bind(), checkfirst=True)
    log_action.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "provinces",
        sa.Column("psgc", sa.String(length=10), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False, unique=True),
        sa.Column("sequence_no", sa.Integer(), nullable=False, server_default=sa.text("0")),
    )

    op.create_table(
        "city_municipalities",
        sa.Column("psgc", sa.String(length=10), primary_key=True, nullable=False),
        sa.Column("province_psgc", sa.String(length=10), sa.ForeignKey("provinces.psgc"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("district", sa.String(length=16), nullable=True),
        sa.Column("sequence_no", sa.Integer(), nullable=False, server_default=sa.text("0")),
    )
    op.create_index("ix_city_municipalities_province_psgc", "city_municipalities", ["province_psgc"])

    op.create_table(
        "programs",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False, unique=True),
        sa.Column("status", program_status, nullable=False, server_default="active"),
        sa.Column("logo", sa.String(length=255), nullable=True),
        sa.Column("sequence_no", sa.Integer(), nullable=False, server_default=sa.text("0")),
    )

    op.create_table(
        "allocations",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("province_psgc", sa.String(length=10), sa.ForeignKey("provinces.psgc"), nullable=False),
        sa.Column(
            "city_psgc",
            sa.String(length=10),
            sa.ForeignKey("city_municipalities.psgc"),
            nullable=False,
        ),
        sa.Column("program_id", sa.BigInteger(), sa.ForeignKey("programs.id", ondelete="SET NULL"), nullable=True),
        sa.Column("target", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("fund_allocation", sa.Numeric(15, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("target >= 0", name="ck_allocations_target_non_negative"),
        sa.CheckConstraint("fund_allocation >= 0", name="ck_allocations_fund_allocation_non_negative"),
    )
    op.create_index("ix_allocations_city_psgc", "allocations", ["city_psgc"])
    op.create_index("ix_allocations_program_id", "allocations", ["program_id"])
    op.create_index("ix_allocations_created_at", "allocations", ["created_at"])

    op.create_table(
        "utilizations",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("province_psgc", sa.String(length=10), sa.ForeignKey("provinces.psgc"), nullable=False),
        sa.Column(
            "city_psgc",
            sa.String(length=10),
            sa.ForeignKey("city_municipalities.psgc"),
            nullable=False,
        ),
        sa.Column("program_id", sa.BigInteger(), sa.ForeignKey("programs.id", ondelete="SET NULL"), nullable=True),
        sa.Column("physical", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("fund_utilized", sa.Numeric(15, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("physical >= 0", name="ck_utilizations_physical_non_negative"),
        sa.CheckConstraint("fund_utilized >= 0", name="ck_utilizations_fund_utilized_non_negative"),
    )
    op.create_index("ix_utilizations_city_psgc", "utilizations", ["city_psgc"])
    op.create_index("ix_utilizations_program_id", "utilizations", ["program_id"])
    op.create_index("ix_utilizations_created_at", "utilizations", ["created_at"])

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("kind", fact_kind, nullable=False),
        sa.Column("action", log_action, nullable=False),
        sa.Column("record_id", sa.BigInteger(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_activity_logs_kind_record", "activity_logs", ["kind", "record_id"])
    op.create_index("ix_activity_logs_created_at", "activity_logs", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_activity_logs_created_at", table_name="activity_logs")
    op.drop_index("ix_activity_logs_kind_record", table_name="activity_logs")
    op.drop_table("activity_logs")

    op.drop_index("ix_utilizations_created_at", table_name="utilizations")
    op.drop_index("ix_utilizations_program_id", table_name="utilizations")
    op.drop_index("ix_utilizations_city_psgc", table_name="utilizations")
    op.drop_table("utilizations")

    op.drop_index("ix_allocations_created_at", table_name="allocations")
    op.drop_index("ix_allocations_program_id", table_name="allocations")
    op.drop_index("ix_allocations_city_psgc", table_name="allocations")
    op.drop_table("allocations")

    op.drop_table("programs")

    op.drop_index("ix_city_municipalities_province_psgc", table_name="city_municipalities")
    op.drop_table("city_municipalities")

    op.drop_table("provinces")

    log_action.drop(op.get_bind(), checkfirst=True)
    fact_kind.drop(op.get_bind(), checkfirst=True)
    program_status.drop(op.get_bind(), checkfirst=True)
