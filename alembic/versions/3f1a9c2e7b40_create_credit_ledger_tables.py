"""create schools, document catalog and credit ledger tables

Revision ID: 3f1a9c2e7b40
Revises: 
Create Date: 2026-10-18 09:12:44.103521

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '3f1a9c2e7b40'
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# Enum columns store member names, matching SQLModel's default mapping.
plan_type = sa.Enum("BASIC", "PRO", "ENTERPRISE", name="plantype")
school_status = sa.Enum("TRIAL", "ACTIVE", "SUSPENDED", "EXPIRED", name="schoolstatus")
credit_kind = sa.Enum("PURCHASE", "BONUS", "REFUND", name="creditkind")


def upgrade() -> None:
    op.create_table(
        "schools",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("subdomain", sa.String(100), nullable=False),
        sa.Column("contact_email", sa.String(320), nullable=False),
        sa.Column("contact_phone", sa.String(50), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("plan", plan_type, nullable=False),
        sa.Column("status", school_status, nullable=False),
        sa.Column("trial_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("total_credits", sa.Integer(), nullable=False),
        sa.Column("used_credits", sa.Integer(), nullable=False),
        sa.Column("api_token_hash", sa.String(64), nullable=False),
        sa.Column("api_token_prefix", sa.String(8), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("used_credits >= 0", name="ck_schools_used_non_negative"),
        sa.CheckConstraint("used_credits <= total_credits", name="ck_schools_available_non_negative"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_schools_subdomain", "schools", ["subdomain"], unique=True)
    op.create_index("ix_schools_api_token_hash", "schools", ["api_token_hash"], unique=True)

    op.create_table(
        "document_types",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("code", sa.String(100), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("name_bn", sa.String(255), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("base_credit_cost", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("base_credit_cost > 0", name="ck_document_types_cost_positive"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_document_types_code", "document_types", ["code"], unique=True)
    op.create_index("ix_document_types_category", "document_types", ["category"])
    op.create_index("ix_document_types_is_active", "document_types", ["is_active"])

    op.create_table(
        "permission_grants",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("school_id", sa.Uuid(), nullable=False),
        sa.Column("document_type_id", sa.Uuid(), nullable=False),
        sa.Column("is_allowed", sa.Boolean(), nullable=False),
        sa.Column("credits_per_use", sa.Integer(), nullable=True),
        sa.Column("granted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("granted_by", sa.String(255), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["school_id"], ["schools.id"]),
        sa.ForeignKeyConstraint(["document_type_id"], ["document_types.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("school_id", "document_type_id", name="uq_permission_grants_school_document"),
    )
    op.create_index("ix_permission_grants_school_id", "permission_grants", ["school_id"])
    op.create_index("ix_permission_grants_document_type_id", "permission_grants", ["document_type_id"])

    op.create_table(
        "consumption_events",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("school_id", sa.Uuid(), nullable=False),
        sa.Column("document_type_id", sa.Uuid(), nullable=False),
        sa.Column("credits_charged", sa.Integer(), nullable=False),
        sa.Column("balance_after", sa.Integer(), nullable=False),
        sa.Column("reference", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["school_id"], ["schools.id"]),
        sa.ForeignKeyConstraint(["document_type_id"], ["document_types.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_consumption_events_school_id", "consumption_events", ["school_id"])
    op.create_index("ix_consumption_events_document_type_id", "consumption_events", ["document_type_id"])
    op.create_index("ix_consumption_events_created_at", "consumption_events", ["created_at"])

    op.create_table(
        "credit_transactions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("school_id", sa.Uuid(), nullable=False),
        sa.Column("kind", credit_kind, nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("reference", sa.String(255), nullable=True),
        sa.Column("balance_after", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["school_id"], ["schools.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_credit_transactions_school_id", "credit_transactions", ["school_id"])
    op.create_index("ix_credit_transactions_created_at", "credit_transactions", ["created_at"])


def downgrade() -> None:
    op.drop_table("credit_transactions")
    op.drop_table("consumption_events")
    op.drop_table("permission_grants")
    op.drop_table("document_types")
    op.drop_table("schools")
    credit_kind.drop(op.get_bind(), checkfirst=True)
    school_status.drop(op.get_bind(), checkfirst=True)
    plan_type.drop(op.get_bind(), checkfirst=True)
