"""Prescription schema

Revision ID: 001_prescription_schema
Revises: None
Create Date: 2026-10-19

Creates:
- users: read-only identity mirror (patients, doctors, pharmacists, admins)
- medications: medicine catalog
- prescriptions / prescription_medications: prescriptions and their lines
- scannable_payloads: at most one issued payload per prescription
"""

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_prescription_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("username", sa.String(100), nullable=False, unique=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="patient"),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("gender", sa.String(20), nullable=True),
        sa.Column("mobile", sa.String(30), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_username", "users", ["username"])
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "medications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("medicine_name", sa.String(200), nullable=False),
        sa.Column("dosage", sa.String(100), nullable=False),
        sa.Column("expire_date", sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_medications_id", "medications", ["id"])

    op.create_table(
        "prescriptions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("patient_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("doctor_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("disease", sa.Text(), nullable=False),
        sa.Column("disease_type", sa.String(20), nullable=False, server_default="General"),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("payload_issued", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_prescriptions_id", "prescriptions", ["id"])
    op.create_index("ix_prescriptions_patient_id", "prescriptions", ["patient_id"])
    op.create_index("ix_prescriptions_doctor_id", "prescriptions", ["doctor_id"])
    op.create_index("ix_prescriptions_issued_at", "prescriptions", ["issued_at"])

    op.create_table(
        "prescription_medications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "prescription_id",
            sa.Integer(),
            sa.ForeignKey("prescriptions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("medicine_id", sa.Integer(), sa.ForeignKey("medications.id"), nullable=False),
        sa.Column("timing", JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("amount", sa.Numeric(12, 2), nullable=True),
    )
    op.create_index("ix_prescription_medications_id", "prescription_medications", ["id"])
    op.create_index(
        "ix_prescription_medications_prescription_id",
        "prescription_medications",
        ["prescription_id"],
    )
    # Reminder candidate lookup filters lines with ``timing @> '["M"]'``
    op.create_index(
        "ix_prescription_medications_timing",
        "prescription_medications",
        ["timing"],
        postgresql_using="gin",
    )

    op.create_table(
        "scannable_payloads",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("prescription_id", sa.Integer(), sa.ForeignKey("prescriptions.id"), nullable=False, unique=True),
        sa.Column("patient_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("doctor_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("artifact", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_scannable_payloads_id", "scannable_payloads", ["id"])
    op.create_index("ix_scannable_payloads_patient_id", "scannable_payloads", ["patient_id"])


def downgrade() -> None:
    op.drop_table("scannable_payloads")
    op.drop_index("ix_prescription_medications_timing", table_name="prescription_medications")
    op.drop_table("prescription_medications")
    op.drop_table("prescriptions")
    op.drop_table("medications")
    op.drop_table("users")
