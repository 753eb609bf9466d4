"""create_scheduling_schema

Revision ID: 001_scheduling_schema
Revises:
Create Date: 2025-01-01

Creates the scheduling tables:
- appointment_requests: client proposals and their lifecycle status
- proposed_slots: candidate date-times, removed with their request
- consultations: one clinical record per appointment request
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_scheduling_schema"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

appointment_status = sa.Enum("PENDING", "CONFIRMED", "REFUSED", "CONSULTED", name="appointment_status")


def upgrade() -> None:
    """Create appointment_requests, proposed_slots and consultations."""

    # ==========================================================================
    # 1. appointment_requests
    # ==========================================================================
    op.create_table(
        "appointment_requests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("client_id", sa.Integer(), nullable=False, comment="Requesting client"),
        sa.Column("provider_id", sa.Integer(), nullable=False, comment="Addressed provider"),
        sa.Column(
            "appointment_type",
            sa.String(50),
            nullable=False,
            comment="Free text, e.g. ONLINE or IN_PERSON",
        ),
        sa.Column("status", appointment_status, nullable=False, server_default="PENDING"),
        sa.Column(
            "confirmed_at",
            sa.DateTime(timezone=True),
            nullable=True,
            comment="Chosen slot; set only while CONFIRMED or CONSULTED",
        ),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_appointment_requests_id", "appointment_requests", ["id"])
    op.create_index("ix_appointment_requests_client_id", "appointment_requests", ["client_id"])
    op.create_index("ix_appointment_requests_provider_id", "appointment_requests", ["provider_id"])
    op.create_index("ix_appointment_requests_status", "appointment_requests", ["status"])
    op.create_index("ix_appointment_requests_created_at", "appointment_requests", ["created_at"])

    # ==========================================================================
    # 2. proposed_slots
    # ==========================================================================
    op.create_table(
        "proposed_slots",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "appointment_request_id",
            sa.Integer(),
            sa.ForeignKey("appointment_requests.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("proposed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint(
            "appointment_request_id",
            "proposed_at",
            name="uq_proposed_slots_request_proposed_at",
        ),
    )
    op.create_index("ix_proposed_slots_id", "proposed_slots", ["id"])
    op.create_index("ix_proposed_slots_appointment_request_id", "proposed_slots", ["appointment_request_id"])

    # ==========================================================================
    # 3. consultations
    # ==========================================================================
    op.create_table(
        "consultations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "appointment_request_id",
            sa.Integer(),
            nullable=False,
            comment="Owning request; kept after the request is cancelled",
        ),
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("provider_id", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("diagnosis", sa.Text(), nullable=False),
        sa.Column("prescription", sa.Text(), nullable=True),
        sa.Column("consultation_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("appointment_request_id", name="uq_consultations_appointment_request_id"),
    )
    op.create_index("ix_consultations_id", "consultations", ["id"])
    op.create_index("ix_consultations_client_id", "consultations", ["client_id"])
    op.create_index("ix_consultations_provider_id", "consultations", ["provider_id"])
    op.create_index("ix_consultations_consultation_date", "consultations", ["consultation_date"])


def downgrade() -> None:
    """Drop the scheduling tables."""
    op.drop_table("consultations")
    op.drop_table("proposed_slots")
    op.drop_table("appointment_requests")
    appointment_status.drop(op.get_bind(), checkfirst=True)
