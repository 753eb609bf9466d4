"""
Scheduling SQLAlchemy Models

Database models for scheduling domain persistence.
"""

from datetime import UTC, datetime

from sqlalchemy import (
    Column,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from serenite.database.base import Base
from serenite.domains.scheduling.domain.entities.appointment_request import APPOINTMENT_TYPE_MAX_LENGTH
from serenite.domains.scheduling.domain.value_objects.appointment_status import AppointmentStatus

CONSULTATION_REQUEST_UNIQUE = "uq_consultations_appointment_request_id"
PROPOSED_SLOT_UNIQUE = "uq_proposed_slots_request_proposed_at"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AppointmentRequestModel(Base):
    """SQLAlchemy model for AppointmentRequest aggregate."""

    __tablename__ = "appointment_requests"

    id = Column(Integer, primary_key=True, index=True)

    # References (owned by other services)
    client_id = Column(Integer, nullable=False, index=True)
    provider_id = Column(Integer, nullable=False, index=True)

    # Request details
    appointment_type = Column(String(APPOINTMENT_TYPE_MAX_LENGTH), nullable=False)
    status = Column(
        SQLEnum(AppointmentStatus, name="appointment_status"),
        default=AppointmentStatus.PENDING,
        nullable=False,
        index=True,
    )
    confirmed_at = Column(DateTime(timezone=True), nullable=True)

    # Optimistic concurrency
    version = Column(Integer, default=0, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    # Read side only; slot rows are written through the repository
    proposed_slots = relationship(
        "ProposedSlotModel",
        lazy="selectin",
        order_by="ProposedSlotModel.id",
        viewonly=True,
    )


class ProposedSlotModel(Base):
    """SQLAlchemy model for ProposedSlot entity."""

    __tablename__ = "proposed_slots"
    __table_args__ = (UniqueConstraint("appointment_request_id", "proposed_at", name=PROPOSED_SLOT_UNIQUE),)

    id = Column(Integer, primary_key=True, index=True)
    appointment_request_id = Column(
        Integer,
        ForeignKey("appointment_requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    proposed_at = Column(DateTime(timezone=True), nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class ConsultationModel(Base):
    """SQLAlchemy model for Consultation entity."""

    __tablename__ = "consultations"
    __table_args__ = (UniqueConstraint("appointment_request_id", name=CONSULTATION_REQUEST_UNIQUE),)

    id = Column(Integer, primary_key=True, index=True)
    # No foreign key: a consultation outlives the cancellation of its request
    appointment_request_id = Column(Integer, nullable=False)
    client_id = Column(Integer, nullable=False, index=True)
    provider_id = Column(Integer, nullable=False, index=True)

    # Clinical content
    notes = Column(Text, nullable=True)
    diagnosis = Column(Text, nullable=False)
    prescription = Column(Text, nullable=True)
    consultation_date = Column(DateTime(timezone=True), nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
