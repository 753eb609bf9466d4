"""
Scheduling Application DTOs

Data Transfer Objects for the Scheduling domain.
"""

from dataclasses import dataclass, field
from datetime import datetime


# ==================== Appointment DTOs ====================


@dataclass
class AppointmentProposal:
    """Client proposal for a new appointment request"""

    client_id: int | None
    provider_id: int | None
    appointment_type: str | None
    proposed_slots: list[datetime] = field(default_factory=list)


# ==================== Consultation DTOs ====================


@dataclass
class ConsultationDraft:
    """Provider input for a new consultation.

    client_id and provider_id are optional; when given they must match the
    appointment request, which stays the source of truth for both.
    """

    appointment_request_id: int
    diagnosis: str | None
    consultation_date: datetime | None
    notes: str | None = None
    prescription: str | None = None
    client_id: int | None = None
    provider_id: int | None = None


@dataclass
class ConsultationChanges:
    """Replacement clinical content for an existing consultation"""

    diagnosis: str | None
    consultation_date: datetime | None
    notes: str | None = None
    prescription: str | None = None
