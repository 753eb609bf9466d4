"""
Scheduling API Schemas

Pydantic schemas for API request/response validation.

Request schemas only check JSON types; business rules (positive ids, slot
counts, blank diagnosis) are left to the domain so they surface as 400s.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from serenite.domains.scheduling.domain.entities import AppointmentRequest, Consultation, ProposedSlot


# ==================== Appointment Schemas ====================


class AppointmentProposalRequest(BaseModel):
    """New appointment request schema."""

    client_id: int | None = None
    provider_id: int | None = None
    type: str | None = Field(default=None, description="Appointment type, e.g. ONLINE or IN_PERSON")
    proposed_slots: list[datetime | None] = Field(default_factory=list)


class ConfirmAppointmentRequest(BaseModel):
    """Confirmation schema: the proposed slot the provider picked."""

    confirmed_at: datetime | None = None


class RescheduleAppointmentRequest(BaseModel):
    """Replacement slot set schema."""

    type: str | None = Field(default=None, description="New appointment type; the current one is kept when omitted")
    proposed_slots: list[datetime | None] = Field(default_factory=list)


class ProposedSlotResponse(BaseModel):
    """Proposed slot response schema."""

    id: int
    proposed_at: datetime

    class Config:
        from_attributes = True

    @classmethod
    def from_entity(cls, slot: ProposedSlot) -> "ProposedSlotResponse":
        return cls(id=slot.id or 0, proposed_at=slot.proposed_at)  # type: ignore[arg-type]


class AppointmentResponse(BaseModel):
    """Appointment request response schema."""

    id: int
    client_id: int
    provider_id: int
    type: str
    status: str
    confirmed_at: datetime | None = None
    created_at: datetime
    proposed_slots: list[ProposedSlotResponse]

    @classmethod
    def from_entity(cls, request: AppointmentRequest) -> "AppointmentResponse":
        return cls(
            id=request.id or 0,
            client_id=request.client_id,
            provider_id=request.provider_id,
            type=request.appointment_type,
            status=request.status.value,
            confirmed_at=request.confirmed_at,
            created_at=request.created_at,
            proposed_slots=[ProposedSlotResponse.from_entity(s) for s in request.proposed_slots],
        )


# ==================== Consultation Schemas ====================


class ConsultationCreateRequest(BaseModel):
    """New consultation schema."""

    appointment_request_id: int
    diagnosis: str | None = None
    consultation_date: datetime | None = None
    notes: str | None = None
    prescription: str | None = None
    client_id: int | None = Field(default=None, description="Must match the appointment request when given")
    provider_id: int | None = Field(default=None, description="Must match the appointment request when given")


class ConsultationUpdateRequest(BaseModel):
    """Consultation edit schema."""

    diagnosis: str | None = None
    consultation_date: datetime | None = None
    notes: str | None = None
    prescription: str | None = None


class ConsultationResponse(BaseModel):
    """Consultation response schema."""

    id: int
    appointment_request_id: int
    client_id: int
    provider_id: int
    notes: str | None = None
    diagnosis: str
    prescription: str | None = None
    consultation_date: datetime
    created_at: datetime

    class Config:
        from_attributes = True
