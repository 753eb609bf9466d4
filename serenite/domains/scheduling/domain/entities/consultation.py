"""
Consultation Entity for Scheduling Domain

The clinical record written once an appointment request has been confirmed.
"""

from dataclasses import dataclass
from datetime import datetime

from serenite.core.domain import Entity, ValidationException

from ..services.slot_policy import SlotPolicy, as_utc
from .appointment_request import AppointmentRequest


@dataclass
class Consultation(Entity[int]):
    """
    Consultation entity.

    Client and provider references are always taken from the owning
    appointment request, never from the caller.
    """

    appointment_request_id: int = 0
    client_id: int = 0
    provider_id: int = 0

    # Clinical content
    notes: str | None = None
    diagnosis: str = ""
    prescription: str | None = None
    consultation_date: datetime | None = None

    @classmethod
    def for_appointment(
        cls,
        appointment: AppointmentRequest,
        diagnosis: str | None,
        consultation_date: datetime | None,
        notes: str | None = None,
        prescription: str | None = None,
        created_at: datetime | None = None,
    ) -> "Consultation":
        """Build a consultation whose parties come from the appointment."""
        consultation = cls(
            appointment_request_id=appointment.id or 0,
            client_id=appointment.client_id,
            provider_id=appointment.provider_id,
            notes=_blank_to_none(notes),
            diagnosis=(diagnosis or "").strip(),
            prescription=_blank_to_none(prescription),
            consultation_date=as_utc(consultation_date) if consultation_date else None,
        )
        if created_at is not None:
            consultation.created_at = as_utc(created_at)
            consultation.updated_at = consultation.created_at
        consultation.validate()
        return consultation

    def validate(self) -> None:
        """Validate the clinical payload."""
        if self.client_id <= 0:
            raise ValidationException("Invalid client ID.", field="client_id")
        if self.provider_id <= 0:
            raise ValidationException("Invalid provider ID.", field="provider_id")
        if self.consultation_date is None:
            raise ValidationException("Consultation date is required.", field="consultation_date")
        if not self.diagnosis or not self.diagnosis.strip():
            raise ValidationException("Diagnosis is required.", field="diagnosis")

    def ensure_matches_confirmed_date(self, confirmed_at: datetime | None) -> None:
        """Require the consultation to fall on the appointment's confirmed day."""
        if confirmed_at is None or self.consultation_date is None:
            raise ValidationException(
                "Consultation date cannot be checked against an unconfirmed appointment.",
                field="consultation_date",
            )
        if not SlotPolicy.same_calendar_day(self.consultation_date, confirmed_at):
            raise ValidationException(
                "Consultation date must be on the same day as the confirmed appointment.",
                field="consultation_date",
                details={
                    "consultation_date": as_utc(self.consultation_date).isoformat(),
                    "confirmed_at": as_utc(confirmed_at).isoformat(),
                },
            )

    def revise(
        self,
        diagnosis: str | None,
        consultation_date: datetime | None,
        notes: str | None = None,
        prescription: str | None = None,
        now: datetime | None = None,
    ) -> None:
        """Replace the clinical content in place."""
        self.diagnosis = (diagnosis or "").strip()
        self.consultation_date = as_utc(consultation_date) if consultation_date else None
        self.notes = _blank_to_none(notes)
        self.prescription = _blank_to_none(prescription)
        self.validate()
        self.touch(now)


def _blank_to_none(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value.strip()
