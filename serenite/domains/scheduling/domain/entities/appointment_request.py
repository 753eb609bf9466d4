"""
Appointment Request Entity for Scheduling Domain

Represents a client's request for an appointment with a provider, the
candidate slots offered for it, and the slot eventually confirmed.
"""

from dataclasses import dataclass, field
from datetime import datetime

from serenite.core.domain import (
    AggregateRoot,
    Entity,
    InvalidOperationException,
    ValidationException,
)

from ..services.slot_policy import SlotPolicy, as_utc
from ..value_objects.appointment_status import AppointmentStatus

APPOINTMENT_TYPE_MAX_LENGTH = 50


@dataclass
class ProposedSlot(Entity[int]):
    """A single candidate date-time attached to an appointment request."""

    appointment_request_id: int | None = None
    proposed_at: datetime | None = None


@dataclass
class AppointmentRequest(AggregateRoot[int]):
    """
    Appointment request aggregate root.

    Owns the status, the live proposed-slot set and the confirmed date-time.
    Every status change goes through one of the transition methods below,
    which raise InvalidOperationException when the current status forbids it.

    Example:
        ```python
        request = AppointmentRequest.propose(
            client_id=1,
            provider_id=2,
            appointment_type="ONLINE",
            slot_times=[datetime(2025, 1, 10, 9), datetime(2025, 1, 11, 9)],
            policy=SlotPolicy(),
            now=datetime(2025, 1, 1, tzinfo=UTC),
        )
        request.confirm(datetime(2025, 1, 10, 9))
        request.mark_consulted()
        ```
    """

    # References
    client_id: int = 0
    provider_id: int = 0

    # Request details
    appointment_type: str = ""
    status: AppointmentStatus = AppointmentStatus.PENDING
    confirmed_at: datetime | None = None

    # Candidate slots, in the order they were offered
    proposed_slots: list[ProposedSlot] = field(default_factory=list)

    # Factory

    @classmethod
    def propose(
        cls,
        client_id: int | None,
        provider_id: int | None,
        appointment_type: str | None,
        slot_times: list[datetime] | None,
        policy: SlotPolicy,
        now: datetime,
    ) -> "AppointmentRequest":
        """Create a PENDING request from a client proposal."""
        cls._validate_reference("client_id", client_id)
        cls._validate_reference("provider_id", provider_id)
        appointment_type = cls._validate_type(appointment_type)

        slots = policy.validate_batch(slot_times, now)
        created_at = as_utc(now)

        return cls(
            client_id=client_id,  # type: ignore[arg-type]
            provider_id=provider_id,  # type: ignore[arg-type]
            appointment_type=appointment_type,
            status=AppointmentStatus.PENDING,
            proposed_slots=[ProposedSlot(proposed_at=slot) for slot in slots],
            created_at=created_at,
            updated_at=created_at,
        )

    @staticmethod
    def _validate_reference(name: str, value: int | None) -> None:
        if value is None or isinstance(value, bool) or value <= 0:
            kind = name.split("_")[0]
            raise ValidationException(f"Invalid {kind} ID.", field=name)

    @staticmethod
    def _validate_type(appointment_type: str | None) -> str:
        """Return the stripped type; it must be non-blank and fit its column."""
        if appointment_type is None or not appointment_type.strip():
            raise ValidationException("Appointment type is required.", field="appointment_type")
        appointment_type = appointment_type.strip()
        if len(appointment_type) > APPOINTMENT_TYPE_MAX_LENGTH:
            raise ValidationException(
                f"Appointment type must be at most {APPOINTMENT_TYPE_MAX_LENGTH} characters.",
                field="appointment_type",
                details={"length": len(appointment_type), "max": APPOINTMENT_TYPE_MAX_LENGTH},
            )
        return appointment_type

    # Queries

    @property
    def slot_times(self) -> list[datetime]:
        """Get the live proposed date-times, in offer order."""
        return [slot.proposed_at for slot in self.proposed_slots if slot.proposed_at is not None]

    def has_slot(self, value: datetime) -> bool:
        """Check if value is one of the live proposed date-times."""
        target = as_utc(value)
        return any(as_utc(slot) == target for slot in self.slot_times)

    def belongs_to(self, client_id: int | None = None, provider_id: int | None = None) -> bool:
        """Check the request against caller-supplied client/provider references."""
        if client_id is not None and client_id != self.client_id:
            return False
        if provider_id is not None and provider_id != self.provider_id:
            return False
        return True

    # Status Transitions

    def confirm(self, chosen_at: datetime, now: datetime | None = None) -> None:
        """Confirm the request on one of its proposed slots."""
        if self.status != AppointmentStatus.PENDING:
            raise InvalidOperationException(
                operation="confirm",
                current_state=self.status.value,
                message="Only PENDING appointments can be confirmed.",
            )
        if chosen_at is None:
            raise ValidationException("Confirmed date is required.", field="confirmed_at")
        if not self.has_slot(chosen_at):
            raise ValidationException(
                "Confirmed date must be one of the proposed dates.",
                field="confirmed_at",
                details={"confirmed_at": as_utc(chosen_at).isoformat()},
            )

        self.status = AppointmentStatus.CONFIRMED
        self.confirmed_at = as_utc(chosen_at)
        self.touch(now)

    def refuse(self, now: datetime | None = None) -> None:
        """Decline the request."""
        if not self.status.can_transition_to(AppointmentStatus.REFUSED):
            raise InvalidOperationException(
                operation="refuse",
                current_state=self.status.value,
                message="Only PENDING appointments can be refused.",
            )

        self.status = AppointmentStatus.REFUSED
        self.touch(now)

    def reschedule(
        self,
        slot_times: list[datetime] | None,
        policy: SlotPolicy,
        now: datetime,
        appointment_type: str | None = None,
    ) -> None:
        """
        Replace the whole slot set and return the request to PENDING.

        When appointment_type is given it replaces the current type and is
        validated like a proposal's. Nothing changes if validation fails.
        """
        if not self.status.can_be_rescheduled():
            raise InvalidOperationException(
                operation="reschedule",
                current_state=self.status.value,
                message="Only PENDING or CONFIRMED appointments can be rescheduled.",
            )

        if appointment_type is not None:
            appointment_type = self._validate_type(appointment_type)
        slots = policy.validate_batch(slot_times, now)

        if appointment_type is not None:
            self.appointment_type = appointment_type
        self.proposed_slots = [ProposedSlot(appointment_request_id=self.id, proposed_at=slot) for slot in slots]
        self.confirmed_at = None
        self.status = AppointmentStatus.PENDING
        self.touch(now)

    def mark_consulted(self, now: datetime | None = None) -> None:
        """Record that the consultation for this request has been created."""
        if not self.status.can_transition_to(AppointmentStatus.CONSULTED):
            raise InvalidOperationException(
                operation="mark_consulted",
                current_state=self.status.value,
                message="Only CONFIRMED appointments can be marked as consulted.",
            )

        self.status = AppointmentStatus.CONSULTED
        self.touch(now)
