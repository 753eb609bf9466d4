"""
Consultation Workflow

Application service that gates consultation creation on appointment state
and keeps one consultation per appointment request.
"""

import logging

from serenite.core.domain import (
    DomainException,
    DuplicateEntityException,
    EntityNotFoundException,
    InvalidOperationException,
    ValidationException,
)
from serenite.domains.scheduling.application.dto import ConsultationChanges, ConsultationDraft
from serenite.domains.scheduling.application.ports.unit_of_work import UnitOfWorkFactory
from serenite.domains.scheduling.application.use_cases.appointment_workflow import (
    AppointmentWorkflow,
    Clock,
    utc_now,
)
from serenite.domains.scheduling.domain.entities.appointment_request import AppointmentRequest
from serenite.domains.scheduling.domain.entities.consultation import Consultation
from serenite.domains.scheduling.domain.value_objects.appointment_status import AppointmentStatus

logger = logging.getLogger(__name__)


class ConsultationWorkflow:
    """
    Workflow for consultations.

    Creating a consultation and flipping its appointment request to
    CONSULTED happen in one unit of work. The request row is locked before
    its status is read, so two concurrent creations against the same
    CONFIRMED request cannot both pass the guard.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        appointment_workflow: AppointmentWorkflow,
        clock: Clock | None = None,
    ):
        """
        Initialize workflow with dependencies.

        Args:
            uow_factory: Callable returning a fresh unit of work
            appointment_workflow: Owner of the CONFIRMED -> CONSULTED transition
            clock: Source of the server-assigned creation timestamp
        """
        self._uow_factory = uow_factory
        self._appointments = appointment_workflow
        self._clock = clock or utc_now

    # ==================== COMMANDS ====================

    async def create_consultation(self, draft: ConsultationDraft) -> Consultation:
        """
        Record the consultation of a CONFIRMED appointment request.

        Steps, in order: load and lock the request, check its status,
        validate the payload, store the consultation, mark the request
        CONSULTED. A failure at any step leaves both untouched.

        Raises:
            EntityNotFoundException: Unknown appointment request
            DuplicateEntityException: The request already has a consultation
            InvalidOperationException: The request is PENDING or REFUSED
            ValidationException: The payload is invalid
        """
        request_id = draft.appointment_request_id

        async with self._uow_factory() as uow:
            appointment = await uow.appointment_requests.find_by_id(request_id, for_update=True)
            if appointment is None:
                raise EntityNotFoundException(entity_type="AppointmentRequest", entity_id=request_id)

            try:
                self._guard(appointment)
                consultation = self._build(appointment, draft)
                saved = await uow.consultations.save(consultation)
                await self._appointments.mark_consulted(uow, request_id)
            except DomainException as e:
                logger.warning(f"Consultation rejected for appointment request {request_id}: {e.message}")
                raise

            await uow.commit()

        logger.info(
            f"Consultation {saved.id} created for appointment request {request_id} "
            f"(client {saved.client_id}, provider {saved.provider_id})"
        )
        return saved

    async def update_consultation(self, consultation_id: int, changes: ConsultationChanges) -> Consultation:
        """
        Replace the clinical content of an existing consultation.

        The appointment status is not checked again. While the owning
        request still exists the new date must stay on its confirmed day;
        once the request is cancelled any date is accepted.

        Raises:
            EntityNotFoundException: Unknown consultation
            ValidationException: The new content is invalid or off the confirmed day
        """
        async with self._uow_factory() as uow:
            consultation = await self._load(uow, consultation_id)
            consultation.revise(
                diagnosis=changes.diagnosis,
                consultation_date=changes.consultation_date,
                notes=changes.notes,
                prescription=changes.prescription,
                now=self._clock(),
            )
            appointment = await uow.appointment_requests.find_by_id(consultation.appointment_request_id)
            if appointment is not None and appointment.confirmed_at is not None:
                try:
                    consultation.ensure_matches_confirmed_date(appointment.confirmed_at)
                except ValidationException as e:
                    logger.warning(f"Update rejected for consultation {consultation_id}: {e.message}")
                    raise
            updated = await uow.consultations.update(consultation)
            await uow.commit()

        logger.info(f"Consultation {consultation_id} updated")
        return updated

    async def delete_consultation(self, consultation_id: int) -> None:
        """
        Delete a consultation.

        The owning appointment request keeps its CONSULTED status.

        Raises:
            EntityNotFoundException: Unknown consultation
        """
        async with self._uow_factory() as uow:
            await self._load(uow, consultation_id)
            await uow.consultations.delete(consultation_id)
            await uow.commit()

        logger.info(f"Consultation {consultation_id} deleted")

    # ==================== QUERIES ====================

    async def get(self, consultation_id: int) -> Consultation:
        """Get one consultation; raises EntityNotFoundException if absent."""
        async with self._uow_factory() as uow:
            return await self._load(uow, consultation_id)

    async def list_all(self) -> list[Consultation]:
        async with self._uow_factory() as uow:
            return await uow.consultations.find_all()

    async def list_by_client(self, client_id: int) -> list[Consultation]:
        async with self._uow_factory() as uow:
            return await uow.consultations.find_by_client(client_id)

    async def list_by_provider(self, provider_id: int) -> list[Consultation]:
        async with self._uow_factory() as uow:
            return await uow.consultations.find_by_provider(provider_id)

    async def list_by_appointment_request(self, request_id: int) -> list[Consultation]:
        async with self._uow_factory() as uow:
            return await uow.consultations.find_by_appointment_request(request_id)

    # ==================== GUARDS & VALIDATION ====================

    @staticmethod
    def _guard(appointment: AppointmentRequest) -> None:
        if appointment.status == AppointmentStatus.CONSULTED:
            raise DuplicateEntityException(
                entity_type="Consultation",
                field="appointment_request_id",
                value=appointment.id,
                message="A consultation already exists for this request.",
            )
        if appointment.status != AppointmentStatus.CONFIRMED:
            raise InvalidOperationException(
                operation="create_consultation",
                current_state=appointment.status.value,
                message=(
                    "Consultation requires a CONFIRMED appointment. "
                    f"Current status: {appointment.status.value}"
                ),
            )

    def _build(self, appointment: AppointmentRequest, draft: ConsultationDraft) -> Consultation:
        if not appointment.belongs_to(client_id=draft.client_id, provider_id=draft.provider_id):
            raise ValidationException(
                "Client and provider must match the appointment request.",
                field="appointment_request_id",
                details={"client_id": appointment.client_id, "provider_id": appointment.provider_id},
            )

        consultation = Consultation.for_appointment(
            appointment,
            diagnosis=draft.diagnosis,
            consultation_date=draft.consultation_date,
            notes=draft.notes,
            prescription=draft.prescription,
            created_at=self._clock(),
        )
        consultation.ensure_matches_confirmed_date(appointment.confirmed_at)
        return consultation

    @staticmethod
    async def _load(uow, consultation_id: int) -> Consultation:
        consultation = await uow.consultations.find_by_id(consultation_id)
        if consultation is None:
            raise EntityNotFoundException(entity_type="Consultation", entity_id=consultation_id)
        return consultation
