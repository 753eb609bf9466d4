"""
Appointment Workflow

Application service that owns every status transition of an appointment
request and keeps its proposed-slot set consistent with that status.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from serenite.core.domain import EntityNotFoundException, InvalidOperationException, ValidationException
from serenite.domains.scheduling.application.dto import AppointmentProposal
from serenite.domains.scheduling.application.ports.unit_of_work import IUnitOfWork, UnitOfWorkFactory
from serenite.domains.scheduling.domain.entities.appointment_request import AppointmentRequest
from serenite.domains.scheduling.domain.services.slot_policy import SlotPolicy

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


class AppointmentWorkflow:
    """
    Workflow for appointment requests.

    Each public operation runs in its own unit of work and either applies
    completely or not at all. ``mark_consulted`` is the exception: it joins a
    unit of work opened by ConsultationWorkflow and is not routed to HTTP.

    Example:
        ```python
        workflow = AppointmentWorkflow(uow_factory=SQLAlchemyUnitOfWork.factory(AsyncSessionLocal))
        request = await workflow.propose(
            AppointmentProposal(client_id=1, provider_id=2, appointment_type="ONLINE",
                                proposed_slots=[datetime(2025, 1, 10, 9)])
        )
        await workflow.confirm(request.id, datetime(2025, 1, 10, 9))
        ```
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        slot_policy: SlotPolicy | None = None,
        clock: Clock | None = None,
    ):
        """
        Initialize workflow with dependencies.

        Args:
            uow_factory: Callable returning a fresh unit of work
            slot_policy: Rules for proposed slot batches
            clock: Source of the current instant (UTC)
        """
        self._uow_factory = uow_factory
        self._slot_policy = slot_policy or SlotPolicy()
        self._clock = clock or utc_now

    # ==================== COMMANDS ====================

    async def propose(self, proposal: AppointmentProposal) -> AppointmentRequest:
        """
        Create a PENDING appointment request with its proposed slots.

        Args:
            proposal: Client, provider, type and candidate date-times

        Returns:
            The persisted request, slots included

        Raises:
            ValidationException: If any field of the proposal is invalid
        """
        request = AppointmentRequest.propose(
            client_id=proposal.client_id,
            provider_id=proposal.provider_id,
            appointment_type=proposal.appointment_type,
            slot_times=proposal.proposed_slots,
            policy=self._slot_policy,
            now=self._clock(),
        )

        async with self._uow_factory() as uow:
            saved = await uow.appointment_requests.save(request)
            saved.proposed_slots = await uow.appointment_requests.save_proposed_slots(
                saved.id,  # type: ignore[arg-type]
                request.proposed_slots,
            )
            await uow.commit()

        logger.info(
            f"Appointment request {saved.id} proposed by client {saved.client_id} "
            f"to provider {saved.provider_id} with {len(saved.proposed_slots)} slot(s)"
        )
        return saved

    async def confirm(self, request_id: int, chosen_at: datetime) -> AppointmentRequest:
        """
        Confirm a PENDING request on one of its proposed slots.

        Raises:
            EntityNotFoundException: Unknown request
            InvalidOperationException: Request is not PENDING
            ValidationException: chosen_at is not a proposed slot
        """
        async with self._uow_factory() as uow:
            request = await self._load(uow, request_id, for_update=True)
            try:
                request.confirm(chosen_at, now=self._clock())
            except (InvalidOperationException, ValidationException) as e:
                logger.warning(f"Confirm rejected for appointment request {request_id}: {e.message}")
                raise
            updated = await uow.appointment_requests.update(request)
            await uow.commit()

        logger.info(f"Appointment request {request_id} confirmed for {updated.confirmed_at}")
        return updated

    async def refuse(self, request_id: int) -> AppointmentRequest:
        """
        Refuse a PENDING request.

        Raises:
            EntityNotFoundException: Unknown request
            InvalidOperationException: Request is not PENDING
        """
        async with self._uow_factory() as uow:
            request = await self._load(uow, request_id, for_update=True)
            try:
                request.refuse(now=self._clock())
            except InvalidOperationException as e:
                logger.warning(f"Refuse rejected for appointment request {request_id}: {e.message}")
                raise
            updated = await uow.appointment_requests.update(request)
            await uow.commit()

        logger.info(f"Appointment request {request_id} refused")
        return updated

    async def reschedule(
        self,
        request_id: int,
        new_slots: list[datetime],
        appointment_type: str | None = None,
    ) -> AppointmentRequest:
        """
        Replace the slot set of a PENDING or CONFIRMED request.

        The confirmed date is cleared and the request returns to PENDING.
        A given appointment_type replaces the current one; None keeps it.
        Old slots are deleted before the new batch is inserted, in the same
        unit of work.

        Raises:
            EntityNotFoundException: Unknown request
            InvalidOperationException: Request is REFUSED or CONSULTED
            ValidationException: new_slots breaks the slot rules
        """
        async with self._uow_factory() as uow:
            request = await self._load(uow, request_id, for_update=True)
            try:
                request.reschedule(new_slots, self._slot_policy, self._clock(), appointment_type=appointment_type)
            except (InvalidOperationException, ValidationException) as e:
                logger.warning(f"Reschedule rejected for appointment request {request_id}: {e.message}")
                raise

            updated = await uow.appointment_requests.update(request)
            removed = await uow.appointment_requests.delete_proposed_slots(request_id)
            updated.proposed_slots = await uow.appointment_requests.save_proposed_slots(
                request_id, request.proposed_slots
            )
            await uow.commit()

        logger.info(
            f"Appointment request {request_id} rescheduled: "
            f"{removed} slot(s) replaced by {len(updated.proposed_slots)}"
        )
        return updated

    async def cancel(self, request_id: int) -> None:
        """
        Delete a request and its proposed slots, whatever its status.

        Raises:
            EntityNotFoundException: Unknown request
        """
        async with self._uow_factory() as uow:
            await self._load(uow, request_id, for_update=True)
            await uow.appointment_requests.delete_proposed_slots(request_id)
            await uow.appointment_requests.delete(request_id)
            await uow.commit()

        logger.info(f"Appointment request {request_id} cancelled")

    async def mark_consulted(self, uow: IUnitOfWork, request_id: int) -> AppointmentRequest:
        """
        Flip a CONFIRMED request to CONSULTED inside the caller's unit of work.

        Only ConsultationWorkflow calls this, after it has stored the
        consultation; the caller commits.

        Raises:
            EntityNotFoundException: Unknown request
            InvalidOperationException: Request is not CONFIRMED
        """
        request = await self._load(uow, request_id, for_update=True)
        request.mark_consulted(now=self._clock())
        updated = await uow.appointment_requests.update(request)
        logger.debug(f"Appointment request {request_id} marked as consulted")
        return updated

    # ==================== QUERIES ====================

    async def get(self, request_id: int) -> AppointmentRequest:
        """Get one request; raises EntityNotFoundException if absent."""
        async with self._uow_factory() as uow:
            return await self._load(uow, request_id)

    async def list_all(self) -> list[AppointmentRequest]:
        """List every request, newest first."""
        async with self._uow_factory() as uow:
            return await uow.appointment_requests.find_all()

    async def list_by_client(self, client_id: int) -> list[AppointmentRequest]:
        """List a client's requests, newest first."""
        async with self._uow_factory() as uow:
            return await uow.appointment_requests.find_by_client(client_id)

    async def list_by_provider(self, provider_id: int) -> list[AppointmentRequest]:
        """List a provider's requests, newest first."""
        async with self._uow_factory() as uow:
            return await uow.appointment_requests.find_by_provider(provider_id)

    # ==================== HELPERS ====================

    @staticmethod
    async def _load(uow: IUnitOfWork, request_id: int, for_update: bool = False) -> AppointmentRequest:
        request = await uow.appointment_requests.find_by_id(request_id, for_update=for_update)
        if request is None:
            raise EntityNotFoundException(entity_type="AppointmentRequest", entity_id=request_id)
        return request
