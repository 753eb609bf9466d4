"""
Appointment Request Repository Implementation

SQLAlchemy implementation of IAppointmentRequestRepository.
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from serenite.core.domain import ConcurrencyException, EntityNotFoundException
from serenite.domains.scheduling.application.ports.appointment_request_repository import (
    IAppointmentRequestRepository,
)
from serenite.domains.scheduling.domain.entities.appointment_request import AppointmentRequest, ProposedSlot
from serenite.domains.scheduling.infrastructure.persistence.sqlalchemy.models import (
    AppointmentRequestModel,
    ProposedSlotModel,
)

logger = logging.getLogger(__name__)


class SQLAlchemyAppointmentRequestRepository(IAppointmentRequestRepository):
    """
    SQLAlchemy implementation of appointment request repository.

    Writes are flushed, never committed; the unit of work owns the
    transaction. Slot rows are written only through the slot methods.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def save(self, request: AppointmentRequest) -> AppointmentRequest:
        """Insert a new appointment request."""
        model = self._to_model(request)
        self.session.add(model)
        await self.session.flush()

        logger.debug(f"Inserted appointment request {model.id}")
        return self._to_entity(model, slots=[])

    async def find_by_id(self, request_id: int, for_update: bool = False) -> AppointmentRequest | None:
        """Find appointment request by ID, optionally locking its row."""
        query = select(AppointmentRequestModel).where(AppointmentRequestModel.id == request_id)
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)

        result = await self.session.execute(query)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def find_by_client(self, client_id: int) -> list[AppointmentRequest]:
        """Find a client's requests, newest first."""
        return await self._find_newest_first(AppointmentRequestModel.client_id == client_id)

    async def find_by_provider(self, provider_id: int) -> list[AppointmentRequest]:
        """Find a provider's requests, newest first."""
        return await self._find_newest_first(AppointmentRequestModel.provider_id == provider_id)

    async def find_all(self) -> list[AppointmentRequest]:
        """Find every request, newest first."""
        return await self._find_newest_first()

    async def update(self, request: AppointmentRequest) -> AppointmentRequest:
        """Write the request's scalar fields back, bumping its version."""
        model = await self.session.get(AppointmentRequestModel, request.id)
        if model is None:
            raise EntityNotFoundException(entity_type="AppointmentRequest", entity_id=request.id)
        if model.version != request.version:
            raise ConcurrencyException(
                entity_type="AppointmentRequest",
                entity_id=request.id,
                expected_version=request.version,
                actual_version=model.version,  # type: ignore[arg-type]
            )

        self._update_model(model, request)
        model.version = request.version + 1  # type: ignore[assignment]
        await self.session.flush()

        logger.debug(f"Updated appointment request {request.id} to version {model.version}")
        return self._to_entity(model)

    async def delete(self, request_id: int) -> bool:
        """Delete a request; remaining slot rows go with it through ON DELETE CASCADE."""
        result = await self.session.execute(
            delete(AppointmentRequestModel).where(AppointmentRequestModel.id == request_id)
        )
        deleted = result.rowcount > 0  # type: ignore[attr-defined]
        logger.debug(f"Deleted appointment request {request_id}: {deleted}")
        return deleted

    async def save_proposed_slots(self, request_id: int, slots: list[ProposedSlot]) -> list[ProposedSlot]:
        """Insert a batch of slots for a request, keeping the given order."""
        models = [
            ProposedSlotModel(
                appointment_request_id=request_id,
                proposed_at=slot.proposed_at,
                created_at=slot.created_at,
                updated_at=slot.updated_at,
            )
            for slot in slots
        ]
        self.session.add_all(models)
        await self.session.flush()

        logger.debug(f"Inserted {len(models)} proposed slot(s) for appointment request {request_id}")
        return [self._slot_to_entity(m) for m in models]

    async def find_proposed_slots(self, request_id: int) -> list[ProposedSlot]:
        """Find the live slots of a request, in offer order."""
        result = await self.session.execute(
            select(ProposedSlotModel)
            .where(ProposedSlotModel.appointment_request_id == request_id)
            .order_by(ProposedSlotModel.id)
        )
        return [self._slot_to_entity(m) for m in result.scalars().all()]

    async def delete_proposed_slots(self, request_id: int) -> int:
        """Delete every slot of a request and return how many were removed."""
        result = await self.session.execute(
            delete(ProposedSlotModel).where(ProposedSlotModel.appointment_request_id == request_id)
        )
        removed = result.rowcount  # type: ignore[attr-defined]
        logger.debug(f"Deleted {removed} proposed slot(s) for appointment request {request_id}")
        return removed

    # Helpers

    async def _find_newest_first(self, *criteria) -> list[AppointmentRequest]:
        query = (
            select(AppointmentRequestModel)
            .where(*criteria)
            .order_by(AppointmentRequestModel.created_at.desc(), AppointmentRequestModel.id.desc())
        )
        result = await self.session.execute(query)
        models = result.scalars().all()
        return [self._to_entity(m) for m in models]

    # Mapping methods

    def _to_entity(
        self,
        model: AppointmentRequestModel,
        slots: list[ProposedSlot] | None = None,
    ) -> AppointmentRequest:
        """Convert model to entity."""
        if slots is None:
            slots = [self._slot_to_entity(s) for s in model.proposed_slots]

        return AppointmentRequest(
            id=model.id,  # type: ignore[arg-type]
            client_id=model.client_id,  # type: ignore[arg-type]
            provider_id=model.provider_id,  # type: ignore[arg-type]
            appointment_type=model.appointment_type,  # type: ignore[arg-type]
            status=model.status,  # type: ignore[arg-type]
            confirmed_at=model.confirmed_at,  # type: ignore[arg-type]
            version=model.version or 0,  # type: ignore[arg-type]
            proposed_slots=slots,
            created_at=model.created_at,  # type: ignore[arg-type]
            updated_at=model.updated_at,  # type: ignore[arg-type]
        )

    def _slot_to_entity(self, model: ProposedSlotModel) -> ProposedSlot:
        return ProposedSlot(
            id=model.id,  # type: ignore[arg-type]
            appointment_request_id=model.appointment_request_id,  # type: ignore[arg-type]
            proposed_at=model.proposed_at,  # type: ignore[arg-type]
            created_at=model.created_at,  # type: ignore[arg-type]
            updated_at=model.updated_at,  # type: ignore[arg-type]
        )

    def _to_model(self, request: AppointmentRequest) -> AppointmentRequestModel:
        """Convert entity to model."""
        return AppointmentRequestModel(
            client_id=request.client_id,
            provider_id=request.provider_id,
            appointment_type=request.appointment_type,
            status=request.status,
            confirmed_at=request.confirmed_at,
            version=request.version,
            created_at=request.created_at,
            updated_at=request.updated_at,
        )

    def _update_model(self, model: AppointmentRequestModel, request: AppointmentRequest) -> None:
        """Update model from entity."""
        # Column() attributes read as Column objects to type checkers at class level
        model.appointment_type = request.appointment_type  # type: ignore[assignment]
        model.status = request.status  # type: ignore[assignment]
        model.confirmed_at = request.confirmed_at  # type: ignore[assignment]
        model.updated_at = request.updated_at  # type: ignore[assignment]
