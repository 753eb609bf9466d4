"""
Consultation Repository Implementation

SQLAlchemy implementation of IConsultationRepository.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from serenite.core.domain import DuplicateEntityException, EntityNotFoundException
from serenite.domains.scheduling.application.ports.consultation_repository import IConsultationRepository
from serenite.domains.scheduling.domain.entities.consultation import Consultation
from serenite.domains.scheduling.infrastructure.persistence.sqlalchemy.models import (
    CONSULTATION_REQUEST_UNIQUE,
    ConsultationModel,
)

logger = logging.getLogger(__name__)


class SQLAlchemyConsultationRepository(IConsultationRepository):
    """
    SQLAlchemy implementation of consultation repository.

    The unique constraint on appointment_request_id is the last line against
    a second consultation for the same request; its violation is reported as
    DuplicateEntityException.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def save(self, consultation: Consultation) -> Consultation:
        """Insert a new consultation."""
        model = self._to_model(consultation)
        self.session.add(model)
        try:
            await self.session.flush()
        except IntegrityError as e:
            if CONSULTATION_REQUEST_UNIQUE not in str(e.orig):
                raise
            raise DuplicateEntityException(
                entity_type="Consultation",
                field="appointment_request_id",
                value=consultation.appointment_request_id,
                message="A consultation already exists for this request.",
            ) from e

        logger.debug(f"Inserted consultation {model.id} for appointment request {model.appointment_request_id}")
        return self._to_entity(model)

    async def find_by_id(self, consultation_id: int) -> Consultation | None:
        """Find consultation by ID."""
        result = await self.session.execute(select(ConsultationModel).where(ConsultationModel.id == consultation_id))
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def find_by_client(self, client_id: int) -> list[Consultation]:
        """Find a client's consultations, latest consultation date first."""
        return await self._find_latest_first(ConsultationModel.client_id == client_id)

    async def find_by_provider(self, provider_id: int) -> list[Consultation]:
        """Find a provider's consultations, latest consultation date first."""
        return await self._find_latest_first(ConsultationModel.provider_id == provider_id)

    async def find_by_appointment_request(self, request_id: int) -> list[Consultation]:
        """Find the consultations of a request (at most one)."""
        return await self._find_latest_first(ConsultationModel.appointment_request_id == request_id)

    async def find_all(self) -> list[Consultation]:
        """Find every consultation, latest consultation date first."""
        return await self._find_latest_first()

    async def update(self, consultation: Consultation) -> Consultation:
        """Write the clinical content back."""
        model = await self.session.get(ConsultationModel, consultation.id)
        if model is None:
            raise EntityNotFoundException(entity_type="Consultation", entity_id=consultation.id)

        self._update_model(model, consultation)
        await self.session.flush()

        logger.debug(f"Updated consultation {consultation.id}")
        return self._to_entity(model)

    async def delete(self, consultation_id: int) -> bool:
        """Delete consultation."""
        model = await self.session.get(ConsultationModel, consultation_id)
        if model is None:
            return False

        await self.session.delete(model)
        await self.session.flush()
        logger.debug(f"Deleted consultation {consultation_id}")
        return True

    async def _find_latest_first(self, *criteria) -> list[Consultation]:
        query = (
            select(ConsultationModel)
            .where(*criteria)
            .order_by(ConsultationModel.consultation_date.desc(), ConsultationModel.id.desc())
        )
        result = await self.session.execute(query)
        models = result.scalars().all()
        return [self._to_entity(m) for m in models]

    # Mapping methods

    def _to_entity(self, model: ConsultationModel) -> Consultation:
        """Convert model to entity."""
        return Consultation(
            id=model.id,  # type: ignore[arg-type]
            appointment_request_id=model.appointment_request_id,  # type: ignore[arg-type]
            client_id=model.client_id,  # type: ignore[arg-type]
            provider_id=model.provider_id,  # type: ignore[arg-type]
            notes=model.notes,  # type: ignore[arg-type]
            diagnosis=model.diagnosis,  # type: ignore[arg-type]
            prescription=model.prescription,  # type: ignore[arg-type]
            consultation_date=model.consultation_date,  # type: ignore[arg-type]
            created_at=model.created_at,  # type: ignore[arg-type]
            updated_at=model.updated_at,  # type: ignore[arg-type]
        )

    def _to_model(self, consultation: Consultation) -> ConsultationModel:
        """Convert entity to model."""
        return ConsultationModel(
            appointment_request_id=consultation.appointment_request_id,
            client_id=consultation.client_id,
            provider_id=consultation.provider_id,
            notes=consultation.notes,
            diagnosis=consultation.diagnosis,
            prescription=consultation.prescription,
            consultation_date=consultation.consultation_date,
            created_at=consultation.created_at,
            updated_at=consultation.updated_at,
        )

    def _update_model(self, model: ConsultationModel, consultation: Consultation) -> None:
        """Update model from entity."""
        model.notes = consultation.notes  # type: ignore[assignment]
        model.diagnosis = consultation.diagnosis  # type: ignore[assignment]
        model.prescription = consultation.prescription  # type: ignore[assignment]
        model.consultation_date = consultation.consultation_date  # type: ignore[assignment]
        model.updated_at = consultation.updated_at  # type: ignore[assignment]
