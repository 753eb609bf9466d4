"""
Dependency Injection Container

Wires the scheduling workflows to a unit-of-work factory.
"""

import logging

from serenite.config.settings import Settings, get_settings
from serenite.database.async_db import get_session_factory
from serenite.domains.scheduling.application.ports.unit_of_work import UnitOfWorkFactory
from serenite.domains.scheduling.application.use_cases import AppointmentWorkflow, ConsultationWorkflow
from serenite.domains.scheduling.domain.services.slot_policy import SlotPolicy
from serenite.domains.scheduling.infrastructure.unit_of_work import SQLAlchemyUnitOfWork

logger = logging.getLogger(__name__)


class DependencyContainer:
    """
    Dependency Injection Container.

    Builds workflows against whatever unit-of-work factory it is given;
    the SQLAlchemy factory is used when none is supplied.
    """

    def __init__(self, settings: Settings | None = None, uow_factory: UnitOfWorkFactory | None = None):
        self._settings = settings or get_settings()
        self._uow_factory = uow_factory

    @property
    def uow_factory(self) -> UnitOfWorkFactory:
        if self._uow_factory is None:
            self._uow_factory = SQLAlchemyUnitOfWork.factory(get_session_factory())
        return self._uow_factory

    def create_slot_policy(self) -> SlotPolicy:
        return SlotPolicy(max_slots=self._settings.MAX_PROPOSED_SLOTS)

    def create_appointment_workflow(self, uow_factory: UnitOfWorkFactory | None = None) -> AppointmentWorkflow:
        """Create AppointmentWorkflow with dependencies"""
        return AppointmentWorkflow(
            uow_factory=uow_factory or self.uow_factory,
            slot_policy=self.create_slot_policy(),
        )

    def create_consultation_workflow(self, uow_factory: UnitOfWorkFactory | None = None) -> ConsultationWorkflow:
        """Create ConsultationWorkflow with dependencies"""
        factory = uow_factory or self.uow_factory
        return ConsultationWorkflow(
            uow_factory=factory,
            appointment_workflow=self.create_appointment_workflow(factory),
        )


_container: DependencyContainer | None = None


def get_container() -> DependencyContainer:
    """
    Get global container instance (singleton).
    """
    global _container

    if _container is None:
        logger.info("Initializing global DependencyContainer")
        _container = DependencyContainer()

    return _container


def reset_container() -> None:
    """
    Reset global container instance.

    Useful for testing or reconfiguration.
    """
    global _container
    logger.info("Resetting global DependencyContainer")
    _container = None
