"""
Scheduling API Dependencies

FastAPI dependencies for the scheduling domain.
"""

from typing import Annotated

from fastapi import Depends

from serenite.core.container import get_container
from serenite.domains.scheduling.application.ports.unit_of_work import UnitOfWorkFactory
from serenite.domains.scheduling.application.use_cases import AppointmentWorkflow, ConsultationWorkflow


def get_uow_factory() -> UnitOfWorkFactory:
    """Get the unit-of-work factory; tests override this dependency."""
    return get_container().uow_factory


UowFactoryDep = Annotated[UnitOfWorkFactory, Depends(get_uow_factory)]


def get_appointment_workflow(uow_factory: UowFactoryDep) -> AppointmentWorkflow:
    """Get AppointmentWorkflow instance bound to the unit-of-work factory."""
    return get_container().create_appointment_workflow(uow_factory)


def get_consultation_workflow(uow_factory: UowFactoryDep) -> ConsultationWorkflow:
    """Get ConsultationWorkflow instance bound to the unit-of-work factory."""
    return get_container().create_consultation_workflow(uow_factory)


# Type aliases for workflow dependencies
AppointmentWorkflowDep = Annotated[AppointmentWorkflow, Depends(get_appointment_workflow)]
ConsultationWorkflowDep = Annotated[ConsultationWorkflow, Depends(get_consultation_workflow)]


__all__ = [
    "AppointmentWorkflowDep",
    "ConsultationWorkflowDep",
    "get_appointment_workflow",
    "get_consultation_workflow",
    "get_uow_factory",
]
