"""
Scheduling Domain Ports

Interfaces (ports) for the scheduling domain following Clean Architecture.
"""

from serenite.domains.scheduling.application.ports.appointment_request_repository import (
    IAppointmentRequestRepository,
)
from serenite.domains.scheduling.application.ports.consultation_repository import IConsultationRepository
from serenite.domains.scheduling.application.ports.unit_of_work import IUnitOfWork, UnitOfWorkFactory

__all__ = [
    "IAppointmentRequestRepository",
    "IConsultationRepository",
    "IUnitOfWork",
    "UnitOfWorkFactory",
]
