"""
Scheduling Domain Repositories

SQLAlchemy implementations of scheduling domain repositories.
"""

from serenite.domains.scheduling.infrastructure.repositories.appointment_request_repository import (
    SQLAlchemyAppointmentRequestRepository,
)
from serenite.domains.scheduling.infrastructure.repositories.consultation_repository import (
    SQLAlchemyConsultationRepository,
)

__all__ = [
    "SQLAlchemyAppointmentRequestRepository",
    "SQLAlchemyConsultationRepository",
]
