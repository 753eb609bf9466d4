"""
Scheduling Domain Entities

Business entities with identity and lifecycle for the scheduling domain.
"""

from serenite.domains.scheduling.domain.entities.appointment_request import (
    AppointmentRequest,
    ProposedSlot,
)
from serenite.domains.scheduling.domain.entities.consultation import Consultation

__all__ = [
    "AppointmentRequest",
    "ProposedSlot",
    "Consultation",
]
