"""
Scheduling Domain Layer

This module contains the core business logic for the Scheduling bounded context,
following Domain-Driven Design (DDD) principles.

Components:
- Entities: AppointmentRequest (Aggregate Root), ProposedSlot, Consultation
- Value Objects: AppointmentStatus
- Domain Services: SlotPolicy (slot batch and consultation-date rules)
"""

from serenite.domains.scheduling.domain.entities import (
    AppointmentRequest,
    Consultation,
    ProposedSlot,
)
from serenite.domains.scheduling.domain.services import SlotPolicy, as_utc
from serenite.domains.scheduling.domain.value_objects import AppointmentStatus

__all__ = [
    # Entities
    "AppointmentRequest",
    "ProposedSlot",
    "Consultation",
    # Value Objects
    "AppointmentStatus",
    # Services
    "SlotPolicy",
    "as_utc",
]
