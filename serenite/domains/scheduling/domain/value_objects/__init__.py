"""
Scheduling Domain Value Objects

Immutable value objects for the scheduling domain.
"""

from serenite.domains.scheduling.domain.value_objects.appointment_status import AppointmentStatus

__all__ = [
    "AppointmentStatus",
]
