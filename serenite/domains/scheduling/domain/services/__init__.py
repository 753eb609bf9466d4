"""
Scheduling Domain Services

Domain services that encapsulate rules spanning several values.
"""

from serenite.domains.scheduling.domain.services.slot_policy import SlotPolicy, as_utc

__all__ = [
    "SlotPolicy",
    "as_utc",
]
