"""
Base Value Object Classes for Domain-Driven Design

Value Objects are immutable domain primitives that have no identity.
They are compared by their values, not by reference.
"""

from enum import Enum


class StatusEnum(str, Enum):
    """
    Base class for status enums.

    Members compare equal to, and render as, their string value.
    """

    def __str__(self) -> str:
        return self.value
