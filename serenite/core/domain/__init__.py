"""
Domain Layer - Core DDD building blocks

This module provides base classes for Domain-Driven Design:
- Entities: Objects with identity and lifecycle
- Value Objects: Status enums
- Exceptions: Domain-specific error handling
"""

from serenite.core.domain.entities import AggregateRoot, Entity
from serenite.core.domain.exceptions import (
    STATE_CONFLICT_EXCEPTIONS,
    ConcurrencyException,
    DomainException,
    DuplicateEntityException,
    EntityNotFoundException,
    InvalidOperationException,
    ValidationException,
)
from serenite.core.domain.value_objects import StatusEnum

__all__ = [
    # Entities
    "Entity",
    "AggregateRoot",
    # Value Objects
    "StatusEnum",
    # Exceptions
    "DomainException",
    "ValidationException",
    "EntityNotFoundException",
    "InvalidOperationException",
    "ConcurrencyException",
    "DuplicateEntityException",
    "STATE_CONFLICT_EXCEPTIONS",
]
