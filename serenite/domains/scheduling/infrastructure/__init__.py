"""
Scheduling Infrastructure Layer

SQLAlchemy models, repositories and the unit of work.
"""

from serenite.domains.scheduling.infrastructure.unit_of_work import SQLAlchemyUnitOfWork

__all__ = ["SQLAlchemyUnitOfWork"]
