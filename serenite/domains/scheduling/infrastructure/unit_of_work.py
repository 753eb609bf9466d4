"""
SQLAlchemy Unit of Work

One AsyncSession, one transaction, both scheduling repositories.
"""

import logging
from types import TracebackType

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from serenite.domains.scheduling.application.ports.unit_of_work import UnitOfWorkFactory
from serenite.domains.scheduling.infrastructure.repositories import (
    SQLAlchemyAppointmentRequestRepository,
    SQLAlchemyConsultationRepository,
)

logger = logging.getLogger(__name__)


class SQLAlchemyUnitOfWork:
    """
    Unit of work backed by a single AsyncSession.

    Leaving the block without ``commit()`` rolls the transaction back, which
    also releases any ``SELECT ... FOR UPDATE`` lock taken inside it.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self._session: AsyncSession | None = None
        self._committed = False

    @classmethod
    def factory(cls, session_factory: async_sessionmaker[AsyncSession]) -> UnitOfWorkFactory:
        """Bind a session factory, returning a callable that opens fresh units of work."""
        return lambda: cls(session_factory)

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        self._session = self._session_factory()
        self._committed = False
        self.appointment_requests = SQLAlchemyAppointmentRequestRepository(self._session)
        self.consultations = SQLAlchemyConsultationRepository(self._session)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            if exc_type is not None or not self._committed:
                await self.rollback()
        finally:
            if self._session is not None:
                await self._session.close()
            self._session = None

    async def commit(self) -> None:
        if self._session is None:
            raise RuntimeError("Unit of work is not active")
        await self._session.commit()
        self._committed = True

    async def rollback(self) -> None:
        if self._session is None:
            return
        await self._session.rollback()
        logger.debug("Unit of work rolled back")
