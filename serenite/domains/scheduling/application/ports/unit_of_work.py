"""
Unit of Work Port

Transaction boundary shared by the scheduling workflows.
"""

from collections.abc import Callable
from types import TracebackType
from typing import Protocol, runtime_checkable

from serenite.domains.scheduling.application.ports.appointment_request_repository import (
    IAppointmentRequestRepository,
)
from serenite.domains.scheduling.application.ports.consultation_repository import (
    IConsultationRepository,
)


@runtime_checkable
class IUnitOfWork(Protocol):
    """
    Unit of work interface.

    Every repository write made inside one ``async with`` block is applied
    together by ``commit()`` or not at all. Leaving the block without
    committing, or through an exception, rolls everything back and releases
    any row locks taken with ``find_by_id(..., for_update=True)``.

    Example:
        ```python
        async with uow_factory() as uow:
            request = await uow.appointment_requests.find_by_id(7, for_update=True)
            request.refuse()
            await uow.appointment_requests.update(request)
            await uow.commit()
        ```
    """

    appointment_requests: IAppointmentRequestRepository
    consultations: IConsultationRepository

    async def __aenter__(self) -> "IUnitOfWork": ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...

    async def commit(self) -> None:
        """Apply every staged write."""
        ...

    async def rollback(self) -> None:
        """Discard every staged write."""
        ...


UnitOfWorkFactory = Callable[[], IUnitOfWork]
