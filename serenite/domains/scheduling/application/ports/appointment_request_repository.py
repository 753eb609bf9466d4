"""
Appointment Request Repository Port

Interface for appointment request data access following Clean Architecture.
"""

from typing import Protocol, runtime_checkable

from serenite.domains.scheduling.domain.entities.appointment_request import (
    AppointmentRequest,
    ProposedSlot,
)


@runtime_checkable
class IAppointmentRequestRepository(Protocol):
    """
    Appointment request repository interface.

    Implementations stage writes in the surrounding unit of work; they never
    commit on their own.

    Example:
        ```python
        class SQLAlchemyAppointmentRequestRepository(IAppointmentRequestRepository):
            async def find_by_id(self, request_id: int, for_update: bool = False) -> AppointmentRequest | None:
                # SQLAlchemy implementation
                pass
        ```
    """

    async def save(self, request: AppointmentRequest) -> AppointmentRequest:
        """
        Insert a new appointment request (without its slots).

        Args:
            request: Request to insert

        Returns:
            The request with its storage-assigned ID
        """
        ...

    async def find_by_id(self, request_id: int, for_update: bool = False) -> AppointmentRequest | None:
        """
        Find appointment request by ID, slots included.

        Args:
            request_id: Unique request identifier
            for_update: Lock the row until the unit of work ends

        Returns:
            AppointmentRequest if found, None otherwise
        """
        ...

    async def find_by_client(self, client_id: int) -> list[AppointmentRequest]:
        """Find a client's requests, newest first."""
        ...

    async def find_by_provider(self, provider_id: int) -> list[AppointmentRequest]:
        """Find a provider's requests, newest first."""
        ...

    async def find_all(self) -> list[AppointmentRequest]:
        """Find all requests, newest first."""
        ...

    async def update(self, request: AppointmentRequest) -> AppointmentRequest:
        """
        Update status, type and confirmed date of an existing request.

        Args:
            request: Request carrying the new state

        Returns:
            The updated request

        Raises:
            EntityNotFoundException: If the request no longer exists
            ConcurrencyException: If the stored version moved on
        """
        ...

    async def delete(self, request_id: int) -> bool:
        """
        Delete an appointment request.

        Args:
            request_id: Request ID

        Returns:
            True if deleted
        """
        ...

    async def save_proposed_slots(self, request_id: int, slots: list[ProposedSlot]) -> list[ProposedSlot]:
        """
        Insert a batch of proposed slots for a request.

        Args:
            request_id: Owning request ID
            slots: Slots to insert, in offer order

        Returns:
            The slots with their storage-assigned IDs
        """
        ...

    async def find_proposed_slots(self, request_id: int) -> list[ProposedSlot]:
        """Find the live proposed slots of a request, in offer order."""
        ...

    async def delete_proposed_slots(self, request_id: int) -> int:
        """
        Delete every proposed slot of a request.

        Returns:
            Number of slots deleted
        """
        ...
