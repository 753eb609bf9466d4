"""
Consultation Repository Port

Interface for consultation data access following Clean Architecture.
"""

from typing import Protocol, runtime_checkable

from serenite.domains.scheduling.domain.entities.consultation import Consultation


@runtime_checkable
class IConsultationRepository(Protocol):
    """
    Consultation repository interface.

    At most one consultation may be stored per appointment request; a second
    insert for the same request raises DuplicateEntityException.
    """

    async def save(self, consultation: Consultation) -> Consultation:
        """
        Insert a new consultation.

        Args:
            consultation: Consultation to insert

        Returns:
            The consultation with its storage-assigned ID

        Raises:
            DuplicateEntityException: If the request already has a consultation
        """
        ...

    async def find_by_id(self, consultation_id: int) -> Consultation | None:
        """
        Find consultation by ID.

        Args:
            consultation_id: Unique consultation identifier

        Returns:
            Consultation if found, None otherwise
        """
        ...

    async def find_by_client(self, client_id: int) -> list[Consultation]:
        """Find a client's consultations, most recent consultation date first."""
        ...

    async def find_by_provider(self, provider_id: int) -> list[Consultation]:
        """Find a provider's consultations, most recent consultation date first."""
        ...

    async def find_by_appointment_request(self, request_id: int) -> list[Consultation]:
        """Find the consultations recorded against one appointment request."""
        ...

    async def find_all(self) -> list[Consultation]:
        """Find all consultations, most recent consultation date first."""
        ...

    async def update(self, consultation: Consultation) -> Consultation:
        """
        Update the clinical content of an existing consultation.

        Raises:
            EntityNotFoundException: If the consultation no longer exists
        """
        ...

    async def delete(self, consultation_id: int) -> bool:
        """
        Delete consultation.

        Returns:
            True if deleted
        """
        ...
