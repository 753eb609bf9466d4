"""
Slot Policy for Scheduling Domain

Domain service that validates candidate slot batches and the
consultation-date rule shared by the workflows.
"""

from collections.abc import Iterable
from datetime import UTC, datetime

from serenite.core.domain import ValidationException


def as_utc(value: datetime) -> datetime:
    """Return value as an aware UTC datetime; naive values are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class SlotPolicy:
    """
    Domain service for proposed slot validation.

    Handles:
    - Slot count bounds (at least one, at most ``max_slots``)
    - Rejecting slots in the past
    - Rejecting duplicate slots within one batch
    - Same-calendar-day matching between consultation and confirmed dates

    Example:
        ```python
        policy = SlotPolicy(max_slots=3)
        slots = policy.validate_batch(
            [datetime(2025, 1, 10, 9), datetime(2025, 1, 11, 9)],
            now=datetime(2025, 1, 1, tzinfo=UTC),
        )
        ```
    """

    def __init__(self, max_slots: int = 3):
        """
        Initialize slot policy.

        Args:
            max_slots: Largest batch a single proposal or reschedule may carry
        """
        if max_slots < 1:
            raise ValueError("max_slots must be at least 1")
        self.max_slots = max_slots

    def validate_batch(self, candidates: Iterable[datetime | None] | None, now: datetime) -> list[datetime]:
        """
        Validate a batch of candidate date-times.

        Args:
            candidates: Candidate date-times in the order they were offered
            now: Reference instant for the "not in the past" rule

        Returns:
            The candidates as aware UTC datetimes, order preserved

        Raises:
            ValidationException: If the batch is empty, too large, has a past
                or missing entry, or repeats a date-time
        """
        slots = list(candidates or [])
        if not slots:
            raise ValidationException("At least one proposed date is required.", field="proposed_slots")
        if len(slots) > self.max_slots:
            raise ValidationException(
                f"At most {self.max_slots} proposed dates are allowed.",
                field="proposed_slots",
                details={"count": len(slots), "max": self.max_slots},
            )

        reference = as_utc(now)
        normalized: list[datetime] = []
        seen: set[datetime] = set()
        for position, candidate in enumerate(slots):
            if candidate is None:
                raise ValidationException(
                    "Proposed date is required.",
                    field="proposed_slots",
                    details={"position": position},
                )
            value = as_utc(candidate)
            if value < reference:
                raise ValidationException(
                    f"Proposed date {value.isoformat()} is in the past.",
                    field="proposed_slots",
                    details={"position": position},
                )
            if value in seen:
                raise ValidationException(
                    f"Proposed date {value.isoformat()} is listed more than once.",
                    field="proposed_slots",
                    details={"position": position},
                )
            seen.add(value)
            normalized.append(value)

        return normalized

    @staticmethod
    def same_calendar_day(first: datetime, second: datetime) -> bool:
        """Check if two instants fall on the same UTC calendar day."""
        return as_utc(first).date() == as_utc(second).date()
