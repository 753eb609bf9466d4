"""
Scheduling Domain Value Objects

Status enum for the appointment request lifecycle.
"""

from serenite.core.domain import StatusEnum


class AppointmentStatus(StatusEnum):
    """
    Appointment request lifecycle states.

    Valid transitions:
    - PENDING -> CONFIRMED (provider picks a slot), REFUSED (provider declines)
    - CONFIRMED -> CONSULTED (consultation recorded), PENDING (rescheduled)
    - PENDING -> PENDING (rescheduled)
    - REFUSED -> (terminal)
    - CONSULTED -> (terminal)

    Cancellation deletes the request and is allowed from any state.
    """

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    REFUSED = "REFUSED"
    CONSULTED = "CONSULTED"

    def can_transition_to(self, new_status: "AppointmentStatus") -> bool:
        """Check if transition to new status is valid."""
        return new_status in _TRANSITIONS[self]

    def is_terminal(self) -> bool:
        """Check if this is a terminal state."""
        return not _TRANSITIONS[self]

    def can_be_rescheduled(self) -> bool:
        """Check if a fresh slot set may replace the current one."""
        return self in (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED)

    def allows_confirmed_date(self) -> bool:
        """Check if a confirmed date-time may be set in this state."""
        return self in (AppointmentStatus.CONFIRMED, AppointmentStatus.CONSULTED)


_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset(
        {AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED, AppointmentStatus.REFUSED}
    ),
    AppointmentStatus.CONFIRMED: frozenset({AppointmentStatus.PENDING, AppointmentStatus.CONSULTED}),
    AppointmentStatus.REFUSED: frozenset(),
    AppointmentStatus.CONSULTED: frozenset(),
}
