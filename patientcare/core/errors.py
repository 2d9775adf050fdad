"""Domain errors raised by the scheduling services."""

SLOT_TAKEN = 'slot_taken'
DAILY_LIMIT = 'daily_limit'
PROVIDER_UNAVAILABLE = 'provider_unavailable'

CONFLICT_MESSAGES = {
    SLOT_TAKEN: 'This time slot is already booked. Please select a different time.',
    DAILY_LIMIT: (
        'You already have an appointment scheduled for this date. '
        'Please cancel your existing appointment or choose a different date.'
    ),
    PROVIDER_UNAVAILABLE: 'The provider is not available at this time. Please select a different time.',
}


class SchedulingError(Exception):
    """Base class for every error the scheduling core raises."""


class InvalidClockFormat(SchedulingError, ValueError):
    def __init__(self, value):
        self.value = value
        super().__init__(f'Invalid clock time {value!r}; expected HH:MM.')


class WindowValidationError(SchedulingError):
    """Carries every violation found, not only the first."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__('; '.join(self.errors))


class BookingConflict(SchedulingError):
    def __init__(self, reason: str, reasons: list[str] | None = None):
        self.reason = reason
        self.reasons = reasons or [reason]
        self.message = CONFLICT_MESSAGES[reason]
        super().__init__(self.message)


class NotFound(SchedulingError):
    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f'{kind} {identifier!r} not found.')


class IllegalTransition(SchedulingError):
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f'Cannot move appointment from {current} to {requested}.')


class PersistenceError(SchedulingError):
    """Storage write failed; the previous state is intact and the call may be retried."""
