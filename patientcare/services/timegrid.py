"""Conversions between ``HH:MM`` clock strings and minutes past midnight."""

from patientcare.core.errors import InvalidClockFormat

MINUTES_PER_DAY = 24 * 60


def to_minutes(clock: str) -> int:
    if not isinstance(clock, str):
        raise InvalidClockFormat(clock)

    parts = clock.strip().split(':')
    if len(parts) != 2 or not all(part.isdigit() for part in parts):
        raise InvalidClockFormat(clock)

    hours_text, minutes_text = parts
    if len(hours_text) != 2 or len(minutes_text) != 2:
        raise InvalidClockFormat(clock)

    hours, minutes = int(hours_text), int(minutes_text)
    if hours > 23 or minutes > 59:
        raise InvalidClockFormat(clock)

    return hours * 60 + minutes


def to_clock(minutes: int) -> str:
    # No wrap-around: callers keep the value within a single day.
    hours, mins = divmod(minutes, 60)
    return f'{hours:02d}:{mins:02d}'


def is_clock(value: str) -> bool:
    try:
        to_minutes(value)
    except InvalidClockFormat:
        return False
    return True