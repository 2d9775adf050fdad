from datetime import date

import pytest
from pydantic import ValidationError

from patientcare.core.errors import WindowValidationError
from patientcare.models.availability import WEEKDAYS, DaySchedule, TimeWindow, WeeklySchedule
from patientcare.services.schedule import (
    default_schedule,
    ensure_valid_windows,
    validate_schedule,
    validate_windows,
    weekday_name,
)


def _windows(*bounds: tuple[str, str]) -> list[TimeWindow]:
    return [TimeWindow(start=start, end=end) for start, end in bounds]


def test_default_schedule_opens_monday_through_thursday() -> None:
    schedule = default_schedule()

    for weekday in ('monday', 'tuesday', 'wednesday', 'thursday'):
        day = schedule.day(weekday)
        assert day.available
        assert [(window.start, window.end) for window in day.windows] == [('08:00', '12:00'), ('14:00', '17:00')]

    for weekday in ('friday', 'saturday', 'sunday'):
        day = schedule.day(weekday)
        assert not day.available
        assert day.windows == []


def test_default_schedule_returns_a_fresh_value_each_call() -> None:
    first = default_schedule()
    first.monday.windows.clear()

    assert len(default_schedule().monday.windows) == 2


def test_weekly_schedule_always_has_all_seven_days() -> None:
    schedule = WeeklySchedule(monday=DaySchedule(available=True, windows=_windows(('09:00', '10:00'))))

    assert [weekday for weekday, _ in schedule.days()] == list(WEEKDAYS)
    assert not schedule.sunday.available


def test_unavailable_day_drops_its_windows() -> None:
    day = DaySchedule(available=False, windows=_windows(('09:00', '10:00')))

    assert day.windows == []


def test_time_window_rejects_malformed_clock() -> None:
    with pytest.raises(ValidationError):
        TimeWindow(start='9am', end='10:00')


def test_validate_windows_accepts_disjoint_windows() -> None:
    assert validate_windows(_windows(('08:00', '12:00'), ('12:00', '13:00'), ('14:00', '17:00'))) == []


def test_validate_windows_reports_start_after_end() -> None:
    errors = validate_windows(_windows(('12:00', '09:00')))

    assert 'Slot 1: Start time must be before end time' in errors


def test_validate_windows_reports_short_window() -> None:
    assert validate_windows(_windows(('09:00', '09:15'))) == ['Slot 1: Minimum slot duration is 30 minutes']


def test_validate_windows_reports_overlap() -> None:
    assert validate_windows(_windows(('09:00', '11:00'), ('10:30', '12:00'))) == ['Slots 1 and 2 overlap']


def test_validate_windows_returns_every_violation() -> None:
    errors = validate_windows(_windows(('09:00', '09:10'), ('09:05', '10:00'), ('11:00', '10:00')))

    assert errors == [
        'Slot 1: Minimum slot duration is 30 minutes',
        'Slot 3: Start time must be before end time',
        'Slot 3: Minimum slot duration is 30 minutes',
        'Slots 1 and 2 overlap',
    ]


def test_ensure_valid_windows_raises_with_full_error_list() -> None:
    with pytest.raises(WindowValidationError) as exception_info:
        ensure_valid_windows(_windows(('09:00', '11:00'), ('10:00', '10:15')))

    assert exception_info.value.errors == [
        'Slot 2: Minimum slot duration is 30 minutes',
        'Slots 1 and 2 overlap',
    ]


def test_validate_schedule_prefixes_day_names() -> None:
    schedule = WeeklySchedule(
        tuesday=DaySchedule(available=True, windows=_windows(('09:00', '11:00'), ('10:00', '12:00'))),
    )

    assert validate_schedule(schedule) == ['Tuesday: Slots 1 and 2 overlap']


def test_weekday_name_uses_calendar_date() -> None:
    assert weekday_name(date(2026, 1, 5)) == 'monday'
    assert weekday_name(date(2026, 1, 11)) == 'sunday'
