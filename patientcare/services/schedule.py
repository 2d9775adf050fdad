"""Weekly schedule seed values and time-window validation."""

from datetime import date

from patientcare.core import config
from patientcare.core.errors import WindowValidationError
from patientcare.models.availability import WEEKDAYS, DaySchedule, TimeWindow, WeeklySchedule

MORNING = ('08:00', '12:00')
AFTERNOON = ('14:00', '17:00')
DEFAULT_WORKING_DAYS = ('monday', 'tuesday', 'wednesday', 'thursday')


def default_schedule() -> WeeklySchedule:
    """Mon-Thu with a morning and an afternoon window; Fri-Sun off."""
    days = {}
    window_id = 1
    for weekday in WEEKDAYS:
        if weekday not in DEFAULT_WORKING_DAYS:
            days[weekday] = DaySchedule(available=False)
            continue

        windows = []
        for start, end in (MORNING, AFTERNOON):
            windows.append(TimeWindow(id=str(window_id), start=start, end=end))
            window_id += 1
        days[weekday] = DaySchedule(available=True, windows=windows)

    return WeeklySchedule(**days)


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def validate_windows(windows: list[TimeWindow]) -> list[str]:
    errors: list[str] = []
    bounds = [(window.start_minutes, window.end_minutes) for window in windows]

    for index, (start, end) in enumerate(bounds, start=1):
        if start >= end:
            errors.append(f'Slot {index}: Start time must be before end time')
        if end - start < config.MIN_WINDOW_MINUTES:
            errors.append(f'Slot {index}: Minimum slot duration is {config.MIN_WINDOW_MINUTES} minutes')

    for i in range(len(bounds)):
        for j in range(i + 1, len(bounds)):
            first_start, first_end = bounds[i]
            second_start, second_end = bounds[j]
            if first_start < second_end and first_end > second_start:
                errors.append(f'Slots {i + 1} and {j + 1} overlap')

    return errors


def ensure_valid_windows(windows: list[TimeWindow]) -> None:
    errors = validate_windows(windows)
    if errors:
        raise WindowValidationError(errors)


def validate_schedule(schedule: WeeklySchedule) -> list[str]:
    errors = []
    for weekday, day_schedule in schedule.days():
        errors.extend(f'{weekday.capitalize()}: {error}' for error in validate_windows(day_schedule.windows))
    return errors
