from datetime import date, datetime

from patientcare.models.appointment import AppointmentCandidate
from patientcare.models.availability import DaySchedule, TimeWindow, WeeklySchedule

MONDAY = date(2026, 1, 5)
TUESDAY = date(2026, 1, 6)
FRIDAY = date(2026, 1, 9)
SUNDAY = date(2026, 1, 11)
FIXED_NOW = datetime(2026, 1, 1, 9, 0)


def make_candidate(**overrides) -> AppointmentCandidate:
    values = {
        'patient_id': 'patient1',
        'patient_name': 'John Doe',
        'patient_email': 'john@example.com',
        'provider_id': 'doctor1',
        'provider_name': 'Smith',
        'date': MONDAY,
        'time': '10:00',
        'duration_minutes': 30,
        'type': 'consultation',
        'fee': 25,
    }
    values.update(overrides)
    return AppointmentCandidate(**values)


def monday_morning_schedule() -> WeeklySchedule:
    return WeeklySchedule(
        monday=DaySchedule(available=True, windows=[TimeWindow(start='08:00', end='12:00')]),
    )


def weekday_office_hours() -> WeeklySchedule:
    hours = DaySchedule(available=True, windows=[TimeWindow(start='08:00', end='17:00')])
    return WeeklySchedule(monday=hours, tuesday=hours)
