import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from sample_data import MONDAY, SUNDAY, make_candidate, monday_morning_schedule
from patientcare.core.errors import PersistenceError
from patientcare.models.availability import BlackoutCategory, DaySchedule, TimeWindow, WeeklySchedule
from patientcare.routes.availability_routes import (
    CreateBlackoutRequest,
    OverrideRequest,
    SaveScheduleRequest,
    add_blackout,
    check_availability,
    get_default_schedule,
    get_override,
    get_provider_schedule,
    list_appointment_types,
    list_available_slots,
    list_blackouts,
    list_overrides,
    remove_blackout,
    remove_override,
    save_provider_schedule,
    set_override,
)


@pytest.fixture
def configured_service(availability_service):
    save_provider_schedule('doctor1', SaveScheduleRequest(weekly_schedule=monday_morning_schedule()), availability_service)
    return availability_service


def test_default_schedule_route_returns_seed_schedule() -> None:
    schedule = get_default_schedule()

    assert schedule.monday.available
    assert not schedule.friday.available


def test_appointment_types_route_lists_every_type() -> None:
    types = [option.appointment_type for option in list_appointment_types()]

    assert types == ['consultation', 'follow-up', 'check-up', 'emergency']


def test_get_schedule_reports_schedule_not_set(availability_service) -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_provider_schedule('doctor1', availability_service)

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'This provider has not set a schedule yet.'


def test_save_schedule_returns_stored_record(configured_service) -> None:
    record = get_provider_schedule('doctor1', configured_service)

    assert record.provider_id == 'doctor1'
    assert record.weekly_schedule.monday.windows[0].start == '08:00'


def test_save_schedule_reports_every_window_error(availability_service) -> None:
    schedule = WeeklySchedule(
        monday=DaySchedule(
            available=True,
            windows=[TimeWindow(start='09:00', end='09:10'), TimeWindow(start='09:05', end='10:00')],
        ),
    )

    with pytest.raises(HTTPException) as exception_info:
        save_provider_schedule('doctor1', SaveScheduleRequest(weekly_schedule=schedule), availability_service)

    assert exception_info.value.status_code == 422
    assert exception_info.value.detail == {
        'errors': [
            'Monday: Slot 1: Minimum slot duration is 30 minutes',
            'Monday: Slots 1 and 2 overlap',
        ],
    }


def test_slots_route_distinguishes_missing_schedule(availability_service) -> None:
    response = list_available_slots('doctor1', MONDAY, 30, availability_service)

    assert response.slots == []
    assert not response.schedule_configured


def test_slots_route_returns_resolved_slots(configured_service) -> None:
    response = list_available_slots('doctor1', MONDAY, 30, configured_service)

    assert response.schedule_configured
    assert not response.blacked_out
    assert response.slots == ['08:00', '08:30', '09:00', '09:30', '10:00', '10:30', '11:00', '11:30']


def test_slots_route_hides_booked_slots(configured_service, ledger) -> None:
    ledger.create_appointment(make_candidate(time='09:00', status='confirmed'))

    response = list_available_slots('doctor1', MONDAY, 30, configured_service)

    assert '09:00' not in response.slots
    assert len(response.slots) == 7


def test_override_routes_round_trip(configured_service) -> None:
    set_override('doctor1', SUNDAY, OverrideRequest(windows=[TimeWindow(start='09:00', end='10:00')]), configured_service)

    assert get_override('doctor1', SUNDAY, configured_service).windows[0].end == '10:00'
    assert [override.date for override in list_overrides('doctor1', configured_service)] == [SUNDAY]
    assert list_available_slots('doctor1', SUNDAY, 30, configured_service).slots == ['09:00', '09:30']

    remove_override('doctor1', SUNDAY, configured_service)

    with pytest.raises(HTTPException) as exception_info:
        get_override('doctor1', SUNDAY, configured_service)
    assert exception_info.value.status_code == 404


def test_set_override_validates_windows(configured_service) -> None:
    request = OverrideRequest(windows=[TimeWindow(start='10:00', end='09:00')])

    with pytest.raises(HTTPException) as exception_info:
        set_override('doctor1', SUNDAY, request, configured_service)

    assert exception_info.value.status_code == 422
    assert 'Slot 1: Start time must be before end time' in exception_info.value.detail['errors']
    assert not configured_service.has_override('doctor1', SUNDAY)


def test_set_override_requires_schedule(availability_service) -> None:
    request = OverrideRequest(windows=[TimeWindow(start='09:00', end='10:00')])

    with pytest.raises(HTTPException) as exception_info:
        set_override('doctor1', SUNDAY, request, availability_service)

    assert exception_info.value.status_code == 404


def test_blackout_routes(configured_service) -> None:
    blackout = add_blackout(
        'doctor1',
        CreateBlackoutRequest(date=MONDAY, reason='  Annual leave ', category=BlackoutCategory.VACATION),
        configured_service,
    )

    assert blackout.reason == 'Annual leave'
    assert [item.id for item in list_blackouts('doctor1', configured_service)] == [blackout.id]

    response = list_available_slots('doctor1', MONDAY, 30, configured_service)
    assert response.blacked_out
    assert response.slots == []

    remove_blackout('doctor1', blackout.id, configured_service)
    assert list_blackouts('doctor1', configured_service) == []

    with pytest.raises(HTTPException) as exception_info:
        remove_blackout('doctor1', blackout.id, configured_service)
    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'Blackout date not found.'


def test_blackout_request_rejects_long_reason() -> None:
    with pytest.raises(ValidationError):
        CreateBlackoutRequest(date=MONDAY, reason='x' * 201)


def test_check_route_reports_window_membership(configured_service) -> None:
    assert check_availability('doctor1', MONDAY, '09:15', configured_service).available
    assert not check_availability('doctor1', MONDAY, '12:00', configured_service).available


def test_check_route_rejects_malformed_time(configured_service) -> None:
    with pytest.raises(HTTPException) as exception_info:
        check_availability('doctor1', MONDAY, '9am', configured_service)

    assert exception_info.value.status_code == 400


def test_storage_failure_maps_to_service_unavailable(configured_service, monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_load():
        raise PersistenceError('database offline')

    monkeypatch.setattr(configured_service.availability, 'load_all', failing_load)

    with pytest.raises(HTTPException) as exception_info:
        list_available_slots('doctor1', MONDAY, 30, configured_service)

    assert exception_info.value.status_code == 503
