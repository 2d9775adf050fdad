from datetime import datetime

import pytest

from sample_data import make_candidate
from patientcare.models.appointment import Appointment, AppointmentStatus
from patientcare.models.notification import NotificationKind
from patientcare.services.notifier import StatusTransitionNotifier, status_change_message
from patientcare.storage.repositories import NotificationRepository


def _appointment(**overrides) -> Appointment:
    return Appointment.from_candidate(make_candidate(**overrides), datetime(2026, 1, 1, 9, 0))


@pytest.mark.parametrize(
    ('new_status', 'verb'),
    [
        (AppointmentStatus.CONFIRMED, 'approved'),
        (AppointmentStatus.REJECTED, 'declined'),
        (AppointmentStatus.CANCELLED, 'cancelled'),
        (AppointmentStatus.COMPLETED, 'completed'),
    ],
)
def test_status_change_message_names_provider_date_and_time(new_status: AppointmentStatus, verb: str) -> None:
    message = status_change_message(AppointmentStatus.PENDING, new_status, _appointment())

    assert message == f'Your appointment with Dr. Smith on 01/05/2026 at 10:00 has been {verb}.'


def test_status_change_message_falls_back_for_other_statuses() -> None:
    message = status_change_message(AppointmentStatus.CONFIRMED, AppointmentStatus.PENDING, _appointment())

    assert message == 'Your appointment status has been updated to pending.'


def test_status_change_message_uses_provider_id_without_name() -> None:
    message = status_change_message(
        AppointmentStatus.PENDING,
        AppointmentStatus.CONFIRMED,
        _appointment(provider_name=''),
    )

    assert 'Dr. doctor1' in message


def test_notify_appends_to_feed_with_kind(notifier) -> None:
    appointment = _appointment()

    confirmed = notifier.notify(appointment, AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED, 'doctor1')
    rejected = notifier.notify(appointment, AppointmentStatus.PENDING, AppointmentStatus.REJECTED, 'doctor1')
    cancelled = notifier.notify(appointment, AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED, 'patient1')

    assert confirmed.kind == NotificationKind.SUCCESS
    assert rejected.kind == NotificationKind.ERROR
    assert cancelled.kind == NotificationKind.INFO
    assert not confirmed.read
    assert len(notifier.notifications.load_all()) == 3


def test_list_for_filters_by_role_newest_first(store) -> None:
    moments = iter([datetime(2026, 1, 1, 9, 0), datetime(2026, 1, 2, 9, 0)])
    notifier = StatusTransitionNotifier(NotificationRepository(store), clock=lambda: next(moments))
    appointment = _appointment()

    older = notifier.notify(appointment, AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED, 'doctor1')
    newer = notifier.notify(appointment, AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED, 'doctor1')

    assert [item.id for item in notifier.list_for('patient1', 'patient')] == [newer.id, older.id]
    assert [item.id for item in notifier.list_for('doctor1', 'doctor')] == [newer.id, older.id]
    assert notifier.list_for('patient2', 'patient') == []

    with pytest.raises(ValueError):
        notifier.list_for('patient1', 'nurse')


def test_mark_read_is_idempotent(notifier) -> None:
    notification = notifier.notify(
        _appointment(),
        AppointmentStatus.PENDING,
        AppointmentStatus.CONFIRMED,
        'doctor1',
    )

    assert notifier.mark_read(notification.id)
    assert notifier.mark_read(notification.id)
    assert notifier.list_for('patient1', 'patient')[0].read
    assert not notifier.mark_read('missing')
