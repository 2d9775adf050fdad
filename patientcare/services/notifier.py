"""Patient-facing notifications for appointment status changes."""

import logging
from datetime import datetime
from typing import Callable

from patientcare.models.appointment import Appointment, AppointmentStatus
from patientcare.models.notification import Notification, NotificationKind
from patientcare.storage.repositories import NotificationRepository

logger = logging.getLogger(__name__)

PATIENT_ROLE = 'patient'
DOCTOR_ROLE = 'doctor'

STATUS_VERBS = {
    AppointmentStatus.CONFIRMED: 'approved',
    AppointmentStatus.REJECTED: 'declined',
    AppointmentStatus.CANCELLED: 'cancelled',
    AppointmentStatus.COMPLETED: 'completed',
}


def status_change_message(
    old_status: AppointmentStatus,
    new_status: AppointmentStatus,
    appointment: Appointment,
) -> str:
    del old_status
    verb = STATUS_VERBS.get(new_status)
    if verb is None:
        return f'Your appointment status has been updated to {new_status.value}.'

    provider = appointment.provider_name or appointment.provider_id
    when = appointment.date.strftime('%m/%d/%Y')
    return f'Your appointment with Dr. {provider} on {when} at {appointment.time} has been {verb}.'


def notification_kind(new_status: AppointmentStatus) -> NotificationKind:
    if new_status == AppointmentStatus.CONFIRMED:
        return NotificationKind.SUCCESS
    if new_status == AppointmentStatus.REJECTED:
        return NotificationKind.ERROR
    return NotificationKind.INFO


class StatusTransitionNotifier:
    def __init__(self, notifications: NotificationRepository, clock: Callable[[], datetime] = datetime.now):
        self.notifications = notifications
        self.clock = clock

    def notify(
        self,
        appointment: Appointment,
        old_status: AppointmentStatus,
        new_status: AppointmentStatus,
        actor_id: str,
    ) -> Notification:
        notification = Notification(
            appointment_id=appointment.id,
            patient_id=appointment.patient_id,
            provider_id=appointment.provider_id,
            message=status_change_message(old_status, new_status, appointment),
            kind=notification_kind(new_status),
            created_at=self.clock(),
            updated_by=actor_id,
        )

        def append(items: list[Notification]) -> Notification:
            items.append(notification)
            return notification

        self.notifications.update_atomically(append)
        logger.info(
            'Notified patient %s: appointment %s %s -> %s',
            appointment.patient_id,
            appointment.id,
            old_status.value,
            new_status.value,
        )
        return notification

    def list_for(self, user_id: str, role: str) -> list[Notification]:
        if role == PATIENT_ROLE:
            matches = [item for item in self.notifications.load_all() if item.patient_id == user_id]
        elif role == DOCTOR_ROLE:
            matches = [item for item in self.notifications.load_all() if item.provider_id == user_id]
        else:
            raise ValueError(f'Unknown role {role!r}.')
        return sorted(matches, key=lambda item: item.created_at, reverse=True)

    def mark_read(self, notification_id: str) -> bool:
        def mutation(items: list[Notification]) -> bool:
            for item in items:
                if item.id == notification_id:
                    item.read = True
                    return True
            return False

        return self.notifications.update_atomically(mutation)
