"""Appointment ledger with booking conflict checks and the status state machine."""

import logging
from datetime import date, datetime
from typing import Callable

from patientcare.core.errors import (
    DAILY_LIMIT,
    SLOT_TAKEN,
    BookingConflict,
    IllegalTransition,
    NotFound,
    PersistenceError,
)
from patientcare.models.appointment import (
    Appointment,
    AppointmentCandidate,
    AppointmentStatus,
    can_transition,
)
from patientcare.services.notifier import DOCTOR_ROLE, PATIENT_ROLE, StatusTransitionNotifier
from patientcare.services.patient_records import LoggingPatientRecordsHook, PatientRecordsHook
from patientcare.services.timegrid import to_minutes
from patientcare.storage.repositories import AppointmentRepository

logger = logging.getLogger(__name__)

ADMIN_ROLE = 'admin'


def _chronological(appointment: Appointment) -> tuple[date, int]:
    return appointment.date, to_minutes(appointment.time)


def find_conflicts(appointments: list[Appointment], candidate: AppointmentCandidate) -> list[str]:
    """Return every booking rule ``candidate`` would break, slot rule first."""
    active = [appointment for appointment in appointments if appointment.is_active]
    reasons = []

    if any(
        appointment.provider_id == candidate.provider_id
        and appointment.date == candidate.date
        and appointment.time == candidate.time
        for appointment in active
    ):
        reasons.append(SLOT_TAKEN)

    if any(
        appointment.patient_id == candidate.patient_id and appointment.date == candidate.date
        for appointment in active
    ):
        reasons.append(DAILY_LIMIT)

    return reasons


class BookingLedger:
    def __init__(
        self,
        appointments: AppointmentRepository,
        notifier: StatusTransitionNotifier,
        patient_records: PatientRecordsHook | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.appointments = appointments
        self.notifier = notifier
        self.patient_records = patient_records or LoggingPatientRecordsHook()
        self.clock = clock

    def create_appointment(self, candidate: AppointmentCandidate) -> Appointment:
        def mutation(records: list[Appointment]) -> Appointment:
            reasons = find_conflicts(records, candidate)
            if reasons:
                raise BookingConflict(reasons[0], reasons)

            appointment = Appointment.from_candidate(candidate, self.clock())
            records.append(appointment)
            return appointment

        try:
            appointment = self.appointments.update_atomically(mutation)
        except BookingConflict as conflict:
            logger.warning(
                'Booking rejected for patient %s with provider %s on %s %s: %s',
                candidate.patient_id,
                candidate.provider_id,
                candidate.date.isoformat(),
                candidate.time,
                ', '.join(conflict.reasons),
            )
            raise

        logger.info('Booked appointment %s (%s)', appointment.id, appointment.status.value)
        self._run_hook(self.patient_records.on_appointment_created, appointment)
        return appointment

    def update_status(
        self,
        appointment_id: str,
        new_status: AppointmentStatus,
        actor_id: str,
        note: str | None = None,
    ) -> Appointment:
        transition = {}

        def mutation(records: list[Appointment]) -> Appointment:
            appointment = next((record for record in records if record.id == appointment_id), None)
            if appointment is None:
                raise NotFound('Appointment', appointment_id)

            old_status = appointment.status
            if not can_transition(old_status, new_status):
                raise IllegalTransition(old_status.value, new_status.value)

            if note:
                appointment.notes = note
            appointment.status = new_status
            appointment.updated_at = self.clock()
            transition['old_status'] = old_status
            return appointment

        appointment = self.appointments.update_atomically(mutation)
        old_status = transition['old_status']
        logger.info(
            'Appointment %s moved %s -> %s by %s',
            appointment.id,
            old_status.value,
            new_status.value,
            actor_id,
        )

        try:
            self.notifier.notify(appointment, old_status, new_status, actor_id)
        except PersistenceError:
            logger.exception('Status of appointment %s changed but the notification was not stored', appointment.id)

        if new_status == AppointmentStatus.COMPLETED:
            self._run_hook(self.patient_records.on_appointment_completed, appointment)

        return appointment

    def confirm(self, appointment_id: str, actor_id: str) -> Appointment:
        return self.update_status(appointment_id, AppointmentStatus.CONFIRMED, actor_id)

    def reject(self, appointment_id: str, actor_id: str, reason: str | None = None) -> Appointment:
        note = f'Rejected: {reason}' if reason else None
        return self.update_status(appointment_id, AppointmentStatus.REJECTED, actor_id, note)

    def cancel(self, appointment_id: str, reason: str | None = None, actor_id: str = '') -> Appointment:
        note = f'Cancelled: {reason}' if reason else 'Cancelled'
        return self.update_status(appointment_id, AppointmentStatus.CANCELLED, actor_id, note)

    def complete(self, appointment_id: str, note: str | None = None, actor_id: str = '') -> Appointment:
        return self.update_status(
            appointment_id,
            AppointmentStatus.COMPLETED,
            actor_id,
            note or 'Appointment completed',
        )

    def _run_hook(self, hook: Callable[[Appointment], None], appointment: Appointment) -> None:
        try:
            hook(appointment)
        except Exception:
            logger.exception('Patient records hook failed for appointment %s', appointment.id)

    # Queries

    def get(self, appointment_id: str) -> Appointment:
        appointment = next(
            (record for record in self.appointments.load_all() if record.id == appointment_id),
            None,
        )
        if appointment is None:
            raise NotFound('Appointment', appointment_id)
        return appointment

    def list_for_provider(
        self,
        provider_id: str,
        day: date | None = None,
        status: AppointmentStatus | None = None,
    ) -> list[Appointment]:
        matches = [
            appointment
            for appointment in self.appointments.load_all()
            if appointment.provider_id == provider_id
            and (day is None or appointment.date == day)
            and (status is None or appointment.status == status)
        ]
        return sorted(matches, key=_chronological)

    def list_for_patient(self, patient_id: str) -> list[Appointment]:
        matches = [record for record in self.appointments.load_all() if record.patient_id == patient_id]
        return sorted(matches, key=_chronological)

    def has_patient_appointment_on_date(self, patient_id: str, day: date) -> bool:
        return any(
            appointment.patient_id == patient_id and appointment.date == day and appointment.is_active
            for appointment in self.appointments.load_all()
        )

    def upcoming(self, today: date, provider_id: str | None = None) -> list[Appointment]:
        closed = {AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED}
        matches = [
            appointment
            for appointment in self.appointments.load_all()
            if (provider_id is None or appointment.provider_id == provider_id)
            and appointment.date >= today
            and appointment.status not in closed
        ]
        return sorted(matches, key=_chronological)

    def past(self, today: date, provider_id: str | None = None) -> list[Appointment]:
        matches = [
            appointment
            for appointment in self.appointments.load_all()
            if (provider_id is None or appointment.provider_id == provider_id)
            and (appointment.date < today or appointment.status == AppointmentStatus.COMPLETED)
        ]
        return sorted(matches, key=_chronological, reverse=True)

    def stats(self, user_id: str, role: str) -> dict[str, int]:
        appointments = self.appointments.load_all()
        if role == DOCTOR_ROLE:
            appointments = [record for record in appointments if record.provider_id == user_id]
        elif role == PATIENT_ROLE:
            appointments = [record for record in appointments if record.patient_id == user_id]
        elif role != ADMIN_ROLE:
            raise ValueError(f'Unknown role {role!r}.')

        counts = {'total': len(appointments)}
        for status in AppointmentStatus:
            counts[status.value] = sum(1 for record in appointments if record.status == status)
        return counts
