"""Hooks into the patient records subsystem."""

import logging

from patientcare.models.appointment import Appointment

logger = logging.getLogger(__name__)


class PatientRecordsHook:
    """Receives booking lifecycle events. Implementations must not assume delivery."""

    def on_appointment_created(self, appointment: Appointment) -> None:
        raise NotImplementedError

    def on_appointment_completed(self, appointment: Appointment) -> None:
        raise NotImplementedError


class LoggingPatientRecordsHook(PatientRecordsHook):
    def on_appointment_created(self, appointment: Appointment) -> None:
        logger.info(
            'Visit booked for patient %s with provider %s on %s',
            appointment.patient_id,
            appointment.provider_id,
            appointment.date.isoformat(),
        )

    def on_appointment_completed(self, appointment: Appointment) -> None:
        logger.info('Visit completed for patient %s (appointment %s)', appointment.patient_id, appointment.id)
