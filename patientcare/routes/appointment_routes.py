from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ValidationError, field_validator

from patientcare.core import config
from patientcare.core.errors import (
    PROVIDER_UNAVAILABLE,
    BookingConflict,
    IllegalTransition,
    NotFound,
    PersistenceError,
)
from patientcare.models.appointment import Appointment, AppointmentCandidate, AppointmentStatus
from patientcare.routes.dependencies import get_availability_service, get_booking_ledger, storage_unavailable
from patientcare.services.availability_service import AvailabilityService
from patientcare.services.booking_ledger import ADMIN_ROLE, BookingLedger
from patientcare.services.notifier import DOCTOR_ROLE, PATIENT_ROLE

router = APIRouter(tags=['appointments'])

USER_ROLES = {PATIENT_ROLE, DOCTOR_ROLE, ADMIN_ROLE}


def _normalize_actor(value: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError('Actor id is required.')
    return normalized


def _normalize_text(value: str | None) -> str | None:
    if value is None:
        return None

    normalized = value.strip()
    if not normalized:
        return None

    if len(normalized) > config.MAX_APPOINTMENT_NOTES_LENGTH:
        raise ValueError(f'Notes must be {config.MAX_APPOINTMENT_NOTES_LENGTH} characters or fewer.')

    return normalized


class UpdateStatusRequest(BaseModel):
    status: AppointmentStatus
    actor_id: str
    note: str | None = None

    @field_validator('actor_id')
    @classmethod
    def validate_actor_id(cls, value: str) -> str:
        return _normalize_actor(value)

    @field_validator('note')
    @classmethod
    def validate_note(cls, value: str | None) -> str | None:
        return _normalize_text(value)


class CancelAppointmentRequest(BaseModel):
    actor_id: str
    reason: str | None = None

    @field_validator('actor_id')
    @classmethod
    def validate_actor_id(cls, value: str) -> str:
        return _normalize_actor(value)

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str | None) -> str | None:
        return _normalize_text(value)


class CompleteAppointmentRequest(BaseModel):
    actor_id: str
    note: str | None = None

    @field_validator('actor_id')
    @classmethod
    def validate_actor_id(cls, value: str) -> str:
        return _normalize_actor(value)

    @field_validator('note')
    @classmethod
    def validate_note(cls, value: str | None) -> str | None:
        return _normalize_text(value)


class AppointmentStatsResponse(BaseModel):
    total: int
    pending: int
    confirmed: int
    rejected: int
    cancelled: int
    completed: int


def booking_conflict(exc: BookingConflict) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={'reason': exc.reason, 'reasons': exc.reasons, 'message': exc.message},
    )


def appointment_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail='Appointment not found.',
    )


def illegal_transition(exc: IllegalTransition) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=str(exc),
    )


def apply_status_change(change) -> Appointment:
    try:
        return change()
    except NotFound as exc:
        raise appointment_not_found() from exc
    except IllegalTransition as exc:
        raise illegal_transition(exc) from exc
    except ValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail={'errors': [error['msg'] for error in exc.errors()]},
        ) from exc
    except PersistenceError as exc:
        raise storage_unavailable() from exc


@router.post('', response_model=Appointment, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: AppointmentCandidate,
    ledger: BookingLedger = Depends(get_booking_ledger),
    availability: AvailabilityService = Depends(get_availability_service),
):
    try:
        # Provider hours are read outside the ledger write; the ledger only guards bookings.
        if config.BOOKING_REQUIRES_AVAILABILITY and not availability.is_available(
            data.provider_id,
            data.date,
            data.time,
        ):
            raise BookingConflict(PROVIDER_UNAVAILABLE)

        return ledger.create_appointment(data)
    except BookingConflict as exc:
        raise booking_conflict(exc) from exc
    except PersistenceError as exc:
        raise storage_unavailable() from exc


@router.get('', response_model=list[Appointment])
def list_appointments(
    provider_id: str | None = Query(default=None),
    patient_id: str | None = Query(default=None),
    appointment_date: date | None = Query(default=None, alias='date'),
    appointment_status: AppointmentStatus | None = Query(default=None, alias='status'),
    ledger: BookingLedger = Depends(get_booking_ledger),
):
    if not provider_id and not patient_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Either provider_id or patient_id is required.',
        )

    try:
        if provider_id:
            appointments = ledger.list_for_provider(provider_id, appointment_date, appointment_status)
            if patient_id:
                appointments = [record for record in appointments if record.patient_id == patient_id]
            return appointments

        appointments = ledger.list_for_patient(patient_id)
    except PersistenceError as exc:
        raise storage_unavailable() from exc

    return [
        record
        for record in appointments
        if (appointment_date is None or record.date == appointment_date)
        and (appointment_status is None or record.status == appointment_status)
    ]


@router.get('/upcoming', response_model=list[Appointment])
def list_upcoming_appointments(
    provider_id: str | None = Query(default=None),
    ledger: BookingLedger = Depends(get_booking_ledger),
):
    try:
        return ledger.upcoming(datetime.now().date(), provider_id)
    except PersistenceError as exc:
        raise storage_unavailable() from exc


@router.get('/past', response_model=list[Appointment])
def list_past_appointments(
    provider_id: str | None = Query(default=None),
    ledger: BookingLedger = Depends(get_booking_ledger),
):
    try:
        return ledger.past(datetime.now().date(), provider_id)
    except PersistenceError as exc:
        raise storage_unavailable() from exc


@router.get('/stats', response_model=AppointmentStatsResponse)
def get_appointment_stats(
    user_id: str = Query(...),
    role: str = Query(...),
    ledger: BookingLedger = Depends(get_booking_ledger),
):
    normalized_role = role.strip().lower()
    if normalized_role not in USER_ROLES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Role must be patient, doctor or admin.',
        )

    try:
        return AppointmentStatsResponse(**ledger.stats(user_id, normalized_role))
    except PersistenceError as exc:
        raise storage_unavailable() from exc


@router.get('/{appointment_id}', response_model=Appointment)
def get_appointment(appointment_id: str, ledger: BookingLedger = Depends(get_booking_ledger)):
    try:
        return ledger.get(appointment_id)
    except NotFound as exc:
        raise appointment_not_found() from exc
    except PersistenceError as exc:
        raise storage_unavailable() from exc


@router.post('/{appointment_id}/status', response_model=Appointment)
def update_appointment_status(
    appointment_id: str,
    data: UpdateStatusRequest,
    ledger: BookingLedger = Depends(get_booking_ledger),
):
    return apply_status_change(
        lambda: ledger.update_status(appointment_id, data.status, data.actor_id, data.note)
    )


@router.post('/{appointment_id}/cancel', response_model=Appointment)
def cancel_appointment(
    appointment_id: str,
    data: CancelAppointmentRequest,
    ledger: BookingLedger = Depends(get_booking_ledger),
):
    return apply_status_change(lambda: ledger.cancel(appointment_id, data.reason, data.actor_id))


@router.post('/{appointment_id}/complete', response_model=Appointment)
def complete_appointment(
    appointment_id: str,
    data: CompleteAppointmentRequest,
    ledger: BookingLedger = Depends(get_booking_ledger),
):
    return apply_status_change(lambda: ledger.complete(appointment_id, data.note, data.actor_id))
