from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field, field_validator

from patientcare.core import config
from patientcare.core.errors import InvalidClockFormat, NotFound, PersistenceError, WindowValidationError
from patientcare.models.appointment import AppointmentType
from patientcare.models.availability import (
    BlackoutCategory,
    BlackoutDate,
    ProviderAvailability,
    TimeWindow,
    WeeklySchedule,
)
from patientcare.routes.dependencies import get_availability_service, storage_unavailable
from patientcare.services.availability_service import AvailabilityService
from patientcare.services.schedule import default_schedule, ensure_valid_windows
from patientcare.services.timegrid import is_clock

router = APIRouter(tags=['availability'])

MAX_SLOT_DURATION_MINUTES = 240
MAX_BLACKOUT_REASON_LENGTH = 200
SCHEDULE_NOT_SET_DETAIL = 'This provider has not set a schedule yet.'


class SaveScheduleRequest(BaseModel):
    weekly_schedule: WeeklySchedule
    blackout_dates: list[BlackoutDate] | None = None


class OverrideRequest(BaseModel):
    windows: list[TimeWindow] = Field(default_factory=list)


class OverrideResponse(BaseModel):
    date: date
    windows: list[TimeWindow]


class CreateBlackoutRequest(BaseModel):
    date: date
    reason: str = ''
    category: BlackoutCategory = BlackoutCategory.OTHER

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str) -> str:
        normalized = value.strip()
        if len(normalized) > MAX_BLACKOUT_REASON_LENGTH:
            raise ValueError(f'Reason must be {MAX_BLACKOUT_REASON_LENGTH} characters or fewer.')
        return normalized


class SlotsResponse(BaseModel):
    provider_id: str
    date: date
    slot_duration_minutes: int
    schedule_configured: bool
    blacked_out: bool
    slots: list[str]


class AvailabilityCheckResponse(BaseModel):
    provider_id: str
    date: date
    time: str
    available: bool


class AppointmentTypeOptionResponse(BaseModel):
    appointment_type: str
    duration_minutes: int


def invalid_windows(exc: WindowValidationError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail={'errors': exc.errors},
    )


def schedule_not_set() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=SCHEDULE_NOT_SET_DETAIL,
    )


@router.get('/default-schedule', response_model=WeeklySchedule)
def get_default_schedule():
    return default_schedule()


@router.get('/appointment-types', response_model=list[AppointmentTypeOptionResponse])
def list_appointment_types():
    return [
        AppointmentTypeOptionResponse(
            appointment_type=appointment_type.value,
            duration_minutes=config.DEFAULT_SLOT_DURATION_MINUTES,
        )
        for appointment_type in AppointmentType
    ]


@router.get('/providers/{provider_id}/schedule', response_model=ProviderAvailability)
def get_provider_schedule(provider_id: str, service: AvailabilityService = Depends(get_availability_service)):
    try:
        availability = service.get_availability(provider_id)
    except PersistenceError as exc:
        raise storage_unavailable() from exc

    if availability is None:
        raise schedule_not_set()
    return availability


@router.put('/providers/{provider_id}/schedule', response_model=ProviderAvailability)
def save_provider_schedule(
    provider_id: str,
    data: SaveScheduleRequest,
    service: AvailabilityService = Depends(get_availability_service),
):
    try:
        return service.save_schedule(provider_id, data.weekly_schedule, blackout_dates=data.blackout_dates)
    except WindowValidationError as exc:
        raise invalid_windows(exc) from exc
    except PersistenceError as exc:
        raise storage_unavailable() from exc


@router.get('/providers/{provider_id}/overrides', response_model=list[OverrideResponse])
def list_overrides(provider_id: str, service: AvailabilityService = Depends(get_availability_service)):
    try:
        overrides = service.list_overrides(provider_id)
    except PersistenceError as exc:
        raise storage_unavailable() from exc

    return [
        OverrideResponse(date=override_date, windows=windows)
        for override_date, windows in sorted(overrides.items())
    ]


@router.get('/providers/{provider_id}/overrides/{override_date}', response_model=OverrideResponse)
def get_override(
    provider_id: str,
    override_date: date,
    service: AvailabilityService = Depends(get_availability_service),
):
    try:
        windows = service.get_override(provider_id, override_date)
    except PersistenceError as exc:
        raise storage_unavailable() from exc

    if not windows:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='No override for this date.',
        )
    return OverrideResponse(date=override_date, windows=windows)


@router.put('/providers/{provider_id}/overrides/{override_date}', response_model=OverrideResponse)
def set_override(
    provider_id: str,
    override_date: date,
    data: OverrideRequest,
    service: AvailabilityService = Depends(get_availability_service),
):
    try:
        ensure_valid_windows(data.windows)
        service.set_override(provider_id, override_date, data.windows)
    except WindowValidationError as exc:
        raise invalid_windows(exc) from exc
    except NotFound as exc:
        raise schedule_not_set() from exc
    except PersistenceError as exc:
        raise storage_unavailable() from exc

    return OverrideResponse(date=override_date, windows=data.windows)


@router.delete('/providers/{provider_id}/overrides/{override_date}', status_code=status.HTTP_204_NO_CONTENT)
def remove_override(
    provider_id: str,
    override_date: date,
    service: AvailabilityService = Depends(get_availability_service),
):
    try:
        service.remove_override(provider_id, override_date)
    except NotFound as exc:
        raise schedule_not_set() from exc
    except PersistenceError as exc:
        raise storage_unavailable() from exc


@router.get('/providers/{provider_id}/blackouts', response_model=list[BlackoutDate])
def list_blackouts(provider_id: str, service: AvailabilityService = Depends(get_availability_service)):
    try:
        blackouts = service.list_blackouts(provider_id)
    except PersistenceError as exc:
        raise storage_unavailable() from exc

    return sorted(blackouts, key=lambda blackout: blackout.date)


@router.post(
    '/providers/{provider_id}/blackouts',
    response_model=BlackoutDate,
    status_code=status.HTTP_201_CREATED,
)
def add_blackout(
    provider_id: str,
    data: CreateBlackoutRequest,
    service: AvailabilityService = Depends(get_availability_service),
):
    try:
        return service.add_blackout(provider_id, data.date, data.reason, data.category)
    except NotFound as exc:
        raise schedule_not_set() from exc
    except PersistenceError as exc:
        raise storage_unavailable() from exc


@router.delete('/providers/{provider_id}/blackouts/{blackout_id}', status_code=status.HTTP_204_NO_CONTENT)
def remove_blackout(
    provider_id: str,
    blackout_id: str,
    service: AvailabilityService = Depends(get_availability_service),
):
    try:
        removed = service.remove_blackout(provider_id, blackout_id)
    except NotFound as exc:
        raise schedule_not_set() from exc
    except PersistenceError as exc:
        raise storage_unavailable() from exc

    if not removed:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Blackout date not found.',
        )


@router.get('/providers/{provider_id}/slots', response_model=SlotsResponse)
def list_available_slots(
    provider_id: str,
    slot_date: date = Query(..., alias='date'),
    slot_duration_minutes: int = Query(
        default=config.DEFAULT_SLOT_DURATION_MINUTES,
        ge=5,
        le=MAX_SLOT_DURATION_MINUTES,
    ),
    service: AvailabilityService = Depends(get_availability_service),
):
    try:
        configured = service.has_schedule(provider_id)
        blacked_out = configured and service.is_blacked_out(provider_id, slot_date)
        slots = service.resolve_slots(provider_id, slot_date, slot_duration_minutes)
    except PersistenceError as exc:
        raise storage_unavailable() from exc

    return SlotsResponse(
        provider_id=provider_id,
        date=slot_date,
        slot_duration_minutes=slot_duration_minutes,
        schedule_configured=configured,
        blacked_out=blacked_out,
        slots=slots,
    )


@router.get('/providers/{provider_id}/check', response_model=AvailabilityCheckResponse)
def check_availability(
    provider_id: str,
    slot_date: date = Query(..., alias='date'),
    slot_time: str = Query(..., alias='time'),
    service: AvailabilityService = Depends(get_availability_service),
):
    if not is_clock(slot_time):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(InvalidClockFormat(slot_time)),
        )

    try:
        available = service.is_available(provider_id, slot_date, slot_time)
    except PersistenceError as exc:
        raise storage_unavailable() from exc

    return AvailabilityCheckResponse(
        provider_id=provider_id,
        date=slot_date,
        time=slot_time,
        available=available,
    )
