from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from patientcare.database import SessionLocal, ensure_record_schema
from patientcare.services.availability_service import AvailabilityService
from patientcare.services.booking_ledger import BookingLedger
from patientcare.services.notifier import StatusTransitionNotifier
from patientcare.storage.record_store import SqlRecordStore
from patientcare.storage.repositories import (
    AppointmentRepository,
    AvailabilityRepository,
    NotificationRepository,
)

STORAGE_UNAVAILABLE_DETAIL = 'Storage unavailable. Verify DATABASE_URL and retry.'


def storage_unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=STORAGE_UNAVAILABLE_DETAIL,
    )


def ensure_database_ready() -> None:
    try:
        ensure_record_schema()
    except SQLAlchemyError as exc:
        raise storage_unavailable() from exc


def get_record_store() -> SqlRecordStore:
    ensure_database_ready()
    return SqlRecordStore(SessionLocal)


def get_notifier() -> StatusTransitionNotifier:
    return StatusTransitionNotifier(NotificationRepository(get_record_store()))


def get_availability_service() -> AvailabilityService:
    store = get_record_store()
    return AvailabilityService(AvailabilityRepository(store), AppointmentRepository(store))


def get_booking_ledger() -> BookingLedger:
    store = get_record_store()
    return BookingLedger(
        AppointmentRepository(store),
        StatusTransitionNotifier(NotificationRepository(store)),
    )
