import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from patientcare.database import Base  # noqa: E402
from patientcare.models.record import RecordDocument  # noqa: E402
from patientcare.services.availability_service import AvailabilityService  # noqa: E402
from patientcare.services.booking_ledger import BookingLedger  # noqa: E402
from patientcare.services.notifier import StatusTransitionNotifier  # noqa: E402
from patientcare.storage.record_store import InMemoryRecordStore, SqlRecordStore  # noqa: E402
from patientcare.storage.repositories import (  # noqa: E402
    AppointmentRepository,
    AvailabilityRepository,
    NotificationRepository,
)
from sample_data import FIXED_NOW  # noqa: E402


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def sql_store():
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine, tables=[RecordDocument.__table__])

    try:
        yield SqlRecordStore(testing_session_local)
    finally:
        Base.metadata.drop_all(bind=engine, tables=[RecordDocument.__table__])
        engine.dispose()


@pytest.fixture
def availability_service(store) -> AvailabilityService:
    return AvailabilityService(
        AvailabilityRepository(store),
        AppointmentRepository(store),
        allow_partial_trailing_slot=False,
        pending_reserves_slot=False,
    )


@pytest.fixture
def notifier(store) -> StatusTransitionNotifier:
    return StatusTransitionNotifier(NotificationRepository(store), clock=lambda: FIXED_NOW)


@pytest.fixture
def ledger(store, notifier) -> BookingLedger:
    return BookingLedger(AppointmentRepository(store), notifier, clock=lambda: FIXED_NOW)
