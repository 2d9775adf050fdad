"""Typed repositories over the record store."""

import logging
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from patientcare.core import config
from patientcare.core.errors import PersistenceError
from patientcare.models.appointment import Appointment
from patientcare.models.availability import ProviderAvailability
from patientcare.models.notification import Notification
from patientcare.storage.record_store import RecordStore, StaleWriteError

logger = logging.getLogger(__name__)

APPOINTMENTS_KEY = 'patientcare_appointments'
AVAILABILITY_KEY = 'patientcare_doctor_availability'
NOTIFICATIONS_KEY = 'appointment_notifications'

ModelT = TypeVar('ModelT', bound=BaseModel)
ResultT = TypeVar('ResultT')


@dataclass
class Snapshot(Generic[ModelT]):
    items: list[ModelT]
    version: int


class RecordRepository(Generic[ModelT]):
    key: str
    model: type[ModelT]

    def __init__(self, store: RecordStore, retries: int | None = None):
        self.store = store
        self.retries = config.STORE_WRITE_RETRIES if retries is None else retries

    def load(self) -> Snapshot[ModelT]:
        document = self.store.load(self.key)
        try:
            items = [self.model.model_validate(item) for item in document.items]
        except ValidationError as exc:
            raise PersistenceError(f'Record document {self.key!r} holds invalid records.') from exc
        return Snapshot(items=items, version=document.version)

    def load_all(self) -> list[ModelT]:
        return self.load().items

    def save_all(self, items: list[ModelT], expected_version: int) -> int:
        payload = [item.model_dump(mode='json') for item in items]
        return self.store.replace(self.key, payload, expected_version)

    def update_atomically(self, mutation: Callable[[list[ModelT]], ResultT]) -> ResultT:
        """Run read, ``mutation`` and write as one unit.

        ``mutation`` edits the loaded list in place and returns the call's result.
        Exceptions it raises abort the unit with nothing written. A lost
        compare-and-swap reruns the whole unit against fresh data.
        """
        attempts = self.retries + 1
        for attempt in range(1, attempts + 1):
            snapshot = self.load()
            result = mutation(snapshot.items)
            try:
                self.save_all(snapshot.items, snapshot.version)
            except StaleWriteError:
                logger.warning('Concurrent write on %s (attempt %s of %s)', self.key, attempt, attempts)
                continue
            return result

        raise PersistenceError(f'Gave up writing {self.key!r} after {attempts} attempts; retry later.')


class AppointmentRepository(RecordRepository[Appointment]):
    key = APPOINTMENTS_KEY
    model = Appointment


class AvailabilityRepository(RecordRepository[ProviderAvailability]):
    key = AVAILABILITY_KEY
    model = ProviderAvailability


class NotificationRepository(RecordRepository[Notification]):
    key = NOTIFICATIONS_KEY
    model = Notification
