"""Versioned record documents.

Every record list (appointments, provider availability, notifications) is
stored as one serialized document under a fixed key. Writes are a
compare-and-swap on the document's version stamp: a writer that read
version ``n`` may only replace the document while it is still at ``n``.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from patientcare.core.errors import PersistenceError
from patientcare.models.record import RecordDocument

logger = logging.getLogger(__name__)


class StaleWriteError(PersistenceError):
    """The document changed between read and write."""

    def __init__(self, key: str, expected_version: int):
        self.key = key
        self.expected_version = expected_version
        super().__init__(f'Record document {key!r} is no longer at version {expected_version}.')


@dataclass
class Document:
    items: list = field(default_factory=list)
    version: int = 0


def serialize_items(key: str, items: list) -> str:
    try:
        return json.dumps(items)
    except (TypeError, ValueError) as exc:
        raise PersistenceError(f'Could not serialize record document {key!r}.') from exc


def deserialize_items(key: str, payload: str) -> list:
    try:
        items = json.loads(payload)
    except ValueError as exc:
        raise PersistenceError(f'Record document {key!r} is corrupt.') from exc

    if not isinstance(items, list):
        raise PersistenceError(f'Record document {key!r} is not a list.')
    return items


class RecordStore:
    """Interface shared by every record store backend."""

    def load(self, key: str) -> Document:
        raise NotImplementedError

    def replace(self, key: str, items: list, expected_version: int) -> int:
        """Swap in ``items`` if the document is still at ``expected_version``; return the new version."""
        raise NotImplementedError


class InMemoryRecordStore(RecordStore):
    def __init__(self):
        self._documents: dict[str, tuple[str, int]] = {}

    def load(self, key: str) -> Document:
        if key not in self._documents:
            return Document()
        payload, version = self._documents[key]
        return Document(items=deserialize_items(key, payload), version=version)

    def replace(self, key: str, items: list, expected_version: int) -> int:
        payload = serialize_items(key, items)
        _, current_version = self._documents.get(key, ('[]', 0))
        if current_version != expected_version:
            raise StaleWriteError(key, expected_version)

        self._documents[key] = (payload, current_version + 1)
        return current_version + 1


class SqlRecordStore(RecordStore):
    def __init__(self, session_factory):
        self.session_factory = session_factory

    def load(self, key: str) -> Document:
        db = self.session_factory()
        try:
            document = db.get(RecordDocument, key)
            if document is None:
                return Document()
            return Document(items=deserialize_items(key, document.payload), version=document.version)
        except SQLAlchemyError as exc:
            raise PersistenceError('Storage unavailable. Verify DATABASE_URL.') from exc
        finally:
            db.close()

    def replace(self, key: str, items: list, expected_version: int) -> int:
        payload = serialize_items(key, items)
        now = datetime.now()

        db = self.session_factory()
        try:
            result = db.execute(
                update(RecordDocument)
                .where(RecordDocument.key == key, RecordDocument.version == expected_version)
                .values(payload=payload, version=expected_version + 1, updated_at=now)
            )

            if result.rowcount != 1:
                if expected_version != 0 or db.get(RecordDocument, key) is not None:
                    db.rollback()
                    raise StaleWriteError(key, expected_version)
                db.add(RecordDocument(key=key, payload=payload, version=1, updated_at=now))

            db.commit()
            return expected_version + 1
        except IntegrityError as exc:
            # Another writer created the document first.
            db.rollback()
            raise StaleWriteError(key, expected_version) from exc
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception('Failed to write record document %s', key)
            raise PersistenceError('Storage unavailable. Verify DATABASE_URL.') from exc
        finally:
            db.close()
