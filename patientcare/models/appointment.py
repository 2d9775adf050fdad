"""Appointment model definitions."""

from datetime import date, datetime
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from patientcare.core import config
from patientcare.models.availability import generate_id
from patientcare.services.timegrid import to_minutes


class AppointmentStatus(str, Enum):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    REJECTED = 'rejected'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'


class AppointmentType(str, Enum):
    CONSULTATION = 'consultation'
    FOLLOW_UP = 'follow-up'
    CHECK_UP = 'check-up'
    EMERGENCY = 'emergency'


INACTIVE_STATUSES = frozenset({AppointmentStatus.CANCELLED, AppointmentStatus.REJECTED})
INITIAL_STATUSES = frozenset({AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED})

ALLOWED_TRANSITIONS = {
    AppointmentStatus.PENDING: frozenset({
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.REJECTED,
        AppointmentStatus.CANCELLED,
    }),
    AppointmentStatus.CONFIRMED: frozenset({
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
    }),
    AppointmentStatus.REJECTED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.COMPLETED: frozenset(),
}


def can_transition(current: AppointmentStatus, requested: AppointmentStatus) -> bool:
    return requested in ALLOWED_TRANSITIONS[current]


def _normalize_notes(value: str | None) -> str | None:
    if value is None:
        return None

    normalized = value.strip()
    if not normalized:
        return None

    if len(normalized) > config.MAX_APPOINTMENT_NOTES_LENGTH:
        raise ValueError(f'Notes must be {config.MAX_APPOINTMENT_NOTES_LENGTH} characters or fewer.')

    return normalized


class AppointmentCandidate(BaseModel):
    """What a caller supplies to book an appointment.

    Only pending or confirmed are accepted as the starting status. Cancelled,
    rejected and completed records are reached through status changes, never
    created directly.
    """
    patient_id: str
    patient_name: str = ''
    patient_email: str = ''
    provider_id: str
    provider_name: str = ''
    date: date
    time: str
    duration_minutes: int = Field(default=30, gt=0)
    type: AppointmentType = AppointmentType.CONSULTATION
    status: AppointmentStatus = AppointmentStatus.PENDING
    notes: str | None = None
    fee: float = Field(default=0.0, ge=0)

    @field_validator('patient_id', 'provider_id')
    @classmethod
    def validate_identifier(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Identifier is required.')
        return normalized

    @field_validator('patient_email')
    @classmethod
    def validate_patient_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator('time')
    @classmethod
    def validate_time(cls, value: str) -> str:
        to_minutes(value)
        return value.strip()

    @field_validator('status')
    @classmethod
    def validate_initial_status(cls, value: AppointmentStatus) -> AppointmentStatus:
        if value not in INITIAL_STATUSES:
            raise ValueError('New appointments must start as pending or confirmed.')
        return value

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        return _normalize_notes(value)


class Appointment(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=generate_id, frozen=True)
    patient_id: Annotated[str, Field(frozen=True)]
    patient_name: str = ''
    patient_email: str = ''
    provider_id: Annotated[str, Field(frozen=True)]
    provider_name: str = ''
    date: Annotated[date, Field(frozen=True)]
    time: Annotated[str, Field(frozen=True)]
    duration_minutes: int = 30
    type: AppointmentType = AppointmentType.CONSULTATION
    status: AppointmentStatus = AppointmentStatus.PENDING
    notes: str | None = None
    fee: float = 0.0
    created_at: datetime
    updated_at: datetime

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        return _normalize_notes(value)

    @property
    def is_active(self) -> bool:
        return self.status not in INACTIVE_STATUSES

    @classmethod
    def from_candidate(cls, candidate: AppointmentCandidate, now: datetime) -> 'Appointment':
        return cls(**candidate.model_dump(), created_at=now, updated_at=now)
