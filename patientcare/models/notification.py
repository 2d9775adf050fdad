"""Notification model definitions."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from patientcare.models.availability import generate_id


class NotificationKind(str, Enum):
    SUCCESS = 'success'
    ERROR = 'error'
    INFO = 'info'


class Notification(BaseModel):
    """A patient-facing message about an appointment status change."""
    id: str = Field(default_factory=generate_id)
    appointment_id: str
    patient_id: str
    provider_id: str
    message: str
    kind: NotificationKind = NotificationKind.INFO
    read: bool = False
    created_at: datetime
    updated_by: str
