"""Availability model definitions."""

from datetime import date, datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from patientcare.services.timegrid import to_minutes

WEEKDAYS = ('monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday')


def generate_id() -> str:
    return uuid4().hex


class TimeWindow(BaseModel):
    """A contiguous ``[start, end)`` stretch of clock time."""
    id: str = Field(default_factory=generate_id)
    start: str
    end: str

    @field_validator('start', 'end')
    @classmethod
    def validate_clock(cls, value: str) -> str:
        to_minutes(value)
        return value.strip()

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return to_minutes(self.end)

    def contains(self, minutes: int) -> bool:
        return self.start_minutes <= minutes < self.end_minutes


class DaySchedule(BaseModel):
    available: bool = False
    windows: list[TimeWindow] = Field(default_factory=list)

    @model_validator(mode='after')
    def clear_windows_when_unavailable(self) -> 'DaySchedule':
        if not self.available:
            self.windows = []
        return self


class WeeklySchedule(BaseModel):
    monday: DaySchedule = Field(default_factory=DaySchedule)
    tuesday: DaySchedule = Field(default_factory=DaySchedule)
    wednesday: DaySchedule = Field(default_factory=DaySchedule)
    thursday: DaySchedule = Field(default_factory=DaySchedule)
    friday: DaySchedule = Field(default_factory=DaySchedule)
    saturday: DaySchedule = Field(default_factory=DaySchedule)
    sunday: DaySchedule = Field(default_factory=DaySchedule)

    def day(self, weekday: str) -> DaySchedule:
        return getattr(self, weekday)

    def days(self) -> list[tuple[str, DaySchedule]]:
        return [(weekday, self.day(weekday)) for weekday in WEEKDAYS]


class BlackoutCategory(str, Enum):
    VACATION = 'vacation'
    SICK = 'sick'
    CONFERENCE = 'conference'
    OTHER = 'other'


class BlackoutDate(BaseModel):
    id: str = Field(default_factory=generate_id)
    date: date
    reason: str = ''
    category: BlackoutCategory = BlackoutCategory.OTHER


class ProviderAvailability(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    provider_id: str
    weekly_schedule: WeeklySchedule = Field(default_factory=WeeklySchedule)
    calendar_overrides: dict[date, list[TimeWindow]] = Field(default_factory=dict)
    blackout_dates: list[BlackoutDate] = Field(default_factory=list)
    last_updated: datetime | None = None

    @field_validator('calendar_overrides')
    @classmethod
    def drop_empty_overrides(cls, value: dict[date, list[TimeWindow]]) -> dict[date, list[TimeWindow]]:
        return {override_date: windows for override_date, windows in value.items() if windows}
