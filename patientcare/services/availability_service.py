"""Provider availability: weekly schedule, date overrides, blackouts and slot resolution."""

import logging
from datetime import date, datetime

from patientcare.core import config
from patientcare.core.errors import NotFound, WindowValidationError
from patientcare.models.appointment import AppointmentStatus
from patientcare.models.availability import (
    BlackoutCategory,
    BlackoutDate,
    ProviderAvailability,
    TimeWindow,
    WeeklySchedule,
)
from patientcare.services.schedule import validate_schedule, weekday_name
from patientcare.services.timegrid import to_clock, to_minutes
from patientcare.storage.repositories import AppointmentRepository, AvailabilityRepository

logger = logging.getLogger(__name__)


def _find(records: list[ProviderAvailability], provider_id: str) -> ProviderAvailability | None:
    return next((record for record in records if record.provider_id == provider_id), None)


def _require(records: list[ProviderAvailability], provider_id: str) -> ProviderAvailability:
    record = _find(records, provider_id)
    if record is None:
        raise NotFound('Provider availability', provider_id)
    return record


def expand_window(window: TimeWindow, slot_duration_minutes: int, allow_partial: bool = False) -> list[str]:
    """Split a window into slot start times ``slot_duration_minutes`` apart.

    A slot is emitted only when it fits before the window end, unless
    ``allow_partial`` restores the older rule of emitting any start before
    the end.
    """
    start, end = window.start_minutes, window.end_minutes
    slots = []
    for minutes in range(start, end, slot_duration_minutes):
        if not allow_partial and minutes + slot_duration_minutes > end:
            break
        slots.append(to_clock(minutes))
    return slots


class AvailabilityService:
    def __init__(
        self,
        availability: AvailabilityRepository,
        appointments: AppointmentRepository,
        allow_partial_trailing_slot: bool | None = None,
        pending_reserves_slot: bool | None = None,
    ):
        self.availability = availability
        self.appointments = appointments
        self.allow_partial_trailing_slot = (
            config.ALLOW_PARTIAL_TRAILING_SLOT if allow_partial_trailing_slot is None else allow_partial_trailing_slot
        )
        self.pending_reserves_slot = (
            config.PENDING_RESERVES_SLOT if pending_reserves_slot is None else pending_reserves_slot
        )

    # Provider records

    def get_availability(self, provider_id: str) -> ProviderAvailability | None:
        return _find(self.availability.load_all(), provider_id)

    def has_schedule(self, provider_id: str) -> bool:
        return self.get_availability(provider_id) is not None

    def save_schedule(
        self,
        provider_id: str,
        weekly_schedule: WeeklySchedule,
        blackout_dates: list[BlackoutDate] | None = None,
        calendar_overrides: dict[date, list[TimeWindow]] | None = None,
    ) -> ProviderAvailability:
        errors = validate_schedule(weekly_schedule)
        if errors:
            raise WindowValidationError(errors)

        def mutation(records: list[ProviderAvailability]) -> ProviderAvailability:
            record = _find(records, provider_id)
            if record is None:
                record = ProviderAvailability(provider_id=provider_id)
                records.append(record)
                logger.info('Created availability record for provider %s', provider_id)

            record.weekly_schedule = weekly_schedule
            if blackout_dates is not None:
                record.blackout_dates = blackout_dates
            if calendar_overrides is not None:
                record.calendar_overrides = calendar_overrides
            record.last_updated = datetime.now()
            return record

        return self.availability.update_atomically(mutation)

    # Calendar overrides

    def set_override(self, provider_id: str, day: date, windows: list[TimeWindow]) -> None:
        def mutation(records: list[ProviderAvailability]) -> None:
            record = _require(records, provider_id)
            overrides = dict(record.calendar_overrides)
            if windows:
                overrides[day] = list(windows)
            else:
                overrides.pop(day, None)
            record.calendar_overrides = overrides
            record.last_updated = datetime.now()

        self.availability.update_atomically(mutation)

    def remove_override(self, provider_id: str, day: date) -> None:
        self.set_override(provider_id, day, [])

    def get_override(self, provider_id: str, day: date) -> list[TimeWindow] | None:
        record = self.get_availability(provider_id)
        if record is None:
            return None
        return record.calendar_overrides.get(day)

    def has_override(self, provider_id: str, day: date) -> bool:
        return bool(self.get_override(provider_id, day))

    def list_overrides(self, provider_id: str) -> dict[date, list[TimeWindow]]:
        record = self.get_availability(provider_id)
        return dict(record.calendar_overrides) if record else {}

    # Blackout dates

    def add_blackout(
        self,
        provider_id: str,
        day: date,
        reason: str,
        category: BlackoutCategory = BlackoutCategory.OTHER,
    ) -> BlackoutDate:
        blackout = BlackoutDate(date=day, reason=reason, category=category)

        def mutation(records: list[ProviderAvailability]) -> BlackoutDate:
            record = _require(records, provider_id)
            record.blackout_dates = [*record.blackout_dates, blackout]
            record.last_updated = datetime.now()
            return blackout

        created = self.availability.update_atomically(mutation)
        logger.info('Blacked out %s for provider %s (%s)', day, provider_id, category.value)
        return created

    def remove_blackout(self, provider_id: str, blackout_id: str) -> bool:
        def mutation(records: list[ProviderAvailability]) -> bool:
            record = _require(records, provider_id)
            remaining = [blackout for blackout in record.blackout_dates if blackout.id != blackout_id]
            if len(remaining) == len(record.blackout_dates):
                return False
            record.blackout_dates = remaining
            record.last_updated = datetime.now()
            return True

        return self.availability.update_atomically(mutation)

    def list_blackouts(self, provider_id: str) -> list[BlackoutDate]:
        record = self.get_availability(provider_id)
        return list(record.blackout_dates) if record else []

    def is_blacked_out(self, provider_id: str, day: date) -> bool:
        return any(blackout.date == day for blackout in self.list_blackouts(provider_id))

    # Resolution

    def effective_windows(self, record: ProviderAvailability, day: date) -> list[TimeWindow]:
        override = record.calendar_overrides.get(day)
        if override:
            return override

        day_schedule = record.weekly_schedule.day(weekday_name(day))
        return day_schedule.windows if day_schedule.available else []

    def reserving_statuses(self) -> set[AppointmentStatus]:
        statuses = {AppointmentStatus.CONFIRMED}
        if self.pending_reserves_slot:
            statuses.add(AppointmentStatus.PENDING)
        return statuses

    def resolve_slots(
        self,
        provider_id: str,
        day: date,
        slot_duration_minutes: int | None = None,
    ) -> list[str]:
        duration = slot_duration_minutes
        if duration is None:
            duration = config.DEFAULT_SLOT_DURATION_MINUTES
        if duration <= 0:
            raise ValueError('Slot duration must be positive.')

        record = self.get_availability(provider_id)
        if record is None:
            return []

        if any(blackout.date == day for blackout in record.blackout_dates):
            return []

        slots: set[str] = set()
        for window in self.effective_windows(record, day):
            slots.update(expand_window(window, duration, self.allow_partial_trailing_slot))

        reserving = self.reserving_statuses()
        booked_times = {
            appointment.time
            for appointment in self.appointments.load_all()
            if appointment.provider_id == provider_id
            and appointment.date == day
            and appointment.status in reserving
        }

        return sorted(slots - booked_times, key=to_minutes)

    def is_available(self, provider_id: str, day: date, time: str) -> bool:
        record = self.get_availability(provider_id)
        if record is None:
            return False

        if any(blackout.date == day for blackout in record.blackout_dates):
            return False

        minutes = to_minutes(time)
        return any(window.contains(minutes) for window in self.effective_windows(record, day))
