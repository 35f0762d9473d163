"""Scheduling facade consumed by the command and HTTP layers.

``ScheduleManager`` maps physician ids to ``PhysicianSchedule`` aggregates,
validates references against the profile directory, and turns every
expected domain failure into a ``ScheduleResult`` instead of raising it.
Persistence happens after the per-physician lock has been released; a
write the store rejects is undone in memory and reported as a
``persistence_failed`` result.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from itertools import islice
from typing import Dict, Iterator, List, Optional
import logging
import threading

from .appointments import Appointment, AppointmentStatus
from .availability import AvailabilityCalendar, AvailabilityWindow, Weekday
from .blocks import UnavailabilityCalendar, UnavailabilityReason, UnavailableBlock
from .errors import (
    ConflictError, InvalidIntervalError, NotFoundError, PersistenceError,
    SchedulingError, SlotUnavailableError
)
from .intervals import TimeInterval, floor_to_minute, is_naive
from .ports import InMemoryScheduleStore, ProfileDirectory, ScheduleStore
from .schedule import PhysicianSchedule
from .slots import SlotFinder, SlotSequence
from .strategies import BookingStrategy, FirstAvailableStrategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchedulingPolicy:
    """Tunable limits enforced at the booking boundary."""

    slot_step_minutes: int = 15
    min_duration_minutes: int = 15
    max_duration_minutes: int = 240
    horizon_days: int = 90
    max_alternatives: int = 3

    @classmethod
    def from_settings(cls, settings) -> "SchedulingPolicy":
        return cls(
            slot_step_minutes=settings.SLOT_STEP_MINUTES,
            min_duration_minutes=settings.MIN_APPOINTMENT_MINUTES,
            max_duration_minutes=settings.MAX_APPOINTMENT_MINUTES,
            horizon_days=settings.BOOKING_HORIZON_DAYS,
            max_alternatives=settings.MAX_ALTERNATIVE_SUGGESTIONS,
        )

    def allows(self, duration_minutes: int) -> bool:
        return self.min_duration_minutes <= duration_minutes <= self.max_duration_minutes

    def check_duration(self, duration_minutes: int) -> None:
        if duration_minutes < self.min_duration_minutes:
            raise InvalidIntervalError(
                f"Appointment must be at least {self.min_duration_minutes} minutes"
            )
        if duration_minutes > self.max_duration_minutes:
            raise InvalidIntervalError(
                f"Appointment cannot exceed {self.max_duration_minutes} minutes"
            )


@dataclass
class ScheduleResult:
    """Outcome of a scheduling operation."""

    success: bool
    message: str
    appointment: Optional[Appointment] = None
    error: Optional[SchedulingError] = None
    conflicts: List[Appointment] = field(default_factory=list)
    alternatives: List[TimeInterval] = field(default_factory=list)
    slot: Optional[TimeInterval] = None
    block: Optional[UnavailableBlock] = None

    @property
    def error_code(self) -> Optional[str]:
        return self.error.code if self.error else None

    @classmethod
    def ok(cls, message: str, **kwargs) -> "ScheduleResult":
        return cls(success=True, message=message, **kwargs)

    @classmethod
    def failed(cls, error: SchedulingError, **kwargs) -> "ScheduleResult":
        if isinstance(error, ConflictError):
            kwargs.setdefault("conflicts", error.conflicts)
        return cls(success=False, message=error.message, error=error, **kwargs)


@dataclass
class ScheduleStatistics:
    physician_id: str
    start: datetime
    end: datetime
    total_appointments: int = 0
    scheduled_appointments: int = 0
    completed_appointments: int = 0
    cancelled_appointments: int = 0
    no_show_appointments: int = 0
    total_scheduled_hours: float = 0.0
    average_duration_minutes: float = 0.0

    def _rate(self, count: int) -> float:
        if not self.total_appointments:
            return 0.0
        return count / self.total_appointments * 100

    @property
    def completion_rate(self) -> float:
        return self._rate(self.completed_appointments)

    @property
    def cancellation_rate(self) -> float:
        return self._rate(self.cancelled_appointments)

    @property
    def no_show_rate(self) -> float:
        return self._rate(self.no_show_appointments)


class ScheduleManager:
    def __init__(
        self,
        profiles: ProfileDirectory,
        store: Optional[ScheduleStore] = None,
        strategy: Optional[BookingStrategy] = None,
        policy: Optional[SchedulingPolicy] = None,
    ):
        self.profiles = profiles
        self.store = store if store is not None else InMemoryScheduleStore()
        self.strategy = strategy or FirstAvailableStrategy()
        self.policy = policy or SchedulingPolicy()
        self.calendar = AvailabilityCalendar()
        self.blocks = UnavailabilityCalendar()
        self.slot_finder = SlotFinder(self.policy.slot_step_minutes)
        self._schedules: Dict[str, PhysicianSchedule] = {}
        self._owners: Dict[str, str] = {}  # appointment id -> physician id
        self._registry_lock = threading.Lock()
        self._facility_blocks_loaded = False

    # Booking

    def schedule_appointment(
        self,
        physician_id: str,
        patient_id: str,
        start: datetime,
        duration_minutes: int,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> ScheduleResult:
        """Book ``[start, start + duration)`` if it is legal right now."""
        interval = None
        try:
            self._require_physician(physician_id)
            self._require_patient(patient_id)
            interval = self._booking_interval(start, duration_minutes)
            schedule = self.get_schedule(physician_id)
            appointment = schedule.try_book(patient_id, interval, reason, notes)
        except ConflictError as exc:
            logger.info(f"Booking rejected for physician {physician_id} at {interval}: {exc.message}")
            return ScheduleResult.failed(
                exc, alternatives=self._suggest_alternatives(physician_id, interval)
            )
        except SchedulingError as exc:
            logger.info(f"Booking rejected for physician {physician_id}: {exc.message}")
            return ScheduleResult.failed(exc)

        if not self._committed(schedule, appointment):
            return self._persistence_failed(appointment)
        logger.info(
            f"Appointment {appointment.id} booked for patient {patient_id} "
            f"with physician {physician_id} at {appointment.interval}"
        )
        return ScheduleResult.ok("Appointment scheduled successfully.", appointment=appointment)

    def schedule_first_available(
        self,
        physician_id: str,
        patient_id: str,
        preferred: datetime,
        duration_minutes: int,
        reason: Optional[str] = None,
        strategy: Optional[BookingStrategy] = None,
    ) -> ScheduleResult:
        """Book the slot the booking strategy picks at or after ``preferred``."""
        found = self.find_next_available_slot(physician_id, duration_minutes, preferred, strategy)
        if not found.success:
            return found
        try:
            self._require_patient(patient_id)
            schedule = self.get_schedule(physician_id)
            appointment = schedule.try_book(patient_id, found.slot, reason)
        except SchedulingError as exc:
            # Another booking can take the slot between search and commit
            logger.info(f"First-available booking lost slot {found.slot}: {exc.message}")
            return ScheduleResult.failed(exc, slot=found.slot)

        if not self._committed(schedule, appointment):
            return self._persistence_failed(appointment, slot=found.slot)
        logger.info(f"Appointment {appointment.id} booked at first available slot {appointment.interval}")
        return ScheduleResult.ok(
            "Appointment scheduled successfully.", appointment=appointment, slot=found.slot
        )

    def cancel_appointment(self, physician_id: str, appointment_id: str, reason: str = "") -> ScheduleResult:
        return self._transition(physician_id, appointment_id, "cancel", reason=reason)

    def complete_appointment(self, physician_id: str, appointment_id: str) -> ScheduleResult:
        return self._transition(physician_id, appointment_id, "complete")

    def mark_no_show(self, physician_id: str, appointment_id: str) -> ScheduleResult:
        return self._transition(physician_id, appointment_id, "mark_no_show")

    def reschedule_appointment(
        self,
        physician_id: str,
        appointment_id: str,
        new_start: datetime,
        new_duration_minutes: int,
    ) -> ScheduleResult:
        """Move an appointment in place; the old interval stays on any failure."""
        try:
            self._require_physician(physician_id)
            interval = self._booking_interval(new_start, new_duration_minutes)
            schedule = self.get_schedule(physician_id)
            previous = schedule.get(appointment_id)
            appointment = schedule.reschedule(appointment_id, interval)
        except SchedulingError as exc:
            logger.info(f"Reschedule of appointment {appointment_id} rejected: {exc.message}")
            return ScheduleResult.failed(exc)

        if not self._saved(schedule, appointment, previous):
            return self._persistence_failed(appointment)
        logger.info(f"Appointment {appointment_id} rescheduled to {appointment.interval}")
        return ScheduleResult.ok("Appointment rescheduled successfully.", appointment=appointment)

    def link_clinical_document(self, appointment_id: str, document_id: Optional[str]) -> ScheduleResult:
        """Attach a clinical document to an appointment, or detach with None."""
        try:
            schedule = self._owning_schedule(appointment_id)
            previous = schedule.get(appointment_id)
            appointment = schedule.link_clinical_document(appointment_id, document_id)
        except SchedulingError as exc:
            return ScheduleResult.failed(exc)

        if not self._saved(schedule, appointment, previous):
            return self._persistence_failed(appointment)
        message = "Clinical document linked." if document_id else "Clinical document unlinked."
        return ScheduleResult.ok(message, appointment=appointment)

    def cancel_patient_appointments(self, patient_id: str, reason: str = "") -> List[Appointment]:
        """Cancel a patient's scheduled appointments across all physicians.

        Physicians are visited in id order and only one schedule lock is
        held at a time. Cancellations the store rejects are rolled back and
        left out of the returned list.
        """
        self._hydrate_all()
        cancelled: List[Appointment] = []
        for physician_id in self._physician_ids():
            schedule = self.get_schedule(physician_id)
            before = {a.id: a for a in schedule.snapshot() if a.patient_id == patient_id}
            for appointment in schedule.cancel_for_patient(patient_id, reason):
                if self._saved(schedule, appointment, before.get(appointment.id)):
                    cancelled.append(appointment)
        if cancelled:
            logger.info(f"Cancelled {len(cancelled)} appointment(s) for patient {patient_id}")
        return sorted(cancelled, key=lambda a: a.start)

    # Slot search

    def get_available_time_slots(self, physician_id: str, on_date: date, duration_minutes: int) -> List[TimeInterval]:
        """Free slots on a date; durations outside policy have none."""
        if not self.policy.allows(duration_minutes):
            return []
        return list(self.iter_available_time_slots(physician_id, on_date, duration_minutes))

    def iter_available_time_slots(self, physician_id: str, on_date: date, duration_minutes: int) -> SlotSequence:
        """Lazy, restartable variant of ``get_available_time_slots``."""
        if isinstance(on_date, datetime):
            on_date = on_date.date()
        schedule = self.get_schedule(physician_id)
        booked = [appointment.interval for appointment in schedule.scheduled_on(on_date)]
        windows = self.calendar.get_windows(physician_id, on_date.weekday())
        day_start = datetime.combine(on_date, time.min)
        day = TimeInterval(day_start, day_start + timedelta(days=1))
        blocked = [block.interval for block in self.blocks.blocking(physician_id, day)]
        return self.slot_finder.find_slots(windows, booked, on_date, duration_minutes, blocked)

    def find_next_available_slot(
        self,
        physician_id: str,
        duration_minutes: int,
        after: datetime,
        strategy: Optional[BookingStrategy] = None,
    ) -> ScheduleResult:
        """Ask the booking strategy for a slot, day by day, up to the horizon."""
        strategy = strategy or self.strategy
        try:
            self._require_physician(physician_id)
            self.policy.check_duration(duration_minutes)
            if not is_naive(after):
                raise InvalidIntervalError("Times must be naive local clinic time, without a UTC offset")
        except SchedulingError as exc:
            return ScheduleResult.failed(exc)

        for candidates in self._daily_candidates(physician_id, duration_minutes, after):
            slot = strategy.select_slot(candidates, after)
            if slot is not None:
                return ScheduleResult.ok(f"Next available slot: {slot}", slot=slot)

        error = SlotUnavailableError(
            f"No {duration_minutes}-minute slot available for physician {physician_id} "
            f"within {self.policy.horizon_days} days of {after:%Y-%m-%d %H:%M}"
        )
        logger.info(error.message)
        return ScheduleResult.failed(error)

    # Queries

    def check_conflicts(self, physician_id: str, start: datetime, duration_minutes: int) -> List[Appointment]:
        if duration_minutes <= 0:
            raise ValueError("duration_minutes must be positive")
        self._check_naive(start)
        interval = TimeInterval.from_duration(floor_to_minute(start), duration_minutes)
        return self.get_schedule(physician_id).find_conflicts(interval)

    def get_schedule_in_range(self, physician_id: str, start: datetime, end: datetime) -> List[Appointment]:
        self._check_naive(start, end)
        if start >= end:
            raise ValueError("start must be before end")
        return self.get_schedule(physician_id).query_range(start, end)

    def get_patient_appointments(self, patient_id: str) -> List[Appointment]:
        self._hydrate_all()
        appointments = [
            appointment
            for physician_id in self._physician_ids()
            for appointment in self.get_schedule(physician_id).snapshot()
            if appointment.patient_id == patient_id
        ]
        return sorted(appointments, key=lambda a: a.start)

    def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        try:
            return self._owning_schedule(appointment_id).get(appointment_id)
        except NotFoundError:
            return None

    def get_physician_statistics(self, physician_id: str, start: datetime, end: datetime) -> ScheduleStatistics:
        appointments = self.get_schedule_in_range(physician_id, start, end)
        stats = ScheduleStatistics(physician_id=physician_id, start=start, end=end)
        stats.total_appointments = len(appointments)
        counts = {status: 0 for status in AppointmentStatus}
        for appointment in appointments:
            counts[appointment.status] += 1
        stats.scheduled_appointments = counts[AppointmentStatus.SCHEDULED]
        stats.completed_appointments = counts[AppointmentStatus.COMPLETED]
        stats.cancelled_appointments = counts[AppointmentStatus.CANCELLED]
        stats.no_show_appointments = counts[AppointmentStatus.NO_SHOW]
        booked_minutes = sum(
            a.duration_minutes
            for a in appointments
            if a.status in (AppointmentStatus.SCHEDULED, AppointmentStatus.COMPLETED)
        )
        stats.total_scheduled_hours = booked_minutes / 60
        if appointments:
            stats.average_duration_minutes = sum(a.duration_minutes for a in appointments) / len(appointments)
        return stats

    # Availability

    def set_physician_availability(self, physician_id: str, day_of_week: int, start_time: time, end_time: time) -> ScheduleResult:
        """Replace the physician's windows on a weekday with one window."""
        return self._update_availability(physician_id, day_of_week, self.calendar.set_window, start_time, end_time)

    def add_physician_availability(self, physician_id: str, day_of_week: int, start_time: time, end_time: time) -> ScheduleResult:
        return self._update_availability(physician_id, day_of_week, self.calendar.add_window, start_time, end_time)

    def clear_physician_availability(self, physician_id: str, day_of_week: int) -> ScheduleResult:
        result = self._update_availability(physician_id, day_of_week, self._clear_day)
        if result.success:
            logger.info(f"Availability cleared for physician {physician_id} on {Weekday(day_of_week).name.title()}")
            result.message = "Availability cleared."
        return result

    def get_physician_availability(self, physician_id: str) -> List[AvailabilityWindow]:
        self.get_schedule(physician_id)
        return self.calendar.get_weekly(physician_id)

    # Unavailable blocks

    def add_unavailable_block(
        self,
        physician_id: str,
        start: datetime,
        end: datetime,
        reason: UnavailabilityReason = UnavailabilityReason.OTHER,
        description: Optional[str] = None,
    ) -> ScheduleResult:
        """Make ``[start, end)`` unbookable for one physician.

        Appointments already booked in that time are kept; they come back in
        ``conflicts`` so they can be moved.
        """
        try:
            self._require_physician(physician_id)
            block = UnavailableBlock(TimeInterval(start, end), reason, description, physician_id)
        except SchedulingError as exc:
            return ScheduleResult.failed(exc)
        return self._add_block(block, [self.get_schedule(physician_id)])

    def add_facility_unavailable_block(
        self,
        start: datetime,
        end: datetime,
        reason: UnavailabilityReason = UnavailabilityReason.OTHER,
        description: Optional[str] = None,
    ) -> ScheduleResult:
        """Make ``[start, end)`` unbookable for every physician, e.g. a holiday."""
        try:
            block = UnavailableBlock(TimeInterval(start, end), reason, description)
        except SchedulingError as exc:
            return ScheduleResult.failed(exc)
        self._hydrate_all()
        with self._registry_lock:
            schedules = list(self._schedules.values())
        return self._add_block(block, schedules)

    def remove_unavailable_block(self, block_id: str) -> ScheduleResult:
        self._hydrate_all()
        try:
            block = self.blocks.remove(block_id)
        except NotFoundError as exc:
            return ScheduleResult.failed(exc)
        try:
            self.store.delete_block(block_id)
        except Exception:
            logger.exception(f"Failed to delete unavailable block {block_id}")
            self.blocks.add(block)
            return ScheduleResult.failed(
                PersistenceError(f"Could not delete unavailable block {block_id}; it is still in effect")
            )
        logger.info(f"Removed {block}")
        return ScheduleResult.ok("Unavailable block removed.", block=block)

    def get_unavailable_blocks(self, physician_id: str) -> List[UnavailableBlock]:
        """The physician's own blocks plus the facility-wide ones, by start time."""
        self.get_schedule(physician_id)
        return self.blocks.for_physician(physician_id)

    def get_facility_unavailable_blocks(self) -> List[UnavailableBlock]:
        self._load_facility_blocks()
        return self.blocks.facility_wide()

    # Registry

    def get_schedule(self, physician_id: str) -> PhysicianSchedule:
        """Return the physician's schedule, creating and hydrating it on first use."""
        if not physician_id:
            raise ValueError("physician_id must be provided")
        with self._registry_lock:
            schedule = self._schedules.get(physician_id)
        if schedule is not None:
            return schedule

        self._load_facility_blocks()
        windows = self.store.load_windows(physician_id)
        appointments = self.store.load_appointments(physician_id)
        blocks = self.store.load_blocks(physician_id)
        with self._registry_lock:
            schedule = self._schedules.get(physician_id)
            if schedule is None:
                self.calendar.load(windows)
                self.blocks.load(blocks)
                schedule = PhysicianSchedule(physician_id, self.calendar, self.blocks)
                schedule.load(appointments)
                self._schedules[physician_id] = schedule
                for appointment in appointments:
                    self._owners[appointment.id] = physician_id
                logger.debug(
                    f"Loaded schedule for physician {physician_id}: "
                    f"{len(appointments)} appointment(s), {len(windows)} window(s), {len(blocks)} block(s)"
                )
        return schedule

    # Internals

    def _transition(self, physician_id: str, appointment_id: str, action: str, **kwargs) -> ScheduleResult:
        try:
            self._require_physician(physician_id)
            schedule = self.get_schedule(physician_id)
            previous = schedule.get(appointment_id)
            appointment = getattr(schedule, action)(appointment_id, **kwargs)
        except SchedulingError as exc:
            logger.info(f"Could not {action.replace('_', ' ')} appointment {appointment_id}: {exc.message}")
            return ScheduleResult.failed(exc)

        if not self._saved(schedule, appointment, previous):
            return self._persistence_failed(appointment)
        logger.info(f"Appointment {appointment_id} is now {appointment.status.value}")
        return ScheduleResult.ok(
            f"Appointment {appointment.status.value.replace('_', ' ')}.", appointment=appointment
        )

    def _update_availability(self, physician_id, day_of_week, update, *times) -> ScheduleResult:
        try:
            self._require_physician(physician_id)
            self.get_schedule(physician_id)
            previous = self.calendar.get_windows(physician_id, day_of_week)
            windows = update(physician_id, day_of_week, *times)
        except SchedulingError as exc:
            return ScheduleResult.failed(exc)

        try:
            self.store.replace_windows(physician_id, Weekday(day_of_week), windows)
        except Exception:
            logger.exception(f"Failed to persist availability for physician {physician_id}")
            self.calendar.replace_day(physician_id, day_of_week, previous)
            return ScheduleResult.failed(
                PersistenceError("Could not save availability; the previous windows are still in effect")
            )
        return ScheduleResult.ok("Availability updated.")

    def _clear_day(self, physician_id: str, day_of_week: int) -> List[AvailabilityWindow]:
        self.calendar.clear_day(physician_id, day_of_week)
        return []

    def _add_block(self, block: UnavailableBlock, schedules: List[PhysicianSchedule]) -> ScheduleResult:
        self.blocks.add(block)
        try:
            self.store.save_block(block)
        except Exception:
            logger.exception(f"Failed to persist unavailable block {block.id}")
            self.blocks.remove(block.id)
            return ScheduleResult.failed(
                PersistenceError("Could not save the unavailable block; it was not added")
            )
        affected = sorted(
            (appointment for schedule in schedules for appointment in schedule.find_conflicts(block.interval)),
            key=lambda a: a.start,
        )
        logger.info(f"Added {block}; {len(affected)} booked appointment(s) fall inside it")
        return ScheduleResult.ok("Unavailable block added.", block=block, conflicts=affected)

    def _load_facility_blocks(self) -> None:
        if self._facility_blocks_loaded:
            return
        blocks = self.store.load_blocks(None)
        with self._registry_lock:
            if not self._facility_blocks_loaded:
                self.blocks.load(blocks)
                self._facility_blocks_loaded = True

    def _booking_interval(self, start: datetime, duration_minutes: int) -> TimeInterval:
        self.policy.check_duration(duration_minutes)
        return TimeInterval.from_duration(floor_to_minute(start), duration_minutes)

    def _daily_candidates(self, physician_id: str, duration_minutes: int, after: datetime) -> Iterator[SlotSequence]:
        first_day = after.date()
        for offset in range(self.policy.horizon_days):
            yield self.iter_available_time_slots(physician_id, first_day + timedelta(days=offset), duration_minutes)

    def _suggest_alternatives(self, physician_id: str, interval: TimeInterval) -> List[TimeInterval]:
        if self.policy.max_alternatives <= 0:
            return []
        candidates = (
            slot
            for day in self._daily_candidates(physician_id, interval.duration_minutes, interval.start)
            for slot in day
            if slot.start >= interval.start
        )
        return list(islice(candidates, self.policy.max_alternatives))

    def _owning_schedule(self, appointment_id: str) -> PhysicianSchedule:
        with self._registry_lock:
            physician_id = self._owners.get(appointment_id)
        if physician_id is None:
            stored = self.store.get_appointment(appointment_id)
            if stored is None:
                raise NotFoundError(f"Appointment {appointment_id} not found")
            physician_id = stored.physician_id
        return self.get_schedule(physician_id)

    def _hydrate_all(self) -> None:
        self._load_facility_blocks()
        for physician_id in self.store.physician_ids():
            self.get_schedule(physician_id)

    def _physician_ids(self) -> List[str]:
        with self._registry_lock:
            return sorted(self._schedules)

    def _committed(self, schedule: PhysicianSchedule, appointment: Appointment) -> bool:
        with self._registry_lock:
            self._owners[appointment.id] = appointment.physician_id
        return self._saved(schedule, appointment, None, is_new=True)

    def _saved(
        self,
        schedule: PhysicianSchedule,
        appointment: Appointment,
        previous: Optional[Appointment],
        is_new: bool = False,
    ) -> bool:
        """Write through to the store, undoing the in-memory change if that fails."""
        try:
            self.store.save_appointment(appointment)
            return True
        except Exception:
            logger.exception(f"Failed to persist appointment {appointment.id}")

        if (is_new or previous is not None) and schedule.revert(appointment, previous):
            if is_new:
                with self._registry_lock:
                    self._owners.pop(appointment.id, None)
        else:
            logger.warning(f"Appointment {appointment.id} changed again before its failed write could be undone")
        return False

    def _persistence_failed(self, appointment: Appointment, **kwargs) -> ScheduleResult:
        return ScheduleResult.failed(
            PersistenceError(f"Could not save appointment {appointment.id}; the change was not applied"),
            **kwargs
        )

    def _check_naive(self, *moments: datetime) -> None:
        if not all(is_naive(moment) for moment in moments):
            raise ValueError("Times must be naive local clinic time, without a UTC offset")

    def _require_physician(self, physician_id: str) -> None:
        if not physician_id:
            raise ValueError("physician_id must be provided")
        if not self.profiles.physician_exists(physician_id):
            raise NotFoundError(f"Physician with ID {physician_id} not found")

    def _require_patient(self, patient_id: str) -> None:
        if not patient_id:
            raise ValueError("patient_id must be provided")
        if not self.profiles.patient_exists(patient_id):
            raise NotFoundError(f"Patient with ID {patient_id} not found")
