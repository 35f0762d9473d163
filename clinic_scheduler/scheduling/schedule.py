"""Per-physician appointment aggregate.

``PhysicianSchedule`` is the unit of mutation: one lock per physician guards
check-and-insert, so two overlapping bookings for the same physician can
never both commit. Nothing inside the lock performs I/O.
"""
from bisect import bisect_left, insort
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional, Tuple
import threading

from .appointments import Appointment
from .availability import AvailabilityCalendar
from .blocks import UnavailabilityCalendar
from .conflicts import find_conflicts, is_within_any_window
from .errors import ConflictError, NoAvailabilityError, NotFoundError
from .intervals import TimeInterval


class PhysicianSchedule:
    def __init__(
        self,
        physician_id: str,
        calendar: AvailabilityCalendar,
        blocks: Optional[UnavailabilityCalendar] = None,
    ):
        self.physician_id = physician_id
        self._calendar = calendar
        self._blocks = blocks if blocks is not None else UnavailabilityCalendar()
        self._lock = threading.Lock()
        self._appointments: Dict[str, Appointment] = {}
        # (start, id) pairs kept sorted for range queries
        self._by_start: List[Tuple[datetime, str]] = []
        self._longest = timedelta(0)

    def load(self, appointments: Iterable[Appointment]) -> None:
        """Add persisted appointments without re-checking them."""
        with self._lock:
            for appointment in appointments:
                if appointment.physician_id != self.physician_id or appointment.id in self._appointments:
                    continue
                self._insert(appointment.copy())

    # Mutations

    def try_book(
        self,
        patient_id: str,
        interval: TimeInterval,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Appointment:
        """Validate against current state and insert a new scheduled appointment."""
        with self._lock:
            self._check_bookable(interval)
            appointment = Appointment(
                interval=interval,
                patient_id=patient_id,
                physician_id=self.physician_id,
                reason_for_visit=reason,
                notes=notes,
            )
            self._insert(appointment)
            return appointment.copy()

    def cancel(self, appointment_id: str, reason: str = "") -> Appointment:
        with self._lock:
            appointment = self._require(appointment_id)
            appointment.cancel(reason)
            return appointment.copy()

    def complete(self, appointment_id: str) -> Appointment:
        with self._lock:
            appointment = self._require(appointment_id)
            appointment.complete()
            return appointment.copy()

    def mark_no_show(self, appointment_id: str) -> Appointment:
        with self._lock:
            appointment = self._require(appointment_id)
            appointment.mark_no_show()
            return appointment.copy()

    def reschedule(self, appointment_id: str, new_interval: TimeInterval) -> Appointment:
        """Move a scheduled appointment; on any failure it keeps its old interval."""
        with self._lock:
            appointment = self._require(appointment_id)
            appointment.require_scheduled("reschedule")
            self._check_bookable(new_interval, exclude_id=appointment_id)
            self._by_start.remove((appointment.start, appointment.id))
            appointment.reschedule(new_interval)
            insort(self._by_start, (appointment.start, appointment.id))
            self._longest = max(self._longest, new_interval.duration)
            return appointment.copy()

    def link_clinical_document(self, appointment_id: str, document_id: Optional[str]) -> Appointment:
        with self._lock:
            appointment = self._require(appointment_id)
            appointment.link_document(document_id)
            return appointment.copy()

    def cancel_for_patient(self, patient_id: str, reason: str = "") -> List[Appointment]:
        """Cancel every scheduled appointment this patient holds here."""
        cancelled = []
        with self._lock:
            for appointment in self._appointments.values():
                if appointment.patient_id == patient_id and appointment.is_scheduled:
                    appointment.cancel(reason)
                    cancelled.append(appointment.copy())
        return sorted(cancelled, key=lambda a: a.start)

    def revert(self, failed: Appointment, previous: Optional[Appointment]) -> bool:
        """Undo the change that produced ``failed``.

        ``previous`` is the copy taken before that change, or None when
        ``failed`` was a new booking. Returns False, leaving everything as
        is, when a later change has already built on ``failed``.
        """
        with self._lock:
            current = self._appointments.get(failed.id)
            if current is None or current.version != failed.version:
                return False
            if previous is not None:
                if previous.version != failed.version - 1:
                    return False
                if previous.is_scheduled and find_conflicts(
                    previous.interval, self._overlapping(previous.start, previous.end), previous.id
                ):
                    return False
            self._by_start.remove((current.start, current.id))
            del self._appointments[current.id]
            if previous is not None:
                self._insert(previous.copy())
            return True

    # Reads

    def get(self, appointment_id: str) -> Optional[Appointment]:
        with self._lock:
            appointment = self._appointments.get(appointment_id)
            return appointment.copy() if appointment else None

    def snapshot(self) -> List[Appointment]:
        with self._lock:
            return [self._appointments[appointment_id].copy() for _, appointment_id in self._by_start]

    def query_range(self, start: datetime, end: datetime) -> List[Appointment]:
        """Appointments of any status overlapping ``[start, end)``, by start time."""
        with self._lock:
            return [appointment.copy() for appointment in self._overlapping(start, end)]

    def scheduled_on(self, on_date: date) -> List[Appointment]:
        day_start = datetime.combine(on_date, time.min)
        with self._lock:
            return [
                appointment.copy()
                for appointment in self._overlapping(day_start, day_start + timedelta(days=1))
                if appointment.is_scheduled
            ]

    def find_conflicts(self, interval: TimeInterval) -> List[Appointment]:
        with self._lock:
            return [
                appointment.copy()
                for appointment in find_conflicts(interval, self._overlapping(interval.start, interval.end))
            ]

    # Internals; callers hold self._lock

    def _check_bookable(self, interval: TimeInterval, exclude_id: Optional[str] = None) -> None:
        weekday = interval.start.weekday()
        windows = self._calendar.get_windows(self.physician_id, weekday)
        if not is_within_any_window(interval, windows, weekday):
            raise NoAvailabilityError(
                f"Physician {self.physician_id} is not available {interval.start:%A} {interval}"
            )
        blocked = self._blocks.blocking(self.physician_id, interval)
        if blocked:
            raise NoAvailabilityError(f"Physician {self.physician_id} is unavailable {interval}: {blocked[0]}")
        conflicts = find_conflicts(interval, self._overlapping(interval.start, interval.end), exclude_id)
        if conflicts:
            described = ", ".join(
                f"{conflict.id} ({conflict.start:%H:%M}-{conflict.end:%H:%M})" for conflict in conflicts
            )
            raise ConflictError(
                f"Conflicts with existing appointment(s): {described}",
                conflicts=[conflict.copy() for conflict in conflicts],
            )

    def _overlapping(self, start: datetime, end: datetime) -> List[Appointment]:
        # Nothing that starts before start - longest can still reach start
        lower = bisect_left(self._by_start, (start - self._longest, ""))
        upper = bisect_left(self._by_start, (end, ""))
        return [
            self._appointments[appointment_id]
            for _, appointment_id in self._by_start[lower:upper]
            if self._appointments[appointment_id].end > start
        ]

    def _insert(self, appointment: Appointment) -> None:
        self._appointments[appointment.id] = appointment
        insort(self._by_start, (appointment.start, appointment.id))
        self._longest = max(self._longest, appointment.interval.duration)

    def _require(self, appointment_id: str) -> Appointment:
        appointment = self._appointments.get(appointment_id)
        if appointment is None:
            raise NotFoundError(
                f"Appointment {appointment_id} not found for physician {self.physician_id}"
            )
        return appointment

    def __repr__(self):
        return f"<PhysicianSchedule(physician_id={self.physician_id}, appointments={len(self._appointments)})>"
