"""Collaborators the engine depends on, with in-memory implementations.

``ProfileDirectory`` answers whether patients and physicians exist;
``ScheduleStore`` persists appointments, availability windows and
unavailable blocks. The SQL implementations live in
``clinic_scheduler.repositories.sql``.
"""
from typing import Dict, Iterable, List, Optional, Protocol, Set, Tuple
import threading

from .appointments import Appointment
from .availability import AvailabilityWindow, Weekday
from .blocks import UnavailableBlock


class ProfileDirectory(Protocol):
    def patient_exists(self, patient_id: str) -> bool:
        ...

    def physician_exists(self, physician_id: str) -> bool:
        ...


class ScheduleStore(Protocol):
    def save_appointment(self, appointment: Appointment) -> None:
        """Insert or update; writes older than the stored version are ignored."""
        ...

    def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        ...

    def load_appointments(self, physician_id: str) -> List[Appointment]:
        ...

    def physician_ids(self) -> List[str]:
        """Every physician with stored appointments, windows or blocks."""
        ...

    def replace_windows(self, physician_id: str, day_of_week: Weekday, windows: List[AvailabilityWindow]) -> None:
        ...

    def load_windows(self, physician_id: str) -> List[AvailabilityWindow]:
        ...

    def save_block(self, block: UnavailableBlock) -> None:
        ...

    def delete_block(self, block_id: str) -> None:
        ...

    def load_blocks(self, physician_id: Optional[str]) -> List[UnavailableBlock]:
        """A physician's own blocks, or the facility-wide ones for None."""
        ...


class InMemoryProfileDirectory:
    """Profile registry held in sets; useful for embedding and tests."""

    def __init__(self, patients: Iterable[str] = (), physicians: Iterable[str] = ()):
        self._patients: Set[str] = set(patients)
        self._physicians: Set[str] = set(physicians)

    def register_patient(self, patient_id: str) -> None:
        if not patient_id:
            raise ValueError("patient_id must be provided")
        self._patients.add(patient_id)

    def register_physician(self, physician_id: str) -> None:
        if not physician_id:
            raise ValueError("physician_id must be provided")
        self._physicians.add(physician_id)

    def patient_exists(self, patient_id: str) -> bool:
        return patient_id in self._patients

    def physician_exists(self, physician_id: str) -> bool:
        return physician_id in self._physicians


class InMemoryScheduleStore:
    """Dictionary-backed store that keeps copies of what it is given."""

    def __init__(self):
        self._appointments: Dict[str, Appointment] = {}
        self._windows: Dict[Tuple[str, Weekday], List[AvailabilityWindow]] = {}
        self._blocks: Dict[str, UnavailableBlock] = {}
        self._lock = threading.Lock()

    def save_appointment(self, appointment: Appointment) -> None:
        with self._lock:
            stored = self._appointments.get(appointment.id)
            if stored is not None and stored.version >= appointment.version:
                return
            self._appointments[appointment.id] = appointment.copy()

    def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        with self._lock:
            stored = self._appointments.get(appointment_id)
            return stored.copy() if stored else None

    def load_appointments(self, physician_id: str) -> List[Appointment]:
        with self._lock:
            return [
                appointment.copy()
                for appointment in self._appointments.values()
                if appointment.physician_id == physician_id
            ]

    def physician_ids(self) -> List[str]:
        with self._lock:
            ids = {appointment.physician_id for appointment in self._appointments.values()}
            ids.update(physician_id for physician_id, _ in self._windows)
            ids.update(block.physician_id for block in self._blocks.values() if block.physician_id)
        return sorted(ids)

    def replace_windows(self, physician_id: str, day_of_week: Weekday, windows: List[AvailabilityWindow]) -> None:
        with self._lock:
            if windows:
                self._windows[(physician_id, Weekday(day_of_week))] = list(windows)
            else:
                self._windows.pop((physician_id, Weekday(day_of_week)), None)

    def load_windows(self, physician_id: str) -> List[AvailabilityWindow]:
        with self._lock:
            return [
                window
                for (owner, _), windows in self._windows.items()
                if owner == physician_id
                for window in windows
            ]

    def save_block(self, block: UnavailableBlock) -> None:
        with self._lock:
            self._blocks[block.id] = block

    def delete_block(self, block_id: str) -> None:
        with self._lock:
            self._blocks.pop(block_id, None)

    def load_blocks(self, physician_id: Optional[str]) -> List[UnavailableBlock]:
        with self._lock:
            return [block for block in self._blocks.values() if block.physician_id == physician_id]
