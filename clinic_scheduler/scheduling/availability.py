"""Recurring weekly availability windows for physicians."""
from dataclasses import dataclass
from datetime import time
from typing import Dict, Iterable, List, Tuple
import enum
import logging
import threading

from .errors import InvalidIntervalError

logger = logging.getLogger(__name__)


class Weekday(enum.IntEnum):
    """Day of week numbered like ``date.weekday()``."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6


@dataclass(frozen=True)
class AvailabilityWindow:
    """A bookable period that repeats every week on ``day_of_week``."""

    physician_id: str
    day_of_week: Weekday
    start_time: time
    end_time: time

    def __post_init__(self):
        object.__setattr__(self, "day_of_week", Weekday(self.day_of_week))
        if self.start_time >= self.end_time:
            raise InvalidIntervalError(
                f"Availability start {self.start_time:%H:%M} must be before end {self.end_time:%H:%M}"
            )

    def overlaps(self, other: "AvailabilityWindow") -> bool:
        return self.start_time < other.end_time and other.start_time < self.end_time

    def __str__(self):
        return f"{self.day_of_week.name.title()} {self.start_time:%H:%M}-{self.end_time:%H:%M}"


class AvailabilityCalendar:
    """Thread-safe store of every physician's weekly windows.

    A physician or weekday with no windows is not bookable.
    """

    def __init__(self):
        self._windows: Dict[Tuple[str, Weekday], Tuple[AvailabilityWindow, ...]] = {}
        self._lock = threading.Lock()

    def set_window(self, physician_id: str, day_of_week: int, start_time: time, end_time: time) -> List[AvailabilityWindow]:
        """Replace every window of the physician on that weekday with a single one."""
        window = AvailabilityWindow(physician_id, day_of_week, start_time, end_time)
        with self._lock:
            self._windows[(physician_id, window.day_of_week)] = (window,)
        logger.info(f"Availability for physician {physician_id} set to {window}")
        return [window]

    def add_window(self, physician_id: str, day_of_week: int, start_time: time, end_time: time) -> List[AvailabilityWindow]:
        """Add another window on a weekday, e.g. the afternoon half of a split shift."""
        window = AvailabilityWindow(physician_id, day_of_week, start_time, end_time)
        key = (physician_id, window.day_of_week)
        with self._lock:
            existing = self._windows.get(key, ())
            for other in existing:
                if other.overlaps(window):
                    raise InvalidIntervalError(f"Window {window} overlaps existing window {other}")
            updated = tuple(sorted(existing + (window,), key=lambda w: w.start_time))
            self._windows[key] = updated
        logger.info(f"Availability window {window} added for physician {physician_id}")
        return list(updated)

    def clear_day(self, physician_id: str, day_of_week: int) -> None:
        with self._lock:
            self._windows.pop((physician_id, Weekday(day_of_week)), None)

    def replace_day(self, physician_id: str, day_of_week: int, windows: Iterable[AvailabilityWindow]) -> None:
        """Put back a weekday exactly as returned by ``get_windows``."""
        key = (physician_id, Weekday(day_of_week))
        windows = tuple(sorted(windows, key=lambda w: w.start_time))
        with self._lock:
            if windows:
                self._windows[key] = windows
            else:
                self._windows.pop(key, None)

    def get_windows(self, physician_id: str, day_of_week: int) -> List[AvailabilityWindow]:
        """Windows for one weekday in start-time order."""
        with self._lock:
            return list(self._windows.get((physician_id, Weekday(day_of_week)), ()))

    def get_weekly(self, physician_id: str) -> List[AvailabilityWindow]:
        with self._lock:
            windows = [
                window
                for (owner, _), day_windows in self._windows.items()
                if owner == physician_id
                for window in day_windows
            ]
        return sorted(windows, key=lambda w: (w.day_of_week, w.start_time))

    def load(self, windows: Iterable[AvailabilityWindow]) -> None:
        """Bulk-load persisted windows, replacing the weekdays they cover."""
        grouped: Dict[Tuple[str, Weekday], List[AvailabilityWindow]] = {}
        for window in windows:
            grouped.setdefault((window.physician_id, window.day_of_week), []).append(window)
        with self._lock:
            for key, day_windows in grouped.items():
                self._windows[key] = tuple(sorted(day_windows, key=lambda w: w.start_time))
