"""Pure conflict and containment checks."""
from typing import Iterable, List, Optional

from .appointments import Appointment
from .availability import AvailabilityWindow
from .intervals import TimeInterval


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    """Half-open overlap test, symmetric in its arguments."""
    return a.start < b.end and b.start < a.end


def is_within_any_window(
    interval: TimeInterval,
    windows: Iterable[AvailabilityWindow],
    weekday: Optional[int] = None,
) -> bool:
    """True when the interval's time of day fits inside one window of ``weekday``.

    ``weekday`` defaults to the weekday of ``interval.start``. Intervals that
    cross midnight never fit.
    """
    if interval.spans_midnight:
        return False
    if weekday is None:
        weekday = interval.start.weekday()
    start, end = interval.start.time(), interval.end.time()
    for window in windows:
        if window.day_of_week != weekday:
            continue
        if window.start_time <= start and end <= window.end_time:
            return True
    return False


def find_conflicts(
    candidate: TimeInterval,
    appointments: Iterable[Appointment],
    exclude_id: Optional[str] = None,
) -> List[Appointment]:
    """Scheduled appointments overlapping ``candidate``, earliest first."""
    conflicts = [
        appointment
        for appointment in appointments
        if appointment.is_scheduled
        and appointment.id != exclude_id
        and overlaps(candidate, appointment.interval)
    ]
    return sorted(conflicts, key=lambda a: a.start)
