"""Free-slot generation for a physician's day."""
from datetime import date, datetime, time, timedelta
from typing import Iterable, Iterator, Sequence, Tuple

from .availability import AvailabilityWindow
from .conflicts import overlaps
from .intervals import TimeInterval

DEFAULT_STEP_MINUTES = 15

# Slots starting in this part of the day are flagged as optimal
OPTIMAL_START = time(9)
OPTIMAL_END = time(12)


def is_optimal_slot(slot: TimeInterval) -> bool:
    return OPTIMAL_START <= slot.start.time() < OPTIMAL_END


class SlotSequence:
    """Finite, restartable sequence of free intervals for one date.

    The windows, booked intervals and blocked intervals are captured when
    the sequence is built; every iteration walks them again from the start.
    """

    def __init__(
        self,
        on_date: date,
        windows: Sequence[AvailabilityWindow],
        booked: Sequence[TimeInterval],
        duration_minutes: int,
        step_minutes: int,
        blocked: Sequence[TimeInterval] = (),
    ):
        self.on_date = on_date
        self.duration_minutes = duration_minutes
        self._windows: Tuple[AvailabilityWindow, ...] = tuple(
            sorted(
                (w for w in windows if w.day_of_week == on_date.weekday()),
                key=lambda w: w.start_time,
            )
        )
        self._taken: Tuple[TimeInterval, ...] = tuple(sorted(list(booked) + list(blocked)))
        self._duration = timedelta(minutes=duration_minutes)
        self._step = timedelta(minutes=step_minutes)

    def __iter__(self) -> Iterator[TimeInterval]:
        for window in self._windows:
            cursor = datetime.combine(self.on_date, window.start_time)
            window_end = datetime.combine(self.on_date, window.end_time)
            while cursor + self._duration <= window_end:
                candidate = TimeInterval(cursor, cursor + self._duration)
                if any(overlaps(candidate, taken) for taken in self._taken):
                    cursor += self._step
                    continue
                yield candidate
                # Emitted slots never overlap each other
                cursor = candidate.end

    def __bool__(self):
        return next(iter(self), None) is not None

    def __repr__(self):
        return f"<SlotSequence(date={self.on_date}, duration={self.duration_minutes}m)>"


class SlotFinder:
    """Builds slot sequences by walking availability windows in fixed steps."""

    def __init__(self, step_minutes: int = DEFAULT_STEP_MINUTES):
        if step_minutes <= 0:
            raise ValueError("step_minutes must be positive")
        self.step_minutes = step_minutes

    def find_slots(
        self,
        windows: Iterable[AvailabilityWindow],
        booked: Iterable[TimeInterval],
        on_date: date,
        duration_minutes: int,
        blocked: Iterable[TimeInterval] = (),
    ) -> SlotSequence:
        """Free intervals of exactly ``duration_minutes`` on ``on_date``.

        ``booked`` holds the intervals of the physician's scheduled
        appointments on that date, ``blocked`` the unavailable blocks that
        apply to the physician.
        """
        if duration_minutes <= 0:
            raise ValueError("duration_minutes must be positive")
        return SlotSequence(
            on_date, list(windows), list(booked), duration_minutes, self.step_minutes, list(blocked)
        )
