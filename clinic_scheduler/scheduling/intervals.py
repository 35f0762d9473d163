from dataclasses import dataclass
from datetime import datetime, timedelta

from .errors import InvalidIntervalError


@dataclass(frozen=True, order=True)
class TimeInterval:
    """Half-open time range ``[start, end)``."""

    start: datetime
    end: datetime

    def __post_init__(self):
        if not (is_naive(self.start) and is_naive(self.end)):
            raise InvalidIntervalError("Times must be naive local clinic time, without a UTC offset")
        if self.start >= self.end:
            raise InvalidIntervalError(
                f"Interval start {self.start:%Y-%m-%d %H:%M} must be before end {self.end:%Y-%m-%d %H:%M}"
            )

    @classmethod
    def from_duration(cls, start: datetime, minutes: int) -> "TimeInterval":
        """Build an interval of ``minutes`` starting at ``start``."""
        if minutes <= 0:
            raise InvalidIntervalError("Appointment duration must be a positive number of minutes")
        return cls(start, start + timedelta(minutes=minutes))

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def duration_minutes(self) -> int:
        return int(self.duration.total_seconds() // 60)

    @property
    def spans_midnight(self) -> bool:
        return self.start.date() != self.end.date()

    def overlaps(self, other: "TimeInterval") -> bool:
        """Touching endpoints do not overlap."""
        return self.start < other.end and other.start < self.end

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end

    def __str__(self):
        return f"{self.start:%Y-%m-%d %H:%M}-{self.end:%H:%M}"


def floor_to_minute(moment: datetime) -> datetime:
    """Drop seconds and microseconds."""
    return moment.replace(second=0, microsecond=0)


def is_naive(moment: datetime) -> bool:
    return moment.tzinfo is None or moment.utcoffset() is None
