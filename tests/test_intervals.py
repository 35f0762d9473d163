import pytest
from datetime import timedelta, timezone

from clinic_scheduler.scheduling.conflicts import overlaps
from clinic_scheduler.scheduling.errors import InvalidIntervalError
from clinic_scheduler.scheduling.intervals import TimeInterval, floor_to_minute

from .helpers import interval
from .conftest import at

class TestTimeInterval:

    def test_start_must_precede_end(self):
        """Test that an empty or inverted interval is rejected."""
        with pytest.raises(InvalidIntervalError):
            TimeInterval(at(10), at(10))
        with pytest.raises(InvalidIntervalError):
            TimeInterval(at(10), at(9))

    def test_rejects_offset_aware_times(self):
        """Test that times carrying a UTC offset are rejected."""
        with pytest.raises(InvalidIntervalError):
            TimeInterval(at(9).replace(tzinfo=timezone.utc), at(10).replace(tzinfo=timezone.utc))
        with pytest.raises(InvalidIntervalError):
            TimeInterval(at(9), at(10).replace(tzinfo=timezone.utc))

    def test_from_duration(self):
        """Test building an interval from a start and minutes."""
        built = TimeInterval.from_duration(at(9, 30), 45)
        assert built.end == at(10, 15)
        assert built.duration == timedelta(minutes=45)
        assert built.duration_minutes == 45

    def test_from_duration_rejects_non_positive(self):
        """Test that zero and negative durations are rejected."""
        with pytest.raises(InvalidIntervalError):
            TimeInterval.from_duration(at(9), 0)
        with pytest.raises(InvalidIntervalError):
            TimeInterval.from_duration(at(9), -15)

    def test_touching_intervals_do_not_overlap(self):
        """Test half-open semantics at shared endpoints."""
        first = interval(9, 0, 30)
        second = interval(9, 30, 30)
        assert not first.overlaps(second)
        assert not overlaps(first, second)

    def test_overlap_is_symmetric(self):
        """Test that overlap gives the same answer in both directions."""
        pairs = [
            (interval(9, 0, 30), interval(9, 15, 30)),
            (interval(9, 0, 60), interval(9, 15, 15)),
            (interval(9, 0, 30), interval(10, 0, 30)),
        ]
        for a, b in pairs:
            assert overlaps(a, b) == overlaps(b, a)
            assert a.overlaps(b) == b.overlaps(a)

    def test_contains_excludes_end(self):
        """Test that the end instant is outside the interval."""
        slot = interval(9, 0, 30)
        assert slot.contains(at(9))
        assert slot.contains(at(9, 29))
        assert not slot.contains(at(9, 30))

    def test_spans_midnight(self):
        """Test detection of intervals crossing into the next day."""
        assert TimeInterval.from_duration(at(23, 30), 60).spans_midnight
        assert not interval(9, 0, 30).spans_midnight

    def test_ordering_by_start(self):
        """Test that intervals sort by start time."""
        later, earlier = interval(11, 0, 30), interval(9, 0, 30)
        assert sorted([later, earlier]) == [earlier, later]

    def test_str(self):
        """Test the human-readable form."""
        assert str(interval(9, 0, 30)) == "2030-01-07 09:00-09:30"

    def test_floor_to_minute(self):
        """Test that seconds and microseconds are dropped."""
        moment = at(9, 15).replace(second=42, microsecond=500)
        assert floor_to_minute(moment) == at(9, 15)
