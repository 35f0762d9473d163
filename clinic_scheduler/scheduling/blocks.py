"""One-off periods when a physician, or the whole clinic, cannot be booked.

Weekly windows say when a physician normally works; unavailable blocks carve
lunches, meetings, vacations and holidays out of that time.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional
import enum
import threading
import uuid

from .errors import InvalidIntervalError, NotFoundError
from .intervals import TimeInterval

MAX_BLOCK_DURATION = timedelta(days=365)


class UnavailabilityReason(str, enum.Enum):
    NON_BUSINESS_HOURS = "non_business_hours"
    LUNCH = "lunch"
    MEETING = "meeting"
    VACATION = "vacation"
    SICK_LEAVE = "sick_leave"
    HOLIDAY = "holiday"
    ADMINISTRATIVE = "administrative"
    EMERGENCY = "emergency"
    OTHER = "other"


@dataclass(frozen=True)
class UnavailableBlock:
    """A bookable-time exclusion; facility-wide when ``physician_id`` is None."""

    interval: TimeInterval
    reason: UnavailabilityReason = UnavailabilityReason.OTHER
    description: Optional[str] = None
    physician_id: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        object.__setattr__(self, "reason", UnavailabilityReason(self.reason))
        if self.interval.duration > MAX_BLOCK_DURATION:
            raise InvalidIntervalError("Unavailable block cannot exceed 365 days")
        if (
            self.is_facility_wide
            and self.reason is UnavailabilityReason.OTHER
            and not (self.description or "").strip()
        ):
            raise InvalidIntervalError("Facility-wide blocks with reason 'other' need a description")

    @property
    def start(self) -> datetime:
        return self.interval.start

    @property
    def end(self) -> datetime:
        return self.interval.end

    @property
    def is_facility_wide(self) -> bool:
        return self.physician_id is None

    def applies_to(self, physician_id: str) -> bool:
        return self.is_facility_wide or self.physician_id == physician_id

    def blocks(self, interval: TimeInterval) -> bool:
        return self.interval.overlaps(interval)

    def __str__(self):
        scope = "facility-wide" if self.is_facility_wide else f"physician {self.physician_id}"
        text = f"Unavailable [{self.reason.value}]: {self.interval} ({scope})"
        return f"{text} - {self.description}" if self.description else text


class UnavailabilityCalendar:
    """Thread-safe registry of every unavailable block, keyed by block id."""

    def __init__(self):
        self._blocks: Dict[str, UnavailableBlock] = {}
        self._lock = threading.Lock()

    def add(self, block: UnavailableBlock) -> None:
        with self._lock:
            self._blocks[block.id] = block

    def remove(self, block_id: str) -> UnavailableBlock:
        with self._lock:
            block = self._blocks.pop(block_id, None)
        if block is None:
            raise NotFoundError(f"Unavailable block {block_id} not found")
        return block

    def get(self, block_id: str) -> Optional[UnavailableBlock]:
        with self._lock:
            return self._blocks.get(block_id)

    def blocking(self, physician_id: str, interval: TimeInterval) -> List[UnavailableBlock]:
        """Blocks that apply to the physician and overlap ``interval``, earliest first."""
        with self._lock:
            hits = [
                block for block in self._blocks.values()
                if block.applies_to(physician_id) and block.blocks(interval)
            ]
        return sorted(hits, key=lambda b: b.interval)

    def for_physician(self, physician_id: str) -> List[UnavailableBlock]:
        """The physician's own blocks plus the facility-wide ones."""
        with self._lock:
            blocks = [block for block in self._blocks.values() if block.applies_to(physician_id)]
        return sorted(blocks, key=lambda b: b.interval)

    def facility_wide(self) -> List[UnavailableBlock]:
        with self._lock:
            blocks = [block for block in self._blocks.values() if block.is_facility_wide]
        return sorted(blocks, key=lambda b: b.interval)

    def load(self, blocks: Iterable[UnavailableBlock]) -> None:
        with self._lock:
            for block in blocks:
                self._blocks.setdefault(block.id, block)
