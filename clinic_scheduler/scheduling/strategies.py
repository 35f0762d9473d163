"""Pluggable policies for choosing one slot among free candidates."""
from abc import ABC, abstractmethod
from datetime import datetime, time
from typing import Iterable, Optional

from .intervals import TimeInterval


class BookingStrategy(ABC):
    """Picks a slot from a time-ordered candidate sequence."""

    name: str = ""
    description: str = ""

    @abstractmethod
    def select_slot(self, candidates: Iterable[TimeInterval], preferred: datetime) -> Optional[TimeInterval]:
        """Return the chosen candidate, or None when nothing suits."""


class FirstAvailableStrategy(BookingStrategy):
    name = "First Available"
    description = "Finds the earliest available appointment slot that meets the duration requirements"

    def select_slot(self, candidates, preferred):
        for candidate in candidates:
            if candidate.start >= preferred:
                return candidate
        return None


class PreferredTimeOfDayStrategy(BookingStrategy):
    """Earliest slot whose start falls between ``earliest`` and ``latest`` (inclusive)."""

    name = "Preferred Time of Day"
    description = "Finds the earliest available slot that starts inside a preferred part of the day"

    def __init__(self, earliest: time, latest: time):
        if earliest > latest:
            raise ValueError("earliest must not be after latest")
        self.earliest = earliest
        self.latest = latest

    def select_slot(self, candidates, preferred):
        for candidate in candidates:
            if candidate.start < preferred:
                continue
            if self.earliest <= candidate.start.time() <= self.latest:
                return candidate
        return None
