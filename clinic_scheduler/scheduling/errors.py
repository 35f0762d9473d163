"""Domain failures raised by the scheduling engine.

Every error here is an expected, recoverable outcome. ``ScheduleManager``
catches them and hands them back inside a ``ScheduleResult``; they only
escape as exceptions when the aggregate classes are used directly.
"""
from typing import List, Optional


class SchedulingError(Exception):
    """Base class for scheduling domain failures."""

    code = "scheduling_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidIntervalError(SchedulingError):
    """Start is not before end, or the duration is outside policy bounds."""

    code = "invalid_interval"


class NoAvailabilityError(SchedulingError):
    """The interval is outside every availability window, or hits an unavailable block."""

    code = "no_availability"


class ConflictError(SchedulingError):
    """The interval overlaps one or more scheduled appointments."""

    code = "conflict"

    def __init__(self, message: str, conflicts: Optional[List] = None):
        super().__init__(message)
        self.conflicts = list(conflicts or [])


class NotFoundError(SchedulingError):
    """A referenced appointment, patient or physician does not exist."""

    code = "not_found"


class AlreadyTerminalError(SchedulingError):
    """A transition was attempted on an appointment that is no longer scheduled."""

    code = "already_terminal"


class SlotUnavailableError(SchedulingError):
    """The booking strategy found no slot within the search horizon."""

    code = "slot_unavailable"


class PersistenceError(SchedulingError):
    """The store rejected a write; the in-memory change was rolled back."""

    code = "persistence_failed"
