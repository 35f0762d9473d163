from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional
import enum
import uuid

from .errors import AlreadyTerminalError
from .intervals import TimeInterval

class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"

    @property
    def is_terminal(self) -> bool:
        return self is not AppointmentStatus.SCHEDULED

# Upper bound in minutes -> label, checked in order
APPOINTMENT_TYPES = (
    (15, "Quick Checkup"),
    (30, "Standard Visit"),
    (45, "Extended Consultation"),
    (60, "Comprehensive Exam"),
)

def appointment_type_for(minutes: int) -> str:
    """Classify an appointment by its length."""
    for upper_bound, label in APPOINTMENT_TYPES:
        if minutes <= upper_bound:
            return label
    return "Extended Procedure"

def new_appointment_id() -> str:
    return str(uuid.uuid4())

@dataclass
class Appointment:
    """A booked visit on a physician's schedule.

    Instances handed out by the engine are copies; mutating one never
    changes the schedule it came from.
    """

    interval: TimeInterval
    patient_id: str
    physician_id: str
    id: str = field(default_factory=new_appointment_id)
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    reason_for_visit: Optional[str] = None
    notes: Optional[str] = None
    clinical_document_id: Optional[str] = None
    cancellation_reason: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    modified_at: Optional[datetime] = None
    version: int = 1

    @property
    def start(self) -> datetime:
        return self.interval.start

    @property
    def end(self) -> datetime:
        return self.interval.end

    @property
    def duration_minutes(self) -> int:
        return self.interval.duration_minutes

    @property
    def appointment_type(self) -> str:
        return appointment_type_for(self.duration_minutes)

    @property
    def is_scheduled(self) -> bool:
        return self.status is AppointmentStatus.SCHEDULED

    def cancel(self, reason: str = "") -> None:
        self._transition(AppointmentStatus.CANCELLED, "cancel")
        self.cancellation_reason = reason or None

    def complete(self) -> None:
        self._transition(AppointmentStatus.COMPLETED, "complete")

    def mark_no_show(self) -> None:
        self._transition(AppointmentStatus.NO_SHOW, "mark as no-show")

    def reschedule(self, interval: TimeInterval) -> None:
        """Move to a new interval; legality is checked by the owning schedule."""
        self.require_scheduled("reschedule")
        self.interval = interval
        self._touch()

    def link_document(self, document_id: Optional[str]) -> None:
        self.clinical_document_id = document_id
        self._touch()

    def copy(self) -> "Appointment":
        return replace(self)

    def _transition(self, target: AppointmentStatus, action: str) -> None:
        self.require_scheduled(action)
        self.status = target
        self._touch()

    def require_scheduled(self, action: str) -> None:
        if self.status.is_terminal:
            raise AlreadyTerminalError(
                f"Cannot {action} appointment {self.id}: it is already {self.status.value}"
            )

    def _touch(self) -> None:
        self.modified_at = datetime.utcnow()
        self.version += 1

    def __str__(self):
        return (
            f"Appointment [{self.status.value}]: {self.interval} "
            f"(Patient: {self.patient_id}, Physician: {self.physician_id})"
        )
