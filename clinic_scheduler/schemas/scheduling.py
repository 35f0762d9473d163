from pydantic import BaseModel, ConfigDict, Field, NaiveDatetime, computed_field, model_validator
from datetime import datetime, time
from typing import List, Optional

from ..scheduling.appointments import AppointmentStatus
from ..scheduling.availability import Weekday
from ..scheduling.blocks import UnavailabilityReason
from ..scheduling.slots import is_optimal_slot

# Requests

# Times are naive local clinic time; values with a UTC offset are rejected

class AppointmentCreate(BaseModel):
    physician_id: str = Field(..., min_length=1)
    patient_id: str = Field(..., min_length=1)
    start_time: NaiveDatetime
    duration_minutes: int = Field(..., gt=0)
    reason_for_visit: Optional[str] = None
    notes: Optional[str] = None

class FirstAvailableRequest(BaseModel):
    physician_id: str = Field(..., min_length=1)
    patient_id: str = Field(..., min_length=1)
    preferred_time: NaiveDatetime
    duration_minutes: int = Field(..., gt=0)
    reason_for_visit: Optional[str] = None
    # Restrict to slots starting within this part of the day
    earliest: Optional[time] = None
    latest: Optional[time] = None

    @model_validator(mode="after")
    def check_time_of_day(self):
        if (self.earliest is None) != (self.latest is None):
            raise ValueError("earliest and latest must be given together")
        if self.earliest is not None and self.earliest > self.latest:
            raise ValueError("earliest must not be after latest")
        return self

class CancelRequest(BaseModel):
    reason: str = ""

class RescheduleRequest(BaseModel):
    start_time: NaiveDatetime
    duration_minutes: Optional[int] = Field(None, gt=0)

class ClinicalDocumentLink(BaseModel):
    document_id: Optional[str] = None

class AvailabilityRequest(BaseModel):
    start_time: time
    end_time: time

class ConflictCheckRequest(BaseModel):
    start_time: NaiveDatetime
    duration_minutes: int = Field(..., gt=0)

class UnavailableBlockCreate(BaseModel):
    # Omit physician_id for a facility-wide block
    physician_id: Optional[str] = Field(None, min_length=1)
    start_time: NaiveDatetime
    end_time: NaiveDatetime
    reason: UnavailabilityReason = UnavailabilityReason.OTHER
    description: Optional[str] = None

# Responses

class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    physician_id: str
    patient_id: str
    start: datetime
    end: datetime
    duration_minutes: int
    appointment_type: str
    status: AppointmentStatus
    reason_for_visit: Optional[str] = None
    notes: Optional[str] = None
    clinical_document_id: Optional[str] = None
    cancellation_reason: Optional[str] = None
    created_at: datetime
    modified_at: Optional[datetime] = None
    version: int

class SlotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    start: datetime
    end: datetime
    duration_minutes: int

    @computed_field
    @property
    def is_optimal(self) -> bool:
        return is_optimal_slot(self)

class AvailabilityWindowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    physician_id: str
    day_of_week: Weekday
    start_time: time
    end_time: time

class UnavailableBlockResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    physician_id: Optional[str] = None
    start: datetime
    end: datetime
    reason: UnavailabilityReason
    description: Optional[str] = None
    is_facility_wide: bool

class ScheduleResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    success: bool
    message: str
    appointment: Optional[AppointmentResponse] = None
    slot: Optional[SlotResponse] = None
    block: Optional[UnavailableBlockResponse] = None
    conflicts: List[AppointmentResponse] = []

class CancelledAppointmentsResponse(BaseModel):
    cancelled: int
    appointments: List[AppointmentResponse]

class StatisticsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    physician_id: str
    start: datetime
    end: datetime
    total_appointments: int
    scheduled_appointments: int
    completed_appointments: int
    cancelled_appointments: int
    no_show_appointments: int
    total_scheduled_hours: float
    average_duration_minutes: float
    completion_rate: float
    cancellation_rate: float
    no_show_rate: float
