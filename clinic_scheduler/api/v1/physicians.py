from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from datetime import date, datetime
from pydantic import NaiveDatetime
from typing import List

from ...api.deps import get_schedule_manager, raise_for_result
from ...scheduling.manager import ScheduleManager
from ...schemas.scheduling import (
    AvailabilityRequest, ConflictCheckRequest, AppointmentResponse,
    AvailabilityWindowResponse, ScheduleResultResponse, SlotResponse, StatisticsResponse,
    UnavailableBlockResponse
)

router = APIRouter(prefix="/physicians", tags=["Physicians"])

def _check_range(start: datetime, end: datetime) -> None:
    if start >= end:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="start must be before end"
        )

# Availability

@router.get("/{physician_id}/availability", response_model=List[AvailabilityWindowResponse])
def get_availability(
    physician_id: str,
    manager: ScheduleManager = Depends(get_schedule_manager)
):
    """Weekly availability windows, Monday first."""
    return [
        AvailabilityWindowResponse.model_validate(window)
        for window in manager.get_physician_availability(physician_id)
    ]

@router.put("/{physician_id}/availability/{day_of_week}", response_model=ScheduleResultResponse)
def set_availability(
    physician_id: str,
    request: AvailabilityRequest,
    day_of_week: int = Path(..., ge=0, le=6, description="0 = Monday"),
    manager: ScheduleManager = Depends(get_schedule_manager)
):
    """Replace the day's windows with a single window."""
    result = manager.set_physician_availability(
        physician_id, day_of_week, request.start_time, request.end_time
    )
    return raise_for_result(result)

@router.post("/{physician_id}/availability/{day_of_week}", response_model=ScheduleResultResponse)
def add_availability(
    physician_id: str,
    request: AvailabilityRequest,
    day_of_week: int = Path(..., ge=0, le=6, description="0 = Monday"),
    manager: ScheduleManager = Depends(get_schedule_manager)
):
    """Add another, non-overlapping window to the day."""
    result = manager.add_physician_availability(
        physician_id, day_of_week, request.start_time, request.end_time
    )
    return raise_for_result(result)

@router.delete("/{physician_id}/availability/{day_of_week}", response_model=ScheduleResultResponse)
def clear_availability(
    physician_id: str,
    day_of_week: int = Path(..., ge=0, le=6, description="0 = Monday"),
    manager: ScheduleManager = Depends(get_schedule_manager)
):
    return raise_for_result(manager.clear_physician_availability(physician_id, day_of_week))

# Unavailable blocks

@router.get("/{physician_id}/unavailable-blocks", response_model=List[UnavailableBlockResponse])
def get_unavailable_blocks(
    physician_id: str,
    manager: ScheduleManager = Depends(get_schedule_manager)
):
    """The physician's own blocks plus facility-wide ones."""
    return [
        UnavailableBlockResponse.model_validate(block)
        for block in manager.get_unavailable_blocks(physician_id)
    ]

# Slots and conflicts

@router.get("/{physician_id}/slots", response_model=List[SlotResponse])
def get_available_slots(
    physician_id: str,
    on_date: date = Query(..., alias="date"),
    duration_minutes: int = Query(30, gt=0),
    manager: ScheduleManager = Depends(get_schedule_manager)
):
    """Free slots of the requested length on one date."""
    slots = manager.get_available_time_slots(physician_id, on_date, duration_minutes)
    return [SlotResponse.model_validate(slot) for slot in slots]

@router.get("/{physician_id}/next-slot", response_model=ScheduleResultResponse)
def find_next_slot(
    physician_id: str,
    after: NaiveDatetime,
    duration_minutes: int = Query(30, gt=0),
    manager: ScheduleManager = Depends(get_schedule_manager)
):
    return raise_for_result(manager.find_next_available_slot(physician_id, duration_minutes, after))

@router.post("/{physician_id}/conflicts", response_model=List[AppointmentResponse])
def check_conflicts(
    physician_id: str,
    request: ConflictCheckRequest,
    manager: ScheduleManager = Depends(get_schedule_manager)
):
    """Scheduled appointments that would overlap the proposed interval."""
    conflicts = manager.check_conflicts(physician_id, request.start_time, request.duration_minutes)
    return [AppointmentResponse.model_validate(appointment) for appointment in conflicts]

# Schedule views

@router.get("/{physician_id}/schedule", response_model=List[AppointmentResponse])
def get_schedule(
    physician_id: str,
    start: NaiveDatetime,
    end: NaiveDatetime,
    manager: ScheduleManager = Depends(get_schedule_manager)
):
    """Appointments of any status overlapping [start, end)."""
    _check_range(start, end)
    appointments = manager.get_schedule_in_range(physician_id, start, end)
    return [AppointmentResponse.model_validate(appointment) for appointment in appointments]

@router.get("/{physician_id}/statistics", response_model=StatisticsResponse)
def get_statistics(
    physician_id: str,
    start: NaiveDatetime,
    end: NaiveDatetime,
    manager: ScheduleManager = Depends(get_schedule_manager)
):
    _check_range(start, end)
    stats = manager.get_physician_statistics(physician_id, start, end)
    return StatisticsResponse.model_validate(stats)
