from fastapi import APIRouter, Depends
from typing import List

from ...api.deps import get_schedule_manager, raise_for_result, raise_not_found
from ...scheduling.appointments import AppointmentStatus
from ...scheduling.manager import ScheduleManager
from ...scheduling.strategies import PreferredTimeOfDayStrategy
from ...schemas.scheduling import (
    AppointmentCreate, FirstAvailableRequest, CancelRequest, RescheduleRequest,
    ClinicalDocumentLink, AppointmentResponse, ScheduleResultResponse
)

router = APIRouter(prefix="/appointments", tags=["Appointments"])

def _owner_of(manager: ScheduleManager, appointment_id: str) -> str:
    appointment = manager.get_appointment(appointment_id)
    if appointment is None:
        raise_not_found(f"Appointment {appointment_id} not found")
    return appointment.physician_id

@router.post("", response_model=ScheduleResultResponse, status_code=201)
def schedule_appointment(
    request: AppointmentCreate,
    manager: ScheduleManager = Depends(get_schedule_manager)
):
    """Book an appointment at an exact time."""
    result = manager.schedule_appointment(
        physician_id=request.physician_id,
        patient_id=request.patient_id,
        start=request.start_time,
        duration_minutes=request.duration_minutes,
        reason=request.reason_for_visit,
        notes=request.notes
    )
    return raise_for_result(result)

@router.post("/first-available", response_model=ScheduleResultResponse, status_code=201)
def schedule_first_available(
    request: FirstAvailableRequest,
    manager: ScheduleManager = Depends(get_schedule_manager)
):
    """Book the first free slot at or after the preferred time."""
    strategy = None
    if request.earliest is not None:
        strategy = PreferredTimeOfDayStrategy(request.earliest, request.latest)
    result = manager.schedule_first_available(
        physician_id=request.physician_id,
        patient_id=request.patient_id,
        preferred=request.preferred_time,
        duration_minutes=request.duration_minutes,
        reason=request.reason_for_visit,
        strategy=strategy
    )
    return raise_for_result(result)

@router.get("/statuses", response_model=List[str])
def list_statuses():
    """List appointment statuses."""
    return [appointment_status.value for appointment_status in AppointmentStatus]

@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: str,
    manager: ScheduleManager = Depends(get_schedule_manager)
):
    appointment = manager.get_appointment(appointment_id)
    if appointment is None:
        raise_not_found(f"Appointment {appointment_id} not found")
    return AppointmentResponse.model_validate(appointment)

@router.post("/{appointment_id}/cancel", response_model=ScheduleResultResponse)
def cancel_appointment(
    appointment_id: str,
    request: CancelRequest = CancelRequest(),
    manager: ScheduleManager = Depends(get_schedule_manager)
):
    physician_id = _owner_of(manager, appointment_id)
    return raise_for_result(manager.cancel_appointment(physician_id, appointment_id, request.reason))

@router.post("/{appointment_id}/complete", response_model=ScheduleResultResponse)
def complete_appointment(
    appointment_id: str,
    manager: ScheduleManager = Depends(get_schedule_manager)
):
    physician_id = _owner_of(manager, appointment_id)
    return raise_for_result(manager.complete_appointment(physician_id, appointment_id))

@router.post("/{appointment_id}/no-show", response_model=ScheduleResultResponse)
def mark_no_show(
    appointment_id: str,
    manager: ScheduleManager = Depends(get_schedule_manager)
):
    physician_id = _owner_of(manager, appointment_id)
    return raise_for_result(manager.mark_no_show(physician_id, appointment_id))

@router.post("/{appointment_id}/reschedule", response_model=ScheduleResultResponse)
def reschedule_appointment(
    appointment_id: str,
    request: RescheduleRequest,
    manager: ScheduleManager = Depends(get_schedule_manager)
):
    """Move an appointment; the duration is kept unless a new one is given."""
    appointment = manager.get_appointment(appointment_id)
    if appointment is None:
        raise_not_found(f"Appointment {appointment_id} not found")
    result = manager.reschedule_appointment(
        appointment.physician_id,
        appointment_id,
        request.start_time,
        request.duration_minutes or appointment.duration_minutes
    )
    return raise_for_result(result)

@router.put("/{appointment_id}/clinical-document", response_model=ScheduleResultResponse)
def link_clinical_document(
    appointment_id: str,
    request: ClinicalDocumentLink,
    manager: ScheduleManager = Depends(get_schedule_manager)
):
    return raise_for_result(manager.link_clinical_document(appointment_id, request.document_id))
