from fastapi import APIRouter, Depends
from typing import List

from ...api.deps import get_schedule_manager
from ...scheduling.manager import ScheduleManager
from ...schemas.scheduling import AppointmentResponse, CancelRequest, CancelledAppointmentsResponse

router = APIRouter(prefix="/patients", tags=["Patients"])

@router.get("/{patient_id}/appointments", response_model=List[AppointmentResponse])
def get_patient_appointments(
    patient_id: str,
    manager: ScheduleManager = Depends(get_schedule_manager)
):
    """All of a patient's appointments across physicians, by start time."""
    return [
        AppointmentResponse.model_validate(appointment)
        for appointment in manager.get_patient_appointments(patient_id)
    ]

@router.post("/{patient_id}/appointments/cancel", response_model=CancelledAppointmentsResponse)
def cancel_patient_appointments(
    patient_id: str,
    request: CancelRequest = CancelRequest(),
    manager: ScheduleManager = Depends(get_schedule_manager)
):
    """Cancel every scheduled appointment the patient holds."""
    cancelled = manager.cancel_patient_appointments(patient_id, request.reason)
    return CancelledAppointmentsResponse(
        cancelled=len(cancelled),
        appointments=[AppointmentResponse.model_validate(appointment) for appointment in cancelled]
    )
