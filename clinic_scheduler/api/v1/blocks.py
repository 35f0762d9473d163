from fastapi import APIRouter, Depends
from typing import List

from ...api.deps import get_schedule_manager, raise_for_result
from ...scheduling.manager import ScheduleManager
from ...schemas.scheduling import ScheduleResultResponse, UnavailableBlockCreate, UnavailableBlockResponse

router = APIRouter(prefix="/unavailable-blocks", tags=["Unavailable Blocks"])

@router.post("", response_model=ScheduleResultResponse, status_code=201)
def add_unavailable_block(
    request: UnavailableBlockCreate,
    manager: ScheduleManager = Depends(get_schedule_manager)
):
    """Block time for one physician, or for the whole facility when no physician is given.

    Appointments already booked in the blocked time are listed in ``conflicts``.
    """
    if request.physician_id:
        result = manager.add_unavailable_block(
            request.physician_id, request.start_time, request.end_time,
            request.reason, request.description
        )
    else:
        result = manager.add_facility_unavailable_block(
            request.start_time, request.end_time, request.reason, request.description
        )
    return raise_for_result(result)

@router.get("", response_model=List[UnavailableBlockResponse])
def get_facility_unavailable_blocks(manager: ScheduleManager = Depends(get_schedule_manager)):
    """Facility-wide blocks, by start time."""
    return [
        UnavailableBlockResponse.model_validate(block)
        for block in manager.get_facility_unavailable_blocks()
    ]

@router.delete("/{block_id}", response_model=ScheduleResultResponse)
def remove_unavailable_block(
    block_id: str,
    manager: ScheduleManager = Depends(get_schedule_manager)
):
    return raise_for_result(manager.remove_unavailable_block(block_id))
