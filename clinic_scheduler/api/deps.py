from fastapi import Request, status
from typing import Dict

from ..scheduling.errors import NotFoundError
from ..scheduling.manager import ScheduleManager, ScheduleResult
from ..schemas.scheduling import ScheduleResultResponse

# Domain error code -> HTTP status
ERROR_STATUS_CODES: Dict[str, int] = {
    "invalid_interval": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "no_availability": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "conflict": status.HTTP_409_CONFLICT,
    "not_found": status.HTTP_404_NOT_FOUND,
    "already_terminal": status.HTTP_409_CONFLICT,
    "slot_unavailable": status.HTTP_404_NOT_FOUND,
    "persistence_failed": status.HTTP_503_SERVICE_UNAVAILABLE,
}

class ScheduleFailure(Exception):
    """Raised by endpoints to turn a failed ScheduleResult into an error response."""

    def __init__(self, result: ScheduleResult):
        super().__init__(result.message)
        self.result = result

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_CODES.get(self.result.error_code, status.HTTP_400_BAD_REQUEST)

def get_schedule_manager(request: Request) -> ScheduleManager:
    """Return the manager built at application startup."""
    return request.app.state.schedule_manager

def raise_for_result(result: ScheduleResult) -> ScheduleResultResponse:
    if not result.success:
        raise ScheduleFailure(result)
    return ScheduleResultResponse.model_validate(result)

def raise_not_found(message: str):
    raise ScheduleFailure(ScheduleResult.failed(NotFoundError(message)))
