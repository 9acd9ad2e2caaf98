from enum import Enum

from pydantic import BaseModel

UNSPECIFIED = "Belirtilmemiş"
TIME_PLACEHOLDER = "-"
UNKNOWN_ID = "unknown"


class AppointmentView(BaseModel):
    """Display-ready appointment; every field is a printable string."""
    id: str
    display_date: str
    display_time: str
    staff_name: str
    service_name: str

    model_config = {"frozen": True}


class WorkflowState(str, Enum):
    IDLE = "idle"
    CONFIRMING = "confirming"
    IN_FLIGHT = "in_flight"


class CancellationRequest(BaseModel):
    target_id: str | None = None
    pending: bool = False
    last_error: str | None = None

    @property
    def state(self) -> WorkflowState:
        if self.pending:
            return WorkflowState.IN_FLIGHT
        if self.target_id is not None:
            return WorkflowState.CONFIRMING
        return WorkflowState.IDLE
