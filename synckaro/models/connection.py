"""ConnectionRequest data model."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import Field, model_validator

from synckaro.models.base import Entity


class ConnectionStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ConnectionDirection(str, Enum):
    INCOMING = "incoming"  # initiated by the student
    OUTGOING = "outgoing"  # initiated by the teacher


class ConnectionRequest(Entity):
    """A proposed link between a teacher and a zombie student.

    ``pending`` moves to ``accepted`` or ``rejected``; both are terminal.
    """

    id: str = Field(..., min_length=1, description="Request ID")
    student_id: str = Field(..., min_length=1, description="Zombie student ID")
    teacher_id: str = Field(..., min_length=1, description="Teacher ID")
    status: ConnectionStatus = Field(default=ConnectionStatus.PENDING, description="Request status")
    direction: ConnectionDirection = Field(
        default=ConnectionDirection.OUTGOING, description="Which side initiated the request"
    )
    created_at: datetime = Field(..., description="Creation timestamp")
    responded_at: Optional[datetime] = Field(default=None, description="Accept/reject timestamp")

    @model_validator(mode="before")
    @classmethod
    def _infer_legacy_direction(cls, data: Any) -> Any:
        # Records written before ``direction`` existed encode it in the id.
        if isinstance(data, dict) and "direction" not in data:
            request_id = str(data.get("id", ""))
            if "incoming" in request_id:
                return {**data, "direction": ConnectionDirection.INCOMING}
        return data

    @property
    def is_pending(self) -> bool:
        return self.status == ConnectionStatus.PENDING
