"""ActivityLog data model."""

from datetime import datetime
from enum import Enum

from pydantic import Field

from synckaro.models.base import Entity


class ActivityAction(str, Enum):
    PROFILE_CREATED = "profile_created"
    PROFILE_UPDATED = "profile_updated"
    STUDENT_ADDED = "student_added"
    TRADE_EXECUTED = "trade_executed"


class ActivityLog(Entity):
    """An append-only entry in a teacher's activity feed."""

    id: str = Field(..., min_length=1, description="Log ID")
    teacher_id: str = Field(..., min_length=1, description="Owning teacher ID")
    action: ActivityAction = Field(..., description="Logged action")
    timestamp: datetime = Field(..., description="When the action happened")
    details: str = Field(default="", description="Free-text description")
