"""Student data model."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from synckaro.models.base import Entity


class StudentStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Student(Entity):
    """A student whose capital a teacher trades.

    An empty ``teacher_id`` marks a zombie (unaffiliated) student.
    ``current_capital`` is tracked independently of trade history.
    """

    id: str = Field(..., min_length=1, description="Student ID")
    name: str = Field(..., min_length=1, description="Full name")
    email: str = Field(..., description="Contact email")
    mobile: str = Field(..., description="10-digit mobile number")
    teacher_id: str = Field(default="", description="Owning teacher ID, empty for zombies")
    teacher_name: Optional[str] = Field(default=None, description="Denormalized teacher name")
    status: StudentStatus = Field(default=StudentStatus.ACTIVE, description="Account status")
    initial_capital: float = Field(default=0.0, ge=0, description="Capital at onboarding")
    current_capital: float = Field(default=0.0, ge=0, description="Current capital")
    profit_loss: float = Field(default=0.0, description="Current minus initial capital")
    risk_percentage: float = Field(default=10.0, ge=0, le=100, description="Risk per trade")
    strategy: str = Field(default="", description="Trading strategy label")
    joined_date: datetime = Field(..., description="Join timestamp")

    @property
    def is_zombie(self) -> bool:
        """Whether the student has no owning teacher."""
        return not self.teacher_id
