"""Teacher data model."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from synckaro.models.base import Entity


class TeacherStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    OPEN = "open"
    CLOSE = "close"
    LIVE = "live"
    TEST = "test"


class Teacher(Entity):
    """A teacher account and its denormalized performance rollups.

    The rollup fields are derived from the teacher's students and trades by
    the aggregation engine and are never authored directly.
    """

    id: str = Field(..., min_length=1, description="Teacher ID")
    name: str = Field(..., min_length=1, description="Full name")
    email: str = Field(..., description="Contact email")
    mobile: str = Field(..., description="10-digit mobile number")
    phone: Optional[str] = Field(default=None, description="Formatted phone number")
    status: TeacherStatus = Field(default=TeacherStatus.ACTIVE, description="Account status")
    total_students: int = Field(default=0, ge=0, description="Number of linked students")
    total_trades: int = Field(default=0, ge=0, description="Number of trades")
    total_capital: float = Field(default=0.0, description="Capital under management")
    profit_loss: float = Field(default=0.0, description="Sum of trade P&L")
    win_rate: int = Field(default=0, ge=0, le=100, description="Winning trade percentage")
    specialization: Optional[str] = Field(default=None, description="Trading specialization")
    joined_date: datetime = Field(..., description="Join timestamp")
