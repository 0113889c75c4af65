"""Aggregate snapshot models."""

from pydantic import Field

from synckaro.models.base import Entity


class TeacherRollup(Entity):
    """Metrics derived from a teacher's students and trades."""

    total_students: int = Field(..., ge=0, description="Linked students")
    total_capital: float = Field(..., description="Sum of students' current capital")
    profit_loss: float = Field(..., description="Sum of trade P&L")
    total_trades: int = Field(..., ge=0, description="Trade count")
    win_rate: int = Field(..., ge=0, le=100, description="Winning trade percentage")


class PlatformStats(Entity):
    """Platform-wide snapshot persisted under the ``stats`` key."""

    total_teachers: int = Field(..., ge=0)
    total_students: int = Field(..., ge=0)
    total_trades: int = Field(..., ge=0)
    total_capital: float = Field(...)
    total_profit_loss: float = Field(...)
    average_win_rate: float = Field(..., ge=0, le=100)
