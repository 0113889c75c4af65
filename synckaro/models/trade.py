"""Trade data model."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from synckaro.models.base import Entity


class TradeType(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class Exchange(str, Enum):
    NSE = "NSE"
    BSE = "BSE"


class TradeStatus(str, Enum):
    PENDING = "pending"
    EXECUTED = "executed"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


OPEN_TRADE_STATUSES = frozenset({TradeStatus.PENDING, TradeStatus.EXECUTED})


class Trade(Entity):
    """A simulated trade placed by a teacher, optionally for one student."""

    id: str = Field(..., min_length=1, description="Trade ID")
    teacher_id: str = Field(..., min_length=1, description="Owning teacher ID")
    teacher_name: Optional[str] = Field(default=None, description="Denormalized teacher name")
    student_id: Optional[str] = Field(default=None, description="Student the trade is for")
    student_name: Optional[str] = Field(default=None, description="Denormalized student name")
    stock: str = Field(..., min_length=1, description="Trading symbol")
    quantity: int = Field(..., gt=0, description="Trade quantity")
    price: Optional[float] = Field(default=None, ge=0, description="Execution price")
    type: TradeType = Field(..., description="Trade side")
    exchange: Exchange = Field(default=Exchange.NSE, description="Exchange")
    status: TradeStatus = Field(default=TradeStatus.PENDING, description="Trade status")
    executed_at: Optional[datetime] = Field(default=None, description="Execution timestamp")
    created_at: datetime = Field(..., description="Creation timestamp")
    timestamp: Optional[datetime] = Field(default=None, description="Display timestamp")
    pnl: float = Field(default=0.0, description="Realized P&L")

    @property
    def is_open(self) -> bool:
        """Whether the panic handler would close this trade."""
        return self.status in OPEN_TRADE_STATUSES

    @property
    def occurred_at(self) -> datetime:
        return self.timestamp or self.created_at
