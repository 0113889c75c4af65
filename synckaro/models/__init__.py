"""Data models for SyncKaro."""

from synckaro.models.activity import ActivityAction, ActivityLog
from synckaro.models.broker import BrokerConfig
from synckaro.models.connection import (
    ConnectionDirection,
    ConnectionRequest,
    ConnectionStatus,
)
from synckaro.models.stats import PlatformStats, TeacherRollup
from synckaro.models.student import Student, StudentStatus
from synckaro.models.teacher import Teacher, TeacherStatus
from synckaro.models.trade import (
    OPEN_TRADE_STATUSES,
    Exchange,
    Trade,
    TradeStatus,
    TradeType,
)
from synckaro.models.user import CurrentUser, UserRole

__all__ = [
    "ActivityAction",
    "ActivityLog",
    "BrokerConfig",
    "ConnectionDirection",
    "ConnectionRequest",
    "ConnectionStatus",
    "CurrentUser",
    "Exchange",
    "OPEN_TRADE_STATUSES",
    "PlatformStats",
    "Student",
    "StudentStatus",
    "Teacher",
    "TeacherRollup",
    "TeacherStatus",
    "Trade",
    "TradeStatus",
    "TradeType",
    "UserRole",
]
