"""Application services used by the CLI."""

from synckaro.services.students import (
    BulkCreateResult,
    RowError,
    StudentCreate,
    StudentService,
    validate_contact,
)
from synckaro.services.teachers import TeacherService
from synckaro.services.trades import TradeService

__all__ = [
    "BulkCreateResult",
    "RowError",
    "StudentCreate",
    "StudentService",
    "TeacherService",
    "TradeService",
    "validate_contact",
]
