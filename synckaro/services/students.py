"""Teacher-scoped student management.

Every operation only sees the students of the given teacher. Mutations are
followed by a rollup refresh for that teacher.
"""

import logging
import re
import uuid
from typing import Any, Iterable, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError
from pydantic.alias_generators import to_camel

from synckaro.core.aggregation import RollupService
from synckaro.core.clock import Clock, utc_now
from synckaro.db.repositories import Repositories
from synckaro.models import (
    ActivityAction,
    ActivityLog,
    BrokerConfig,
    Student,
    StudentStatus,
)

logger = logging.getLogger(__name__)

MOBILE_PATTERN = re.compile(r"^[6-9]\d{9}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Fields a caller may not change through update()
PROTECTED_FIELDS = frozenset({"id", "teacher_id", "joined_date"})
CAPITAL_FIELDS = frozenset({"initial_capital", "current_capital"})


class StudentCreate(BaseModel):
    """Input for creating a student."""

    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    mobile: str = Field(..., min_length=1)
    teacher_name: Optional[str] = None
    status: StudentStatus = StudentStatus.ACTIVE
    initial_capital: float = Field(default=0.0, ge=0)
    current_capital: Optional[float] = Field(default=None, ge=0)
    risk_percentage: float = Field(default=10.0, ge=0, le=100)
    strategy: str = ""

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class RowError(BaseModel):
    """A rejected bulk-create row (1-based)."""

    row: int = Field(..., ge=1)
    error: str


class BulkCreateResult(BaseModel):
    created: list[Student] = Field(default_factory=list)
    errors: list[RowError] = Field(default_factory=list)


def _field_names(changes: Mapping[str, Any]) -> dict[str, Any]:
    """Map camelCase aliases onto Student field names. Unknown keys are dropped."""
    by_alias = {info.alias or name: name for name, info in Student.model_fields.items()}
    names = {}
    for key, value in changes.items():
        if key in Student.model_fields:
            names[key] = value
        elif key in by_alias:
            names[by_alias[key]] = value
    return names


def validate_contact(email: str, mobile: str) -> Optional[str]:
    """Check contact details.

    Returns:
        An error message, or None if both are well-formed.
    """
    if not EMAIL_PATTERN.match(email):
        return f"Invalid email address: {email}"
    if not MOBILE_PATTERN.match(mobile):
        return f"Invalid mobile number: {mobile}"
    return None


class StudentService:
    """CRUD over one teacher's students."""

    def __init__(
        self,
        repos: Repositories,
        rollups: Optional[RollupService] = None,
        clock: Clock = utc_now,
    ):
        self.repos = repos
        self.rollups = rollups or RollupService(repos)
        self.clock = clock

    def _new_student(self, teacher_id: str, data: StudentCreate) -> Student:
        current = data.current_capital if data.current_capital is not None else data.initial_capital
        return Student(
            id=f"student-{uuid.uuid4().hex[:12]}",
            name=data.name,
            email=data.email,
            mobile=data.mobile,
            teacher_id=teacher_id,
            teacher_name=data.teacher_name,
            status=data.status,
            initial_capital=data.initial_capital,
            current_capital=current,
            profit_loss=round(current - data.initial_capital, 2),
            risk_percentage=data.risk_percentage,
            strategy=data.strategy,
            joined_date=self.clock(),
        )

    def _log_added(self, students: Iterable[Student]) -> None:
        for student in students:
            self.repos.activity_logs.append(ActivityLog(
                id=f"log-{uuid.uuid4().hex[:12]}",
                teacher_id=student.teacher_id,
                action=ActivityAction.STUDENT_ADDED,
                timestamp=student.joined_date,
                details=f"Added student {student.name}",
            ))

    # ==================== Queries ====================

    def list_students(self, teacher_id: str) -> list[Student]:
        return self.repos.students.for_teacher(teacher_id)

    def get(self, student_id: str, teacher_id: str) -> Optional[Student]:
        """Get one of the teacher's students.

        Returns:
            The student, or None if missing or owned by another teacher.
        """
        student = self.repos.students.get(student_id)
        if student is None or student.teacher_id != teacher_id:
            return None
        return student

    # ==================== Mutations ====================

    def create(self, teacher_id: str, data: StudentCreate) -> Student:
        """Create a student linked to the teacher."""
        student = self._new_student(teacher_id, data)
        self.repos.students.append(student)
        self._log_added([student])
        self.rollups.recompute([teacher_id])
        logger.info("Created student %s for %s", student.id, teacher_id)
        return student

    def update(self, student_id: str, teacher_id: str, **changes: Any) -> Optional[Student]:
        """Apply field changes to one of the teacher's students.

        Args:
            student_id: Student to update.
            teacher_id: Owning teacher.
            **changes: Student fields to replace. Keys may be field names or their
                camelCase aliases. ``id``, ``teacher_id`` and ``joined_date`` are
                ignored. ``profit_loss`` follows capital changes.

        Returns:
            The updated student, or None if not found.

        Raises:
            pydantic.ValidationError: If the changes produce an invalid student.
        """
        allowed = {
            name: value
            for name, value in _field_names(changes).items()
            if name not in PROTECTED_FIELDS
        }

        def _apply(students: list[Student]):
            for index, student in enumerate(students):
                if student.id == student_id and student.teacher_id == teacher_id:
                    updated = Student.model_validate({**student.model_dump(), **allowed})
                    if CAPITAL_FIELDS & allowed.keys():
                        updated = updated.model_copy(update={
                            "profit_loss": round(updated.current_capital - updated.initial_capital, 2),
                        })
                    students[index] = updated
                    return students, updated
            return students, None

        updated = self.repos.students.update(_apply)
        if updated is not None:
            self.rollups.recompute([teacher_id])
        return updated

    def toggle_status(self, student_id: str, active: bool, teacher_id: str) -> Optional[Student]:
        status = StudentStatus.ACTIVE if active else StudentStatus.INACTIVE
        return self.update(student_id, teacher_id, status=status)

    def delete(self, student_id: str, teacher_id: str) -> bool:
        """Delete one of the teacher's students.

        Trades placed for the student are kept.

        Returns:
            True if deleted, False if not found.
        """

        def _remove(students: list[Student]):
            remaining = [
                s for s in students if not (s.id == student_id and s.teacher_id == teacher_id)
            ]
            return remaining, len(remaining) != len(students)

        deleted = self.repos.students.update(_remove)
        if deleted:
            self.rollups.recompute([teacher_id])
            logger.info("Deleted student %s", student_id)
        return deleted

    def bulk_create(
        self,
        rows: Iterable[Mapping[str, Any]],
        teacher_id: str,
    ) -> BulkCreateResult:
        """Create many students, keeping the valid rows when others fail.

        Args:
            rows: Raw student fields, one mapping per row.
            teacher_id: Teacher to link the students to.

        Returns:
            BulkCreateResult with created students and 1-based row errors.
        """
        result = BulkCreateResult()
        existing_emails = {s.email for s in self.repos.students.all()}

        for index, row in enumerate(rows, start=1):
            if not row.get("name") or not row.get("email") or not row.get("mobile"):
                result.errors.append(RowError(
                    row=index, error="Missing required fields: name, email, or mobile"
                ))
                continue
            email = str(row["email"]).strip()
            mobile = str(row["mobile"]).strip()
            if email in existing_emails:
                result.errors.append(RowError(row=index, error=f"Email {email} already exists"))
                continue
            contact_error = validate_contact(email, mobile)
            if contact_error:
                result.errors.append(RowError(row=index, error=contact_error))
                continue
            try:
                data = StudentCreate.model_validate({**row, "email": email, "mobile": mobile})
            except ValidationError as exc:
                result.errors.append(RowError(row=index, error=str(exc.errors()[0]["msg"])))
                continue

            result.created.append(self._new_student(teacher_id, data))
            existing_emails.add(email)

        if result.created:
            self.repos.students.update(lambda students: (students + result.created, None))
            self._log_added(result.created)
            self.rollups.recompute([teacher_id])
        logger.info(
            "Bulk create for %s: %d created, %d rejected",
            teacher_id, len(result.created), len(result.errors),
        )
        return result

    # ==================== Broker configs ====================

    def get_broker_config(self, student_id: str, teacher_id: str) -> Optional[BrokerConfig]:
        if self.get(student_id, teacher_id) is None:
            return None
        return self.repos.broker_configs.get_for_user(student_id)

    def update_broker_config(
        self,
        student_id: str,
        teacher_id: str,
        broker_provider: str,
        api_key: str,
        api_secret: str,
        access_token: Optional[str] = None,
        is_connected: bool = False,
    ) -> Optional[BrokerConfig]:
        """Save the broker config of one of the teacher's students.

        Returns:
            The saved config, or None if the student is not the teacher's.
        """
        if self.get(student_id, teacher_id) is None:
            return None
        config = BrokerConfig(
            user_id=student_id,
            broker_provider=broker_provider,
            api_key=api_key,
            api_secret=api_secret,
            access_token=access_token,
            is_connected=is_connected,
            last_checked=self.clock(),
        )
        return self.repos.broker_configs.upsert(config)
