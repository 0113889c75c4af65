"""Teacher administration: listing, status changes and deletion."""

import logging
from typing import Iterable, Optional

from synckaro.core.aggregation import RollupService
from synckaro.db.repositories import Repositories
from synckaro.models import (
    ActivityLog,
    Student,
    StudentStatus,
    Teacher,
    TeacherStatus,
    Trade,
)

logger = logging.getLogger(__name__)


class TeacherService:
    """Admin operations over the teacher collection.

    Deleting a teacher does not cascade: its students and trades stay in
    the store and callers filter them out as needed.
    """

    def __init__(self, repos: Repositories, rollups: Optional[RollupService] = None):
        self.repos = repos
        self.rollups = rollups or RollupService(repos)

    def list_teachers(
        self,
        status: Optional[TeacherStatus] = None,
        query: Optional[str] = None,
    ) -> list[Teacher]:
        """List teachers, optionally filtered.

        Args:
            status: Only teachers with this status.
            query: Case-insensitive match on name, email or mobile.
        """
        teachers = self.repos.teachers.all()
        if status is not None:
            teachers = [t for t in teachers if t.status == status]
        if query and query.strip():
            needle = query.strip().lower()
            teachers = [
                t for t in teachers
                if needle in t.name.lower() or needle in t.email.lower() or needle in t.mobile
            ]
        return teachers

    def get(self, teacher_id: str) -> Optional[Teacher]:
        return self.repos.teachers.get(teacher_id)

    def delete(self, teacher_id: str) -> bool:
        """Delete one teacher.

        Returns:
            True if deleted, False if not found.
        """
        return self.bulk_delete([teacher_id]) == 1

    def bulk_delete(self, teacher_ids: Iterable[str]) -> int:
        """Delete several teachers.

        Returns:
            Number of teachers removed.
        """
        doomed = set(teacher_ids)

        def _remove(teachers: list[Teacher]):
            remaining = [t for t in teachers if t.id not in doomed]
            return remaining, len(teachers) - len(remaining)

        removed = self.repos.teachers.update(_remove)
        if removed:
            self.rollups.recompute([])
            logger.info("Deleted %d teachers", removed)
        return removed

    def bulk_update_status(self, teacher_ids: Iterable[str], status: TeacherStatus) -> int:
        """Set the status of several teachers.

        Returns:
            Number of teachers updated.
        """
        wanted = set(teacher_ids)

        def _apply(teachers: list[Teacher]):
            changed = 0
            for index, teacher in enumerate(teachers):
                if teacher.id in wanted:
                    teachers[index] = teacher.model_copy(update={"status": status})
                    changed += 1
            return teachers, changed

        return self.repos.teachers.update(_apply)

    def set_student_status(
        self,
        teacher_id: str,
        student_id: str,
        status: StudentStatus,
    ) -> Optional[Student]:
        """Toggle a student from the teacher's detail view, refreshing rollups.

        Returns:
            The updated student, or None if it is not the teacher's.
        """

        def _apply(students: list[Student]):
            for index, student in enumerate(students):
                if student.id == student_id and student.teacher_id == teacher_id:
                    students[index] = student.model_copy(update={"status": status})
                    return students, students[index]
            return students, None

        updated = self.repos.students.update(_apply)
        if updated is not None:
            self.rollups.recompute([teacher_id])
        return updated

    def activity(self, teacher_id: str) -> list[ActivityLog]:
        """The teacher's activity feed, newest first."""
        return self.repos.activity_logs.for_teacher(teacher_id)

    def trades(self, teacher_id: str) -> list[Trade]:
        """The teacher's trades, newest first."""
        trades = self.repos.trades.for_teacher(teacher_id)
        return sorted(trades, key=lambda t: t.occurred_at, reverse=True)

    def students(self, teacher_id: str) -> list[Student]:
        return self.repos.students.for_teacher(teacher_id)
