"""Connection-request workflow between teachers and zombie students.

A request is created ``pending`` and may move once to ``accepted`` or
``rejected``. Cancelling removes the request outright. Accepting links the
student to the teacher.

Operations return a ``WorkflowResult`` instead of raising, so callers can
tell "already handled" apart from "unknown ID".
"""

import logging
import uuid
from enum import Enum
from typing import Callable, Iterable, Optional

from pydantic import BaseModel, Field

from synckaro.core.aggregation import RollupService
from synckaro.core.clock import Clock, utc_now
from synckaro.db.repositories import Repositories
from synckaro.models import (
    ConnectionDirection,
    ConnectionRequest,
    ConnectionStatus,
    Student,
)

logger = logging.getLogger(__name__)


class ResultStatus(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    INVALID_TRANSITION = "invalid_transition"
    DUPLICATE_REQUEST = "duplicate_request"


class WorkflowResult(BaseModel):
    """Outcome of a workflow operation."""

    status: ResultStatus = Field(..., description="Outcome")
    request: Optional[ConnectionRequest] = Field(default=None, description="Affected request")
    message: str = Field(default="", description="Human-readable detail")

    model_config = {"frozen": True}

    @property
    def ok(self) -> bool:
        return self.status == ResultStatus.OK


class ConnectionSummary(BaseModel):
    """Counts shown on a teacher's connections overview."""

    incoming_pending: int = Field(..., ge=0)
    outgoing_pending: int = Field(..., ge=0)
    zombie_students: int = Field(..., ge=0)
    connected_students: int = Field(..., ge=0)

    model_config = {"frozen": True}


def _matches(student: Student, query: str) -> bool:
    needle = query.lower()
    return (
        needle in student.name.lower()
        or needle in student.email.lower()
        or needle in student.mobile.lower()
    )


class ConnectionWorkflow:
    """Creates and resolves connection requests."""

    def __init__(
        self,
        repos: Repositories,
        clock: Clock = utc_now,
        rollups: Optional[RollupService] = None,
    ):
        self.repos = repos
        self.clock = clock
        self.rollups = rollups or RollupService(repos)

    # ==================== Queries ====================

    def list_zombie_students(self, query: Optional[str] = None) -> list[Student]:
        """Students with no owning teacher.

        Args:
            query: Optional case-insensitive filter on name, email or mobile.
        """
        zombies = self.repos.students.zombies()
        if query and query.strip():
            zombies = [s for s in zombies if _matches(s, query.strip())]
        return zombies

    def has_active_request(self, teacher_id: str, student_id: str) -> bool:
        """Whether a pending request already links this pair."""
        return any(
            r.teacher_id == teacher_id and r.student_id == student_id and r.is_pending
            for r in self.repos.connections.all()
        )

    def _for_teacher(
        self,
        teacher_id: str,
        direction: ConnectionDirection,
        statuses: Optional[Iterable[ConnectionStatus]],
    ) -> list[ConnectionRequest]:
        wanted = set(statuses) if statuses is not None else None
        requests = [
            r for r in self.repos.connections.all()
            if r.teacher_id == teacher_id
            and r.direction == direction
            and (wanted is None or r.status in wanted)
        ]
        return sorted(requests, key=lambda r: r.created_at, reverse=True)

    def incoming(
        self,
        teacher_id: str,
        statuses: Optional[Iterable[ConnectionStatus]] = None,
    ) -> list[ConnectionRequest]:
        """Requests students sent to the teacher, newest first."""
        return self._for_teacher(teacher_id, ConnectionDirection.INCOMING, statuses)

    def outgoing(
        self,
        teacher_id: str,
        statuses: Optional[Iterable[ConnectionStatus]] = None,
    ) -> list[ConnectionRequest]:
        """Requests the teacher sent to students, newest first."""
        return self._for_teacher(teacher_id, ConnectionDirection.OUTGOING, statuses)

    def summary(self, teacher_id: str) -> ConnectionSummary:
        pending = [ConnectionStatus.PENDING]
        students = self.repos.students.all()
        return ConnectionSummary(
            incoming_pending=len(self.incoming(teacher_id, pending)),
            outgoing_pending=len(self.outgoing(teacher_id, pending)),
            zombie_students=sum(1 for s in students if s.is_zombie),
            connected_students=sum(1 for s in students if s.teacher_id == teacher_id),
        )

    # ==================== Transitions ====================

    def create_request(
        self,
        teacher_id: str,
        student_id: str,
        direction: ConnectionDirection = ConnectionDirection.OUTGOING,
    ) -> WorkflowResult:
        """Open a pending request between a teacher and a student.

        Returns:
            ``duplicate_request`` if a pending request already exists for the
            pair, ``not_found`` if the student does not exist, else ``ok``.
        """
        if self.repos.students.get(student_id) is None:
            return WorkflowResult(
                status=ResultStatus.NOT_FOUND,
                message=f"Student {student_id} not found",
            )

        request = ConnectionRequest(
            id=f"connection-{uuid.uuid4().hex[:12]}",
            student_id=student_id,
            teacher_id=teacher_id,
            status=ConnectionStatus.PENDING,
            direction=direction,
            created_at=self.clock(),
        )

        def _append(requests: list[ConnectionRequest]):
            duplicate = next(
                (r for r in requests
                 if r.teacher_id == teacher_id and r.student_id == student_id and r.is_pending),
                None,
            )
            if duplicate is not None:
                return requests, WorkflowResult(
                    status=ResultStatus.DUPLICATE_REQUEST,
                    request=duplicate,
                    message=f"A pending request already links {teacher_id} and {student_id}",
                )
            return requests + [request], WorkflowResult(status=ResultStatus.OK, request=request)

        result = self.repos.connections.update(_append)
        if result.ok:
            logger.info("Created %s request %s", direction.value, request.id)
        return result

    def _respond(
        self,
        request_id: str,
        status: ConnectionStatus,
        on_pending: Callable[[ConnectionRequest], Optional[WorkflowResult]],
    ) -> WorkflowResult:
        """Move a pending request to a terminal status.

        ``on_pending`` runs before the transition is stored and may veto it by
        returning a result.
        """

        def _transition(requests: list[ConnectionRequest]):
            for index, request in enumerate(requests):
                if request.id != request_id:
                    continue
                if not request.is_pending:
                    return requests, WorkflowResult(
                        status=ResultStatus.INVALID_TRANSITION,
                        request=request,
                        message=f"Request {request_id} is already {request.status.value}",
                    )
                veto = on_pending(request)
                if veto is not None:
                    return requests, veto
                updated = request.model_copy(update={
                    "status": status,
                    "responded_at": self.clock(),
                })
                requests[index] = updated
                return requests, WorkflowResult(status=ResultStatus.OK, request=updated)
            return requests, WorkflowResult(
                status=ResultStatus.NOT_FOUND,
                message=f"Request {request_id} not found",
            )

        result = self.repos.connections.update(_transition)
        if result.ok:
            logger.info("Request %s %s", request_id, status.value)
        return result

    def accept(self, request_id: str) -> WorkflowResult:
        """Accept a pending request and link its student to the teacher.

        A student who already has a teacher cannot be claimed; the request
        stays pending and the result is ``invalid_transition``.
        """

        def _link(request: ConnectionRequest) -> Optional[WorkflowResult]:
            teacher = self.repos.teachers.get(request.teacher_id)
            teacher_name = teacher.name if teacher else None

            def _assign(students: list[Student]):
                for index, student in enumerate(students):
                    if student.id != request.student_id:
                        continue
                    # Only a zombie can be claimed; a linked student stays put
                    if not student.is_zombie:
                        return students, WorkflowResult(
                            status=ResultStatus.INVALID_TRANSITION,
                            request=request,
                            message=f"Student {student.id} is already linked to {student.teacher_id}",
                        )
                    students[index] = student.model_copy(update={
                        "teacher_id": request.teacher_id,
                        "teacher_name": teacher_name,
                    })
                    return students, None
                return students, WorkflowResult(
                    status=ResultStatus.NOT_FOUND,
                    request=request,
                    message=f"Student {request.student_id} not found",
                )

            return self.repos.students.update(_assign)

        result = self._respond(request_id, ConnectionStatus.ACCEPTED, _link)
        if result.ok:
            self.rollups.recompute([result.request.teacher_id])
        return result

    def reject(self, request_id: str) -> WorkflowResult:
        """Reject a pending request. The student stays unaffiliated."""
        return self._respond(request_id, ConnectionStatus.REJECTED, lambda request: None)

    def cancel(self, request_id: str) -> WorkflowResult:
        """Delete a request regardless of its status."""

        def _remove(requests: list[ConnectionRequest]):
            remaining = [r for r in requests if r.id != request_id]
            if len(remaining) == len(requests):
                return requests, WorkflowResult(
                    status=ResultStatus.NOT_FOUND,
                    message=f"Request {request_id} not found",
                )
            removed = next(r for r in requests if r.id == request_id)
            return remaining, WorkflowResult(status=ResultStatus.OK, request=removed)

        result = self.repos.connections.update(_remove)
        if result.ok:
            logger.info("Cancelled request %s", request_id)
        return result
