"""Teacher rollups and platform statistics.

The functions here are pure. ``RollupService`` is the one place where
rollups are written back, and every mutation of students or trades goes
through it so stored rollups never drift from their source data.
"""

import logging
import math
from typing import Iterable, Optional

from synckaro.db.repositories import Repositories
from synckaro.models import PlatformStats, Student, Teacher, TeacherRollup, Trade

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def calculate_win_rate(trades: list[Trade]) -> int:
    """Percentage of trades with positive P&L, 0 when there are no trades."""
    if not trades:
        return 0
    wins = sum(1 for trade in trades if (trade.pnl or 0) > 0)
    return round_half_up(wins / len(trades) * 100)


def rollup(
    teacher: Teacher,
    students: Iterable[Student],
    trades: Iterable[Trade],
) -> TeacherRollup:
    """Compute a teacher's rollup from the full student and trade sets.

    Args:
        teacher: Teacher to compute for.
        students: Students to consider; only those linked to the teacher count.
        trades: Trades to consider; only the teacher's own trades count.

    Returns:
        TeacherRollup with currency fields rounded to 2 decimals.
    """
    own_students = [s for s in students if s.teacher_id == teacher.id]
    own_trades = [t for t in trades if t.teacher_id == teacher.id]

    total_capital = sum(s.current_capital or 0 for s in own_students)
    profit_loss = sum(t.pnl or 0 for t in own_trades)

    return TeacherRollup(
        total_students=len(own_students),
        total_capital=round(total_capital, 2),
        profit_loss=round(profit_loss, 2),
        total_trades=len(own_trades),
        win_rate=calculate_win_rate(own_trades),
    )


def apply_rollup(
    teacher: Teacher,
    students: Iterable[Student],
    trades: Iterable[Trade],
) -> Teacher:
    """Return a copy of ``teacher`` with freshly computed rollup fields."""
    metrics = rollup(teacher, students, trades)
    return teacher.model_copy(update=metrics.model_dump())


def platform_stats(
    teachers: list[Teacher],
    students: list[Student],
    trades: list[Trade],
) -> PlatformStats:
    """Aggregate snapshot across every teacher.

    Capital, P&L and win rate come from the teachers' stored rollups, so
    ``teachers`` should already have been passed through ``apply_rollup``.
    """
    average_win_rate = sum(t.win_rate for t in teachers) / (len(teachers) or 1)
    return PlatformStats(
        total_teachers=len(teachers),
        total_students=len(students),
        total_trades=len(trades),
        total_capital=round(sum(t.total_capital for t in teachers), 2),
        total_profit_loss=round(sum(t.profit_loss for t in teachers), 2),
        average_win_rate=round(average_win_rate, 2),
    )


class RollupService:
    """Recomputes and persists teacher rollups and the platform snapshot."""

    def __init__(self, repos: Repositories):
        self.repos = repos

    def recompute(self, teacher_ids: Optional[Iterable[str]] = None) -> list[Teacher]:
        """Recompute rollups from the stored students and trades.

        Args:
            teacher_ids: Teachers to refresh. None refreshes every teacher.

        Returns:
            The full, updated teacher collection.
        """
        students = self.repos.students.all()
        trades = self.repos.trades.all()
        wanted = set(teacher_ids) if teacher_ids is not None else None

        def _refresh(teachers: list[Teacher]) -> tuple[list[Teacher], list[Teacher]]:
            refreshed = [
                apply_rollup(t, students, trades) if wanted is None or t.id in wanted else t
                for t in teachers
            ]
            return refreshed, refreshed

        teachers = self.repos.teachers.update(_refresh)
        self.repos.stats.save(platform_stats(teachers, students, trades))
        logger.debug("Recomputed rollups for %s", sorted(wanted) if wanted is not None else "all teachers")
        return teachers
