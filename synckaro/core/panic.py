"""Panic button: force-close every open trade of a teacher and its students."""

import logging
from typing import Callable

from synckaro.core.session import Session
from synckaro.db.repositories import Repositories
from synckaro.models import Trade, TradeStatus

logger = logging.getLogger(__name__)


class PanicHandler:
    """Bulk-closes open trades in a single pass over the trade collection."""

    def __init__(self, repos: Repositories):
        self.repos = repos

    def close_all_trades(self, teacher_id: str) -> int:
        """Mark every pending or executed trade of the teacher as completed.

        A trade is in scope if the teacher owns it or it was placed for one
        of the teacher's students. Completed, failed and cancelled trades are
        left alone, so a second call with no new trades returns 0.

        Args:
            teacher_id: Teacher whose trades to close.

        Returns:
            Number of trades transitioned.
        """
        student_ids = {s.id for s in self.repos.students.for_teacher(teacher_id)}

        def _in_scope(trade: Trade) -> bool:
            owned = trade.teacher_id == teacher_id or (
                trade.student_id is not None and trade.student_id in student_ids
            )
            return owned and trade.is_open

        def _close(trades: list[Trade]) -> tuple[list[Trade], int]:
            closed = 0
            updated = []
            for trade in trades:
                if _in_scope(trade):
                    trade = trade.model_copy(update={"status": TradeStatus.COMPLETED})
                    closed += 1
                updated.append(trade)
            return updated, closed

        closed = self.repos.trades.update(_close)
        logger.info("Panic close for %s: %d trades completed", teacher_id, closed)
        return closed


def get_panic_handler(session: Session, handler: PanicHandler) -> Callable[[], int]:
    """Bind the panic button to the signed-in user.

    Returns:
        A callable that closes the user's trades, or returns 0 when nobody
        is signed in.
    """
    user = session.current_user()
    teacher_id = user.id if user else ""

    def _panic() -> int:
        if not teacher_id:
            return 0
        return handler.close_all_trades(teacher_id)

    return _panic
