"""Manual trade entry, trade history and teacher broker settings."""

import logging
import uuid
from typing import Optional

from synckaro.core.aggregation import RollupService
from synckaro.core.clock import Clock, utc_now
from synckaro.db.repositories import Repositories
from synckaro.models import (
    ActivityAction,
    ActivityLog,
    BrokerConfig,
    Exchange,
    Trade,
    TradeStatus,
    TradeType,
)

logger = logging.getLogger(__name__)


class TradeService:
    """Records simulated trades placed by a teacher.

    Trades are facts, not executions: a new trade is stored ``pending`` with
    zero P&L and only changes state through the panic handler.
    """

    def __init__(
        self,
        repos: Repositories,
        rollups: Optional[RollupService] = None,
        clock: Clock = utc_now,
    ):
        self.repos = repos
        self.rollups = rollups or RollupService(repos)
        self.clock = clock

    def create(
        self,
        teacher_id: str,
        stock: str,
        quantity: int,
        trade_type: TradeType = TradeType.BUY,
        exchange: Exchange = Exchange.NSE,
        price: Optional[float] = None,
        student_id: Optional[str] = None,
        teacher_name: Optional[str] = None,
    ) -> Trade:
        """Record a new pending trade.

        Args:
            teacher_id: Teacher placing the trade.
            stock: Trading symbol (upper-cased).
            quantity: Number of shares.
            trade_type: BUY or SELL.
            exchange: NSE or BSE.
            price: Limit price, None for market.
            student_id: Student the trade is for, if any.
            teacher_name: Display name; looked up when omitted.

        Returns:
            The stored trade.

        Raises:
            pydantic.ValidationError: If quantity or price are invalid.
        """
        now = self.clock()
        if teacher_name is None:
            teacher = self.repos.teachers.get(teacher_id)
            teacher_name = teacher.name if teacher else None
        student = self.repos.students.get(student_id) if student_id else None

        trade = Trade(
            id=f"trade-{uuid.uuid4().hex[:12]}",
            teacher_id=teacher_id,
            teacher_name=teacher_name,
            student_id=student_id,
            student_name=student.name if student else None,
            stock=stock.strip().upper(),
            quantity=quantity,
            price=price,
            type=trade_type,
            exchange=exchange,
            status=TradeStatus.PENDING,
            created_at=now,
            timestamp=now,
            pnl=0.0,
        )
        self.repos.trades.append(trade)
        self.repos.activity_logs.append(ActivityLog(
            id=f"log-{uuid.uuid4().hex[:12]}",
            teacher_id=teacher_id,
            action=ActivityAction.TRADE_EXECUTED,
            timestamp=now,
            details=(
                f"{trade.type.value} {trade.quantity} {trade.stock} "
                f"@ ₹{(trade.price or 0):.2f} ({trade.status.value})"
            ),
        ))
        self.rollups.recompute([teacher_id])
        logger.info("Recorded %s %d %s for %s", trade.type.value, quantity, trade.stock, teacher_id)
        return trade

    def history(
        self,
        teacher_id: str,
        status: Optional[TradeStatus] = None,
    ) -> list[Trade]:
        """The teacher's trades, newest first, optionally by status."""
        trades = self.repos.trades.for_teacher(teacher_id)
        if status is not None:
            trades = [t for t in trades if t.status == status]
        return sorted(trades, key=lambda t: t.occurred_at, reverse=True)

    # ==================== Broker configs ====================

    def broker_config(self, user_id: str) -> Optional[BrokerConfig]:
        return self.repos.broker_configs.get_for_user(user_id)

    def save_broker_config(
        self,
        user_id: str,
        broker_provider: str,
        api_key: str,
        api_secret: str,
        access_token: Optional[str] = None,
        is_connected: bool = False,
    ) -> BrokerConfig:
        """Create or replace the broker config for a user."""
        config = BrokerConfig(
            user_id=user_id,
            broker_provider=broker_provider,
            api_key=api_key,
            api_secret=api_secret,
            access_token=access_token or None,
            is_connected=is_connected,
            last_checked=self.clock(),
        )
        return self.repos.broker_configs.upsert(config)
