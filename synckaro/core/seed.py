"""Deterministic seed data for an empty store.

Teachers, students, trades and activity logs are a pure function of
``SeedParameters``: two generators built from the same parameters produce
identical records. Connection requests, broker configs and the generation
timestamp are relative to the injected clock.
"""

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, Field

from synckaro.core.aggregation import apply_rollup, platform_stats
from synckaro.core.clock import Clock, utc_now
from synckaro.db.repositories import (
    ACTIVITY_LOGS_KEY,
    BROKER_CONFIGS_KEY,
    CONNECTIONS_KEY,
    GENERATED_AT_KEY,
    STATS_KEY,
    STUDENTS_KEY,
    TEACHERS_KEY,
    TRADES_KEY,
    Repositories,
)
from synckaro.models import (
    ActivityAction,
    ActivityLog,
    BrokerConfig,
    ConnectionDirection,
    ConnectionRequest,
    ConnectionStatus,
    Exchange,
    PlatformStats,
    Student,
    StudentStatus,
    Teacher,
    TeacherStatus,
    Trade,
    TradeStatus,
    TradeType,
)

logger = logging.getLogger(__name__)

SEED_KEYS = [
    TEACHERS_KEY,
    STUDENTS_KEY,
    TRADES_KEY,
    ACTIVITY_LOGS_KEY,
    CONNECTIONS_KEY,
    BROKER_CONFIGS_KEY,
    STATS_KEY,
    GENERATED_AT_KEY,
]

DAY = timedelta(days=1)
HOUR = timedelta(hours=1)


class SeedParameters(BaseModel):
    """Every input the generator depends on."""

    teacher_names: list[str] = [
        "Rajesh Kumar", "Priya Sharma", "Amit Patel", "Neha Singh",
        "Vikram Mehta", "Anjali Gupta", "Sanjay Reddy", "Kavita Joshi",
        "Arjun Nair", "Pooja Desai", "Rahul Verma", "Deepika Rao",
    ]
    teacher_count: Optional[int] = Field(
        default=None, ge=1, description="Teachers to generate; defaults to one per name"
    )
    specializations: list[str] = [
        "Intraday Trading", "Swing Trading", "Options Strategies", "Futures & Hedging",
        "Technical Analysis", "Fundamental Insights", "Momentum Trading", "Position Building",
    ]
    teacher_statuses: list[TeacherStatus] = [
        TeacherStatus.ACTIVE, TeacherStatus.LIVE, TeacherStatus.OPEN,
        TeacherStatus.INACTIVE, TeacherStatus.TEST, TeacherStatus.CLOSE,
    ]
    student_first_names: list[str] = [
        "Aarav", "Vivaan", "Aditya", "Vihaan", "Arjun", "Sai", "Arnav", "Ayaan",
        "Krishna", "Ishaan", "Shaurya", "Atharv", "Advik", "Pratham", "Reyansh",
        "Kiaan", "Ananya", "Pari", "Navya", "Aanya",
    ]
    student_last_names: list[str] = [
        "Kumar", "Sharma", "Patel", "Singh", "Gupta", "Reddy", "Joshi", "Nair",
        "Verma", "Rao", "Shah", "Iyer", "Mehta", "Desai", "Kulkarni", "Pandey",
        "Agarwal", "Saxena", "Menon", "Khanna",
    ]
    strategies: list[str] = ["Conservative", "Moderate", "Aggressive", "Momentum", "Swing"]
    brokers: list[str] = ["Zerodha", "Upstox", "Angel One", "ICICI Direct", "5Paisa"]
    stocks: list[str] = [
        "RELIANCE", "TCS", "HDFCBANK", "INFY", "ICICIBANK", "HINDUNILVR", "ITC",
        "SBIN", "BHARTIARTL", "KOTAKBANK", "LT", "AXISBANK", "ASIANPAINT", "MARUTI",
        "TITAN", "SUNPHARMA", "ULTRACEMCO", "NESTLEIND", "BAJFINANCE", "WIPRO",
    ]
    exchanges: list[Exchange] = [Exchange.NSE, Exchange.BSE]
    trade_statuses: list[TradeStatus] = [
        TradeStatus.EXECUTED, TradeStatus.COMPLETED, TradeStatus.PENDING,
        TradeStatus.FAILED, TradeStatus.CANCELLED,
    ]
    base_teacher_join: datetime = datetime(2023, 1, 9, 9, 30, tzinfo=timezone.utc)
    base_student_join: datetime = datetime(2024, 1, 4, 9, 15, tzinfo=timezone.utc)
    base_trade_time: datetime = datetime(2024, 2, 12, 10, 0, tzinfo=timezone.utc)
    email_domain: str = "synckaro.com"

    # The first teacher is the demo login account and gets a fixed roster
    lead_mobile: str = "9999999999"
    lead_student_count: int = Field(default=8, ge=1)
    lead_trade_count: int = Field(default=24, ge=0)

    student_capital_floor: float = 45000.0
    zombie_count: int = Field(default=15, ge=0)
    zombie_id_start: int = 1000
    zombie_capital_floor: float = 50000.0
    connection_requests_per_direction: int = Field(default=5, ge=0)
    broker_student_count: int = Field(default=4, ge=0)

    @property
    def total_teachers(self) -> int:
        return self.teacher_count or len(self.teacher_names)


class SeedData(BaseModel):
    """A complete generated dataset."""

    teachers: list[Teacher]
    students: list[Student]
    trades: list[Trade]
    activity_logs: list[ActivityLog]
    connection_requests: list[ConnectionRequest]
    broker_configs: list[BrokerConfig]
    stats: PlatformStats
    generated_at: datetime

    def to_records(self) -> dict:
        """Map every collection to its store key, ready for a batch write."""
        return {
            TEACHERS_KEY: [t.to_record() for t in self.teachers],
            STUDENTS_KEY: [s.to_record() for s in self.students],
            TRADES_KEY: [t.to_record() for t in self.trades],
            ACTIVITY_LOGS_KEY: [log.to_record() for log in self.activity_logs],
            CONNECTIONS_KEY: [r.to_record() for r in self.connection_requests],
            BROKER_CONFIGS_KEY: [c.to_record() for c in self.broker_configs],
            STATS_KEY: self.stats.to_record(),
            GENERATED_AT_KEY: self.generated_at.isoformat(),
        }


def to_slug(value: str) -> str:
    """Lower-case a name and join its alphanumeric runs with dots."""
    return re.sub(r"[^a-z0-9]+", ".", value.lower()).strip(".")


def teacher_mobile(index: int) -> str:
    return str(9100000000 + index * 137)


def student_mobile(index: int) -> str:
    return str(9200000000 + index * 97)


class SeedGenerator:
    """Builds a fully cross-referenced dataset."""

    def __init__(self, params: Optional[SeedParameters] = None, clock: Clock = utc_now):
        self.params = params or SeedParameters()
        self.clock = clock

    # ==================== Teachers ====================

    def create_teachers(self) -> list[Teacher]:
        p = self.params
        teachers = []
        for index in range(p.total_teachers):
            name = p.teacher_names[index % len(p.teacher_names)]
            # Names repeat once the pool is exhausted; keep emails unique
            suffix = str(index + 1) if index >= len(p.teacher_names) else ""
            mobile = p.lead_mobile if index == 0 else teacher_mobile(index)
            status = (
                TeacherStatus.ACTIVE
                if index == 0
                else p.teacher_statuses[index % len(p.teacher_statuses)]
            )
            teachers.append(Teacher(
                id=f"teacher-{index + 1}",
                name=name,
                email=f"{to_slug(name)}{suffix}@{p.email_domain}",
                mobile=mobile,
                phone=f"+91-{mobile[:5]}-{mobile[5:]}",
                status=status,
                specialization=p.specializations[index % len(p.specializations)],
                joined_date=p.base_teacher_join + index * 18 * DAY,
            ))
        return teachers

    # ==================== Students ====================

    def create_students(self, teachers: list[Teacher]) -> dict[str, list[Student]]:
        """Generate each teacher's students.

        Returns:
            Mapping of teacher ID to that teacher's students, in teacher order.
        """
        p = self.params
        by_teacher: dict[str, list[Student]] = {}
        counter = 1

        for t_index, teacher in enumerate(teachers):
            allocation = p.lead_student_count if t_index == 0 else 6 + (t_index % 4)
            roster = []
            for idx in range(allocation):
                first = p.student_first_names[(counter + idx + t_index) % len(p.student_first_names)]
                last = p.student_last_names[(t_index + idx) % len(p.student_last_names)]
                initial = 80000 + ((t_index * 3 + idx * 5) % 10) * 15000
                offset = ((t_index + idx) % 5) - 2
                current = max(p.student_capital_floor, initial + offset * 12000)
                roster.append(Student(
                    id=f"student-{counter}",
                    name=f"{first} {last}",
                    email=f"{first.lower()}.{last.lower()}{counter}@{p.email_domain}",
                    mobile=student_mobile(counter),
                    teacher_id=teacher.id,
                    teacher_name=teacher.name,
                    status=StudentStatus.INACTIVE if idx % 7 == 0 else StudentStatus.ACTIVE,
                    initial_capital=initial,
                    current_capital=current,
                    profit_loss=round(current - initial, 2),
                    risk_percentage=2 + ((t_index + idx) % 4),
                    strategy=p.strategies[(t_index + idx) % len(p.strategies)],
                    joined_date=p.base_student_join + (counter + idx) * 7 * DAY,
                ))
                counter += 1
            by_teacher[teacher.id] = roster
        return by_teacher

    def create_zombie_students(self, count: Optional[int] = None) -> list[Student]:
        """Generate students with no owning teacher."""
        p = self.params
        count = p.zombie_count if count is None else count
        zombies = []
        for idx in range(count):
            number = p.zombie_id_start + idx
            first = p.student_first_names[number % len(p.student_first_names)]
            last = p.student_last_names[idx % len(p.student_last_names)]
            initial = 60000 + idx * 15000
            current = max(p.zombie_capital_floor, initial + ((idx % 3) - 1) * 8000)
            zombies.append(Student(
                id=f"student-zombie-{number}",
                name=f"{first} {last}",
                email=f"{first.lower()}.{last.lower()}.zombie{number}@{p.email_domain}",
                mobile=student_mobile(number),
                teacher_id="",
                status=StudentStatus.INACTIVE if idx % 5 == 0 else StudentStatus.ACTIVE,
                initial_capital=initial,
                current_capital=current,
                profit_loss=round(current - initial, 2),
                risk_percentage=3 + (idx % 3),
                strategy=p.strategies[idx % len(p.strategies)],
                joined_date=p.base_student_join + number * 7 * DAY,
            ))
        return zombies

    # ==================== Trades ====================

    def create_trades(
        self,
        teachers: list[Teacher],
        students_by_teacher: dict[str, list[Student]],
    ) -> dict[str, list[Trade]]:
        """Generate each teacher's trades, assigned round-robin to its students."""
        p = self.params
        by_teacher: dict[str, list[Trade]] = {}
        counter = 1

        for t_index, teacher in enumerate(teachers):
            roster = students_by_teacher.get(teacher.id, [])
            trade_count = p.lead_trade_count if t_index == 0 else 16 + (t_index % 4) * 4
            trades = []
            for idx in range(trade_count):
                base_price = 210 + (t_index * 17 + idx * 11) % 480
                timestamp = p.base_trade_time + (t_index * 5 + idx) * 2 * DAY + idx * HOUR
                student = roster[idx % len(roster)] if roster else None
                sign = 1 if idx % 3 == 0 else -1 if idx % 3 == 1 else 0.6
                pnl_seed = sign * (420 + t_index * 35 + idx * 20)
                trades.append(Trade(
                    id=f"trade-{counter}",
                    teacher_id=teacher.id,
                    teacher_name=teacher.name,
                    student_id=student.id if student else None,
                    student_name=student.name if student else None,
                    stock=p.stocks[(t_index * 3 + idx) % len(p.stocks)],
                    quantity=20 + ((t_index + idx) % 6) * 10,
                    price=round(base_price + (idx % 3) * 12.5, 2),
                    type=TradeType.BUY if idx % 2 == 0 else TradeType.SELL,
                    exchange=p.exchanges[(t_index + idx) % len(p.exchanges)],
                    status=p.trade_statuses[(t_index + idx) % len(p.trade_statuses)],
                    executed_at=timestamp,
                    created_at=timestamp,
                    timestamp=timestamp,
                    pnl=round(pnl_seed / 10, 2),
                ))
                counter += 1
            by_teacher[teacher.id] = trades
        return by_teacher

    # ==================== Activity logs ====================

    def create_activity_logs(
        self,
        teachers: list[Teacher],
        students_by_teacher: dict[str, list[Student]],
        trades_by_teacher: dict[str, list[Trade]],
    ) -> list[ActivityLog]:
        """Derive the activity feed, newest first."""
        logs: list[ActivityLog] = []

        def _log(teacher: Teacher, action: ActivityAction, at: datetime, details: str) -> None:
            logs.append(ActivityLog(
                id=f"log-{len(logs) + 1}",
                teacher_id=teacher.id,
                action=action,
                timestamp=at,
                details=details,
            ))

        for teacher in teachers:
            _log(teacher, ActivityAction.PROFILE_CREATED, teacher.joined_date,
                 f"{teacher.name} joined SyncKaro")
            _log(teacher, ActivityAction.PROFILE_UPDATED, teacher.joined_date + 5 * DAY,
                 f"{teacher.name} updated portfolio benchmarks")
            for idx, student in enumerate(students_by_teacher.get(teacher.id, [])[:3]):
                _log(teacher, ActivityAction.STUDENT_ADDED, student.joined_date + idx * HOUR,
                     f"Added student {student.name}")
            for trade in trades_by_teacher.get(teacher.id, [])[:6]:
                _log(
                    teacher,
                    ActivityAction.TRADE_EXECUTED,
                    trade.occurred_at,
                    f"{trade.type.value} {trade.quantity} {trade.stock} "
                    f"@ ₹{(trade.price or 0):.2f} ({trade.status.value})",
                )

        return sorted(logs, key=lambda log: log.timestamp, reverse=True)

    # ==================== Connections & brokers ====================

    def create_connection_requests(
        self,
        teacher: Teacher,
        zombies: list[Student],
    ) -> list[ConnectionRequest]:
        """Pending incoming and outgoing requests between one teacher and the zombie pool.

        The first zombies send incoming requests; the next ones receive
        outgoing requests. Timestamps fall within the last few days.
        """
        now = self.clock()
        per_direction = self.params.connection_requests_per_direction
        requests: list[ConnectionRequest] = []

        incoming = zombies[:per_direction]
        outgoing = zombies[len(incoming):len(incoming) + per_direction]
        batches = [
            (ConnectionDirection.INCOMING, incoming, 2),
            (ConnectionDirection.OUTGOING, outgoing, 3),
        ]
        for direction, batch, hour_step in batches:
            for idx, zombie in enumerate(batch):
                days_ago = len(batch) - idx - 1
                requests.append(ConnectionRequest(
                    id=f"connection-{direction.value}-{len(requests) + 1}",
                    student_id=zombie.id,
                    teacher_id=teacher.id,
                    status=ConnectionStatus.PENDING,
                    direction=direction,
                    created_at=now - days_ago * DAY - idx * hour_step * HOUR,
                ))
        return requests

    def create_broker_configs(self, teacher: Teacher, students: list[Student]) -> list[BrokerConfig]:
        """Broker configs for one teacher and its first few students."""
        now = self.clock()
        stamp = int(now.timestamp() * 1000)
        brokers = self.params.brokers
        configs = [BrokerConfig(
            user_id=teacher.id,
            broker_provider=brokers[0],
            api_key=f"{teacher.id}-api-key-{stamp}",
            api_secret=f"{teacher.id}-api-secret-{stamp}",
            access_token=f"{teacher.id}-token-{stamp}",
            is_connected=True,
            last_checked=now,
        )]
        for idx, student in enumerate(students[:self.params.broker_student_count]):
            configs.append(BrokerConfig(
                user_id=student.id,
                broker_provider=brokers[(idx + 1) % len(brokers)],
                api_key=f"{student.id}-api-key-{stamp}",
                api_secret=f"{student.id}-api-secret-{stamp}",
                access_token=f"{student.id}-token-{stamp}",
                is_connected=idx % 2 == 0,
                last_checked=now - idx * HOUR,
            ))
        return configs

    # ==================== Everything ====================

    def generate(self) -> SeedData:
        """Generate the complete dataset with rollups folded in."""
        teachers = self.create_teachers()
        students_by_teacher = self.create_students(teachers)
        trades_by_teacher = self.create_trades(teachers, students_by_teacher)
        activity_logs = self.create_activity_logs(teachers, students_by_teacher, trades_by_teacher)

        students = [s for roster in students_by_teacher.values() for s in roster]
        trades = [t for batch in trades_by_teacher.values() for t in batch]
        zombies = self.create_zombie_students()

        lead = teachers[0]
        connection_requests = self.create_connection_requests(lead, zombies)
        broker_configs = self.create_broker_configs(lead, students_by_teacher[lead.id])

        teachers = [apply_rollup(t, students, trades) for t in teachers]
        all_students = students + zombies

        return SeedData(
            teachers=teachers,
            students=all_students,
            trades=trades,
            activity_logs=activity_logs,
            connection_requests=connection_requests,
            broker_configs=broker_configs,
            stats=platform_stats(teachers, all_students, trades),
            generated_at=self.clock(),
        )


class SeedLoader:
    """Seeds an empty store and tops up the connection pool afterwards."""

    def __init__(self, repos: Repositories, generator: Optional[SeedGenerator] = None):
        self.repos = repos
        self.generator = generator or SeedGenerator()

    def load(self) -> bool:
        """Seed the store if it holds no teachers.

        Returns:
            True if a fresh dataset was written, False if data already existed.
        """
        if self.repos.teachers.all():
            logger.info("Seed data already exists")
            self.ensure_connection_pool()
            return False

        logger.info("Generating seed data")
        data = self.generator.generate()
        self.repos.store.set_many(data.to_records())
        logger.info(
            "Seed data loaded: %d teachers, %d students, %d trades, %d activity logs",
            len(data.teachers),
            len(data.students),
            len(data.trades),
            len(data.activity_logs),
        )
        return True

    def ensure_connection_pool(self) -> bool:
        """Add zombie students and connection requests when none exist.

        Returns:
            True if anything was written.
        """
        wrote = False
        zombies = self.repos.students.zombies()
        if not zombies:
            fresh = self.generator.create_zombie_students()

            def _add(students: list[Student]) -> tuple[list[Student], list[Student]]:
                taken = {s.id for s in students}
                added = [z for z in fresh if z.id not in taken]
                return students + added, added

            zombies = self.repos.students.update(_add)
            wrote = wrote or bool(zombies)
            logger.info("Topped up zombie pool with %d students", len(zombies))

        if not self.repos.connections.all():
            teachers = self.repos.teachers.all()
            if teachers and zombies:
                requests = self.generator.create_connection_requests(teachers[0], zombies)
                self.repos.connections.save_all(requests)
                wrote = wrote or bool(requests)
                logger.info("Generated %d connection requests for %s", len(requests), teachers[0].id)
        return wrote

    def clear(self) -> None:
        """Remove every seeded collection."""
        for key in SEED_KEYS:
            self.repos.store.remove(key)
        logger.info("Seed data cleared")

    def regenerate(self) -> bool:
        """Clear the store and seed it again."""
        self.clear()
        return self.load()
