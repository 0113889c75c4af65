"""Typed repositories over the key-value store.

Each repository owns one named collection. Writes always replace the whole
collection; ``update`` is the single read-modify-write funnel and holds a
per-collection lock so that writers inside one process are serialised.
Writers in other processes are not coordinated with.
"""

import threading
from datetime import datetime
from typing import Callable, Generic, Iterable, Optional, TypeVar

from pydantic import ValidationError

from synckaro.db.store import KeyValueStore
from synckaro.errors import StorageError
from synckaro.models import (
    ActivityLog,
    BrokerConfig,
    ConnectionRequest,
    PlatformStats,
    Student,
    Teacher,
    Trade,
)
from synckaro.models.base import Entity

T = TypeVar("T", bound=Entity)
R = TypeVar("R")

TEACHERS_KEY = "teachers"
STUDENTS_KEY = "students"
TRADES_KEY = "trades"
ACTIVITY_LOGS_KEY = "activityLogs"
CONNECTIONS_KEY = "connections"
BROKER_CONFIGS_KEY = "brokerConfigs"
STATS_KEY = "stats"
GENERATED_AT_KEY = "seedDataGeneratedAt"

_locks: dict[tuple[str, str], threading.RLock] = {}
_locks_guard = threading.Lock()


def _collection_lock(store: KeyValueStore, key: str) -> threading.RLock:
    """Get the process-wide lock for one collection of one store."""
    lock_id = (str(store.db_path.resolve()), store.namespace + key)
    with _locks_guard:
        if lock_id not in _locks:
            _locks[lock_id] = threading.RLock()
        return _locks[lock_id]


class CollectionRepository(Generic[T]):
    """Repository for one collection of entities stored as a JSON array."""

    key: str
    model: type[T]

    def __init__(self, store: KeyValueStore):
        self.store = store
        self._lock = _collection_lock(store, self.key)

    def _identity(self, item: T) -> str:
        return getattr(item, "id")

    def all(self) -> list[T]:
        """Get every entity in the collection (empty if the key is missing)."""
        raw = self.store.get(self.key) or []
        try:
            return [self.model.model_validate(item) for item in raw]
        except ValidationError as exc:
            raise StorageError(f"Stored '{self.key}' collection is malformed: {exc}") from exc

    def save_all(self, items: Iterable[T]) -> None:
        """Replace the whole collection."""
        self.store.set(self.key, [item.to_record() for item in items])

    def get(self, item_id: str) -> Optional[T]:
        """Get an entity by ID.

        Returns:
            The entity if found, None otherwise.
        """
        return next((item for item in self.all() if self._identity(item) == item_id), None)

    def update(self, mutator: Callable[[list[T]], tuple[list[T], R]]) -> R:
        """Run a read-modify-write cycle on the collection.

        Args:
            mutator: Receives the current collection and returns the new
                collection plus a result to hand back to the caller.

        Returns:
            The mutator's result.
        """
        with self._lock:
            items, result = mutator(self.all())
            self.save_all(items)
            return result

    def append(self, item: T) -> T:
        """Append one entity to the collection."""
        return self.update(lambda items: (items + [item], item))

    def clear(self) -> None:
        self.store.remove(self.key)


class TeacherRepository(CollectionRepository[Teacher]):
    key = TEACHERS_KEY
    model = Teacher


class StudentRepository(CollectionRepository[Student]):
    key = STUDENTS_KEY
    model = Student

    def for_teacher(self, teacher_id: str) -> list[Student]:
        return [s for s in self.all() if s.teacher_id == teacher_id]

    def zombies(self) -> list[Student]:
        return [s for s in self.all() if s.is_zombie]


class TradeRepository(CollectionRepository[Trade]):
    key = TRADES_KEY
    model = Trade

    def for_teacher(self, teacher_id: str) -> list[Trade]:
        return [t for t in self.all() if t.teacher_id == teacher_id]


class ActivityLogRepository(CollectionRepository[ActivityLog]):
    """Activity logs are append-only; there is no per-record update."""

    key = ACTIVITY_LOGS_KEY
    model = ActivityLog

    def for_teacher(self, teacher_id: str) -> list[ActivityLog]:
        logs = [log for log in self.all() if log.teacher_id == teacher_id]
        return sorted(logs, key=lambda log: log.timestamp, reverse=True)


class ConnectionRepository(CollectionRepository[ConnectionRequest]):
    key = CONNECTIONS_KEY
    model = ConnectionRequest


class BrokerConfigRepository(CollectionRepository[BrokerConfig]):
    """Broker configs are keyed by user ID, one per user."""

    key = BROKER_CONFIGS_KEY
    model = BrokerConfig

    def _identity(self, item: BrokerConfig) -> str:
        return item.user_id

    def get_for_user(self, user_id: str) -> Optional[BrokerConfig]:
        return self.get(user_id)

    def upsert(self, config: BrokerConfig) -> BrokerConfig:
        """Insert or replace the config for ``config.user_id``."""

        def _replace(items: list[BrokerConfig]) -> tuple[list[BrokerConfig], BrokerConfig]:
            for index, existing in enumerate(items):
                if existing.user_id == config.user_id:
                    items[index] = config
                    return items, config
            return items + [config], config

        return self.update(_replace)


class StatsRepository:
    """Platform stats snapshot and seed generation timestamp."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get(self) -> Optional[PlatformStats]:
        raw = self.store.get(STATS_KEY)
        return PlatformStats.model_validate(raw) if raw else None

    def save(self, stats: PlatformStats) -> None:
        self.store.set(STATS_KEY, stats.to_record())

    def generated_at(self) -> Optional[datetime]:
        raw = self.store.get(GENERATED_AT_KEY)
        return datetime.fromisoformat(raw) if raw else None

    def clear(self) -> None:
        self.store.remove(STATS_KEY)
        self.store.remove(GENERATED_AT_KEY)


class Repositories:
    """Bundle of every repository over one store."""

    def __init__(self, store: KeyValueStore):
        self.store = store
        self.teachers = TeacherRepository(store)
        self.students = StudentRepository(store)
        self.trades = TradeRepository(store)
        self.activity_logs = ActivityLogRepository(store)
        self.connections = ConnectionRepository(store)
        self.broker_configs = BrokerConfigRepository(store)
        self.stats = StatsRepository(store)

    @classmethod
    def from_store(cls, store: KeyValueStore) -> "Repositories":
        return cls(store)
