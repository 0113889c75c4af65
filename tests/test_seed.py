"""Property-based tests for seed generation and loading.

**Feature: synckaro-admin**
"""

import json
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from synckaro.core.aggregation import rollup
from synckaro.core.seed import SEED_KEYS, SeedGenerator, SeedLoader, SeedParameters, to_slug
from synckaro.db import KeyValueStore, Repositories
from synckaro.models import ConnectionDirection, ConnectionStatus

FIXED_NOW = datetime(2024, 6, 3, 10, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


@pytest.fixture
def seed_data():
    return SeedGenerator(clock=fixed_clock).generate()


@pytest.fixture
def repos():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Repositories.from_store(KeyValueStore(Path(tmpdir) / "test.db"))


class TestSeedCounts:
    def test_collection_sizes(self, seed_data):
        assert len(seed_data.teachers) == 12
        # 92 linked students plus 15 zombies
        assert len(seed_data.students) == 107
        assert len(seed_data.trades) == 272
        assert len(seed_data.activity_logs) == 12 * 11
        assert len(seed_data.connection_requests) == 10
        assert len(seed_data.broker_configs) == 5

    def test_lead_teacher(self, seed_data):
        lead = seed_data.teachers[0]
        assert lead.id == "teacher-1"
        assert lead.mobile == "9999999999"
        assert lead.phone == "+91-99999-99999"
        assert lead.status.value == "active"
        assert lead.total_students == 8
        assert lead.total_trades == 24
        # Two of every three trades are winners
        assert lead.win_rate == 67

    def test_teacher_fields(self, seed_data):
        second = seed_data.teachers[1]
        assert second.email == "priya.sharma@synckaro.com"
        assert second.mobile == str(9100000000 + 137)
        assert second.joined_date - seed_data.teachers[0].joined_date == timedelta(days=18)

    def test_student_capital_floor(self, seed_data):
        for student in seed_data.students:
            if not student.is_zombie:
                assert student.current_capital >= 45000
                assert student.profit_loss == round(student.current_capital - student.initial_capital, 2)

    def test_zombies(self, seed_data):
        zombies = [s for s in seed_data.students if s.is_zombie]
        assert [z.id for z in zombies] == [f"student-zombie-{1000 + i}" for i in range(15)]
        assert all(z.teacher_id == "" for z in zombies)

    def test_slug(self):
        assert to_slug("Rajesh Kumar") == "rajesh.kumar"
        assert to_slug("  Anjali  Gupta ") == "anjali.gupta"


class TestSeedDeterminism:
    """
    **Feature: synckaro-admin, Property 7: Seed Determinism**

    *For any* two generators built from the same parameters, teachers,
    students, trades and activity logs should serialise identically,
    regardless of the clock.
    """

    def test_same_parameters_same_output(self):
        later = FIXED_NOW + timedelta(days=40)
        first = SeedGenerator(clock=fixed_clock).generate().to_records()
        second = SeedGenerator(clock=lambda: later).generate().to_records()
        for key in ["teachers", "students", "trades", "activityLogs"]:
            assert json.dumps(first[key]) == json.dumps(second[key])

    def test_clock_relative_parts(self, seed_data):
        assert seed_data.generated_at == FIXED_NOW
        for request in seed_data.connection_requests:
            assert request.created_at <= FIXED_NOW
            assert FIXED_NOW - request.created_at < timedelta(days=7)
        assert all(c.last_checked <= FIXED_NOW for c in seed_data.broker_configs)


class TestSeedIntegrity:
    """
    **Feature: synckaro-admin, Property 8: Referential Integrity**

    *For any* teacher count, every linked student and trade should reference
    an existing teacher, every trade's student should belong to the same
    teacher, and stored rollups should match a fresh recomputation.
    """

    @given(teacher_count=st.integers(min_value=1, max_value=30))
    @settings(max_examples=15, deadline=None)
    def test_references_resolve(self, teacher_count: int):
        data = SeedGenerator(SeedParameters(teacher_count=teacher_count), fixed_clock).generate()
        teacher_ids = {t.id for t in data.teachers}
        students = {s.id: s for s in data.students}

        assert len(teacher_ids) == teacher_count
        assert len({t.email for t in data.teachers}) == teacher_count
        assert len(students) == len(data.students)

        for student in data.students:
            assert student.is_zombie or student.teacher_id in teacher_ids
        for trade in data.trades:
            assert trade.teacher_id in teacher_ids
            if trade.student_id is not None:
                assert students[trade.student_id].teacher_id == trade.teacher_id
        for log in data.activity_logs:
            assert log.teacher_id in teacher_ids

    def test_rollups_match_recomputation(self, seed_data):
        for teacher in seed_data.teachers:
            expected = rollup(teacher, seed_data.students, seed_data.trades)
            assert teacher.total_students == expected.total_students
            assert teacher.total_trades == expected.total_trades
            assert teacher.total_capital == expected.total_capital
            assert teacher.profit_loss == expected.profit_loss
            assert teacher.win_rate == expected.win_rate

    def test_platform_stats(self, seed_data):
        stats = seed_data.stats
        assert stats.total_teachers == 12
        assert stats.total_students == 107
        assert stats.total_trades == 272
        assert stats.total_capital == round(sum(t.total_capital for t in seed_data.teachers), 2)

    def test_logs_newest_first(self, seed_data):
        stamps = [log.timestamp for log in seed_data.activity_logs]
        assert stamps == sorted(stamps, reverse=True)

    def test_connection_requests(self, seed_data):
        zombie_ids = {s.id for s in seed_data.students if s.is_zombie}
        incoming = [r for r in seed_data.connection_requests if r.direction == ConnectionDirection.INCOMING]
        outgoing = [r for r in seed_data.connection_requests if r.direction == ConnectionDirection.OUTGOING]

        assert len(incoming) == 5
        assert len(outgoing) == 5
        assert {r.student_id for r in incoming}.isdisjoint({r.student_id for r in outgoing})
        for request in seed_data.connection_requests:
            assert request.teacher_id == "teacher-1"
            assert request.student_id in zombie_ids
            assert request.status == ConnectionStatus.PENDING
            assert request.direction.value in request.id

    def test_small_zombie_pool(self):
        data = SeedGenerator(SeedParameters(zombie_count=3), fixed_clock).generate()
        directions = [r.direction for r in data.connection_requests]
        assert directions == [ConnectionDirection.INCOMING] * 3


class TestSeedLoader:
    """
    **Feature: synckaro-admin, Property 9: Seed Load Guard**

    *For any* store that already holds teachers, loading should leave the
    primary collections untouched and only top up the connection pool.
    """

    def test_load_writes_every_key(self, repos: Repositories):
        loader = SeedLoader(repos, SeedGenerator(clock=fixed_clock))
        assert loader.load() is True
        for key in SEED_KEYS:
            assert repos.store.get(key) is not None, f"{key} was not written"
        assert repos.stats.generated_at() == FIXED_NOW

    def test_second_load_is_noop(self, repos: Repositories):
        loader = SeedLoader(repos, SeedGenerator(clock=fixed_clock))
        loader.load()
        before = repos.store.get("teachers")

        assert loader.load() is False
        assert repos.store.get("teachers") == before
        assert len(repos.connections.all()) == 10

    def test_existing_teachers_are_never_overwritten(self, repos: Repositories):
        repos.store.set("teachers", [{
            "id": "teacher-x",
            "name": "Existing",
            "email": "x@example.com",
            "mobile": "9000000000",
            "joinedDate": "2023-01-01T00:00:00+00:00",
        }])
        loader = SeedLoader(repos, SeedGenerator(clock=fixed_clock))

        assert loader.load() is False
        assert [t.id for t in repos.teachers.all()] == ["teacher-x"]
        # The pool is topped up against the existing teacher
        assert {r.teacher_id for r in repos.connections.all()} == {"teacher-x"}

    def test_top_up_connections(self, repos: Repositories):
        loader = SeedLoader(repos, SeedGenerator(clock=fixed_clock))
        loader.load()
        repos.connections.clear()

        assert loader.ensure_connection_pool() is True
        assert len(repos.connections.all()) == 10
        assert loader.ensure_connection_pool() is False

    def test_top_up_zombies(self, repos: Repositories):
        loader = SeedLoader(repos, SeedGenerator(clock=fixed_clock))
        loader.load()
        repos.students.update(lambda students: ([s for s in students if not s.is_zombie], None))
        repos.connections.clear()

        loader.load()

        assert len(repos.students.zombies()) == 15
        assert len(repos.connections.all()) == 10

    def test_clear_and_regenerate(self, repos: Repositories):
        loader = SeedLoader(repos, SeedGenerator(clock=fixed_clock))
        loader.load()
        repos.store.set("auth", {"isAuthenticated": True})

        loader.clear()
        for key in SEED_KEYS:
            assert repos.store.get(key) is None
        assert repos.store.get("auth") is not None

        assert loader.regenerate() is True
        assert len(repos.teachers.all()) == 12
