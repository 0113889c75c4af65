"""Property-based tests for teacher rollups and platform statistics.

**Feature: synckaro-admin**
"""

import logging
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from synckaro.core.aggregation import (
    RollupService,
    apply_rollup,
    calculate_win_rate,
    platform_stats,
    rollup,
    round_half_up,
)
from synckaro.db import KeyValueStore, Repositories
from synckaro.models import Student, Teacher, Trade, TradeType

STAMP = datetime(2024, 2, 12, 10, 0, tzinfo=timezone.utc)


def make_teacher(teacher_id: str = "teacher-1") -> Teacher:
    return Teacher(
        id=teacher_id,
        name="Rajesh Kumar",
        email=f"{teacher_id}@example.com",
        mobile="9999999999",
        joined_date=STAMP,
    )


def make_trade(index: int, pnl: float, teacher_id: str = "teacher-1") -> Trade:
    return Trade(
        id=f"trade-{index}",
        teacher_id=teacher_id,
        stock="RELIANCE",
        quantity=10,
        type=TradeType.BUY,
        created_at=STAMP,
        pnl=pnl,
    )


def make_student(index: int, capital: float, teacher_id: str = "teacher-1") -> Student:
    return Student(
        id=f"student-{index}",
        name="Aarav Kumar",
        email=f"aarav{index}@example.com",
        mobile="9876543210",
        teacher_id=teacher_id,
        current_capital=capital,
        joined_date=STAMP,
    )


pnl_values = st.floats(min_value=-100000.0, max_value=100000.0, allow_nan=False, allow_infinity=False)
capital_values = st.floats(min_value=0.0, max_value=10000000.0, allow_nan=False, allow_infinity=False)


class TestWinRate:
    """
    **Feature: synckaro-admin, Property 10: Win Rate Bounds**

    *For any* set of trades, the win rate should be an integer percentage
    of strictly positive trades, and 0 when there are no trades.
    """

    @given(pnls=st.lists(pnl_values, max_size=60))
    @settings(max_examples=100)
    def test_win_rate_in_range(self, pnls: list[float]):
        trades = [make_trade(i, pnl) for i, pnl in enumerate(pnls)]
        win_rate = calculate_win_rate(trades)
        assert isinstance(win_rate, int)
        assert 0 <= win_rate <= 100
        if not trades:
            assert win_rate == 0

    def test_zero_pnl_is_not_a_win(self):
        trades = [make_trade(1, 0.0), make_trade(2, 10.0)]
        assert calculate_win_rate(trades) == 50

    @pytest.mark.parametrize(
        "value,expected",
        [(0.5, 1), (1.5, 2), (2.5, 3), (62.5, 63), (66.67, 67), (33.33, 33), (0.0, 0)],
    )
    def test_round_half_up(self, value: float, expected: int):
        assert round_half_up(value) == expected

    def test_halves_round_up(self):
        # 5 wins of 8 is exactly 62.5%
        trades = [make_trade(i, 1.0 if i < 5 else -1.0) for i in range(8)]
        assert calculate_win_rate(trades) == 63


class TestRollup:
    """
    **Feature: synckaro-admin, Property 11: Rollup Accuracy**

    *For any* students and trades, a teacher's rollup should count only
    records linked to that teacher, with totals rounded to 2 decimals.
    """

    @given(
        own_pnls=st.lists(pnl_values, max_size=30),
        other_pnls=st.lists(pnl_values, max_size=10),
        capitals=st.lists(capital_values, max_size=20),
    )
    @settings(max_examples=100)
    def test_rollup_only_counts_own_records(self, own_pnls, other_pnls, capitals):
        teacher = make_teacher()
        trades = [make_trade(i, pnl) for i, pnl in enumerate(own_pnls)]
        trades += [make_trade(1000 + i, pnl, "teacher-2") for i, pnl in enumerate(other_pnls)]
        students = [make_student(i, c) for i, c in enumerate(capitals)]
        students.append(make_student(999, 123.0, "teacher-2"))

        result = rollup(teacher, students, trades)

        assert result.total_trades == len(own_pnls)
        assert result.total_students == len(capitals)
        assert result.profit_loss == round(sum(own_pnls), 2)
        assert result.total_capital == round(sum(capitals), 2)

    def test_empty_teacher(self):
        result = rollup(make_teacher(), [], [])
        assert result.total_students == 0
        assert result.total_trades == 0
        assert result.profit_loss == 0
        assert result.win_rate == 0

    def test_apply_rollup_returns_copy(self):
        teacher = make_teacher()
        updated = apply_rollup(teacher, [make_student(1, 5000.0)], [make_trade(1, 12.345)])
        assert teacher.total_students == 0
        assert updated.total_students == 1
        assert updated.profit_loss == round(12.345, 2)
        assert updated.win_rate == 100
        assert updated.name == teacher.name


class TestPlatformStats:
    def test_stats_from_rollups(self):
        teachers = [
            make_teacher("teacher-1").model_copy(update={"total_capital": 100.0, "profit_loss": 10.0, "win_rate": 50}),
            make_teacher("teacher-2").model_copy(update={"total_capital": 50.5, "profit_loss": -4.0, "win_rate": 25}),
        ]
        stats = platform_stats(teachers, [make_student(1, 10.0)], [make_trade(1, 1.0)])
        assert stats.total_teachers == 2
        assert stats.total_students == 1
        assert stats.total_trades == 1
        assert stats.total_capital == 150.5
        assert stats.total_profit_loss == 6.0
        assert stats.average_win_rate == 37.5

    def test_no_teachers(self):
        stats = platform_stats([], [], [])
        assert stats.total_teachers == 0
        assert stats.average_win_rate == 0


class TestRollupService:
    """
    **Feature: synckaro-admin, Property 12: Stored Rollups Track Source Data**

    *For any* change to students or trades followed by a recompute, the
    stored teacher rollups and stats snapshot should match the data.
    """

    def test_recompute_persists_teachers_and_stats(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            repos = Repositories.from_store(KeyValueStore(Path(tmpdir) / "test.db"))
            repos.teachers.save_all([make_teacher("teacher-1"), make_teacher("teacher-2")])
            repos.students.save_all([make_student(1, 1000.0), make_student(2, 500.0, "teacher-2")])
            repos.trades.save_all([make_trade(1, 20.0), make_trade(2, -5.0)])

            RollupService(repos).recompute(["teacher-1"])

            first, second = repos.teachers.all()
            assert first.total_students == 1
            assert first.total_capital == 1000.0
            assert first.profit_loss == 15.0
            assert first.win_rate == 50
            # Not named, so untouched
            assert second.total_students == 0

            stats = repos.stats.get()
            assert stats.total_teachers == 2
            assert stats.total_trades == 2

    def test_recompute_all(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            repos = Repositories.from_store(KeyValueStore(Path(tmpdir) / "test.db"))
            repos.teachers.save_all([make_teacher("teacher-1"), make_teacher("teacher-2")])
            repos.students.save_all([make_student(2, 500.0, "teacher-2")])

            teachers = RollupService(repos).recompute()

            assert [t.total_students for t in teachers] == [0, 1]
            assert repos.teachers.all() == teachers

    def test_recompute_nothing(self, caplog):
        with tempfile.TemporaryDirectory() as tmpdir:
            repos = Repositories.from_store(KeyValueStore(Path(tmpdir) / "test.db"))
            repos.teachers.save_all([make_teacher("teacher-1")])
            repos.students.save_all([make_student(1, 1000.0)])

            with caplog.at_level(logging.DEBUG, logger="synckaro.core.aggregation"):
                teachers = RollupService(repos).recompute([])

            assert teachers[0].total_students == 0
            assert "Recomputed rollups for []" in caplog.text
            assert "all teachers" not in caplog.text
