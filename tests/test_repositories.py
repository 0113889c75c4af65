"""Tests for the typed repositories and the stored record shape.

**Feature: synckaro-admin**
"""

import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path

import pytest

from synckaro.db import KeyValueStore, Repositories
from synckaro.errors import StorageError
from synckaro.models import (
    BrokerConfig,
    ConnectionDirection,
    ConnectionRequest,
    Student,
    Teacher,
)

JOINED = datetime(2024, 1, 4, 9, 15, tzinfo=timezone.utc)


@pytest.fixture
def repos():
    """Repositories over a temporary database."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Repositories.from_store(KeyValueStore(Path(tmpdir) / "test.db"))


def make_student(student_id: str, teacher_id: str = "teacher-1") -> Student:
    return Student(
        id=student_id,
        name=f"Student {student_id}",
        email=f"{student_id}@example.com",
        mobile="9876543210",
        teacher_id=teacher_id,
        initial_capital=100000,
        current_capital=100000,
        joined_date=JOINED,
    )


class TestRecordShape:
    """
    **Feature: synckaro-admin, Property 5: Stored Record Shape**

    *For any* entity written to the store, fields should be stored in
    camelCase and read back into an equal model.
    """

    def test_camel_case_keys(self, repos: Repositories):
        repos.students.save_all([make_student("student-1")])
        raw = repos.store.get("students")[0]
        assert raw["teacherId"] == "teacher-1"
        assert raw["initialCapital"] == 100000
        assert "teacher_id" not in raw

    def test_none_fields_are_omitted(self, repos: Repositories):
        repos.students.save_all([make_student("student-1")])
        assert "teacherName" not in repos.store.get("students")[0]

    def test_read_back_equals_written(self, repos: Repositories):
        student = make_student("student-1")
        repos.students.save_all([student])
        assert repos.students.all() == [student]

    def test_zombie_has_empty_teacher_id(self, repos: Repositories):
        repos.students.save_all([make_student("student-zombie-1000", teacher_id="")])
        raw = repos.store.get("students")[0]
        assert raw["teacherId"] == ""
        assert repos.students.zombies()[0].is_zombie


class TestLegacyConnectionDirection:
    """
    **Feature: synckaro-admin, Property 6: Legacy Direction Inference**

    *For any* stored request without a direction, the direction should be
    incoming when its ID contains "incoming" and outgoing otherwise.
    """

    @pytest.mark.parametrize(
        "request_id,expected",
        [
            ("connection-incoming-1", ConnectionDirection.INCOMING),
            ("connection-outgoing-6", ConnectionDirection.OUTGOING),
            ("connection-abc123", ConnectionDirection.OUTGOING),
        ],
    )
    def test_direction_inferred_from_id(self, request_id, expected):
        request = ConnectionRequest.model_validate({
            "id": request_id,
            "studentId": "student-zombie-1000",
            "teacherId": "teacher-1",
            "status": "pending",
            "createdAt": "2024-06-01T10:00:00+00:00",
        })
        assert request.direction == expected

    def test_explicit_direction_wins(self):
        request = ConnectionRequest.model_validate({
            "id": "connection-incoming-1",
            "studentId": "student-zombie-1000",
            "teacherId": "teacher-1",
            "direction": "outgoing",
            "createdAt": "2024-06-01T10:00:00+00:00",
        })
        assert request.direction == ConnectionDirection.OUTGOING


class TestCollectionRepository:
    def test_missing_collection_is_empty(self, repos: Repositories):
        assert repos.teachers.all() == []
        assert repos.teachers.get("teacher-1") is None

    def test_get_by_id(self, repos: Repositories):
        repos.students.save_all([make_student("student-1"), make_student("student-2")])
        assert repos.students.get("student-2").id == "student-2"

    def test_append(self, repos: Repositories):
        repos.students.append(make_student("student-1"))
        repos.students.append(make_student("student-2"))
        assert [s.id for s in repos.students.all()] == ["student-1", "student-2"]

    def test_update_returns_mutator_result(self, repos: Repositories):
        repos.students.save_all([make_student("student-1")])
        result = repos.students.update(lambda items: (items[:0], len(items)))
        assert result == 1
        assert repos.students.all() == []

    def test_for_teacher_filters(self, repos: Repositories):
        repos.students.save_all([
            make_student("student-1", "teacher-1"),
            make_student("student-2", "teacher-2"),
        ])
        assert [s.id for s in repos.students.for_teacher("teacher-2")] == ["student-2"]

    def test_malformed_collection_raises_storage_error(self, repos: Repositories):
        repos.store.set("teachers", [{"id": "teacher-1"}])
        with pytest.raises(StorageError):
            repos.teachers.all()

    def test_concurrent_appends_are_not_lost(self, repos: Repositories):
        def _add(start: int) -> None:
            for offset in range(10):
                repos.students.append(make_student(f"student-{start + offset}"))

        threads = [threading.Thread(target=_add, args=(n * 100,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(repos.students.all()) == 40


class TestBrokerConfigRepository:
    def _config(self, user_id: str, provider: str) -> BrokerConfig:
        return BrokerConfig(
            user_id=user_id,
            broker_provider=provider,
            api_key="key",
            api_secret="secret",
        )

    def test_upsert_inserts_then_replaces(self, repos: Repositories):
        repos.broker_configs.upsert(self._config("teacher-1", "Zerodha"))
        repos.broker_configs.upsert(self._config("teacher-1", "Upstox"))
        configs = repos.broker_configs.all()
        assert len(configs) == 1
        assert repos.broker_configs.get_for_user("teacher-1").broker_provider == "Upstox"

    def test_keyed_by_user(self, repos: Repositories):
        repos.broker_configs.upsert(self._config("teacher-1", "Zerodha"))
        repos.broker_configs.upsert(self._config("student-1", "Upstox"))
        assert repos.broker_configs.get_for_user("student-1").broker_provider == "Upstox"
        assert repos.broker_configs.get_for_user("student-9") is None


class TestTeacherModel:
    def test_win_rate_bounds(self):
        with pytest.raises(ValueError):
            Teacher(
                id="teacher-1",
                name="Rajesh Kumar",
                email="rajesh@example.com",
                mobile="9999999999",
                win_rate=101,
                joined_date=JOINED,
            )
