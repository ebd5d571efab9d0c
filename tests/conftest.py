from datetime import datetime

import pytest

from services.conversation_service import ConversationService
from services.database_service import WorkoutDatabase
from services.session_registry import SessionRegistry

USER_ID = 1001
OTHER_USER_ID = 2002
NOW = datetime(2024, 7, 22, 18, 30, 0)


class FakeClock:
    """A settable stand-in for datetime.now."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FakeTimer:
    """A settable monotonic timer for the session cache."""

    def __init__(self):
        self.value = 0.0

    def __call__(self) -> float:
        return self.value


@pytest.fixture
def db():
    database = WorkoutDatabase(":memory:")
    yield database
    database.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sessions():
    return SessionRegistry()


@pytest.fixture
def conversation(db, sessions, clock):
    return ConversationService(db, sessions, clock=clock)


@pytest.fixture
def registered(conversation):
    conversation.register_user(USER_ID, "lifter", "Ivan")
    return USER_ID


def exercise_id(db: WorkoutDatabase, name: str) -> int:
    return next(exercise.id for exercise in db.list_exercises() if exercise.name == name)


def count_rows(db: WorkoutDatabase, table: str) -> int:
    return db.conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
