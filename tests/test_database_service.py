import sqlite3
from datetime import date, datetime

import pytest

from conftest import count_rows, exercise_id
from services.database_service import SEED_EXERCISES, WorkoutDatabase
from services.errors import DuplicateNameError, PersistenceError, UserNotFoundError

DAY = date(2024, 7, 22)


def at(hour: int, minute: int = 0, day: date = DAY) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute)


@pytest.fixture
def user(db):
    db.create_user(1001, "lifter", "Ivan")
    return db.get_user_id(1001)


@pytest.fixture
def other_user(db):
    db.create_user(2002)
    return db.get_user_id(2002)


class TestUsers:
    def test_create_user_is_idempotent(self, db):
        db.create_user(1001, "lifter", "Ivan")
        db.create_user(1001, "lifter", "Ivan")
        assert count_rows(db, "users") == 1

    def test_lookup_unknown_user(self, db):
        assert db.get_user_id(42) is None

    def test_lookup_known_user(self, db, user):
        assert isinstance(user, int)
        assert db.get_user_id(1001) == user

    def test_require_known_user(self, db, user):
        assert db.require_user_id(1001) == user

    def test_require_unknown_user(self, db):
        with pytest.raises(UserNotFoundError) as excinfo:
            db.require_user_id(42)
        assert excinfo.value.telegram_id == 42


class TestExercises:
    def test_seed_catalog_sorted_by_category_then_name(self, db):
        exercises = db.list_exercises()
        assert len(exercises) == len(SEED_EXERCISES)
        keys = [(e.category, e.name) for e in exercises]
        assert keys == sorted(keys)
        assert "Присед" in [e.name for e in exercises]

    def test_seed_is_not_duplicated_on_restart(self, tmp_path):
        path = str(tmp_path / "workout.db")
        WorkoutDatabase(path).close()
        db = WorkoutDatabase(path)
        assert count_rows(db, "exercises") == len(SEED_EXERCISES)
        db.close()

    def test_exercise_exists_is_case_sensitive(self, db):
        assert db.exercise_exists("Присед")
        assert not db.exercise_exists("присед")
        assert not db.exercise_exists("Присед ")

    def test_create_exercise_returns_id(self, db):
        new_id = db.create_exercise("Выпады", "Ноги")
        assert db.get_exercise(new_id).name == "Выпады"
        assert db.get_exercise(new_id).category == "Ноги"

    def test_duplicate_name_rejected_without_insert(self, db):
        before = count_rows(db, "exercises")
        with pytest.raises(DuplicateNameError):
            db.create_exercise("Присед", "Ноги")
        assert count_rows(db, "exercises") == before

    def test_different_case_is_a_different_name(self, db):
        db.create_exercise("присед", "Ноги")
        assert db.exercise_exists("присед")
        assert db.exercise_exists("Присед")

    def test_get_unknown_exercise(self, db):
        assert db.get_exercise(9999) is None


class TestSets:
    def test_record_set_stores_values(self, db, user):
        squat = exercise_id(db, "Присед")
        set_id = db.record_set(user, squat, 80.0, 10, created_at=at(18, 5))
        stored = db.conn.execute(
            "SELECT weight, reps, set_number, created_at FROM workouts WHERE id = ?", (set_id,)
        ).fetchone()
        assert tuple(stored) == (80.0, 10, 1, "2024-07-22 18:05:00")

    def test_out_of_range_integer_is_a_persistence_error(self, db, user):
        with pytest.raises(PersistenceError):
            db.record_set(user, exercise_id(db, "Присед"), 80.0, int("9" * 25), created_at=at(18))
        assert count_rows(db, "workouts") == 0

    def test_out_of_range_exercise_id_is_a_persistence_error(self, db):
        with pytest.raises(PersistenceError):
            db.get_exercise(int("9" * 25))

    def test_next_set_number_starts_at_one(self, db, user):
        assert db.next_set_number(user, exercise_id(db, "Присед"), DAY) == 1

    def test_next_set_number_uses_max_of_scope(self, db, user, other_user):
        squat = exercise_id(db, "Присед")
        bench = exercise_id(db, "Жим лежа")
        db.record_set(user, squat, 80, 10, set_number=1, created_at=at(18))
        db.record_set(user, squat, 85, 8, set_number=3, created_at=at(17))
        # other scopes must not count
        db.record_set(user, squat, 90, 5, set_number=7, created_at=at(18, day=date(2024, 7, 21)))
        db.record_set(user, bench, 60, 8, set_number=5, created_at=at(18))
        db.record_set(other_user, squat, 60, 8, set_number=9, created_at=at(18))

        assert db.next_set_number(user, squat, DAY) == 4

    def test_todays_exercises_most_recent_first(self, db, user):
        squat = exercise_id(db, "Присед")
        bench = exercise_id(db, "Жим лежа")
        db.record_set(user, squat, 80, 10, set_number=1, created_at=at(17, 0))
        db.record_set(user, squat, 90, 6, set_number=2, created_at=at(17, 10))
        db.record_set(user, bench, 60, 8, set_number=1, created_at=at(17, 20))
        db.record_set(user, bench, 60, 8, set_number=1, created_at=at(10, day=date(2024, 7, 21)))

        today = db.todays_exercises(user, DAY)

        assert [item.exercise.name for item in today] == ["Жим лежа", "Присед"]
        bench_today, squat_today = today
        assert bench_today.set_count == 1
        assert squat_today.set_count == 2
        assert squat_today.last_weight == 90
        assert squat_today.last_reps == 6

    def test_sets_on_date_ordering(self, db, user):
        squat = exercise_id(db, "Присед")
        bench = exercise_id(db, "Жим лежа")
        db.record_set(user, squat, 80, 10, set_number=2, created_at=at(18))
        db.record_set(user, squat, 70, 10, set_number=1, created_at=at(18))
        db.record_set(user, bench, 60, 8, set_number=1, created_at=at(19))

        records = db.sets_on_date(user, DAY)

        assert [(r.exercise_name, r.set_number) for r in records] == [
            ("Жим лежа", 1),
            ("Присед", 1),
            ("Присед", 2),
        ]

    def test_sets_in_range_is_inclusive(self, db, user):
        squat = exercise_id(db, "Присед")
        for day in (date(2024, 7, 19), date(2024, 7, 20), date(2024, 7, 21), date(2024, 7, 22)):
            db.record_set(user, squat, 80, 10, created_at=at(12, day=day))

        records = db.sets_in_range(user, date(2024, 7, 20), date(2024, 7, 21))

        assert [r.day for r in records] == [date(2024, 7, 21), date(2024, 7, 20)]

    def test_queries_are_scoped_to_user(self, db, user, other_user):
        squat = exercise_id(db, "Присед")
        db.record_set(other_user, squat, 100, 3, created_at=at(12))

        assert db.sets_on_date(user, DAY) == []
        assert db.sets_in_range(user, DAY, DAY) == []
        assert db.todays_exercises(user, DAY) == []

    def test_unknown_user_fails_as_persistence_error(self, db):
        with pytest.raises(PersistenceError):
            db.record_set(9999, exercise_id(db, "Присед"), 80, 10)

    def test_closed_connection_fails_as_persistence_error(self, tmp_path):
        db = WorkoutDatabase(str(tmp_path / "workout.db"))
        db.close()
        with pytest.raises(PersistenceError):
            db.list_exercises()


class TestSchemaMigration:
    def test_adds_set_number_to_legacy_store(self, tmp_path):
        db_file = str(tmp_path / "legacy.db")
        conn = sqlite3.connect(db_file)
        conn.executescript(
            """
            CREATE TABLE users (id INTEGER PRIMARY KEY, telegram_id INTEGER UNIQUE NOT NULL,
                username TEXT, first_name TEXT, created_at DATETIME DEFAULT CURRENT_TIMESTAMP);
            CREATE TABLE exercises (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT UNIQUE NOT NULL,
                category TEXT, created_at DATETIME DEFAULT CURRENT_TIMESTAMP);
            CREATE TABLE workouts (id INTEGER PRIMARY KEY AUTOINCREMENT, user_id INTEGER NOT NULL,
                exercise_id INTEGER NOT NULL, weight REAL NOT NULL, reps INTEGER NOT NULL,
                created_at DATETIME DEFAULT CURRENT_TIMESTAMP);
            INSERT INTO users (telegram_id) VALUES (1001);
            INSERT INTO exercises (name, category) VALUES ('Присед', 'Ноги');
            INSERT INTO workouts (user_id, exercise_id, weight, reps, created_at)
                VALUES (1, 1, 80, 10, '2024-07-22 18:00:00');
            """
        )
        conn.commit()
        conn.close()

        db = WorkoutDatabase(db_file)

        columns = [row["name"] for row in db.conn.execute("PRAGMA table_info(workouts)")]
        assert "set_number" in columns
        records = db.sets_on_date(1, DAY)
        assert [r.set_number for r in records] == [1]
        assert db.next_set_number(1, 1, DAY) == 2
        db.close()

    def test_backfills_missing_set_numbers_on_every_start(self, tmp_path):
        db_file = str(tmp_path / "workout.db")
        db = WorkoutDatabase(db_file)
        db.create_user(1001)
        user = db.get_user_id(1001)
        squat = exercise_id(db, "Присед")
        with db.conn:
            db.conn.execute(
                "INSERT INTO workouts (user_id, exercise_id, weight, reps, set_number, created_at) "
                "VALUES (?, ?, 80, 10, NULL, '2024-07-22 10:00:00')", (user, squat))
            db.conn.execute(
                "INSERT INTO workouts (user_id, exercise_id, weight, reps, set_number, created_at) "
                "VALUES (?, ?, 80, 10, 0, '2024-07-22 11:00:00')", (user, squat))
        db.close()

        db = WorkoutDatabase(db_file)
        values = [row[0] for row in db.conn.execute("SELECT set_number FROM workouts")]
        assert values == [1, 1]
        db.close()
