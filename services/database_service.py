import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from typing import Iterator, List, Optional, Tuple

from models.domain import Exercise, SetRecord, TodayExercise
from services.errors import DuplicateNameError, PersistenceError, UserNotFoundError

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

SEED_EXERCISES: Tuple[Tuple[str, str], ...] = (
    ("Жим лежа", "Грудь"),
    ("Жим с паузами", "Грудь"),
    ("Присед", "Ноги"),
    ("Тяга гантелей", "Спина"),
    ("Тяга блока", "Спина"),
    ("Трицепс", "Руки"),
    ("Бицепс", "Руки"),
)

SCHEMA = """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY,
        telegram_id INTEGER UNIQUE NOT NULL,
        username TEXT,
        first_name TEXT,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    );

    CREATE TABLE IF NOT EXISTS exercises (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT UNIQUE NOT NULL,
        category TEXT,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    );

    CREATE TABLE IF NOT EXISTS workouts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        exercise_id INTEGER NOT NULL,
        weight REAL NOT NULL,
        reps INTEGER NOT NULL,
        set_number INTEGER DEFAULT 1,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (user_id) REFERENCES users (id),
        FOREIGN KEY (exercise_id) REFERENCES exercises (id)
    );

    CREATE INDEX IF NOT EXISTS idx_workouts_user_date ON workouts (user_id, created_at);
    CREATE INDEX IF NOT EXISTS idx_workouts_user_exercise ON workouts (user_id, exercise_id);
"""

SET_RECORD_COLUMNS = """
    SELECT e.name AS exercise_name, w.weight, w.reps,
           COALESCE(w.set_number, 1) AS set_number, w.created_at
    FROM workouts w
    JOIN exercises e ON w.exercise_id = e.id
"""


class WorkoutDatabase:
    """Handles all SQLite operations for the workout diary bot."""

    def __init__(self, path: str = "workout.db") -> None:
        """Open the database and bring its schema and seed data up to date."""
        self.path = path
        try:
            self.conn = sqlite3.connect(path)
            self.conn.row_factory = sqlite3.Row
            self.conn.execute("PRAGMA foreign_keys = ON")
            self._init_tables()
            self._run_migrations()
            self._seed_exercises()
            logger.info("Opened workout database at %s", path)
        except (sqlite3.Error, OverflowError) as exc:
            logger.critical("Could not open workout database at %s.", path, exc_info=True)
            raise PersistenceError(f"Could not open database {path}") from exc

    # ------------------------------
    # Schema
    # ------------------------------
    def _init_tables(self) -> None:
        self.conn.executescript(SCHEMA)

    def _run_migrations(self) -> None:
        """Add the set_number column to stores created before it existed."""
        columns = {row["name"] for row in self.conn.execute("PRAGMA table_info(workouts)")}
        with self.conn:
            if "set_number" not in columns:
                logger.info("Migrating workouts table: adding set_number column.")
                self.conn.execute("ALTER TABLE workouts ADD COLUMN set_number INTEGER DEFAULT 1")
            updated = self.conn.execute(
                "UPDATE workouts SET set_number = 1 WHERE set_number IS NULL OR set_number = 0"
            ).rowcount
        if updated:
            logger.info("Backfilled set_number on %d workout rows.", updated)

    def _seed_exercises(self) -> None:
        with self.conn:
            self.conn.executemany(
                "INSERT OR IGNORE INTO exercises (name, category) VALUES (?, ?)", SEED_EXERCISES
            )

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        """Translate driver failures into PersistenceError."""
        try:
            yield
        except sqlite3.Error as exc:
            logger.error("Database operation '%s' failed: %s", operation, exc, exc_info=True)
            raise PersistenceError(f"Database operation '{operation}' failed") from exc

    # ------------------------------
    # Users
    # ------------------------------
    def create_user(self, telegram_id: int, username: Optional[str] = None,
            first_name: Optional[str] = None) -> None:
        """Register a user. Registering a known telegram_id again is a no-op."""
        with self._guard("create_user"), self.conn:
            cursor = self.conn.execute(
                "INSERT OR IGNORE INTO users (telegram_id, username, first_name) VALUES (?, ?, ?)",
                (telegram_id, username, first_name),
            )
        if cursor.rowcount:
            logger.info("Registered new user %s", telegram_id)

    def get_user_id(self, telegram_id: int) -> Optional[int]:
        with self._guard("get_user_id"):
            row = self.conn.execute(
                "SELECT id FROM users WHERE telegram_id = ?", (telegram_id,)
            ).fetchone()
        return row["id"] if row else None

    def require_user_id(self, telegram_id: int) -> int:
        """Like get_user_id, but raises UserNotFoundError for unknown users."""
        internal_id = self.get_user_id(telegram_id)
        if internal_id is None:
            raise UserNotFoundError(telegram_id)
        return internal_id

    # ------------------------------
    # Exercises
    # ------------------------------
    def list_exercises(self) -> List[Exercise]:
        """Return the catalog ordered by category, then name."""
        with self._guard("list_exercises"):
            rows = self.conn.execute(
                "SELECT id, name, category, created_at FROM exercises ORDER BY category, name, id"
            ).fetchall()
        return [self._to_exercise(row) for row in rows]

    def get_exercise(self, exercise_id: int) -> Optional[Exercise]:
        with self._guard("get_exercise"):
            row = self.conn.execute(
                "SELECT id, name, category, created_at FROM exercises WHERE id = ?", (exercise_id,)
            ).fetchone()
        return self._to_exercise(row) if row else None

    def exercise_exists(self, name: str) -> bool:
        """Case-sensitive exact match on the exercise name."""
        with self._guard("exercise_exists"):
            row = self.conn.execute("SELECT 1 FROM exercises WHERE name = ?", (name,)).fetchone()
        return row is not None

    def create_exercise(self, name: str, category: str) -> int:
        """Insert a new exercise and return its id. Raises DuplicateNameError on a name clash."""
        with self._guard("create_exercise"):
            try:
                with self.conn:
                    cursor = self.conn.execute(
                        "INSERT INTO exercises (name, category) VALUES (?, ?)", (name, category)
                    )
            except sqlite3.IntegrityError:
                logger.warning("Exercise '%s' already exists.", name)
                raise DuplicateNameError(name) from None
        logger.info("Created exercise '%s' (%s) with id=%s", name, category, cursor.lastrowid)
        return cursor.lastrowid

    # ------------------------------
    # Workout sets
    # ------------------------------
    def record_set(self, user_id: int, exercise_id: int, weight: float, reps: int,
            set_number: int = 1, created_at: Optional[datetime] = None) -> int:
        """Insert a set as given. Range checks belong to the calling flow."""
        created_at = created_at or datetime.now()
        with self._guard("record_set"), self.conn:
            cursor = self.conn.execute(
                """
                INSERT INTO workouts (user_id, exercise_id, weight, reps, set_number, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (user_id, exercise_id, weight, reps, set_number, created_at.strftime(TIMESTAMP_FORMAT)),
            )
        logger.debug("Recorded set id=%s for user=%s exercise=%s", cursor.lastrowid, user_id, exercise_id)
        return cursor.lastrowid

    def next_set_number(self, user_id: int, exercise_id: int, day: date) -> int:
        """Return max(set_number) + 1 for the (user, exercise, day) scope, or 1."""
        with self._guard("next_set_number"):
            row = self.conn.execute(
                """
                SELECT MAX(set_number) AS max_set FROM workouts
                WHERE user_id = ? AND exercise_id = ? AND DATE(created_at) = ?
                """,
                (user_id, exercise_id, day.isoformat()),
            ).fetchone()
        return (row["max_set"] or 0) + 1

    def todays_exercises(self, user_id: int, today: Optional[date] = None) -> List[TodayExercise]:
        """One entry per exercise logged on the day, most recent activity first."""
        today = today or date.today()
        with self._guard("todays_exercises"):
            rows = self.conn.execute(
                """
                SELECT e.id, e.name, e.category, w.weight, w.reps
                FROM workouts w
                JOIN exercises e ON w.exercise_id = e.id
                WHERE w.user_id = ? AND DATE(w.created_at) = ?
                ORDER BY w.created_at DESC, COALESCE(w.set_number, 1) DESC, w.id DESC
                """,
                (user_id, today.isoformat()),
            ).fetchall()

        summaries: dict[int, TodayExercise] = {}
        for row in rows:
            summary = summaries.get(row["id"])
            if summary is None:
                summaries[row["id"]] = TodayExercise(
                    exercise=Exercise(id=row["id"], name=row["name"], category=row["category"]),
                    last_weight=row["weight"],
                    last_reps=row["reps"],
                    set_count=1,
                )
            else:
                summary.set_count += 1
        return list(summaries.values())

    def sets_on_date(self, user_id: int, day: date) -> List[SetRecord]:
        with self._guard("sets_on_date"):
            rows = self.conn.execute(
                SET_RECORD_COLUMNS + """
                WHERE w.user_id = ? AND DATE(w.created_at) = ?
                ORDER BY w.created_at DESC, COALESCE(w.set_number, 1) ASC
                """,
                (user_id, day.isoformat()),
            ).fetchall()
        return [self._to_set_record(row) for row in rows]

    def sets_in_range(self, user_id: int, start_day: date, end_day: date) -> List[SetRecord]:
        """Sets between two calendar days, both inclusive."""
        with self._guard("sets_in_range"):
            rows = self.conn.execute(
                SET_RECORD_COLUMNS + """
                WHERE w.user_id = ? AND DATE(w.created_at) BETWEEN ? AND ?
                ORDER BY w.created_at DESC, COALESCE(w.set_number, 1) ASC
                """,
                (user_id, start_day.isoformat(), end_day.isoformat()),
            ).fetchall()
        return [self._to_set_record(row) for row in rows]

    def close(self) -> None:
        """Closes the database connection."""
        self.conn.close()
        logger.info("Workout database connection closed.")

    # ------------------------------
    # Internal Helpers
    # ------------------------------
    @staticmethod
    def _parse_timestamp(value: str) -> datetime:
        return datetime.fromisoformat(value)

    def _to_exercise(self, row: sqlite3.Row) -> Exercise:
        created_at = self._parse_timestamp(row["created_at"]) if row["created_at"] else None
        return Exercise(id=row["id"], name=row["name"], category=row["category"], created_at=created_at)

    def _to_set_record(self, row: sqlite3.Row) -> SetRecord:
        return SetRecord(
            exercise_name=row["exercise_name"],
            weight=row["weight"],
            reps=row["reps"],
            set_number=row["set_number"],
            created_at=self._parse_timestamp(row["created_at"]),
        )
