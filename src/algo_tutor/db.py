"""Database initialization, connection management and the attempt/review-state store."""
import sqlite3
from datetime import datetime
from pathlib import Path

from loguru import logger

from algo_tutor.config import DEFAULT_DB_PATH
from algo_tutor.errors import PersistenceFailure
from algo_tutor.models import Attempt, Outcome, ReviewState

SCHEMA = """
CREATE TABLE IF NOT EXISTS attempts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    problem_id INTEGER NOT NULL,
    variant_id INTEGER,
    attempted_at TEXT NOT NULL,
    time_spent_seconds REAL NOT NULL CHECK (time_spent_seconds >= 0),
    solved INTEGER NOT NULL,
    viewed_hint INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS review_states (
    problem_id INTEGER PRIMARY KEY,
    repetitions INTEGER NOT NULL CHECK (repetitions >= 0),
    interval_days INTEGER NOT NULL CHECK (interval_days >= 1),
    ease_factor REAL NOT NULL,
    last_outcome TEXT NOT NULL
        CHECK (last_outcome IN ('Reset', 'Grit', 'Clean', 'Struggle', 'Speed')),
    last_reviewed TEXT NOT NULL,
    due TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_attempts_problem ON attempts(problem_id);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


def _row_to_state(row: sqlite3.Row) -> ReviewState:
    return ReviewState(
        problem_id=row["problem_id"],
        repetitions=row["repetitions"],
        interval=row["interval_days"],
        ease_factor=row["ease_factor"],
        last_outcome=Outcome(row["last_outcome"]),
        last_reviewed=datetime.fromisoformat(row["last_reviewed"]),
        due=datetime.fromisoformat(row["due"]),
    )


def _row_to_attempt(row: sqlite3.Row) -> Attempt:
    return Attempt(
        problem_id=row["problem_id"],
        timestamp=datetime.fromisoformat(row["attempted_at"]),
        time_spent_seconds=row["time_spent_seconds"],
        solved=bool(row["solved"]),
        viewed_hint=bool(row["viewed_hint"]),
        variant_id=row["variant_id"],
    )


def load_review_states(db_path: str) -> dict[int, ReviewState]:
    conn = get_connection(db_path)
    try:
        rows = conn.execute("SELECT * FROM review_states ORDER BY problem_id").fetchall()
    except sqlite3.Error as e:
        raise PersistenceFailure(f"Could not load review states: {e}") from e
    finally:
        conn.close()
    return {row["problem_id"]: _row_to_state(row) for row in rows}


def load_attempts(db_path: str) -> list[Attempt]:
    conn = get_connection(db_path)
    try:
        rows = conn.execute("SELECT * FROM attempts ORDER BY id").fetchall()
    except sqlite3.Error as e:
        raise PersistenceFailure(f"Could not load attempts: {e}") from e
    finally:
        conn.close()
    return [_row_to_attempt(row) for row in rows]


def commit_attempt(db_path: str, attempt: Attempt, state: ReviewState) -> None:
    """Append the attempt and upsert its review state in one transaction."""
    conn = get_connection(db_path)
    try:
        with conn:
            conn.execute(
                """INSERT INTO attempts
                (problem_id, variant_id, attempted_at, time_spent_seconds, solved, viewed_hint)
                VALUES (?, ?, ?, ?, ?, ?)""",
                (attempt.problem_id, attempt.variant_id, attempt.timestamp.isoformat(),
                 attempt.time_spent_seconds, int(attempt.solved), int(attempt.viewed_hint)),
            )
            conn.execute(
                """INSERT INTO review_states
                (problem_id, repetitions, interval_days, ease_factor, last_outcome, last_reviewed, due)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(problem_id) DO UPDATE SET
                    repetitions=excluded.repetitions, interval_days=excluded.interval_days,
                    ease_factor=excluded.ease_factor, last_outcome=excluded.last_outcome,
                    last_reviewed=excluded.last_reviewed, due=excluded.due""",
                (state.problem_id, state.repetitions, state.interval, state.ease_factor,
                 state.last_outcome.value, state.last_reviewed.isoformat(), state.due.isoformat()),
            )
    except sqlite3.Error as e:
        logger.error("Commit failed for problem {}: {}", attempt.problem_id, e)
        raise PersistenceFailure(f"Could not save attempt for problem {attempt.problem_id}: {e}") from e
    finally:
        conn.close()


class SqliteStore:
    """Store backed by a SQLite file."""

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        self.db_path = db_path
        init_db(db_path)

    def load_review_states(self) -> dict[int, ReviewState]:
        return load_review_states(self.db_path)

    def load_attempts(self) -> list[Attempt]:
        return load_attempts(self.db_path)

    def commit(self, attempt: Attempt, state: ReviewState) -> None:
        commit_attempt(self.db_path, attempt, state)


class MemoryStore:
    """In-process store; nothing survives the process."""

    def __init__(self):
        self.states: dict[int, ReviewState] = {}
        self.attempts: list[Attempt] = []

    def load_review_states(self) -> dict[int, ReviewState]:
        return dict(self.states)

    def load_attempts(self) -> list[Attempt]:
        return list(self.attempts)

    def commit(self, attempt: Attempt, state: ReviewState) -> None:
        self.attempts.append(attempt)
        self.states[state.problem_id] = state
