"""Database initialization and the key/value store progress is kept in."""
import os
import sqlite3
from contextlib import closing, contextmanager
from pathlib import Path

DEFAULT_DB_PATH = os.environ.get(
    "QUIZ_TRAINER_DB", str(Path.home() / ".quiz_trainer" / "progress.db")
)

# Seconds to wait on a database locked by another quiz-trainer process.
BUSY_TIMEOUT = 5.0

SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Open db_path with name-addressable rows; the caller closes it."""
    conn = sqlite3.connect(db_path, timeout=BUSY_TIMEOUT)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def connection(db_path: str = DEFAULT_DB_PATH):
    """Yield a connection wrapped in one transaction; it is closed on exit."""
    with closing(get_connection(db_path)) as conn:
        with conn:
            yield conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Create the parent directory and the kv_store table when missing."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    with connection(db_path) as conn:
        conn.executescript(SCHEMA)


class KeyValueStore:
    """String key -> string value store on top of the kv_store table.

    Errors are not caught here; callers decide how much a failed read or
    write matters.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        self.db_path = db_path

    def get(self, key: str, default: str | None = None) -> str | None:
        with connection(self.db_path) as conn:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else default

    def set(self, key: str, value: str) -> None:
        with connection(self.db_path) as conn:
            conn.execute(
                """INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP""",
                (key, value),
            )
