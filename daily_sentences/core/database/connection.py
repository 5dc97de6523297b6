"""
Database connection manager for the Daily Sentences trainer
"""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from ...config import get_database_path

logger = logging.getLogger(__name__)


def adapt_datetime(val: datetime) -> str:
    return val.isoformat()


def convert_datetime(val: bytes) -> datetime:
    try:
        return datetime.fromisoformat(val.decode())
    except ValueError:
        raise ValueError(f"Invalid datetime format: {val.decode()}") from None


sqlite3.register_adapter(datetime, adapt_datetime)
sqlite3.register_converter("timestamp", convert_datetime)


class DatabaseConnection:
    """Manages SQLite database connections and settings"""

    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or get_database_path()
        self._ensure_database_directory()
        self._init_connection_settings()

    def _ensure_database_directory(self) -> None:
        """Ensure the database directory exists"""
        if self.db_path == ":memory:":
            return
        db_dir = Path(self.db_path).parent
        db_dir.mkdir(parents=True, exist_ok=True)

    def _init_connection_settings(self) -> None:
        """Initialize database connection settings"""
        with self.get_connection() as conn:
            # Enable WAL mode for better concurrency
            conn.execute("PRAGMA journal_mode=WAL")
            # Set timeout for busy database
            conn.execute("PRAGMA busy_timeout=30000")

    @contextmanager
    def get_connection(self):
        """Get database connection with proper cleanup"""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, detect_types=sqlite3.PARSE_DECLTYPES)
            conn.row_factory = sqlite3.Row  # Enable dict-like access
            yield conn
        except Exception as e:
            if conn:
                conn.rollback()
            logger.error(f"Database error: {e}")
            raise
        finally:
            if conn:
                conn.close()

    def init_database(self) -> None:
        """Initialize database tables"""
        with self.get_connection() as conn:
            self._create_tables(conn)
            self._create_indexes(conn)
            conn.commit()

    def _create_tables(self, conn: sqlite3.Connection) -> None:
        """Create database tables"""
        tables = [
            """
            CREATE TABLE IF NOT EXISTS learning_items (
                id TEXT PRIMARY KEY,
                front TEXT NOT NULL,
                back TEXT NOT NULL,
                stage_index INTEGER NOT NULL DEFAULT 0,
                next_review_due TIMESTAMP,
                last_reviewed_at TIMESTAMP,
                times_reviewed INTEGER NOT NULL DEFAULT 0,
                added_at TIMESTAMP NOT NULL,
                is_manually_added BOOLEAN NOT NULL DEFAULT 0,
                tags TEXT NOT NULL DEFAULT '[]',
                updated_at TIMESTAMP NOT NULL
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS daily_selections (
                date_key TEXT PRIMARY KEY,
                item_ids TEXT NOT NULL DEFAULT '[]',
                updated_at TIMESTAMP NOT NULL
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS dictation_records (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                item_id TEXT NOT NULL,
                is_correct BOOLEAN NOT NULL,
                answered_at TIMESTAMP NOT NULL,
                day_key TEXT NOT NULL
            )
            """,
        ]

        for table_sql in tables:
            conn.execute(table_sql)

    def _create_indexes(self, conn: sqlite3.Connection) -> None:
        """Create database indexes for performance"""
        indexes = [
            (
                "CREATE INDEX IF NOT EXISTS idx_learning_items_stage "
                "ON learning_items(stage_index)"
            ),
            (
                "CREATE INDEX IF NOT EXISTS idx_learning_items_next_review "
                "ON learning_items(next_review_due)"
            ),
            (
                "CREATE INDEX IF NOT EXISTS idx_dictation_records_day "
                "ON dictation_records(day_key)"
            ),
        ]

        for index_sql in indexes:
            try:
                conn.execute(index_sql)
            except sqlite3.OperationalError as e:
                logger.warning(f"Failed to create index: {index_sql}, error: {e}")
                # Continue with other indexes
