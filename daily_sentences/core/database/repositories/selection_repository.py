"""
Selection repository for the per-day new-learning record
"""

import json
import logging
import sqlite3
from datetime import datetime, timezone

from ....exceptions import PersistenceError
from ..connection import DatabaseConnection
from ..models import DailySelectionRecord

logger = logging.getLogger(__name__)


class SelectionRepository:
    """Repository for daily selection records"""

    def __init__(self, db_connection: DatabaseConnection):
        self.db_connection = db_connection

    def get_selection(self, date_key: str) -> DailySelectionRecord | None:
        """Get the selection stored for a calendar day"""
        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute(
                    "SELECT date_key, item_ids FROM daily_selections WHERE date_key = ?",
                    (date_key,),
                )
                row = cursor.fetchone()
        except sqlite3.Error as e:
            logger.error(f"Error getting daily selection for {date_key}: {e}")
            raise PersistenceError(f"Failed to read daily selection {date_key}") from e

        if not row:
            return None

        try:
            item_ids = json.loads(row["item_ids"])
        except (json.JSONDecodeError, TypeError):
            logger.warning(f"Corrupt daily selection for {date_key}, ignoring it")
            return None

        return DailySelectionRecord(
            date_key=row["date_key"], item_ids=tuple(str(i) for i in item_ids)
        )

    def save_selection(self, record: DailySelectionRecord) -> None:
        """Insert or replace the selection for a calendar day"""
        try:
            with self.db_connection.get_connection() as conn:
                conn.execute(
                    """
                    INSERT INTO daily_selections (date_key, item_ids, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(date_key) DO UPDATE SET
                        item_ids = excluded.item_ids,
                        updated_at = excluded.updated_at
                    """,
                    (
                        record.date_key,
                        json.dumps(list(record.item_ids)),
                        datetime.now(timezone.utc),
                    ),
                )
                conn.commit()
                logger.info(
                    f"Saved daily selection {record.date_key}: {len(record.item_ids)} items"
                )
        except sqlite3.Error as e:
            logger.error(f"Error saving daily selection {record.date_key}: {e}")
            raise PersistenceError(
                f"Failed to save daily selection {record.date_key}"
            ) from e
