"""
Dictation repository for dictation attempt history
"""

import logging
import sqlite3

from ....exceptions import PersistenceError
from ..connection import DatabaseConnection
from ..models import DictationRecord

logger = logging.getLogger(__name__)


class DictationRepository:
    """Repository for dictation attempts"""

    def __init__(self, db_connection: DatabaseConnection):
        self.db_connection = db_connection

    def add_record(self, record: DictationRecord, day_key: str) -> DictationRecord:
        """Append a dictation attempt to the day's log"""
        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO dictation_records (item_id, is_correct, answered_at, day_key)
                    VALUES (?, ?, ?, ?)
                    """,
                    (record.item_id, record.is_correct, record.answered_at, day_key),
                )
                conn.commit()
                return DictationRecord(
                    item_id=record.item_id,
                    is_correct=record.is_correct,
                    answered_at=record.answered_at,
                    id=cursor.lastrowid,
                )
        except sqlite3.Error as e:
            logger.error(f"Error adding dictation record: {e}")
            raise PersistenceError("Failed to save dictation record") from e

    def get_records_for_day(self, day_key: str) -> list[DictationRecord]:
        """Get a day's dictation attempts, newest first"""
        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute(
                    """
                    SELECT * FROM dictation_records
                    WHERE day_key = ?
                    ORDER BY answered_at DESC, id DESC
                    """,
                    (day_key,),
                )
                return [
                    DictationRecord(
                        item_id=row["item_id"],
                        is_correct=bool(row["is_correct"]),
                        answered_at=row["answered_at"],
                        id=row["id"],
                    )
                    for row in cursor.fetchall()
                ]
        except sqlite3.Error as e:
            logger.error(f"Error getting dictation records for {day_key}: {e}")
            raise PersistenceError(f"Failed to read dictation records {day_key}") from e
