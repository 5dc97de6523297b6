"""
Item repository for learning item storage
"""

import json
import logging
import sqlite3

from ....exceptions import PersistenceError
from ..connection import DatabaseConnection
from ..models import LearningItem, StageSummary

logger = logging.getLogger(__name__)


def _row_to_item(row: sqlite3.Row) -> LearningItem:
    try:
        tags = json.loads(row["tags"] or "[]")
    except (json.JSONDecodeError, TypeError):
        logger.warning(f"Failed to parse tags for item {row['id']}: {row['tags']}")
        tags = []

    return LearningItem(
        id=row["id"],
        front=row["front"],
        back=row["back"],
        stage_index=row["stage_index"],
        next_review_due=row["next_review_due"],
        last_reviewed_at=row["last_reviewed_at"],
        times_reviewed=row["times_reviewed"],
        added_at=row["added_at"],
        is_manually_added=bool(row["is_manually_added"]),
        tags=tags,
        updated_at=row["updated_at"],
    )


class ItemRepository:
    """Repository for learning item operations"""

    def __init__(self, db_connection: DatabaseConnection):
        self.db_connection = db_connection

    def get_all_items(self) -> list[LearningItem]:
        """Get all items in insertion order"""
        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute("SELECT * FROM learning_items ORDER BY rowid")
                return [_row_to_item(row) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            logger.error(f"Error getting learning items: {e}")
            raise PersistenceError("Failed to read learning items") from e

    def get_item_by_id(self, item_id: str) -> LearningItem | None:
        """Get item by ID"""
        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute(
                    "SELECT * FROM learning_items WHERE id = ?", (item_id,)
                )
                row = cursor.fetchone()
                return _row_to_item(row) if row else None
        except sqlite3.Error as e:
            logger.error(f"Error getting item by ID: {e}")
            raise PersistenceError(f"Failed to read learning item {item_id}") from e

    def put_item(self, item: LearningItem) -> LearningItem:
        """Insert or update a single item, keeping its insertion position"""
        try:
            with self.db_connection.get_connection() as conn:
                conn.execute(
                    """
                    INSERT INTO learning_items (
                        id, front, back, stage_index, next_review_due,
                        last_reviewed_at, times_reviewed, added_at,
                        is_manually_added, tags, updated_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        front = excluded.front,
                        back = excluded.back,
                        stage_index = excluded.stage_index,
                        next_review_due = excluded.next_review_due,
                        last_reviewed_at = excluded.last_reviewed_at,
                        times_reviewed = excluded.times_reviewed,
                        added_at = excluded.added_at,
                        is_manually_added = excluded.is_manually_added,
                        tags = excluded.tags,
                        updated_at = excluded.updated_at
                    """,
                    (
                        item.id,
                        item.front,
                        item.back,
                        item.stage_index,
                        item.next_review_due,
                        item.last_reviewed_at,
                        item.times_reviewed,
                        item.added_at,
                        item.is_manually_added,
                        json.dumps(item.tags, ensure_ascii=False),
                        item.updated_at,
                    ),
                )
                conn.commit()
                return item
        except sqlite3.Error as e:
            logger.error(f"Error saving learning item {item.id}: {e}")
            raise PersistenceError(f"Failed to save learning item {item.id}") from e

    def delete_item(self, item_id: str) -> bool:
        """Delete an item and its dictation history"""
        try:
            with self.db_connection.get_connection() as conn:
                conn.execute(
                    "DELETE FROM dictation_records WHERE item_id = ?", (item_id,)
                )
                cursor = conn.execute(
                    "DELETE FROM learning_items WHERE id = ?", (item_id,)
                )
                conn.commit()
                return cursor.rowcount > 0
        except sqlite3.Error as e:
            logger.error(f"Error deleting learning item {item_id}: {e}")
            raise PersistenceError(f"Failed to delete learning item {item_id}") from e

    def get_stage_summary(self, last_stage: int) -> StageSummary:
        """Count items that are new, under review, and mastered"""
        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute(
                    """
                    SELECT
                        COUNT(*) AS total,
                        SUM(CASE WHEN stage_index = 0 THEN 1 ELSE 0 END) AS new,
                        SUM(CASE WHEN stage_index > 0 AND stage_index < ? THEN 1 ELSE 0 END)
                            AS reviewing,
                        SUM(CASE WHEN stage_index >= ? AND stage_index > 0 THEN 1 ELSE 0 END)
                            AS mastered
                    FROM learning_items
                    """,
                    (last_stage, last_stage),
                )
                row = cursor.fetchone()
                return {
                    "total": row["total"] or 0,
                    "new": row["new"] or 0,
                    "reviewing": row["reviewing"] or 0,
                    "mastered": row["mastered"] or 0,
                }
        except sqlite3.Error as e:
            logger.error(f"Error getting stage summary: {e}")
            raise PersistenceError("Failed to summarize learning items") from e
