"""
Unified database manager that coordinates all repositories
"""

import logging

from .connection import DatabaseConnection
from .models import DailySelectionRecord, DictationRecord, LearningItem, StageSummary
from .repositories.dictation_repository import DictationRepository
from .repositories.item_repository import ItemRepository
from .repositories.selection_repository import SelectionRepository

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Unified database manager that coordinates all repositories"""

    def __init__(self, db_path: str | None = None):
        self.db_connection = DatabaseConnection(db_path)
        self.item_repo = ItemRepository(self.db_connection)
        self.selection_repo = SelectionRepository(self.db_connection)
        self.dictation_repo = DictationRepository(self.db_connection)

    def init_database(self) -> None:
        """Initialize database tables and indexes"""
        self.db_connection.init_database()

    # Item methods
    def get_all_items(self) -> list[LearningItem]:
        """Get every learning item in insertion order"""
        return self.item_repo.get_all_items()

    def get_item_by_id(self, item_id: str) -> LearningItem | None:
        """Get item by ID"""
        return self.item_repo.get_item_by_id(item_id)

    def put_item(self, item: LearningItem) -> LearningItem:
        """Insert or update a learning item"""
        return self.item_repo.put_item(item)

    def delete_item(self, item_id: str) -> bool:
        """Delete a learning item"""
        return self.item_repo.delete_item(item_id)

    def get_stage_summary(self, last_stage: int) -> StageSummary:
        """Count items by learning band"""
        return self.item_repo.get_stage_summary(last_stage)

    # Daily selection methods
    def get_selection(self, date_key: str) -> DailySelectionRecord | None:
        """Get the selection stored for a calendar day"""
        return self.selection_repo.get_selection(date_key)

    def save_selection(self, record: DailySelectionRecord) -> None:
        """Store the selection for a calendar day"""
        self.selection_repo.save_selection(record)

    # Dictation methods
    def add_dictation_record(self, record: DictationRecord, day_key: str) -> DictationRecord:
        """Append a dictation attempt"""
        return self.dictation_repo.add_record(record, day_key)

    def get_dictation_records(self, day_key: str) -> list[DictationRecord]:
        """Get a day's dictation attempts"""
        return self.dictation_repo.get_records_for_day(day_key)

    def get_connection(self):
        """Get database connection for direct SQL access in tests"""
        return self.db_connection.get_connection()


# Global instance
_db_manager = None


def get_db_manager(db_path: str | None = None) -> DatabaseManager:
    """Get global database manager instance"""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager(db_path)
    return _db_manager


def init_db(db_path: str | None = None) -> DatabaseManager:
    """Create the schema on the global manager and return it"""
    db_manager = get_db_manager(db_path)
    db_manager.init_database()
    logger.info(f"Database ready at {db_manager.db_connection.db_path}")
    return db_manager
