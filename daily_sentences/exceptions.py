"""
Error types raised by the Daily Sentences trainer
"""


class PersistenceError(Exception):
    """Storage is unavailable: a read or write against the database failed"""


class ItemNotFoundError(LookupError):
    """A study action referenced an item id that is not in the store"""

    def __init__(self, item_id: str):
        super().__init__(f"Learning item not found: {item_id}")
        self.item_id = item_id
