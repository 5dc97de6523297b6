"""
Data models for the Daily Sentences trainer
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import TypedDict


@dataclass(frozen=True)
class LearningItem:
    """One flashcard: a sentence and its translation plus scheduling state"""

    id: str
    front: str
    back: str
    added_at: datetime
    updated_at: datetime
    stage_index: int = 0
    next_review_due: datetime | None = None
    last_reviewed_at: datetime | None = None
    times_reviewed: int = 0
    is_manually_added: bool = False
    tags: list[str] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        front: str,
        back: str,
        now: datetime,
        is_manually_added: bool = False,
        tags: list[str] | None = None,
    ) -> "LearningItem":
        """Build a fresh, unscheduled item"""
        return cls(
            id=uuid.uuid4().hex,
            front=front,
            back=back,
            added_at=now,
            updated_at=now,
            is_manually_added=is_manually_added,
            tags=list(tags or []),
        )


@dataclass(frozen=True)
class DailySelectionRecord:
    """Today's new-learning selection, keyed by local calendar date"""

    date_key: str
    item_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class DictationRecord:
    """One dictation attempt"""

    item_id: str
    is_correct: bool
    answered_at: datetime
    id: int | None = None


class StageSummary(TypedDict):
    """Item counts by learning band"""
    total: int
    new: int
    reviewing: int
    mastered: int
