"""
Study session orchestration for the Daily Sentences trainer
"""

import dataclasses
import logging
from datetime import datetime

from ...config import Settings, get_settings
from ...daily_selection import DailyPlan, DailySelectionPlanner
from ...exceptions import ItemNotFoundError, PersistenceError
from ...spaced_repetition import Feedback, ReviewScheduler
from ...utils import (
    clean_text,
    date_key,
    log_execution_time,
    normalize_answer,
    now_in,
    parse_tags,
    to_local,
)
from ..database.database_manager import DatabaseManager
from ..database.models import DictationRecord, LearningItem, StageSummary

logger = logging.getLogger(__name__)


class StudyService:
    """Runs a day's study: new sentences, due reviews and dictation"""

    def __init__(
        self,
        db_manager: DatabaseManager,
        scheduler: ReviewScheduler | None = None,
        planner: DailySelectionPlanner | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.tz = self.settings.tzinfo
        self.db_manager = db_manager
        self.scheduler = scheduler or ReviewScheduler(
            self.settings.review_intervals, timezone=self.tz
        )
        self.planner = planner or DailySelectionPlanner(
            self.settings.daily_target, timezone=self.tz
        )

    def _now(self, now: datetime | None) -> datetime:
        return to_local(now, self.tz) if now is not None else now_in(self.tz)

    def _require_item(self, item_id: str) -> LearningItem:
        item = self.db_manager.get_item_by_id(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        return item

    def add_item(
        self,
        front: str,
        back: str,
        tags: list[str] | str | None = None,
        is_manual: bool = True,
        now: datetime | None = None,
    ) -> LearningItem:
        """Create a new, unscheduled sentence"""
        front = clean_text(front)
        back = clean_text(back)
        if not front or not back:
            raise ValueError("Both sentence and translation are required")

        item = LearningItem.create(
            front,
            back,
            self._now(now),
            is_manually_added=is_manual,
            tags=parse_tags(tags),
        )
        self.db_manager.put_item(item)
        logger.info(f"Added item {item.id} (manual={is_manual})")
        return item

    @log_execution_time
    def get_today_plan(self, now: datetime | None = None) -> DailyPlan:
        """
        Plan today's new-learning list and due-review queue

        The plan is returned even if today's record cannot be read or saved;
        in that case ``persistence_error`` is set and the selection may not
        survive a reload.
        """
        now = self._now(now)
        items = self.db_manager.get_all_items()
        today_key = date_key(now, self.tz)

        read_error = None
        try:
            record = self.db_manager.get_selection(today_key)
        except PersistenceError as e:
            logger.warning(f"Could not read today's selection, planning fresh: {e}")
            record = None
            read_error = e

        plan = self.planner.plan(items, record, now)
        plan.persistence_error = read_error

        if not plan.record_changed:
            plan.persisted = read_error is None
            return plan

        try:
            self.db_manager.save_selection(plan.updated_record)
            plan.persisted = read_error is None
        except PersistenceError as e:
            logger.warning(f"Could not save today's selection: {e}")
            plan.persistence_error = e

        return plan

    def mark_learned(self, item_id: str, now: datetime | None = None) -> LearningItem:
        """Complete first-time study of a new sentence"""
        item = self._require_item(item_id)
        if item.stage_index > 0:
            logger.debug(f"Item {item_id} already learned, nothing to do")
            return item

        now = self._now(now)
        result = self.scheduler.compute_next(0, Feedback.EASY, item.times_reviewed, now)
        updated = dataclasses.replace(
            item,
            stage_index=result.next_stage,
            next_review_due=result.next_review_due,
            last_reviewed_at=now,
            updated_at=now,
        )
        self.db_manager.put_item(updated)
        logger.info(f"Item {item_id} learned, next review {result.next_review_due}")
        return updated

    def submit_feedback(
        self,
        item_id: str,
        feedback: Feedback | str,
        now: datetime | None = None,
    ) -> LearningItem:
        """Apply a review answer to an item and store the result"""
        item = self._require_item(item_id)
        now = self._now(now)

        result = self.scheduler.compute_next(
            item.stage_index, feedback, item.times_reviewed, now
        )
        updated = dataclasses.replace(
            item,
            stage_index=result.next_stage,
            next_review_due=result.next_review_due,
            last_reviewed_at=now,
            times_reviewed=item.times_reviewed + 1,
            updated_at=now,
        )
        self.db_manager.put_item(updated)

        if result.is_graduated:
            logger.info(f"Item {item_id} mastered after {updated.times_reviewed} reviews")
        else:
            logger.info(
                f"Item {item_id}: stage {item.stage_index} -> {result.next_stage}, "
                f"due {result.next_review_due}"
            )
        return updated

    def get_dictation_pool(self) -> list[LearningItem]:
        """Sentences that have been learned at least once"""
        return [item for item in self.db_manager.get_all_items() if item.stage_index > 0]

    def check_dictation(
        self, item_id: str, answer: str, now: datetime | None = None
    ) -> DictationRecord:
        """Compare a typed sentence with the original and log the attempt"""
        item = self._require_item(item_id)
        now = self._now(now)

        is_correct = normalize_answer(answer) == normalize_answer(item.front)
        record = DictationRecord(item_id=item.id, is_correct=is_correct, answered_at=now)
        return self.db_manager.add_dictation_record(record, date_key(now, self.tz))

    def get_today_dictations(self, now: datetime | None = None) -> list[DictationRecord]:
        """Today's dictation attempts, newest first"""
        return self.db_manager.get_dictation_records(date_key(self._now(now), self.tz))

    def get_stage_summary(self) -> StageSummary:
        """Count items by learning band"""
        return self.db_manager.get_stage_summary(self.scheduler.last_stage)
