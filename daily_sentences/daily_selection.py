"""
Daily selection of new-learning and due-review items
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, tzinfo

from .config import get_settings
from .core.database.models import DailySelectionRecord, LearningItem
from .exceptions import PersistenceError
from .utils import date_key, is_same_day, now_in, to_local

logger = logging.getLogger(__name__)


@dataclass
class DailyPlan:
    """What to present today"""

    new_items: list[LearningItem]
    due_items: list[LearningItem]
    updated_record: DailySelectionRecord
    record_changed: bool = False
    persisted: bool = False
    persistence_error: PersistenceError | None = None


class DailySelectionPlanner:
    """Picks a stable, capped set of items for today"""

    def __init__(self, daily_target: int | None = None, timezone: tzinfo | None = None):
        settings = get_settings()
        self.daily_target = daily_target if daily_target is not None else settings.daily_target
        if self.daily_target < 1:
            raise ValueError(f"Daily target must be positive, got {self.daily_target}")
        self.tz = timezone or settings.tzinfo

    def plan(
        self,
        items: Iterable[LearningItem],
        today_record: DailySelectionRecord | None,
        now: datetime | None = None,
    ) -> DailyPlan:
        """Build today's new-learning list and due-review queue"""
        items = list(items)
        now = to_local(now, self.tz) if now is not None else now_in(self.tz)

        new_items, record = self.select_new_items(items, today_record, now)
        due_items = self.select_due_items(items, now)

        if today_record is None:
            changed = bool(record.item_ids)
        else:
            changed = record != today_record

        return DailyPlan(
            new_items=new_items,
            due_items=due_items,
            updated_record=record,
            record_changed=changed,
        )

    def select_new_items(
        self,
        items: list[LearningItem],
        today_record: DailySelectionRecord | None,
        now: datetime,
    ) -> tuple[list[LearningItem], DailySelectionRecord]:
        """Retain today's selection and top it up to the daily target"""
        today_key = date_key(now, self.tz)
        by_id = {item.id: item for item in items}

        base_ids: tuple[str, ...] = ()
        if today_record is not None and today_record.date_key == today_key:
            base_ids = today_record.item_ids
        elif today_record is not None:
            logger.info(
                f"Discarding selection from {today_record.date_key}, starting {today_key}"
            )

        retained = [
            by_id[item_id]
            for item_id in dict.fromkeys(base_ids)
            if item_id in by_id and self._is_retainable(by_id[item_id], now)
        ]

        needed = self.daily_target - len(retained)
        added: list[LearningItem] = []
        if needed > 0:
            retained_ids = {item.id for item in retained}
            candidates = [
                item
                for item in items
                if item.id not in retained_ids and self._is_eligible(item, now)
            ]
            manual = sorted(
                (item for item in candidates if item.is_manually_added),
                key=lambda item: to_local(item.added_at, self.tz),
                reverse=True,
            )
            imported = sorted(
                (item for item in candidates if not item.is_manually_added),
                key=lambda item: to_local(item.added_at, self.tz),
            )
            added = (manual + imported)[:needed]

        # Fixed daily load, whatever happened above
        selection = (retained + added)[: self.daily_target]

        logger.info(
            f"Daily selection {today_key}: retained={len(retained)}, "
            f"added={len(added)}, total={len(selection)}"
        )

        record = DailySelectionRecord(
            date_key=today_key, item_ids=tuple(item.id for item in selection)
        )
        return selection, record

    def select_due_items(
        self, items: Iterable[LearningItem], now: datetime
    ) -> list[LearningItem]:
        """Items whose review date has arrived, in store order"""
        now = to_local(now, self.tz)
        due = [
            item
            for item in items
            if item.next_review_due is not None
            and to_local(item.next_review_due, self.tz) <= now
        ]
        return due[: self.daily_target]

    def _is_retainable(self, item: LearningItem, now: datetime) -> bool:
        return item.stage_index == 0 or is_same_day(item.last_reviewed_at, now, self.tz)

    def _is_eligible(self, item: LearningItem, now: datetime) -> bool:
        if item.stage_index != 0:
            return False
        # Sentences typed in today are studied deliberately, outside the quota
        if item.is_manually_added and is_same_day(item.added_at, now, self.tz):
            return False
        return True


def plan_daily_selection(
    items: Iterable[LearningItem],
    today_record: DailySelectionRecord | None,
    now: datetime | None = None,
    daily_target: int | None = None,
) -> DailyPlan:
    """Convenience function to plan today's selection"""
    planner = DailySelectionPlanner(daily_target=daily_target)
    return planner.plan(items, today_record, now)
