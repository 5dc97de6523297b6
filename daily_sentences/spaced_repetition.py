"""
Spaced repetition scheduling using a discretized Ebbinghaus forgetting curve
"""

import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo
from enum import Enum

from .config import get_settings
from .utils import add_days, now_in, start_of_day

logger = logging.getLogger(__name__)


class Feedback(Enum):
    """Self-reported recall difficulty"""

    EASY = "easy"
    HARD = "hard"
    FORGOT = "forgot"


@dataclass(frozen=True)
class ScheduleResult:
    """Next scheduling state for an item"""

    next_stage: int
    next_review_due: datetime | None

    @property
    def is_graduated(self) -> bool:
        """No further automatic review is scheduled"""
        return self.next_review_due is None


class ReviewScheduler:
    """Stage-based review scheduler over a fixed table of day intervals"""

    def __init__(
        self,
        intervals: list[int] | None = None,
        timezone: tzinfo | None = None,
    ):
        settings = get_settings()
        intervals = list(intervals if intervals is not None else settings.review_intervals)
        if not intervals:
            raise ValueError("Interval table must not be empty")
        if any(not isinstance(days, int) or days < 0 for days in intervals):
            raise ValueError(f"Interval table must hold non-negative ints: {intervals}")

        self.intervals = tuple(intervals)
        self.tz = timezone or settings.tzinfo

    @property
    def last_stage(self) -> int:
        return len(self.intervals) - 1

    def compute_next(
        self,
        current_stage: int,
        feedback: Feedback | str,
        times_reviewed: int = 0,
        now: datetime | None = None,
    ) -> ScheduleResult:
        """
        Calculate the next stage and due date for a review answer

        Args:
            current_stage: Index into the interval table (0 = never learned)
            feedback: Easy, Hard or Forgot
            times_reviewed: Review counter of the item; read-only here, the
                caller increments it
            now: Moment of the answer (defaults to the current time)

        Returns:
            ScheduleResult; ``next_review_due`` is None once the item graduates

        Raises:
            ValueError: stage outside the table or unknown feedback
        """
        if isinstance(current_stage, bool) or not isinstance(current_stage, int):
            raise ValueError(f"Stage must be an int, got {current_stage!r}")
        if not 0 <= current_stage <= self.last_stage:
            raise ValueError(
                f"Stage must be between 0 and {self.last_stage}, got {current_stage}"
            )
        feedback = Feedback(feedback)

        if now is None:
            now = now_in(self.tz)

        if feedback is Feedback.EASY:
            next_stage = min(self.last_stage, current_stage + 1)
        elif feedback is Feedback.HARD:
            # Stage 0 is reserved for items never completed once
            next_stage = max(1, current_stage)
        else:
            next_stage = max(1, current_stage // 2)

        # The last stage can be a single-entry table's stage 0, so keep within range
        next_stage = min(next_stage, self.last_stage)

        logger.debug(
            f"Scheduling review: stage={current_stage}, feedback={feedback.value}, "
            f"reviews={times_reviewed} -> stage={next_stage}"
        )

        if feedback is Feedback.EASY and next_stage == self.last_stage:
            logger.info(f"Item graduated at stage {next_stage}")
            return ScheduleResult(next_stage=next_stage, next_review_due=None)

        # Anchor at today's midnight so 0-day stages are due immediately
        due = add_days(start_of_day(now, self.tz), self.intervals[next_stage])
        return ScheduleResult(next_stage=next_stage, next_review_due=due)


# Global instance
_scheduler = None


def get_review_scheduler() -> ReviewScheduler:
    """Get global review scheduler instance"""
    global _scheduler
    if _scheduler is None:
        _scheduler = ReviewScheduler()
    return _scheduler


def calculate_next_review(
    current_stage: int,
    feedback: Feedback | str,
    times_reviewed: int = 0,
    now: datetime | None = None,
) -> ScheduleResult:
    """Convenience function to calculate next review"""
    return get_review_scheduler().compute_next(
        current_stage, feedback, times_reviewed=times_reviewed, now=now
    )
