"""
Utility functions for the Daily Sentences trainer
"""

import logging
import re
import time
from datetime import date, datetime, timedelta, timezone, tzinfo
from functools import wraps
from typing import Any

logger = logging.getLogger(__name__)


def to_local(moment: datetime, tz: tzinfo) -> datetime:
    """Express a timestamp in the given timezone.

    Naive datetimes are taken to already be wall-clock time in ``tz``.
    """
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def now_in(tz: tzinfo) -> datetime:
    """Current time in the given timezone"""
    return datetime.now(tz)


def start_of_day(moment: datetime, tz: tzinfo) -> datetime:
    """Local midnight of the calendar day ``moment`` falls on"""
    local = to_local(moment, tz)
    return local.replace(hour=0, minute=0, second=0, microsecond=0)


def add_days(day_start: datetime, days: int) -> datetime:
    """Shift a local midnight by whole calendar days.

    The result keeps wall-clock midnight, except in zones where a DST gap
    swallows midnight itself; there it lands on the first real instant of
    that day (e.g. 01:00).
    """
    shifted = day_start + timedelta(days=days)
    # Round-trip through UTC to resolve nonexistent wall-clock times
    return shifted.astimezone(timezone.utc).astimezone(day_start.tzinfo)


def local_date(moment: datetime, tz: tzinfo) -> date:
    """Calendar date of a timestamp in the given timezone"""
    return to_local(moment, tz).date()


def date_key(moment: datetime, tz: tzinfo) -> str:
    """Calendar date key (YYYY-MM-DD) used to index daily records"""
    return local_date(moment, tz).isoformat()


def is_same_day(moment: datetime | None, reference: datetime, tz: tzinfo) -> bool:
    """Check whether ``moment`` falls on the same local calendar day as ``reference``"""
    if moment is None:
        return False
    return local_date(moment, tz) == local_date(reference, tz)


def normalize_answer(text: str) -> str:
    """Normalize a typed sentence for comparison"""
    if not text:
        return ""
    return re.sub(r"\s+", " ", text.strip()).lower()


def clean_text(text: str) -> str:
    """Clean and normalize text input"""
    if not text:
        return ""

    # Collapse runs of whitespace
    return re.sub(r"\s+", " ", text.strip())


def parse_tags(raw: Any) -> list[str]:
    """Accept a list or a comma/semicolon separated string of tags"""
    if raw is None:
        return []
    if isinstance(raw, str):
        parts = re.split(r"[,;，；]", raw)
    elif isinstance(raw, (list, tuple)):
        parts = [part for part in raw if isinstance(part, str)]
    else:
        logger.warning(f"Ignoring tags of unexpected type: {type(raw).__name__}")
        return []
    return [part.strip() for part in parts if part.strip()]


def format_date_relative(target: date, today: date) -> str:
    """Format date relative to today"""
    delta = (target - today).days

    if delta == 0:
        return "today"
    elif delta == 1:
        return "tomorrow"
    elif delta == -1:
        return "yesterday"
    elif delta > 0:
        return f"in {delta} days"
    else:
        return f"{abs(delta)} days ago"


def truncate_text(text: str, max_length: int = 60, suffix: str = "...") -> str:
    """Truncate text to maximum length"""
    if not text or len(text) <= max_length:
        return text

    return text[: max_length - len(suffix)] + suffix


class Timer:
    """Simple timer for measuring duration"""

    def __init__(self):
        self.start_time = None
        self.end_time = None

    def start(self):
        """Start the timer"""
        self.start_time = time.perf_counter()
        self.end_time = None

    def stop(self):
        """Stop the timer"""
        if self.start_time is not None:
            self.end_time = time.perf_counter()

    def elapsed(self) -> float | None:
        """Get elapsed time in seconds"""
        if self.start_time is None:
            return None

        end = self.end_time or time.perf_counter()
        return end - self.start_time


def log_execution_time(func):
    """Decorator to log function execution time"""

    @wraps(func)
    def wrapper(*args, **kwargs):
        timer = Timer()
        timer.start()
        try:
            result = func(*args, **kwargs)
            timer.stop()
            logger.debug(f"{func.__name__} executed in {timer.elapsed():.3f}s")
            return result
        except Exception as e:
            timer.stop()
            logger.error(f"{func.__name__} failed after {timer.elapsed():.3f}s: {e}")
            raise

    return wrapper
