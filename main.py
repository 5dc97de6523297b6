#!/usr/bin/env python3
"""
Daily Sentences trainer
Prints today's study plan
"""

import logging

from daily_sentences.config import get_settings
from daily_sentences.core.session.study_service import StudyService
from daily_sentences.core.database.database_manager import init_db
from daily_sentences.utils import format_date_relative, local_date, now_in, truncate_text


def main():
    """Main application entry point"""
    # Load configuration
    settings = get_settings()

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    logger = logging.getLogger(__name__)
    logger.info("Starting Daily Sentences...")

    db_manager = init_db()
    service = StudyService(db_manager, settings=settings)

    now = now_in(settings.tzinfo)
    plan = service.get_today_plan(now)
    if plan.persistence_error:
        logger.warning("Today's selection was not saved and may change on reload")

    print(f"New sentences for {plan.updated_record.date_key}:")
    for item in plan.new_items:
        status = "learned" if item.stage_index > 0 else "new"
        print(f"  [{status}] {truncate_text(item.front)} - {truncate_text(item.back)}")
    if not plan.new_items:
        print("  nothing new today")

    print("Due for review:")
    for item in plan.due_items:
        due = format_date_relative(
            local_date(item.next_review_due, settings.tzinfo), now.date()
        )
        print(f"  (stage {item.stage_index}, due {due}) {truncate_text(item.front)}")
    if not plan.due_items:
        print("  nothing due")

    summary = service.get_stage_summary()
    logger.info(
        f"Vocabulary: {summary['total']} total, {summary['new']} new, "
        f"{summary['reviewing']} reviewing, {summary['mastered']} mastered"
    )


if __name__ == "__main__":
    main()
