"""
Tests for the study session workflow
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from daily_sentences.config import Settings
from daily_sentences.core.session.study_service import StudyService
from daily_sentences.core.database.database_manager import DatabaseManager
from daily_sentences.exceptions import ItemNotFoundError, PersistenceError
from daily_sentences.spaced_repetition import Feedback

UTC = timezone.utc
NOW = datetime(2026, 3, 10, 15, 0, tzinfo=UTC)


@pytest.fixture
def temp_db():
    """Create temporary database for testing"""
    temp_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    temp_file.close()

    db_manager = DatabaseManager(temp_file.name)
    db_manager.init_database()

    yield db_manager

    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(temp_file.name + suffix):
            os.unlink(temp_file.name + suffix)


@pytest.fixture
def service(temp_db):
    """Study service with a quota of three in UTC"""
    settings = Settings(daily_target=3, timezone="UTC")
    return StudyService(temp_db, settings=settings)


@pytest.fixture
def imported(service):
    """Four imported sentences added over the last week"""
    sentences = [
        ("Good morning.", "早上好。"),
        ("See you tomorrow.", "明天见。"),
        ("Where is the station?", "车站在哪里？"),
        ("I would like a coffee.", "我想要一杯咖啡。"),
    ]
    return [
        service.add_item(front, back, is_manual=False, now=NOW - timedelta(days=7 - n))
        for n, (front, back) in enumerate(sentences)
    ]


class TestAddItem:
    """Test creating sentences"""

    def test_add_manual_item(self, service, temp_db):
        """Test typed sentences are stored unscheduled"""
        item = service.add_item("  Nice to   meet you. ", "很高兴认识你。", tags="greeting, people", now=NOW)

        stored = temp_db.get_item_by_id(item.id)
        assert stored == item
        assert stored.front == "Nice to meet you."
        assert stored.is_manually_added is True
        assert stored.stage_index == 0
        assert stored.next_review_due is None
        assert stored.times_reviewed == 0
        assert stored.tags == ["greeting", "people"]
        assert stored.added_at == NOW
        assert stored.updated_at == NOW

    @pytest.mark.parametrize("front,back", [("", "x"), ("x", "   "), ("   ", "")])
    def test_blank_text_rejected(self, service, front, back):
        """Test both sides of the card are required"""
        with pytest.raises(ValueError):
            service.add_item(front, back, now=NOW)


class TestTodayPlan:
    """Test planning and persisting today's selection"""

    def test_plan_is_persisted(self, service, temp_db, imported):
        """Test the first plan of the day is stored"""
        plan = service.get_today_plan(NOW)

        assert [item.id for item in plan.new_items] == [item.id for item in imported[:3]]
        assert plan.persisted is True
        assert plan.persistence_error is None
        assert temp_db.get_selection("2026-03-10") == plan.updated_record

    def test_plan_is_stable_across_calls(self, service, imported):
        """Test reloading on the same day returns the same sentences"""
        first = service.get_today_plan(NOW)
        service.add_item("Typed later.", "后来输入的。", is_manual=False, now=NOW)
        second = service.get_today_plan(NOW + timedelta(hours=2))

        assert [i.id for i in second.new_items] == [i.id for i in first.new_items]
        assert second.record_changed is False
        assert second.persisted is True

    def test_empty_store(self, service, temp_db):
        """Test an empty store plans nothing and stores nothing"""
        plan = service.get_today_plan(NOW)

        assert plan.new_items == []
        assert plan.due_items == []
        assert temp_db.get_selection("2026-03-10") is None

    def test_save_failure_still_returns_plan(self, service, temp_db, imported):
        """Test a failed save is reported but the selection is still shown"""
        with patch.object(temp_db, "save_selection", side_effect=PersistenceError("disk full")):
            plan = service.get_today_plan(NOW)

        assert len(plan.new_items) == 3
        assert plan.persisted is False
        assert isinstance(plan.persistence_error, PersistenceError)
        assert temp_db.get_selection("2026-03-10") is None

    def test_read_failure_plans_fresh(self, service, temp_db, imported):
        """Test an unreadable record falls back to a fresh selection"""
        with patch.object(temp_db, "get_selection", side_effect=PersistenceError("locked")):
            plan = service.get_today_plan(NOW)

        assert len(plan.new_items) == 3
        assert plan.persisted is False
        assert isinstance(plan.persistence_error, PersistenceError)

    def test_item_read_failure_propagates(self, service, temp_db):
        """Test nothing is planned when items cannot be read"""
        with patch.object(temp_db, "get_all_items", side_effect=PersistenceError("gone")):
            with pytest.raises(PersistenceError):
                service.get_today_plan(NOW)


class TestMarkLearned:
    """Test finishing first-time study"""

    def test_mark_learned(self, service, temp_db, imported):
        """Test a learned sentence is scheduled for tomorrow"""
        learned = service.mark_learned(imported[0].id, now=NOW)

        assert learned.stage_index == 1
        assert learned.next_review_due == datetime(2026, 3, 11, tzinfo=UTC)
        assert learned.last_reviewed_at == NOW
        assert learned.updated_at == NOW
        assert learned.times_reviewed == 0
        assert temp_db.get_item_by_id(imported[0].id) == learned

    def test_learned_item_stays_in_today_plan(self, service, imported):
        """Test a sentence learned today is still listed as done"""
        first = service.get_today_plan(NOW)
        service.mark_learned(first.new_items[0].id, now=NOW + timedelta(minutes=1))

        second = service.get_today_plan(NOW + timedelta(minutes=2))

        assert [i.id for i in second.new_items] == [i.id for i in first.new_items]
        assert second.new_items[0].stage_index == 1

    def test_already_learned_unchanged(self, service, imported):
        """Test learning twice does not reschedule"""
        learned = service.mark_learned(imported[0].id, now=NOW)

        again = service.mark_learned(imported[0].id, now=NOW + timedelta(days=3))

        assert again == learned

    def test_unknown_item(self, service):
        """Test unknown ids raise ItemNotFoundError"""
        with pytest.raises(ItemNotFoundError):
            service.mark_learned("missing", now=NOW)


class TestSubmitFeedback:
    """Test review answers"""

    def test_feedback_updates_item(self, service, temp_db, imported):
        """Test a review answer moves the stage and counts the review"""
        service.mark_learned(imported[0].id, now=NOW)

        reviewed = service.submit_feedback(imported[0].id, Feedback.EASY, now=NOW + timedelta(days=1))

        assert reviewed.stage_index == 2
        assert reviewed.times_reviewed == 1
        assert reviewed.next_review_due == datetime(2026, 3, 13, tzinfo=UTC)
        assert reviewed.last_reviewed_at == NOW + timedelta(days=1)
        assert reviewed.updated_at == NOW + timedelta(days=1)
        assert temp_db.get_item_by_id(imported[0].id) == reviewed

    def test_forgot_regresses(self, service, imported):
        """Test forgetting halves the stage"""
        item_id = imported[0].id
        service.mark_learned(item_id, now=NOW)
        for _ in range(3):
            service.submit_feedback(item_id, "easy", now=NOW)

        reviewed = service.submit_feedback(item_id, "forgot", now=NOW)

        assert reviewed.stage_index == 2
        assert reviewed.times_reviewed == 4

    def test_graduation_ends_reviews(self, service, imported):
        """Test a mastered sentence never shows up as due again"""
        item_id = imported[0].id
        service.mark_learned(item_id, now=NOW)
        for _ in range(8):
            reviewed = service.submit_feedback(item_id, Feedback.EASY, now=NOW)

        assert reviewed.stage_index == 9
        assert reviewed.next_review_due is None

        plan = service.get_today_plan(NOW + timedelta(days=3650))
        assert item_id not in [item.id for item in plan.due_items]
        assert service.get_stage_summary()["mastered"] == 1

    def test_invalid_feedback(self, service, imported):
        """Test unknown feedback fails before anything is written"""
        with pytest.raises(ValueError):
            service.submit_feedback(imported[0].id, "meh", now=NOW)

    def test_unknown_item(self, service):
        """Test unknown ids raise ItemNotFoundError"""
        with pytest.raises(ItemNotFoundError):
            service.submit_feedback("missing", Feedback.HARD, now=NOW)

    def test_learned_item_due_next_day(self, service, imported):
        """Test the day after learning the sentence is in the review queue"""
        first = service.get_today_plan(NOW)
        learned_id = first.new_items[0].id
        service.mark_learned(learned_id, now=NOW)

        tomorrow = service.get_today_plan(NOW + timedelta(days=1))

        assert learned_id in [item.id for item in tomorrow.due_items]
        assert learned_id not in [item.id for item in tomorrow.new_items]
        assert len(tomorrow.new_items) == 3


class TestDictation:
    """Test the dictation drill"""

    def test_pool_contains_learned_items(self, service, imported):
        """Test only learned sentences can be dictated"""
        service.mark_learned(imported[1].id, now=NOW)

        assert [item.id for item in service.get_dictation_pool()] == [imported[1].id]

    def test_check_dictation(self, service, imported):
        """Test answers are compared ignoring case and spacing"""
        item_id = imported[0].id
        service.mark_learned(item_id, now=NOW)

        wrong = service.check_dictation(item_id, "Good evening.", now=NOW)
        right = service.check_dictation(item_id, "  good   MORNING. ", now=NOW + timedelta(seconds=30))

        assert wrong.is_correct is False
        assert right.is_correct is True
        records = service.get_today_dictations(NOW + timedelta(minutes=1))
        assert [record.is_correct for record in records] == [True, False]
        assert service.get_today_dictations(NOW + timedelta(days=1)) == []

    def test_check_dictation_unknown_item(self, service):
        """Test unknown ids raise ItemNotFoundError"""
        with pytest.raises(ItemNotFoundError):
            service.check_dictation("missing", "anything", now=NOW)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
