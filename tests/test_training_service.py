import random
from datetime import datetime, timezone

import pytest

from conftest import NOW, USER_ID, make_text
from speedtrainer.config.settings import Settings
from speedtrainer.core import training_service
from speedtrainer.core.exposure_exercise import ExposureExercise
from speedtrainer.core.grid_search_exercise import GridSearchExercise
from speedtrainer.core.models import AchievementId, ExerciseKind
from speedtrainer.core.session_store import InMemorySessionRecordStore
from speedtrainer.core.training_service import TrainingService
from speedtrainer.utils.date_helpers import get_timezone
from speedtrainer.utils.error_handlers import InvalidConfigurationError, PersistenceError


class FailingRecordStore(InMemorySessionRecordStore):

    def append(self, record):
        raise PersistenceError("append", "disk full")


def run_exposure(clock):
    engine = ExposureExercise(clock, make_text(300), target_wpm=250, duration_seconds=60)
    engine.start()
    clock.advance(60)
    return engine


def test_exposure_session_flows_through_pipeline(clock, service, record_store, profile_store):
    service.profiles.get_or_create_profile(USER_ID)
    engine = run_exposure(clock)

    outcome = service.complete_exercise(USER_ID, engine.result)

    assert abs(outcome.record.words_read - 250) <= 1
    assert abs(outcome.record.wpm - 250) <= 1
    assert outcome.record.completed_at == NOW
    assert outcome.record.kind == ExerciseKind.EXPOSURE
    assert record_store.list_by_user(USER_ID) == [outcome.record]
    assert outcome.statistics.total_sessions == 1
    assert (outcome.current_streak, outcome.longest_streak) == (1, 1)
    assert profile_store.get(USER_ID).current_streak == 1
    assert outcome.unlocked.id == AchievementId.FIRST_STEPS


def test_persistence_failure_skips_pipeline(clock, profile_store, achievement_store):
    service = TrainingService(FailingRecordStore(), profile_store, achievement_store, now_provider=lambda: NOW)
    service.profiles.get_or_create_profile(USER_ID)
    engine = run_exposure(clock)

    with pytest.raises(PersistenceError):
        service.complete_exercise(USER_ID, engine.result)

    profile = profile_store.get(USER_ID)
    assert profile.current_streak == 0
    assert profile.last_training_date is None
    assert achievement_store.load(USER_ID) == {}


def test_cancelled_exercise_leaves_no_record(clock, service, record_store):
    engine = ExposureExercise(clock, make_text(300), duration_seconds=60)
    engine.start()
    clock.advance(10)

    assert service.cancel_exercise(engine)
    assert engine.result is None
    assert record_store.list_by_user(USER_ID) == []
    assert not service.cancel_exercise(engine)


def test_grid_search_has_no_speed(clock, service):
    engine = GridSearchExercise(clock, rng=random.Random(2))
    engine.start()
    for value in range(1, 26):
        clock.advance(0.5)
        engine.tap(engine.index_of(value))

    outcome = service.complete_exercise(USER_ID, engine.result)

    assert outcome.record.wpm is None
    assert outcome.record.words_read is None
    assert outcome.record.duration_seconds == 12
    assert outcome.statistics.best_wpm == 0


def test_missing_profile_skips_streak_achievements(clock, service, profile_store):
    outcome = service.complete_exercise(USER_ID, run_exposure(clock).result)

    assert (outcome.current_streak, outcome.longest_streak) == (0, 0)
    assert profile_store.get(USER_ID) is None
    assert outcome.unlocked.id == AchievementId.FIRST_STEPS


def test_free_reading_counts_texts_and_categories(service):
    service.record_free_reading(USER_ID, 400, 120, text_id="t1", text_category="science")
    outcome = service.record_free_reading(USER_ID, 300, 60, text_id="t2", text_category="history")

    assert outcome.record.kind == ExerciseKind.FREE_READING
    assert outcome.record.wpm == 300
    assert outcome.statistics.texts_read == 2
    assert outcome.statistics.categories_read == 2
    assert outcome.statistics.exercise_kinds_completed == 0
    assert outcome.statistics.total_words_read == 700


def test_invalid_comprehension_is_rejected(service, record_store):
    with pytest.raises(InvalidConfigurationError):
        service.record_free_reading(USER_ID, 100, 60, comprehension_score=1.5)
    with pytest.raises(InvalidConfigurationError):
        service.record_free_reading(USER_ID, -1, 60)

    assert record_store.list_by_user(USER_ID) == []


def test_unlock_listener_and_delete_all_data(service, record_store, achievement_store):
    unlocked = []
    service.add_unlock_listener(unlocked.append)
    service.profiles.get_or_create_profile(USER_ID)

    service.record_free_reading(USER_ID, 100, 60)
    service.record_free_reading(USER_ID, 100, 60)

    assert [a.id for a in unlocked] == [AchievementId.FIRST_STEPS]

    assert service.delete_all_data(USER_ID) == 2
    assert record_store.list_by_user(USER_ID) == []
    assert service.evaluator_for(USER_ID).unlocked_count == 0

    service.record_free_reading(USER_ID, 100, 60)
    assert [a.id for a in unlocked] == [AchievementId.FIRST_STEPS, AchievementId.FIRST_STEPS]


def test_streak_days_follow_configured_timezone(monkeypatch, record_store, profile_store, achievement_store):
    monkeypatch.setenv("SPEEDTRAINER_TIMEZONE", "Asia/Tokyo")
    monkeypatch.setattr(training_service, "TIMEZONE", Settings().TIMEZONE)
    tokyo = get_timezone("Asia/Tokyo")
    service = TrainingService(
        record_store, profile_store, achievement_store, comprehension_bar=None,
        now_provider=lambda: datetime(2026, 3, 15, 9, 0, tzinfo=tokyo),
    )
    service.profiles.get_or_create_profile(USER_ID)

    service.record_free_reading(USER_ID, 100, 60, completed_at=datetime(2026, 3, 13, 20, 0, tzinfo=timezone.utc))
    outcome = service.record_free_reading(
        USER_ID, 100, 60, completed_at=datetime(2026, 3, 14, 20, 0, tzinfo=timezone.utc)
    )

    assert service.tz == tokyo
    assert service.streaks.tz == tokyo
    assert (outcome.current_streak, outcome.longest_streak) == (2, 2)
