"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta
from typing import Optional

import pytest

from speedtrainer.core.achievements import InMemoryAchievementStateStore, JsonAchievementStateStore
from speedtrainer.core.clock import VirtualClock
from speedtrainer.core.models import ExerciseKind, ExerciseSettings, SessionRecord
from speedtrainer.core.profile_manager import InMemoryProfileStore, JsonProfileStore
from speedtrainer.core.session_store import InMemorySessionRecordStore, JsonSessionRecordStore
from speedtrainer.core.training_service import TrainingService
from speedtrainer.utils.file_helpers import generate_unique_id

USER_ID = "reader-1"
NOW = datetime(2026, 3, 15, 12, 0)


def make_text(word_count: int) -> str:
    return " ".join(f"word{i}" for i in range(word_count))


def make_record(
    completed_at: datetime,
    user_id: str = USER_ID,
    kind: ExerciseKind = ExerciseKind.EXPOSURE,
    words_read: Optional[int] = 100,
    wpm: Optional[int] = 250,
    comprehension_score: Optional[float] = None,
    duration_seconds: int = 60,
    text_id: Optional[str] = None,
    text_category: Optional[str] = None,
) -> SessionRecord:
    return SessionRecord(
        id=generate_unique_id(),
        user_id=user_id,
        completed_at=completed_at,
        kind=kind,
        duration_seconds=duration_seconds,
        words_read=words_read,
        wpm=wpm,
        comprehension_score=comprehension_score,
        settings=ExerciseSettings(text_id=text_id, text_category=text_category),
    )


def days_ago(days: int, hour: int = 10) -> datetime:
    return (NOW - timedelta(days=days)).replace(hour=hour, minute=0)


@pytest.fixture
def clock():
    return VirtualClock()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def record_store():
    return InMemorySessionRecordStore()


@pytest.fixture
def profile_store():
    return InMemoryProfileStore()


@pytest.fixture
def achievement_store():
    return InMemoryAchievementStateStore()


@pytest.fixture
def json_record_store(tmp_path):
    return JsonSessionRecordStore(tmp_path)


@pytest.fixture
def json_profile_store(tmp_path):
    return JsonProfileStore(tmp_path)


@pytest.fixture
def json_achievement_store(tmp_path):
    return JsonAchievementStateStore(tmp_path)


@pytest.fixture
def service(record_store, profile_store, achievement_store):
    return TrainingService(
        record_store,
        profile_store,
        achievement_store,
        comprehension_bar=None,
        now_provider=lambda: NOW,
    )


@pytest.fixture
def events():
    """События движка: engine.add_listener(events.append)"""
    return []
