from datetime import datetime, timezone

import pytest

from conftest import NOW, USER_ID, days_ago, make_record
from speedtrainer.core.models import UserProfile
from speedtrainer.core.streak_calculator import StreakCalculator
from speedtrainer.utils.date_helpers import get_timezone
from speedtrainer.utils.error_handlers import InvalidConfigurationError


@pytest.fixture
def calculator(record_store, profile_store):
    profile_store.upsert(UserProfile(id=USER_ID))
    return StreakCalculator(record_store, profile_store, now_provider=lambda: NOW)


def test_three_consecutive_days(record_store, profile_store, calculator):
    for days in (0, 1, 2):
        record_store.append(make_record(days_ago(days)))

    assert calculator.update_streak(USER_ID) == (3, 3)

    profile = profile_store.get(USER_ID)
    assert profile.current_streak == 3
    assert profile.longest_streak == 3
    assert profile.last_training_date == days_ago(0)


def test_gap_breaks_streak(record_store, calculator):
    record_store.append(make_record(days_ago(0)))
    record_store.append(make_record(days_ago(2)))

    assert calculator.update_streak(USER_ID) == (1, 1)


def test_no_session_today_means_zero(record_store, calculator):
    for days in (1, 2, 3, 4):
        record_store.append(make_record(days_ago(days)))

    current, _ = calculator.update_streak(USER_ID)
    assert current == 0


def test_several_sessions_on_one_day_count_once(record_store, calculator):
    record_store.append(make_record(days_ago(0, hour=8)))
    record_store.append(make_record(days_ago(0, hour=20)))
    record_store.append(make_record(days_ago(1)))

    assert calculator.update_streak(USER_ID) == (2, 2)


def test_longest_never_decreases(record_store, profile_store, calculator):
    profile = profile_store.get(USER_ID)
    profile.longest_streak = 12
    profile_store.upsert(profile)

    record_store.append(make_record(days_ago(0)))

    assert calculator.update_streak(USER_ID) == (1, 12)
    assert profile_store.get(USER_ID).longest_streak == 12


def test_empty_history_keeps_longest(profile_store, calculator):
    profile = profile_store.get(USER_ID)
    profile.longest_streak = 4
    profile_store.upsert(profile)

    assert calculator.update_streak(USER_ID) == (0, 4)


def test_missing_profile_writes_nothing(record_store, profile_store):
    record_store.append(make_record(days_ago(0), user_id="ghost"))
    calculator = StreakCalculator(record_store, profile_store, now_provider=lambda: NOW)

    assert calculator.update_streak("ghost") == (0, 0)
    assert profile_store.get("ghost") is None


def test_days_follow_user_timezone(record_store, profile_store):
    profile_store.upsert(UserProfile(id=USER_ID))
    tz = get_timezone("Asia/Tokyo")
    # 20:00 UTC 14 марта это уже 15 марта в Токио
    record_store.append(make_record(datetime(2026, 3, 14, 20, 0, tzinfo=timezone.utc)))
    record_store.append(make_record(datetime(2026, 3, 13, 20, 0, tzinfo=timezone.utc)))

    calculator = StreakCalculator(
        record_store, profile_store, tz=tz,
        now_provider=lambda: datetime(2026, 3, 15, 9, 0, tzinfo=tz),
    )

    assert calculator.update_streak(USER_ID) == (2, 2)


def test_unknown_timezone_is_rejected():
    assert get_timezone(None) is None
    with pytest.raises(InvalidConfigurationError):
        get_timezone("Mars/Olympus_Mons")
