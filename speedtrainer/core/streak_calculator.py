"""
Серии тренировок: сколько календарных дней подряд, заканчивая сегодняшним,
у пользователя есть хотя бы одна сессия
"""

import logging
from datetime import datetime, timedelta, tzinfo
from typing import Callable, Optional, Tuple

from speedtrainer.config.settings import TIMEZONE
from speedtrainer.core.profile_manager import ProfileStore
from speedtrainer.core.session_store import SessionRecordStore
from speedtrainer.utils.date_helpers import get_timezone, local_date, local_now

logger = logging.getLogger(__name__)


class StreakCalculator:
    """
    Пересчитывает текущую и лучшую серию и записывает их в профиль

    Если сегодня сессий ещё не было, текущая серия равна 0 независимо
    от предыдущих дней. Лучшая серия никогда не уменьшается
    """

    def __init__(
        self,
        record_store: SessionRecordStore,
        profile_store: ProfileStore,
        tz: Optional[tzinfo] = None,
        now_provider: Optional[Callable[[], datetime]] = None,
    ):
        self.record_store = record_store
        self.profile_store = profile_store
        self.tz = tz if tz is not None else get_timezone(TIMEZONE)
        self._now = now_provider or (lambda: local_now(self.tz))

    def update_streak(self, user_id: str) -> Tuple[int, int]:
        """
        Пересчитать серии пользователя

        Args:
            user_id: ID пользователя

        Returns:
            (текущая серия, лучшая серия); (0, 0) если профиля нет
        """
        profile = self.profile_store.get(user_id)
        if profile is None:
            logger.warning(f"⚠️ Профиль {user_id} не найден, серия не считается")
            return 0, 0

        records = self.record_store.list_by_user(user_id)
        if not records:
            return 0, profile.longest_streak

        training_days = sorted({local_date(r.completed_at, self.tz) for r in records}, reverse=True)
        today = local_date(self._now(), self.tz)

        current = 0
        for index, day in enumerate(training_days):
            if day != today - timedelta(days=index):
                break
            current += 1

        profile.current_streak = current
        profile.longest_streak = max(profile.longest_streak, current)
        profile.last_training_date = records[0].completed_at
        self.profile_store.upsert(profile)

        logger.info(f"🔥 Серия пользователя {user_id}: текущая={current}, лучшая={profile.longest_streak}")
        return current, profile.longest_streak
