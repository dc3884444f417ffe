"""
Обработка завершённого упражнения

Порядок строго последовательный: запись сессии -> пересчёт статистики ->
серия в профиле -> проверка достижений. Если запись не сохранилась,
остальные шаги не выполняются
"""

import logging
from datetime import datetime, tzinfo
from typing import Callable, Dict, List, Optional

from speedtrainer.config.settings import COMPREHENSION_BAR, TIMEZONE
from speedtrainer.core.achievements import AchievementEvaluator, AchievementStateStore, UnlockListener
from speedtrainer.core.exercise_session import ExerciseSession
from speedtrainer.core.metrics import compute_speed
from speedtrainer.core.models import (
    ExerciseKind,
    ExerciseResult,
    ExerciseSettings,
    SessionRecord,
    TrainingOutcome,
)
from speedtrainer.core.profile_manager import ProfileManager, ProfileStore
from speedtrainer.core.session_store import SessionRecordStore
from speedtrainer.core.statistics_service import StatisticsService
from speedtrainer.core.streak_calculator import StreakCalculator
from speedtrainer.utils.date_helpers import get_timezone, local_now
from speedtrainer.utils.error_handlers import InvalidConfigurationError, PersistenceError
from speedtrainer.utils.file_helpers import generate_unique_id

logger = logging.getLogger(__name__)


class TrainingService:
    """
    Связывает хранилища, статистику, серии и достижения

    Один экземпляр на процесс, передаётся потребителям явно
    """

    def __init__(
        self,
        record_store: SessionRecordStore,
        profile_store: ProfileStore,
        achievement_store: Optional[AchievementStateStore] = None,
        comprehension_bar: Optional[float] = COMPREHENSION_BAR,
        tz: Optional[tzinfo] = None,
        now_provider: Optional[Callable[[], datetime]] = None,
    ):
        self.record_store = record_store
        self.profile_store = profile_store
        self.achievement_store = achievement_store
        self.tz = tz if tz is not None else get_timezone(TIMEZONE)
        self._now = now_provider or (lambda: local_now(self.tz))

        self.statistics = StatisticsService(record_store, comprehension_bar, self.tz, self._now)
        self.streaks = StreakCalculator(record_store, profile_store, self.tz, self._now)
        self.profiles = ProfileManager(profile_store, record_store, achievement_store)

        self._evaluators: Dict[str, AchievementEvaluator] = {}
        self._unlock_listeners: List[UnlockListener] = []

    # ========================================================================
    # ДОСТИЖЕНИЯ
    # ========================================================================

    def evaluator_for(self, user_id: str) -> AchievementEvaluator:
        """Проверяющий достижения пользователя (создаётся один раз)"""
        evaluator = self._evaluators.get(user_id)
        if evaluator is None:
            evaluator = AchievementEvaluator(user_id, self.achievement_store, self._now)
            for listener in self._unlock_listeners:
                evaluator.add_listener(listener)
            self._evaluators[user_id] = evaluator
        return evaluator

    def add_unlock_listener(self, listener: UnlockListener):
        self._unlock_listeners.append(listener)
        for evaluator in self._evaluators.values():
            evaluator.add_listener(listener)

    # ========================================================================
    # ЗАВЕРШЕНИЕ УПРАЖНЕНИЙ
    # ========================================================================

    def complete_exercise(
        self,
        user_id: str,
        result: ExerciseResult,
        comprehension_score: Optional[float] = None,
        completed_at: Optional[datetime] = None,
    ) -> TrainingOutcome:
        """
        Сохранить результат упражнения и прогнать пост-обработку

        Args:
            user_id: ID пользователя
            result: Сырой результат движка
            comprehension_score: Доля правильных ответов теста (если был)
            completed_at: Время завершения (по умолчанию сейчас)

        Returns:
            TrainingOutcome

        Raises:
            InvalidConfigurationError: оценка понимания вне [0, 1]
            PersistenceError: запись не сохранилась, статистика не пересчитана
        """
        if comprehension_score is not None and not 0.0 <= comprehension_score <= 1.0:
            raise InvalidConfigurationError("comprehension_score", comprehension_score, "должно быть от 0 до 1")

        wpm = None
        if result.words_read is not None:
            wpm = compute_speed(result.words_read, result.elapsed_seconds)

        record = SessionRecord(
            id=generate_unique_id(),
            user_id=user_id,
            completed_at=completed_at or self._now(),
            kind=result.kind,
            duration_seconds=result.elapsed_seconds,
            words_read=result.words_read,
            wpm=wpm,
            comprehension_score=comprehension_score,
            settings=result.settings,
        )

        try:
            self.record_store.append(record)
        except PersistenceError as e:
            logger.error(f"❌ Сессия пользователя {user_id} не сохранена, пост-обработка пропущена: {e}")
            raise

        logger.info(f"💾 Сессия {record.kind.value} пользователя {user_id} записана: {record.words_read} слов, {record.wpm} wpm")
        return self._after_record(user_id, record)

    def record_free_reading(
        self,
        user_id: str,
        words_read: int,
        seconds: int,
        comprehension_score: Optional[float] = None,
        text_id: Optional[str] = None,
        text_category: Optional[str] = None,
        completed_at: Optional[datetime] = None,
    ) -> TrainingOutcome:
        """Записать свободное чтение текста из библиотеки"""
        if words_read < 0:
            raise InvalidConfigurationError("words_read", words_read, "не может быть отрицательным")
        if seconds < 0:
            raise InvalidConfigurationError("seconds", seconds, "не может быть отрицательным")

        result = ExerciseResult(
            kind=ExerciseKind.FREE_READING,
            elapsed_seconds=seconds,
            active_seconds=float(seconds),
            words_read=words_read,
            settings=ExerciseSettings(text_id=text_id, text_category=text_category),
        )
        return self.complete_exercise(user_id, result, comprehension_score, completed_at)

    def cancel_exercise(self, engine: ExerciseSession) -> bool:
        """Отменить упражнение, ничего не сохраняя"""
        cancelled = engine.cancel()
        if cancelled:
            logger.info(f"🛑 Упражнение {engine.kind.value} отменено пользователем, запись не создана")
        return cancelled

    def _after_record(self, user_id: str, record: SessionRecord) -> TrainingOutcome:
        statistics = self.statistics.compute_statistics(user_id)

        has_profile = self.profile_store.get(user_id) is not None
        current_streak, longest_streak = self.streaks.update_streak(user_id)

        unlocked = self.evaluator_for(user_id).check_achievements(
            statistics,
            current_streak if has_profile else None,
        )

        return TrainingOutcome(
            record=record,
            statistics=statistics,
            current_streak=current_streak,
            longest_streak=longest_streak,
            unlocked=unlocked,
        )

    def delete_all_data(self, user_id: str) -> int:
        """Полное удаление данных пользователя"""
        removed = self.profiles.delete_all_data(user_id)
        self.evaluator_for(user_id).reset()
        return removed
