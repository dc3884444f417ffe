"""
Достижения: фиксированный каталог и проверка условий разблокировки

Разблокировка однократная: is_unlocked больше не сбрасывается,
unlocked_at ставится ровно один раз. Состояние переживает перезапуск
через хранилище состояний достижений
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError

from speedtrainer.config.settings import DATA_DIR
from speedtrainer.core.models import (
    Achievement,
    AchievementCategory,
    AchievementId,
    Requirement,
    RequirementType,
    Statistics,
)
from speedtrainer.utils.error_handlers import PersistenceError
from speedtrainer.utils.file_helpers import delete_file, get_user_dir, load_json, save_json

logger = logging.getLogger(__name__)

UnlockListener = Callable[[Achievement], None]


# ============================================================================
# КАТАЛОГ
# ============================================================================

_CATALOG = [
    # Начало пути
    (AchievementId.FIRST_STEPS, "star.fill", AchievementCategory.GETTING_STARTED, RequirementType.SESSIONS_COMPLETED, 1),
    (AchievementId.SPEED_READER, "bolt.fill", AchievementCategory.GETTING_STARTED, RequirementType.SESSIONS_COMPLETED, 10),
    (AchievementId.DEDICATED_LEARNER, "book.fill", AchievementCategory.GETTING_STARTED, RequirementType.SESSIONS_COMPLETED, 50),
    (AchievementId.SPEED_MASTER, "crown.fill", AchievementCategory.GETTING_STARTED, RequirementType.SESSIONS_COMPLETED, 100),

    # Скорость
    (AchievementId.FAST_READER, "hare.fill", AchievementCategory.SPEED, RequirementType.SPEED_REACHED, 300),
    (AchievementId.SUPER_SPEEDY, "flame.fill", AchievementCategory.SPEED, RequirementType.SPEED_REACHED, 400),
    (AchievementId.LIGHTNING_FAST, "bolt.circle.fill", AchievementCategory.SPEED, RequirementType.SPEED_REACHED, 500),
    (AchievementId.UNSTOPPABLE_SPEED, "sparkles", AchievementCategory.SPEED, RequirementType.SPEED_REACHED, 600),

    # Понимание
    (AchievementId.GOOD_UNDERSTANDING, "brain.head.profile", AchievementCategory.COMPREHENSION, RequirementType.COMPREHENSION_COUNT, 5),
    (AchievementId.GREAT_COMPREHENSION, "brain.fill", AchievementCategory.COMPREHENSION, RequirementType.COMPREHENSION_COUNT, 5),
    (AchievementId.PERFECT_SCORE, "star.circle.fill", AchievementCategory.COMPREHENSION, RequirementType.COMPREHENSION_COUNT, 1),

    # Чтение
    (AchievementId.BOOK_WORM, "book.closed.fill", AchievementCategory.READING, RequirementType.WORDS_READ, 10_000),
    (AchievementId.AVID_READER, "books.vertical.fill", AchievementCategory.READING, RequirementType.WORDS_READ, 50_000),
    (AchievementId.READING_CHAMPION, "trophy.fill", AchievementCategory.READING, RequirementType.WORDS_READ, 100_000),
    (AchievementId.LIBRARY_MASTER, "building.columns.fill", AchievementCategory.READING, RequirementType.TEXTS_READ, 20),

    # Регулярность
    (AchievementId.WEEK_WARRIOR, "calendar", AchievementCategory.CONSISTENCY, RequirementType.STREAK_DAYS, 7),
    (AchievementId.MONTH_MASTER, "calendar.badge.clock", AchievementCategory.CONSISTENCY, RequirementType.STREAK_DAYS, 30),
    (AchievementId.UNSTOPPABLE_STREAK, "flame.circle.fill", AchievementCategory.CONSISTENCY, RequirementType.STREAK_DAYS, 100),

    # Разнообразие
    (AchievementId.EXPLORER, "map.fill", AchievementCategory.VARIETY, RequirementType.EXERCISES_COMPLETED, 3),
    (AchievementId.WELL_ROUNDED, "circle.grid.3x3.fill", AchievementCategory.VARIETY, RequirementType.CATEGORIES_READ, 5),
]


def build_catalog() -> List[Achievement]:
    """Новый экземпляр каталога со сброшенным прогрессом"""
    return [
        Achievement(
            id=achievement_id,
            name_key=f"achievement.{achievement_id.value}.name",
            description_key=f"achievement.{achievement_id.value}.description",
            icon=icon,
            category=category,
            requirement=Requirement(type=requirement_type, target_value=target),
        )
        for achievement_id, icon, category, requirement_type, target in _CATALOG
    ]


# ============================================================================
# ХРАНИЛИЩЕ СОСТОЯНИЯ
# ============================================================================

class AchievementStateStore(ABC):
    """Состояние разблокировки по пользователю: {id: {...}}"""

    @abstractmethod
    def load(self, user_id: str) -> Dict[str, dict]:
        """Сохранённое состояние (пустой словарь если ничего нет)"""

    @abstractmethod
    def save(self, user_id: str, achievements: List[Achievement]) -> None:
        """Сохранить состояние всех достижений"""

    @abstractmethod
    def clear(self, user_id: str) -> None:
        """Забыть состояние пользователя"""


def _dump_state(achievements: List[Achievement]) -> Dict[str, dict]:
    return {
        achievement.id.value: {
            "is_unlocked": achievement.is_unlocked,
            "unlocked_at": achievement.unlocked_at.isoformat() if achievement.unlocked_at else None,
            "current_value": achievement.requirement.current_value,
            "progress": achievement.progress,
        }
        for achievement in achievements
    }


class InMemoryAchievementStateStore(AchievementStateStore):

    def __init__(self):
        self._states: Dict[str, Dict[str, dict]] = {}

    def load(self, user_id: str) -> Dict[str, dict]:
        return {key: dict(value) for key, value in self._states.get(user_id, {}).items()}

    def save(self, user_id: str, achievements: List[Achievement]) -> None:
        self._states[user_id] = _dump_state(achievements)

    def clear(self, user_id: str) -> None:
        self._states.pop(user_id, None)


class JsonAchievementStateStore(AchievementStateStore):
    """Состояние в data/users/{user_id}/achievements.json"""

    def __init__(self, data_dir: Path = DATA_DIR):
        self.data_dir = Path(data_dir)

    def _get_state_file(self, user_id: str) -> Path:
        return get_user_dir(self.data_dir, user_id) / "achievements.json"

    def load(self, user_id: str) -> Dict[str, dict]:
        data = load_json(self._get_state_file(user_id), default={})
        if not isinstance(data, dict):
            raise PersistenceError("load_achievements", f"ожидался словарь достижений пользователя {user_id}")
        return data

    def save(self, user_id: str, achievements: List[Achievement]) -> None:
        save_json(self._get_state_file(user_id), _dump_state(achievements))

    def clear(self, user_id: str) -> None:
        delete_file(self._get_state_file(user_id))


# ============================================================================
# ПРОВЕРКА ДОСТИЖЕНИЙ
# ============================================================================

class AchievementEvaluator:
    """
    Сравнивает статистику с порогами каталога и разблокирует достижения

    Повторный вызов с той же статистикой ничего не разблокирует заново
    и не меняет unlocked_at
    """

    def __init__(
        self,
        user_id: str,
        state_store: Optional[AchievementStateStore] = None,
        now_provider: Callable[[], datetime] = datetime.now,
    ):
        self.user_id = user_id
        self.state_store = state_store
        self._now = now_provider
        self._listeners: List[UnlockListener] = []

        self.achievements: List[Achievement] = build_catalog()
        self.recently_unlocked: Optional[Achievement] = None

        if state_store is not None:
            self._restore(state_store.load(user_id))

    def _restore(self, saved: Dict[str, dict]):
        """Наложить сохранённое состояние на свежий каталог"""
        for achievement in self.achievements:
            state = saved.get(achievement.id.value)
            if not state:
                continue
            try:
                achievement.is_unlocked = bool(state.get("is_unlocked", False))
                unlocked_at = state.get("unlocked_at")
                achievement.unlocked_at = datetime.fromisoformat(unlocked_at) if unlocked_at else None
                achievement.requirement.current_value = int(state.get("current_value", 0))
                achievement.progress = achievement.requirement.progress
            except (TypeError, ValueError, ValidationError) as e:
                raise PersistenceError("restore_achievements", f"{achievement.id.value}: {e}") from e

        logger.debug(f"📂 Достижения пользователя {self.user_id}: разблокировано {self.unlocked_count}/{self.total_count}")

    def add_listener(self, listener: UnlockListener):
        self._listeners.append(listener)

    def _current_value(
        self,
        requirement_type: RequirementType,
        statistics: Statistics,
        current_streak: Optional[int],
    ) -> Optional[int]:
        """
        Текущее значение статистики для типа требования

        Returns:
            Значение или None, если измерение недоступно (достижение пропускается)
        """
        if requirement_type == RequirementType.SESSIONS_COMPLETED:
            return statistics.total_sessions
        if requirement_type == RequirementType.SPEED_REACHED:
            return statistics.best_wpm
        if requirement_type == RequirementType.WORDS_READ:
            return statistics.total_words_read
        if requirement_type == RequirementType.STREAK_DAYS:
            return current_streak
        if requirement_type == RequirementType.COMPREHENSION_COUNT:
            return statistics.comprehension_count
        if requirement_type == RequirementType.TEXTS_READ:
            return statistics.texts_read
        if requirement_type == RequirementType.EXERCISES_COMPLETED:
            return statistics.exercise_kinds_completed
        if requirement_type == RequirementType.CATEGORIES_READ:
            return statistics.categories_read
        return None

    def check_achievements(self, statistics: Statistics, current_streak: Optional[int] = None) -> Optional[Achievement]:
        """
        Проверить все ещё не разблокированные достижения

        Args:
            statistics: Свежая статистика пользователя
            current_streak: Текущая серия из профиля (None если профиля нет)

        Returns:
            Последнее разблокированное в этом вызове достижение или None
        """
        newly_unlocked: Optional[Achievement] = None
        now = self._now()

        for achievement in self.achievements:
            if achievement.is_unlocked:
                continue

            current_value = self._current_value(achievement.requirement.type, statistics, current_streak)
            if current_value is None:
                continue

            achievement.requirement.current_value = current_value
            achievement.progress = achievement.requirement.progress

            if current_value >= achievement.requirement.target_value:
                achievement.is_unlocked = True
                achievement.unlocked_at = now
                newly_unlocked = achievement
                logger.info(f"🏆 Достижение '{achievement.id.value}' разблокировано у пользователя {self.user_id}")

        if self.state_store is not None:
            self.state_store.save(self.user_id, self.achievements)

        if newly_unlocked is not None:
            self.recently_unlocked = newly_unlocked
            for listener in list(self._listeners):
                listener(newly_unlocked)

        return newly_unlocked

    def reset(self):
        """Сбросить прогресс (при полном удалении данных пользователя)"""
        self.achievements = build_catalog()
        self.recently_unlocked = None
        if self.state_store is not None:
            self.state_store.clear(self.user_id)
        logger.info(f"🧹 Достижения пользователя {self.user_id} сброшены")

    def get(self, achievement_id: AchievementId) -> Achievement:
        for achievement in self.achievements:
            if achievement.id == achievement_id:
                return achievement
        raise KeyError(achievement_id)

    def achievements_in(self, category: AchievementCategory) -> List[Achievement]:
        return [a for a in self.achievements if a.category == category]

    @property
    def unlocked_count(self) -> int:
        return sum(1 for a in self.achievements if a.is_unlocked)

    @property
    def total_count(self) -> int:
        return len(self.achievements)
