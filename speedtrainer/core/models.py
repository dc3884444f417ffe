"""
Модели данных тренажёра скорочтения
Используют Pydantic для валидации данных
"""

from datetime import datetime, time
from enum import Enum
from typing import List, Optional, Literal

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# ПЕРЕЧИСЛЕНИЯ
# ============================================================================

class ExerciseKind(str, Enum):
    """Тип упражнения"""
    EXPOSURE = "exposure"
    GRID_SEARCH = "grid_search"
    CHUNKED_REVEAL = "chunked_reveal"
    FREE_READING = "free_reading"


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class FontSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class ExerciseState(str, Enum):
    """Состояния движка упражнения"""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (ExerciseState.COMPLETED, ExerciseState.CANCELLED)


class AchievementCategory(str, Enum):
    GETTING_STARTED = "getting_started"
    SPEED = "speed"
    COMPREHENSION = "comprehension"
    READING = "reading"
    CONSISTENCY = "consistency"
    VARIETY = "variety"


class RequirementType(str, Enum):
    SESSIONS_COMPLETED = "sessions_completed"
    SPEED_REACHED = "speed_reached"
    COMPREHENSION_COUNT = "comprehension_count"
    WORDS_READ = "words_read"
    STREAK_DAYS = "streak_days"
    TEXTS_READ = "texts_read"
    EXERCISES_COMPLETED = "exercises_completed"
    CATEGORIES_READ = "categories_read"


class AchievementId(str, Enum):
    """Закрытый список достижений (тексты резолвит слой представления)"""
    FIRST_STEPS = "first_steps"
    SPEED_READER = "speed_reader"
    DEDICATED_LEARNER = "dedicated_learner"
    SPEED_MASTER = "speed_master"
    FAST_READER = "fast_reader"
    SUPER_SPEEDY = "super_speedy"
    LIGHTNING_FAST = "lightning_fast"
    UNSTOPPABLE_SPEED = "unstoppable_speed"
    GOOD_UNDERSTANDING = "good_understanding"
    GREAT_COMPREHENSION = "great_comprehension"
    PERFECT_SCORE = "perfect_score"
    BOOK_WORM = "book_worm"
    AVID_READER = "avid_reader"
    READING_CHAMPION = "reading_champion"
    LIBRARY_MASTER = "library_master"
    WEEK_WARRIOR = "week_warrior"
    MONTH_MASTER = "month_master"
    UNSTOPPABLE_STREAK = "unstoppable_streak"
    EXPLORER = "explorer"
    WELL_ROUNDED = "well_rounded"


# ============================================================================
# МОДЕЛИ СЕССИЙ
# ============================================================================

class ExerciseSettings(BaseModel):
    """
    Снимок настроек упражнения, с которыми прошла сессия
    Все поля необязательные: каждое упражнение заполняет только свои
    """
    model_config = ConfigDict(frozen=True)

    speed: Optional[int] = Field(default=None, ge=0, description="Темп показа, слов в минуту")
    words_per_display: Optional[int] = Field(default=None, ge=1, description="Слов в одном окне показа")
    chunk_size: Optional[int] = Field(default=None, ge=1, description="Слов в блоке")
    interval_seconds: Optional[float] = Field(default=None, gt=0, description="Интервал подсветки блока")
    grid_size: Optional[int] = Field(default=None, ge=1, description="Сторона таблицы")
    rounds: Optional[int] = Field(default=None, ge=1, description="Количество раундов")
    difficulty: Optional[Difficulty] = Field(default=None, description="Сложность")
    text_id: Optional[str] = Field(default=None, description="ID текста")
    text_category: Optional[str] = Field(default=None, description="Категория текста")


class SessionRecord(BaseModel):
    """
    Неизменяемая запись о завершённой сессии
    Создаётся один раз при завершении упражнения и больше не меняется
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Уникальный ID записи")
    user_id: str = Field(..., min_length=1, description="ID пользователя")
    completed_at: datetime = Field(..., description="Время завершения")
    kind: ExerciseKind = Field(..., description="Тип упражнения")
    duration_seconds: int = Field(..., ge=0, description="Длительность в целых секундах")
    words_read: Optional[int] = Field(default=None, ge=0, description="Прочитано слов")
    wpm: Optional[int] = Field(default=None, ge=0, description="Скорость, слов в минуту")
    comprehension_score: Optional[float] = Field(default=None, ge=0.0, le=1.0, description="Доля понимания")
    settings: ExerciseSettings = Field(default_factory=ExerciseSettings, description="Снимок настроек")


class SessionSummary(BaseModel):
    """Краткая сводка по одной сессии для истории"""
    date: datetime
    wpm: Optional[int] = None
    comprehension: Optional[float] = None
    words_read: int = 0


class Statistics(BaseModel):
    """
    Производная статистика пользователя
    Никогда не хранится, каждый раз пересчитывается из полной истории
    """
    user_id: str
    total_sessions: int = Field(default=0, ge=0)
    total_words_read: int = Field(default=0, ge=0)
    total_training_seconds: int = Field(default=0, ge=0)
    current_wpm: int = Field(default=0, ge=0, description="Скорость в самой свежей сессии")
    best_wpm: int = Field(default=0, ge=0)
    average_comprehension: float = Field(default=0.0, ge=0.0, le=1.0)
    best_comprehension: float = Field(default=0.0, ge=0.0, le=1.0)
    session_history: List[SessionSummary] = Field(default_factory=list)

    # Измерения уникальности для достижений разнообразия
    exercise_kinds_completed: int = Field(default=0, ge=0, description="Разных типов упражнений")
    texts_read: int = Field(default=0, ge=0, description="Разных текстов")
    categories_read: int = Field(default=0, ge=0, description="Разных категорий текстов")
    comprehension_count: Optional[int] = Field(
        default=None, ge=0,
        description="Сессий с пониманием не ниже порога (None если порог не задан)"
    )


# ============================================================================
# ПРОФИЛЬ ПОЛЬЗОВАТЕЛЯ
# ============================================================================

class UserPreferences(BaseModel):
    theme: Theme = Theme.SYSTEM
    font_size: FontSize = FontSize.MEDIUM
    font_family: str = "System"
    default_exercise_duration: int = Field(default=5, ge=1, description="Длительность по умолчанию, минут")
    preferred_difficulty: Difficulty = Difficulty.INTERMEDIATE
    notifications_enabled: bool = False
    reminder_time: Optional[time] = None
    reminder_days: List[Weekday] = Field(default_factory=list)


class UserProfile(BaseModel):
    """
    Профиль пользователя (один на установку)
    Меняется калькулятором серий и явными правками пользователя
    """
    id: str = Field(..., min_length=1, description="ID пользователя")
    username: str = Field(default="Reader", description="Отображаемое имя")
    created_at: datetime = Field(default_factory=datetime.now, description="Дата создания профиля")
    language: str = Field(default="en")
    current_streak: int = Field(default=0, ge=0, description="Текущая серия, дней")
    longest_streak: int = Field(default=0, ge=0, description="Лучшая серия, дней")
    last_training_date: Optional[datetime] = Field(default=None, description="Последняя тренировка")
    preferences: UserPreferences = Field(default_factory=UserPreferences)


# ============================================================================
# ДОСТИЖЕНИЯ
# ============================================================================

class Requirement(BaseModel):
    type: RequirementType
    target_value: int = Field(..., ge=1)
    current_value: int = Field(default=0, ge=0)

    @property
    def progress(self) -> float:
        """Прогресс от 0.0 до 1.0"""
        if self.target_value <= 0:
            return 0.0
        return min(self.current_value / self.target_value, 1.0)


class Achievement(BaseModel):
    id: AchievementId
    name_key: str
    description_key: str
    icon: str
    category: AchievementCategory
    requirement: Requirement
    is_unlocked: bool = False
    unlocked_at: Optional[datetime] = None
    progress: float = Field(default=0.0, ge=0.0, le=1.0)

    @property
    def progress_percentage(self) -> int:
        return int(self.progress * 100)


# ============================================================================
# РЕЗУЛЬТАТЫ И СОБЫТИЯ УПРАЖНЕНИЙ
# ============================================================================

class ExerciseResult(BaseModel):
    """
    Сырой результат завершённого упражнения
    Из него метрики и хранилище делают SessionRecord
    """
    kind: ExerciseKind
    elapsed_seconds: int = Field(..., ge=0, description="Секунд без учёта пауз")
    active_seconds: float = Field(default=0.0, ge=0.0, description="Точное активное время по часам движка")
    words_read: Optional[int] = Field(default=None, ge=0)
    units_covered: int = Field(default=0, ge=0, description="Окон / блоков / раундов пройдено")
    total_units: int = Field(default=0, ge=0)
    mistakes: int = Field(default=0, ge=0)
    round_durations: List[float] = Field(default_factory=list)
    settings: ExerciseSettings = Field(default_factory=ExerciseSettings)

    @property
    def best_round(self) -> float:
        return min(self.round_durations, default=0.0)

    @property
    def average_round(self) -> float:
        if not self.round_durations:
            return 0.0
        return sum(self.round_durations) / len(self.round_durations)


class ExerciseEvent(BaseModel):
    """Уведомление движка для слоя представления"""
    type: Literal["tick", "completed", "cancelled"]
    kind: ExerciseKind
    state: ExerciseState
    display: str = ""
    progress: float = Field(default=0.0, ge=0.0, le=1.0)
    elapsed_seconds: int = 0
    result: Optional[ExerciseResult] = None


class TrainingOutcome(BaseModel):
    """Итог обработки завершённого упражнения"""
    record: SessionRecord
    statistics: Statistics
    current_streak: int = 0
    longest_streak: int = 0
    unlocked: Optional[Achievement] = Field(default=None, description="Достижение, разблокированное этой сессией")
