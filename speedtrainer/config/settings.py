"""
Настройки тренажёра скорочтения
Значения читаются из переменных окружения (префикс SPEEDTRAINER_) и файла .env
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SPEEDTRAINER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Хранилище ---
    DATA_DIR: Path = BASE_DIR / "data"

    # --- Логирование ---
    LOGS_DIR: Path = BASE_DIR / "logs"
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    CLEAR_LOGS_ON_START: bool = True
    MAX_LOG_SIZE: int = 10 * 1024 * 1024
    MAX_LOG_BACKUPS: int = 5

    # --- Метрики ---
    DEFAULT_WPM: int = 250

    # Порог понимания для достижений типа comprehension_count.
    # Не задан -> такие достижения не оцениваются
    COMPREHENSION_BAR: Optional[float] = Field(default=None, ge=0.0, le=1.0)

    # Часовой пояс для границ календарного дня (None -> локальное время системы)
    TIMEZONE: Optional[str] = None


settings = Settings()


# ============================================================================
# КОНСТАНТЫ (импортируются модулями напрямую)
# ============================================================================

DATA_DIR = settings.DATA_DIR

LOGS_DIR = settings.LOGS_DIR
LOG_FILE = LOGS_DIR / "speedtrainer.log"
LOG_LEVEL = settings.LOG_LEVEL.upper()
LOG_FORMAT = settings.LOG_FORMAT
CLEAR_LOGS_ON_START = settings.CLEAR_LOGS_ON_START
MAX_LOG_SIZE = settings.MAX_LOG_SIZE
MAX_LOG_BACKUPS = settings.MAX_LOG_BACKUPS

DEFAULT_WPM = settings.DEFAULT_WPM
COMPREHENSION_BAR = settings.COMPREHENSION_BAR
TIMEZONE = settings.TIMEZONE

# Таймер прошедшего времени тикает раз в секунду
ELAPSED_TICK_SECONDS = 1.0

# Exposure (быстрый показ слов)
EXPOSURE_MIN_WPM = 100
EXPOSURE_MAX_WPM = 600
EXPOSURE_WORDS_PER_DISPLAY = (1, 2, 3)

# GridSearch (таблицы Шульте)
GRID_SIZES = (5, 7)
GRID_ROUNDS = (1, 3, 5)

# ChunkedReveal (чтение блоками)
CHUNK_MIN_SIZE = 2
CHUNK_MAX_SIZE = 5
CHUNK_MIN_INTERVAL = 0.7
CHUNK_MAX_INTERVAL = 2.0
CHUNK_SPEED_PRESETS = {
    "slow": 2.0,
    "medium": 1.5,
    "fast": 1.0,
    "very_fast": 0.7,
}
