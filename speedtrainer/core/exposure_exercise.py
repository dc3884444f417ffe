"""
Упражнение Exposure: быстрый показ слов окнами по N слов в заданном темпе
"""

import logging
import math
from typing import Optional

from speedtrainer.config.settings import (
    DEFAULT_WPM,
    EXPOSURE_MIN_WPM,
    EXPOSURE_MAX_WPM,
    EXPOSURE_WORDS_PER_DISPLAY,
)
from speedtrainer.core.clock import Clock
from speedtrainer.core.exercise_session import ExerciseSession
from speedtrainer.core.models import Difficulty, ExerciseKind, ExerciseResult, ExerciseSettings
from speedtrainer.core.text_segmentation import split_words, window_text
from speedtrainer.utils.error_handlers import InvalidConfigurationError

logger = logging.getLogger(__name__)


class ExposureExercise(ExerciseSession):
    """
    Быстрый показ слов

    Каждые 60 / (wpm / N) секунд указатель сдвигается на N слов.
    Упражнение завершается, когда указатель дошёл до конца текста
    или вышло время, смотря что раньше
    """

    kind = ExerciseKind.EXPOSURE

    def __init__(
        self,
        clock: Clock,
        content: str,
        target_wpm: int = DEFAULT_WPM,
        words_per_display: int = 1,
        duration_seconds: int = 300,
        text_id: Optional[str] = None,
        text_category: Optional[str] = None,
        difficulty: Optional[Difficulty] = None,
    ):
        if not EXPOSURE_MIN_WPM <= target_wpm <= EXPOSURE_MAX_WPM:
            raise InvalidConfigurationError(
                "target_wpm", target_wpm,
                f"темп должен быть от {EXPOSURE_MIN_WPM} до {EXPOSURE_MAX_WPM} слов в минуту"
            )
        if words_per_display not in EXPOSURE_WORDS_PER_DISPLAY:
            raise InvalidConfigurationError(
                "words_per_display", words_per_display,
                f"допустимо {', '.join(map(str, EXPOSURE_WORDS_PER_DISPLAY))}"
            )

        super().__init__(clock, duration_seconds)

        self.target_wpm = target_wpm
        self.words_per_display = words_per_display
        self.text_id = text_id
        self.text_category = text_category
        self.difficulty = difficulty

        self.words = split_words(content)
        self.pointer = 0

        logger.info(
            f"✅ ExposureExercise создано: слов={len(self.words)}, темп={target_wpm} wpm, "
            f"по {words_per_display} слов, лимит={duration_seconds} сек"
        )

    @property
    def pacing_interval(self) -> float:
        return 60.0 / (self.target_wpm / self.words_per_display)

    @property
    def words_read(self) -> int:
        return min(self.pointer, len(self.words))

    @property
    def display(self) -> str:
        return window_text(self.words, self.pointer, self.words_per_display)

    @property
    def progress(self) -> float:
        if not self.words:
            return 0.0
        return self.words_read / len(self.words)

    def settings_snapshot(self) -> ExerciseSettings:
        return ExerciseSettings(
            speed=self.target_wpm,
            words_per_display=self.words_per_display,
            difficulty=self.difficulty,
            text_id=self.text_id,
            text_category=self.text_category,
        )

    def _reset_counters(self):
        self.pointer = 0

    def _advance(self):
        if self.pointer < len(self.words):
            self.pointer += self.words_per_display

    def _has_content(self) -> bool:
        return bool(self.words)

    def _is_finished(self) -> bool:
        return self.pointer >= len(self.words)

    def _build_result(self) -> ExerciseResult:
        return ExerciseResult(
            kind=self.kind,
            elapsed_seconds=self.elapsed_seconds,
            active_seconds=self.active_seconds(),
            words_read=self.words_read,
            units_covered=math.ceil(self.words_read / self.words_per_display),
            total_units=math.ceil(len(self.words) / self.words_per_display),
            settings=self.settings_snapshot(),
        )
