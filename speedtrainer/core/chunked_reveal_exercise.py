"""
Упражнение ChunkedReveal: текст разбит на блоки, подсветка переходит
с блока на блок с фиксированным интервалом
"""

import logging
from typing import Optional

from speedtrainer.config.settings import (
    CHUNK_MIN_SIZE,
    CHUNK_MAX_SIZE,
    CHUNK_MIN_INTERVAL,
    CHUNK_MAX_INTERVAL,
    CHUNK_SPEED_PRESETS,
)
from speedtrainer.core.clock import Clock
from speedtrainer.core.exercise_session import ExerciseSession
from speedtrainer.core.models import Difficulty, ExerciseKind, ExerciseResult, ExerciseSettings
from speedtrainer.core.text_segmentation import chunk_words, split_words
from speedtrainer.utils.error_handlers import InvalidConfigurationError

logger = logging.getLogger(__name__)


def interval_for_preset(name: str) -> float:
    """
    Интервал подсветки для именованного темпа

    Args:
        name: slow | medium | fast | very_fast
    """
    try:
        return CHUNK_SPEED_PRESETS[name]
    except KeyError:
        raise InvalidConfigurationError(
            "speed_preset", name, f"допустимо {', '.join(CHUNK_SPEED_PRESETS)}"
        ) from None


class ChunkedRevealExercise(ExerciseSession):
    """
    Чтение блоками

    Указатель подсветки стоит на первом блоке и сдвигается на один блок
    за тик темпа. Завершение: подсветка дошла до последнего блока или вышло время
    """

    kind = ExerciseKind.CHUNKED_REVEAL

    def __init__(
        self,
        clock: Clock,
        content: str,
        chunk_size: int = 3,
        interval_seconds: float = 1.5,
        duration_seconds: int = 600,
        text_id: Optional[str] = None,
        text_category: Optional[str] = None,
        difficulty: Optional[Difficulty] = None,
    ):
        if not CHUNK_MIN_SIZE <= chunk_size <= CHUNK_MAX_SIZE:
            raise InvalidConfigurationError(
                "chunk_size", chunk_size, f"размер блока должен быть от {CHUNK_MIN_SIZE} до {CHUNK_MAX_SIZE}"
            )
        if not CHUNK_MIN_INTERVAL <= interval_seconds <= CHUNK_MAX_INTERVAL:
            raise InvalidConfigurationError(
                "interval_seconds", interval_seconds,
                f"интервал должен быть от {CHUNK_MIN_INTERVAL} до {CHUNK_MAX_INTERVAL} сек"
            )

        super().__init__(clock, duration_seconds)

        self.chunk_size = chunk_size
        self.interval_seconds = interval_seconds
        self.text_id = text_id
        self.text_category = text_category
        self.difficulty = difficulty

        self.chunks = chunk_words(split_words(content), chunk_size)
        self.current_chunk = 0

        logger.info(
            f"✅ ChunkedRevealExercise создано: блоков={len(self.chunks)}, размер={chunk_size}, "
            f"интервал={interval_seconds} сек, лимит={duration_seconds} сек"
        )

    @property
    def pacing_interval(self) -> float:
        return self.interval_seconds

    @property
    def chunks_read(self) -> int:
        if not self.chunks:
            return 0
        return min(self.current_chunk + 1, len(self.chunks))

    @property
    def words_read(self) -> int:
        return sum(len(chunk) for chunk in self.chunks[:self.chunks_read])

    @property
    def display(self) -> str:
        if not self.chunks:
            return ""
        return " ".join(self.chunks[self.current_chunk])

    @property
    def progress(self) -> float:
        if not self.chunks:
            return 0.0
        return self.chunks_read / len(self.chunks)

    def settings_snapshot(self) -> ExerciseSettings:
        return ExerciseSettings(
            chunk_size=self.chunk_size,
            interval_seconds=self.interval_seconds,
            difficulty=self.difficulty,
            text_id=self.text_id,
            text_category=self.text_category,
        )

    def _reset_counters(self):
        self.current_chunk = 0

    def _advance(self):
        if self.current_chunk < len(self.chunks) - 1:
            self.current_chunk += 1

    def _has_content(self) -> bool:
        return bool(self.chunks)

    def _is_finished(self) -> bool:
        return self.current_chunk >= len(self.chunks) - 1

    def _build_result(self) -> ExerciseResult:
        return ExerciseResult(
            kind=self.kind,
            elapsed_seconds=self.elapsed_seconds,
            active_seconds=self.active_seconds(),
            words_read=self.words_read,
            units_covered=self.chunks_read,
            total_units=len(self.chunks),
            settings=self.settings_snapshot(),
        )
