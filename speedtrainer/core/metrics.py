"""
Метрики скорости чтения и понимания
Чистые функции без состояния
"""

import math
from enum import Enum
from typing import Optional, Sequence

from speedtrainer.config.settings import DEFAULT_WPM


class SpeedCategory(str, Enum):
    """Категория скорости чтения"""
    SLOW = "slow"
    AVERAGE = "average"
    GOOD = "good"
    EXCELLENT = "excellent"
    EXCEPTIONAL = "exceptional"

    @property
    def message(self) -> str:
        """Мотивирующее сообщение для экрана результатов"""
        return _SPEED_MESSAGES[self]


_SPEED_MESSAGES = {
    SpeedCategory.SLOW: "Keep practicing! You're building your foundation.",
    SpeedCategory.AVERAGE: "You're reading at an average pace. Great start!",
    SpeedCategory.GOOD: "Good speed! You're faster than most readers.",
    SpeedCategory.EXCELLENT: "Excellent! Your speed is impressive.",
    SpeedCategory.EXCEPTIONAL: "Exceptional! You're a speed reading master!",
}

# Нижние границы категорий (включительно), по убыванию
_SPEED_BANDS = (
    (500, SpeedCategory.EXCEPTIONAL),
    (400, SpeedCategory.EXCELLENT),
    (300, SpeedCategory.GOOD),
    (200, SpeedCategory.AVERAGE),
)


def compute_speed(words_read: int, elapsed_seconds: float) -> int:
    """
    Скорость чтения в словах в минуту

    Args:
        words_read: Прочитано слов
        elapsed_seconds: Затрачено секунд

    Returns:
        WPM, округлённое до целого. 0 если время не положительное
    """
    if elapsed_seconds <= 0 or words_read <= 0:
        return 0
    return int(round(words_read / elapsed_seconds * 60))


def classify_speed(wpm: int) -> SpeedCategory:
    """Категория скорости: границы включают нижнее значение и исключают верхнее"""
    for lower_bound, category in _SPEED_BANDS:
        if wpm >= lower_bound:
            return category
    return SpeedCategory.SLOW


def estimated_reading_time(word_count: int, wpm: int = DEFAULT_WPM) -> int:
    """
    Оценка времени чтения текста

    Returns:
        Минуты, округлённые вверх. 0 если скорость не положительная
    """
    if wpm <= 0 or word_count <= 0:
        return 0
    return math.ceil(word_count / wpm)


def score_comprehension(correct_indices: Sequence[int], answers: Sequence[Optional[int]]) -> float:
    """
    Доля правильных ответов в тесте на понимание

    Args:
        correct_indices: Индексы правильных вариантов по вопросам
        answers: Выбранные варианты (None если вопрос пропущен)

    Returns:
        Число от 0.0 до 1.0. 0.0 если вопросов нет
    """
    if not correct_indices:
        return 0.0
    correct = sum(
        1 for expected, given in zip(correct_indices, answers)
        if given is not None and given == expected
    )
    return correct / len(correct_indices)


def grid_accuracy(grid_size: int, rounds_played: int, mistakes: int) -> float:
    """Точность нажатий в таблицах Шульте, от 0.0 до 1.0"""
    total_taps = grid_size * grid_size * rounds_played
    if total_taps <= 0:
        return 0.0
    return max(0.0, (total_taps - mistakes) / total_taps)
