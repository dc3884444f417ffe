"""
Ошибки тренажёра и их перевод в сообщения для слоя представления
Ядро не показывает ничего пользователю само: оно поднимает исключение,
а оболочка превращает его в текст через ErrorHandler
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class TrainerError(Exception):
    """Базовая ошибка тренажёра"""

    error_code = "TRAINER_ERROR"


class InvalidConfigurationError(TrainerError):
    """
    Неверные параметры упражнения (длительность, скорость, размер блока...)
    Поднимается при создании движка, значения никогда не подрезаются молча
    """

    error_code = "INVALID_CONFIGURATION"

    def __init__(self, field: str, value, message: str):
        self.field = field
        self.value = value
        super().__init__(f"{field}={value!r}: {message}")


class PersistenceError(TrainerError):
    """Хранилище не смогло прочитать или записать данные"""

    error_code = "PERSISTENCE_FAILED"

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation}: {reason}")


class ErrorHandler:
    """Преобразование ошибок ядра в словари для показа пользователю"""

    @staticmethod
    def describe(error: Exception, context: Optional[dict] = None) -> dict:
        """
        Описать ошибку для слоя представления

        Args:
            error: Исключение из ядра
            context: Дополнительный контекст (например, тип упражнения)

        Returns:
            Словарь с ключами user_message, error_code, retry_allowed
        """
        context = context or {}

        if isinstance(error, InvalidConfigurationError):
            return {
                'user_message': f"⚙️ Неверная настройка упражнения: {error.field} = {error.value}",
                'error_code': error.error_code,
                'retry_allowed': False,
                'field': error.field,
            }

        if isinstance(error, PersistenceError):
            logger.error(f"❌ Ошибка хранилища ({error.operation}): {error.reason}")
            return {
                'user_message': "💾 Не удалось сохранить результат. Статистика не обновлена, попробуй ещё раз.",
                'error_code': error.error_code,
                'retry_allowed': True,
            }

        logger.error(f"❌ Непредвиденная ошибка: {error}", exc_info=error)
        exercise = context.get('exercise')
        suffix = f" (упражнение: {exercise})" if exercise else ""
        return {
            'user_message': f"❌ Что-то пошло не так{suffix}. Попробуй позже.",
            'error_code': 'UNKNOWN',
            'retry_allowed': True,
        }
