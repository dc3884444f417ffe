"""
Настройка логирования для оболочки, которая использует тренажёр
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from speedtrainer.config.settings import (
    LOG_FILE,
    LOG_LEVEL,
    LOG_FORMAT,
    CLEAR_LOGS_ON_START,
    MAX_LOG_SIZE,
    MAX_LOG_BACKUPS,
)


def clear_log_file(log_file: Path = LOG_FILE):
    """
    Очистка файла логов при старте
    Позволяет видеть только логи текущего запуска
    """
    if log_file.exists():
        try:
            log_file.unlink()
        except OSError as e:
            logging.getLogger(__name__).warning(f"⚠️ Не удалось очистить логи: {e}")


def setup_logging(log_file: Optional[Path] = None, clear_on_start: Optional[bool] = None) -> logging.Logger:
    """
    Настройка логирования в файл и консоль

    Поведение:
    - clear_on_start=True: лог очищается при старте, простой FileHandler
    - clear_on_start=False: RotatingFileHandler с ротацией по размеру

    Args:
        log_file: Путь к файлу логов (по умолчанию из настроек)
        clear_on_start: Переопределить CLEAR_LOGS_ON_START

    Returns:
        Логгер пакета speedtrainer
    """
    log_file = log_file or LOG_FILE
    clear = CLEAR_LOGS_ON_START if clear_on_start is None else clear_on_start

    # FileHandler не создаёт папку сам
    log_file.parent.mkdir(parents=True, exist_ok=True)

    if clear:
        clear_log_file(log_file)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=MAX_LOG_SIZE,
            backupCount=MAX_LOG_BACKUPS,
            encoding="utf-8"
        )

    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format=LOG_FORMAT,
        handlers=[
            file_handler,
            logging.StreamHandler()
        ]
    )

    logger = logging.getLogger("speedtrainer")
    logger.info("=" * 60)
    logger.info("📖 Тренажёр скорочтения")
    logger.info("=" * 60)
    logger.info(f"📁 Логи пишутся в: {log_file}")

    if clear:
        logger.info("🧹 Режим РАЗРАБОТКИ: логи очищаются при старте")
    else:
        logger.info(f"🔄 Режим ПРОДАКШЕНА: ротация логов (max {MAX_LOG_SIZE} байт, backup: {MAX_LOG_BACKUPS})")

    return logger
