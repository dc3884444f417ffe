"""
Утилиты для работы с файловой системой: сохранение/загрузка JSON
"""

import json
import logging
import os
import uuid
from pathlib import Path
from typing import Any, Optional

from speedtrainer.utils.error_handlers import PersistenceError


logger = logging.getLogger(__name__)


# ============================================================================
# РАБОТА С JSON ФАЙЛАМИ
# ============================================================================

def save_json(filepath: Path, data: Any) -> None:
    """
    Атомарно сохранить данные в JSON файл

    Сначала пишем во временный файл рядом, потом заменяем им целевой,
    чтобы при сбое не остался наполовину записанный документ

    Args:
        filepath: Путь к файлу
        data: Данные для сохранения

    Raises:
        PersistenceError: если запись не удалась
    """
    tmp_path = filepath.with_suffix(filepath.suffix + ".tmp")
    try:
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, filepath)

        logger.debug(f"💾 JSON сохранен: {filepath}")

    except (OSError, TypeError, ValueError) as e:
        logger.error(f"❌ Ошибка при сохранении JSON {filepath}: {e}")
        raise PersistenceError("save_json", str(e)) from e


def load_json(filepath: Path, default: Optional[Any] = None) -> Any:
    """
    Загрузить данные из JSON файла

    Args:
        filepath: Путь к файлу
        default: Значение по умолчанию если файл не существует

    Returns:
        Загруженные данные или default если файл не найден

    Raises:
        PersistenceError: если файл есть, но прочитать его нельзя
    """
    if not filepath.exists():
        logger.debug(f"⚠️ JSON файл не найден: {filepath}")
        return default

    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)

    except json.JSONDecodeError as e:
        logger.error(f"❌ Ошибка при парсинге JSON {filepath}: {e}")
        raise PersistenceError("load_json", f"повреждён файл {filepath.name}: {e}") from e

    except OSError as e:
        logger.error(f"❌ Ошибка при загрузке JSON {filepath}: {e}")
        raise PersistenceError("load_json", str(e)) from e

    logger.debug(f"📖 JSON загружен: {filepath}")
    return data


def delete_file(filepath: Path) -> bool:
    """
    Удалить файл если он существует

    Returns:
        True если файл был удалён, False если его не было
    """
    try:
        if filepath.exists():
            filepath.unlink()
            logger.info(f"🗑️ Файл удалён: {filepath}")
            return True
        return False

    except OSError as e:
        logger.error(f"❌ Ошибка при удалении {filepath}: {e}")
        raise PersistenceError("delete_file", str(e)) from e


# ============================================================================
# ВСПОМОГАТЕЛЬНЫЕ ФУНКЦИИ
# ============================================================================

def generate_unique_id() -> str:
    """Генерировать уникальный ID для записи сессии"""
    return str(uuid.uuid4())


def get_user_dir(data_dir: Path, user_id: str) -> Path:
    """
    Директория пользователя: {data_dir}/users/{user_id}

    Args:
        data_dir: Корень хранилища
        user_id: ID пользователя
    """
    return data_dir / "users" / str(user_id)
