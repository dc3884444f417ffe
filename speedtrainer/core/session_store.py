"""
Хранилище завершённых сессий (журнал только на добавление)
Записи сохраняются в data/users/{user_id}/sessions.json
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError

from speedtrainer.config.settings import DATA_DIR
from speedtrainer.core.models import SessionRecord
from speedtrainer.utils.error_handlers import PersistenceError
from speedtrainer.utils.file_helpers import delete_file, get_user_dir, load_json, save_json

logger = logging.getLogger(__name__)


def _newest_first(records: List[SessionRecord], limit: Optional[int]) -> List[SessionRecord]:
    # При равном времени раньше идёт запись, добавленная позже
    ordered = [
        record for _, record in sorted(
            enumerate(records),
            key=lambda pair: (pair[1].completed_at, pair[0]),
            reverse=True,
        )
    ]
    if limit is not None:
        return ordered[:max(limit, 0)]
    return ordered


class SessionRecordStore(ABC):
    """
    Интерфейс хранилища сессий

    Добавленная запись сразу видна следующему list_by_user в том же процессе
    """

    @abstractmethod
    def append(self, record: SessionRecord) -> None:
        """Добавить запись. Ошибка записи -> PersistenceError"""

    @abstractmethod
    def list_by_user(self, user_id: str, limit: Optional[int] = None) -> List[SessionRecord]:
        """Записи пользователя, самые свежие первыми"""

    @abstractmethod
    def delete_all_for_user(self, user_id: str) -> int:
        """Удалить все записи пользователя, вернуть сколько удалено"""


class InMemorySessionRecordStore(SessionRecordStore):
    """Хранилище в памяти процесса"""

    def __init__(self):
        self._records: Dict[str, List[SessionRecord]] = {}

    def append(self, record: SessionRecord) -> None:
        self._records.setdefault(record.user_id, []).append(record)
        logger.debug(f"💾 Сессия {record.id} добавлена в память для пользователя {record.user_id}")

    def list_by_user(self, user_id: str, limit: Optional[int] = None) -> List[SessionRecord]:
        return _newest_first(self._records.get(user_id, []), limit)

    def delete_all_for_user(self, user_id: str) -> int:
        removed = self._records.pop(user_id, [])
        return len(removed)


class JsonSessionRecordStore(SessionRecordStore):
    """Хранилище в JSON файлах, один файл на пользователя"""

    def __init__(self, data_dir: Path = DATA_DIR):
        self.data_dir = Path(data_dir)

    def _get_sessions_file(self, user_id: str) -> Path:
        """
        Путь к файлу сессий пользователя

        Args:
            user_id: ID пользователя

        Returns:
            Path к sessions.json
        """
        return get_user_dir(self.data_dir, user_id) / "sessions.json"

    def _load_raw(self, user_id: str) -> List[dict]:
        data = load_json(self._get_sessions_file(user_id), default=[])
        if not isinstance(data, list):
            raise PersistenceError("load_sessions", f"ожидался список сессий пользователя {user_id}")
        return data

    def append(self, record: SessionRecord) -> None:
        data = self._load_raw(record.user_id)
        data.append(record.model_dump(mode='json'))
        save_json(self._get_sessions_file(record.user_id), data)
        logger.info(f"💾 Сессия {record.id} сохранена на диск для пользователя {record.user_id}")

    def list_by_user(self, user_id: str, limit: Optional[int] = None) -> List[SessionRecord]:
        try:
            records = [SessionRecord.model_validate(item) for item in self._load_raw(user_id)]
        except ValidationError as e:
            logger.error(f"❌ Повреждённая запись сессии у пользователя {user_id}: {e}")
            raise PersistenceError("load_sessions", str(e)) from e

        logger.debug(f"📂 Загружено {len(records)} сессий пользователя {user_id}")
        return _newest_first(records, limit)

    def delete_all_for_user(self, user_id: str) -> int:
        count = len(self._load_raw(user_id))
        delete_file(self._get_sessions_file(user_id))
        logger.info(f"🗑️ Удалено {count} сессий пользователя {user_id}")
        return count
