"""
Профиль пользователя: хранилище и операции над ним
Сохранение в файловой системе: data/users/{user_id}/profile.json
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from pydantic import ValidationError

from speedtrainer.config.settings import DATA_DIR
from speedtrainer.core.achievements import AchievementStateStore
from speedtrainer.core.models import UserPreferences, UserProfile
from speedtrainer.core.session_store import SessionRecordStore
from speedtrainer.utils.error_handlers import InvalidConfigurationError, PersistenceError
from speedtrainer.utils.file_helpers import get_user_dir, load_json, save_json

logger = logging.getLogger(__name__)


# ============================================================================
# ХРАНИЛИЩА ПРОФИЛЕЙ
# ============================================================================

class ProfileStore(ABC):

    @abstractmethod
    def get(self, user_id: str) -> Optional[UserProfile]:
        """Профиль пользователя или None"""

    @abstractmethod
    def upsert(self, profile: UserProfile) -> None:
        """Создать или перезаписать профиль"""


class InMemoryProfileStore(ProfileStore):

    def __init__(self):
        self._profiles: Dict[str, UserProfile] = {}

    def get(self, user_id: str) -> Optional[UserProfile]:
        profile = self._profiles.get(user_id)
        return profile.model_copy(deep=True) if profile else None

    def upsert(self, profile: UserProfile) -> None:
        self._profiles[profile.id] = profile.model_copy(deep=True)


class JsonProfileStore(ProfileStore):

    def __init__(self, data_dir: Path = DATA_DIR):
        self.data_dir = Path(data_dir)

    def _get_profile_file(self, user_id: str) -> Path:
        return get_user_dir(self.data_dir, user_id) / "profile.json"

    def get(self, user_id: str) -> Optional[UserProfile]:
        data = load_json(self._get_profile_file(user_id))
        if data is None:
            return None
        try:
            return UserProfile.model_validate(data)
        except ValidationError as e:
            logger.error(f"❌ Повреждённый профиль пользователя {user_id}: {e}")
            raise PersistenceError("load_profile", str(e)) from e

    def upsert(self, profile: UserProfile) -> None:
        save_json(self._get_profile_file(profile.id), profile.model_dump(mode='json'))
        logger.debug(f"💾 Профиль {profile.id} сохранён")


# ============================================================================
# МЕНЕДЖЕР ПРОФИЛЯ
# ============================================================================

class ProfileManager:
    """
    Операции над профилем: создание, правки пользователя, полное удаление данных
    """

    def __init__(
        self,
        profile_store: ProfileStore,
        record_store: Optional[SessionRecordStore] = None,
        achievement_store: Optional[AchievementStateStore] = None,
    ):
        self.profile_store = profile_store
        self.record_store = record_store
        self.achievement_store = achievement_store

    def get_or_create_profile(self, user_id: str, username: Optional[str] = None) -> UserProfile:
        """
        Получить профиль, при отсутствии создать новый

        Args:
            user_id: ID пользователя
            username: Имя для нового профиля (по умолчанию "Reader")

        Returns:
            UserProfile
        """
        profile = self.profile_store.get(user_id)
        if profile is not None:
            return profile

        fields = {"id": user_id}
        if username:
            fields["username"] = username.strip()
        profile = UserProfile(**fields)
        self.profile_store.upsert(profile)

        logger.info(f"📝 Создан профиль пользователя {user_id} ({profile.username})")
        return profile

    def update_username(self, user_id: str, username: str) -> UserProfile:
        username = (username or "").strip()
        if not username:
            raise InvalidConfigurationError("username", username, "имя не может быть пустым")

        profile = self.get_or_create_profile(user_id)
        profile.username = username
        self.profile_store.upsert(profile)
        logger.info(f"✏️ Имя пользователя {user_id} изменено на '{username}'")
        return profile

    def update_language(self, user_id: str, language: str) -> UserProfile:
        profile = self.get_or_create_profile(user_id)
        profile.language = language
        self.profile_store.upsert(profile)
        return profile

    def update_preferences(self, user_id: str, **changes) -> UserProfile:
        """
        Изменить настройки пользователя

        Args:
            user_id: ID пользователя
            **changes: Поля UserPreferences (theme, font_size, reminder_days, ...)

        Returns:
            Обновлённый UserProfile
        """
        unknown = set(changes) - set(UserPreferences.model_fields)
        if unknown:
            raise InvalidConfigurationError("preferences", sorted(unknown), "неизвестные настройки")

        profile = self.get_or_create_profile(user_id)
        try:
            profile.preferences = UserPreferences.model_validate(
                {**profile.preferences.model_dump(), **changes}
            )
        except ValidationError as e:
            raise InvalidConfigurationError("preferences", changes, str(e)) from e

        self.profile_store.upsert(profile)
        logger.info(f"⚙️ Настройки пользователя {user_id} обновлены: {', '.join(sorted(changes))}")
        return profile

    def delete_all_data(self, user_id: str) -> int:
        """
        Удалить историю сессий, сбросить достижения и серии

        Returns:
            Количество удалённых сессий
        """
        removed = 0
        if self.record_store is not None:
            removed = self.record_store.delete_all_for_user(user_id)

        if self.achievement_store is not None:
            self.achievement_store.clear(user_id)

        profile = self.profile_store.get(user_id)
        if profile is not None:
            profile.current_streak = 0
            profile.longest_streak = 0
            profile.last_training_date = None
            self.profile_store.upsert(profile)

        logger.warning(f"🗑️ Все данные пользователя {user_id} удалены (сессий: {removed})")
        return removed
