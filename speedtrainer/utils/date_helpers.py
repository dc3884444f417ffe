"""
Работа с календарными днями пользователя
"""

import logging
from datetime import date, datetime, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .error_handlers import InvalidConfigurationError

logger = logging.getLogger(__name__)


def get_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """
    Часовой пояс по имени IANA

    Args:
        name: Имя пояса ("Europe/Moscow") или None для локального времени системы

    Returns:
        tzinfo или None
    """
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        logger.error(f"❌ Неизвестный часовой пояс: {name}")
        raise InvalidConfigurationError("TIMEZONE", name, "неизвестный часовой пояс") from e


def local_date(moment: datetime, tz: Optional[tzinfo] = None) -> date:
    """
    Календарный день момента времени в поясе пользователя

    Наивные datetime считаются уже локальными
    """
    if tz is not None and moment.tzinfo is not None:
        moment = moment.astimezone(tz)
    return moment.date()


def local_datetime(moment: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """
    Наивное местное время момента, чтобы сравнивать наивные и aware значения

    Args:
        moment: Момент времени (наивный считается уже локальным)
        tz: Часовой пояс пользователя (None - пояс системы)

    Returns:
        datetime без tzinfo
    """
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(tz).replace(tzinfo=None)


def local_now(tz: Optional[tzinfo] = None) -> datetime:
    """Текущее время в поясе пользователя (наивное если пояс не задан)"""
    if tz is None:
        return datetime.now()
    return datetime.now(tz)
