"""Утилиты и вспомогательные функции"""

from .error_handlers import (
    TrainerError,
    InvalidConfigurationError,
    PersistenceError,
    ErrorHandler,
)
from .date_helpers import (
    get_timezone,
    local_date,
    local_datetime,
    local_now,
)
from .file_helpers import (
    save_json,
    load_json,
    delete_file,
    generate_unique_id,
    get_user_dir,
)

__all__ = [
    # Errors
    "TrainerError",
    "InvalidConfigurationError",
    "PersistenceError",
    "ErrorHandler",
    # Files
    "save_json",
    "load_json",
    "delete_file",
    "generate_unique_id",
    "get_user_dir",
    # Dates
    "get_timezone",
    "local_date",
    "local_datetime",
    "local_now",
]
