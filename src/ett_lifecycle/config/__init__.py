"""Configuration for ett-lifecycle."""

from .constants import (
    WAITING_ROOM_ID,
    ConfigName,
    ConfigType,
    Role,
    YN,
)
from .settings import EttSettings, get_settings
from .app_config import AppConfig, AppConfigurations
from .logging_config import LoggingConfig, setup_logging, get_logger

__all__ = [
    "WAITING_ROOM_ID",
    "ConfigName",
    "ConfigType",
    "Role",
    "YN",
    "EttSettings",
    "get_settings",
    "AppConfig",
    "AppConfigurations",
    "LoggingConfig",
    "setup_logging",
    "get_logger",
]
