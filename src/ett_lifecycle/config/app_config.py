"""
Named application configurations.

Durations such as invitation expiry windows and stale vacancy limits come from
EttSettings, and can be overridden per deployment through rows in the config
table (name, value, config_type, description).
"""
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from .constants import ConfigName, ConfigType, Role
from .settings import EttSettings
from ..core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class AppConfig:
    """A single named configuration value."""
    name: str
    value: str
    config_type: ConfigType = ConfigType.STRING
    description: Optional[str] = None


class AppConfigurations:
    """Resolves named configurations from the settings object or the database."""

    def __init__(self, settings: EttSettings, database=None):
        self._settings = settings
        self._database = database
        self._cache: Dict[str, AppConfig] = {}

    def _from_settings(self, name: ConfigName) -> AppConfig:
        value = getattr(self._settings, name.value.lower(), None)
        if value is None:
            raise ConfigurationError(f"No configuration found for {name.value}")
        return AppConfig(name=name.value, value=str(value), config_type=ConfigType.DURATION)

    async def get_app_config(self, name: ConfigName) -> AppConfig:
        """Get a configuration, preferring a database row when enabled."""
        if name.value in self._cache:
            return self._cache[name.value]

        config = None
        if self._settings.config_from_database and self._database is not None:
            query = f"SELECT name, value, config_type, description FROM {self._settings.table(self._settings.config_table)} WHERE name = $1"
            row = await self._database.fetchrow(query, name.value)
            if row:
                config = AppConfig(
                    name=row["name"],
                    value=row["value"],
                    config_type=ConfigType(row["config_type"]),
                    description=row["description"],
                )
                logger.debug(f"Configuration {name.value} loaded from database")

        if config is None:
            config = self._from_settings(name)

        self._cache[name.value] = config
        return config

    async def get_duration(self, name: ConfigName) -> int:
        """Get a duration in seconds, 0 if the configuration is not a duration."""
        config = await self.get_app_config(name)
        if config.config_type != ConfigType.DURATION:
            logger.warning(f"Configuration {name.value} is not a duration ({config.config_type.value})")
            return 0
        try:
            return int(config.value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid duration for {name.value}: {config.value}") from e

    async def invitation_expire_after(self, role: Role) -> int:
        """Seconds an unregistered invitation for a role remains outstanding."""
        if role == Role.RE_ADMIN:
            return await self.get_duration(ConfigName.ASP_INVITATION_EXPIRE_AFTER)
        return await self.get_duration(ConfigName.AUTH_IND_INVITATION_EXPIRE_AFTER)

    async def stale_vacancy_after(self, role: Role) -> int:
        """Seconds a vacancy for a role may remain unfilled."""
        if role == Role.RE_ADMIN:
            return await self.get_duration(ConfigName.STALE_ASP_VACANCY)
        return await self.get_duration(ConfigName.STALE_AI_VACANCY)

    def clear_cache(self) -> None:
        self._cache.clear()
