"""Entity feature: registered organizations."""

from .entities.entity import Entity
from .entities.protocols import EntityRepository
from .repositories.entity_repository import EntityDatabaseRepository

__all__ = ["Entity", "EntityRepository", "EntityDatabaseRepository"]
