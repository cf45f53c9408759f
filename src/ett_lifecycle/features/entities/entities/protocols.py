"""Protocol interfaces for entity persistence."""

from abc import abstractmethod
from typing import List, Optional, Protocol, runtime_checkable

from .entity import Entity


@runtime_checkable
class EntityRepository(Protocol):
    """Protocol for entity data persistence operations."""

    @abstractmethod
    async def create(self, entity: Entity) -> Entity:
        """Validate and insert an entity, generating its id and timestamps."""
        ...

    @abstractmethod
    async def read(self, entity_id: str) -> Optional[Entity]:
        """Read an entity by id, None if absent."""
        ...

    @abstractmethod
    async def read_active(self, entity_id: str) -> Optional[Entity]:
        """Read an entity by id, None if absent or inactive."""
        ...

    @abstractmethod
    async def find_by_name(self, entity_name: str) -> List[Entity]:
        """Find entities whose name matches case-insensitively."""
        ...

    @abstractmethod
    async def update(self, entity_id: str, **changes) -> Optional[Entity]:
        """Update the supplied fields of an entity, returning the stored record."""
        ...

    @abstractmethod
    async def delete(self, entity_id: str) -> bool:
        """Delete an entity row."""
        ...
