"""Protocol interfaces for user persistence."""

from abc import abstractmethod
from typing import List, Optional, Protocol, runtime_checkable

from .user import User


@runtime_checkable
class UserRepository(Protocol):
    """Protocol for user data persistence operations."""

    @abstractmethod
    async def create(self, user: User) -> User:
        """Validate and insert a user."""
        ...

    @abstractmethod
    async def read(self, email: str, entity_id: str) -> Optional[User]:
        """Read a user by full key, None if absent."""
        ...

    @abstractmethod
    async def find_by_email(self, email: str) -> List[User]:
        """All entity memberships of an email."""
        ...

    @abstractmethod
    async def find_by_entity(self, entity_id: str, active_only: bool = False) -> List[User]:
        """All users of an entity."""
        ...

    @abstractmethod
    async def update(self, email: str, entity_id: str, **changes) -> Optional[User]:
        """Update the supplied fields of a user."""
        ...

    @abstractmethod
    async def delete(self, email: str, entity_id: Optional[str] = None) -> int:
        """Delete one membership, or every membership of the email when no entity is given."""
        ...
