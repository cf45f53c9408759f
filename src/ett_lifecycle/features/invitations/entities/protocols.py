"""Protocol interfaces for invitation persistence."""

from abc import abstractmethod
from typing import List, Optional, Protocol, runtime_checkable

from ....config.constants import Role
from .invitation import Invitation


@runtime_checkable
class InvitationRepository(Protocol):
    """Protocol for invitation data persistence operations."""

    @abstractmethod
    async def create(self, invitation: Invitation) -> Invitation:
        """Validate and insert an invitation, generating its code when absent."""
        ...

    @abstractmethod
    async def read(self, code: str) -> Optional[Invitation]:
        """Read an invitation by code, None if absent."""
        ...

    @abstractmethod
    async def find_by_email(self, email: str, entity_id: Optional[str] = None) -> List[Invitation]:
        """Invitations addressed to an email, optionally at one entity."""
        ...

    @abstractmethod
    async def find_by_entity(self, entity_id: str, role: Optional[Role] = None) -> List[Invitation]:
        """Invitations of an entity, optionally for one role."""
        ...

    @abstractmethod
    async def update(self, code: str, **changes) -> Optional[Invitation]:
        """Update the supplied fields of an invitation."""
        ...

    @abstractmethod
    async def delete(self, code: str) -> bool:
        """Delete an invitation by code."""
        ...

    @abstractmethod
    async def delete_by_email(self, email: str, entity_id: str) -> int:
        """Delete every invitation addressed to an email at an entity."""
        ...
