"""Protocol interfaces for the external collaborators of the lifecycle services.

The orchestration services depend only on these contracts. Concrete adapters
live under ``integrations`` and ``database``; tests substitute mocks.
"""

from abc import abstractmethod
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from .config.constants import Role
from .core.value_objects import Doorway, EmailMessage


@runtime_checkable
class IdentityDirectory(Protocol):
    """Protocol for the directory holding one login account per person."""

    @abstractmethod
    async def create_account(
        self,
        email: str,
        role: Role,
        temporary_password: Optional[str] = None,
        attributes: Optional[Dict[str, str]] = None,
    ) -> str:
        """Create an account with a temporary password delivered out of band, returning its reference."""
        ...

    @abstractmethod
    async def delete_account(self, sub: str) -> bool:
        """Delete an account by reference. Raises AccountNotFoundError if it does not exist."""
        ...

    @abstractmethod
    async def update_attributes(self, sub: str, attributes: Dict[str, str]) -> None:
        """Replace attribute values in place."""
        ...

    @abstractmethod
    async def lookup_attribute(self, sub: str, name: str) -> Optional[str]:
        """Read one attribute of an account."""
        ...

    @abstractmethod
    async def lookup_email(self, username: str) -> Optional[str]:
        """Email address of the account with the given username."""
        ...

    @abstractmethod
    async def find_account_by_email(self, email: str) -> Optional[str]:
        """Reference of the account registered with an email."""
        ...

    @abstractmethod
    async def list_accounts(self) -> List[Dict[str, Any]]:
        """All accounts of the pool."""
        ...

    @abstractmethod
    async def list_doorways(self) -> List[Doorway]:
        """Role specific sign-up clients of the pool."""
        ...

    @abstractmethod
    async def doorway_for_role(self, role: Role) -> Optional[Doorway]:
        """The sign-up client admitting a role, if one is configured."""
        ...


@runtime_checkable
class Notifier(Protocol):
    """Protocol for sending email notifications."""

    @abstractmethod
    async def send(self, message: EmailMessage) -> str:
        """Send a message, returning its message id. Raises NotificationError on failure."""
        ...


@runtime_checkable
class Scheduler(Protocol):
    """Protocol for one-shot delayed callbacks."""

    @abstractmethod
    async def arm(
        self,
        delay_seconds: int,
        target: str,
        payload: Dict[str, Any],
        name: str,
        description: Optional[str] = None,
    ) -> str:
        """Arm a timer invoking target with payload after the delay. There is no cancel."""
        ...


@runtime_checkable
class TransactionalStore(Protocol):
    """Protocol for atomic multi-item deletes."""

    @abstractmethod
    async def transact_delete(self, transaction) -> int:
        """Submit a DeleteTransaction all-or-nothing, returning the rows removed."""
        ...
