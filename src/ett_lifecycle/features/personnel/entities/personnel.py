"""Personnel of an entity as seen by a correction."""

from dataclasses import dataclass, field
from typing import List, Optional

from ....config.constants import Role
from ...entities.entities.entity import Entity
from ...users.entities.user import User


def same_email(first: Optional[str], second: Optional[str]) -> bool:
    if not first or not second:
        return False
    return first.strip().lower() == second.strip().lower()


@dataclass
class Personnel:
    """The entity, its active users, and who is correcting, leaving and joining."""

    entity: Entity
    users: List[User] = field(default_factory=list)
    replacer: Optional[User] = None
    replaceable: Optional[User] = None
    replacement_email: Optional[str] = None

    def find_active(self, email: Optional[str]) -> Optional[User]:
        for user in self.users:
            if user.is_active and same_email(user.email, email):
                return user
        return None

    @property
    def is_self_removal(self) -> bool:
        return self.replacer is not None and self.replaceable is not None and same_email(
            self.replacer.email, self.replaceable.email
        )

    @property
    def vacated_role(self) -> Optional[Role]:
        return Role(self.replaceable.role) if self.replaceable and self.replaceable.role else None

    def bystanders(self) -> List[User]:
        """Active users other than the corrector and the one being removed."""
        excluded = [user.email for user in (self.replacer, self.replaceable) if user is not None]
        return [
            user for user in self.users
            if user.is_active and not any(same_email(user.email, email) for email in excluded)
        ]
