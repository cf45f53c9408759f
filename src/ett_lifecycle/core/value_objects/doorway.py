"""Role specific entry points of the identity directory."""

from dataclasses import dataclass
from typing import Optional

from ...config.constants import Role


@dataclass(frozen=True)
class Doorway:
    """A sign-up client whose name starts with the role it admits, e.g. ``RE_ADMIN-portal``."""

    client_id: str
    internal_id: Optional[str] = None

    @property
    def role(self) -> Optional[Role]:
        prefix = self.client_id.split("-", 1)[0]
        try:
            return Role(prefix)
        except ValueError:
            return None
