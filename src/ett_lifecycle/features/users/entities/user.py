"""User domain objects.

A user is one person's membership at one entity, identified by the pair
(email, entity_id).
"""

import json
from dataclasses import dataclass, asdict
from typing import Any, Dict, Mapping, Optional

from ....config.constants import Role, YN


@dataclass
class Delegate:
    """Secondary contact acting for a user."""

    fullname: Optional[str] = None
    title: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_value(cls, value: Any) -> Optional["Delegate"]:
        """Build from a dict or a JSON string as returned for JSONB columns."""
        if value is None or isinstance(value, Delegate):
            return value
        if isinstance(value, str):
            value = json.loads(value) if value else None
            if value is None:
                return None
        return cls(**{k: value.get(k) for k in ("fullname", "title", "email", "phone_number")})


@dataclass
class User:
    """Membership of a person at an entity."""

    email: Optional[str] = None
    entity_id: Optional[str] = None
    role: Optional[Role] = None
    sub: Optional[str] = None
    active: YN = YN.YES
    fullname: Optional[str] = None
    phone_number: Optional[str] = None
    title: Optional[str] = None
    delegate: Optional[Delegate] = None
    create_timestamp: Optional[str] = None
    update_timestamp: Optional[str] = None

    def __post_init__(self):
        if self.email:
            self.email = self.email.strip().lower()
        if isinstance(self.active, str) and not isinstance(self.active, YN):
            self.active = YN(self.active)
        if isinstance(self.delegate, (dict, str)):
            self.delegate = Delegate.from_value(self.delegate)

    @property
    def is_active(self) -> bool:
        return self.active == YN.YES

    def has_role(self, role: Role) -> bool:
        return self.role is not None and Role(self.role) == role

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["active"] = self.active.value if isinstance(self.active, YN) else self.active
        data["role"] = self.role.value if isinstance(self.role, Role) else self.role
        return data

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "User":
        return cls(
            email=row["email"],
            entity_id=row["entity_id"],
            role=Role(row["role"]) if row.get("role") else None,
            sub=row.get("sub"),
            active=YN(row.get("active") or YN.YES.value),
            fullname=row.get("fullname"),
            phone_number=row.get("phone_number"),
            title=row.get("title"),
            delegate=Delegate.from_value(row.get("delegate")),
            create_timestamp=row.get("create_timestamp"),
            update_timestamp=row.get("update_timestamp"),
        )
