"""Invitation domain object.

Until registration the stored email is the invitation code itself, so the
real address is not disclosed by the record. Registration replaces it.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from ....config.constants import Role, WAITING_ROOM_ID
from ....utils.datetime import to_millis
from ...users.entities.user import Delegate


class InvitationState(str, Enum):
    """Registration states of an invitation."""
    SENT = "sent"
    ACKNOWLEDGED = "acknowledged"
    REGISTERED = "registered"
    RETRACTED = "retracted"


@dataclass
class Invitation:
    """Invitation to register for a role at an entity."""

    code: Optional[str] = None
    role: Optional[Role] = None
    email: Optional[str] = None
    entity_id: Optional[str] = None
    entity_name: Optional[str] = None
    fullname: Optional[str] = None
    title: Optional[str] = None
    delegate: Optional[Delegate] = None
    message_id: Optional[str] = None
    sent_timestamp: Optional[str] = None
    acknowledged_timestamp: Optional[str] = None
    registered_timestamp: Optional[str] = None
    retracted_timestamp: Optional[str] = None
    signup_parameter: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.role, str) and not isinstance(self.role, Role) and self.role in Role.values():
            self.role = Role(self.role)
        if isinstance(self.delegate, (dict, str)):
            self.delegate = Delegate.from_value(self.delegate)

    @property
    def is_retracted(self) -> bool:
        """Retracted, and not re-sent since the retraction."""
        if not self.retracted_timestamp:
            return False
        return to_millis(self.retracted_timestamp) >= to_millis(self.sent_timestamp)

    @property
    def is_acknowledged(self) -> bool:
        return bool(self.acknowledged_timestamp)

    @property
    def is_registered(self) -> bool:
        return bool(self.registered_timestamp)

    @property
    def state(self) -> InvitationState:
        if self.is_registered:
            return InvitationState.REGISTERED
        if self.is_retracted:
            return InvitationState.RETRACTED
        if self.is_acknowledged:
            return InvitationState.ACKNOWLEDGED
        return InvitationState.SENT

    @property
    def targets_waiting_room(self) -> bool:
        return not self.entity_id or self.entity_id == WAITING_ROOM_ID

    @property
    def email_is_masked(self) -> bool:
        return bool(self.code) and self.email == self.code

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["role"] = self.role.value if isinstance(self.role, Role) else self.role
        return data

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Invitation":
        fields = {name: row.get(name) for name in cls.__dataclass_fields__}
        return cls(**fields)
