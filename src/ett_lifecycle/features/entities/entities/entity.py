"""Entity domain object.

An entity is a registered organization. The reserved waiting room entity holds
people who are not yet attached to a real organization.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Mapping, Optional

from ....config.constants import WAITING_ROOM_ID, YN


@dataclass
class Entity:
    """Registered organization record."""

    entity_id: Optional[str] = None
    entity_name: Optional[str] = None
    description: Optional[str] = None
    active: YN = YN.YES
    create_timestamp: Optional[str] = None
    update_timestamp: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.active, str) and not isinstance(self.active, YN):
            self.active = YN(self.active)

    @property
    def is_active(self) -> bool:
        return self.active == YN.YES

    @property
    def is_waiting_room(self) -> bool:
        return self.entity_id == WAITING_ROOM_ID

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["active"] = self.active.value
        return data

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Entity":
        return cls(
            entity_id=row["entity_id"],
            entity_name=row["entity_name"],
            description=row.get("description"),
            active=YN(row.get("active") or YN.YES.value),
            create_timestamp=row.get("create_timestamp"),
            update_timestamp=row.get("update_timestamp"),
        )
