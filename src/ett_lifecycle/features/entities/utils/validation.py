"""Entity record validation performed before any write."""

import uuid
from typing import Any, Dict

from ....config.constants import YN
from ....utils.datetime import iso_now
from ....utils.validation import require_fields, update_fields
from ..entities.entity import Entity

MUTABLE_FIELDS = ("entity_name", "description", "active")


def prepare_entity_for_create(entity: Entity) -> Entity:
    """Check required fields and fill in generated values."""
    require_fields("Entity", "create", entity.to_dict(), ["entity_name"])

    entity.entity_id = entity.entity_id or str(uuid.uuid4())
    entity.create_timestamp = entity.create_timestamp or iso_now()
    entity.update_timestamp = entity.update_timestamp or entity.create_timestamp
    return entity


def entity_update_fields(entity_id: str, **changes) -> Dict[str, Any]:
    fields = update_fields("Entity", {"entity_id": entity_id}, changes, MUTABLE_FIELDS, {"active": YN})
    fields["update_timestamp"] = iso_now()
    return fields
