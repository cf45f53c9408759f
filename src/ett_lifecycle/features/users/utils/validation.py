"""User record validation performed before any write."""

from typing import Any, Dict

from ....config.constants import Role, YN
from ....utils.datetime import iso_now
from ....utils.validation import require_enum, require_fields, update_fields
from ..entities.user import Delegate, User

MUTABLE_FIELDS = ("role", "sub", "active", "fullname", "phone_number", "title", "delegate")


def prepare_user_for_create(user: User) -> User:
    """Check required fields and enum values, defaulting timestamps."""
    payload = user.to_dict()
    require_fields("User", "create", payload, ["email", "entity_id", "role"])
    user.role = require_enum("User", "role", user.role, Role, payload)

    required = ["sub"] if user.role == Role.SYS_ADMIN else ["sub", "fullname"]
    require_fields("User", "create", payload, required)

    user.create_timestamp = user.create_timestamp or iso_now()
    user.update_timestamp = user.update_timestamp or user.create_timestamp
    return user


def user_update_fields(email: str, entity_id: str, **changes) -> Dict[str, Any]:
    delegate = changes.get("delegate")
    if isinstance(delegate, Delegate):
        changes["delegate"] = delegate.to_dict()
    fields = update_fields(
        "User",
        {"email": email, "entity_id": entity_id},
        changes,
        MUTABLE_FIELDS,
        {"role": Role, "active": YN},
    )
    fields["update_timestamp"] = iso_now()
    return fields
