"""Invitation record validation performed before any write."""

import uuid
from typing import Any, Dict

from ....config.constants import Role
from ....utils.datetime import iso_now
from ....utils.validation import require_enum, require_fields, update_fields
from ...users.entities.user import Delegate
from ..entities.invitation import Invitation

MUTABLE_FIELDS = (
    "role",
    "email",
    "entity_id",
    "entity_name",
    "fullname",
    "title",
    "delegate",
    "message_id",
    "sent_timestamp",
    "acknowledged_timestamp",
    "registered_timestamp",
    "retracted_timestamp",
    "signup_parameter",
)


def prepare_invitation_for_create(invitation: Invitation) -> Invitation:
    """Check the role, generate a code and default the sent timestamp."""
    payload = invitation.to_dict()
    require_fields("Invitation", "create", payload, ["role"])
    invitation.role = require_enum("Invitation", "role", invitation.role, Role, payload)

    invitation.code = invitation.code or str(uuid.uuid4())
    invitation.sent_timestamp = invitation.sent_timestamp or iso_now()
    return invitation


def invitation_update_fields(code: str, **changes) -> Dict[str, Any]:
    delegate = changes.get("delegate")
    if isinstance(delegate, Delegate):
        changes["delegate"] = delegate.to_dict()
    return update_fields("Invitation", {"code": code}, changes, MUTABLE_FIELDS, {"role": Role})
