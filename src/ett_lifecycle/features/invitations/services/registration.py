"""Registration state machine for a single invitation.

    Sent -> Acknowledged -> Registered
    Sent | Acknowledged -> Retracted (terminal)

Acknowledge and register are idempotent: repeating either returns the stored
timestamp without writing.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ....config.constants import (
    Role,
    SIGNUP_PARAMETER_AMEND,
    SIGNUP_PARAMETER_AMENDED,
    WAITING_ROOM_ID,
)
from ....core.exceptions import (
    EntityNameInUseError,
    InvitationNotFoundError,
    InvitationRetractedError,
    InvitationStateError,
    InvitationUnauthorizedError,
    MissingParameterError,
    NotAcknowledgedError,
)
from ....utils.datetime import iso_now
from ...entities.entities.protocols import EntityRepository
from ...users.entities.user import Delegate
from ..entities.invitation import Invitation, InvitationState
from ..entities.protocols import InvitationRepository

logger = logging.getLogger(__name__)

# A leading '=' can reach us as '3D' when a link passed through quoted-printable encoding
QUOTED_PRINTABLE_PREFIX = "3D"


@dataclass
class TransitionOutcome:
    """Result of a state transition."""
    invitation: Invitation
    timestamp: Optional[str]
    changed: bool


class Registration:
    """Drives one invitation through its registration states."""

    def __init__(
        self,
        code: Optional[str],
        invitation_repository: InvitationRepository,
        entity_repository: Optional[EntityRepository] = None,
    ):
        self._code = (code or "").strip()
        self._invitations = invitation_repository
        self._entities = entity_repository
        self._invitation: Optional[Invitation] = None

    @property
    def code(self) -> str:
        return self._code

    async def get_invitation(self, refresh: bool = False) -> Invitation:
        """Read the invitation for the code, caching it for later transitions."""
        if self._invitation is not None and not refresh:
            return self._invitation
        if not self._code:
            raise InvitationUnauthorizedError("Unauthorized: Invitation code missing")

        invitation = await self._invitations.read(self._code)
        if invitation is None and self._code.startswith(QUOTED_PRINTABLE_PREFIX):
            stripped = self._code[len(QUOTED_PRINTABLE_PREFIX):]
            logger.info(f"Invitation {self._code} not found, retrying as {stripped}")
            invitation = await self._invitations.read(stripped)
            if invitation is not None:
                self._code = stripped

        if invitation is None:
            raise InvitationNotFoundError(f"Unauthorized: Unknown invitation code {self._code}")
        self._invitation = invitation
        return invitation

    async def state(self) -> InvitationState:
        return (await self.get_invitation()).state

    async def acknowledge(self) -> TransitionOutcome:
        """Record acknowledgement of the privacy policy."""
        invitation = await self.get_invitation()
        if invitation.is_retracted:
            raise InvitationRetractedError(f"Unauthorized: Invitation {self._code} has been retracted")
        if invitation.acknowledged_timestamp:
            logger.info(f"Invitation {self._code} already acknowledged at {invitation.acknowledged_timestamp}")
            return TransitionOutcome(invitation, invitation.acknowledged_timestamp, changed=False)

        timestamp = iso_now()
        updated = await self._invitations.update(self._code, acknowledged_timestamp=timestamp)
        self._invitation = updated or invitation
        self._invitation.acknowledged_timestamp = timestamp
        logger.info(f"Invitation {self._code} acknowledged")
        return TransitionOutcome(self._invitation, timestamp, changed=True)

    async def register(
        self,
        email: str,
        fullname: str,
        title: Optional[str] = None,
        entity_name: Optional[str] = None,
        delegate: Optional[Delegate] = None,
    ) -> TransitionOutcome:
        """Complete registration, replacing the masked email with the real one."""
        invitation = await self.get_invitation()
        if invitation.is_retracted and not invitation.is_registered:
            raise InvitationRetractedError(f"Unauthorized: Invitation {self._code} has been retracted")
        if not invitation.acknowledged_timestamp:
            raise NotAcknowledgedError("Unauthorized: Privacy policy has not yet been acknowledged")
        if invitation.registered_timestamp:
            logger.info(f"Invitation {self._code} already registered at {invitation.registered_timestamp}")
            return TransitionOutcome(invitation, invitation.registered_timestamp, changed=False)

        if not email:
            raise MissingParameterError("Invalid/Missing parameter: email")
        if not fullname:
            raise MissingParameterError("Invalid/Missing parameter: fullname")

        role = Role(invitation.role)
        if role.creates_entity and entity_name:
            await self._check_entity_name(invitation, entity_name)

        timestamp = iso_now()
        changes = {
            "email": email.strip().lower(),
            "fullname": fullname,
            "title": title,
            "delegate": delegate,
            "registered_timestamp": timestamp,
        }
        if entity_name:
            changes["entity_name"] = entity_name
        updated = await self._invitations.update(self._code, **changes)
        self._invitation = updated or invitation
        self._invitation.registered_timestamp = timestamp
        logger.info(f"Invitation {self._code} registered by {changes['email']}")
        return TransitionOutcome(self._invitation, timestamp, changed=True)

    async def retract(self) -> TransitionOutcome:
        """Permanently disqualify a pending invitation."""
        invitation = await self.get_invitation()
        if invitation.is_registered:
            raise InvitationStateError(f"Invitation {self._code} has already been used to register")
        if invitation.is_retracted:
            return TransitionOutcome(invitation, invitation.retracted_timestamp, changed=False)

        timestamp = iso_now()
        updated = await self._invitations.update(self._code, retracted_timestamp=timestamp)
        self._invitation = updated or invitation
        self._invitation.retracted_timestamp = timestamp
        logger.info(f"Invitation {self._code} retracted")
        return TransitionOutcome(self._invitation, timestamp, changed=True)

    async def complete_amendment(self) -> bool:
        """Mark an amendment invitation as used. Returns False when it was not an amendment."""
        invitation = await self.get_invitation()
        if invitation.signup_parameter != SIGNUP_PARAMETER_AMEND:
            return False
        await self._invitations.update(self._code, signup_parameter=SIGNUP_PARAMETER_AMENDED)
        invitation.signup_parameter = SIGNUP_PARAMETER_AMENDED
        return True

    async def _check_entity_name(self, invitation: Invitation, entity_name: str) -> None:
        if invitation.entity_id and invitation.entity_id != WAITING_ROOM_ID:
            return
        if self._entities is None:
            return
        in_use = [
            entity for entity in await self._entities.find_by_name(entity_name)
            if entity.entity_id != WAITING_ROOM_ID
        ]
        if in_use:
            raise EntityNameInUseError(f"The entity name '{entity_name}' is already in use")
