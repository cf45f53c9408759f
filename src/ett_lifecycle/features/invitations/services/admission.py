"""Invitation admission control.

Decides whether a new invitation may be issued, and if so sends, persists and
returns it. Rejections are returned as structured results rather than raised,
so callers can report the reason; AdmissionResult.raise_for_rejection converts
one into an InvitationRejectedError where an exception is wanted.

The conflict check reads outstanding invitations and then writes without a
lock, so two concurrent invitations for the same entity and role can both be
admitted.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import List, Optional

from ....config.app_config import AppConfigurations
from ....config.constants import Role, STALE_INVITATION_HANDLER, WAITING_ROOM_ID
from ....config.settings import EttSettings
from ....core.exceptions import InvitationConflictError, InvitationRejectedError
from ....utils.datetime import iso_now, now_millis, to_millis
from ...entities.entities.entity import Entity
from ...entities.entities.protocols import EntityRepository
from ...users.entities.protocols import UserRepository
from ...users.entities.user import User
from ..entities.invitation import Invitation
from ..entities.protocols import InvitationRepository
from .invitation_email import build_invitation_email
from .signup_link import LinkGenerator, append_code

logger = logging.getLogger(__name__)


@dataclass
class InviteeSpec:
    """The person to invite, the role offered and optionally the entity."""
    email: str
    role: Role
    entity_id: Optional[str] = None


@dataclass
class AdmissionResult:
    """Outcome of an invitation attempt."""
    ok: bool
    message: str
    code: Optional[str] = None
    link: Optional[str] = None
    invitation: Optional[Invitation] = None
    conflict: bool = False

    @classmethod
    def rejected(cls, message: str, conflict: bool = False) -> "AdmissionResult":
        logger.info(f"Invitation rejected: {message}")
        return cls(ok=False, message=message, conflict=conflict)

    def raise_for_rejection(self) -> None:
        if self.ok:
            return
        if self.conflict:
            raise InvitationConflictError(self.message)
        raise InvitationRejectedError(self.message)

    def to_payload(self) -> dict:
        return {"invitation_code": self.code, "invitation_link": self.link}


class InvitationAdmissionService:
    """Applies the admission rules and issues invitations."""

    def __init__(
        self,
        entity_repository: EntityRepository,
        user_repository: UserRepository,
        invitation_repository: InvitationRepository,
        identity_directory,
        notifier,
        configurations: AppConfigurations,
        settings: EttSettings,
        scheduler=None,
    ):
        self._entities = entity_repository
        self._users = user_repository
        self._invitations = invitation_repository
        self._directory = identity_directory
        self._notifier = notifier
        self._configs = configurations
        self._settings = settings
        self._scheduler = scheduler

    async def invite(
        self,
        invitee: InviteeSpec,
        inviter_role: Role,
        link_generator: LinkGenerator,
        inviter_identity: Optional[str] = None,
    ) -> AdmissionResult:
        """Issue an invitation if the admission rules allow it.

        Args:
            invitee: Email, role and optional entity of the person invited
            inviter_role: Role of the person sending the invitation
            link_generator: Produces the registration link for (entity_id, role)
            inviter_identity: Directory username of the inviter, used to find their entity

        Returns:
            AdmissionResult carrying the code and link, or the rejection reason
        """
        email = invitee.email.strip().lower()
        role = Role(invitee.role)
        inviter_role = Role(inviter_role)
        entity_id = invitee.entity_id or None
        inviter_is_asp = inviter_role == Role.RE_ADMIN

        if inviter_is_asp and role != Role.RE_AUTH_IND:
            return AdmissionResult.rejected(
                f"An {Role.RE_ADMIN.value} can only invite a {Role.RE_AUTH_IND.value}, not a {role.value}"
            )

        if inviter_is_asp and entity_id == WAITING_ROOM_ID:
            return AdmissionResult.rejected(
                f"An {Role.RE_ADMIN.value} cannot invite anyone into the waiting room"
            )

        entity: Optional[Entity] = None
        if entity_id and entity_id != WAITING_ROOM_ID:
            entity = await self._entities.read_active(entity_id)
            if entity is None:
                return AdmissionResult.rejected(f"Invitation to an inactive or unknown entity: {entity_id}")

        if inviter_is_asp:
            if not inviter_identity and entity_id is None:
                return AdmissionResult.rejected("Lookup for RE_ADMIN inviter failed: no entity or inviter identity given")
            if inviter_identity:
                memberships = await self._inviter_memberships(inviter_identity)
                if entity_id is None:
                    if not memberships:
                        return AdmissionResult.rejected("Lookup for RE_ADMIN inviter failed")
                    if len(memberships) > 1:
                        return AdmissionResult.rejected(
                            f"Cannot determine the entity to invite into: inviter {inviter_identity} "
                            f"is an active {Role.RE_ADMIN.value} in {len(memberships)} entities"
                        )
                    entity_id = memberships[0].entity_id
                    entity = await self._entities.read_active(entity_id)
                    if entity is None:
                        return AdmissionResult.rejected(f"Invitation to an inactive or unknown entity: {entity_id}")
                elif not any(membership.entity_id == entity_id for membership in memberships):
                    return AdmissionResult.rejected(
                        f"Inviter {inviter_identity} is not an active {Role.RE_ADMIN.value} of entity {entity_id}"
                    )

        if not entity_id:
            entity_id = WAITING_ROOM_ID

        existing = await self._active_invitee(email, entity_id, role)
        if existing is not None:
            entity_name = await self._entity_name(existing.entity_id, entity)
            return AdmissionResult.rejected(
                f"Invitee {email} has already accepted invitation for entity {entity_name}"
            )

        if entity_id != WAITING_ROOM_ID and role != Role.RE_AUTH_IND:
            logger.debug(f"Checking existing invitations for {role.value} to {entity_id} for conflicts")
            outstanding = await self.outstanding_invitations(entity_id, role)
            if outstanding:
                return AdmissionResult.rejected(
                    f"One or more individuals already have outstanding invitations for role: "
                    f"{role.value} in entity: {entity_id}",
                    conflict=True,
                )

        return await self._issue(email, role, entity_id, entity, link_generator)

    async def outstanding_invitations(self, entity_id: str, role: Role) -> List[Invitation]:
        """Invitations of an entity and role that still block a new invitation."""
        invitations = await self._invitations.find_by_entity(entity_id, role)
        expire_after_millis = (await self._configs.invitation_expire_after(role)) * 1000
        now = now_millis()

        outstanding = []
        for invitation in invitations:
            if invitation.is_retracted:
                continue
            if Role(invitation.role) != role:
                continue

            sent = to_millis(invitation.sent_timestamp)
            registered = to_millis(invitation.registered_timestamp)
            if sent > registered:
                if now - sent >= expire_after_millis:
                    logger.debug(f"Invitation {invitation.code} expired unused, not a conflict")
                    continue
            else:
                invited_user = await self._users.read(invitation.email, entity_id)
                if invited_user is None or not invited_user.is_active:
                    logger.debug(f"Invitation {invitation.code} was used by a since deactivated user, not a conflict")
                    continue

            outstanding.append(invitation)
        return outstanding

    async def _inviter_memberships(self, inviter_identity: str) -> List[User]:
        inviter_email = await self._directory.lookup_email(inviter_identity)
        if not inviter_email:
            logger.warning(f"No email found in identity directory for inviter {inviter_identity}")
            return []
        return [
            user for user in await self._users.find_by_email(inviter_email)
            if user.is_active and user.has_role(Role.RE_ADMIN)
        ]

    async def _active_invitee(self, email: str, entity_id: str, role: Role) -> Optional[User]:
        if entity_id == WAITING_ROOM_ID and role != Role.SYS_ADMIN:
            users = await self._users.find_by_email(email)
        else:
            user = await self._users.read(email, entity_id)
            users = [user] if user else []
        for user in users:
            if user.is_active:
                return user
        return None

    async def _entity_name(self, entity_id: str, entity: Optional[Entity]) -> str:
        if entity is not None and entity.entity_id == entity_id:
            return entity.entity_name
        found = await self._entities.read(entity_id)
        return found.entity_name if found else entity_id

    async def _issue(
        self,
        email: str,
        role: Role,
        entity_id: str,
        entity: Optional[Entity],
        link_generator: LinkGenerator,
    ) -> AdmissionResult:
        code = str(uuid.uuid4())
        link = append_code(await link_generator(entity_id, role), code)
        entity_name = entity.entity_name if entity else WAITING_ROOM_ID

        message_id = await self._notifier.send(build_invitation_email(email, role, link, entity_name))
        logger.info(f"Invitation {code} sent to {email} for {role.value} in {entity_id}")

        sent_timestamp = iso_now()
        invitation = Invitation(
            code=code,
            role=role,
            email=code,
            entity_id=entity_id,
            entity_name=entity_name,
            message_id=message_id,
            sent_timestamp=sent_timestamp,
        )
        if role == Role.SYS_ADMIN:
            # System administrators complete registration in the identity directory
            invitation.email = email
            invitation.registered_timestamp = sent_timestamp
        invitation = await self._invitations.create(invitation)

        await self._arm_stale_invitation_timer(invitation, email)

        return AdmissionResult(
            ok=True,
            message=f"Invitation successfully sent: {code}",
            code=code,
            link=link,
            invitation=invitation,
        )

    async def _arm_stale_invitation_timer(self, invitation: Invitation, email: str) -> None:
        if self._scheduler is None or invitation.role == Role.SYS_ADMIN:
            return
        try:
            delay = await self._configs.invitation_expire_after(Role(invitation.role))
            await self._scheduler.arm(
                delay,
                STALE_INVITATION_HANDLER,
                {"invitation_code": invitation.code, "email": email},
                f"Remove stale invitation: {invitation.code}",
                description=f"Removes invitation {invitation.code} if unused after {delay} seconds",
            )
        except Exception as e:
            logger.error(f"Failed to arm stale invitation timer for {invitation.code}: {e}")
