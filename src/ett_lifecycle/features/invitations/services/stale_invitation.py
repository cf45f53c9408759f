"""Timer callback removing invitations that were never used to register."""

import logging

from ....config.app_config import AppConfigurations
from ....config.constants import ConfigName, Role
from ..entities.protocols import InvitationRepository
from .invitation_email import build_end_of_registration_email

logger = logging.getLogger(__name__)


class StaleInvitationHandler:
    """Deletes an unused invitation once its registration window has passed."""

    def __init__(self, invitation_repository: InvitationRepository, notifier, configurations: AppConfigurations):
        self._invitations = invitation_repository
        self._notifier = notifier
        self._configs = configurations

    async def purge(self, invitation_code: str, email: str) -> bool:
        """Remove the invitation and tell the invitee. Returns True if it was removed."""
        invitation = await self._invitations.read(invitation_code)
        if invitation is None:
            logger.info(f"Invitation {invitation_code} to {email} not found, nothing to purge")
            return False

        if invitation.is_registered:
            logger.info(f"Invitation {invitation_code} was used to register, not stale")
            return False

        role = Role(invitation.role)
        if role == Role.RE_AUTH_IND:
            # The stale vacancy handler removes these when it fires no later than this one
            stale_invitation = await self._configs.get_duration(ConfigName.AUTH_IND_INVITATION_EXPIRE_AFTER)
            stale_vacancy = await self._configs.get_duration(ConfigName.STALE_AI_VACANCY)
            if stale_vacancy >= stale_invitation:
                logger.info(
                    f"Deferring removal of invitation {invitation_code} to the stale entity vacancy handler"
                )
                return False

        logger.info(f"Deleting stale invitation {invitation_code} for {role.value} in {invitation.entity_id}")
        await self._invitations.delete(invitation_code)

        try:
            await self._notifier.send(build_end_of_registration_email(email, role))
        except Exception as e:
            logger.error(f"Failed to send end of registration notice to {email}: {e}")
        return True
