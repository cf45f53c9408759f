"""Entity correction: replacing or removing a representative, and renaming an entity.

A personnel correction runs these steps in order, writing a journal marker for
each. A failed step stops the steps after it but nothing already done is
undone. The vacancy timer is armed even when the replacement invitation
fails:

    DEACTIVATE_USER     user record set inactive, their invitations deleted
    DELETE_ACCOUNT      identity directory account deleted
    NOTIFY_REMOVED      removed user emailed
    NOTIFY_PEERS        remaining active users emailed
    INVITE_REPLACEMENT  replacement invited through admission control
    ARM_VACANCY_TIMER   stale vacancy check scheduled

Email failures are logged and journaled without stopping the run.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ....config.app_config import AppConfigurations
from ....config.constants import Role, STALE_VACANCY_HANDLER, YN
from ....config.settings import EttSettings
from ....core.exceptions import (
    AccountNotFoundError,
    DuplicateEmailError,
    EntityNameInUseError,
    EntityNotFoundError,
    IdentityDirectoryError,
    SelfSuccessionError,
    UserNotFoundError,
)
from ....utils.error_handling import lifecycle_error_handler
from ...entities.entities.entity import Entity
from ...entities.entities.protocols import EntityRepository
from ...invitations.entities.protocols import InvitationRepository
from ...invitations.services.admission import AdmissionResult, InvitationAdmissionService, InviteeSpec
from ...invitations.services.signup_link import SignupLinks
from ...journal.entities.journal import JournalEntry, RunJournal
from ...users.entities.protocols import UserRepository
from ..entities.personnel import Personnel, same_email
from .correction_email import build_name_change_email, build_peer_removal_email, build_removal_email

logger = logging.getLogger(__name__)

OPERATION = "personnel-correction"
STEP_DEACTIVATE = "DEACTIVATE_USER"
STEP_DELETE_ACCOUNT = "DELETE_ACCOUNT"
STEP_NOTIFY_REMOVED = "NOTIFY_REMOVED"
STEP_NOTIFY_PEERS = "NOTIFY_PEERS"
STEP_INVITE = "INVITE_REPLACEMENT"
STEP_ARM_TIMER = "ARM_VACANCY_TIMER"


@dataclass
class CorrectionResult:
    """Outcome of a personnel correction."""
    run_id: str
    entity_id: str
    removed_email: str
    replacement_email: Optional[str] = None
    invitation: Optional[AdmissionResult] = None
    timer_id: Optional[str] = None
    dry_run: bool = False
    journal: List[JournalEntry] = field(default_factory=list)

    def to_payload(self) -> dict:
        return {
            "run_id": self.run_id,
            "entity_id": self.entity_id,
            "removed": self.removed_email,
            "replacement": self.replacement_email,
            "invitation": self.invitation.to_payload() if self.invitation else None,
            "steps": [f"{entry.step}:{entry.status.value}" for entry in self.journal],
            "dryRun": self.dry_run,
        }


class EntityCorrectionService:
    """Corrects the personnel or the name of an entity."""

    def __init__(
        self,
        entity_repository: EntityRepository,
        user_repository: UserRepository,
        invitation_repository: InvitationRepository,
        identity_directory,
        notifier,
        admission_service: InvitationAdmissionService,
        signup_links: SignupLinks,
        configurations: AppConfigurations,
        settings: EttSettings,
        scheduler=None,
        journal_repository=None,
    ):
        self._entities = entity_repository
        self._users = user_repository
        self._invitations = invitation_repository
        self._directory = identity_directory
        self._notifier = notifier
        self._admission = admission_service
        self._links = signup_links
        self._configs = configurations
        self._settings = settings
        self._scheduler = scheduler
        self._journal_repository = journal_repository

    async def load_personnel(self, entity_id: str) -> Personnel:
        """Load an entity and its users."""
        entity = await self._entities.read(entity_id)
        if entity is None:
            raise EntityNotFoundError(f"No such entity: {entity_id}")
        users = await self._users.find_by_entity(entity_id)
        if not any(user.is_active for user in users):
            raise UserNotFoundError(f"The following entity has no users: {entity.entity_name}")
        return Personnel(entity=entity, users=users)

    def validate(self, personnel: Personnel, replacer_email: str, replaceable_email: str,
                 replacement_email: Optional[str]) -> Personnel:
        """Resolve the people involved, rejecting disallowed combinations before anything changes."""
        personnel.replacer = personnel.find_active(replacer_email)
        if personnel.replacer is None:
            raise UserNotFoundError(
                f"Cannot execute - correcting individual unknown: {replacer_email} is not an active "
                f"member of {personnel.entity.entity_name}"
            )

        if replacement_email and same_email(replaceable_email, replacer_email):
            raise SelfSuccessionError(
                "An entity representative cannot name a successor if they are removing themselves"
            )
        if replacement_email and same_email(replacement_email, replaceable_email):
            raise DuplicateEmailError(
                "The emails of the individual being replaced and the invitee to replace them cannot be the same"
            )
        if replacement_email and same_email(replacement_email, replacer_email):
            raise SelfSuccessionError(f"{replacer_email} cannot replace themselves with themself")

        personnel.replaceable = personnel.find_active(replaceable_email)
        if personnel.replaceable is None:
            raise UserNotFoundError(f"No such user in database: {replaceable_email}")

        personnel.replacement_email = replacement_email.strip().lower() if replacement_email else None
        return personnel

    @lifecycle_error_handler("correct entity personnel")
    async def correct_personnel(
        self,
        entity_id: str,
        replacer_email: str,
        replaceable_email: str,
        replacement_email: Optional[str] = None,
        registration_uri: Optional[str] = None,
        dry_run: Optional[bool] = None,
    ) -> CorrectionResult:
        """Remove a representative and optionally invite their replacement.

        Args:
            entity_id: Entity being corrected
            replacer_email: Active member performing the correction
            replaceable_email: Member being removed, possibly the replacer themselves
            replacement_email: Person to invite into the vacated role
            registration_uri: Registration page for the replacement's invitation link
            dry_run: Log the steps without performing them. Defaults to the dry_run setting.
        """
        if dry_run is None:
            dry_run = self._settings.dry_run

        personnel = await self.load_personnel(entity_id)
        personnel = self.validate(personnel, replacer_email, replaceable_email, replacement_email)

        journal = RunJournal(None if dry_run else self._journal_repository, entity_id, OPERATION)
        result = CorrectionResult(
            run_id=journal.run_id,
            entity_id=entity_id,
            removed_email=personnel.replaceable.email,
            replacement_email=personnel.replacement_email,
            dry_run=dry_run,
            journal=journal.entries,
        )

        if dry_run:
            logger.info(
                f"Dry run: {personnel.replacer.email} would remove {personnel.replaceable.email} "
                f"({personnel.vacated_role.value}) from {personnel.entity.entity_name}"
                + (f" and invite {personnel.replacement_email}" if personnel.replacement_email else "")
            )
            return result

        await self._deactivate(personnel, journal)
        await self._delete_account(personnel, journal)
        await self._notify_removed(personnel, journal)
        await self._notify_peers(personnel, journal)
        try:
            if personnel.replacement_email:
                result.invitation = await self._invite_replacement(personnel, journal, registration_uri)
        finally:
            # the role is vacant whether or not the replacement was admitted
            result.timer_id = await self.schedule_stale_vacancy_handler(
                personnel.entity, personnel.vacated_role, journal
            )
        return result

    async def _deactivate(self, personnel: Personnel, journal: RunJournal) -> None:
        user = personnel.replaceable
        try:
            await self._users.update(user.email, personnel.entity.entity_id, active=YN.NO)
            removed = await self._invitations.delete_by_email(user.email, personnel.entity.entity_id)
        except Exception as e:
            await journal.failed(STEP_DEACTIVATE, str(e))
            raise
        await journal.completed(STEP_DEACTIVATE, f"{removed} invitations deleted")
        logger.info(f"Deactivated {user.email} in {personnel.entity.entity_id}, deleted {removed} invitations")

    async def _delete_account(self, personnel: Personnel, journal: RunJournal) -> None:
        user = personnel.replaceable
        try:
            sub = user.sub or await self._directory.find_account_by_email(user.email)
            if not sub:
                raise AccountNotFoundError(f"No identity directory account found for {user.email}")
            await self._directory.delete_account(sub)
        except AccountNotFoundError as e:
            logger.warning(f"Identity directory account for {user.email} already gone: {e}")
            await journal.completed(STEP_DELETE_ACCOUNT, f"not found: {e}")
            return
        except Exception as e:
            await journal.failed(STEP_DELETE_ACCOUNT, str(e))
            raise IdentityDirectoryError(f"Cannot delete identity directory account of {user.email}: {e}") from e
        await journal.completed(STEP_DELETE_ACCOUNT, sub)
        logger.info(f"Deleted identity directory account {sub} of {user.email}")

    async def _notify_removed(self, personnel: Personnel, journal: RunJournal) -> None:
        message = build_removal_email(
            personnel.replaceable.email,
            personnel.replacer.fullname or personnel.replacer.email,
            personnel.entity.entity_name,
        )
        try:
            await self._notifier.send(message)
        except Exception as e:
            logger.error(f"Failed to notify {personnel.replaceable.email} of removal: {e}")
            await journal.failed(STEP_NOTIFY_REMOVED, str(e))
            return
        await journal.completed(STEP_NOTIFY_REMOVED, personnel.replaceable.email)

    async def _notify_peers(self, personnel: Personnel, journal: RunJournal) -> None:
        corrector = personnel.replacer.fullname or personnel.replacer.email
        removed = None if personnel.is_self_removal else (personnel.replaceable.fullname or personnel.replaceable.email)
        failures = []
        bystanders = personnel.bystanders()
        for user in bystanders:
            try:
                await self._notifier.send(
                    build_peer_removal_email(user.email, corrector, personnel.entity.entity_name, removed)
                )
            except Exception as e:
                logger.error(f"Failed to notify {user.email} of correction: {e}")
                failures.append(user.email)
        if failures:
            await journal.failed(STEP_NOTIFY_PEERS, f"failed: {', '.join(failures)}")
        else:
            await journal.completed(STEP_NOTIFY_PEERS, f"{len(bystanders)} notified")

    async def _invite_replacement(
        self,
        personnel: Personnel,
        journal: RunJournal,
        registration_uri: Optional[str],
    ) -> AdmissionResult:
        email = personnel.replacement_email
        try:
            result = await self._admission.invite(
                InviteeSpec(email=email, role=personnel.vacated_role, entity_id=personnel.entity.entity_id),
                Role(personnel.replacer.role),
                self._links.link_generator_for(email, registration_uri),
            )
        except Exception as e:
            await journal.failed(STEP_INVITE, str(e))
            raise
        if not result.ok:
            await journal.failed(STEP_INVITE, result.message)
            result.raise_for_rejection()
        await journal.completed(STEP_INVITE, result.code)
        return result

    async def schedule_stale_vacancy_handler(
        self,
        entity: Entity,
        role: Role,
        journal: Optional[RunJournal] = None,
    ) -> Optional[str]:
        """Arm the timer that checks whether the vacated role was filled in time."""
        journal = journal or RunJournal(self._journal_repository, entity.entity_id, OPERATION)
        if self._scheduler is None:
            logger.warning(f"No scheduler configured, stale vacancy check for {entity.entity_name} not armed")
            await journal.skipped(STEP_ARM_TIMER, "no scheduler")
            return None

        wait = await self._configs.stale_vacancy_after(role)
        delay = wait + self._settings.vacancy_grace_seconds
        try:
            timer_id = await self._scheduler.arm(
                delay,
                STALE_VACANCY_HANDLER,
                {"entity_id": entity.entity_id},
                f"Stale entity vacancy handler: {entity.entity_name}",
                description=f"Checks {entity.entity_name} for a {Role(role).value} vacancy older than {wait} seconds",
            )
        except Exception as e:
            logger.error(f"Failed to arm stale vacancy timer for {entity.entity_name}: {e}")
            await journal.failed(STEP_ARM_TIMER, str(e))
            return None
        await journal.completed(STEP_ARM_TIMER, timer_id)
        logger.info(f"Stale vacancy check for {entity.entity_name} armed to fire in {delay} seconds")
        return timer_id

    @lifecycle_error_handler("amend entity name")
    async def correct_entity(
        self,
        entity_id: str,
        corrector_email: str,
        entity_name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> bool:
        """Rename an entity and tell its other members. Returns False when nothing changed."""
        personnel = await self.load_personnel(entity_id)
        corrector = personnel.find_active(corrector_email)
        if corrector is None:
            raise UserNotFoundError(
                f"Cannot execute - correcting individual unknown: {corrector_email} is not an active "
                f"member of {personnel.entity.entity_name}"
            )
        personnel.replacer = corrector

        entity = personnel.entity
        old_name = entity.entity_name
        name_changed = bool(entity_name) and entity_name.strip() != old_name
        description_changed = description is not None and description != entity.description
        if not name_changed and not description_changed:
            logger.warning(f"Entity {entity_id} correction requested with no changes")
            return False

        if name_changed:
            taken = [other for other in await self._entities.find_by_name(entity_name) if other.entity_id != entity_id]
            if taken:
                raise EntityNameInUseError(f"The entity name '{entity_name}' is already in use")

        await self._entities.update(
            entity_id,
            entity_name=entity_name.strip() if name_changed else None,
            description=description if description_changed else None,
        )
        logger.info(f"Entity {entity_id} corrected by {corrector.email}")

        if name_changed:
            corrector_name = corrector.fullname or corrector.email
            for user in personnel.bystanders():
                try:
                    await self._notifier.send(
                        build_name_change_email(user.email, corrector_name, old_name, entity_name.strip())
                    )
                except Exception as e:
                    logger.error(f"Failed to notify {user.email} of entity name change: {e}")
        return True
