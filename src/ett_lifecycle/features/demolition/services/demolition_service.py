"""Entity demolition.

Removes an entity together with every user and invitation that references it:

1. One all-or-nothing datastore transaction deletes the dependents listed in
   CASCADES and then the entity row. The users are captured before the
   transaction is submitted.
2. Each deleted user's identity directory account is deleted independently.
   Failures are logged and collected, never rolled back.
3. Optionally, each deleted user with a real email address receives a
   cancellation notice. Failures are logged.

Running a demolition again after it completed finds nothing left to delete.
"""

import logging
from typing import Dict, List, Optional

from ....config.constants import WAITING_ROOM_ID
from ....config.settings import EttSettings
from ....core.exceptions import AccountNotFoundError, MissingParameterError, ProtectedEntityError
from ....database.schema import CASCADES, ENTITIES, INVITATIONS, USERS
from ....database.transactions import DeleteTransaction
from ....utils import is_email_address
from ....utils.error_handling import lifecycle_error_handler
from ...entities.entities.entity import Entity
from ...entities.entities.protocols import EntityRepository
from ...invitations.entities.invitation import Invitation
from ...invitations.entities.protocols import InvitationRepository
from ...journal.entities.journal import RunJournal
from ...users.entities.protocols import UserRepository
from ...users.entities.user import User
from ..entities.record import DemolitionRecord
from .demolition_email import build_cancellation_email

logger = logging.getLogger(__name__)

OPERATION = "demolition"
STEP_DATABASE = "DELETE_RECORDS"
STEP_ACCOUNTS = "DELETE_ACCOUNTS"
STEP_NOTIFY = "NOTIFY_USERS"


class EntityDemolitionService:
    """Cascading removal of an entity."""

    def __init__(
        self,
        entity_repository: EntityRepository,
        user_repository: UserRepository,
        invitation_repository: InvitationRepository,
        transactional_store,
        identity_directory,
        notifier,
        settings: EttSettings,
        journal_repository=None,
    ):
        self._entities = entity_repository
        self._users = user_repository
        self._invitations = invitation_repository
        self._store = transactional_store
        self._directory = identity_directory
        self._notifier = notifier
        self._settings = settings
        self._journal_repository = journal_repository

    @lifecycle_error_handler("demolish entity")
    async def demolish(
        self,
        entity_id: str,
        dry_run: Optional[bool] = None,
        notify: bool = False,
    ) -> DemolitionRecord:
        """Remove all trace of an entity.

        Args:
            entity_id: Entity to remove
            dry_run: Build the transaction without submitting it or touching
                other systems. Defaults to the dry_run setting.
            notify: Send cancellation notices to the deleted users

        Returns:
            DemolitionRecord with the transaction and the deleted users
        """
        if not entity_id:
            raise MissingParameterError("Missing entity_id parameter")
        if entity_id == WAITING_ROOM_ID:
            raise ProtectedEntityError("The waiting room entity cannot be demolished")
        if dry_run is None:
            dry_run = self._settings.dry_run

        entity = await self._entities.read(entity_id)
        users = await self._users.find_by_entity(entity_id)
        invitations = await self._invitations.find_by_entity(entity_id)

        transaction = self.build_transaction(entity_id, entity, users, invitations)
        journal = RunJournal(None if dry_run else self._journal_repository, entity_id, OPERATION)
        record = DemolitionRecord(
            entity_id=entity_id,
            entity=entity,
            transaction=transaction,
            deleted_users=list(users),
            dry_run=dry_run,
            run_id=journal.run_id,
        )

        if dry_run:
            logger.info(
                f"Dry run: would delete {transaction.count(USERS.name)} users, "
                f"{transaction.count(INVITATIONS.name)} invitations and "
                f"{transaction.count(ENTITIES.name)} entity rows for {entity_id}"
            )
            return record

        if not record.found_anything:
            logger.info(f"Nothing to demolish for entity {entity_id}")
            return record

        # Fatal on failure: nothing else is attempted
        try:
            await self._store.transact_delete(transaction)
        except Exception as e:
            await journal.failed(STEP_DATABASE, str(e))
            raise
        await journal.completed(STEP_DATABASE, f"{len(transaction)} items")
        logger.info(f"Deleted entity {entity_id} and {len(users)} users from the database")

        await self._delete_accounts(record)
        if record.failed_accounts:
            await journal.failed(STEP_ACCOUNTS, f"{len(record.failed_accounts)} of {len(users)} failed")
        else:
            await journal.completed(STEP_ACCOUNTS, f"{len(record.deleted_accounts)} accounts")

        if notify:
            await self._notify(record)
            await journal.completed(STEP_NOTIFY, f"{len(record.notified)} notified")
        else:
            await journal.skipped(STEP_NOTIFY)

        return record

    def build_transaction(
        self,
        entity_id: str,
        entity: Optional[Entity],
        users: List[User],
        invitations: List[Invitation],
    ) -> DeleteTransaction:
        """Delete items for every dependent of the entity, then the entity itself."""
        dependents: Dict[str, list] = {USERS.name: users, INVITATIONS.name: invitations}
        transaction = DeleteTransaction()
        for cascade in CASCADES[ENTITIES.name]:
            for row in dependents.get(cascade.table.name, []):
                if getattr(row, cascade.reference_column) != entity_id:
                    continue
                key = {column: getattr(row, column) for column in cascade.table.key}
                transaction.add(cascade.table.name, **key)
        if entity is not None:
            transaction.add(ENTITIES.name, entity_id=entity_id)
        return transaction

    async def _delete_accounts(self, record: DemolitionRecord) -> None:
        for user in record.deleted_users:
            if not user.sub:
                logger.warning(f"Deleted user {user.email} has no identity directory reference")
                continue
            try:
                await self._directory.delete_account(user.sub)
                record.deleted_accounts.append(user.sub)
                logger.info(f"Deleted identity directory account {user.sub} of {user.email}")
            except AccountNotFoundError as e:
                record.failed_accounts[user.sub] = str(e)
                logger.warning(f"Identity directory account {user.sub} of {user.email} not found: {e}")
            except Exception as e:
                record.failed_accounts[user.sub] = str(e)
                logger.error(f"Failed to delete identity directory account {user.sub} of {user.email}: {e}")

    async def _notify(self, record: DemolitionRecord) -> None:
        entity_name = record.entity.entity_name if record.entity else record.entity_id
        for user in record.deleted_users:
            if not is_email_address(user.email):
                logger.debug(f"Skipping cancellation notice for masked address {user.email}")
                continue
            try:
                await self._notifier.send(build_cancellation_email(user.email, entity_name))
                record.notified.append(user.email)
            except Exception as e:
                logger.error(f"Failed to send cancellation notice to {user.email}: {e}")
