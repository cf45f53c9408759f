"""Invitation repository implementation using asyncpg."""

import json
import logging
from typing import List, Optional

from ....config.constants import Role
from ....config.settings import EttSettings
from ....database.connection import DatabaseManager, rows_affected
from ..entities.invitation import Invitation
from ..utils.queries import (
    INVITATION_INSERT,
    INVITATION_GET_BY_CODE,
    INVITATION_LIST_BY_EMAIL,
    INVITATION_LIST_BY_EMAIL_AND_ENTITY,
    INVITATION_LIST_BY_ENTITY,
    INVITATION_LIST_BY_ENTITY_AND_ROLE,
    INVITATION_DELETE_BY_CODE,
    INVITATION_DELETE_BY_EMAIL_AND_ENTITY,
)
from ..utils.validation import invitation_update_fields, prepare_invitation_for_create

logger = logging.getLogger(__name__)


class InvitationDatabaseRepository:
    """Database repository for invitation records."""

    def __init__(self, database: DatabaseManager, settings: EttSettings):
        self._db = database
        self._table = settings.table(settings.invitations_table)

    async def create(self, invitation: Invitation) -> Invitation:
        invitation = prepare_invitation_for_create(invitation)
        delegate = json.dumps(invitation.delegate.to_dict()) if invitation.delegate else None
        row = await self._db.fetchrow(
            INVITATION_INSERT.format(table=self._table),
            invitation.code,
            invitation.role.value,
            invitation.email,
            invitation.entity_id,
            invitation.entity_name,
            invitation.fullname,
            invitation.title,
            delegate,
            invitation.message_id,
            invitation.sent_timestamp,
            invitation.acknowledged_timestamp,
            invitation.registered_timestamp,
            invitation.retracted_timestamp,
            invitation.signup_parameter,
        )
        logger.info(f"Created invitation {invitation.code} for {invitation.role.value} in entity {invitation.entity_id}")
        return Invitation.from_row(dict(row)) if row else invitation

    async def read(self, code: str) -> Optional[Invitation]:
        if not code:
            return None
        row = await self._db.fetchrow(INVITATION_GET_BY_CODE.format(table=self._table), code)
        return Invitation.from_row(dict(row)) if row else None

    async def find_by_email(self, email: str, entity_id: Optional[str] = None) -> List[Invitation]:
        if entity_id:
            rows = await self._db.fetch(
                INVITATION_LIST_BY_EMAIL_AND_ENTITY.format(table=self._table), email.lower(), entity_id
            )
        else:
            rows = await self._db.fetch(INVITATION_LIST_BY_EMAIL.format(table=self._table), email.lower())
        return [Invitation.from_row(dict(row)) for row in rows]

    async def find_by_entity(self, entity_id: str, role: Optional[Role] = None) -> List[Invitation]:
        if role:
            rows = await self._db.fetch(
                INVITATION_LIST_BY_ENTITY_AND_ROLE.format(table=self._table), entity_id, Role(role).value
            )
        else:
            rows = await self._db.fetch(INVITATION_LIST_BY_ENTITY.format(table=self._table), entity_id)
        return [Invitation.from_row(dict(row)) for row in rows]

    async def update(self, code: str, **changes) -> Optional[Invitation]:
        fields = invitation_update_fields(code, **changes)
        if "delegate" in fields:
            fields["delegate"] = json.dumps(fields["delegate"])
        assignments = ", ".join(
            f"{name} = ${i + 2}::jsonb" if name == "delegate" else f"{name} = ${i + 2}"
            for i, name in enumerate(fields)
        )
        query = f"UPDATE {self._table} SET {assignments} WHERE code = $1 RETURNING *"
        row = await self._db.fetchrow(query, code, *fields.values())
        logger.debug(f"Updated invitation {code}: {list(fields)}")
        return Invitation.from_row(dict(row)) if row else None

    async def delete(self, code: str) -> bool:
        status = await self._db.execute(INVITATION_DELETE_BY_CODE.format(table=self._table), code)
        return rows_affected(status) > 0

    async def delete_by_email(self, email: str, entity_id: str) -> int:
        status = await self._db.execute(
            INVITATION_DELETE_BY_EMAIL_AND_ENTITY.format(table=self._table), email.lower(), entity_id
        )
        return rows_affected(status)
