"""User repository implementation using asyncpg."""

import json
import logging
from typing import List, Optional

from ....config.settings import EttSettings
from ....database.connection import DatabaseManager, rows_affected
from ..entities.user import User
from ..utils.queries import (
    USER_INSERT,
    USER_GET_BY_KEY,
    USER_LIST_BY_EMAIL,
    USER_LIST_BY_ENTITY,
    USER_LIST_ACTIVE_BY_ENTITY,
    USER_DELETE_BY_KEY,
    USER_DELETE_BY_EMAIL,
)
from ..utils.validation import prepare_user_for_create, user_update_fields

logger = logging.getLogger(__name__)


class UserDatabaseRepository:
    """Database repository for user records."""

    def __init__(self, database: DatabaseManager, settings: EttSettings):
        self._db = database
        self._table = settings.table(settings.users_table)

    async def create(self, user: User) -> User:
        user = prepare_user_for_create(user)
        delegate = json.dumps(user.delegate.to_dict()) if user.delegate else None
        row = await self._db.fetchrow(
            USER_INSERT.format(table=self._table),
            user.email,
            user.entity_id,
            user.role.value,
            user.sub,
            user.active.value,
            user.fullname,
            user.phone_number,
            user.title,
            delegate,
            user.create_timestamp,
            user.update_timestamp,
        )
        logger.info(f"Created user {user.email} in entity {user.entity_id} as {user.role.value}")
        return User.from_row(dict(row)) if row else user

    async def read(self, email: str, entity_id: str) -> Optional[User]:
        if not email or not entity_id:
            return None
        row = await self._db.fetchrow(USER_GET_BY_KEY.format(table=self._table), email.lower(), entity_id)
        return User.from_row(dict(row)) if row else None

    async def find_by_email(self, email: str) -> List[User]:
        rows = await self._db.fetch(USER_LIST_BY_EMAIL.format(table=self._table), email.lower())
        return [User.from_row(dict(row)) for row in rows]

    async def find_by_entity(self, entity_id: str, active_only: bool = False) -> List[User]:
        query = USER_LIST_ACTIVE_BY_ENTITY if active_only else USER_LIST_BY_ENTITY
        rows = await self._db.fetch(query.format(table=self._table), entity_id)
        return [User.from_row(dict(row)) for row in rows]

    async def update(self, email: str, entity_id: str, **changes) -> Optional[User]:
        fields = user_update_fields(email, entity_id, **changes)
        if "delegate" in fields:
            fields["delegate"] = json.dumps(fields["delegate"])
        assignments = ", ".join(
            f"{name} = ${i + 3}::jsonb" if name == "delegate" else f"{name} = ${i + 3}"
            for i, name in enumerate(fields)
        )
        query = f"UPDATE {self._table} SET {assignments} WHERE email = $1 AND entity_id = $2 RETURNING *"
        row = await self._db.fetchrow(query, email.lower(), entity_id, *fields.values())
        logger.debug(f"Updated user {email} in entity {entity_id}: {list(fields)}")
        return User.from_row(dict(row)) if row else None

    async def delete(self, email: str, entity_id: Optional[str] = None) -> int:
        if entity_id:
            status = await self._db.execute(USER_DELETE_BY_KEY.format(table=self._table), email.lower(), entity_id)
        else:
            status = await self._db.execute(USER_DELETE_BY_EMAIL.format(table=self._table), email.lower())
        deleted = rows_affected(status)
        logger.debug(f"Deleted {deleted} user rows for {email}")
        return deleted
