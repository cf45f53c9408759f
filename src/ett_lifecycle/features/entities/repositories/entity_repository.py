"""Entity repository implementation using asyncpg."""

import logging
from typing import List, Optional

from ....config.settings import EttSettings
from ....database.connection import DatabaseManager, rows_affected
from ..entities.entity import Entity
from ..utils.queries import (
    ENTITY_INSERT,
    ENTITY_GET_BY_ID,
    ENTITY_GET_ACTIVE_BY_ID,
    ENTITY_FIND_BY_NAME,
    ENTITY_DELETE,
)
from ..utils.validation import entity_update_fields, prepare_entity_for_create

logger = logging.getLogger(__name__)


class EntityDatabaseRepository:
    """Database repository for entity records."""

    def __init__(self, database: DatabaseManager, settings: EttSettings):
        self._db = database
        self._table = settings.table(settings.entities_table)

    async def create(self, entity: Entity) -> Entity:
        entity = prepare_entity_for_create(entity)
        query = ENTITY_INSERT.format(table=self._table)
        row = await self._db.fetchrow(
            query,
            entity.entity_id,
            entity.entity_name,
            entity.description,
            entity.active.value,
            entity.create_timestamp,
            entity.update_timestamp,
        )
        logger.info(f"Created entity {entity.entity_id} ({entity.entity_name})")
        return Entity.from_row(dict(row)) if row else entity

    async def read(self, entity_id: str) -> Optional[Entity]:
        if not entity_id:
            return None
        row = await self._db.fetchrow(ENTITY_GET_BY_ID.format(table=self._table), entity_id)
        return Entity.from_row(dict(row)) if row else None

    async def read_active(self, entity_id: str) -> Optional[Entity]:
        if not entity_id:
            return None
        row = await self._db.fetchrow(ENTITY_GET_ACTIVE_BY_ID.format(table=self._table), entity_id)
        return Entity.from_row(dict(row)) if row else None

    async def find_by_name(self, entity_name: str) -> List[Entity]:
        rows = await self._db.fetch(ENTITY_FIND_BY_NAME.format(table=self._table), entity_name.strip())
        return [Entity.from_row(dict(row)) for row in rows]

    async def update(self, entity_id: str, **changes) -> Optional[Entity]:
        fields = entity_update_fields(entity_id, **changes)
        assignments = ", ".join(f"{name} = ${i + 2}" for i, name in enumerate(fields))
        query = f"UPDATE {self._table} SET {assignments} WHERE entity_id = $1 RETURNING *"
        row = await self._db.fetchrow(query, entity_id, *fields.values())
        logger.debug(f"Updated entity {entity_id}: {list(fields)}")
        return Entity.from_row(dict(row)) if row else None

    async def delete(self, entity_id: str) -> bool:
        status = await self._db.execute(ENTITY_DELETE.format(table=self._table), entity_id)
        return rows_affected(status) > 0
