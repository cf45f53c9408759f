"""
Multi-item delete transactions.

A DeleteTransaction is plain data, so it can be built and returned for audit
without ever being submitted (dry runs).
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..config.settings import EttSettings
from ..core.exceptions import TransactionError
from .schema import TABLES
from .connection import DatabaseManager, rows_affected

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeleteItem:
    """Delete of one row identified by its full key."""
    table: str
    key: Dict[str, Any]

    def __post_init__(self):
        spec = TABLES.get(self.table)
        if spec is None:
            raise ValueError(f"Unknown table: {self.table}")
        missing = [column for column in spec.key if not self.key.get(column)]
        if missing:
            raise ValueError(f"Delete from {self.table} is missing key columns: {', '.join(missing)}")

    def to_dict(self) -> Dict[str, Any]:
        return {"Delete": {"table": self.table, "key": dict(self.key)}}


@dataclass
class DeleteTransaction:
    """An ordered all-or-nothing group of deletes."""
    items: List[DeleteItem] = field(default_factory=list)

    def add(self, table: str, **key) -> DeleteItem:
        item = DeleteItem(table=table, key=key)
        self.items.append(item)
        return item

    def count(self, table: str) -> int:
        return len([item for item in self.items if item.table == table])

    def __len__(self) -> int:
        return len(self.items)

    def to_dict(self) -> Dict[str, Any]:
        return {"TransactItems": [item.to_dict() for item in self.items]}


class PostgresTransactionalStore:
    """Submits delete transactions inside a single asyncpg transaction."""

    def __init__(self, database: DatabaseManager, settings: EttSettings):
        self._database = database
        self._settings = settings

    def _physical_table(self, table: str) -> str:
        spec = TABLES[table]
        return self._settings.table(getattr(self._settings, spec.settings_attr))

    async def transact_delete(self, transaction: DeleteTransaction) -> int:
        """Run every delete of the transaction atomically, returning the rows removed."""
        if not transaction.items:
            return 0

        deleted = 0
        try:
            async with self._database.transaction() as conn:
                for item in transaction.items:
                    columns = list(item.key.keys())
                    where = " AND ".join(f"{column} = ${i + 1}" for i, column in enumerate(columns))
                    query = f"DELETE FROM {self._physical_table(item.table)} WHERE {where}"
                    status = await conn.execute(query, *[item.key[column] for column in columns])
                    deleted += rows_affected(status)
        except Exception as e:
            logger.error(f"Delete transaction of {len(transaction)} items failed: {e}")
            raise TransactionError(f"Delete transaction failed: {e}") from e

        logger.info(f"Delete transaction removed {deleted} rows across {len(transaction)} items")
        return deleted
