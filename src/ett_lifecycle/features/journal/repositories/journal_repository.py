"""Journal repository implementation using asyncpg."""

import logging
from typing import List

from ....config.settings import EttSettings
from ....database.connection import DatabaseManager
from ..entities.journal import JournalEntry, StepStatus

logger = logging.getLogger(__name__)

JOURNAL_INSERT = """
    INSERT INTO {table} (run_id, entity_id, operation, step, status, detail, recorded_at)
    VALUES ($1, $2, $3, $4, $5, $6, $7)
"""

JOURNAL_LIST_BY_RUN = """
    SELECT run_id, entity_id, operation, step, status, detail, recorded_at
    FROM {table} WHERE run_id = $1 ORDER BY id
"""


class JournalDatabaseRepository:
    """Stores run step markers in the correction journal table."""

    def __init__(self, database: DatabaseManager, settings: EttSettings):
        self._db = database
        self._table = settings.table(settings.correction_journal_table)

    async def append(self, entry: JournalEntry) -> None:
        await self._db.execute(
            JOURNAL_INSERT.format(table=self._table),
            entry.run_id,
            entry.entity_id,
            entry.operation,
            entry.step,
            entry.status.value,
            entry.detail,
            entry.recorded_at,
        )
        logger.debug(f"Journal {entry.operation} {entry.run_id}: {entry.step} {entry.status.value}")

    async def entries_for_run(self, run_id: str) -> List[JournalEntry]:
        rows = await self._db.fetch(JOURNAL_LIST_BY_RUN.format(table=self._table), run_id)
        return [
            JournalEntry(
                run_id=row["run_id"],
                entity_id=row["entity_id"],
                operation=row["operation"],
                step=row["step"],
                status=StepStatus(row["status"]),
                detail=row["detail"],
                recorded_at=row["recorded_at"],
            )
            for row in rows
        ]
