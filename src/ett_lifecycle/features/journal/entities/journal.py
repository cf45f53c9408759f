"""Step markers for multi-step lifecycle runs.

Corrections and demolitions touch several systems that cannot share a
transaction. Each step writes a marker as it completes or fails, so a run
that stopped part way can be audited afterwards.
"""

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ....utils.datetime import iso_now

logger = logging.getLogger(__name__)


class StepStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class JournalEntry:
    """One recorded step of a run."""
    run_id: str
    entity_id: str
    operation: str
    step: str
    status: StepStatus
    detail: Optional[str] = None
    recorded_at: str = field(default_factory=iso_now)


class RunJournal:
    """Collects the step markers of one run and forwards them to a journal repository."""

    def __init__(self, repository, entity_id: str, operation: str, run_id: Optional[str] = None):
        self._repository = repository
        self.run_id = run_id or str(uuid.uuid4())
        self.entity_id = entity_id
        self.operation = operation
        self.entries: List[JournalEntry] = []

    async def record(self, step: str, status: StepStatus, detail: Optional[str] = None) -> JournalEntry:
        entry = JournalEntry(
            run_id=self.run_id,
            entity_id=self.entity_id,
            operation=self.operation,
            step=step,
            status=status,
            detail=detail,
        )
        self.entries.append(entry)
        if self._repository is not None:
            try:
                await self._repository.append(entry)
            except Exception as e:
                logger.error(f"Failed to persist journal entry {self.operation}/{step} for run {self.run_id}: {e}")
        return entry

    async def completed(self, step: str, detail: Optional[str] = None) -> JournalEntry:
        return await self.record(step, StepStatus.COMPLETED, detail)

    async def failed(self, step: str, detail: Optional[str] = None) -> JournalEntry:
        return await self.record(step, StepStatus.FAILED, detail)

    async def skipped(self, step: str, detail: Optional[str] = None) -> JournalEntry:
        return await self.record(step, StepStatus.SKIPPED, detail)

    def steps(self, status: Optional[StepStatus] = None) -> List[str]:
        return [entry.step for entry in self.entries if status is None or entry.status == status]
