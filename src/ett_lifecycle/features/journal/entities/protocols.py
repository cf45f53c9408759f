"""Protocol interfaces for journal persistence."""

from abc import abstractmethod
from typing import List, Protocol, runtime_checkable

from .journal import JournalEntry


@runtime_checkable
class JournalRepository(Protocol):
    """Protocol for persisting run step markers."""

    @abstractmethod
    async def append(self, entry: JournalEntry) -> None:
        """Persist one step marker."""
        ...

    @abstractmethod
    async def entries_for_run(self, run_id: str) -> List[JournalEntry]:
        """All markers of a run in recording order."""
        ...
