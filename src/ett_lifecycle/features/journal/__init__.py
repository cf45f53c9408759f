"""Journal feature: persisted step markers for corrections and demolitions."""

from .entities.journal import JournalEntry, RunJournal, StepStatus
from .entities.protocols import JournalRepository
from .repositories.journal_repository import JournalDatabaseRepository

__all__ = ["JournalEntry", "RunJournal", "StepStatus", "JournalRepository", "JournalDatabaseRepository"]
