"""Tests for journal persistence and schema creation."""

import pytest

from ett_lifecycle.database.schema import ensure_schema
from ett_lifecycle.features.journal.entities.journal import RunJournal, StepStatus
from ett_lifecycle.features.journal.repositories.journal_repository import JournalDatabaseRepository


class TestRunJournal:
    @pytest.mark.asyncio
    async def test_entries_are_forwarded(self, journal_repository):
        journal = RunJournal(journal_repository, "warnerbros", "demolition")
        await journal.completed("DELETE_RECORDS", "7 items")
        await journal.skipped("NOTIFY_USERS")

        assert journal.steps(StepStatus.COMPLETED) == ["DELETE_RECORDS"]
        assert [entry.step for entry in await journal_repository.entries_for_run(journal.run_id)] == [
            "DELETE_RECORDS", "NOTIFY_USERS",
        ]

    @pytest.mark.asyncio
    async def test_persistence_failure_is_logged_not_raised(self, mock_database, settings):
        mock_database.execute.side_effect = RuntimeError("disk full")
        journal = RunJournal(JournalDatabaseRepository(mock_database, settings), "warnerbros", "demolition")

        entry = await journal.failed("DELETE_RECORDS", "conflict")
        assert entry.status == StepStatus.FAILED
        assert len(journal.entries) == 1


class TestJournalDatabaseRepository:
    @pytest.mark.asyncio
    async def test_append(self, mock_database, settings):
        journal = RunJournal(JournalDatabaseRepository(mock_database, settings), "warnerbros", "demolition")
        await journal.completed("DELETE_RECORDS")

        args = mock_database.execute.call_args.args
        assert "ett.correction_journal" in args[0]
        assert args[1] == journal.run_id
        assert args[5] == "completed"

    @pytest.mark.asyncio
    async def test_entries_for_run(self, mock_database, settings):
        mock_database.fetch.return_value = [{
            "run_id": "r1", "entity_id": "warnerbros", "operation": "demolition", "step": "DELETE_RECORDS",
            "status": "failed", "detail": "conflict", "recorded_at": "2024-01-01T00:00:00.000Z",
        }]
        entries = await JournalDatabaseRepository(mock_database, settings).entries_for_run("r1")
        assert entries[0].status == StepStatus.FAILED


class TestSchema:
    @pytest.mark.asyncio
    async def test_ensure_schema_uses_configured_names(self, mock_database, settings):
        await ensure_schema(mock_database, settings)
        ddl = mock_database.execute.call_args.args[0]
        assert "CREATE SCHEMA IF NOT EXISTS ett" in ddl
        assert "ett.invitations" in ddl
        assert "ett.email_log" in ddl
