"""Database utilities for ett-lifecycle."""

from .connection import DatabaseManager, rows_affected
from .schema import CASCADES, TABLES, Cascade, TableSpec, ensure_schema
from .transactions import DeleteItem, DeleteTransaction, PostgresTransactionalStore

__all__ = [
    # Connection management
    "DatabaseManager",
    "rows_affected",
    # Schema
    "CASCADES",
    "TABLES",
    "Cascade",
    "TableSpec",
    "ensure_schema",
    # Transactions
    "DeleteItem",
    "DeleteTransaction",
    "PostgresTransactionalStore",
]
