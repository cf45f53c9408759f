"""
Table layout and cascade declarations.

The store enforces no foreign keys between entities and the users or
invitations that reference them, so dependents are declared here and deleted
explicitly before their parent.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableSpec:
    """Logical table name, the settings attribute holding its physical name, and its key columns."""
    name: str
    settings_attr: str
    key: Tuple[str, ...]


ENTITIES = TableSpec(name="entities", settings_attr="entities_table", key=("entity_id",))
USERS = TableSpec(name="users", settings_attr="users_table", key=("email", "entity_id"))
INVITATIONS = TableSpec(name="invitations", settings_attr="invitations_table", key=("code",))

TABLES: Dict[str, TableSpec] = {
    ENTITIES.name: ENTITIES,
    USERS.name: USERS,
    INVITATIONS.name: INVITATIONS,
}


@dataclass(frozen=True)
class Cascade:
    """A dependent table whose rows reference a parent through a column."""
    table: TableSpec
    reference_column: str


# Dependents are deleted in list order, before the parent row
CASCADES: Dict[str, List[Cascade]] = {
    ENTITIES.name: [
        Cascade(table=USERS, reference_column="entity_id"),
        Cascade(table=INVITATIONS, reference_column="entity_id"),
    ],
    USERS.name: [],
    INVITATIONS.name: [],
}


DDL = """
CREATE SCHEMA IF NOT EXISTS {schema};

CREATE TABLE IF NOT EXISTS {entities} (
    entity_id TEXT PRIMARY KEY,
    entity_name TEXT NOT NULL,
    description TEXT,
    active CHAR(1) NOT NULL DEFAULT 'Y',
    create_timestamp TEXT,
    update_timestamp TEXT
);
CREATE INDEX IF NOT EXISTS entities_name_idx ON {entities} (lower(entity_name));

CREATE TABLE IF NOT EXISTS {users} (
    email TEXT NOT NULL,
    entity_id TEXT NOT NULL,
    role TEXT NOT NULL,
    sub TEXT NOT NULL,
    active CHAR(1) NOT NULL DEFAULT 'Y',
    fullname TEXT,
    phone_number TEXT,
    title TEXT,
    delegate JSONB,
    create_timestamp TEXT,
    update_timestamp TEXT,
    PRIMARY KEY (email, entity_id)
);
CREATE INDEX IF NOT EXISTS users_entity_idx ON {users} (entity_id);

CREATE TABLE IF NOT EXISTS {invitations} (
    code TEXT PRIMARY KEY,
    role TEXT NOT NULL,
    email TEXT,
    entity_id TEXT,
    entity_name TEXT,
    fullname TEXT,
    title TEXT,
    delegate JSONB,
    message_id TEXT,
    sent_timestamp TEXT,
    acknowledged_timestamp TEXT,
    registered_timestamp TEXT,
    retracted_timestamp TEXT,
    signup_parameter TEXT
);
CREATE INDEX IF NOT EXISTS invitations_email_idx ON {invitations} (email);
CREATE INDEX IF NOT EXISTS invitations_entity_idx ON {invitations} (entity_id);

CREATE TABLE IF NOT EXISTS {config} (
    name TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    config_type TEXT NOT NULL,
    description TEXT
);

CREATE TABLE IF NOT EXISTS {correction_journal} (
    id BIGSERIAL PRIMARY KEY,
    run_id TEXT NOT NULL,
    entity_id TEXT NOT NULL,
    operation TEXT NOT NULL,
    step TEXT NOT NULL,
    status TEXT NOT NULL,
    detail TEXT,
    recorded_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS correction_journal_run_idx ON {correction_journal} (run_id);

CREATE TABLE IF NOT EXISTS {email_log} (
    id BIGSERIAL PRIMARY KEY,
    message_id TEXT,
    subject TEXT NOT NULL,
    recipients TEXT NOT NULL,
    category TEXT,
    status TEXT NOT NULL,
    error TEXT,
    sent_at TEXT NOT NULL
);
"""


def table_names(settings) -> Dict[str, str]:
    """Schema qualified physical table names keyed by logical name."""
    return {
        "entities": settings.table(settings.entities_table),
        "users": settings.table(settings.users_table),
        "invitations": settings.table(settings.invitations_table),
        "config": settings.table(settings.config_table),
        "correction_journal": settings.table(settings.correction_journal_table),
        "email_log": settings.table(settings.email_log_table),
    }


async def ensure_schema(database, settings) -> None:
    """Create the lifecycle tables if they do not exist."""
    ddl = DDL.format(schema=settings.db_schema, **table_names(settings))
    await database.execute(ddl)
    logger.info(f"Ensured lifecycle schema {settings.db_schema}")
