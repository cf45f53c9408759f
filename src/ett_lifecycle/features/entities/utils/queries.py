"""SQL queries for entity operations.

Queries take the schema qualified table name through the {table} placeholder.
"""

ENTITY_INSERT = """
    INSERT INTO {table} (entity_id, entity_name, description, active, create_timestamp, update_timestamp)
    VALUES ($1, $2, $3, $4, $5, $6)
    RETURNING *
"""

ENTITY_GET_BY_ID = """
    SELECT * FROM {table} WHERE entity_id = $1
"""

ENTITY_GET_ACTIVE_BY_ID = """
    SELECT * FROM {table} WHERE entity_id = $1 AND active = 'Y'
"""

ENTITY_FIND_BY_NAME = """
    SELECT * FROM {table} WHERE lower(entity_name) = lower($1)
"""

ENTITY_DELETE = """
    DELETE FROM {table} WHERE entity_id = $1
"""
