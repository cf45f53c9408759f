"""SQL queries for user operations.

Queries take the schema qualified table name through the {table} placeholder.
"""

USER_INSERT = """
    INSERT INTO {table} (
        email, entity_id, role, sub, active, fullname, phone_number, title,
        delegate, create_timestamp, update_timestamp
    )
    VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9::jsonb, $10, $11)
    RETURNING *
"""

USER_GET_BY_KEY = """
    SELECT * FROM {table} WHERE email = $1 AND entity_id = $2
"""

USER_LIST_BY_EMAIL = """
    SELECT * FROM {table} WHERE email = $1 ORDER BY create_timestamp
"""

USER_LIST_BY_ENTITY = """
    SELECT * FROM {table} WHERE entity_id = $1 ORDER BY create_timestamp
"""

USER_LIST_ACTIVE_BY_ENTITY = """
    SELECT * FROM {table} WHERE entity_id = $1 AND active = 'Y' ORDER BY create_timestamp
"""

USER_DELETE_BY_KEY = """
    DELETE FROM {table} WHERE email = $1 AND entity_id = $2
"""

USER_DELETE_BY_EMAIL = """
    DELETE FROM {table} WHERE email = $1
"""
