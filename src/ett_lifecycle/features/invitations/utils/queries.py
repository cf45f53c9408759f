"""SQL queries for invitation operations.

Queries take the schema qualified table name through the {table} placeholder.
"""

INVITATION_INSERT = """
    INSERT INTO {table} (
        code, role, email, entity_id, entity_name, fullname, title, delegate,
        message_id, sent_timestamp, acknowledged_timestamp, registered_timestamp,
        retracted_timestamp, signup_parameter
    )
    VALUES ($1, $2, $3, $4, $5, $6, $7, $8::jsonb, $9, $10, $11, $12, $13, $14)
    RETURNING *
"""

INVITATION_GET_BY_CODE = """
    SELECT * FROM {table} WHERE code = $1
"""

INVITATION_LIST_BY_EMAIL = """
    SELECT * FROM {table} WHERE email = $1 ORDER BY sent_timestamp
"""

INVITATION_LIST_BY_EMAIL_AND_ENTITY = """
    SELECT * FROM {table} WHERE email = $1 AND entity_id = $2 ORDER BY sent_timestamp
"""

INVITATION_LIST_BY_ENTITY = """
    SELECT * FROM {table} WHERE entity_id = $1 ORDER BY sent_timestamp
"""

INVITATION_LIST_BY_ENTITY_AND_ROLE = """
    SELECT * FROM {table} WHERE entity_id = $1 AND role = $2 ORDER BY sent_timestamp
"""

INVITATION_DELETE_BY_CODE = """
    DELETE FROM {table} WHERE code = $1
"""

INVITATION_DELETE_BY_EMAIL_AND_ENTITY = """
    DELETE FROM {table} WHERE email = $1 AND entity_id = $2
"""
