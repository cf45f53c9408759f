"""Core exceptions and value objects for ett-lifecycle."""
