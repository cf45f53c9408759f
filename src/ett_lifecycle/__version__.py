"""Version information for ett-lifecycle."""

__version__ = "0.4.0"
