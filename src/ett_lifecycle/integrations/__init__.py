"""Adapters for the identity directory, email and scheduler collaborators."""
