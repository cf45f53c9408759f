"""Lifecycle features: entities, users, invitations, personnel, demolition and tasks."""
