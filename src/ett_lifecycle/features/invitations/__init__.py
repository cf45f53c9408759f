"""Invitation feature: admission control and the registration state machine."""

from .entities.invitation import Invitation, InvitationState
from .entities.protocols import InvitationRepository
from .repositories.invitation_repository import InvitationDatabaseRepository

__all__ = [
    "Invitation",
    "InvitationState",
    "InvitationRepository",
    "InvitationDatabaseRepository",
]
