"""User feature: entity memberships."""

from .entities.user import Delegate, User
from .entities.protocols import UserRepository
from .repositories.user_repository import UserDatabaseRepository

__all__ = ["Delegate", "User", "UserRepository", "UserDatabaseRepository"]
