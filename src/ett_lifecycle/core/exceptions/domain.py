"""Domain-specific exceptions for ett-lifecycle.

This module defines the exceptions raised by the repositories, the external
collaborator adapters and the lifecycle orchestration services.
"""

from typing import Any, Dict, Optional

from .base import EttError


# Configuration Errors
class ConfigurationError(EttError):
    """Raised when there's a configuration issue."""
    pass


# Database Errors
class DatabaseError(EttError):
    """Base class for database-related errors."""
    pass


class TransactionError(DatabaseError):
    """Raised when a multi-item database transaction fails."""
    pass


# Validation Errors
class ValidationError(EttError):
    """Base class for record validation errors."""
    pass


class RequiredFieldError(ValidationError):
    """Raised when a required field is missing from a record payload."""

    def __init__(self, record_type: str, task: str, field_name: str, payload: Dict[str, Any]):
        super().__init__(
            f"{record_type} {task} error: Missing {field_name} in {payload}",
            details={"record_type": record_type, "field": field_name, "payload": payload},
        )
        self.field_name = field_name


class InvalidEnumValueError(ValidationError):
    """Raised when a field holds a value outside its enumeration."""

    def __init__(self, record_type: str, field_name: str, value: Any, payload: Optional[Dict[str, Any]] = None):
        super().__init__(
            f"{record_type} error: Invalid value for {field_name}: {value}",
            details={"record_type": record_type, "field": field_name, "value": value, "payload": payload or {}},
        )


class NoFieldsToUpdateError(ValidationError):
    """Raised when an update carries nothing besides the record key."""
    pass


class MissingParameterError(ValidationError):
    """Raised when a task is invoked without a required parameter."""
    pass


# Business Rule Errors
class BusinessRuleError(EttError):
    """Raised when a request violates a lifecycle business rule."""
    pass


class InvitationConflictError(BusinessRuleError):
    """Raised when an outstanding invitation blocks a new one."""
    pass


class InvitationRejectedError(BusinessRuleError):
    """Raised when admission control refuses an invitation."""
    pass


class InactiveEntityError(BusinessRuleError):
    """Raised when an invitation targets a missing or inactive entity."""
    pass


class EntityNotFoundError(BusinessRuleError):
    """Raised when an entity cannot be found."""
    pass


class EntityNameInUseError(BusinessRuleError):
    """Raised when a proposed entity name is already taken."""
    pass


class UserNotFoundError(BusinessRuleError):
    """Raised when a user cannot be found."""
    pass


class SelfSuccessionError(BusinessRuleError):
    """Raised when a representative tries to name themselves as successor."""
    pass


class DuplicateEmailError(BusinessRuleError):
    """Raised when the replaced and replacing emails are the same."""
    pass


class ProtectedEntityError(BusinessRuleError):
    """Raised when an operation targets the waiting room entity."""
    pass


class InvitationStateError(BusinessRuleError):
    """Raised when an invitation cannot make the requested transition."""
    pass


# Invitation Authorization Errors
class InvitationUnauthorizedError(EttError):
    """Base class for invitation code authorization failures."""
    pass


class InvitationNotFoundError(InvitationUnauthorizedError):
    """Raised when no invitation matches a code."""
    pass


class NotAcknowledgedError(InvitationUnauthorizedError):
    """Raised when registering before the privacy policy was acknowledged."""
    pass


class InvitationRetractedError(InvitationUnauthorizedError):
    """Raised when a retracted invitation is used."""
    pass


# External Collaborator Errors
class IdentityDirectoryError(EttError):
    """Raised when an identity directory operation fails."""
    pass


class AccountNotFoundError(IdentityDirectoryError):
    """Raised when an identity directory account does not exist."""
    pass


class NotificationError(EttError):
    """Raised when an email notification cannot be sent."""
    pass


class SchedulerError(EttError):
    """Raised when a delayed callback cannot be armed."""
    pass
