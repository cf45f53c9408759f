"""Exception hierarchy for ett-lifecycle."""

from .base import EttError, create_error_response, get_http_status_code
from .domain import (
    # Configuration / infrastructure
    ConfigurationError,
    DatabaseError,
    TransactionError,
    IdentityDirectoryError,
    AccountNotFoundError,
    NotificationError,
    SchedulerError,

    # Validation
    ValidationError,
    RequiredFieldError,
    InvalidEnumValueError,
    NoFieldsToUpdateError,
    MissingParameterError,

    # Business rules
    BusinessRuleError,
    InvitationConflictError,
    InvitationRejectedError,
    InactiveEntityError,
    EntityNotFoundError,
    EntityNameInUseError,
    UserNotFoundError,
    SelfSuccessionError,
    DuplicateEmailError,
    ProtectedEntityError,
    InvitationStateError,

    # Invitation authorization
    InvitationUnauthorizedError,
    InvitationNotFoundError,
    NotAcknowledgedError,
    InvitationRetractedError,
)
from .http_mapping import HTTP_STATUS_MAP, is_client_error

__all__ = [
    "EttError",
    "create_error_response",
    "get_http_status_code",
    "is_client_error",
    "HTTP_STATUS_MAP",
    "ConfigurationError",
    "DatabaseError",
    "TransactionError",
    "IdentityDirectoryError",
    "AccountNotFoundError",
    "NotificationError",
    "SchedulerError",
    "ValidationError",
    "RequiredFieldError",
    "InvalidEnumValueError",
    "NoFieldsToUpdateError",
    "MissingParameterError",
    "BusinessRuleError",
    "InvitationConflictError",
    "InvitationRejectedError",
    "InactiveEntityError",
    "EntityNotFoundError",
    "EntityNameInUseError",
    "UserNotFoundError",
    "SelfSuccessionError",
    "DuplicateEmailError",
    "ProtectedEntityError",
    "InvitationStateError",
    "InvitationUnauthorizedError",
    "InvitationNotFoundError",
    "NotAcknowledgedError",
    "InvitationRetractedError",
]
