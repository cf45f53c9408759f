"""HTTP status code mapping for exceptions.

Task responses carry an HTTP style status code. This module maps exception
classes to those codes, walking the class hierarchy so that subclasses inherit
the status of their nearest mapped ancestor.
"""

from typing import Dict, Type

from .domain import *


HTTP_STATUS_MAP: Dict[Type[Exception], int] = {
    # 400 Bad Request
    ValidationError: 400,
    RequiredFieldError: 400,
    InvalidEnumValueError: 400,
    NoFieldsToUpdateError: 400,
    MissingParameterError: 400,
    BusinessRuleError: 400,
    InvitationConflictError: 400,
    InvitationRejectedError: 400,
    InactiveEntityError: 400,
    EntityNotFoundError: 400,
    EntityNameInUseError: 400,
    UserNotFoundError: 400,
    SelfSuccessionError: 400,
    DuplicateEmailError: 400,
    ProtectedEntityError: 400,
    InvitationStateError: 400,

    # 401 Unauthorized
    InvitationUnauthorizedError: 401,
    InvitationNotFoundError: 401,
    NotAcknowledgedError: 401,
    InvitationRetractedError: 401,

    # 500 Internal Server Error
    ConfigurationError: 500,
    DatabaseError: 500,
    TransactionError: 500,
    IdentityDirectoryError: 500,
    AccountNotFoundError: 500,
    NotificationError: 500,
    SchedulerError: 500,
}


def get_http_status_code(exception: Exception) -> int:
    """Get HTTP status code for an exception.

    Args:
        exception: The exception instance

    Returns:
        HTTP status code, 500 for anything unmapped
    """
    for exception_class in type(exception).__mro__:
        if exception_class in HTTP_STATUS_MAP:
            return HTTP_STATUS_MAP[exception_class]
    return 500


def is_client_error(exception: Exception) -> bool:
    """Check whether an exception maps to a 4xx status."""
    return 400 <= get_http_status_code(exception) < 500
