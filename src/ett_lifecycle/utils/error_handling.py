"""Standardized error handling utilities for lifecycle operations.

Provides decorators for consistent logging of lifecycle service calls: domain
errors (validation, business rules, invitation authorization) are expected
outcomes and logged at info, anything else at error. Both are re-raised.
"""

import functools
import logging
from typing import Any, Callable

from ..core.exceptions import (
    BusinessRuleError,
    InvitationUnauthorizedError,
    ValidationError,
)
from .datetime import iso_now

logger = logging.getLogger(__name__)

DOMAIN_EXCEPTIONS = (BusinessRuleError, InvitationUnauthorizedError, ValidationError)

CONTEXT_KEYS = ("entity_id", "code", "email", "replaceable_email", "task")


def lifecycle_error_handler(operation_name: str):
    """Decorator for standardized lifecycle error handling.

    Args:
        operation_name: Name of the operation for logging

    Usage:
        @lifecycle_error_handler("entity demolition")
        async def demolish(self, entity_id):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            operation_context = {
                "operation": operation_name,
                "timestamp": iso_now(),
                "function": func.__name__,
            }
            for key in CONTEXT_KEYS:
                if key in kwargs and kwargs[key] is not None:
                    operation_context[key] = str(kwargs[key])

            try:
                return await func(*args, **kwargs)

            except DOMAIN_EXCEPTIONS as e:
                context_str = ", ".join(f"{k}={v}" for k, v in operation_context.items())
                logger.info(f"Domain exception in {operation_name}: {e} | Context: {context_str}")
                raise

            except Exception as e:
                context_str = ", ".join(f"{k}={v}" for k, v in operation_context.items())
                logger.error(f"Failed to {operation_name}: {e} | Context: {context_str}", exc_info=True)
                raise

        return wrapper
    return decorator
