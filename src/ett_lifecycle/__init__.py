"""ETT Lifecycle - entity and invitation lifecycle orchestration.

This library admits invitations, drives them through registration, corrects
entity personnel and demolishes entities, coordinating the database, the
identity directory, email and delayed callbacks.
"""

# Initialize logging configuration on import
from .config.logging_config import setup_logging
setup_logging()

from .__version__ import __version__

from .config import (
    EttSettings,
    get_settings,
    Role,
    YN,
    WAITING_ROOM_ID,
)

from .core.exceptions import (
    # Base Exception
    EttError,

    # Common Exceptions
    ConfigurationError,
    DatabaseError,
    ValidationError,
    BusinessRuleError,
    InvitationUnauthorizedError,
    IdentityDirectoryError,
    NotificationError,
    SchedulerError,

    # Utility Functions
    get_http_status_code,
    create_error_response,
)

from .protocols import IdentityDirectory, Notifier, Scheduler, TransactionalStore

from .features.tasks import TaskDispatcher, TaskResponse

from .factory import LifecycleServices, create_services, create_task_dispatcher

__all__ = [
    "__version__",
    "setup_logging",
    "EttSettings",
    "get_settings",
    "Role",
    "YN",
    "WAITING_ROOM_ID",
    "EttError",
    "ConfigurationError",
    "DatabaseError",
    "ValidationError",
    "BusinessRuleError",
    "InvitationUnauthorizedError",
    "IdentityDirectoryError",
    "NotificationError",
    "SchedulerError",
    "get_http_status_code",
    "create_error_response",
    "IdentityDirectory",
    "Notifier",
    "Scheduler",
    "TransactionalStore",
    "TaskDispatcher",
    "TaskResponse",
    "LifecycleServices",
    "create_services",
    "create_task_dispatcher",
]
