"""Task dispatch feature: named tasks in, status coded responses out."""

from .models import TaskResponse
from .services import TaskDispatcher

__all__ = ["TaskDispatcher", "TaskResponse"]
