from .dispatcher import TaskDispatcher

__all__ = ["TaskDispatcher"]
