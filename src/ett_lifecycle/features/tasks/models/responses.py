"""Task response model."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class TaskResponse(BaseModel):
    """Outcome of a task: an HTTP style status, a message and a payload.

    The payload always carries one flag naming the outcome: ``ok``,
    ``invalid``, ``unauthorized`` or ``error``.
    """

    statusCode: int = Field(..., description="HTTP style status code")
    message: str = Field(..., description="Human readable outcome")
    payload: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def _build(cls, status: int, flag: str, message: str, payload: Optional[Dict[str, Any]]) -> "TaskResponse":
        return cls(statusCode=status, message=message, payload={flag: True, **(payload or {})})

    @classmethod
    def ok(cls, message: str = "Ok", payload: Optional[Dict[str, Any]] = None) -> "TaskResponse":
        return cls._build(200, "ok", message, payload)

    @classmethod
    def invalid(cls, message: str, payload: Optional[Dict[str, Any]] = None) -> "TaskResponse":
        return cls._build(400, "invalid", message, payload)

    @classmethod
    def unauthorized(cls, message: str, payload: Optional[Dict[str, Any]] = None) -> "TaskResponse":
        return cls._build(401, "unauthorized", message, payload)

    @classmethod
    def error(cls, message: str, payload: Optional[Dict[str, Any]] = None) -> "TaskResponse":
        return cls._build(500, "error", message, payload)

    @classmethod
    def for_status(cls, status: int, message: str, payload: Optional[Dict[str, Any]] = None) -> "TaskResponse":
        if status == 401:
            return cls.unauthorized(message, payload)
        if 400 <= status < 500:
            return cls.invalid(message, payload)
        if status >= 500:
            return cls.error(message, payload)
        return cls.ok(message, payload)

    @property
    def is_ok(self) -> bool:
        return self.statusCode == 200
