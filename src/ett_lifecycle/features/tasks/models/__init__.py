from .requests import (
    AmendEntityNameRequest,
    CorrectEntityRepRequest,
    DemolishEntityRequest,
    InvitationCodeRequest,
    InviteUserRequest,
    RegisterRequest,
    TaskRequest,
)
from .responses import TaskResponse

__all__ = [
    "AmendEntityNameRequest",
    "CorrectEntityRepRequest",
    "DemolishEntityRequest",
    "InvitationCodeRequest",
    "InviteUserRequest",
    "RegisterRequest",
    "TaskRequest",
    "TaskResponse",
]
