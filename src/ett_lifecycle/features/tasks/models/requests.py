"""Task parameter models.

Each task validates its parameter bag with one of these models before any
service is called. Emails are trimmed and lowercased.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ....config.constants import Role


def _normalize_email(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip().lower()
    return value or None


class TaskRequest(BaseModel):
    """Base for task parameters; unknown parameters are ignored."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


class DemolishEntityRequest(TaskRequest):
    """Parameters of demolish-entity."""

    entity_id: str = Field(..., min_length=1, description="Entity to demolish")
    dry_run: Optional[bool] = Field(default=None, description="Build the transaction without submitting it")
    notify: bool = Field(default=True, description="Send cancellation notices")


class CorrectEntityRepRequest(TaskRequest):
    """Parameters of correct-entity-rep."""

    entity_id: str = Field(..., min_length=1)
    replacer_email: str = Field(..., min_length=1, description="Active member performing the correction")
    replaceable_email: str = Field(..., min_length=1, description="Member being removed")
    replacement_email: Optional[str] = Field(default=None, description="Person invited into the vacated role")
    registration_uri: Optional[str] = Field(default=None)
    dry_run: Optional[bool] = Field(default=None)

    @field_validator("replacer_email", "replaceable_email", "replacement_email")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)


class AmendEntityNameRequest(TaskRequest):
    """Parameters of amend-entity-name."""

    entity_id: str = Field(..., min_length=1)
    corrector_email: str = Field(..., min_length=1)
    entity_name: Optional[str] = Field(default=None)
    description: Optional[str] = Field(default=None)

    @field_validator("corrector_email")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)


class InviteUserRequest(TaskRequest):
    """Parameters of invite-user."""

    email: str = Field(..., min_length=1, description="Invitee email")
    role: Role = Field(..., description="Role offered to the invitee")
    inviter_role: Role = Field(..., description="Role of the person sending the invitation")
    entity_id: Optional[str] = Field(default=None)
    inviter_identity: Optional[str] = Field(default=None, description="Identity directory username of the inviter")
    registration_uri: Optional[str] = Field(default=None)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)


class InvitationCodeRequest(TaskRequest):
    """Parameters of the tasks addressed by invitation code."""

    invitation_code: Optional[str] = Field(default=None)


class RegisterRequest(InvitationCodeRequest):
    """Parameters of register."""

    email: Optional[str] = Field(default=None)
    fullname: Optional[str] = Field(default=None)
    title: Optional[str] = Field(default=None)
    entity_name: Optional[str] = Field(default=None)
    delegate: Optional[Dict[str, Any]] = Field(default=None)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)
