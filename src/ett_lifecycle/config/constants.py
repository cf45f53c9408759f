"""
Constants and enums shared by the lifecycle features.
"""
from enum import Enum


WAITING_ROOM_ID = "__UNASSIGNED__"


class Role(str, Enum):
    """Roles a person can hold at an entity."""
    SYS_ADMIN = "SYS_ADMIN"
    RE_ADMIN = "RE_ADMIN"
    RE_AUTH_IND = "RE_AUTH_IND"
    CONSENTING_PERSON = "CONSENTING_PERSON"

    @property
    def full_name(self) -> str:
        return ROLE_FULL_NAMES[self]

    @property
    def creates_entity(self) -> bool:
        """Roles whose registration may name a new entity."""
        return self in (Role.RE_ADMIN, Role.SYS_ADMIN)

    @classmethod
    def values(cls) -> list:
        return [role.value for role in cls]


ROLE_FULL_NAMES = {
    Role.SYS_ADMIN: "System Administrator",
    Role.RE_ADMIN: "Administrative support professional",
    Role.RE_AUTH_IND: "Registered Entity Authorized Individual",
    Role.CONSENTING_PERSON: "Consenting Person",
}


class YN(str, Enum):
    """Yes/No flag as stored in the database."""
    YES = "Y"
    NO = "N"


class ConfigName(str, Enum):
    """Names of duration configurations, values in seconds."""
    ASP_INVITATION_EXPIRE_AFTER = "ASP_INVITATION_EXPIRE_AFTER"
    AUTH_IND_INVITATION_EXPIRE_AFTER = "AUTH_IND_INVITATION_EXPIRE_AFTER"
    STALE_ASP_VACANCY = "STALE_ASP_VACANCY"
    STALE_AI_VACANCY = "STALE_AI_VACANCY"


class ConfigType(str, Enum):
    """Value types for rows in the configuration table."""
    DURATION = "duration"
    NUMBER = "number"
    STRING = "string"


# Minimum staffing before an entity is considered to have a vacancy
MINIMUM_ASPS = 1
MINIMUM_AIS = 2

# Timer names, also used as arq job function names
STALE_VACANCY_HANDLER = "handle_stale_entity_vacancy"
STALE_INVITATION_HANDLER = "purge_stale_invitation"

SIGNUP_PARAMETER_AMEND = "amend"
SIGNUP_PARAMETER_AMENDED = "amended"
