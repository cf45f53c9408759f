"""Record validation shared by the repositories."""

from enum import Enum
from typing import Any, Dict, Iterable, Optional

from ..core.exceptions import InvalidEnumValueError, NoFieldsToUpdateError, RequiredFieldError


def require_fields(record_type: str, task: str, payload: Dict[str, Any], fields: Iterable[str]) -> None:
    """Raise RequiredFieldError naming the first empty field."""
    for name in fields:
        if not payload.get(name):
            raise RequiredFieldError(record_type, task, name, payload)


def require_enum(record_type: str, field_name: str, value: Any, enum_type: type, payload: Dict[str, Any]):
    """Coerce a value into an enum, raising InvalidEnumValueError when it is not a member."""
    try:
        return enum_type(value)
    except ValueError:
        raise InvalidEnumValueError(record_type, field_name, value, payload)


def update_fields(
    record_type: str,
    key: Dict[str, Optional[str]],
    changes: Dict[str, Any],
    mutable_fields: Iterable[str],
    enum_fields: Optional[Dict[str, type]] = None,
) -> Dict[str, Any]:
    """Validate an update and return the columns to write.

    The full key is required and at least one mutable field besides the key
    must be supplied. None values are treated as not supplied.
    """
    payload = {**key, **changes}
    require_fields(record_type, "update", payload, key.keys())

    fields = {}
    for name, value in changes.items():
        if name not in mutable_fields or value is None:
            continue
        if enum_fields and name in enum_fields:
            value = require_enum(record_type, name, value, enum_fields[name], payload)
        fields[name] = value.value if isinstance(value, Enum) else value

    if not fields:
        raise NoFieldsToUpdateError(f"{record_type} update error: No fields to update in {payload}")
    return fields
