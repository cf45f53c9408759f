"""Value objects shared across lifecycle features."""

from .doorway import Doorway
from .email_message import EmailMessage

__all__ = ["Doorway", "EmailMessage"]
