"""Email message value object handed to notifiers."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class EmailMessage:
    """An outbound plain text email with an optional HTML alternative."""

    subject: str
    to: List[str]
    text_body: str
    html_body: Optional[str] = None
    cc: List[str] = field(default_factory=list)
    category: Optional[str] = None

    def __post_init__(self):
        if not self.to:
            raise ValueError("Email message requires at least one recipient")
        if not self.subject:
            raise ValueError("Email message requires a subject")

    @property
    def recipients(self) -> List[str]:
        return [*self.to, *self.cc]
