"""Emails sent when an entity's personnel or name is corrected."""

from typing import Optional

from ....config.constants import Role
from ....core.value_objects import EmailMessage

CORRECTION_SUBJECT = "ETT Entity Correction Notification"
VACANCY_EXPIRATION_SUBJECT = "ETT Registration Expiration Notification"


def build_removal_email(to_email: str, corrector_fullname: str, entity_name: str) -> EmailMessage:
    """Tell a removed user who removed them."""
    text = (
        f"This email is notification that {corrector_fullname} has removed you from {entity_name} "
        f"in the Ethical Transparency Tool (ETT)."
    )
    return EmailMessage(subject=CORRECTION_SUBJECT, to=[to_email], text_body=text, category="entity-correction")


def build_peer_removal_email(
    to_email: str,
    corrector_fullname: str,
    entity_name: str,
    removed_fullname: Optional[str] = None,
) -> EmailMessage:
    """Tell a remaining user that somebody was removed. No removed name means the corrector removed themselves."""
    removed = removed_fullname or "themselves"
    text = (
        f"This email is notification that {corrector_fullname} has removed {removed} from {entity_name} "
        f"in the Ethical Transparency Tool (ETT)."
    )
    return EmailMessage(subject=CORRECTION_SUBJECT, to=[to_email], text_body=text, category="entity-correction")


def build_name_change_email(to_email: str, corrector_fullname: str, old_name: str, new_name: str) -> EmailMessage:
    text = (
        f"This email is notification that {corrector_fullname} has changed the name of "
        f"\"{old_name}\" to \"{new_name}\" in the Ethical Transparency Tool (ETT)."
    )
    return EmailMessage(subject=CORRECTION_SUBJECT, to=[to_email], text_body=text, category="entity-correction")


def build_vacancy_expiration_email(to_email: str, role: Role, entity_name: str) -> EmailMessage:
    text = (
        f"This email is notification that the period for registration of \"{entity_name}\" in the "
        f"Ethical Transparency Tool (ETT) has expired due to a prolonged vacancy of one or more of its "
        f"representatives. Your role as, or pending invitation to become {Role(role).full_name} has "
        f"been cancelled."
    )
    return EmailMessage(subject=VACANCY_EXPIRATION_SUBJECT, to=[to_email], text_body=text, category="vacancy-expiration")
