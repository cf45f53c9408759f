"""Email messages sent over the course of an invitation."""

from typing import Optional

from ....config.constants import Role, WAITING_ROOM_ID
from ....core.value_objects import EmailMessage

INVITATION_SUBJECT = "INVITATION: Ethical Transparency Tool (ETT)"
END_OF_REGISTRATION_SUBJECT = "ETT end of registration Notification"
SYS_ADMIN_EXPIRATION_SUBJECT = "ETT invitation expiration Notification"


def build_invitation_email(email: str, role: Role, link: str, entity_name: Optional[str] = None) -> EmailMessage:
    role = Role(role)
    if entity_name and entity_name != WAITING_ROOM_ID:
        on_behalf = f" on behalf of {entity_name}"
    else:
        on_behalf = ""
    text = (
        f"You are invited to register with the Ethical Transparency Tool (ETT) as a "
        f"{role.full_name}{on_behalf}.\n\n"
        f"Please use the following link to begin registration:\n{link}\n\n"
        f"This invitation is addressed to you alone. Do not forward it."
    )
    html = (
        f"<p>You are invited to register with the Ethical Transparency Tool (ETT) as a "
        f"<b>{role.full_name}</b>{on_behalf}.</p>"
        f"<p><a href=\"{link}\">Click here to begin registration</a></p>"
        f"<p>This invitation is addressed to you alone. Do not forward it.</p>"
    )
    return EmailMessage(
        subject=INVITATION_SUBJECT,
        to=[email],
        text_body=text,
        html_body=html,
        category="invitation",
    )


def build_end_of_registration_email(email: str, role: Role) -> EmailMessage:
    """Notice that an unused invitation expired and was removed."""
    role = Role(role)
    subject = END_OF_REGISTRATION_SUBJECT
    if role == Role.SYS_ADMIN:
        subject = SYS_ADMIN_EXPIRATION_SUBJECT
        text = "This email is notification that your invitation to register in the Ethical Transparency Tool (ETT) has expired."
    else:
        text = (
            f"This email is notification that your invitation to register in the Ethical Transparency "
            f"Tool (ETT) as {role.full_name} has expired and the registration period has ended."
        )
    return EmailMessage(subject=subject, to=[email], text_body=text, category="end-of-registration")
