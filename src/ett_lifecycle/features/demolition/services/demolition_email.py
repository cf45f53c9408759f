"""Cancellation notice sent to the users of a demolished entity."""

from ....core.value_objects import EmailMessage

CANCELLATION_SUBJECT = "NOTIFICATION: Ethical Transparency Tool (ETT) - notice of entity cancellation"


def build_cancellation_email(email: str, entity_name: str) -> EmailMessage:
    text = (
        f"This email is notification that {entity_name} has been cancelled in the Ethical "
        f"Transparency Tool (ETT). Your registration with {entity_name} has ended and your "
        f"account has been removed."
    )
    return EmailMessage(
        subject=CANCELLATION_SUBJECT,
        to=[email],
        text_body=text,
        html_body=f"<p>{text}</p>",
        category="entity-cancellation",
    )
