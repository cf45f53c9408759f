"""Invitation services: admission control, registration and link generation."""

from .admission import AdmissionResult, InvitationAdmissionService, InviteeSpec
from .registration import Registration, TransitionOutcome
from .signup_link import LinkGenerator, SignupLinks, append_code
from .stale_invitation import StaleInvitationHandler

__all__ = [
    "AdmissionResult",
    "InvitationAdmissionService",
    "InviteeSpec",
    "Registration",
    "TransitionOutcome",
    "LinkGenerator",
    "SignupLinks",
    "append_code",
    "StaleInvitationHandler",
]
