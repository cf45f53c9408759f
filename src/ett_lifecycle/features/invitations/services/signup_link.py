"""Registration link generation.

Two kinds of link exist: the identity directory's hosted sign-up page for the
doorway client of a role, and the application's own registration page. Either
can be handed to admission control as its link generator.
"""

import logging
from typing import Awaitable, Callable, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from ....config.constants import Role
from ....config.settings import EttSettings
from ....core.exceptions import ConfigurationError
from ....core.value_objects import Doorway

logger = logging.getLogger(__name__)

# (entity_id, role) -> link
LinkGenerator = Callable[[str, Role], Awaitable[str]]


def add_query_parameters(link: str, **parameters) -> str:
    """Append query parameters to a link, keeping any it already has."""
    parts = urlsplit(link)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query.extend((name, str(value)) for name, value in parameters.items() if value is not None)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


def append_code(link: str, code: str) -> str:
    """Add the invitation code to a registration link."""
    return add_query_parameters(link, code=code)


class SignupLinks:
    """Builds sign-up and registration links for invitations."""

    def __init__(self, settings: EttSettings, identity_directory=None):
        self._settings = settings
        self._directory = identity_directory

    async def doorway_for_role(self, role: Role) -> Optional[Doorway]:
        if self._directory is None:
            return None
        for doorway in await self._directory.list_doorways():
            if doorway.role == role:
                return doorway
        return None

    async def hosted_signup_link(self, entity_id: str, role: Role) -> str:
        """Link to the directory's hosted registration page for the doorway of a role."""
        role = Role(role)
        doorway = await self.doorway_for_role(role)
        if doorway is None:
            raise ConfigurationError(f"No sign-up doorway configured for role {role.value}")

        redirect_uri = add_query_parameters(
            self._settings.post_signup_redirect_uri,
            action="post-signup",
            selected_role=role.value,
        )
        base = (
            f"{self._settings.keycloak_server_url.rstrip('/')}/realms/{self._settings.keycloak_realm}"
            f"/protocol/openid-connect/registrations"
        )
        query = urlencode({
            "client_id": doorway.client_id,
            "response_type": "code",
            "scope": "email openid phone",
            "redirect_uri": redirect_uri,
        })
        return f"{base}?{query}"

    def registration_link(self, email: str, entity_id: str, registration_uri: Optional[str] = None) -> str:
        """Link to the application's registration page.

        Registration pages under /bootstrap/ also register the entity itself.
        """
        registration_uri = registration_uri or self._settings.registration_uri
        if not registration_uri:
            raise ConfigurationError("No registration URI configured")
        if urlsplit(registration_uri).path.startswith("/bootstrap/"):
            return add_query_parameters(
                registration_uri, action="register-entity", entity_id=entity_id, email=email
            )
        return add_query_parameters(registration_uri, entity_id=entity_id, email=email)

    def registration_link_generator(self, email: str, registration_uri: Optional[str] = None) -> LinkGenerator:
        async def generate(entity_id: str, role: Role) -> str:
            return self.registration_link(email, entity_id, registration_uri)
        return generate

    def link_generator_for(self, email: str, registration_uri: Optional[str] = None) -> LinkGenerator:
        """Application registration links when a registration page is configured, hosted links otherwise."""
        if registration_uri or self._settings.registration_uri:
            return self.registration_link_generator(email, registration_uri)
        return self.hosted_signup_link
