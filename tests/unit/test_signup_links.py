"""Tests for registration and hosted sign-up links."""

from urllib.parse import parse_qs, urlsplit

import pytest

from ett_lifecycle.config.constants import Role
from ett_lifecycle.core.exceptions import ConfigurationError
from ett_lifecycle.core.value_objects import Doorway
from ett_lifecycle.features.invitations.services import SignupLinks
from ett_lifecycle.features.invitations.services.signup_link import append_code


class TestSignupLinks:
    def test_registration_link(self, settings):
        link = SignupLinks(settings).registration_link("bugs@warnerbros.com", "warnerbros")
        query = parse_qs(urlsplit(link).query)
        assert link.startswith("https://ett.example.org/register?")
        assert query == {"entity_id": ["warnerbros"], "email": ["bugs@warnerbros.com"]}

    def test_bootstrap_registration_registers_entity(self, settings):
        link = SignupLinks(settings).registration_link(
            "porky@warnerbros.com", "warnerbros", "https://ett.example.org/bootstrap/index.htm"
        )
        assert parse_qs(urlsplit(link).query)["action"] == ["register-entity"]

    def test_append_code_keeps_existing_query(self):
        link = append_code("https://ett.example.org/register?entity_id=wb", "abc")
        assert parse_qs(urlsplit(link).query) == {"entity_id": ["wb"], "code": ["abc"]}

    @pytest.mark.asyncio
    async def test_hosted_link_uses_role_doorway(self, settings, mock_identity_directory):
        mock_identity_directory.list_doorways.return_value = [
            Doorway(client_id="RE_AUTH_IND-portal"),
            Doorway(client_id="RE_ADMIN-portal"),
        ]
        link = await SignupLinks(settings, mock_identity_directory).hosted_signup_link("wb", Role.RE_ADMIN)

        parts = urlsplit(link)
        query = parse_qs(parts.query)
        assert parts.path == "/realms/ett/protocol/openid-connect/registrations"
        assert query["client_id"] == ["RE_ADMIN-portal"]
        assert "selected_role=RE_ADMIN" in query["redirect_uri"][0]

    @pytest.mark.asyncio
    async def test_hosted_link_without_doorway(self, settings, mock_identity_directory):
        with pytest.raises(ConfigurationError):
            await SignupLinks(settings, mock_identity_directory).hosted_signup_link("wb", Role.RE_ADMIN)

    def test_doorway_role_from_client_id(self):
        assert Doorway(client_id="RE_ADMIN-portal").role == Role.RE_ADMIN
        assert Doorway(client_id="account-console").role is None
