"""Tests for the Keycloak identity directory adapter."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from keycloak.exceptions import KeycloakDeleteError, KeycloakGetError, KeycloakPostError

from ett_lifecycle.config.constants import Role
from ett_lifecycle.core.exceptions import AccountNotFoundError, ConfigurationError, IdentityDirectoryError
from ett_lifecycle.integrations.keycloak import KeycloakIdentityDirectory


@pytest.fixture
def admin_client():
    admin = MagicMock()
    admin.a_create_user = AsyncMock(return_value="kc-1")
    admin.a_send_update_account = AsyncMock()
    admin.a_delete_user = AsyncMock()
    admin.a_get_user = AsyncMock(return_value={"id": "kc-1", "email": "bugs@warnerbros.com", "attributes": {}})
    admin.a_update_user = AsyncMock()
    admin.a_get_users = AsyncMock(return_value=[])
    admin.a_get_clients = AsyncMock(return_value=[])
    return admin


@pytest.fixture
def directory(admin_client):
    return KeycloakIdentityDirectory("https://auth.example.org/auth/", "ett", admin_client=admin_client)


class TestKeycloakIdentityDirectory:
    def test_server_url_normalized(self, directory):
        assert directory.server_url == "https://auth.example.org"

    def test_requires_credentials(self):
        with pytest.raises(ConfigurationError):
            KeycloakIdentityDirectory("https://auth.example.org", "ett")._ensure_connected()

    @pytest.mark.asyncio
    async def test_create_account(self, directory, admin_client):
        sub = await directory.create_account("Bugs@WarnerBros.com", Role.RE_AUTH_IND, attributes={"entity_id": "wb"})

        assert sub == "kc-1"
        payload = admin_client.a_create_user.call_args.args[0]
        assert payload["email"] == "bugs@warnerbros.com"
        assert payload["attributes"] == {"role": ["RE_AUTH_IND"], "entity_id": ["wb"]}
        assert payload["credentials"][0]["temporary"] is True
        admin_client.a_send_update_account.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_account_failure(self, directory, admin_client):
        admin_client.a_create_user.side_effect = KeycloakPostError(error_message="conflict", response_code=409)
        with pytest.raises(IdentityDirectoryError):
            await directory.create_account("bugs@warnerbros.com", Role.RE_AUTH_IND)

    @pytest.mark.asyncio
    async def test_delete_missing_account(self, directory, admin_client):
        admin_client.a_delete_user.side_effect = KeycloakDeleteError(error_message="not found", response_code=404)
        with pytest.raises(AccountNotFoundError):
            await directory.delete_account("kc-1")

    @pytest.mark.asyncio
    async def test_delete_other_failure(self, directory, admin_client):
        admin_client.a_delete_user.side_effect = KeycloakDeleteError(error_message="boom", response_code=500)
        with pytest.raises(IdentityDirectoryError) as exc_info:
            await directory.delete_account("kc-1")
        assert not isinstance(exc_info.value, AccountNotFoundError)

    @pytest.mark.asyncio
    async def test_update_attributes_merges(self, directory, admin_client):
        admin_client.a_get_user.return_value = {"id": "kc-1", "attributes": {"role": ["RE_ADMIN"]}}
        await directory.update_attributes("kc-1", {"entity_id": "wb"})
        admin_client.a_update_user.assert_awaited_once_with(
            "kc-1", {"attributes": {"role": ["RE_ADMIN"], "entity_id": ["wb"]}}
        )

    @pytest.mark.asyncio
    async def test_lookup_attribute(self, directory, admin_client):
        admin_client.a_get_user.return_value = {"id": "kc-1", "email": "bugs@warnerbros.com",
                                                "attributes": {"role": ["RE_ADMIN"]}}
        assert await directory.lookup_attribute("kc-1", "email") == "bugs@warnerbros.com"
        assert await directory.lookup_attribute("kc-1", "role") == "RE_ADMIN"
        assert await directory.lookup_attribute("kc-1", "phone") is None

    @pytest.mark.asyncio
    async def test_lookup_email_falls_back_to_id(self, directory, admin_client):
        assert await directory.lookup_email("kc-1") == "bugs@warnerbros.com"
        admin_client.a_get_user.side_effect = KeycloakGetError(error_message="missing", response_code=404)
        assert await directory.lookup_email("nobody") is None

    @pytest.mark.asyncio
    async def test_list_doorways_keeps_role_clients(self, directory, admin_client):
        admin_client.a_get_clients.return_value = [
            {"clientId": "RE_ADMIN-portal", "id": "1"},
            {"clientId": "admin-cli", "id": "2"},
        ]
        doorways = await directory.list_doorways()
        assert [d.client_id for d in doorways] == ["RE_ADMIN-portal"]

    @pytest.mark.asyncio
    async def test_doorway_for_role(self, directory, admin_client):
        admin_client.a_get_clients.return_value = [{"clientId": "RE_AUTH_IND-portal", "id": "1"}]
        assert (await directory.doorway_for_role(Role.RE_AUTH_IND)).client_id == "RE_AUTH_IND-portal"
        assert await directory.doorway_for_role(Role.RE_ADMIN) is None
