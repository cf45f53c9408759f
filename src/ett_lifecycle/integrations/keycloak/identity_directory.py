"""Keycloak identity directory adapter.

Every person has one account in the lifecycle realm. Role specific sign-up
doorways are realm clients whose clientId starts with the role, for example
``RE_ADMIN-portal``.
"""

import logging
import secrets
from typing import Any, Dict, List, Optional

from keycloak import KeycloakAdmin, KeycloakOpenIDConnection
from keycloak.exceptions import KeycloakError

from ...config.constants import Role
from ...config.settings import EttSettings
from ...core.exceptions import AccountNotFoundError, ConfigurationError, IdentityDirectoryError
from ...core.value_objects import Doorway

logger = logging.getLogger(__name__)

REQUIRED_ACTIONS = ["UPDATE_PASSWORD", "VERIFY_EMAIL"]


def _is_not_found(error: KeycloakError) -> bool:
    return getattr(error, "response_code", None) == 404


class KeycloakIdentityDirectory:
    """Identity directory backed by the Keycloak Admin API."""

    def __init__(
        self,
        server_url: str,
        realm_name: str,
        admin_realm_name: str = "master",
        client_id: str = "admin-cli",
        username: Optional[str] = None,
        password: Optional[str] = None,
        client_secret: Optional[str] = None,
        verify: bool = True,
        admin_client: Optional[KeycloakAdmin] = None,
    ):
        """Initialize the adapter.

        Supports two authentication methods:
        1. Admin credentials: username + password, authenticated in admin_realm_name
        2. Client credentials: client_id + client_secret in the managed realm

        Args:
            server_url: Keycloak server URL
            realm_name: Realm holding the lifecycle accounts
            admin_realm_name: Realm the admin user authenticates in
            client_id: Client ID (default: admin-cli)
            username: Admin username
            password: Admin password
            client_secret: Client secret for client credentials auth
            verify: SSL verification
            admin_client: Preconfigured KeycloakAdmin, mainly for tests
        """
        self.server_url = server_url.rstrip("/")
        if self.server_url.endswith("/auth"):
            self.server_url = self.server_url[:-5]
        self.realm_name = realm_name
        self.admin_realm_name = admin_realm_name
        self.client_id = client_id
        self.username = username
        self.password = password
        self.client_secret = client_secret
        self.verify = verify
        self._admin_client = admin_client

    @classmethod
    def from_settings(cls, settings: EttSettings) -> "KeycloakIdentityDirectory":
        password = settings.keycloak_admin_password.get_secret_value() if settings.keycloak_admin_password else None
        secret = (
            settings.keycloak_admin_client_secret.get_secret_value()
            if settings.keycloak_admin_client_secret else None
        )
        return cls(
            server_url=settings.keycloak_server_url,
            realm_name=settings.keycloak_realm,
            admin_realm_name=settings.keycloak_admin_realm,
            client_id=settings.keycloak_admin_client_id,
            username=settings.keycloak_admin_username,
            password=password,
            client_secret=secret,
            verify=settings.keycloak_verify_ssl,
        )

    def _ensure_connected(self) -> KeycloakAdmin:
        """Create the admin client on first use."""
        if self._admin_client is not None:
            return self._admin_client

        if self.client_secret:
            connection = KeycloakOpenIDConnection(
                server_url=self.server_url,
                realm_name=self.realm_name,
                client_id=self.client_id,
                client_secret_key=self.client_secret,
                verify=self.verify,
            )
        elif self.username and self.password:
            connection = KeycloakOpenIDConnection(
                server_url=self.server_url,
                realm_name=self.realm_name,
                user_realm_name=self.admin_realm_name,
                client_id=self.client_id,
                username=self.username,
                password=self.password,
                verify=self.verify,
            )
        else:
            raise ConfigurationError("Must provide either (username + password) or client_secret for Keycloak")

        self._admin_client = KeycloakAdmin(connection=connection)
        logger.info(f"Connected to Keycloak admin API for realm: {self.realm_name}")
        return self._admin_client

    async def create_account(
        self,
        email: str,
        role: Role,
        temporary_password: Optional[str] = None,
        attributes: Optional[Dict[str, str]] = None,
    ) -> str:
        admin = self._ensure_connected()
        email = email.strip().lower()
        payload = {
            "username": email,
            "email": email,
            "enabled": True,
            "emailVerified": False,
            "attributes": {"role": [Role(role).value], **{k: [v] for k, v in (attributes or {}).items()}},
            "credentials": [{
                "type": "password",
                "value": temporary_password or secrets.token_urlsafe(16),
                "temporary": True,
            }],
            "requiredActions": REQUIRED_ACTIONS,
        }
        try:
            user_id = await admin.a_create_user(payload, exist_ok=False)
            # Keycloak emails the account holder a link to set their own password
            await admin.a_send_update_account(user_id=user_id, payload=REQUIRED_ACTIONS)
        except KeycloakError as e:
            logger.error(f"Failed to create account for {email}: {e}")
            raise IdentityDirectoryError(f"Cannot create account: {e}") from e
        logger.info(f"Created identity directory account {user_id} for {email}")
        return user_id

    async def delete_account(self, sub: str) -> bool:
        admin = self._ensure_connected()
        try:
            await admin.a_delete_user(sub)
        except KeycloakError as e:
            if _is_not_found(e):
                raise AccountNotFoundError(f"No identity directory account {sub}") from e
            logger.error(f"Failed to delete account {sub}: {e}")
            raise IdentityDirectoryError(f"Cannot delete account: {e}") from e
        logger.info(f"Deleted identity directory account {sub}")
        return True

    async def _get_user(self, sub: str) -> Dict[str, Any]:
        admin = self._ensure_connected()
        try:
            return await admin.a_get_user(sub)
        except KeycloakError as e:
            if _is_not_found(e):
                raise AccountNotFoundError(f"No identity directory account {sub}") from e
            raise IdentityDirectoryError(f"Cannot read account: {e}") from e

    async def update_attributes(self, sub: str, attributes: Dict[str, str]) -> None:
        admin = self._ensure_connected()
        user = await self._get_user(sub)
        merged = dict(user.get("attributes") or {})
        merged.update({name: [value] for name, value in attributes.items()})
        try:
            await admin.a_update_user(sub, {"attributes": merged})
        except KeycloakError as e:
            logger.error(f"Failed to update attributes of {sub}: {e}")
            raise IdentityDirectoryError(f"Cannot update account: {e}") from e

    async def lookup_attribute(self, sub: str, name: str) -> Optional[str]:
        user = await self._get_user(sub)
        if name in user and not isinstance(user[name], (dict, list)):
            return user[name]
        values = (user.get("attributes") or {}).get(name)
        return values[0] if values else None

    async def lookup_email(self, username: str) -> Optional[str]:
        admin = self._ensure_connected()
        try:
            users = await admin.a_get_users({"username": username, "exact": True})
        except KeycloakError as e:
            raise IdentityDirectoryError(f"Cannot search accounts: {e}") from e
        if users:
            return users[0].get("email")
        # Usernames handed out by the directory may be the account id itself
        try:
            user = await self._get_user(username)
        except AccountNotFoundError:
            return None
        return user.get("email")

    async def find_account_by_email(self, email: str) -> Optional[str]:
        admin = self._ensure_connected()
        try:
            users = await admin.a_get_users({"email": email.strip().lower(), "exact": True})
        except KeycloakError as e:
            raise IdentityDirectoryError(f"Cannot search accounts: {e}") from e
        return users[0]["id"] if users else None

    async def list_accounts(self) -> List[Dict[str, Any]]:
        admin = self._ensure_connected()
        try:
            return await admin.a_get_users({})
        except KeycloakError as e:
            raise IdentityDirectoryError(f"Cannot list accounts: {e}") from e

    async def list_doorways(self) -> List[Doorway]:
        admin = self._ensure_connected()
        try:
            clients = await admin.a_get_clients()
        except KeycloakError as e:
            raise IdentityDirectoryError(f"Cannot list clients: {e}") from e
        doorways = [Doorway(client_id=client["clientId"], internal_id=client.get("id")) for client in clients]
        return [doorway for doorway in doorways if doorway.role is not None]

    async def doorway_for_role(self, role: Role) -> Optional[Doorway]:
        role = Role(role)
        for doorway in await self.list_doorways():
            if doorway.role == role:
                return doorway
        return None
