"""Pytest configuration and fixtures for ett-lifecycle tests."""

import copy
from typing import Dict, List, Optional, Tuple
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from ett_lifecycle.config.app_config import AppConfigurations
from ett_lifecycle.config.constants import Role, WAITING_ROOM_ID, YN
from ett_lifecycle.config.settings import EttSettings
from ett_lifecycle.core.exceptions import TransactionError
from ett_lifecycle.database.schema import ENTITIES, INVITATIONS, USERS
from ett_lifecycle.factory import LifecycleServices
from ett_lifecycle.features.entities.entities.entity import Entity
from ett_lifecycle.features.entities.utils.validation import entity_update_fields, prepare_entity_for_create
from ett_lifecycle.features.invitations.entities.invitation import Invitation
from ett_lifecycle.features.invitations.utils.validation import (
    invitation_update_fields,
    prepare_invitation_for_create,
)
from ett_lifecycle.features.journal.entities.journal import JournalEntry
from ett_lifecycle.features.users.entities.user import User
from ett_lifecycle.features.users.utils.validation import prepare_user_for_create, user_update_fields
from ett_lifecycle.utils.datetime import iso_now, seconds_ago


class InMemoryEntityRepository:
    """Entity repository keeping copies of records in a dict."""

    def __init__(self):
        self.rows: Dict[str, Entity] = {}

    async def create(self, entity: Entity) -> Entity:
        entity = prepare_entity_for_create(entity)
        self.rows[entity.entity_id] = copy.deepcopy(entity)
        return copy.deepcopy(entity)

    async def read(self, entity_id: str) -> Optional[Entity]:
        return copy.deepcopy(self.rows.get(entity_id))

    async def read_active(self, entity_id: str) -> Optional[Entity]:
        entity = self.rows.get(entity_id)
        return copy.deepcopy(entity) if entity and entity.is_active else None

    async def find_by_name(self, entity_name: str) -> List[Entity]:
        name = entity_name.strip().lower()
        return [copy.deepcopy(e) for e in self.rows.values() if (e.entity_name or "").lower() == name]

    async def update(self, entity_id: str, **changes) -> Optional[Entity]:
        fields = entity_update_fields(entity_id, **changes)
        current = self.rows.get(entity_id)
        if current is None:
            return None
        updated = Entity(**{**current.to_dict(), **fields})
        self.rows[entity_id] = updated
        return copy.deepcopy(updated)

    async def delete(self, entity_id: str) -> bool:
        return self.rows.pop(entity_id, None) is not None


class InMemoryUserRepository:
    """User repository keyed by (email, entity_id)."""

    def __init__(self):
        self.rows: Dict[Tuple[str, str], User] = {}

    async def create(self, user: User) -> User:
        user = prepare_user_for_create(user)
        self.rows[(user.email, user.entity_id)] = copy.deepcopy(user)
        return copy.deepcopy(user)

    async def read(self, email: str, entity_id: str) -> Optional[User]:
        if not email or not entity_id:
            return None
        return copy.deepcopy(self.rows.get((email.lower(), entity_id)))

    async def find_by_email(self, email: str) -> List[User]:
        return [copy.deepcopy(u) for (e, _), u in self.rows.items() if e == email.lower()]

    async def find_by_entity(self, entity_id: str, active_only: bool = False) -> List[User]:
        return [
            copy.deepcopy(u) for (_, entity), u in self.rows.items()
            if entity == entity_id and (u.is_active or not active_only)
        ]

    async def update(self, email: str, entity_id: str, **changes) -> Optional[User]:
        fields = user_update_fields(email, entity_id, **changes)
        current = self.rows.get((email.lower(), entity_id))
        if current is None:
            return None
        updated = User(**{**current.to_dict(), **fields})
        self.rows[(updated.email, entity_id)] = updated
        return copy.deepcopy(updated)

    async def delete(self, email: str, entity_id: Optional[str] = None) -> int:
        keys = [key for key in self.rows if key[0] == email.lower() and (entity_id is None or key[1] == entity_id)]
        for key in keys:
            del self.rows[key]
        return len(keys)


class InMemoryInvitationRepository:
    """Invitation repository keyed by code."""

    def __init__(self):
        self.rows: Dict[str, Invitation] = {}

    async def create(self, invitation: Invitation) -> Invitation:
        invitation = prepare_invitation_for_create(invitation)
        self.rows[invitation.code] = copy.deepcopy(invitation)
        return copy.deepcopy(invitation)

    async def read(self, code: str) -> Optional[Invitation]:
        if not code:
            return None
        return copy.deepcopy(self.rows.get(code))

    async def find_by_email(self, email: str, entity_id: Optional[str] = None) -> List[Invitation]:
        return [
            copy.deepcopy(i) for i in self.rows.values()
            if i.email == email.lower() and (entity_id is None or i.entity_id == entity_id)
        ]

    async def find_by_entity(self, entity_id: str, role: Optional[Role] = None) -> List[Invitation]:
        return [
            copy.deepcopy(i) for i in self.rows.values()
            if i.entity_id == entity_id and (role is None or i.role == Role(role))
        ]

    async def update(self, code: str, **changes) -> Optional[Invitation]:
        fields = invitation_update_fields(code, **changes)
        current = self.rows.get(code)
        if current is None:
            return None
        updated = Invitation(**{**current.to_dict(), **fields})
        self.rows[code] = updated
        return copy.deepcopy(updated)

    async def delete(self, code: str) -> bool:
        return self.rows.pop(code, None) is not None

    async def delete_by_email(self, email: str, entity_id: str) -> int:
        codes = [c for c, i in self.rows.items() if i.email == email.lower() and i.entity_id == entity_id]
        for code in codes:
            del self.rows[code]
        return len(codes)


class InMemoryJournalRepository:
    def __init__(self):
        self.entries: List[JournalEntry] = []

    async def append(self, entry: JournalEntry) -> None:
        self.entries.append(entry)

    async def entries_for_run(self, run_id: str) -> List[JournalEntry]:
        return [entry for entry in self.entries if entry.run_id == run_id]


class InMemoryTransactionalStore:
    """Applies delete transactions to the in-memory repositories, all or nothing."""

    def __init__(self, entities, users, invitations):
        self.entities = entities
        self.users = users
        self.invitations = invitations
        self.submitted = []
        self.fail_with: Optional[Exception] = None

    async def transact_delete(self, transaction) -> int:
        self.submitted.append(transaction)
        if self.fail_with is not None:
            raise TransactionError(f"Delete transaction failed: {self.fail_with}")
        deleted = 0
        for item in transaction.items:
            if item.table == USERS.name:
                deleted += int(self.users.rows.pop((item.key["email"], item.key["entity_id"]), None) is not None)
            elif item.table == INVITATIONS.name:
                deleted += int(self.invitations.rows.pop(item.key["code"], None) is not None)
            elif item.table == ENTITIES.name:
                deleted += int(self.entities.rows.pop(item.key["entity_id"], None) is not None)
        return deleted


@pytest.fixture
def settings():
    """Settings isolated from the environment."""
    return EttSettings(
        _env_file=None,
        registration_uri="https://ett.example.org/register",
        post_signup_redirect_uri="https://ett.example.org/",
        keycloak_server_url="https://auth.example.org",
        keycloak_realm="ett",
    )


@pytest.fixture
def configurations(settings):
    return AppConfigurations(settings)


@pytest.fixture
def entity_repository():
    return InMemoryEntityRepository()


@pytest.fixture
def user_repository():
    return InMemoryUserRepository()


@pytest.fixture
def invitation_repository():
    return InMemoryInvitationRepository()


@pytest.fixture
def journal_repository():
    return InMemoryJournalRepository()


@pytest.fixture
def transactional_store(entity_repository, user_repository, invitation_repository):
    return InMemoryTransactionalStore(entity_repository, user_repository, invitation_repository)


@pytest.fixture
def mock_identity_directory():
    """Mock identity directory."""
    directory = AsyncMock()
    directory.delete_account = AsyncMock(return_value=True)
    directory.create_account = AsyncMock(return_value=str(uuid4()))
    directory.lookup_email = AsyncMock(return_value=None)
    directory.find_account_by_email = AsyncMock(return_value=None)
    directory.list_doorways = AsyncMock(return_value=[])
    return directory


@pytest.fixture
def mock_notifier():
    """Mock notifier returning a fresh message id per send."""
    notifier = AsyncMock()
    notifier.send = AsyncMock(side_effect=lambda message: f"<{uuid4().hex}@ett.example.org>")
    return notifier


@pytest.fixture
def mock_scheduler():
    scheduler = AsyncMock()
    scheduler.arm = AsyncMock(side_effect=lambda *args, **kwargs: f"job-{uuid4().hex}")
    return scheduler


@pytest.fixture
def mock_database():
    """Mock DatabaseManager for repository tests."""
    database = MagicMock()
    database.fetchrow = AsyncMock()
    database.fetch = AsyncMock(return_value=[])
    database.execute = AsyncMock()
    return database


def _sent_to(notifier) -> List[str]:
    """Every recipient the mock notifier was asked to email, in order."""
    recipients = []
    for call in notifier.send.call_args_list:
        recipients.extend(call.args[0].to)
    return recipients


def _make_user(email: str, entity_id: str, role: Role = Role.RE_AUTH_IND, active: YN = YN.YES, **kwargs) -> User:
    return User(
        email=email,
        entity_id=entity_id,
        role=role,
        sub=kwargs.pop("sub", f"sub-{email}"),
        active=active,
        fullname=kwargs.pop("fullname", email.split("@")[0].title()),
        create_timestamp=kwargs.pop("create_timestamp", seconds_ago(3600)),
        **kwargs,
    )


@pytest.fixture
def warnerbros(entity_repository, user_repository):
    """Entity warnerbros with an administrator and three authorized individuals, daffy inactive."""
    entity = Entity(entity_id="warnerbros", entity_name="Warner Bros", create_timestamp=iso_now())
    entity_repository.rows[entity.entity_id] = entity
    for user in (
        _make_user("porky@warnerbros.com", "warnerbros", Role.RE_ADMIN),
        _make_user("bugs@warnerbros.com", "warnerbros"),
        _make_user("daffy@warnerbros.com", "warnerbros", active=YN.NO),
        _make_user("yosemite@warnerbros.com", "warnerbros"),
    ):
        user_repository.rows[(user.email, user.entity_id)] = user
    return entity


@pytest.fixture
def waiting_room(entity_repository):
    entity = Entity(entity_id=WAITING_ROOM_ID, entity_name=WAITING_ROOM_ID)
    entity_repository.rows[WAITING_ROOM_ID] = entity
    return entity


@pytest.fixture
def sent_to():
    return _sent_to


@pytest.fixture
def make_user():
    return _make_user


@pytest.fixture
def services(
    settings,
    entity_repository,
    user_repository,
    invitation_repository,
    journal_repository,
    transactional_store,
    mock_identity_directory,
    mock_notifier,
    mock_scheduler,
):
    """Lifecycle services over the in-memory repositories and mock collaborators."""
    return LifecycleServices(
        settings,
        entities=entity_repository,
        users=user_repository,
        invitations=invitation_repository,
        journal=journal_repository,
        transactional_store=transactional_store,
        identity_directory=mock_identity_directory,
        notifier=mock_notifier,
        scheduler=mock_scheduler,
    )


async def _link_generator(entity_id, role):
    return f"https://ett.example.org/register?entity_id={entity_id}"


@pytest.fixture
def link_generator():
    return _link_generator
