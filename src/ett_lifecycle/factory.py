"""Composition of the lifecycle services from settings.

``create_services`` wires the repositories, the external collaborators and the
orchestration services. Any collaborator can be supplied instead of the
default adapter, which is how the worker and the tests substitute their own.
"""

import logging
from typing import Optional

from .config.app_config import AppConfigurations
from .config.logging_config import setup_logging
from .config.settings import EttSettings, get_settings
from .database.connection import DatabaseManager
from .database.schema import ensure_schema
from .database.transactions import PostgresTransactionalStore
from .features.demolition import EntityDemolitionService
from .features.entities import EntityDatabaseRepository
from .features.invitations import InvitationDatabaseRepository
from .features.invitations.services import InvitationAdmissionService, SignupLinks, StaleInvitationHandler
from .features.journal import JournalDatabaseRepository
from .features.personnel import EntityCorrectionService, StaleVacancyHandler
from .features.tasks import TaskDispatcher
from .features.users import UserDatabaseRepository
from .integrations.email import EmailConfiguration, SmtpNotifier
from .integrations.keycloak import KeycloakIdentityDirectory
from .integrations.scheduler import ArqScheduler

logger = logging.getLogger(__name__)


class LifecycleServices:
    """Every repository, collaborator and service of one process."""

    def __init__(
        self,
        settings: EttSettings,
        database: Optional[DatabaseManager] = None,
        entities=None,
        users=None,
        invitations=None,
        journal=None,
        transactional_store=None,
        identity_directory=None,
        notifier=None,
        scheduler=None,
    ):
        self.settings = settings
        self.database = database

        self.entities = entities or EntityDatabaseRepository(database, settings)
        self.users = users or UserDatabaseRepository(database, settings)
        self.invitations = invitations or InvitationDatabaseRepository(database, settings)
        self.journal = journal or JournalDatabaseRepository(database, settings)
        self.transactional_store = transactional_store or PostgresTransactionalStore(database, settings)

        self.identity_directory = identity_directory
        self.notifier = notifier
        self.scheduler = scheduler

        self.configurations = AppConfigurations(
            settings, database if settings.config_from_database else None
        )
        self.signup_links = SignupLinks(settings, identity_directory)
        self.admission = InvitationAdmissionService(
            self.entities,
            self.users,
            self.invitations,
            identity_directory,
            notifier,
            self.configurations,
            settings,
            scheduler=scheduler,
        )
        self.demolition = EntityDemolitionService(
            self.entities,
            self.users,
            self.invitations,
            self.transactional_store,
            identity_directory,
            notifier,
            settings,
            journal_repository=self.journal,
        )
        self.correction = EntityCorrectionService(
            self.entities,
            self.users,
            self.invitations,
            identity_directory,
            notifier,
            self.admission,
            self.signup_links,
            self.configurations,
            settings,
            scheduler=scheduler,
            journal_repository=self.journal,
        )
        self.stale_vacancy = StaleVacancyHandler(
            self.entities, self.users, self.demolition, notifier, self.configurations
        )
        self.stale_invitation = StaleInvitationHandler(self.invitations, notifier, self.configurations)

    async def start(self) -> None:
        """Open the database pool and make sure the tables exist."""
        if self.database is None:
            return
        await self.database.create_pool()
        await ensure_schema(self.database, self.settings)

    async def stop(self) -> None:
        if self.scheduler is not None and hasattr(self.scheduler, "close"):
            await self.scheduler.close()
        if self.database is not None:
            await self.database.close_pool()


def create_services(settings: Optional[EttSettings] = None, **overrides) -> LifecycleServices:
    """Build the services with the default adapters unless overridden."""
    settings = settings or get_settings()
    database = overrides.pop("database", None) or DatabaseManager(settings)

    if "identity_directory" not in overrides:
        overrides["identity_directory"] = KeycloakIdentityDirectory.from_settings(settings)
    if "notifier" not in overrides:
        log_table = settings.table(settings.email_log_table) if settings.email_log_enabled else None
        overrides["notifier"] = SmtpNotifier(
            EmailConfiguration.from_settings(settings),
            database=database if log_table else None,
            log_table=log_table,
        )
    if "scheduler" not in overrides:
        overrides["scheduler"] = ArqScheduler.from_settings(settings)

    logger.info(f"Creating lifecycle services for {settings.environment} (dry_run={settings.dry_run})")
    return LifecycleServices(settings, database=database, **overrides)


def create_task_dispatcher(settings: Optional[EttSettings] = None, **overrides) -> TaskDispatcher:
    """Entry point for task callers: configure logging and build a dispatcher."""
    setup_logging()
    return TaskDispatcher(create_services(settings, **overrides))
