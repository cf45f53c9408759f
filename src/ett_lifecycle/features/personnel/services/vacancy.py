"""Stale vacancy detection and handling.

An entity needs at least MINIMUM_ASPS active administrative support
professionals and MINIMUM_AIS active authorized individuals. After a
correction leaves a seat empty a timer is armed; when it fires, an entity
still short of staff past the configured limit is demolished.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ....config.app_config import AppConfigurations
from ....config.constants import MINIMUM_AIS, MINIMUM_ASPS, Role, YN
from ....core.exceptions import MissingParameterError
from ....utils.datetime import now_millis, to_millis
from ...entities.entities.entity import Entity
from ...entities.entities.protocols import EntityRepository
from ...users.entities.protocols import UserRepository
from ...users.entities.user import User
from .correction_email import build_vacancy_expiration_email

logger = logging.getLogger(__name__)


def _created_millis(user: User) -> int:
    return to_millis(user.create_timestamp) or now_millis()


def _updated_millis(user: User) -> int:
    return to_millis(user.update_timestamp) or _created_millis(user)


def _youngest(users: List[User]) -> Optional[User]:
    youngest = None
    for user in users:
        if youngest is None or _created_millis(user) > _created_millis(youngest):
            youngest = user
    return youngest


class EntityStaffingState:
    """Staffing of an entity with respect to its minimum complement of each role."""

    def __init__(self, entity: Entity, users: List[User], configurations: AppConfigurations):
        self.entity = entity
        self.users = users
        self._configs = configurations

    def _active(self, role: Role) -> List[User]:
        return [user for user in self.users if user.has_role(role) and user.is_active]

    def asp_vacancy(self) -> bool:
        return len(self._active(Role.RE_ADMIN)) < MINIMUM_ASPS

    def ai_vacancy(self) -> bool:
        return len(self._active(Role.RE_AUTH_IND)) < MINIMUM_AIS

    def is_understaffed(self) -> bool:
        return self.asp_vacancy() or self.ai_vacancy()

    async def exceeded_vacancy_time_limit(self, role: Role) -> bool:
        """Whether the role has been below its minimum for longer than allowed."""
        role = Role(role)
        minimum = MINIMUM_ASPS if role == Role.RE_ADMIN else MINIMUM_AIS
        limit_millis = (await self._configs.stale_vacancy_after(role)) * 1000
        now = now_millis()

        role_users = [user for user in self.users if user.has_role(role)]

        if not role_users and role == Role.RE_AUTH_IND:
            # Nobody was ever brought on, so the clock starts with the newest administrator
            youngest_asp = _youngest(self._active(Role.RE_ADMIN))
            if youngest_asp is None:
                return True
            return now - _created_millis(youngest_asp) >= limit_millis

        active_count = len([user for user in role_users if user.is_active])
        recently_deactivated = len([
            user for user in role_users
            if user.active == YN.NO and now - _updated_millis(user) < limit_millis
        ])
        if active_count + recently_deactivated >= minimum:
            return False

        deactivations = [_updated_millis(user) for user in role_users if user.active == YN.NO]
        if deactivations:
            below_minimum_since = min(deactivations)
        else:
            youngest = _youngest(self.users)
            below_minimum_since = _created_millis(youngest) if youngest else now

        return now - below_minimum_since >= limit_millis

    async def violates_vacancy_policy(self) -> bool:
        if self.asp_vacancy():
            logger.info(f"{self.entity.entity_name} has an {Role.RE_ADMIN.value} vacancy")
            if await self.exceeded_vacancy_time_limit(Role.RE_ADMIN):
                logger.info(f"{self.entity.entity_name} {Role.RE_ADMIN.value} vacancy has exceeded the allowed limit")
                return True
        if self.ai_vacancy():
            logger.info(f"{self.entity.entity_name} has an {Role.RE_AUTH_IND.value} vacancy")
            if await self.exceeded_vacancy_time_limit(Role.RE_AUTH_IND):
                logger.info(f"{self.entity.entity_name} {Role.RE_AUTH_IND.value} vacancy has exceeded the allowed limit")
                return True
        return False


@dataclass
class VacancyOutcome:
    entity_id: str
    understaffed: bool = False
    demolished: bool = False
    notified: List[str] = field(default_factory=list)


class StaleVacancyHandler:
    """Timer callback demolishing entities whose vacancies went unfilled for too long."""

    def __init__(
        self,
        entity_repository: EntityRepository,
        user_repository: UserRepository,
        demolition_service,
        notifier,
        configurations: AppConfigurations,
    ):
        self._entities = entity_repository
        self._users = user_repository
        self._demolition = demolition_service
        self._notifier = notifier
        self._configs = configurations

    async def staffing_state(self, entity_id: str) -> Optional[EntityStaffingState]:
        entity = await self._entities.read(entity_id)
        if entity is None:
            return None
        users = await self._users.find_by_entity(entity_id)
        return EntityStaffingState(entity, users, self._configs)

    async def handle(self, entity_id: str, dry_run: Optional[bool] = None) -> VacancyOutcome:
        if not entity_id:
            raise MissingParameterError("Missing entity_id parameter")
        outcome = VacancyOutcome(entity_id=entity_id)

        state = await self.staffing_state(entity_id)
        if state is None:
            logger.info(f"Entity {entity_id} no longer exists, no vacancy to handle")
            return outcome

        entity_name = state.entity.entity_name
        if not state.is_understaffed():
            logger.info(f"{entity_name} is not understaffed")
            return outcome
        outcome.understaffed = True
        logger.info(f"{entity_name} is understaffed")

        if not await state.violates_vacancy_policy():
            logger.info(f"{entity_name} is not yet in violation of role vacancy policy")
            return outcome

        logger.warning(f"{entity_name} is in violation of role vacancy policy and will be terminated")
        record = await self._demolition.demolish(entity_id, dry_run=dry_run)
        outcome.demolished = not record.dry_run
        if record.dry_run:
            return outcome

        for user in record.deleted_users:
            if not user.is_active:
                logger.debug(f"User {user.email} is not active and will not be notified of entity termination")
                continue
            try:
                await self._notifier.send(build_vacancy_expiration_email(user.email, user.role, entity_name))
                outcome.notified.append(user.email)
            except Exception as e:
                logger.error(f"Failed to notify {user.email} of entity termination: {e}")
        return outcome
