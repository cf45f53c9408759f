"""Task dispatch surface.

``TaskDispatcher.dispatch(task, parameters)`` validates the parameter bag,
runs the matching lifecycle operation and converts the outcome, or the
exception it raised, into a ``TaskResponse``.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from pydantic import ValidationError as ParameterValidationError

from ....config.constants import Role
from ....core.exceptions import EttError, InvitationNotFoundError, get_http_status_code
from ...invitations.services import InviteeSpec, Registration
from ...users.entities.user import Delegate
from ..models import (
    AmendEntityNameRequest,
    CorrectEntityRepRequest,
    DemolishEntityRequest,
    InvitationCodeRequest,
    InviteUserRequest,
    RegisterRequest,
    TaskResponse,
)

logger = logging.getLogger(__name__)

TaskHandler = Callable[[Dict[str, Any]], Awaitable[TaskResponse]]


class TaskDispatcher:
    """Routes named tasks to the lifecycle services."""

    def __init__(self, services):
        """Initialize dispatcher.

        Args:
            services: LifecycleServices holding the repositories and orchestration services
        """
        self._services = services
        self._handlers: Dict[str, TaskHandler] = {
            "demolish-entity": self.demolish_entity,
            "correct-entity-rep": self.correct_entity_rep,
            "amend-entity-name": self.amend_entity_name,
            "invite-user": self.invite_user,
            "retract-invitation": self.retract_invitation,
            "lookup-invitation": self.lookup_invitation,
            "acknowledge-entity": self.acknowledge_entity,
            "register": self.register,
            "lookup-entity": self.lookup_entity,
            "ping": self.ping,
        }

    @property
    def services(self):
        return self._services

    @property
    def tasks(self):
        return list(self._handlers)

    async def dispatch(self, task: Optional[str], parameters: Optional[Dict[str, Any]] = None) -> TaskResponse:
        handler = self._handlers.get(task or "")
        if handler is None:
            return TaskResponse.invalid(f"Invalid/Missing task parameter: {task}")

        logger.debug(f"Dispatching task {task}")
        try:
            return await handler(parameters or {})
        except ParameterValidationError as e:
            names = sorted({str(error["loc"][0]) for error in e.errors() if error.get("loc")})
            logger.info(f"Task {task} rejected, invalid parameters: {names}")
            return TaskResponse.invalid(f"Invalid/Missing parameter(s): {', '.join(names)}")
        except EttError as e:
            status = get_http_status_code(e)
            if status >= 500:
                logger.error(f"Task {task} failed: {e.message}", exc_info=True)
            else:
                logger.info(f"Task {task} rejected ({status}): {e.message}")
            return TaskResponse.for_status(status, e.message)
        except Exception as e:
            logger.error(f"Task {task} failed unexpectedly: {e}", exc_info=True)
            return TaskResponse.error(str(e))

    def _registration(self, code: Optional[str]) -> Registration:
        return Registration(code, self._services.invitations, self._services.entities)

    async def demolish_entity(self, parameters: Dict[str, Any]) -> TaskResponse:
        request = DemolishEntityRequest.model_validate(parameters)
        record = await self._services.demolition.demolish(
            request.entity_id, dry_run=request.dry_run, notify=request.notify
        )
        if not record.found_anything:
            return TaskResponse.invalid("Invalid entity_id", {"entity_id": request.entity_id})
        message = "Dry run: entity demolition planned" if record.dry_run else "Entity demolished"
        return TaskResponse.ok(message, record.to_payload())

    async def correct_entity_rep(self, parameters: Dict[str, Any]) -> TaskResponse:
        request = CorrectEntityRepRequest.model_validate(parameters)
        result = await self._services.correction.correct_personnel(
            request.entity_id,
            request.replacer_email,
            request.replaceable_email,
            replacement_email=request.replacement_email,
            registration_uri=request.registration_uri,
            dry_run=request.dry_run,
        )
        return TaskResponse.ok("Ok", result.to_payload())

    async def amend_entity_name(self, parameters: Dict[str, Any]) -> TaskResponse:
        request = AmendEntityNameRequest.model_validate(parameters)
        changed = await self._services.correction.correct_entity(
            request.entity_id,
            request.corrector_email,
            entity_name=request.entity_name,
            description=request.description,
        )
        return TaskResponse.ok("Ok" if changed else "Ok: No changes", {"changed": changed})

    async def invite_user(self, parameters: Dict[str, Any]) -> TaskResponse:
        request = InviteUserRequest.model_validate(parameters)
        link_generator = self._services.signup_links.link_generator_for(request.email, request.registration_uri)
        result = await self._services.admission.invite(
            InviteeSpec(email=request.email, role=request.role, entity_id=request.entity_id),
            request.inviter_role,
            link_generator,
            inviter_identity=request.inviter_identity,
        )
        if not result.ok:
            return TaskResponse.invalid(result.message)
        return TaskResponse.ok(f"Invitation successfully sent: {result.code}", result.to_payload())

    async def retract_invitation(self, parameters: Dict[str, Any]) -> TaskResponse:
        request = InvitationCodeRequest.model_validate(parameters)
        if not request.invitation_code:
            return TaskResponse.invalid("Invalid/Missing parameter(s): invitation_code")
        registration = self._registration(request.invitation_code)
        try:
            outcome = await registration.retract()
        except InvitationNotFoundError:
            return TaskResponse.invalid(f"No invitation found: {request.invitation_code}")
        if not outcome.changed:
            return TaskResponse.ok(f"Ok: Already retracted at {outcome.timestamp}")
        return TaskResponse.ok(f"Ok: Invitation {registration.code} retracted", {"retracted_timestamp": outcome.timestamp})

    async def lookup_invitation(self, parameters: Dict[str, Any]) -> TaskResponse:
        request = InvitationCodeRequest.model_validate(parameters)
        invitation = await self._registration(request.invitation_code).get_invitation()
        payload = {"invitation": invitation.to_dict()}
        if not invitation.targets_waiting_room:
            entity = await self._services.entities.read(invitation.entity_id)
            payload["entity"] = entity.to_dict() if entity else None
        return TaskResponse.ok("Ok", payload)

    async def acknowledge_entity(self, parameters: Dict[str, Any]) -> TaskResponse:
        request = InvitationCodeRequest.model_validate(parameters)
        outcome = await self._registration(request.invitation_code).acknowledge()
        if not outcome.changed:
            return TaskResponse.ok(f"Ok: Already acknowledged at {outcome.timestamp}")
        return TaskResponse.ok(f"Ok: Acknowledged at {outcome.timestamp}")

    async def register(self, parameters: Dict[str, Any]) -> TaskResponse:
        request = RegisterRequest.model_validate(parameters)
        registration = self._registration(request.invitation_code)
        invitation = await registration.get_invitation()

        if not request.email:
            return TaskResponse.invalid("Bad Request: Missing email parameter")
        if not request.fullname:
            return TaskResponse.invalid("Bad Request: Missing fullname parameter")
        if not request.entity_name and invitation.role in Role.values() and Role(invitation.role).creates_entity:
            return TaskResponse.invalid("Bad Request: Missing entity_name parameter")

        outcome = await registration.register(
            request.email,
            request.fullname,
            title=request.title,
            entity_name=request.entity_name,
            delegate=Delegate.from_value(request.delegate),
        )
        if not outcome.changed:
            return TaskResponse.ok(f"Ok: Already registered at {outcome.timestamp}")
        await registration.complete_amendment()
        return TaskResponse.ok(f"Ok: Registration completed for {registration.code}")

    async def lookup_entity(self, parameters: Dict[str, Any]) -> TaskResponse:
        request = InvitationCodeRequest.model_validate(parameters)
        invitation = await self._registration(request.invitation_code).get_invitation()

        entity = None
        if not invitation.targets_waiting_room:
            entity = await self._services.entities.read_active(invitation.entity_id)
            if entity is None:
                return TaskResponse.invalid(
                    f"Invitation {invitation.code} references an unknown entity: {invitation.entity_id}"
                )
        users = await self._services.users.find_by_entity(invitation.entity_id, active_only=True)
        return TaskResponse.ok("Ok", {
            "entity": entity.to_dict() if entity else None,
            "users": [user.to_dict() for user in users],
            "invitation": invitation.to_dict(),
        })

    async def ping(self, parameters: Dict[str, Any]) -> TaskResponse:
        return TaskResponse.ok("Ping!", dict(parameters))
