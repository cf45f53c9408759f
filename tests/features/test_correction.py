"""Tests for personnel and entity name corrections."""

import pytest

from ett_lifecycle.config.constants import Role, STALE_INVITATION_HANDLER, STALE_VACANCY_HANDLER, YN
from ett_lifecycle.core.exceptions import (
    DuplicateEmailError,
    EntityNameInUseError,
    EntityNotFoundError,
    IdentityDirectoryError,
    InvitationConflictError,
    SelfSuccessionError,
    UserNotFoundError,
)
from ett_lifecycle.features.entities.entities.entity import Entity
from ett_lifecycle.features.invitations.entities.invitation import Invitation
from ett_lifecycle.utils.datetime import seconds_ago


def _armed_targets(scheduler):
    return [call.args[1] for call in scheduler.arm.call_args_list]


class TestPersonnelCorrection:
    @pytest.mark.asyncio
    async def test_replace_authorized_individual(self, services, warnerbros, user_repository,
                                                 invitation_repository, mock_identity_directory,
                                                 mock_notifier, mock_scheduler, sent_to, settings):
        result = await services.correction.correct_personnel(
            "warnerbros",
            "yosemite@warnerbros.com",
            "bugs@warnerbros.com",
            replacement_email="elmer@warnerbros.com",
        )

        assert user_repository.rows[("bugs@warnerbros.com", "warnerbros")].active == YN.NO
        mock_identity_directory.delete_account.assert_awaited_once_with("sub-bugs@warnerbros.com")
        assert sent_to(mock_notifier) == ["bugs@warnerbros.com", "porky@warnerbros.com", "elmer@warnerbros.com"]

        assert result.invitation.ok
        invitation = invitation_repository.rows[result.invitation.code]
        assert invitation.role == Role.RE_AUTH_IND
        assert invitation.entity_id == "warnerbros"

        assert _armed_targets(mock_scheduler) == [STALE_INVITATION_HANDLER, STALE_VACANCY_HANDLER]
        vacancy_call = mock_scheduler.arm.call_args_list[-1]
        assert vacancy_call.args[0] == settings.stale_ai_vacancy + settings.vacancy_grace_seconds
        assert vacancy_call.args[2] == {"entity_id": "warnerbros"}
        assert result.timer_id is not None

        assert result.to_payload()["steps"] == [
            "DEACTIVATE_USER:completed",
            "DELETE_ACCOUNT:completed",
            "NOTIFY_REMOVED:completed",
            "NOTIFY_PEERS:completed",
            "INVITE_REPLACEMENT:completed",
            "ARM_VACANCY_TIMER:completed",
        ]

    @pytest.mark.asyncio
    async def test_removed_users_invitations_are_deleted(self, services, warnerbros, invitation_repository):
        invitation_repository.rows["used"] = Invitation(
            code="used", email="bugs@warnerbros.com", role=Role.RE_AUTH_IND, entity_id="warnerbros",
            sent_timestamp=seconds_ago(100), registered_timestamp=seconds_ago(90),
        )
        await services.correction.correct_personnel("warnerbros", "porky@warnerbros.com", "bugs@warnerbros.com")
        assert "used" not in invitation_repository.rows

    @pytest.mark.asyncio
    async def test_self_removal_without_replacement(self, services, warnerbros, user_repository,
                                                    mock_notifier, mock_scheduler, sent_to):
        result = await services.correction.correct_personnel(
            "warnerbros", "bugs@warnerbros.com", "bugs@warnerbros.com"
        )
        assert user_repository.rows[("bugs@warnerbros.com", "warnerbros")].active == YN.NO
        recipients = sent_to(mock_notifier)
        assert recipients[0] == "bugs@warnerbros.com"
        assert sorted(recipients) == ["bugs@warnerbros.com", "porky@warnerbros.com", "yosemite@warnerbros.com"]
        assert "NOTIFY_REMOVED:completed" in result.to_payload()["steps"]
        assert _armed_targets(mock_scheduler) == [STALE_VACANCY_HANDLER]

    @pytest.mark.asyncio
    async def test_self_removal_cannot_name_successor(self, services, warnerbros, user_repository,
                                                      mock_identity_directory, mock_notifier):
        with pytest.raises(SelfSuccessionError):
            await services.correction.correct_personnel(
                "warnerbros", "bugs@warnerbros.com", "bugs@warnerbros.com", replacement_email="elmer@warnerbros.com"
            )
        assert user_repository.rows[("bugs@warnerbros.com", "warnerbros")].is_active
        mock_identity_directory.delete_account.assert_not_called()
        mock_notifier.send.assert_not_called()

    @pytest.mark.asyncio
    async def test_replacement_same_as_removed(self, services, warnerbros):
        with pytest.raises(DuplicateEmailError):
            await services.correction.correct_personnel(
                "warnerbros", "porky@warnerbros.com", "bugs@warnerbros.com", replacement_email="BUGS@warnerbros.com"
            )

    @pytest.mark.asyncio
    async def test_replacer_cannot_replace_with_themselves(self, services, warnerbros):
        with pytest.raises(SelfSuccessionError):
            await services.correction.correct_personnel(
                "warnerbros", "porky@warnerbros.com", "bugs@warnerbros.com", replacement_email="porky@warnerbros.com"
            )

    @pytest.mark.asyncio
    async def test_inactive_replacer_is_unknown(self, services, warnerbros):
        with pytest.raises(UserNotFoundError):
            await services.correction.correct_personnel("warnerbros", "daffy@warnerbros.com", "bugs@warnerbros.com")

    @pytest.mark.asyncio
    async def test_unknown_replaceable(self, services, warnerbros):
        with pytest.raises(UserNotFoundError):
            await services.correction.correct_personnel("warnerbros", "porky@warnerbros.com", "daffy@warnerbros.com")

    @pytest.mark.asyncio
    async def test_unknown_entity(self, services):
        with pytest.raises(EntityNotFoundError):
            await services.correction.correct_personnel("nonesuch", "porky@warnerbros.com", "bugs@warnerbros.com")

    @pytest.mark.asyncio
    async def test_dry_run_changes_nothing(self, services, warnerbros, user_repository, mock_identity_directory,
                                           mock_notifier, mock_scheduler, journal_repository):
        result = await services.correction.correct_personnel(
            "warnerbros", "yosemite@warnerbros.com", "bugs@warnerbros.com",
            replacement_email="elmer@warnerbros.com", dry_run=True,
        )
        assert result.dry_run
        assert user_repository.rows[("bugs@warnerbros.com", "warnerbros")].is_active
        mock_identity_directory.delete_account.assert_not_called()
        mock_notifier.send.assert_not_called()
        mock_scheduler.arm.assert_not_called()
        assert journal_repository.entries == []

    @pytest.mark.asyncio
    async def test_missing_account_is_not_fatal(self, services, warnerbros, user_repository,
                                                mock_identity_directory):
        user_repository.rows[("bugs@warnerbros.com", "warnerbros")].sub = None
        result = await services.correction.correct_personnel(
            "warnerbros", "porky@warnerbros.com", "bugs@warnerbros.com"
        )
        mock_identity_directory.delete_account.assert_not_called()
        assert "DELETE_ACCOUNT:completed" in result.to_payload()["steps"]

    @pytest.mark.asyncio
    async def test_directory_failure_stops_later_steps(self, services, warnerbros, user_repository,
                                                       mock_identity_directory, mock_notifier, journal_repository):
        mock_identity_directory.delete_account.side_effect = RuntimeError("keycloak down")
        with pytest.raises(IdentityDirectoryError):
            await services.correction.correct_personnel(
                "warnerbros", "porky@warnerbros.com", "bugs@warnerbros.com"
            )
        assert user_repository.rows[("bugs@warnerbros.com", "warnerbros")].active == YN.NO
        mock_notifier.send.assert_not_called()
        assert [(e.step, e.status.value) for e in journal_repository.entries] == [
            ("DEACTIVATE_USER", "completed"),
            ("DELETE_ACCOUNT", "failed"),
        ]

    @pytest.mark.asyncio
    async def test_email_failures_do_not_stop_the_run(self, services, warnerbros, mock_notifier, mock_scheduler):
        mock_notifier.send.side_effect = RuntimeError("smtp down")
        result = await services.correction.correct_personnel(
            "warnerbros", "porky@warnerbros.com", "bugs@warnerbros.com"
        )
        steps = result.to_payload()["steps"]
        assert "NOTIFY_REMOVED:failed" in steps
        assert "NOTIFY_PEERS:failed" in steps
        assert steps[-1] == "ARM_VACANCY_TIMER:completed"

    @pytest.mark.asyncio
    async def test_rejected_replacement_is_not_rolled_back(self, services, warnerbros, invitation_repository,
                                                           user_repository, journal_repository,
                                                           mock_scheduler, settings):
        invitation_repository.rows["pending"] = Invitation(
            code="pending", email="pending", role=Role.RE_ADMIN, entity_id="warnerbros",
            sent_timestamp=seconds_ago(10),
        )
        with pytest.raises(InvitationConflictError):
            await services.correction.correct_personnel(
                "warnerbros", "yosemite@warnerbros.com", "porky@warnerbros.com",
                replacement_email="elmer@warnerbros.com",
            )
        assert user_repository.rows[("porky@warnerbros.com", "warnerbros")].active == YN.NO
        steps = [(entry.step, entry.status.value) for entry in journal_repository.entries]
        assert steps[-2:] == [("INVITE_REPLACEMENT", "failed"), ("ARM_VACANCY_TIMER", "completed")]

        assert _armed_targets(mock_scheduler) == [STALE_VACANCY_HANDLER]
        vacancy_call = mock_scheduler.arm.call_args_list[-1]
        assert vacancy_call.args[0] == settings.stale_asp_vacancy + settings.vacancy_grace_seconds
        assert vacancy_call.args[2] == {"entity_id": "warnerbros"}


class TestEntityNameCorrection:
    @pytest.mark.asyncio
    async def test_rename_notifies_others(self, services, warnerbros, entity_repository, mock_notifier, sent_to):
        changed = await services.correction.correct_entity("warnerbros", "porky@warnerbros.com", "Looney Tunes")

        assert changed
        assert entity_repository.rows["warnerbros"].entity_name == "Looney Tunes"
        assert sorted(sent_to(mock_notifier)) == ["bugs@warnerbros.com", "yosemite@warnerbros.com"]

    @pytest.mark.asyncio
    async def test_no_changes(self, services, warnerbros, mock_notifier):
        assert not await services.correction.correct_entity("warnerbros", "porky@warnerbros.com", "Warner Bros")
        mock_notifier.send.assert_not_called()

    @pytest.mark.asyncio
    async def test_description_only(self, services, warnerbros, entity_repository, mock_notifier):
        assert await services.correction.correct_entity("warnerbros", "porky@warnerbros.com",
                                                        description="Cartoons")
        assert entity_repository.rows["warnerbros"].description == "Cartoons"
        mock_notifier.send.assert_not_called()

    @pytest.mark.asyncio
    async def test_name_in_use(self, services, warnerbros, entity_repository):
        entity_repository.rows["disney"] = Entity(entity_id="disney", entity_name="Disney")
        with pytest.raises(EntityNameInUseError):
            await services.correction.correct_entity("warnerbros", "porky@warnerbros.com", "DISNEY")

    @pytest.mark.asyncio
    async def test_corrector_must_be_active_member(self, services, warnerbros):
        with pytest.raises(UserNotFoundError):
            await services.correction.correct_entity("warnerbros", "daffy@warnerbros.com", "Looney Tunes")
