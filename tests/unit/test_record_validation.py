"""Tests for record validation shared by the repositories."""

import pytest

from ett_lifecycle.config.constants import Role, YN
from ett_lifecycle.core.exceptions import InvalidEnumValueError, NoFieldsToUpdateError, RequiredFieldError
from ett_lifecycle.features.entities.entities.entity import Entity
from ett_lifecycle.features.entities.utils.validation import entity_update_fields, prepare_entity_for_create
from ett_lifecycle.features.invitations.entities.invitation import Invitation
from ett_lifecycle.features.invitations.utils.validation import (
    invitation_update_fields,
    prepare_invitation_for_create,
)
from ett_lifecycle.features.users.entities.user import Delegate, User
from ett_lifecycle.features.users.utils.validation import prepare_user_for_create, user_update_fields


class TestUserValidation:
    def test_create_requires_entity_id(self):
        with pytest.raises(RequiredFieldError) as exc:
            prepare_user_for_create(User(email="bugs@warnerbros.com", role=Role.RE_AUTH_IND, sub="s"))
        assert exc.value.field_name == "entity_id"
        assert "User create error: Missing entity_id in" in exc.value.message

    def test_create_requires_sub(self):
        with pytest.raises(RequiredFieldError) as exc:
            prepare_user_for_create(
                User(email="bugs@warnerbros.com", entity_id="wb", role=Role.RE_AUTH_IND, fullname="Bugs")
            )
        assert exc.value.field_name == "sub"

    def test_create_requires_fullname_except_sys_admin(self):
        with pytest.raises(RequiredFieldError) as exc:
            prepare_user_for_create(User(email="bugs@warnerbros.com", entity_id="wb", role=Role.RE_AUTH_IND, sub="s"))
        assert exc.value.field_name == "fullname"

        user = prepare_user_for_create(User(email="root@ett.org", entity_id="wb", role=Role.SYS_ADMIN, sub="s"))
        assert user.role == Role.SYS_ADMIN

    def test_create_rejects_unknown_role(self):
        with pytest.raises(InvalidEnumValueError):
            prepare_user_for_create(
                User(email="bugs@warnerbros.com", entity_id="wb", role="JANITOR", sub="s", fullname="Bugs")
            )

    def test_create_defaults_timestamps(self):
        user = prepare_user_for_create(
            User(email="Bugs@WarnerBros.com", entity_id="wb", role="RE_AUTH_IND", sub="s", fullname="Bugs")
        )
        assert user.email == "bugs@warnerbros.com"
        assert user.role == Role.RE_AUTH_IND
        assert user.create_timestamp
        assert user.update_timestamp == user.create_timestamp

    def test_update_requires_full_key(self):
        with pytest.raises(RequiredFieldError):
            user_update_fields("bugs@warnerbros.com", None, active=YN.NO)

    def test_update_requires_a_change(self):
        with pytest.raises(NoFieldsToUpdateError):
            user_update_fields("bugs@warnerbros.com", "wb")

    def test_update_ignores_unknown_fields(self):
        with pytest.raises(NoFieldsToUpdateError):
            user_update_fields("bugs@warnerbros.com", "wb", favourite_color="grey")

    def test_update_serializes_enums_and_delegate(self):
        fields = user_update_fields(
            "bugs@warnerbros.com", "wb", active=YN.NO, delegate=Delegate(fullname="Lola", email="lola@wb.com")
        )
        assert fields["active"] == "N"
        assert fields["delegate"]["email"] == "lola@wb.com"
        assert "update_timestamp" in fields


class TestInvitationValidation:
    def test_create_requires_role(self):
        with pytest.raises(RequiredFieldError):
            prepare_invitation_for_create(Invitation(entity_id="wb"))

    def test_create_generates_code_and_sent_timestamp(self):
        invitation = prepare_invitation_for_create(Invitation(role="RE_ADMIN", entity_id="wb"))
        assert invitation.code
        assert invitation.sent_timestamp
        assert invitation.role == Role.RE_ADMIN

    def test_update_drops_none_values(self):
        fields = invitation_update_fields("abc", acknowledged_timestamp="2024-01-01T00:00:00.000Z", title=None)
        assert fields == {"acknowledged_timestamp": "2024-01-01T00:00:00.000Z"}


class TestEntityValidation:
    def test_create_requires_name(self):
        with pytest.raises(RequiredFieldError):
            prepare_entity_for_create(Entity(description="nameless"))

    def test_create_generates_id(self):
        entity = prepare_entity_for_create(Entity(entity_name="Warner Bros"))
        assert entity.entity_id
        assert entity.active == YN.YES
        assert entity.create_timestamp

    def test_update_validates_active_flag(self):
        with pytest.raises(InvalidEnumValueError):
            entity_update_fields("wb", active="maybe")
