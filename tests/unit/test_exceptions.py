"""Tests for the exception hierarchy and status mapping."""

import pytest

from ett_lifecycle.core.exceptions import (
    AccountNotFoundError,
    BusinessRuleError,
    EttError,
    InvitationConflictError,
    InvitationNotFoundError,
    NotAcknowledgedError,
    NotificationError,
    RequiredFieldError,
    SelfSuccessionError,
    TransactionError,
    create_error_response,
    get_http_status_code,
)
from ett_lifecycle.core.exceptions.http_mapping import is_client_error


class TestHttpStatusMapping:
    """Exceptions map to the status codes of task responses."""

    @pytest.mark.parametrize("exception,status", [
        (RequiredFieldError("User", "create", "sub", {"email": "a@b.org"}), 400),
        (InvitationConflictError("conflict"), 400),
        (SelfSuccessionError("self"), 400),
        (InvitationNotFoundError("Unauthorized: Unknown invitation code x"), 401),
        (NotAcknowledgedError("Unauthorized: Privacy policy has not yet been acknowledged"), 401),
        (AccountNotFoundError("gone"), 500),
        (TransactionError("failed"), 500),
        (NotificationError("smtp down"), 500),
    ])
    def test_status_codes(self, exception, status):
        assert get_http_status_code(exception) == status

    def test_unmapped_subclass_inherits_parent_status(self):
        class CustomRule(BusinessRuleError):
            pass

        assert get_http_status_code(CustomRule("x")) == 400

    def test_foreign_exception_is_server_error(self):
        assert get_http_status_code(KeyError("x")) == 500
        assert not is_client_error(KeyError("x"))

    def test_client_error(self):
        assert is_client_error(SelfSuccessionError("x"))


class TestEttError:
    def test_error_code_defaults_to_class_name(self):
        error = EttError("boom")
        assert error.error_code == "EttError"
        assert error.details == {}

    def test_required_field_message(self):
        error = RequiredFieldError("Invitation", "create", "role", {"code": "abc"})
        assert error.message.startswith("Invitation create error: Missing role in")

    def test_create_error_response(self):
        response = create_error_response(SelfSuccessionError("cannot", details={"email": "x@y.org"}))
        assert response["error"]["type"] == "SelfSuccessionError"
        assert response["error"]["message"] == "cannot"
        assert response["error"]["details"] == {"email": "x@y.org"}
