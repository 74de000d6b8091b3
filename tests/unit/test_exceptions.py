import pytest

from identity_admin.core.toolkit.exceptions import (
    AUTH_CLIENT_ERRORS,
    SERVER_TO_CLIENT_CODE,
    BackendError,
    ErrorKind,
    IdentityToolkitError,
    InternalAssertionError,
    InvalidArgumentError,
    SignerError,
    UnknownBackendCodeError,
    classify_server_error,
    invalid_argument,
)


class TestClassifyServerError:
    def test_known_code(self):
        error = classify_server_error("USER_NOT_FOUND")
        assert isinstance(error, BackendError)
        assert not isinstance(error, UnknownBackendCodeError)
        assert error.code == "auth/user-not-found"
        assert error.kind is ErrorKind.BACKEND

    def test_aliases(self):
        assert classify_server_error("EMAIL_NOT_FOUND").has_code("user-not-found")
        assert classify_server_error("EMAIL_EXISTS").has_code("email-already-exists")
        assert classify_server_error("WEAK_PASSWORD").has_code("invalid-password")

    def test_detail_suffix_becomes_message(self):
        error = classify_server_error("INVALID_ID_TOKEN : token has been revoked")
        assert error.has_code("invalid-id-token")
        assert error.message == "token has been revoked"
        assert error.server_code == "INVALID_ID_TOKEN"

    def test_empty_suffix_keeps_default_message(self):
        error = classify_server_error("USER_NOT_FOUND:")
        assert error.message == AUTH_CLIENT_ERRORS["USER_NOT_FOUND"].message

    def test_lookup_is_case_sensitive(self):
        error = classify_server_error("user_not_found")
        assert isinstance(error, UnknownBackendCodeError)

    def test_unknown_code_keeps_raw_code_and_response(self):
        raw = {"error": {"message": "SOMETHING_NEW"}}
        error = classify_server_error("SOMETHING_NEW", raw_response=raw, status=400)
        assert isinstance(error, UnknownBackendCodeError)
        assert error.code == "auth/internal-error"
        assert error.kind is ErrorKind.UNKNOWN_BACKEND_CODE
        assert 'Backend error code: "SOMETHING_NEW".' in error.message
        assert '"message": "SOMETHING_NEW"' in error.message
        assert error.status == 400
        assert error.raw_response == raw

    def test_missing_code(self):
        error = classify_server_error(None, raw_response="<html>oops</html>", status=502)
        assert isinstance(error, UnknownBackendCodeError)
        assert error.server_code is None
        assert "<html>oops</html>" in error.message

    def test_non_string_code_is_unknown(self):
        error = classify_server_error(42, raw_response={"error": {"message": 42}})
        assert isinstance(error, UnknownBackendCodeError)
        assert error.server_code is None

    @pytest.mark.parametrize("server_code", sorted(SERVER_TO_CLIENT_CODE))
    def test_every_mapping_targets_a_client_error(self, server_code):
        assert SERVER_TO_CLIENT_CODE[server_code] in AUTH_CLIENT_ERRORS


class TestErrorTypes:
    def test_invalid_argument_with_custom_message(self):
        error = invalid_argument("INVALID_UID", "bad uid")
        assert isinstance(error, InvalidArgumentError)
        assert isinstance(error, IdentityToolkitError)
        assert error.code == "auth/invalid-uid"
        assert error.message == "bad uid"
        assert error.kind is ErrorKind.LOCAL_VALIDATION

    def test_internal_assertion_prefix(self):
        error = InternalAssertionError("Server request is missing user identifier")
        assert error.has_code("internal-error")
        assert error.message.startswith("INTERNAL ASSERT FAILED: ")

    def test_signer_error(self):
        error = SignerError("no key")
        assert error.has_code("invalid-credential")
        assert error.kind is ErrorKind.SIGNER

    def test_to_dict(self):
        error = invalid_argument("INVALID_EMAIL")
        assert error.to_dict() == {
            "code": "auth/invalid-email",
            "message": AUTH_CLIENT_ERRORS["INVALID_EMAIL"].message,
            "kind": "local-validation",
        }
