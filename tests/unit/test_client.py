"""Tests for the request dispatcher and the requests-based transport."""
import asyncio
from unittest.mock import Mock

import pytest
import requests

from identity_admin import __version__
from identity_admin.core.toolkit.client import (
    REQUEST_TIMEOUT,
    USER_MANAGEMENT_HOST,
    USER_MANAGEMENT_PATH,
    IdentityToolkitClient,
    RequestsTransport,
    TransportResponse,
    get_error_code,
)
from identity_admin.core.toolkit.endpoints import (
    DELETE_TENANT,
    GET_ACCOUNT_INFO,
    LIST_TENANTS,
    SIGN_UP_NEW_USER,
    define,
)
from identity_admin.core.toolkit.exceptions import (
    BackendError,
    InternalAssertionError,
    InvalidArgumentError,
    SignerError,
    TransportError,
    UnknownBackendCodeError,
    transport_error,
)
from tests.conftest import respond


class TestInvokeRequest:
    @pytest.mark.asyncio
    async def test_sends_signed_post(self, user_client, transport, signer):
        transport.queue(respond(200, {"users": [{"localId": "abc123"}]}))

        response = await user_client.invoke(GET_ACCOUNT_INFO, {"localId": ["abc123"]})

        assert response == {"users": [{"localId": "abc123"}]}
        call = transport.last
        assert call["host"] == USER_MANAGEMENT_HOST
        assert call["port"] == 443
        assert call["method"] == "POST"
        assert call["path"] == USER_MANAGEMENT_PATH + "getAccountInfo"
        assert call["body"] == {"localId": ["abc123"]}
        assert call["timeout"] == REQUEST_TIMEOUT
        assert call["headers"]["Authorization"] == "Bearer test-token"
        assert call["headers"]["Content-Type"] == "application/json"
        assert call["headers"]["X-Client-Version"] == f"Python/Admin/{__version__}"
        assert signer.identities == [None]

    @pytest.mark.asyncio
    async def test_request_is_copied(self, user_client, transport):
        request = {"localId": ["abc123"]}
        transport.queue(respond(200, {"users": [{"localId": "abc123"}]}))

        await user_client.invoke(GET_ACCOUNT_INFO, request)

        assert transport.last["body"] is not request
        assert request == {"localId": ["abc123"]}

    @pytest.mark.asyncio
    async def test_get_envelope_goes_to_query(self, project_client, transport):
        transport.queue(respond(200, {"tenants": []}))

        await project_client.invoke(LIST_TENANTS, {"pageSize": 10, "pageToken": "next"})

        call = transport.last
        assert call["method"] == "GET"
        assert call["body"] is None
        assert call["path"] == "/v2/projects/proj-1/tenants?pageSize=10&pageToken=next"

    @pytest.mark.asyncio
    async def test_path_params_and_extra_query(self, project_client, transport):
        await project_client.invoke(DELETE_TENANT, path_params={"tenant_id": "t-1"}, query={"force": "true"})
        assert transport.last["path"] == "/v2/projects/proj-1/tenants/t-1?force=true"
        assert transport.last["method"] == "DELETE"

    @pytest.mark.asyncio
    async def test_identity_is_passed_to_signer(self, user_client, transport, signer):
        transport.queue(respond(200, {"users": [{"localId": "abc123"}]}))
        await user_client.invoke(GET_ACCOUNT_INFO, {"localId": ["abc123"]}, identity="tenant-1")
        assert signer.identities == ["tenant-1"]


class TestInvokeFailures:
    @pytest.mark.asyncio
    async def test_request_validation_never_reaches_network(self, user_client, transport, signer):
        with pytest.raises(InternalAssertionError):
            await user_client.invoke(GET_ACCOUNT_INFO, {})
        assert transport.calls == []
        assert signer.identities == []

    @pytest.mark.asyncio
    async def test_local_field_error(self, user_client, transport):
        with pytest.raises(InvalidArgumentError) as exc:
            await user_client.invoke(SIGN_UP_NEW_USER, {"email": "not-an-email"})
        assert exc.value.has_code("invalid-email")
        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_error_status_is_classified(self, user_client, transport):
        body = {"error": {"code": 400, "message": "EMAIL_EXISTS"}}
        transport.queue(respond(400, body))

        with pytest.raises(BackendError) as exc:
            await user_client.invoke(SIGN_UP_NEW_USER, {"email": "a@b.co"})

        assert exc.value.has_code("email-already-exists")
        assert exc.value.status == 400
        assert exc.value.raw_response == body

    @pytest.mark.asyncio
    async def test_error_code_on_success_status_is_classified(self, user_client, transport):
        transport.queue(respond(200, {"error": {"message": "USER_NOT_FOUND"}}))
        with pytest.raises(BackendError) as exc:
            await user_client.invoke(GET_ACCOUNT_INFO, {"localId": ["abc"]})
        assert exc.value.has_code("user-not-found")

    @pytest.mark.asyncio
    async def test_error_status_without_code(self, user_client, transport):
        transport.queue(TransportResponse(503, None, "Service Unavailable"))
        with pytest.raises(UnknownBackendCodeError) as exc:
            await user_client.invoke(GET_ACCOUNT_INFO, {"localId": ["abc"]})
        assert exc.value.status == 503
        assert "Service Unavailable" in exc.value.message

    @pytest.mark.asyncio
    async def test_missing_anchor_runs_response_validator(self, user_client, transport):
        transport.queue(respond(200, {}))
        with pytest.raises(BackendError) as exc:
            await user_client.invoke(GET_ACCOUNT_INFO, {"localId": ["abc"]})
        assert exc.value.has_code("user-not-found")

    @pytest.mark.asyncio
    async def test_unparseable_body(self, user_client, transport):
        transport.queue(TransportResponse(200, None, "<html>"))
        with pytest.raises(TransportError) as exc:
            await user_client.invoke(GET_ACCOUNT_INFO, {"localId": ["abc"]})
        assert exc.value.has_code("unable-to-parse-response")

    @pytest.mark.asyncio
    async def test_non_object_body(self, user_client, transport):
        transport.queue(TransportResponse(200, ["a"], '["a"]'))
        with pytest.raises(TransportError):
            await user_client.invoke(define("ping"))

    @pytest.mark.asyncio
    async def test_empty_body_is_empty_object(self, user_client, transport):
        transport.queue(TransportResponse(200, None, ""))
        assert await user_client.invoke(define("deleteAccount"), {"localId": "abc"}) == {}

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, user_client, transport):
        transport.queue(transport_error("NETWORK_TIMEOUT"))
        with pytest.raises(TransportError) as exc:
            await user_client.invoke(GET_ACCOUNT_INFO, {"localId": ["abc"]})
        assert exc.value.has_code("network-timeout")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error, code",
        [
            (OSError("connection reset"), "network-error"),
            (asyncio.TimeoutError(), "network-timeout"),
        ],
    )
    async def test_custom_transport_failure_is_typed(self, user_client, transport, error, code):
        transport.queue(error)
        with pytest.raises(TransportError) as exc:
            await user_client.invoke(GET_ACCOUNT_INFO, {"localId": ["abc"]})
        assert exc.value.has_code(code)
        assert exc.value.__cause__ is error

    @pytest.mark.asyncio
    async def test_non_string_error_message_is_classified(self, user_client, transport):
        transport.queue(respond(400, {"error": {"message": 42}}))
        with pytest.raises(UnknownBackendCodeError) as exc:
            await user_client.invoke(GET_ACCOUNT_INFO, {"localId": ["abc"]})
        assert exc.value.has_code("internal-error")


class TestSigning:
    @pytest.mark.asyncio
    async def test_signer_exception_is_wrapped(self, transport):
        class BrokenSigner:
            async def get_token(self, identity=None):
                raise RuntimeError("key store offline")

        client = IdentityToolkitClient(BrokenSigner(), transport=transport)
        with pytest.raises(SignerError) as exc:
            await client.invoke(GET_ACCOUNT_INFO, {"localId": ["abc"]})
        assert "key store offline" in exc.value.message
        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_empty_token_rejected(self, transport):
        class EmptySigner:
            async def get_token(self, identity=None):
                return ""

        client = IdentityToolkitClient(EmptySigner(), transport=transport)
        with pytest.raises(SignerError):
            await client.invoke(GET_ACCOUNT_INFO, {"localId": ["abc"]})

    @pytest.mark.asyncio
    async def test_token_requested_per_call(self, user_client, transport, signer):
        transport.queue(
            respond(200, {"users": [{"localId": "a"}]}),
            respond(200, {"users": [{"localId": "b"}]}),
        )
        await user_client.invoke(GET_ACCOUNT_INFO, {"localId": ["a"]})
        await user_client.invoke(GET_ACCOUNT_INFO, {"localId": ["b"]})
        assert signer.identities == [None, None]


def test_get_error_code():
    assert get_error_code({"error": {"message": "USER_NOT_FOUND"}}) == "USER_NOT_FOUND"
    assert get_error_code({"error": "boom"}) is None
    assert get_error_code({"error": {"message": 42}}) is None
    assert get_error_code(["error"]) is None
    assert get_error_code(None) is None


class TestRequestsTransport:
    @pytest.mark.asyncio
    async def test_sends_json_and_parses_response(self):
        session = Mock()
        session.request.return_value = Mock(
            status_code=200,
            content=b'{"localId": "abc"}',
            text='{"localId": "abc"}',
            json=lambda: {"localId": "abc"},
        )
        transport = RequestsTransport(session=session)

        response = await transport.send(
            "example.com", 443, "/v1/ping", "POST", {"a": 1}, {"X-Test": "1"}, 5
        )

        assert response == TransportResponse(200, {"localId": "abc"}, '{"localId": "abc"}')
        session.request.assert_called_once_with(
            "POST",
            "https://example.com:443/v1/ping",
            json={"a": 1},
            headers={"X-Test": "1"},
            timeout=5,
        )

    @pytest.mark.asyncio
    async def test_http_scheme_for_emulator(self):
        session = Mock()
        session.request.return_value = Mock(status_code=200, content=b"", text="")
        transport = RequestsTransport(session=session, scheme="http")

        response = await transport.send("localhost", 9099, "/x", "GET", None, {}, 5)

        assert response.body is None
        assert session.request.call_args[0][1] == "http://localhost:9099/x"

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        def _raise():
            raise ValueError("not json")

        session = Mock()
        session.request.return_value = Mock(status_code=502, content=b"<html>", text="<html>", json=_raise)
        response = await RequestsTransport(session=session).send("h", 443, "/", "POST", {}, {}, 5)
        assert response == TransportResponse(502, None, "<html>")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "exc, code",
        [
            (requests.Timeout("slow"), "network-timeout"),
            (requests.ConnectionError("refused"), "network-error"),
        ],
    )
    async def test_network_failures(self, exc, code):
        session = Mock()
        session.request.side_effect = exc
        with pytest.raises(TransportError) as raised:
            await RequestsTransport(session=session).send("h", 443, "/", "POST", {}, {}, 5)
        assert raised.value.has_code(code)
