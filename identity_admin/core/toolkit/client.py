"""Signed request dispatcher for the Identity Toolkit API.

Every backend call goes through ``IdentityToolkitClient.invoke``:

    validate request -> sign -> send -> classify -> validate response -> return

The first failing step raises a typed ``IdentityToolkitError`` and the call
ends there. A request that fails validation never reaches the network.
"""
from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Protocol
from urllib.parse import urlencode

import requests

from ... import __version__
from .endpoints import EndpointContract
from .exceptions import (
    IdentityToolkitError,
    SignerError,
    classify_server_error,
    transport_error,
)
from .signers import Signer

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10

USER_MANAGEMENT_HOST = "www.googleapis.com"
USER_MANAGEMENT_PATH = "/identitytoolkit/v3/relyingparty/"
PROJECT_MANAGEMENT_HOST = "identitytoolkit.googleapis.com"
PROJECT_MANAGEMENT_PATH = "/v2/projects/{project_id}/"
DEFAULT_PORT = 443

DEFAULT_HEADERS: Mapping[str, str] = {
    "Content-Type": "application/json",
    "X-Client-Version": f"Python/Admin/{__version__}",
}

# Verbs whose envelope travels in the query string.
_QUERY_METHODS = frozenset({"GET", "DELETE"})


@dataclass(frozen=True)
class TransportResponse:
    """Raw HTTP result.

    Attributes:
        status: HTTP status code
        body: Parsed JSON body, or None if the body was empty or not JSON
        text: Raw response text
    """

    status: int
    body: Any = None
    text: str = ""


class Transport(Protocol):
    """Sends one HTTP request. Raises TransportError on network failure."""

    async def send(
        self,
        host: str,
        port: int,
        path: str,
        method: str,
        body: Optional[Mapping[str, Any]],
        headers: Mapping[str, str],
        timeout: float,
    ) -> TransportResponse:
        ...


class RequestsTransport:
    """Transport backed by a ``requests.Session`` run in a worker thread.

    Args:
        session: Session to reuse (a new one is created if omitted)
        scheme: "https" for the live backend, "http" for the emulator
    """

    def __init__(self, session: Optional[requests.Session] = None, scheme: str = "https"):
        self.session = session or requests.Session()
        self.scheme = scheme

    async def send(
        self,
        host: str,
        port: int,
        path: str,
        method: str,
        body: Optional[Mapping[str, Any]],
        headers: Mapping[str, str],
        timeout: float,
    ) -> TransportResponse:
        return await asyncio.to_thread(self._send, host, port, path, method, body, headers, timeout)

    def _send(
        self,
        host: str,
        port: int,
        path: str,
        method: str,
        body: Optional[Mapping[str, Any]],
        headers: Mapping[str, str],
        timeout: float,
    ) -> TransportResponse:
        url = f"{self.scheme}://{host}:{port}{path}"
        try:
            resp = self.session.request(method, url, json=body, headers=dict(headers), timeout=timeout)
        except requests.Timeout as exc:
            raise transport_error("NETWORK_TIMEOUT", f"Error while making request: {exc}") from exc
        except requests.RequestException as exc:
            raise transport_error("NETWORK_ERROR", f"Error while making request: {exc}") from exc

        try:
            data = resp.json() if resp.content else None
        except ValueError:
            data = None
        return TransportResponse(resp.status_code, data, resp.text)


def get_error_code(response: Any) -> Optional[str]:
    """Return ``error.message`` from a backend payload, if any."""
    if not isinstance(response, Mapping):
        return None
    error = response.get("error")
    if isinstance(error, Mapping):
        message = error.get("message")
        if isinstance(message, str) and message:
            return message
    return None


class IdentityToolkitClient:
    """Dispatches endpoint calls to one API prefix.

    Usage:
        client = IdentityToolkitClient(signer, USER_MANAGEMENT_PATH)
        response = await client.invoke(GET_ACCOUNT_INFO, {"localId": ["abc123"]})

    Args:
        signer: Credential source asked for a token on every call
        path_prefix: Path prepended to each endpoint name
        host: API host
        port: API port
        transport: HTTP transport (RequestsTransport over https by default)
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        signer: Signer,
        path_prefix: str = USER_MANAGEMENT_PATH,
        host: str = USER_MANAGEMENT_HOST,
        port: int = DEFAULT_PORT,
        transport: Optional[Transport] = None,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.signer = signer
        self.path_prefix = path_prefix
        self.host = host
        self.port = port
        self.transport = transport or RequestsTransport()
        self.timeout = timeout
        self.headers: Dict[str, str] = dict(DEFAULT_HEADERS)

    async def invoke(
        self,
        contract: EndpointContract,
        request: Optional[Mapping[str, Any]] = None,
        path_params: Optional[Mapping[str, str]] = None,
        query: Optional[Mapping[str, Any]] = None,
        identity: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Execute one endpoint call end to end.

        Args:
            contract: Endpoint to call
            request: Wire envelope (copied, never mutated)
            path_params: Values for the contract's path placeholders
            query: Extra query parameters (e.g. updateMask)
            identity: Identity passed to the signer (tenant ID or None)

        Returns:
            The validated JSON response body

        Raises:
            InvalidArgumentError / InternalAssertionError: Request rejected locally
            SignerError: No token could be obtained
            TransportError: Network failure, timeout or unparseable body
            BackendError: Backend declared an error or the response lacks its anchor
        """
        envelope = dict(request or {})
        contract.request_validator(envelope)

        path = self.path_prefix + contract.path(**(path_params or {}))
        params: Dict[str, Any] = dict(query or {})
        body: Optional[Dict[str, Any]] = envelope
        if contract.http_method in _QUERY_METHODS:
            params.update(envelope)
            body = None
        if params:
            path = f"{path}?{urlencode(params, doseq=True)}"

        token = await self._get_token(identity)
        headers = dict(self.headers)
        headers["Authorization"] = f"Bearer {token}"

        logger.debug("%s %s%s", contract.http_method, self.host, path)
        response = await self._send(path, contract.http_method, body, headers)
        logger.debug("%s %s%s -> %s", contract.http_method, self.host, path, response.status)

        payload = response.body
        error_code = get_error_code(payload)
        if error_code or not 200 <= response.status < 300:
            raw = payload if payload is not None else response.text
            raise classify_server_error(error_code, raw_response=raw, status=response.status)

        if payload is None:
            if response.text.strip():
                raise transport_error(
                    "UNABLE_TO_PARSE_RESPONSE",
                    f'Error while parsing response data. Raw server response: "{response.text}". '
                    f'Status code: "{response.status}".',
                )
            payload = {}
        if not isinstance(payload, dict):
            raise transport_error(
                "UNABLE_TO_PARSE_RESPONSE",
                f'Expected a JSON object from the backend. Raw server response: "{response.text}".',
            )

        contract.response_validator(payload)
        return payload

    async def _send(
        self,
        path: str,
        method: str,
        body: Optional[Mapping[str, Any]],
        headers: Mapping[str, str],
    ) -> TransportResponse:
        try:
            return await self.transport.send(self.host, self.port, path, method, body, headers, self.timeout)
        except IdentityToolkitError:
            raise
        except asyncio.TimeoutError as exc:
            raise transport_error("NETWORK_TIMEOUT", f"Error while making request: {exc!r}") from exc
        except Exception as exc:
            raise transport_error("NETWORK_ERROR", f"Error while making request: {exc!r}") from exc

    async def _get_token(self, identity: Optional[str]) -> str:
        try:
            token = await self.signer.get_token(identity)
        except SignerError:
            raise
        except Exception as exc:
            raise SignerError(f"Failed to obtain a token: {exc}") from exc
        if not token:
            raise SignerError("Signer returned an empty token")
        return token
