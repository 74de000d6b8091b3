"""Pytest shared fixtures: network guard rails, fake signer and transport."""
import json
import pathlib
import sys
from typing import Any, Dict, List, Optional

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from identity_admin.core.toolkit.client import (
    PROJECT_MANAGEMENT_HOST,
    PROJECT_MANAGEMENT_PATH,
    IdentityToolkitClient,
    TransportResponse,
)

PROJECT_ID = "proj-1"


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch, request):
    """
    Prevent unit tests from reaching the network.

    Tests that need a real token endpoint or backend are marked with
    @pytest.mark.integration and skip this fixture. Individual tests may still
    monkeypatch requests.post with their own stub.
    """
    if request.node.get_closest_marker("integration"):
        return

    def _blocked_post(url, *args, **kwargs):
        raise RuntimeError(f"Unexpected HTTP POST in unit test: {url}")

    def _blocked_request(self, method, url, *args, **kwargs):
        raise RuntimeError(f"Unexpected HTTP {method} in unit test: {url}")

    monkeypatch.setattr(requests, "post", _blocked_post)
    monkeypatch.setattr(requests.Session, "request", _blocked_request)


# ─────────────────────────────────────────────────────────────────────────────
# Fakes
# ─────────────────────────────────────────────────────────────────────────────
def respond(status: int = 200, body: Any = None) -> TransportResponse:
    """Build a transport response whose text is the JSON dump of ``body``."""
    text = "" if body is None else json.dumps(body)
    return TransportResponse(status, body, text)


class FakeSigner:
    """Signer returning a fixed token and recording the identities asked for."""

    def __init__(self, token: str = "test-token"):
        self.token = token
        self.identities: List[Optional[str]] = []

    async def get_token(self, identity: Optional[str] = None) -> str:
        self.identities.append(identity)
        return self.token


class FakeTransport:
    """Transport replaying queued responses and recording every request.

    Queue a TransportResponse to return it, or an exception to raise it.
    An empty queue answers 200 with an empty JSON object.
    """

    def __init__(self):
        self.responses: List[Any] = []
        self.calls: List[Dict[str, Any]] = []

    def queue(self, *responses: Any) -> "FakeTransport":
        self.responses.extend(responses)
        return self

    async def send(self, host, port, path, method, body, headers, timeout):
        self.calls.append({
            "host": host,
            "port": port,
            "path": path,
            "method": method,
            "body": body,
            "headers": dict(headers),
            "timeout": timeout,
        })
        if not self.responses:
            return respond(200, {})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def last(self) -> Dict[str, Any]:
        return self.calls[-1]


@pytest.fixture()
def signer():
    return FakeSigner()


@pytest.fixture()
def transport():
    return FakeTransport()


@pytest.fixture()
def user_client(signer, transport):
    """Dispatcher bound to the user management API."""
    return IdentityToolkitClient(signer, transport=transport)


@pytest.fixture()
def project_client(signer, transport):
    """Dispatcher bound to the project management API of PROJECT_ID."""
    return IdentityToolkitClient(
        signer,
        path_prefix=PROJECT_MANAGEMENT_PATH.format(project_id=PROJECT_ID),
        host=PROJECT_MANAGEMENT_HOST,
        transport=transport,
    )


# ─────────────────────────────────────────────────────────────────────────────
# RSA Key Pair for Signer Testing
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(scope="session")
def rsa_key_pair():
    """Generate an RSA key pair for service account tests."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)

    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return {
        "private_pem": private_pem.decode("utf-8"),
        "public_pem": public_pem.decode("utf-8"),
    }


# ─────────────────────────────────────────────────────────────────────────────
# Pytest Configuration
# ─────────────────────────────────────────────────────────────────────────────
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (requires a running emulator)"
    )
