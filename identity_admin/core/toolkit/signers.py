"""Credential sources used to sign Identity Toolkit requests.

A signer hands out one bearer token per call. Nothing is cached: every
request asks its signer again, and concurrent callers may do so at the
same time.

Implementations:
- StaticTokenSigner: a pre-obtained token
- EmulatorSigner: the fixed token accepted by the local emulator
- ClientCredentialsSigner: OAuth2 client credentials grant
- ServiceAccountSigner: signed JWT assertion exchanged for an access token
"""
from __future__ import annotations
import asyncio
import logging
import time
from typing import Any, Dict, Optional, Protocol, runtime_checkable

import jwt
import requests

from .exceptions import SignerError

logger = logging.getLogger(__name__)

TOKEN_REQUEST_TIMEOUT = 10
DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"
DEFAULT_SCOPES = (
    "https://www.googleapis.com/auth/cloud-platform",
    "https://www.googleapis.com/auth/identitytoolkit",
)
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
ASSERTION_LIFETIME = 3600
EMULATOR_TOKEN = "owner"


@runtime_checkable
class Signer(Protocol):
    """Produces a bearer token for a logical identity.

    ``identity`` is None for the default (project) identity or a tenant ID
    for tenant-scoped calls.
    """

    async def get_token(self, identity: Optional[str] = None) -> str:
        ...


class StaticTokenSigner:
    """Signer returning a token obtained elsewhere."""

    def __init__(self, token: str):
        if not token:
            raise ValueError("token must be a non-empty string")
        self._token = token

    async def get_token(self, identity: Optional[str] = None) -> str:
        return self._token


class EmulatorSigner:
    """Signer for the local emulator, which accepts a fixed token."""

    async def get_token(self, identity: Optional[str] = None) -> str:
        return EMULATOR_TOKEN


def _exchange_token(token_uri: str, data: Dict[str, str]) -> str:
    """POST a token request and return the access token.

    Raises:
        SignerError: On network failure, non-200 status, or missing token
    """
    try:
        resp = requests.post(token_uri, data=data, timeout=TOKEN_REQUEST_TIMEOUT)
    except requests.RequestException as exc:
        raise SignerError(f"Failed to reach token endpoint {token_uri}: {exc}") from exc
    if resp.status_code != 200:
        raise SignerError(f"Token endpoint {token_uri} returned [{resp.status_code}]: {resp.text}")
    try:
        return resp.json()["access_token"]
    except (ValueError, KeyError, TypeError) as exc:
        raise SignerError(f"Token endpoint {token_uri} returned no access_token") from exc


class ClientCredentialsSigner:
    """Fetch an access token with the OAuth2 client credentials flow.

    Usage:
        signer = ClientCredentialsSigner(
            "https://idp.example.com/oauth2/token", "automation-cli", "secret"
        )
        token = await signer.get_token()
    """

    def __init__(self, token_uri: str, client_id: str, client_secret: str, scope: Optional[str] = None):
        self.token_uri = token_uri
        self.client_id = client_id
        self._client_secret = client_secret
        self.scope = scope

    async def get_token(self, identity: Optional[str] = None) -> str:
        data = {
            "grant_type": "client_credentials",
            "client_id": self.client_id,
            "client_secret": self._client_secret,
        }
        if self.scope:
            data["scope"] = self.scope
        logger.debug("Requesting client credentials token for %s", self.client_id)
        return await asyncio.to_thread(_exchange_token, self.token_uri, data)


class ServiceAccountSigner:
    """Sign a JWT assertion with a service account key and exchange it.

    Args:
        service_account_info: Parsed service account JSON with at least
            ``client_email`` and ``private_key`` (PEM, RSA)
        scopes: OAuth scopes requested for the access token
        token_uri: Token endpoint; defaults to the key's ``token_uri``
    """

    def __init__(
        self,
        service_account_info: Dict[str, Any],
        scopes: tuple = DEFAULT_SCOPES,
        token_uri: Optional[str] = None,
    ):
        missing = [key for key in ("client_email", "private_key") if not service_account_info.get(key)]
        if missing:
            raise ValueError(f"Service account info is missing: {', '.join(missing)}")
        self.client_email = service_account_info["client_email"]
        self._private_key = service_account_info["private_key"]
        self._key_id = service_account_info.get("private_key_id")
        self.scopes = tuple(scopes)
        self.token_uri = token_uri or service_account_info.get("token_uri") or DEFAULT_TOKEN_URI

    def sign_assertion(self, now: Optional[int] = None) -> str:
        """Return an RS256-signed JWT assertion for the token endpoint."""
        issued_at = int(now if now is not None else time.time())
        claims = {
            "iss": self.client_email,
            "scope": " ".join(self.scopes),
            "aud": self.token_uri,
            "iat": issued_at,
            "exp": issued_at + ASSERTION_LIFETIME,
        }
        headers = {"kid": self._key_id} if self._key_id else None
        try:
            return jwt.encode(claims, self._private_key, algorithm="RS256", headers=headers)
        except (ValueError, TypeError, jwt.PyJWTError) as exc:
            raise SignerError(f"Unable to sign assertion for {self.client_email}: {exc}") from exc

    async def get_token(self, identity: Optional[str] = None) -> str:
        assertion = self.sign_assertion()
        data = {"grant_type": JWT_BEARER_GRANT, "assertion": assertion}
        logger.debug("Exchanging signed assertion for %s", self.client_email)
        return await asyncio.to_thread(_exchange_token, self.token_uri, data)
