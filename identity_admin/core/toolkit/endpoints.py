"""Endpoint contracts for the Identity Toolkit backend.

Each contract names a backend endpoint, its HTTP verb, and two validators:
one run on the outgoing envelope before anything is sent, one run on a
success-shaped response. Contracts are immutable and registered once in
``ENDPOINTS``.

Usage:
    GET_THING = (
        define("things/{thing_id}", "GET")
        .with_response_validator(_require_anchor("name", "TENANT_NOT_FOUND"))
    )
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Callable, Mapping

from ..validators import (
    is_email,
    is_max_results,
    is_non_empty_string,
    is_password,
    is_phone_number,
    is_uid,
    is_url,
)
from .exceptions import (
    AUTH_CLIENT_ERRORS,
    BackendError,
    InternalAssertionError,
    invalid_argument,
)

Validator = Callable[[Mapping[str, Any]], None]

HTTP_METHODS = frozenset({"GET", "POST", "PATCH", "DELETE"})

MAX_DOWNLOAD_ACCOUNT_PAGE_SIZE = 1000
MAX_LIST_TENANT_PAGE_SIZE = 1000


def _no_op(data: Mapping[str, Any]) -> None:
    return None


@dataclass(frozen=True)
class EndpointContract:
    """Immutable description of one backend endpoint.

    Attributes:
        name: Path segment relative to the API prefix; may contain
            ``{placeholders}`` filled at dispatch time
        http_method: GET, POST, PATCH or DELETE
        request_validator: Raises on a malformed request envelope
        response_validator: Raises when a success response lacks its anchor
    """

    name: str
    http_method: str = "POST"
    request_validator: Validator = field(default=_no_op, compare=False)
    response_validator: Validator = field(default=_no_op, compare=False)

    def __post_init__(self) -> None:
        if self.http_method not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method: {self.http_method}")

    def with_request_validator(self, validator: Validator) -> "EndpointContract":
        return replace(self, request_validator=validator)

    def with_response_validator(self, validator: Validator) -> "EndpointContract":
        return replace(self, response_validator=validator)

    def path(self, **path_params: str) -> str:
        """Fill the contract's path placeholders."""
        try:
            return self.name.format(**path_params)
        except KeyError as exc:
            raise InternalAssertionError(f"Missing path parameter {exc} for endpoint '{self.name}'") from exc


def define(name: str, http_method: str = "POST") -> EndpointContract:
    return EndpointContract(name, http_method)


def _require_anchor(anchor: str, error_key: str, message: str | None = None) -> Validator:
    """Response validator: the anchor field must be present and truthy.

    A missing anchor on a success-shaped response means the backend silently
    failed; it surfaces as the given typed error instead of a parse error.
    """

    def validator(response: Mapping[str, Any]) -> None:
        if not response.get(anchor):
            info = AUTH_CLIENT_ERRORS[error_key]
            raise BackendError(info, message, raw_response=dict(response))

    return validator


def _require_internal(anchor: str, message: str) -> Validator:
    def validator(response: Mapping[str, Any]) -> None:
        if not response.get(anchor):
            raise InternalAssertionError(message)

    return validator


# ─────────────────────────────────────────────────────────────────────────────
# Request validators
# ─────────────────────────────────────────────────────────────────────────────
def validate_create_edit_request(request: Mapping[str, Any]) -> None:
    """Check field types of a signupNewUser/setAccountInfo envelope.

    Errors name the client-facing field (uid, photo_url, disabled) even though
    the envelope carries the backend names.
    """
    if "displayName" in request and not isinstance(request["displayName"], str):
        raise invalid_argument("INVALID_DISPLAY_NAME")
    if "localId" in request and not is_uid(request["localId"]):
        raise invalid_argument("INVALID_UID")
    if "email" in request and not is_email(request["email"]):
        raise invalid_argument("INVALID_EMAIL")
    if "phoneNumber" in request and not is_phone_number(request["phoneNumber"]):
        raise invalid_argument("INVALID_PHONE_NUMBER")
    for key in ("password", "rawPassword"):
        if key in request and not is_password(request[key]):
            raise invalid_argument("INVALID_PASSWORD")
    if "emailVerified" in request and not isinstance(request["emailVerified"], bool):
        raise invalid_argument("INVALID_EMAIL_VERIFIED")
    if "photoUrl" in request and not is_url(request["photoUrl"]):
        raise invalid_argument("INVALID_PHOTO_URL")
    for key in ("disabled", "disableUser"):
        if key in request and not isinstance(request[key], bool):
            raise invalid_argument("INVALID_DISABLED_FIELD")


def _validate_lookup_request(request: Mapping[str, Any]) -> None:
    if not (request.get("localId") or request.get("email") or request.get("phoneNumber")):
        raise InternalAssertionError("Server request is missing user identifier")


def _validate_delete_request(request: Mapping[str, Any]) -> None:
    if not request.get("localId"):
        raise InternalAssertionError("Server request is missing user identifier")


def _validate_set_account_info_request(request: Mapping[str, Any]) -> None:
    if "localId" not in request:
        raise InternalAssertionError("Server request is missing user identifier")
    validate_create_edit_request(request)


def _validate_download_account_request(request: Mapping[str, Any]) -> None:
    if "nextPageToken" in request and not is_non_empty_string(request["nextPageToken"]):
        raise invalid_argument("INVALID_PAGE_TOKEN")
    if not is_max_results(request.get("maxResults"), MAX_DOWNLOAD_ACCOUNT_PAGE_SIZE):
        raise invalid_argument(
            "INVALID_ARGUMENT",
            f"Required \"max_results\" must be a positive integer that does not exceed "
            f"{MAX_DOWNLOAD_ACCOUNT_PAGE_SIZE}.",
        )


def _validate_list_tenants_request(request: Mapping[str, Any]) -> None:
    if "pageToken" in request and not is_non_empty_string(request["pageToken"]):
        raise invalid_argument("INVALID_PAGE_TOKEN")
    if not is_max_results(request.get("pageSize"), MAX_LIST_TENANT_PAGE_SIZE):
        raise invalid_argument(
            "INVALID_ARGUMENT",
            f"Required \"max_results\" must be a positive integer that does not exceed "
            f"{MAX_LIST_TENANT_PAGE_SIZE}.",
        )


# ─────────────────────────────────────────────────────────────────────────────
# User endpoints (relyingparty API)
# ─────────────────────────────────────────────────────────────────────────────
GET_ACCOUNT_INFO = (
    define("getAccountInfo", "POST")
    .with_request_validator(_validate_lookup_request)
    .with_response_validator(_require_anchor("users", "USER_NOT_FOUND"))
)

DELETE_ACCOUNT = define("deleteAccount", "POST").with_request_validator(_validate_delete_request)

SET_ACCOUNT_INFO = (
    define("setAccountInfo", "POST")
    .with_request_validator(_validate_set_account_info_request)
    .with_response_validator(_require_anchor("localId", "USER_NOT_FOUND"))
)

SIGN_UP_NEW_USER = (
    define("signupNewUser", "POST")
    .with_request_validator(validate_create_edit_request)
    .with_response_validator(_require_internal("localId", "Unable to create new user"))
)

DOWNLOAD_ACCOUNT = define("downloadAccount", "POST").with_request_validator(_validate_download_account_request)

# ─────────────────────────────────────────────────────────────────────────────
# Tenant and configuration endpoints (project-scoped API)
# ─────────────────────────────────────────────────────────────────────────────
GET_TENANT = define("tenants/{tenant_id}", "GET").with_response_validator(
    _require_anchor("name", "TENANT_NOT_FOUND")
)

LIST_TENANTS = define("tenants", "GET").with_request_validator(_validate_list_tenants_request)

DELETE_TENANT = define("tenants/{tenant_id}", "DELETE")

CREATE_TENANT = define("tenants", "POST").with_response_validator(
    _require_internal("name", "Unable to create new tenant")
)

UPDATE_TENANT = define("tenants/{tenant_id}", "PATCH").with_response_validator(
    _require_internal("name", "Unable to update tenant")
)

GET_PROJECT_CONFIG = define("config", "GET")

UPDATE_PROJECT_CONFIG = define("config", "PATCH")

GET_PASSKEY_CONFIG = define("passkeyConfig", "GET")

UPDATE_PASSKEY_CONFIG = define("passkeyConfig", "PATCH")

GET_TENANT_PASSKEY_CONFIG = define("tenants/{tenant_id}/passkeyConfig", "GET")

UPDATE_TENANT_PASSKEY_CONFIG = define("tenants/{tenant_id}/passkeyConfig", "PATCH")


ENDPOINTS: Mapping[str, EndpointContract] = MappingProxyType({
    "getAccountInfo": GET_ACCOUNT_INFO,
    "deleteAccount": DELETE_ACCOUNT,
    "setAccountInfo": SET_ACCOUNT_INFO,
    "signupNewUser": SIGN_UP_NEW_USER,
    "downloadAccount": DOWNLOAD_ACCOUNT,
    "getTenant": GET_TENANT,
    "listTenants": LIST_TENANTS,
    "deleteTenant": DELETE_TENANT,
    "createTenant": CREATE_TENANT,
    "updateTenant": UPDATE_TENANT,
    "getProjectConfig": GET_PROJECT_CONFIG,
    "updateProjectConfig": UPDATE_PROJECT_CONFIG,
    "getPasskeyConfig": GET_PASSKEY_CONFIG,
    "updatePasskeyConfig": UPDATE_PASSKEY_CONFIG,
    "getTenantPasskeyConfig": GET_TENANT_PASSKEY_CONFIG,
    "updateTenantPasskeyConfig": UPDATE_TENANT_PASSKEY_CONFIG,
})


def get_endpoint(name: str) -> EndpointContract:
    """Return the registered contract for an operation name."""
    try:
        return ENDPOINTS[name]
    except KeyError as exc:
        raise InternalAssertionError(f"Unknown endpoint '{name}'") from exc
