"""Identity Toolkit exceptions and backend error classification.

Every failure raised by this package is an ``IdentityToolkitError``. The
subclass (and its ``kind`` tag) tells where the failure came from:

- InvalidArgumentError: caller input rejected before any network call
- InternalAssertionError: a facade built a malformed request envelope
- BackendError: the backend declared an error code
- UnknownBackendCodeError: the backend declared a code we do not know
- TransportError: the request never produced a usable response
- SignerError: no credential could be obtained for the request

``code`` is always ``"auth/<slug>"`` and is stable across releases.
"""
from __future__ import annotations
import enum
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional


CODE_PREFIX = "auth"


class ErrorKind(str, enum.Enum):
    """Where in the request pipeline an error originated."""

    LOCAL_VALIDATION = "local-validation"
    INTERNAL_ASSERTION = "internal-assertion"
    BACKEND = "backend"
    UNKNOWN_BACKEND_CODE = "unknown-backend-code"
    TRANSPORT = "transport"
    SIGNER = "signer"


@dataclass(frozen=True)
class ErrorInfo:
    code: str
    message: str


# Client error codes and their default messages.
AUTH_CLIENT_ERRORS: Dict[str, ErrorInfo] = {
    "BILLING_NOT_ENABLED": ErrorInfo("billing-not-enabled", "Feature requires billing to be enabled."),
    "CLAIMS_TOO_LARGE": ErrorInfo("claims-too-large", "Developer claims maximum payload size exceeded."),
    "CONFIGURATION_EXISTS": ErrorInfo(
        "configuration-exists", "A configuration already exists with the provided identifier."
    ),
    "CONFIGURATION_NOT_FOUND": ErrorInfo(
        "configuration-not-found", "There is no configuration corresponding to the provided identifier."
    ),
    "EMAIL_ALREADY_EXISTS": ErrorInfo(
        "email-already-exists", "The email address is already in use by another account."
    ),
    "FORBIDDEN_CLAIM": ErrorInfo(
        "reserved-claim", "The specified developer claim is reserved and cannot be specified."
    ),
    "ID_TOKEN_EXPIRED": ErrorInfo("id-token-expired", "The provided ID token is expired."),
    "INSUFFICIENT_PERMISSION": ErrorInfo(
        "insufficient-permission",
        "The credential used to sign requests has insufficient permission to access the requested resource.",
    ),
    "INTERNAL_ERROR": ErrorInfo("internal-error", "An internal error has occurred."),
    "INVALID_ARGUMENT": ErrorInfo("argument-error", "Invalid argument provided."),
    "INVALID_CLAIMS": ErrorInfo("invalid-claims", "The provided custom claim attributes are invalid."),
    "INVALID_CONFIG": ErrorInfo("invalid-config", "The provided configuration is invalid."),
    "INVALID_CONTINUE_URI": ErrorInfo("invalid-continue-uri", "The continue URL must be a valid URL string."),
    "INVALID_CREDENTIAL": ErrorInfo("invalid-credential", "Unable to obtain a credential to sign the request."),
    "INVALID_DISABLED_FIELD": ErrorInfo("invalid-disabled-field", "The disabled field must be a boolean."),
    "INVALID_DISPLAY_NAME": ErrorInfo("invalid-display-name", "The display_name field must be a valid string."),
    "INVALID_DYNAMIC_LINK_DOMAIN": ErrorInfo(
        "invalid-dynamic-link-domain",
        "The provided dynamic link domain is not configured or authorized for the current project.",
    ),
    "INVALID_EMAIL": ErrorInfo("invalid-email", "The email address is improperly formatted."),
    "INVALID_EMAIL_VERIFIED": ErrorInfo("invalid-email-verified", "The email_verified field must be a boolean."),
    "INVALID_ID_TOKEN": ErrorInfo("invalid-id-token", "The provided ID token is not a valid ID token."),
    "INVALID_NAME": ErrorInfo("invalid-name", "The resource name provided is invalid."),
    "INVALID_OAUTH_CLIENT_ID": ErrorInfo("invalid-oauth-client-id", "The provided OAuth client ID is invalid."),
    "INVALID_PAGE_TOKEN": ErrorInfo("invalid-page-token", "The page token must be a valid non-empty string."),
    "INVALID_PASSWORD": ErrorInfo(
        "invalid-password", "The password must be a string with at least 6 characters."
    ),
    "INVALID_PHONE_NUMBER": ErrorInfo(
        "invalid-phone-number",
        "The phone number must be a non-empty E.164 standard compliant identifier string.",
    ),
    "INVALID_PHOTO_URL": ErrorInfo("invalid-photo-url", "The photo_url field must be a valid URL."),
    "INVALID_PROJECT_ID": ErrorInfo(
        "invalid-project-id",
        "Invalid parent project. Either parent project doesn't exist or didn't enable multi-tenancy.",
    ),
    "INVALID_PROVIDER_ID": ErrorInfo(
        "invalid-provider-id", "The provider_id must be a valid supported provider identifier string."
    ),
    "INVALID_SERVICE_ACCOUNT": ErrorInfo("invalid-service-account", "Invalid service account."),
    "INVALID_SESSION_COOKIE_DURATION": ErrorInfo(
        "invalid-session-cookie-duration",
        "The session cookie duration must be a valid number in milliseconds between 5 minutes and 2 weeks.",
    ),
    "INVALID_TENANT_ID": ErrorInfo("invalid-tenant-id", "The tenant ID must be a valid non-empty string."),
    "INVALID_TENANT_TYPE": ErrorInfo(
        "invalid-tenant-type", 'Tenant type must be either "full_service" or "lightweight".'
    ),
    "INVALID_TESTING_PHONE_NUMBER": ErrorInfo(
        "invalid-testing-phone-number", "Invalid testing phone number or invalid test code provided."
    ),
    "INVALID_UID": ErrorInfo("invalid-uid", "The uid must be a non-empty string with at most 128 characters."),
    "MISMATCHING_TENANT_ID": ErrorInfo(
        "mismatching-tenant-id", "User tenant ID does not match with the current tenant ID."
    ),
    "MISSING_ANDROID_PACKAGE_NAME": ErrorInfo(
        "missing-android-pkg-name",
        "An Android Package Name must be provided if the Android App is required to be installed.",
    ),
    "MISSING_CONFIG": ErrorInfo(
        "missing-config", "The provided configuration is missing required attributes."
    ),
    "MISSING_DISPLAY_NAME": ErrorInfo(
        "missing-display-name", "The resource being created or edited is missing a valid display name."
    ),
    "MISSING_EMAIL": ErrorInfo("missing-email", "The email is required for the specified action."),
    "MISSING_IOS_BUNDLE_ID": ErrorInfo("missing-ios-bundle-id", "The request is missing an iOS Bundle ID."),
    "MISSING_ISSUER": ErrorInfo("missing-issuer", "The OAuth/OIDC configuration issuer must not be empty."),
    "MISSING_OAUTH_CLIENT_ID": ErrorInfo(
        "missing-oauth-client-id", "The OAuth/OIDC configuration client ID must not be empty."
    ),
    "MISSING_PROVIDER_ID": ErrorInfo("missing-provider-id", "A valid provider ID must be provided in the request."),
    "MISSING_SAML_RELYING_PARTY_CONFIG": ErrorInfo(
        "missing-saml-relying-party-config",
        "The SAML configuration provided is missing a relying party configuration.",
    ),
    "MISSING_UID": ErrorInfo("missing-uid", "A uid identifier is required for the current operation."),
    "NETWORK_ERROR": ErrorInfo("network-error", "A network error occurred while calling the backend."),
    "NETWORK_TIMEOUT": ErrorInfo("network-timeout", "The request to the backend timed out."),
    "OPERATION_NOT_ALLOWED": ErrorInfo(
        "operation-not-allowed", "The given sign-in provider is disabled for this project."
    ),
    "PHONE_NUMBER_ALREADY_EXISTS": ErrorInfo(
        "phone-number-already-exists", "The user with the provided phone number already exists."
    ),
    "PROJECT_NOT_FOUND": ErrorInfo("project-not-found", "No project was found for the provided credential."),
    "QUOTA_EXCEEDED": ErrorInfo(
        "quota-exceeded", "The project quota for the specified operation has been exceeded."
    ),
    "SECOND_FACTOR_LIMIT_EXCEEDED": ErrorInfo(
        "second-factor-limit-exceeded",
        "The maximum number of allowed second factors on a user has been exceeded.",
    ),
    "SECOND_FACTOR_UID_ALREADY_EXISTS": ErrorInfo(
        "second-factor-uid-already-exists", 'The specified second factor "uid" already exists.'
    ),
    "TENANT_NOT_FOUND": ErrorInfo(
        "tenant-not-found", "There is no tenant corresponding to the provided identifier."
    ),
    "UID_ALREADY_EXISTS": ErrorInfo("uid-already-exists", "The user with the provided uid already exists."),
    "UNABLE_TO_PARSE_RESPONSE": ErrorInfo(
        "unable-to-parse-response", "The backend returned a response that is not valid JSON."
    ),
    "UNAUTHORIZED_DOMAIN": ErrorInfo(
        "unauthorized-continue-uri", "The domain of the continue URL is not whitelisted."
    ),
    "UNSUPPORTED_FIRST_FACTOR": ErrorInfo(
        "unsupported-first-factor", "A multi-factor user requires a supported first factor."
    ),
    "UNSUPPORTED_SECOND_FACTOR": ErrorInfo(
        "unsupported-second-factor", "The request specified an unsupported type of second factor."
    ),
    "UNSUPPORTED_TENANT_OPERATION": ErrorInfo(
        "unsupported-tenant-operation", "This operation is not supported in a multi-tenant context."
    ),
    "UNVERIFIED_EMAIL": ErrorInfo(
        "unverified-email", "A verified email is required for the specified action."
    ),
    "USER_NOT_FOUND": ErrorInfo(
        "user-not-found", "There is no user record corresponding to the provided identifier."
    ),
}


# Backend error code -> key in AUTH_CLIENT_ERRORS.
SERVER_TO_CLIENT_CODE: Dict[str, str] = {
    "BILLING_NOT_ENABLED": "BILLING_NOT_ENABLED",
    "CLAIMS_TOO_LARGE": "CLAIMS_TOO_LARGE",
    "CONFIGURATION_EXISTS": "CONFIGURATION_EXISTS",
    "CONFIGURATION_NOT_FOUND": "CONFIGURATION_NOT_FOUND",
    "INSUFFICIENT_PERMISSION": "INSUFFICIENT_PERMISSION",
    "INVALID_CONFIG": "INVALID_CONFIG",
    "INVALID_CONFIG_ID": "INVALID_PROVIDER_ID",
    "INVALID_CONTINUE_URI": "INVALID_CONTINUE_URI",
    "INVALID_DYNAMIC_LINK_DOMAIN": "INVALID_DYNAMIC_LINK_DOMAIN",
    "DUPLICATE_EMAIL": "EMAIL_ALREADY_EXISTS",
    "DUPLICATE_LOCAL_ID": "UID_ALREADY_EXISTS",
    "DUPLICATE_MFA_ENROLLMENT_ID": "SECOND_FACTOR_UID_ALREADY_EXISTS",
    "EMAIL_EXISTS": "EMAIL_ALREADY_EXISTS",
    "EMAIL_NOT_FOUND": "USER_NOT_FOUND",
    "FORBIDDEN_CLAIM": "FORBIDDEN_CLAIM",
    "INVALID_CLAIMS": "INVALID_CLAIMS",
    "INVALID_DURATION": "INVALID_SESSION_COOKIE_DURATION",
    "INVALID_EMAIL": "INVALID_EMAIL",
    "INVALID_DISPLAY_NAME": "INVALID_DISPLAY_NAME",
    "INVALID_ID_TOKEN": "INVALID_ID_TOKEN",
    "INVALID_NAME": "INVALID_NAME",
    "INVALID_OAUTH_CLIENT_ID": "INVALID_OAUTH_CLIENT_ID",
    "INVALID_PAGE_SELECTION": "INVALID_PAGE_TOKEN",
    "INVALID_PHONE_NUMBER": "INVALID_PHONE_NUMBER",
    "INVALID_PROJECT_ID": "INVALID_PROJECT_ID",
    "INVALID_PROVIDER_ID": "INVALID_PROVIDER_ID",
    "INVALID_SERVICE_ACCOUNT": "INVALID_SERVICE_ACCOUNT",
    "INVALID_TESTING_PHONE_NUMBER": "INVALID_TESTING_PHONE_NUMBER",
    "INVALID_TENANT_TYPE": "INVALID_TENANT_TYPE",
    "MISSING_ANDROID_PACKAGE_NAME": "MISSING_ANDROID_PACKAGE_NAME",
    "MISSING_CONFIG": "MISSING_CONFIG",
    "MISSING_CONFIG_ID": "MISSING_PROVIDER_ID",
    "MISSING_DISPLAY_NAME": "MISSING_DISPLAY_NAME",
    "MISSING_EMAIL": "MISSING_EMAIL",
    "MISSING_IOS_BUNDLE_ID": "MISSING_IOS_BUNDLE_ID",
    "MISSING_ISSUER": "MISSING_ISSUER",
    "MISSING_LOCAL_ID": "MISSING_UID",
    "MISSING_OAUTH_CLIENT_ID": "MISSING_OAUTH_CLIENT_ID",
    "MISSING_PROVIDER_ID": "MISSING_PROVIDER_ID",
    "MISSING_SAML_RELYING_PARTY_CONFIG": "MISSING_SAML_RELYING_PARTY_CONFIG",
    "MISSING_USER_ACCOUNT": "MISSING_UID",
    "OPERATION_NOT_ALLOWED": "OPERATION_NOT_ALLOWED",
    "PERMISSION_DENIED": "INSUFFICIENT_PERMISSION",
    "PHONE_NUMBER_EXISTS": "PHONE_NUMBER_ALREADY_EXISTS",
    "PROJECT_NOT_FOUND": "PROJECT_NOT_FOUND",
    "QUOTA_EXCEEDED": "QUOTA_EXCEEDED",
    "SECOND_FACTOR_LIMIT_EXCEEDED": "SECOND_FACTOR_LIMIT_EXCEEDED",
    "TENANT_NOT_FOUND": "TENANT_NOT_FOUND",
    "TENANT_ID_MISMATCH": "MISMATCHING_TENANT_ID",
    "TOKEN_EXPIRED": "ID_TOKEN_EXPIRED",
    "UNAUTHORIZED_DOMAIN": "UNAUTHORIZED_DOMAIN",
    "UNSUPPORTED_FIRST_FACTOR": "UNSUPPORTED_FIRST_FACTOR",
    "UNSUPPORTED_SECOND_FACTOR": "UNSUPPORTED_SECOND_FACTOR",
    "UNSUPPORTED_TENANT_OPERATION": "UNSUPPORTED_TENANT_OPERATION",
    "UNVERIFIED_EMAIL": "UNVERIFIED_EMAIL",
    "USER_NOT_FOUND": "USER_NOT_FOUND",
    "WEAK_PASSWORD": "INVALID_PASSWORD",
}


class IdentityToolkitError(Exception):
    """Base exception for all Identity Toolkit operations.

    Attributes:
        code: Prefixed, machine-readable error code (e.g. "auth/user-not-found")
        message: Human-readable description
        kind: Pipeline stage the error originated from
    """

    kind: ErrorKind = ErrorKind.INTERNAL_ASSERTION

    def __init__(self, info: ErrorInfo, message: Optional[str] = None):
        self.code = f"{CODE_PREFIX}/{info.code}"
        self.message = message or info.message
        super().__init__(f"[{self.code}] {self.message}")

    def has_code(self, code: str) -> bool:
        """Check the error code without knowing the prefixing scheme."""
        return self.code == f"{CODE_PREFIX}/{code}"

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.code, "message": self.message, "kind": self.kind.value}


class InvalidArgumentError(IdentityToolkitError):
    """Caller input failed a local precondition; no request was sent."""

    kind = ErrorKind.LOCAL_VALIDATION


class InternalAssertionError(IdentityToolkitError):
    """A request envelope violated its endpoint's own precondition."""

    kind = ErrorKind.INTERNAL_ASSERTION

    def __init__(self, message: str):
        super().__init__(AUTH_CLIENT_ERRORS["INTERNAL_ERROR"], f"INTERNAL ASSERT FAILED: {message}")


class BackendError(IdentityToolkitError):
    """Error code declared by the backend, with or without an HTTP error status.

    Attributes:
        server_code: Backend error code with any detail suffix removed
        status: HTTP status code of the response (None if not known)
        raw_response: Parsed JSON body as received
    """

    kind = ErrorKind.BACKEND

    def __init__(
        self,
        info: ErrorInfo,
        message: Optional[str] = None,
        server_code: Optional[str] = None,
        status: Optional[int] = None,
        raw_response: Any = None,
    ):
        super().__init__(info, message)
        self.server_code = server_code
        self.status = status
        self.raw_response = raw_response


class UnknownBackendCodeError(BackendError):
    """Backend error code missing from SERVER_TO_CLIENT_CODE."""

    kind = ErrorKind.UNKNOWN_BACKEND_CODE


class TransportError(IdentityToolkitError):
    """Network, timeout or parse failure with no backend error code."""

    kind = ErrorKind.TRANSPORT


class SignerError(IdentityToolkitError):
    """The signer could not produce a credential for the request."""

    kind = ErrorKind.SIGNER

    def __init__(self, message: Optional[str] = None):
        super().__init__(AUTH_CLIENT_ERRORS["INVALID_CREDENTIAL"], message)


def invalid_argument(key: str, message: Optional[str] = None) -> InvalidArgumentError:
    """Build a local validation error from an AUTH_CLIENT_ERRORS key."""
    return InvalidArgumentError(AUTH_CLIENT_ERRORS[key], message)


def transport_error(key: str, message: Optional[str] = None) -> TransportError:
    return TransportError(AUTH_CLIENT_ERRORS[key], message)


def classify_server_error(
    server_code: Optional[str],
    message: Optional[str] = None,
    raw_response: Any = None,
    status: Optional[int] = None,
) -> BackendError:
    """Map a backend error code to a typed error.

    Backend codes may carry details after a colon
    ("INVALID_ID_TOKEN : extra detail"); only the prefix is matched and the
    detail becomes the message. Unknown or missing codes fall back to
    INTERNAL_ERROR with the raw code and response appended.

    Args:
        server_code: Backend error code (may be None or empty)
        message: Message overriding the default one
        raw_response: Raw JSON body, kept for diagnostics
        status: HTTP status of the response

    Returns:
        A BackendError (UnknownBackendCodeError for unmapped codes)
    """
    code = server_code if isinstance(server_code, str) else ""
    detail = None
    if ":" in code:
        code, detail = code.split(":", 1)
        code = code.strip()
        detail = detail.strip() or None

    client_key = SERVER_TO_CLIENT_CODE.get(code)
    if client_key is not None:
        info = AUTH_CLIENT_ERRORS[client_key]
        return BackendError(
            info,
            detail or message or info.message,
            server_code=code,
            status=status,
            raw_response=raw_response,
        )

    info = AUTH_CLIENT_ERRORS["INTERNAL_ERROR"]
    text = detail or message or info.message
    if code:
        text += f' Backend error code: "{code}".'
    if raw_response is not None:
        text += f' Raw server response: "{json.dumps(raw_response, default=str)}"'
    return UnknownBackendCodeError(
        info,
        text,
        server_code=code or None,
        status=status,
        raw_response=raw_response,
    )
