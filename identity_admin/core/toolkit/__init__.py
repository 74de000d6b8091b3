"""Identity Toolkit admin API client library.

Architecture:
- endpoints.py: Endpoint contracts (path, verb, request/response validators)
- client.py: Request dispatcher and HTTP transport
- signers.py: Credential sources producing bearer tokens
- exceptions.py: Typed errors and backend error classification
- records.py: Value objects built from backend responses
- users.py: User lifecycle operations
- tenants.py: Tenant management and tenant-scoped user services
- project_config.py / passkey_config.py: Configuration resources
- admin.py: IdentityAdmin bundle built from settings (import it directly)

Usage:
    from identity_admin.core.toolkit import IdentityToolkitClient, StaticTokenSigner, UserService

    client = IdentityToolkitClient(StaticTokenSigner(token))
    users = UserService(client)
    user = await users.get_user("abc123")
"""
from .client import (
    IdentityToolkitClient,
    RequestsTransport,
    Transport,
    TransportResponse,
    REQUEST_TIMEOUT,
)
from .endpoints import (
    EndpointContract,
    ENDPOINTS,
    define,
    get_endpoint,
    GET_ACCOUNT_INFO,
    DELETE_ACCOUNT,
    SET_ACCOUNT_INFO,
    SIGN_UP_NEW_USER,
    DOWNLOAD_ACCOUNT,
)
from .exceptions import (
    ErrorKind,
    IdentityToolkitError,
    InvalidArgumentError,
    InternalAssertionError,
    BackendError,
    UnknownBackendCodeError,
    TransportError,
    SignerError,
    classify_server_error,
)
from .signers import (
    Signer,
    StaticTokenSigner,
    EmulatorSigner,
    ClientCredentialsSigner,
    ServiceAccountSigner,
)
from .records import (
    UserRecord,
    UserInfo,
    UserMetadata,
    Tenant,
    ProjectConfig,
    PasskeyConfig,
)
from .users import UserService
from .tenants import TenantManager
from .project_config import ProjectConfigManager
from .passkey_config import PasskeyConfigManager

__all__ = [
    # Client
    "IdentityToolkitClient",
    "RequestsTransport",
    "Transport",
    "TransportResponse",
    "REQUEST_TIMEOUT",

    # Endpoints
    "EndpointContract",
    "ENDPOINTS",
    "define",
    "get_endpoint",
    "GET_ACCOUNT_INFO",
    "DELETE_ACCOUNT",
    "SET_ACCOUNT_INFO",
    "SIGN_UP_NEW_USER",
    "DOWNLOAD_ACCOUNT",

    # Exceptions
    "ErrorKind",
    "IdentityToolkitError",
    "InvalidArgumentError",
    "InternalAssertionError",
    "BackendError",
    "UnknownBackendCodeError",
    "TransportError",
    "SignerError",
    "classify_server_error",

    # Signers
    "Signer",
    "StaticTokenSigner",
    "EmulatorSigner",
    "ClientCredentialsSigner",
    "ServiceAccountSigner",

    # Records
    "UserRecord",
    "UserInfo",
    "UserMetadata",
    "Tenant",
    "ProjectConfig",
    "PasskeyConfig",

    # Services
    "UserService",
    "TenantManager",
    "ProjectConfigManager",
    "PasskeyConfigManager",
]
