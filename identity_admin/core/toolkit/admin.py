"""Wire settings, signer and transport into ready-to-use services."""
from __future__ import annotations
import logging
from typing import Optional, Tuple

from ...config.settings import ToolkitConfig, load_settings
from .client import (
    DEFAULT_PORT,
    PROJECT_MANAGEMENT_HOST,
    PROJECT_MANAGEMENT_PATH,
    USER_MANAGEMENT_HOST,
    USER_MANAGEMENT_PATH,
    IdentityToolkitClient,
    RequestsTransport,
    Transport,
)
from .passkey_config import PasskeyConfigManager
from .project_config import ProjectConfigManager
from .signers import Signer
from .tenants import TenantManager
from .users import UserService

logger = logging.getLogger(__name__)

EMULATOR_DEFAULT_PORT = 80


def _split_host(address: str) -> Tuple[str, int]:
    """Split "host:port" (port defaults to 80)."""
    host, sep, port = address.rpartition(":")
    if not sep:
        return address, EMULATOR_DEFAULT_PORT
    try:
        return host, int(port)
    except ValueError as exc:
        raise ValueError(f"Invalid emulator host: {address!r}") from exc


class IdentityAdmin:
    """Bundle of the user, tenant and configuration services of one project.

    Against the emulator every request goes to
    ``http://<emulator>/<api-host><path>`` with the emulator token.

    Usage:
        admin = IdentityAdmin.from_env()
        user = await admin.users.get_user("abc123")
        acme = admin.tenants.auth_for_tenant("acme-x1y2")

    Args:
        config: Loaded settings
        signer: Overrides the signer chosen by ``config.build_signer()``
        transport: Overrides the default requests-based transport
    """

    def __init__(
        self,
        config: ToolkitConfig,
        signer: Optional[Signer] = None,
        transport: Optional[Transport] = None,
    ):
        if not config.project_id:
            raise ValueError("project_id is required")
        self.config = config
        self.signer = signer or config.build_signer()
        if transport is None:
            transport = RequestsTransport(scheme="http" if config.use_emulator else "https")
        self.transport = transport

        project_path = PROJECT_MANAGEMENT_PATH.format(project_id=config.project_id)
        self.user_client = self._build_client(USER_MANAGEMENT_HOST, USER_MANAGEMENT_PATH)
        self.project_client = self._build_client(PROJECT_MANAGEMENT_HOST, project_path)

        self.users = UserService(self.user_client)
        self.tenants = TenantManager(self.project_client, self.user_client)
        self.project_config = ProjectConfigManager(self.project_client)
        self.passkey_config = PasskeyConfigManager(self.project_client)

    @classmethod
    def from_env(cls, transport: Optional[Transport] = None) -> "IdentityAdmin":
        return cls(load_settings(), transport=transport)

    def _build_client(self, api_host: str, path: str) -> IdentityToolkitClient:
        if self.config.use_emulator:
            host, port = _split_host(self.config.emulator_host)
            path = f"/{api_host}{path}"
            logger.debug("Routing %s through emulator %s:%s", api_host, host, port)
        else:
            host, port = api_host, DEFAULT_PORT
        return IdentityToolkitClient(
            self.signer,
            path_prefix=path,
            host=host,
            port=port,
            transport=self.transport,
            timeout=self.config.timeout,
        )
