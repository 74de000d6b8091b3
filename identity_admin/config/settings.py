"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from ..core.toolkit.signers import (
    DEFAULT_TOKEN_URI,
    ClientCredentialsSigner,
    EmulatorSigner,
    ServiceAccountSigner,
    Signer,
)

logger = logging.getLogger(__name__)

SECRETS_DIR = Path("/run/secrets")
DEFAULT_TIMEOUT = 10.0
DEFAULT_EMULATOR_PROJECT_ID = "demo-project"


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = SECRETS_DIR / secret_name

    if secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
        except OSError as exc:
            logger.warning("Failed to read %s: %s", secret_file, exc)
        else:
            if secret_value:
                logger.debug("Loaded %s from %s", secret_name, SECRETS_DIR)
                return secret_value

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            logger.debug("Loaded %s from environment (fallback)", env_var)
            return secret_value

    return None


def _load_service_account() -> Optional[Dict[str, Any]]:
    """Parse the service account key from /run/secrets or the file named in the environment."""
    raw = _load_secret_from_file("identity_toolkit_service_account")
    if raw is None:
        path = os.environ.get("IDENTITY_TOOLKIT_SERVICE_ACCOUNT_FILE", "").strip()
        if not path:
            return None
        try:
            raw = Path(path).read_text()
        except OSError as exc:
            raise RuntimeError(f"Unable to read service account file {path}: {exc}") from exc
    try:
        info = json.loads(raw)
    except ValueError as exc:
        raise RuntimeError(f"Service account key is not valid JSON: {exc}") from exc
    if not isinstance(info, dict):
        raise RuntimeError("Service account key must be a JSON object.")
    return info


@dataclass
class ToolkitConfig:
    """Identity Toolkit client configuration container."""
    project_id: str = ""
    emulator_host: str = ""
    timeout: float = DEFAULT_TIMEOUT

    # Client credentials
    client_id: str = ""
    client_secret: str = ""
    token_uri: str = DEFAULT_TOKEN_URI

    # Service account key (parsed JSON)
    service_account_info: Optional[Dict[str, Any]] = None

    @property
    def use_emulator(self) -> bool:
        return bool(self.emulator_host)

    def build_signer(self) -> Signer:
        """Pick the signer matching the configured credentials.

        Priority:
        1. Emulator host set: fixed emulator token
        2. Service account key: signed JWT assertion
        3. Client ID and secret: client credentials grant

        Raises:
            ValueError: If no credentials are configured
        """
        if self.use_emulator:
            return EmulatorSigner()
        if self.service_account_info:
            return ServiceAccountSigner(self.service_account_info)
        if self.client_id and self.client_secret:
            return ClientCredentialsSigner(self.token_uri, self.client_id, self.client_secret)
        raise ValueError(
            "No credentials configured. Set IDENTITY_TOOLKIT_EMULATOR_HOST, "
            "IDENTITY_TOOLKIT_SERVICE_ACCOUNT_FILE, or IDENTITY_TOOLKIT_CLIENT_ID "
            "and IDENTITY_TOOLKIT_CLIENT_SECRET."
        )


def load_settings() -> ToolkitConfig:
    """Load client settings from environment and /run/secrets."""
    emulator_host = os.environ.get("IDENTITY_TOOLKIT_EMULATOR_HOST", "").strip()

    project_id = os.environ.get("IDENTITY_TOOLKIT_PROJECT_ID", "").strip()
    if not project_id:
        if not emulator_host:
            raise RuntimeError("Environment variable IDENTITY_TOOLKIT_PROJECT_ID is required.")
        project_id = DEFAULT_EMULATOR_PROJECT_ID

    timeout_str = os.environ.get("IDENTITY_TOOLKIT_TIMEOUT", str(DEFAULT_TIMEOUT))
    try:
        timeout = float(timeout_str)
    except ValueError as exc:
        raise RuntimeError(f"IDENTITY_TOOLKIT_TIMEOUT must be a number, got {timeout_str!r}") from exc
    if timeout <= 0:
        raise RuntimeError("IDENTITY_TOOLKIT_TIMEOUT must be positive.")

    client_id = os.environ.get("IDENTITY_TOOLKIT_CLIENT_ID", "").strip()
    client_secret = _load_secret_from_file(
        "identity_toolkit_client_secret",
        "IDENTITY_TOOLKIT_CLIENT_SECRET",
    ) or ""
    token_uri = os.environ.get("IDENTITY_TOOLKIT_TOKEN_URI", "").strip() or DEFAULT_TOKEN_URI

    service_account_info = None if emulator_host else _load_service_account()

    if emulator_host:
        credential = "emulator"
    elif service_account_info:
        credential = "service-account"
    elif client_id and client_secret:
        credential = "client-credentials"
    else:
        credential = "none"
    logger.info(
        "Identity Toolkit settings: project=%s; emulator=%s; credentials=%s",
        project_id,
        emulator_host or "off",
        credential,
    )

    return ToolkitConfig(
        project_id=project_id,
        emulator_host=emulator_host,
        timeout=timeout,
        client_id=client_id,
        client_secret=client_secret,
        token_uri=token_uri,
        service_account_info=service_account_info,
    )
