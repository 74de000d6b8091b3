"""Passkey (WebAuthn) configuration for a project or tenant."""
from __future__ import annotations
from typing import Any, Dict, Mapping, Optional

from ..field_mapping import PASSKEY_CONFIG_RENAMES, to_wire
from ..validators import is_non_empty_list, is_non_empty_string
from .client import IdentityToolkitClient
from .endpoints import (
    GET_PASSKEY_CONFIG,
    GET_TENANT_PASSKEY_CONFIG,
    UPDATE_PASSKEY_CONFIG,
    UPDATE_TENANT_PASSKEY_CONFIG,
)
from .exceptions import invalid_argument
from .records import PasskeyConfig


def build_passkey_config_request(options: Any) -> Dict[str, Any]:
    """Validate passkey options; only ``expected_origins`` may be changed.

    Raises:
        InvalidArgumentError: On unknown keys, or origins that are not a
            non-empty list of non-empty strings
    """
    if not isinstance(options, Mapping):
        raise invalid_argument("INVALID_ARGUMENT", '"PasskeyConfigRequest" must be a valid non-null object.')
    for key in options:
        if key != "expected_origins":
            raise invalid_argument("INVALID_ARGUMENT", f'"{key}" is not a valid PasskeyConfigRequest parameter.')

    origins = options.get("expected_origins")
    if not is_non_empty_list(origins):
        raise invalid_argument(
            "INVALID_ARGUMENT", '"expected_origins" must be a valid non-empty array of strings.'
        )
    for origin in origins:
        if not is_non_empty_string(origin):
            raise invalid_argument(
                "INVALID_ARGUMENT", '"expected_origins" must be a valid non-empty array of strings.'
            )
    return to_wire(options, PASSKEY_CONFIG_RENAMES)


class PasskeyConfigManager:
    """Read and update passkey settings.

    Every method takes an optional ``tenant_id``; None targets the project.
    """

    def __init__(self, client: IdentityToolkitClient):
        self.client = client

    @staticmethod
    def _path_params(tenant_id: Optional[str]) -> Optional[Dict[str, str]]:
        if tenant_id is None:
            return None
        if not is_non_empty_string(tenant_id):
            raise invalid_argument("INVALID_TENANT_ID")
        return {"tenant_id": tenant_id}

    async def get_passkey_config(self, tenant_id: Optional[str] = None) -> PasskeyConfig:
        path_params = self._path_params(tenant_id)
        contract = GET_PASSKEY_CONFIG if path_params is None else GET_TENANT_PASSKEY_CONFIG
        response = await self.client.invoke(contract, path_params=path_params)
        return PasskeyConfig.from_response(response)

    async def update_passkey_config(
        self, options: Mapping[str, Any], tenant_id: Optional[str] = None
    ) -> PasskeyConfig:
        path_params = self._path_params(tenant_id)
        request = build_passkey_config_request(options)
        contract = UPDATE_PASSKEY_CONFIG if path_params is None else UPDATE_TENANT_PASSKEY_CONFIG
        response = await self.client.invoke(
            contract,
            request,
            path_params=path_params,
            query={"updateMask": "expectedOrigins"},
        )
        return PasskeyConfig.from_response(response)
