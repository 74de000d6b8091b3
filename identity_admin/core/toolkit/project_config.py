"""Project-level authentication configuration."""
from __future__ import annotations
from typing import Any, Dict, Mapping

from ..field_mapping import PROJECT_CONFIG_RENAMES, generate_update_mask, to_wire
from .client import IdentityToolkitClient
from .endpoints import GET_PROJECT_CONFIG, UPDATE_PROJECT_CONFIG
from .exceptions import invalid_argument
from .records import ProjectConfig


def build_project_config_request(options: Any) -> Dict[str, Any]:
    """Validate public project config options and rename them for the backend."""
    if not isinstance(options, Mapping):
        raise invalid_argument("INVALID_ARGUMENT", '"UpdateProjectConfigRequest" must be a valid non-null object.')
    for key, value in options.items():
        if key not in PROJECT_CONFIG_RENAMES:
            raise invalid_argument("INVALID_ARGUMENT", f'"{key}" is not a valid UpdateProjectConfigRequest parameter.')
        if not isinstance(value, Mapping):
            raise invalid_argument("INVALID_CONFIG", f'"{key}" must be a non-null object.')
    return to_wire(options, PROJECT_CONFIG_RENAMES)


class ProjectConfigManager:
    """Read and patch the project's auth configuration.

    Usage:
        configs = ProjectConfigManager(project_client)
        await configs.update_project_config(
            {"multi_factor_config": {"state": "ENABLED", "enabledProviders": ["PHONE_SMS"]}}
        )
    """

    def __init__(self, client: IdentityToolkitClient):
        self.client = client

    async def get_project_config(self) -> ProjectConfig:
        response = await self.client.invoke(GET_PROJECT_CONFIG)
        return ProjectConfig.from_response(response)

    async def update_project_config(self, options: Mapping[str, Any]) -> ProjectConfig:
        request = build_project_config_request(options)
        update_mask = generate_update_mask(request)
        response = await self.client.invoke(
            UPDATE_PROJECT_CONFIG, request, query={"updateMask": ",".join(update_mask)}
        )
        return ProjectConfig.from_response(response)
