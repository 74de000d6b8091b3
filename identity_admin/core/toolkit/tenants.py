"""Tenant management operations."""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Mapping, Optional, TypedDict

from ..field_mapping import TENANT_RENAMES, generate_update_mask, rename_keys
from ..validators import is_non_empty_string, is_phone_number
from .client import IdentityToolkitClient
from .endpoints import (
    CREATE_TENANT,
    DELETE_TENANT,
    GET_TENANT,
    LIST_TENANTS,
    MAX_LIST_TENANT_PAGE_SIZE,
    UPDATE_TENANT,
)
from .exceptions import invalid_argument
from .records import EmailSignInConfig, Tenant
from .users import UserService

logger = logging.getLogger(__name__)

TENANT_OPTION_KEYS = frozenset({
    "display_name",
    "email_sign_in_config",
    "multi_factor_config",
    "test_phone_numbers",
})

MAX_TEST_PHONE_NUMBERS = 10

# Replaced as a whole on update; never merged key by key.
TENANT_MASK_TERMINALS = ("testPhoneNumbers",)


class ListTenantsResult(TypedDict, total=False):
    tenants: List[Tenant]
    page_token: str


def _require_tenant_id(tenant_id: Any) -> None:
    if not is_non_empty_string(tenant_id):
        raise invalid_argument("INVALID_TENANT_ID")


def _validate_test_phone_numbers(numbers: Any) -> None:
    if not isinstance(numbers, Mapping):
        raise invalid_argument(
            "INVALID_ARGUMENT", '"test_phone_numbers" must be a map of phone number / code pairs.'
        )
    if len(numbers) > MAX_TEST_PHONE_NUMBERS:
        raise invalid_argument(
            "INVALID_TESTING_PHONE_NUMBER",
            f"Maximum of {MAX_TEST_PHONE_NUMBERS} test phone number / code pairs can be configured.",
        )
    for phone_number, code in numbers.items():
        if not is_phone_number(phone_number):
            raise invalid_argument(
                "INVALID_TESTING_PHONE_NUMBER", f'"{phone_number}" is not a valid E.164 standard compliant phone number.'
            )
        if not isinstance(code, str) or not code.isdigit() or len(code) != 6:
            raise invalid_argument(
                "INVALID_TESTING_PHONE_NUMBER", f'"{code}" is not a valid 6 digit code string.'
            )


def build_tenant_request(options: Any, for_create: bool) -> Dict[str, Any]:
    """Validate public tenant options and translate them to backend fields.

    On update, ``test_phone_numbers=None`` clears the test numbers; on create
    it is rejected.

    Raises:
        InvalidArgumentError: On unknown keys or malformed values
    """
    label = "CreateTenantRequest" if for_create else "UpdateTenantRequest"
    if not isinstance(options, Mapping):
        raise invalid_argument("INVALID_ARGUMENT", f'"{label}" must be a valid non-null object.')
    for key in options:
        if key not in TENANT_OPTION_KEYS:
            raise invalid_argument("INVALID_ARGUMENT", f'"{key}" is not a valid {label} parameter.')

    if "display_name" in options and not is_non_empty_string(options["display_name"]):
        raise invalid_argument("INVALID_ARGUMENT", f'"{label}.display_name" must be a valid non-empty string.')
    if "multi_factor_config" in options and not isinstance(options["multi_factor_config"], Mapping):
        raise invalid_argument("INVALID_CONFIG", '"multi_factor_config" must be a non-null object.')
    if "test_phone_numbers" in options:
        numbers = options["test_phone_numbers"]
        if numbers is None:
            if for_create:
                raise invalid_argument(
                    "INVALID_ARGUMENT", '"test_phone_numbers" must be a non-null object on create.'
                )
        else:
            _validate_test_phone_numbers(numbers)

    request = rename_keys(
        {key: value for key, value in options.items() if key != "email_sign_in_config"},
        TENANT_RENAMES,
    )
    if "email_sign_in_config" in options:
        request.update(EmailSignInConfig.build_server_request(options["email_sign_in_config"]))
    return request


class TenantManager:
    """Service for managing tenants of a project.

    Usage:
        tenants = TenantManager(project_client, user_client)
        tenant = await tenants.create_tenant({"display_name": "acme"})
        acme_users = tenants.auth_for_tenant(tenant.tenant_id)
        await acme_users.create_user({"email": "bob@acme.test"})

    Args:
        client: Dispatcher bound to the project management API
        user_client: Dispatcher bound to the user management API, used by
            tenant-scoped user services
    """

    def __init__(self, client: IdentityToolkitClient, user_client: IdentityToolkitClient):
        self.client = client
        self.user_client = user_client
        self._tenant_services: Dict[str, UserService] = {}

    def auth_for_tenant(self, tenant_id: str) -> UserService:
        """Return the user service scoped to a tenant (one instance per tenant ID)."""
        _require_tenant_id(tenant_id)
        if tenant_id not in self._tenant_services:
            self._tenant_services[tenant_id] = UserService(self.user_client, tenant_id)
        return self._tenant_services[tenant_id]

    async def get_tenant(self, tenant_id: str) -> Tenant:
        _require_tenant_id(tenant_id)
        response = await self.client.invoke(GET_TENANT, path_params={"tenant_id": tenant_id})
        return Tenant.from_response(response)

    async def list_tenants(
        self,
        max_results: int = MAX_LIST_TENANT_PAGE_SIZE,
        page_token: Optional[str] = None,
    ) -> ListTenantsResult:
        """Return one page of tenants; ``page_token`` is omitted on the last page."""
        request: Dict[str, Any] = {"pageSize": max_results}
        if page_token is not None:
            request["pageToken"] = page_token
        response = await self.client.invoke(LIST_TENANTS, request)

        result: ListTenantsResult = {
            "tenants": [Tenant.from_response(entry) for entry in response.get("tenants") or []],
        }
        if response.get("nextPageToken"):
            result["page_token"] = response["nextPageToken"]
        return result

    async def delete_tenant(self, tenant_id: str) -> None:
        _require_tenant_id(tenant_id)
        await self.client.invoke(DELETE_TENANT, path_params={"tenant_id": tenant_id})
        # A deleted tenant's scoped service must not be handed out again.
        self._tenant_services.pop(tenant_id, None)

    async def create_tenant(self, options: Mapping[str, Any]) -> Tenant:
        request = build_tenant_request(options, for_create=True)
        response = await self.client.invoke(CREATE_TENANT, request)
        logger.debug("Created tenant %s", response.get("name"))
        return Tenant.from_response(response)

    async def update_tenant(self, tenant_id: str, options: Mapping[str, Any]) -> Tenant:
        """Patch a tenant; only the given options are changed.

        Raises:
            InvalidArgumentError: If tenant_id or options are malformed
        """
        _require_tenant_id(tenant_id)
        request = build_tenant_request(options, for_create=False)
        update_mask = generate_update_mask(request, TENANT_MASK_TERMINALS)
        # A cleared map is named in the mask but absent from the body.
        if "testPhoneNumbers" in request and request["testPhoneNumbers"] is None:
            del request["testPhoneNumbers"]
        response = await self.client.invoke(
            UPDATE_TENANT,
            request,
            path_params={"tenant_id": tenant_id},
            query={"updateMask": ",".join(update_mask)},
        )
        return Tenant.from_response(response)
