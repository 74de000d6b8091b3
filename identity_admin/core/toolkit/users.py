"""User management operations."""
from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional, TypedDict

from ..field_mapping import (
    DELETABLE_USER_FIELDS,
    UPDATE_USER_RENAMES,
    USER_RENAMES,
    USER_WRITE_KEYS,
    to_wire,
)
from ..validators import is_email, is_phone_number, is_uid
from .client import IdentityToolkitClient
from .endpoints import (
    DELETE_ACCOUNT,
    DOWNLOAD_ACCOUNT,
    GET_ACCOUNT_INFO,
    MAX_DOWNLOAD_ACCOUNT_PAGE_SIZE,
    SET_ACCOUNT_INFO,
    SIGN_UP_NEW_USER,
)
from .exceptions import invalid_argument
from .records import UserRecord


class ListUsersResult(TypedDict, total=False):
    users: List[UserRecord]
    page_token: str


def _require_properties(properties: Any) -> None:
    if not isinstance(properties, Mapping):
        raise invalid_argument("INVALID_ARGUMENT", "Properties argument must be a non-null object.")


class UserService:
    """Service for managing user accounts.

    A service created with ``tenant_id`` scopes every request to that tenant
    and asks the signer for the tenant identity.

    Usage:
        users = UserService(client)
        uid = await users.create_user({"email": "alice@example.com", "password": "secret1"})
        user = await users.get_user(uid)
        await users.update_user(uid, {"photo_url": None})  # delete the photo
    """

    def __init__(self, client: IdentityToolkitClient, tenant_id: Optional[str] = None):
        """Initialize user service.

        Args:
            client: Dispatcher bound to the user management API
            tenant_id: Tenant to scope requests to (None for the project)
        """
        self.client = client
        self.tenant_id = tenant_id

    def _scoped(self, request: Dict[str, Any]) -> Dict[str, Any]:
        if self.tenant_id is not None:
            request["tenantId"] = self.tenant_id
        return request

    def _check_tenant(self, properties: Mapping[str, Any]) -> None:
        if (
            self.tenant_id is not None
            and "tenant_id" in properties
            and properties["tenant_id"] != self.tenant_id
        ):
            raise invalid_argument("MISMATCHING_TENANT_ID")

    async def _invoke(self, contract, request: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.invoke(contract, request, identity=self.tenant_id)

    # ─────────────────────────────────────────────────────────────────────
    # Lookup
    # ─────────────────────────────────────────────────────────────────────
    async def _lookup(self, request: Dict[str, Any]) -> UserRecord:
        response = await self._invoke(GET_ACCOUNT_INFO, self._scoped(request))
        return UserRecord.from_response(response["users"][0])

    async def get_user(self, uid: str) -> UserRecord:
        """Return the user with the given uid.

        Raises:
            InvalidArgumentError: If uid is malformed (no request is sent)
            BackendError: auth/user-not-found if no such user exists
        """
        if not is_uid(uid):
            raise invalid_argument("INVALID_UID")
        return await self._lookup({"localId": [uid]})

    async def get_user_by_email(self, email: str) -> UserRecord:
        if not is_email(email):
            raise invalid_argument("INVALID_EMAIL")
        return await self._lookup({"email": [email]})

    async def get_user_by_phone_number(self, phone_number: str) -> UserRecord:
        if not is_phone_number(phone_number):
            raise invalid_argument("INVALID_PHONE_NUMBER")
        return await self._lookup({"phoneNumber": [phone_number]})

    # ─────────────────────────────────────────────────────────────────────
    # Mutations
    # ─────────────────────────────────────────────────────────────────────
    async def delete_user(self, uid: str) -> None:
        if not is_uid(uid):
            raise invalid_argument("INVALID_UID")
        await self._invoke(DELETE_ACCOUNT, self._scoped({"localId": uid}))

    def build_create_request(self, properties: Mapping[str, Any]) -> Dict[str, Any]:
        """Translate public create properties into a signupNewUser envelope."""
        _require_properties(properties)
        self._check_tenant(properties)
        return self._scoped(to_wire(properties, USER_RENAMES, accepted_keys=USER_WRITE_KEYS))

    async def create_user(self, properties: Mapping[str, Any]) -> str:
        """Create a user and return its uid.

        Args:
            properties: Public properties (uid, email, password, display_name,
                photo_url, phone_number, email_verified, disabled). The backend
                generates a uid when none is given.

        Returns:
            uid of the new user
        """
        request = self.build_create_request(properties)
        response = await self._invoke(SIGN_UP_NEW_USER, request)
        return response["localId"]

    def build_update_request(self, uid: str, properties: Mapping[str, Any]) -> Dict[str, Any]:
        """Translate public update properties into a setAccountInfo envelope.

        display_name and photo_url set to None are deleted on the backend;
        absent properties are left unchanged.
        """
        _require_properties(properties)
        self._check_tenant(properties)
        request = to_wire(
            properties,
            UPDATE_USER_RENAMES,
            deletable=DELETABLE_USER_FIELDS,
            accepted_keys=USER_WRITE_KEYS,
        )
        request["localId"] = uid
        return self._scoped(request)

    async def update_user(self, uid: str, properties: Mapping[str, Any]) -> str:
        """Update an existing user and return its uid.

        Raises:
            InvalidArgumentError: If uid or properties are malformed
            BackendError: auth/user-not-found if the backend did not echo the uid
        """
        if not is_uid(uid):
            raise invalid_argument("INVALID_UID")
        request = self.build_update_request(uid, properties)
        response = await self._invoke(SET_ACCOUNT_INFO, request)
        return response["localId"]

    # ─────────────────────────────────────────────────────────────────────
    # Listing
    # ─────────────────────────────────────────────────────────────────────
    async def list_users(
        self,
        max_results: int = MAX_DOWNLOAD_ACCOUNT_PAGE_SIZE,
        page_token: Optional[str] = None,
    ) -> ListUsersResult:
        """Return one page of users.

        Args:
            max_results: Page size (1..1000)
            page_token: Token from a previous page; None for the first page

        Returns:
            {"users": [...], "page_token": "..."}; ``page_token`` is omitted
            when there are no more pages
        """
        request: Dict[str, Any] = {"maxResults": max_results}
        if page_token is not None:
            request["nextPageToken"] = page_token
        response = await self._invoke(DOWNLOAD_ACCOUNT, self._scoped(request))

        result: ListUsersResult = {
            "users": [UserRecord.from_response(entry) for entry in response.get("users") or []],
        }
        if response.get("nextPageToken"):
            result["page_token"] = response["nextPageToken"]
        return result
