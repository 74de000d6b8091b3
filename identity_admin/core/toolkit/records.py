"""Value objects built from Identity Toolkit JSON responses.

Each record is a frozen dataclass with a ``from_response`` constructor that
reads the backend payload, and a ``to_dict`` method returning public
(snake_case) names with unset optional fields omitted.
"""
from __future__ import annotations
import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from ..field_mapping import PASSKEY_CONFIG_RENAMES, USER_RENAMES, from_wire
from .exceptions import InternalAssertionError, invalid_argument

TENANT_RESOURCE_MARKER = "/tenants/"


def _parse_millis(value: Any) -> Optional[datetime]:
    """Parse a millisecond epoch (int or numeric string) into an aware datetime."""
    try:
        return datetime.fromtimestamp(int(value) / 1000.0, tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


@dataclass(frozen=True)
class UserMetadata:
    creation_time: Optional[datetime] = None
    last_sign_in_time: Optional[datetime] = None

    @classmethod
    def from_response(cls, response: Mapping[str, Any]) -> "UserMetadata":
        return cls(
            creation_time=_parse_millis(response.get("createdAt")),
            last_sign_in_time=_parse_millis(response.get("lastLoginAt")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "creation_time": self.creation_time.isoformat() if self.creation_time else None,
            "last_sign_in_time": self.last_sign_in_time.isoformat() if self.last_sign_in_time else None,
        }


@dataclass(frozen=True)
class UserInfo:
    """A linked identity provider entry of a user."""

    uid: str
    provider_id: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    photo_url: Optional[str] = None
    phone_number: Optional[str] = None

    @classmethod
    def from_response(cls, response: Mapping[str, Any]) -> "UserInfo":
        if not response.get("rawId") or not response.get("providerId"):
            raise InternalAssertionError("Invalid user info response")
        return cls(
            uid=response["rawId"],
            provider_id=response["providerId"],
            display_name=response.get("displayName"),
            email=response.get("email"),
            photo_url=response.get("photoUrl"),
            phone_number=response.get("phoneNumber"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "uid": self.uid,
            "provider_id": self.provider_id,
            "display_name": self.display_name,
            "email": self.email,
            "photo_url": self.photo_url,
            "phone_number": self.phone_number,
        })


@dataclass(frozen=True)
class UserRecord:
    """A user account as returned by getAccountInfo/downloadAccount."""

    uid: str
    email: Optional[str] = None
    email_verified: bool = False
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    phone_number: Optional[str] = None
    disabled: bool = False
    tenant_id: Optional[str] = None
    metadata: UserMetadata = field(default_factory=UserMetadata)
    provider_data: List[UserInfo] = field(default_factory=list)

    @classmethod
    def from_response(cls, response: Mapping[str, Any]) -> "UserRecord":
        if not response.get("localId"):
            raise InternalAssertionError("Invalid user response")
        props = from_wire(response, USER_RENAMES)
        return cls(
            uid=props["uid"],
            email=props.get("email"),
            email_verified=bool(props.get("email_verified")),
            display_name=props.get("display_name"),
            photo_url=props.get("photo_url"),
            phone_number=props.get("phone_number"),
            # Accounts are enabled unless the backend says otherwise.
            disabled=bool(props.get("disabled", False)),
            tenant_id=props.get("tenant_id"),
            metadata=UserMetadata.from_response(response),
            provider_data=[UserInfo.from_response(entry) for entry in response.get("providerUserInfo") or []],
        )

    def to_dict(self) -> Dict[str, Any]:
        data = _drop_none({
            "uid": self.uid,
            "email": self.email,
            "display_name": self.display_name,
            "photo_url": self.photo_url,
            "phone_number": self.phone_number,
            "tenant_id": self.tenant_id,
        })
        data["email_verified"] = self.email_verified
        data["disabled"] = self.disabled
        data["metadata"] = self.metadata.to_dict()
        data["provider_data"] = [entry.to_dict() for entry in self.provider_data]
        return data


@dataclass(frozen=True)
class EmailSignInConfig:
    """Email/password sign-in settings of a tenant.

    The backend stores ``allowPasswordSignup`` and ``enableEmailLinkSignin``;
    ``password_required`` is the negation of the latter.
    """

    enabled: bool = False
    password_required: bool = True

    @classmethod
    def from_response(cls, response: Mapping[str, Any]) -> "EmailSignInConfig":
        return cls(
            enabled=bool(response.get("allowPasswordSignup", False)),
            password_required=not bool(response.get("enableEmailLinkSignin", False)),
        )

    @staticmethod
    def build_server_request(options: Mapping[str, Any]) -> Dict[str, Any]:
        """Translate public email sign-in options into backend fields.

        Raises:
            InvalidArgumentError: If options are not a dict of booleans
        """
        if not isinstance(options, Mapping):
            raise invalid_argument("INVALID_CONFIG", '"email_sign_in_config" must be a non-null object.')
        request: Dict[str, Any] = {}
        for key, value in options.items():
            if key not in ("enabled", "password_required"):
                raise invalid_argument(
                    "INVALID_CONFIG", f'"{key}" is not a valid email_sign_in_config parameter.'
                )
            if not isinstance(value, bool):
                raise invalid_argument("INVALID_CONFIG", f'"email_sign_in_config.{key}" must be a boolean.')
        if "enabled" in options:
            request["allowPasswordSignup"] = options["enabled"]
        if "password_required" in options:
            request["enableEmailLinkSignin"] = not options["password_required"]
        return request

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "password_required": self.password_required}


def tenant_id_from_resource_name(name: Any) -> Optional[str]:
    """Extract the tenant ID from "projects/<project>/tenants/<tenant>"."""
    if not isinstance(name, str) or TENANT_RESOURCE_MARKER not in name:
        return None
    tenant_id = name.rsplit(TENANT_RESOURCE_MARKER, 1)[1]
    return tenant_id or None


@dataclass(frozen=True)
class Tenant:
    tenant_id: str
    display_name: Optional[str] = None
    email_sign_in_config: EmailSignInConfig = field(default_factory=EmailSignInConfig)
    multi_factor_config: Optional[Dict[str, Any]] = None
    test_phone_numbers: Optional[Dict[str, str]] = None

    @classmethod
    def from_response(cls, response: Mapping[str, Any]) -> "Tenant":
        tenant_id = tenant_id_from_resource_name(response.get("name"))
        if not tenant_id:
            raise InternalAssertionError("Invalid tenant response")
        test_phone_numbers = None
        if "testPhoneNumbers" in response:
            test_phone_numbers = dict(response.get("testPhoneNumbers") or {})
        return cls(
            tenant_id=tenant_id,
            display_name=response.get("displayName"),
            email_sign_in_config=EmailSignInConfig.from_response(response),
            multi_factor_config=copy.deepcopy(response.get("mfaConfig")),
            test_phone_numbers=test_phone_numbers,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "tenant_id": self.tenant_id,
            "display_name": self.display_name,
            "email_sign_in_config": self.email_sign_in_config.to_dict(),
        }
        if self.multi_factor_config is not None:
            data["multi_factor_config"] = copy.deepcopy(self.multi_factor_config)
        if self.test_phone_numbers is not None:
            data["test_phone_numbers"] = dict(self.test_phone_numbers)
        return data


@dataclass(frozen=True)
class ProjectConfig:
    sms_region_config: Optional[Dict[str, Any]] = None
    multi_factor_config: Optional[Dict[str, Any]] = None

    @classmethod
    def from_response(cls, response: Mapping[str, Any]) -> "ProjectConfig":
        # The project config API calls the MFA settings "mfa"; tenants call it "mfaConfig".
        return cls(
            sms_region_config=copy.deepcopy(response.get("smsRegionConfig")),
            multi_factor_config=copy.deepcopy(response.get("mfa")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "sms_region_config": copy.deepcopy(self.sms_region_config),
            "multi_factor_config": copy.deepcopy(self.multi_factor_config),
        })


@dataclass(frozen=True)
class PasskeyConfig:
    name: Optional[str] = None
    rp_id: Optional[str] = None
    expected_origins: Optional[List[str]] = None

    @classmethod
    def from_response(cls, response: Mapping[str, Any]) -> "PasskeyConfig":
        props = from_wire(response, PASSKEY_CONFIG_RENAMES)
        origins = props.get("expected_origins")
        return cls(
            name=props.get("name"),
            rp_id=props.get("rp_id"),
            expected_origins=list(origins) if origins is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "name": self.name,
            "rp_id": self.rp_id,
            "expected_origins": list(self.expected_origins) if self.expected_origins is not None else None,
        })
