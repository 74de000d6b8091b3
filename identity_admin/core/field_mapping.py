"""Public property bag <-> backend wire schema transformations.

Callers use snake_case property names; the backend uses its own camelCase
names and an explicit deletion list. Both directions are pure functions that
return new dicts and never touch their input.

Usage:
    # Public -> wire (update request)
    wire = to_wire(
        {"display_name": None, "photo_url": "https://x/y.png"},
        UPDATE_USER_RENAMES,
        deletable=DELETABLE_USER_FIELDS,
        accepted_keys=USER_WRITE_KEYS,
    )
    # {"photoUrl": "https://x/y.png", "deleteAttribute": ["DISPLAY_NAME"]}

    # Wire -> public
    props = from_wire({"localId": "abc", "photoUrl": "..."}, USER_RENAMES)
    # {"uid": "abc", "photo_url": "..."}

A key present with value None means "delete on the backend"; an absent key
means "leave unchanged".
"""
from __future__ import annotations
from typing import Any, Dict, Iterable, List, Mapping, Optional

DELETE_ATTRIBUTE_KEY = "deleteAttribute"

# Public name -> backend attribute name used in deleteAttribute.
DELETABLE_USER_FIELDS: Mapping[str, str] = {
    "display_name": "DISPLAY_NAME",
    "photo_url": "PHOTO_URL",
}

# Public name -> wire name. Keys in neither direction pass through unchanged.
USER_RENAMES: Mapping[str, str] = {
    "uid": "localId",
    "display_name": "displayName",
    "photo_url": "photoUrl",
    "email_verified": "emailVerified",
    "phone_number": "phoneNumber",
    "tenant_id": "tenantId",
}

# setAccountInfo names the disabled flag differently from signupNewUser.
UPDATE_USER_RENAMES: Mapping[str, str] = {**USER_RENAMES, "disabled": "disableUser"}

# Wire keys accepted by the create and update endpoints.
USER_WRITE_KEYS = frozenset({
    "displayName",
    "localId",
    "email",
    "password",
    "rawPassword",
    "emailVerified",
    "photoUrl",
    "phoneNumber",
    "disabled",
    "disableUser",
    "deleteAttribute",
    "sanityCheck",
    "tenantId",
})

TENANT_RENAMES: Mapping[str, str] = {
    "display_name": "displayName",
    "test_phone_numbers": "testPhoneNumbers",
    "multi_factor_config": "mfaConfig",
}

# Project config exposes multi_factor_config but the backend calls it "mfa".
PROJECT_CONFIG_RENAMES: Mapping[str, str] = {
    "sms_region_config": "smsRegionConfig",
    "multi_factor_config": "mfa",
}

PASSKEY_CONFIG_RENAMES: Mapping[str, str] = {
    "rp_id": "rpId",
    "expected_origins": "expectedOrigins",
}


def invert(renames: Mapping[str, str]) -> Dict[str, str]:
    """Return the wire -> public direction of a rename table."""
    return {wire: public for public, wire in renames.items()}


def rename_keys(data: Mapping[str, Any], renames: Mapping[str, str]) -> Dict[str, Any]:
    """Copy ``data`` with keys renamed per ``renames``; other keys are kept as is."""
    return {renames.get(key, key): value for key, value in data.items()}


def to_wire(
    properties: Mapping[str, Any],
    renames: Mapping[str, str],
    deletable: Optional[Mapping[str, str]] = None,
    accepted_keys: Optional[Iterable[str]] = None,
) -> Dict[str, Any]:
    """Translate a public property bag into a backend request envelope.

    Args:
        properties: Caller-supplied properties (public names)
        renames: Public -> wire rename table
        deletable: Public name -> deleteAttribute name for fields that may be
            deleted by passing None
        accepted_keys: Wire keys the endpoint accepts; others are dropped

    Returns:
        New wire envelope. ``deleteAttribute`` is present only when at least
        one deletable field was set to None.
    """
    request = dict(properties)

    if deletable:
        delete_attribute: List[str] = []
        for key, attribute in deletable.items():
            if key in request and request[key] is None:
                delete_attribute.append(attribute)
                del request[key]
        if delete_attribute:
            request[DELETE_ATTRIBUTE_KEY] = delete_attribute

    wire = rename_keys(request, renames)

    if accepted_keys is not None:
        allowed = set(accepted_keys)
        wire = {key: value for key, value in wire.items() if key in allowed}
    return wire


def from_wire(wire: Mapping[str, Any], renames: Mapping[str, str]) -> Dict[str, Any]:
    """Translate a backend payload into public names (inverse rename only)."""
    return rename_keys(wire, invert(renames))


def generate_update_mask(
    obj: Any,
    terminal_paths: Iterable[str] = (),
    root: str = "",
) -> List[str]:
    """Build a field mask listing every leaf path set in ``obj``.

    Nested dicts are traversed except at ``terminal_paths``, which are listed
    as a whole (e.g. a map that must be replaced rather than merged).

    Example:
        >>> generate_update_mask({"displayName": "a", "mfaConfig": {"state": "ENABLED"}})
        ['displayName', 'mfaConfig.state']
    """
    if not isinstance(obj, Mapping):
        return []
    terminals = set(terminal_paths)
    mask: List[str] = []
    for key, value in obj.items():
        next_path = f"{root}.{key}" if root else key
        if next_path in terminals:
            mask.append(key)
            continue
        children = generate_update_mask(value, terminals, next_path)
        if children:
            mask.extend(f"{key}.{child}" for child in children)
        else:
            mask.append(key)
    return mask
