"""Syntactic validation helpers for identifiers and user properties.

These are predicates only: they never raise. Callers decide which typed
error to raise when a value is rejected.
"""
from __future__ import annotations
import re
from typing import Any
from urllib.parse import urlsplit

MAX_UID_LENGTH = 128
MIN_PASSWORD_LENGTH = 6

_EMAIL_RE = re.compile(r"^[^@]+@[^@]+$")
_PHONE_RE = re.compile(r"^\+[\w\s\-()]*\d[\w\s\-()]*$")
_URL_ILLEGAL_CHARS_RE = re.compile(r"[^a-z0-9:/?#\[\]@!$&'()*+,;=.\-_~%]", re.IGNORECASE)
_HOSTNAME_RE = re.compile(r"^[A-Za-z0-9][\w\-]*(\.[A-Za-z0-9][\w\-]*)*$")
_PATHNAME_RE = re.compile(r"^(/[\w\-.~!$'()*+,;=:@%]+)*/?$")


def is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def is_uid(uid: Any) -> bool:
    """Return True for a non-empty string of at most 128 characters."""
    return isinstance(uid, str) and 0 < len(uid) <= MAX_UID_LENGTH


def is_password(password: Any) -> bool:
    """Return True for a string of at least 6 characters."""
    return isinstance(password, str) and len(password) >= MIN_PASSWORD_LENGTH


def is_email(email: Any) -> bool:
    """Return True when there is at least one character on each side of a single @."""
    return isinstance(email, str) and bool(_EMAIL_RE.match(email))


def is_phone_number(phone_number: Any) -> bool:
    """Return True for an E.164-looking string: leading "+" and at least one digit."""
    return isinstance(phone_number, str) and bool(_PHONE_RE.match(phone_number))


def is_url(url: Any) -> bool:
    """Validate an http(s) URL.

    Args:
        url: Candidate URL

    Returns:
        True if the URL uses http/https, has a well-formed hostname and path,
        and contains no illegal characters
    """
    if not isinstance(url, str) or not url:
        return False
    if _URL_ILLEGAL_CHARS_RE.search(url):
        return False
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return False
    hostname = parts.hostname or ""
    if not _HOSTNAME_RE.match(hostname):
        return False
    if parts.path and parts.path != "/" and not _PATHNAME_RE.match(parts.path):
        return False
    return True


def is_non_empty_list(value: Any) -> bool:
    return isinstance(value, list) and len(value) > 0


def is_max_results(value: Any, maximum: int) -> bool:
    """Return True for an int (not bool) within 1..maximum."""
    return isinstance(value, int) and not isinstance(value, bool) and 0 < value <= maximum
