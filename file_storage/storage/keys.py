"""Key validation and public URL composition.

Keys are forward-slash separated, relative, and never contain ``.`` or ``..``
segments. All drivers validate through :func:`validate_key` before touching
their backend.
"""

from __future__ import annotations

from urllib.parse import quote

from ..exceptions import InvalidKeyError


def validate_key(key: str) -> str:
    """Check a storage key and return it unchanged.

    Args:
        key: Object key, e.g. ``"avatars/42.png"``

    Returns:
        The same key

    Raises:
        InvalidKeyError: If the key is empty, absolute, contains backslashes,
            NUL bytes, empty segments, or ``.``/``..`` segments
    """
    if not isinstance(key, str):
        raise InvalidKeyError(key, "key must be a string")
    if not key:
        raise InvalidKeyError(key, "key must not be empty")
    if "\x00" in key:
        raise InvalidKeyError(key, "key must not contain NUL bytes")
    if "\\" in key:
        raise InvalidKeyError(key, "key must use forward slashes")
    if key.startswith("/"):
        raise InvalidKeyError(key, "key must not start with '/'")

    for segment in key.split("/"):
        if segment == "..":
            raise InvalidKeyError(key, "path traversal is not allowed")
        if segment == ".":
            raise InvalidKeyError(key, "'.' segments are not allowed")
        if not segment:
            raise InvalidKeyError(key, "key must not contain empty segments")

    return key


def validate_prefix(prefix: str) -> str:
    """Validate a listing prefix, which may be empty or end with '/'."""
    if not prefix:
        return ""
    validate_key(prefix.rstrip("/"))
    return prefix


def join_url(base: str, key: str) -> str:
    """Join a URL prefix and a key, percent-encoding the key.

    ``join_url("https://cdn.example/files/", "a/b c.txt")`` gives
    ``"https://cdn.example/files/a/b%20c.txt"``.
    """
    return f"{base.rstrip('/')}/{quote(key, safe='/')}"
