"""Kernel security – constant-time comparison of keys and secrets."""
from __future__ import annotations

import hmac
from collections.abc import Collection
from typing import Any

DEFAULT_SENSITIVE_FIELDS: frozenset[str] = frozenset({
    "password", "passwd", "secret", "token", "key", "keys", "api_key", "apikey",
    "authorization",
})

_KEY_SET_TYPES = (set, frozenset, list, tuple)


def _as_bytes(token: str | bytes) -> bytes:
    return token.encode() if isinstance(token, str) else token


def tokens_equal(supplied: Any, expected: Any) -> bool:
    """Compare two opaque tokens without leaking timing for str/bytes.

    ``str`` and ``bytes`` tokens are compared with :func:`hmac.compare_digest`.
    Other tokens (``None``, ints, ...) must share the exact type and compare
    equal; ``"1"`` never matches ``1``.
    """
    if isinstance(supplied, (str, bytes)) and isinstance(expected, (str, bytes)):
        if type(supplied) is not type(expected):
            return False
        return hmac.compare_digest(_as_bytes(supplied), _as_bytes(expected))
    if type(supplied) is not type(expected):
        return False
    return bool(supplied == expected)


def is_key_set(configured: Any) -> bool:
    return isinstance(configured, _KEY_SET_TYPES)


def key_matches(supplied: Any, configured: Any | Collection[Any]) -> bool:
    """True when *supplied* equals *configured* or is a member of it.

    Every candidate of a key set is compared so the time taken does not
    depend on which member matched.
    """
    if tokens_equal(supplied, configured):
        return True
    if is_key_set(configured):
        matched = False
        for candidate in configured:
            matched |= tokens_equal(supplied, candidate)
        return matched
    return False


__all__ = ["DEFAULT_SENSITIVE_FIELDS", "is_key_set", "key_matches", "tokens_equal"]
