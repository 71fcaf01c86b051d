"""Kernel security – token comparison and sensitive field names."""
from mp_scheduler.kernel.security.tokens import (
    DEFAULT_SENSITIVE_FIELDS,
    is_key_set,
    key_matches,
    tokens_equal,
)

__all__ = ["DEFAULT_SENSITIVE_FIELDS", "is_key_set", "key_matches", "tokens_equal"]
