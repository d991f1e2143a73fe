"""Cache key derivation for GraphQL responses.

A response is identified by the printed (rewritten) query text, the
operation variables and the session discriminator. The three parts are
joined with a separator that cannot appear in printed GraphQL or JSON, then
hashed so keys have a fixed length.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from response_cache.core.exceptions import CacheKeyError

__all__ = ["KEY_SEPARATOR", "build_cache_key"]

# ASCII unit separator; escaped by json.dumps and never emitted by the printer
KEY_SEPARATOR = "\x1f"


def build_cache_key(
    query_text: str,
    variables: dict[str, Any] | None = None,
    session: Any = None,
) -> str:
    """Generate a cache key for one operation execution.

    Args:
        query_text: Printed query document (after the typename rewrite).
        variables: Operation variables; None is treated as ``{}``.
        session: Session discriminator; None marks the response as public.

    Returns:
        SHA-256 hex digest of the joined components.

    Raises:
        CacheKeyError: If the variables cannot be serialized to JSON.

    Example:
        >>> build_cache_key("{ me { id } }", {}, None) == build_cache_key("{ me { id } }")
        True
    """
    try:
        variables_str = json.dumps(variables or {}, sort_keys=True)
    except (TypeError, ValueError) as e:
        raise CacheKeyError(
            detail="Cannot serialize variables for cache key",
            extra={"error": str(e)},
        ) from e

    session_str = "" if session is None else str(session)
    key_components = KEY_SEPARATOR.join((query_text, variables_str, session_str))
    return hashlib.sha256(key_components.encode()).hexdigest()
