"""In-process caching utilities for the Nonplo client.

Provides a decorator for caching slow, rarely-changing API reads (the
forbidden-word list, tool catalogs). Entries live in a per-process dict with
a monotonic-clock TTL; there is no cross-process sharing.
"""

import copy
import fnmatch
import functools
import hashlib
import json
import logging
import time
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

# key → (expires_at, value)
_cache: dict[str, tuple[float, Any]] = {}


def cache_key(*args, **kwargs) -> str:
    """Stable md5 of the call arguments; "default" for a no-argument call."""
    if not args and not kwargs:
        return "default"

    key_data = json.dumps({"args": args, "kwargs": kwargs}, sort_keys=True, default=str)
    return hashlib.md5(key_data.encode()).hexdigest()


def get_cached(key: str) -> Any:
    """Return the cached value or None if absent/expired."""
    entry = _cache.get(key)
    if entry is None:
        return None
    expires_at, value = entry
    if time.monotonic() >= expires_at:
        _cache.pop(key, None)
        return None
    return value


def set_cached(key: str, value: Any, ttl: float) -> None:
    _cache[key] = (time.monotonic() + ttl, value)


def cached(
    ttl: float = 300,
    prefix: str = "cache",
    key_builder: Optional[Callable] = None,
):
    """Memoize an async function's non-None results for ``ttl`` seconds.

    Callers get a shallow copy of the cached value, so mutating a returned
    list does not change what later callers see.

    Args:
        ttl: Seconds an entry stays fresh
        prefix: Namespace, so ``invalidate_cache("prefix:*")`` can drop a family
        key_builder: Builds the argument part of the key instead of hashing args

    Keys are ``{prefix}:{func.__name__}:{arg_key}``; ``WizardApi.forbidden_words``
    caches under ``forbidden_words:forbidden_words:<base url>``.
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            if key_builder:
                arg_key = key_builder(*args, **kwargs)
            else:
                arg_key = cache_key(*args, **kwargs)
            key = f"{prefix}:{func.__name__}:{arg_key}"

            value = get_cached(key)
            if value is not None:
                logger.debug(f"Cache HIT: {key}")
                return copy.copy(value)

            logger.debug(f"Cache MISS: {key}")
            result = await func(*args, **kwargs)
            # Failures raise before this point, so only successes are cached
            if result is not None:
                set_cached(key, copy.copy(result), ttl)
            return result

        return wrapper

    return decorator


def invalidate_cache(pattern: str = "*") -> int:
    """Drop cache entries matching a glob pattern.

    Returns:
        Number of entries removed
    """
    keys = [k for k in _cache if fnmatch.fnmatchcase(k, pattern)]
    for key in keys:
        del _cache[key]
    if keys:
        logger.info(f"Invalidated {len(keys)} cache keys matching {pattern}")
    return len(keys)
