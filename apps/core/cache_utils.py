"""
Cache helpers for per-store data such as analytics summaries.

Keys look like `store:<store_id>:<prefix>:<md5 of the parameters>`, so
everything cached for one store can be dropped with a single pattern.
"""

import hashlib
from typing import Any, Callable, Union

from django.core.cache import caches
from django.utils.encoding import force_bytes


def store_cache_key(store_id: Union[str, int], prefix: str, **params) -> str:
    """
    Build the cache key of a store-scoped value.

    Args:
        store_id: Store identifier
        prefix: Kind of value, e.g. "summary"
        **params: Parameters the value depends on

    Returns:
        str: Cache key
    """
    parts = [f"{key}={value}" for key, value in sorted(params.items())]
    digest = hashlib.md5(force_bytes(":".join(parts))).hexdigest()
    return f"store:{store_id}:{prefix}:{digest}"


def invalidate_store_cache(store_id: Union[str, int], prefix: str, cache_alias: str = "query"):
    """
    Drop every cached `prefix` value of a store.

    django-redis deletes by pattern; other backends are cleared entirely.
    """
    cache = caches[cache_alias]
    if hasattr(cache, "delete_pattern"):
        cache.delete_pattern(f"*store:{store_id}:{prefix}:*")
    else:
        cache.clear()


def get_or_set_cache(key: str, compute: Callable[[], Any], timeout: int, cache_alias: str) -> Any:
    """Return the cached value for `key`, computing and storing it on a miss."""
    cache = caches[cache_alias]
    result = cache.get(key)
    if result is None:
        result = compute()
        cache.set(key, result, timeout)
    return result
