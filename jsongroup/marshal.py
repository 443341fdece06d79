"""Public entry points: marshal to bytes, marshal to map, cache admin.

WHY: Callers want one call that turns a value into group-filtered JSON,
plus a variant that stops at the IR so they can adjust the mapping
before encoding. Operators additionally need to inspect and size the
shared field cache.

HOW: Each entry point builds a fresh SerializeContext, runs the
traversal engine, optionally wraps the result under the top-level key,
and (for the bytes variants) hands the IR to the encoder. Any exception
escaping traversal or encoding is translated by wrap_error(), so the
caller sees exactly one JSONGroupError and never a partial result.

RULES:
- marshal(None) returns b"null"; marshal_to_map(None) returns None
- A non-mapping IR from marshal_to_map is wrapped as {"value": ir}
- options.cache_capacity, when set, resizes the cache before traversal
- cache=None means the process-wide default_cache
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from jsongroup import config
from jsongroup.core.cache import CacheStats, FieldCache, default_cache
from jsongroup.core.context import SerializeContext
from jsongroup.core.ir import DROP, IR
from jsongroup.core.traversal import to_ir
from jsongroup.encoder import encode
from jsongroup.errors import JSONGroupError, wrap_error
from jsongroup.options import Options

logger = logging.getLogger(__name__)

_NULL = b"null"
_MAP_VALUE_KEY = "value"


def marshal(value: Any, *groups: str) -> bytes:
    """Serialize ``value`` to JSON, keeping only fields in ``groups``.

    Example::

        marshal(user, "public")   # b'{"id":1,"name":"Ann"}'
    """
    return marshal_with_options(value, Options.default(), *groups)


def marshal_with_options(
    value: Any,
    options: Options,
    *groups: str,
    cache: Optional[FieldCache] = None,
) -> bytes:
    """Serialize ``value`` with explicit options.

    Raises:
        JSONGroupError: Depth exceeded, circular reference, unsupported
            value, reflection failure or cache inconsistency.
    """
    if value is None:
        return _NULL

    data = _build(value, options, groups, cache)
    if data is DROP:
        data = None
    if options.top_level_key:
        data = {options.top_level_key: data}

    try:
        return encode(data)
    except JSONGroupError:
        raise
    except Exception as exc:
        error = wrap_error(exc, config.ROOT_PATH, encoding=True)
        logger.debug("Encoding failed: %s", error)
        raise error from exc


def marshal_to_map(value: Any, *groups: str) -> Optional[Dict[str, IR]]:
    """Build the group-filtered IR as a dict instead of bytes."""
    return marshal_to_map_with_options(value, Options.default(), *groups)


def marshal_to_map_with_options(
    value: Any,
    options: Options,
    *groups: str,
    cache: Optional[FieldCache] = None,
) -> Optional[Dict[str, IR]]:
    """Build the IR with explicit options.

    The top-level key is not applied here; the caller owns the mapping.
    """
    if value is None:
        return None

    data = _build(value, options, groups, cache)
    if isinstance(data, dict):
        return data
    return {_MAP_VALUE_KEY: None if data is DROP else data}


def _build(
    value: Any,
    options: Options,
    groups: tuple,
    cache: Optional[FieldCache],
) -> Any:
    field_cache = cache if cache is not None else default_cache
    if options.cache_capacity is not None and options.cache_capacity != field_cache.capacity:
        field_cache.set_capacity(options.cache_capacity)

    ctx = SerializeContext.root(options, field_cache)
    try:
        return to_ir(ctx, value, list(groups), options.group_mode)
    except JSONGroupError:
        raise
    except Exception as exc:
        error = wrap_error(exc, config.ROOT_PATH)
        logger.debug("Traversal failed: %s", error)
        raise error from exc


# ---------------------------------------------------------------------------
# Cache administration
# ---------------------------------------------------------------------------

def cache_stats() -> CacheStats:
    """Usage snapshot of the process-wide field cache."""
    return default_cache.stats()


def set_cache_capacity(capacity: int) -> None:
    """Resize the process-wide field cache; 0 disables caching."""
    default_cache.set_capacity(capacity)


def clear_cache() -> None:
    default_cache.clear()
