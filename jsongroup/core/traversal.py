"""Traversal engine: builds the group-filtered IR from an arbitrary value.

WHY: This is the heart of the package. A value of any shape (scalars,
dataclasses, sequences, mappings, date/time values) has to become a
JSON-shaped tree holding only the fields the caller's groups select,
without recursing forever on deep or cyclic structures.

HOW: to_ir() dispatches on the value's shape:
  1. scalars (bool, int, float, str, complex) return immediately, with
     NaN/±inf and complex numbers rendered as strings
  2. None becomes DROP (nil pointers ignored) or None
  3. everything else enters a depth level; an empty sequence/mapping
     past the limit falls back to the empty-value policy instead of
     failing
  4. date/time values pass through as opaque scalars
  5. dataclasses, mappings and sequences are identity-tracked for
     cycles, then walked recursively
  6. anything else passes through for the encoder to render or reject
Each recursive step derives a child context, so errors carry the path
to the failing value.

RULES:
- is_empty_value treats empty containers as empty; is_zero_value does
  not. omitempty uses the former, omitzero the latter
- A field is suppressed when (omitempty and empty) or (omitzero and
  zero), unless null_if_empty is on, which emits null instead
- DROP results are never stored; None results are stored only under
  null_if_empty
- Embedded members are merged into the parent mapping, never nested
- set and frozenset members are emitted sorted when they compare
- Non-JSONGroupError exceptions are translated at the level they occur
"""

from __future__ import annotations

import dataclasses
import datetime
import enum
import math
from collections import deque
from collections.abc import Mapping
from typing import Any, Dict, List, Sequence

from jsongroup.core.context import SerializeContext
from jsongroup.core.groups import include
from jsongroup.core.ir import DROP, IR
from jsongroup.errors import JSONGroupError, MaxDepthError, ReflectionError, wrap_error
from jsongroup.options import GroupMode

_SEQUENCE_TYPES = (list, tuple, set, frozenset, deque)
_TIME_TYPES = (datetime.datetime, datetime.date, datetime.time)


def to_ir(
    ctx: SerializeContext,
    value: Any,
    groups: Sequence[str],
    mode: GroupMode,
) -> Any:
    """Convert ``value`` into IR, or DROP when it must be omitted.

    Args:
        ctx: Traversal state for the current position.
        value: Any Python value.
        groups: Requested groups; empty means no filtering.
        mode: How the requested groups combine.

    Raises:
        JSONGroupError: Depth or cycle limits hit, or any fault while
            reading the value, translated with the current path.
    """
    try:
        return _to_ir(ctx, value, groups, mode)
    except JSONGroupError:
        raise
    except Exception as exc:
        raise wrap_error(exc, ctx.path) from exc


def _to_ir(ctx: SerializeContext, value: Any, groups: Sequence[str], mode: GroupMode) -> Any:
    opts = ctx.options

    # Scalars: no depth, no cycle check
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return _special_float(value)
        return value
    if isinstance(value, str):
        if not value and opts.null_if_empty:
            return None
        return value
    if isinstance(value, complex):
        return str(value)

    if value is None:
        return DROP if opts.drops_nil else None

    try:
        inner = ctx.enter(value)
    except MaxDepthError:
        # An empty tail cannot recurse further; apply the empty policy
        if _is_container(value) and len(value) == 0:
            return _empty(value, opts.null_if_empty)
        raise

    if isinstance(value, _TIME_TYPES):
        if opts.null_if_empty and _is_zero_time(value):
            return None
        return value

    if _is_dataclass_instance(value):
        with inner.track(value):
            return _struct_to_ir(inner, value, groups, mode)

    if isinstance(value, Mapping):
        if len(value) == 0:
            return _empty(value, opts.null_if_empty)
        with inner.track(value):
            return _mapping_to_ir(inner, value, groups, mode)

    if isinstance(value, _SEQUENCE_TYPES):
        if len(value) == 0:
            return _empty(value, opts.null_if_empty)
        with inner.track(value):
            return _sequence_to_ir(inner, value, groups, mode)

    return value


def _struct_to_ir(
    ctx: SerializeContext,
    obj: Any,
    groups: Sequence[str],
    mode: GroupMode,
) -> Dict[str, IR]:
    opts = ctx.options
    result: Dict[str, IR] = {}

    try:
        fields = ctx.cache.get(type(obj), opts.tag_key)
    except ReflectionError as exc:
        # Resolver errors know the type, not where it was reached
        raise ReflectionError(
            ctx.path,
            cause=exc.cause,
            message=f"{exc.message} for {type(obj).__qualname__}",
        ) from exc

    for info in fields:
        if not include(info.groups, groups, mode):
            continue

        field_ctx = ctx.child(info.name)
        try:
            value = info.value_of(obj)
        except Exception as exc:
            raise ReflectionError(
                field_ctx.path, cause=exc, message="failed to read field",
            ) from exc

        if info.anonymous and _is_dataclass_instance(value):
            embedded = to_ir(field_ctx, value, groups, mode)
            if isinstance(embedded, dict):
                result.update(embedded)
            continue

        is_nil = value is None
        if is_nil and opts.drops_nil:
            continue

        empty = is_nil or is_empty_value(value)
        zero = is_zero_value(value)
        if not opts.null_if_empty and (
            (info.omitempty and empty) or (info.omitzero and zero)
        ):
            continue
        if empty and opts.null_if_empty:
            result[info.key] = None
            continue

        out = to_ir(field_ctx, value, groups, mode)
        if out is DROP:
            continue
        if out is not None or opts.null_if_empty:
            result[info.key] = out

    return result


def _mapping_to_ir(
    ctx: SerializeContext,
    value: Mapping,
    groups: Sequence[str],
    mode: GroupMode,
) -> Dict[str, IR]:
    null_if_empty = ctx.options.null_if_empty
    result: Dict[str, IR] = {}
    for k, v in value.items():
        key = _key_to_str(k)
        out = to_ir(ctx.child(key), v, groups, mode)
        if out is DROP:
            continue
        if out is not None or null_if_empty:
            result[key] = out
    return result


def _sequence_to_ir(
    ctx: SerializeContext,
    value: Any,
    groups: Sequence[str],
    mode: GroupMode,
) -> List[IR]:
    null_if_empty = ctx.options.null_if_empty
    result: List[IR] = []
    if isinstance(value, (set, frozenset)):
        value = _ordered(value)
    for i, item in enumerate(value):
        out = to_ir(ctx.child(f"[{i}]"), item, groups, mode)
        if out is DROP:
            continue
        if out is not None or null_if_empty:
            result.append(out)
    return result


# ---------------------------------------------------------------------------
# Emptiness predicates
# ---------------------------------------------------------------------------

def is_empty_value(value: Any) -> bool:
    """True for None, False, numeric zero and zero-length str/bytes/containers."""
    if value is None:
        return True
    if isinstance(value, bool):
        return not value
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, (str, bytes, bytearray, Mapping) + _SEQUENCE_TYPES):
        return len(value) == 0
    return False


def is_zero_value(value: Any) -> bool:
    """True for None, False, numeric zero, "" and the zero instant.

    Unlike is_empty_value, containers are never zero, even when empty.
    """
    if value is None:
        return True
    if isinstance(value, bool):
        return not value
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, str):
        return value == ""
    if isinstance(value, _TIME_TYPES):
        return _is_zero_time(value)
    return False


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _is_dataclass_instance(value: Any) -> bool:
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _is_container(value: Any) -> bool:
    return isinstance(value, Mapping) or isinstance(value, _SEQUENCE_TYPES)


def _empty(value: Any, null_if_empty: bool) -> Any:
    if null_if_empty:
        return None
    if isinstance(value, Mapping):
        return {}
    return []


def _is_zero_time(value: Any) -> bool:
    if isinstance(value, datetime.datetime):
        return value.replace(tzinfo=None) == datetime.datetime.min
    if isinstance(value, datetime.date):
        return value == datetime.date.min
    return False


def _special_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    return "Infinity" if value > 0 else "-Infinity"


def _key_to_str(key: Any) -> str:
    if isinstance(key, enum.Enum):
        key = key.value
    if isinstance(key, str):
        return str(key)
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, int):
        return str(int(key))
    return str(key)


def _ordered(items: Any) -> List[Any]:
    """Sort set members so output does not depend on hash seeding."""
    try:
        return sorted(items)
    except TypeError:
        # Mixed or unorderable members keep iteration order
        return list(items)
