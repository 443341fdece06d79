"""Closed error taxonomy for group-filtered serialization.

WHY: Callers need to tell a too-deep structure from a reference cycle,
an unrepresentable value, or an internal bug, and they need to know
where in the value the failure happened. A single exception hierarchy
with a kind and a path gives them both.

HOW: JSONGroupError carries kind, message, path, the offending value
and the underlying cause. One subclass exists per kind so callers can
catch precisely. wrap_error() is the single translation function that
turns any exception raised during resolution, traversal or encoding
into one of these.

RULES:
- Every public entry point raises only JSONGroupError subclasses
- wrap_error() returns our own errors unchanged (never double-wraps)
- The DROP control signal is not an error and never reaches this module
"""

from __future__ import annotations

import enum
from typing import Any, Optional


class ErrorKind(str, enum.Enum):
    """Failure kinds surfaced by the serializer."""

    UNKNOWN = "unknown"
    MAX_DEPTH_EXCEEDED = "max_depth_exceeded"
    CIRCULAR_REFERENCE = "circular_reference"
    UNSUPPORTED_TYPE = "unsupported_type"
    REFLECTION = "reflection"
    CACHE_OVERFLOW = "cache_overflow"


class JSONGroupError(Exception):
    """Base error with kind and path context.

    RULES:
    - path is the dotted/bracketed location of the failure, "" for none
    - str() renders "<message> at path '<path>': <cause>" with the
      optional parts left out when empty
    """

    kind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        path: str = "",
        value: Any = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.message = message
        self.path = path
        self.value = value
        self.cause = cause
        super().__init__(self._render())

    def _render(self) -> str:
        msg = self.message
        if self.path:
            msg = f"{msg} at path '{self.path}'"
        if self.cause is not None:
            msg = f"{msg}: {self.cause}"
        return msg


class MaxDepthError(JSONGroupError):
    """Recursion went past the configured maximum depth."""

    kind = ErrorKind.MAX_DEPTH_EXCEEDED

    def __init__(
        self,
        path: str,
        max_depth: int,
        value: Any = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.max_depth = max_depth
        if max_depth > 0:
            message = f"maximum recursion depth ({max_depth}) exceeded"
        else:
            message = "interpreter recursion limit reached"
        super().__init__(message, path=path, value=value, cause=cause)


class CircularReferenceError(JSONGroupError):
    """An object, sequence or mapping was re-entered inside its own subtree."""

    kind = ErrorKind.CIRCULAR_REFERENCE

    def __init__(
        self,
        path: str,
        value: Any = None,
        first_seen: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.first_seen = first_seen
        message = "circular reference detected"
        if first_seen is not None:
            message = f"{message} (first seen at '{first_seen or '<root>'}')"
        super().__init__(message, path=path, value=value, cause=cause)


class UnsupportedTypeError(JSONGroupError):
    """A value has no JSON representation."""

    kind = ErrorKind.UNSUPPORTED_TYPE

    def __init__(
        self,
        path: str,
        type_name: str,
        value: Any = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.type_name = type_name
        super().__init__(
            f"unsupported type: {type_name}", path=path, value=value, cause=cause,
        )


class ReflectionError(JSONGroupError):
    """Inspecting a type or reading a field value failed."""

    kind = ErrorKind.REFLECTION

    def __init__(
        self,
        path: str,
        cause: Optional[BaseException] = None,
        message: str = "reflection error",
    ) -> None:
        super().__init__(message, path=path, cause=cause)


class CacheOverflowError(JSONGroupError):
    """The field cache's index and recency order disagree during eviction."""

    kind = ErrorKind.CACHE_OVERFLOW

    def __init__(self, cache_name: str, capacity: int) -> None:
        self.capacity = capacity
        super().__init__(
            f"{cache_name} cache inconsistent while evicting (capacity {capacity})"
        )


class UnknownError(JSONGroupError):
    """Catch-all for faults that map to no other kind."""

    kind = ErrorKind.UNKNOWN

    def __init__(self, path: str, cause: BaseException) -> None:
        super().__init__(
            f"{type(cause).__name__}: {cause}", path=path, cause=cause,
        )


def wrap_error(
    exc: BaseException, path: str, encoding: bool = False,
) -> JSONGroupError:
    """Translate any exception into the error taxonomy.

    Args:
        exc: The exception to translate.
        path: Location of the failure.
        encoding: True when ``exc`` came out of the JSON encoder. Only
            then do TypeError and ValueError describe the value's shape.

    RULES:
    - JSONGroupError instances are returned unchanged
    - RecursionError → MaxDepthError (interpreter limit)
    - AttributeError / LookupError → ReflectionError
    - While encoding:
      - TypeError → UnsupportedTypeError
      - ValueError mentioning "Circular reference" → CircularReferenceError
      - Other ValueError (e.g. out-of-range floats) → UnsupportedTypeError
    - Anything else (including TypeError / ValueError outside the
      encoder) → UnknownError
    """
    if isinstance(exc, JSONGroupError):
        return exc
    if isinstance(exc, RecursionError):
        return MaxDepthError(path, 0, cause=exc)
    if isinstance(exc, (AttributeError, LookupError)):
        return ReflectionError(path, cause=exc)
    if not encoding:
        return UnknownError(path, exc)
    if isinstance(exc, TypeError):
        return UnsupportedTypeError(path, _type_from_message(str(exc)), cause=exc)
    if isinstance(exc, ValueError):
        if "Circular reference" in str(exc):
            return CircularReferenceError(path, cause=exc)
        return UnsupportedTypeError(path, "value out of range", cause=exc)
    return UnknownError(path, exc)


def _type_from_message(message: str) -> str:
    """Pull the type name out of json's "Object of type X is not ..." text."""
    prefix = "Object of type "
    if message.startswith(prefix):
        return message[len(prefix):].split(" ", 1)[0]
    return message
