"""Per-call traversal state: path, depth and the visited-identity map.

WHY: The traversal engine must report where a failure happened, stop at
a configured depth, and notice when it re-enters an object it is still
inside. That state belongs to one top-level call and must never leak
into another, so concurrent calls stay independent.

HOW: SerializeContext is a small frozen value. child() derives a
context with an extended path and enter() one with depth + 1; both
share the same visited dict by reference. The visited dict maps
id(obj) → path where the object was entered; track() records an
identity for the duration of a subtree and releases it afterwards.

RULES:
- A fresh root context is built for every top-level call
- Path segments join with "."; index segments ("[3]") attach directly
- enter() raises MaxDepthError when max_depth > 0 and depth would
  exceed it
- Identities are released on exit, so only ancestors count as cycles
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator

from jsongroup.core.cache import FieldCache
from jsongroup.errors import CircularReferenceError, MaxDepthError
from jsongroup.options import Options


@dataclass(frozen=True, eq=False)
class SerializeContext:
    options: Options
    cache: FieldCache
    path: str = ""
    depth: int = 0
    visited: Dict[int, str] = field(default_factory=dict)

    @classmethod
    def root(cls, options: Options, cache: FieldCache) -> "SerializeContext":
        return cls(options=options, cache=cache)

    def child(self, segment: str) -> "SerializeContext":
        if not segment:
            return self
        if not self.path:
            path = segment
        elif segment.startswith("["):
            path = self.path + segment
        else:
            path = f"{self.path}.{segment}"
        return replace(self, path=path)

    def enter(self, value: Any = None) -> "SerializeContext":
        depth = self.depth + 1
        limit = self.options.max_depth
        if limit > 0 and depth > limit:
            raise MaxDepthError(self.path, limit, value=value)
        return replace(self, depth=depth)

    @contextmanager
    def track(self, obj: Any) -> Iterator[None]:
        """Record ``obj`` as entered for the duration of the block.

        Raises:
            CircularReferenceError: If ``obj`` is already being traversed
                higher up the current path.
        """
        if self.options.disable_circular_check:
            yield
            return
        ident = id(obj)
        if ident in self.visited:
            raise CircularReferenceError(
                self.path, value=obj, first_seen=self.visited[ident],
            )
        self.visited[ident] = self.path
        try:
            yield
        finally:
            del self.visited[ident]
