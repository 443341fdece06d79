"""Intermediate representation produced by the traversal engine.

WHY: Traversal and encoding are separate concerns. The traversal engine
builds a plain JSON-shaped tree that callers may inspect or modify
(marshal_to_map) before the encoder turns it into bytes.

HOW: The IR is ordinary Python data: None, bool, int, float, str,
lists and str-keyed dicts. Date/time values travel through as opaque
scalars for the encoder to render. DROP is a separate sentinel that
tells a parent to leave the entry out altogether.

RULES:
- DROP is a control signal, not a value and not an error
- DROP never appears inside a finished IR
- Mapping key order is irrelevant; the encoder sorts keys
"""

from __future__ import annotations

from typing import Any, Dict, List, Union

IR = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]


class _Drop:
    """Singleton type for the DROP sentinel."""

    _instance = None

    def __new__(cls) -> "_Drop":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "DROP"

    def __bool__(self) -> bool:
        return False


DROP = _Drop()
"""Returned by the traversal engine when an entry must be omitted."""
