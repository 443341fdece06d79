"""Configuration defaults and .env loading.

WHY: Operators tune the serializer (tag key, recursion ceiling, cache
size) per deployment without touching code. Keeping the defaults as
plain module constants makes them easy to find and override.

HOW: python-dotenv loads the .env file on import. Each default reads
an environment variable and falls back to a built-in value. Integer
settings are parsed by _int_env(), which fails loudly on bad input.

RULES:
- JSONGROUP_TAG_KEY: metadata key holding group names (default "groups")
- JSONGROUP_MAX_DEPTH: recursion ceiling, 0 = unlimited (default 32)
- JSONGROUP_CACHE_CAPACITY: field cache size, 0 = disabled (default 1000)
- Malformed or negative integers raise ValueError at import time
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the working directory
load_dotenv()


def _int_env(name: str, default: int) -> int:
    """Read a non-negative integer from the environment.

    RULES:
    - Missing or blank variables return the default
    - Non-integer or negative values raise ValueError naming the variable
    """
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(
            f"{name} must be an integer, got {raw!r}. "
            f"Fix the value in the environment or .env file."
        ) from None
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}.")
    return value


# ---------------------------------------------------------------------------
# Tag surface
# ---------------------------------------------------------------------------

JSON_TAG_KEY = "json"
"""Field-metadata key holding the ``name[,omitempty][,omitzero]`` spec."""

EMBEDDED_TAG_KEY = "embedded"
"""Field-metadata key marking an anonymous member to flatten."""

DEFAULT_TAG_KEY = os.getenv("JSONGROUP_TAG_KEY", "groups").strip() or "groups"

# ---------------------------------------------------------------------------
# Traversal and cache limits
# ---------------------------------------------------------------------------

DEFAULT_MAX_DEPTH = _int_env("JSONGROUP_MAX_DEPTH", 32)
DEFAULT_CACHE_CAPACITY = _int_env("JSONGROUP_CACHE_CAPACITY", 1000)

ROOT_PATH = "root"
"""Path label used for failures that carry no traversal position."""
