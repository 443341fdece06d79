"""jsongroup — group-filtered JSON serialization for dataclasses.

WHY: One data model often feeds several audiences. The public API
should see id and name, admins also see email, internal tooling sees
everything. Writing a serializer per audience duplicates the model.
Tagging each field with the groups it belongs to, and choosing the
groups at serialization time, keeps a single model.

HOW: Two-stage pipeline. The traversal engine (core) walks the value,
consults a cached per-type field table, keeps the fields the requested
groups select and builds a JSON-shaped IR while enforcing depth and
cycle limits. The encoder turns the IR into bytes.

RULES:
- Fields declare groups via dataclass field metadata (see tags() and
  group_field())
- No groups requested → every exported field is emitted
- Every failure surfaces as a single JSONGroupError subclass
"""

from jsongroup.core.cache import CacheStats, FieldCache
from jsongroup.core.fields import FieldInfo, group_field, tags
from jsongroup.errors import (
    CacheOverflowError,
    CircularReferenceError,
    ErrorKind,
    JSONGroupError,
    MaxDepthError,
    ReflectionError,
    UnknownError,
    UnsupportedTypeError,
)
from jsongroup.marshal import (
    cache_stats,
    clear_cache,
    marshal,
    marshal_to_map,
    marshal_to_map_with_options,
    marshal_with_options,
    set_cache_capacity,
)
from jsongroup.options import GroupMode, Options, default_options

__version__ = "0.1.0"

__all__ = [
    "CacheOverflowError",
    "CacheStats",
    "CircularReferenceError",
    "ErrorKind",
    "FieldCache",
    "FieldInfo",
    "GroupMode",
    "JSONGroupError",
    "MaxDepthError",
    "Options",
    "ReflectionError",
    "UnknownError",
    "UnsupportedTypeError",
    "cache_stats",
    "clear_cache",
    "default_options",
    "group_field",
    "marshal",
    "marshal_to_map",
    "marshal_to_map_with_options",
    "marshal_with_options",
    "set_cache_capacity",
    "tags",
]
