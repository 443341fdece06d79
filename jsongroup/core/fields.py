"""Field metadata resolution for dataclass types.

WHY: The traversal engine needs, for every dataclass it meets, the list
of fields it may emit together with their output keys, group tags and
omission flags. Reading dataclass metadata on every value would be
slow; resolving once per type produces an immutable descriptor table
that the cache can share across calls and threads.

HOW: resolve_fields() walks dataclasses.fields(cls) in declaration
order. Each field's metadata carries a json spec
("name[,omitempty][,omitzero]") and a groups spec under the configured
tag key. Members marked embedded whose type is itself a dataclass are
flattened: their own descriptors are hoisted into the parent with the
index and attribute paths prefixed by the embedding field.

RULES:
- Non-dataclass types resolve to an empty tuple
- Attribute names starting with "_" are not exported and are skipped
- A json name of "-" excludes the field entirely
- Flattening never renames output keys; only the diagnostic name gets
  an "Outer.inner" prefix
- The embedding field's own json/groups metadata is ignored
- Any introspection failure surfaces as ReflectionError
"""

from __future__ import annotations

import dataclasses
import sys
import typing
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from jsongroup import config
from jsongroup.errors import JSONGroupError, ReflectionError


@dataclass(frozen=True)
class FieldInfo:
    """Resolved, immutable metadata for one emitted field.

    RULES:
    - index: positions in dataclasses.fields() order, one per level of
      embedding (e.g. (0, 2) = third field of the first member)
    - attr_path: attribute names matching index, used to read the value
    - name: declared name, prefixed "Outer.inner" when hoisted
    - key: output key after json-spec parsing
    - groups: group names in declaration order, empty when untagged
    - anonymous: embedded member that could not be flattened at
      resolution time (its type is not a dataclass)
    """

    index: Tuple[int, ...]
    attr_path: Tuple[str, ...]
    name: str
    key: str
    groups: Tuple[str, ...] = ()
    omitempty: bool = False
    omitzero: bool = False
    anonymous: bool = False

    def value_of(self, obj: Any) -> Any:
        """Read this field from an instance, following embedded members.

        A ``None`` member part-way along the path yields ``None``.
        """
        current = obj
        for attr in self.attr_path:
            if current is None:
                return None
            current = getattr(current, attr)
        return current


def parse_json_tag(field_name: str, spec: str) -> Tuple[str, bool, bool]:
    """Split a json spec into (output name, omitempty, omitzero).

    RULES:
    - Empty spec or empty name part keeps the attribute name
    - Unknown options are ignored
    """
    if not spec:
        return field_name, False, False
    parts = spec.split(",")
    name = parts[0] or field_name
    options = set(parts[1:])
    return name, "omitempty" in options, "omitzero" in options


def parse_groups_tag(spec: Any) -> Tuple[str, ...]:
    """Normalise a groups spec into a tuple of names.

    Accepts a comma-separated string or any iterable of strings.
    Names are trimmed and empty segments dropped.
    """
    if not spec:
        return ()
    if isinstance(spec, str):
        parts: Iterable[str] = spec.split(",")
    else:
        parts = spec
    return tuple(g for g in (str(p).strip() for p in parts) if g)


def tags(
    json: Optional[str] = None,
    groups: Any = None,
    *,
    embedded: bool = False,
    tag_key: str = config.DEFAULT_TAG_KEY,
) -> Dict[str, Any]:
    """Build a dataclass field metadata mapping.

    Example::

        email: str = field(default="", metadata=tags("email,omitempty", "admin"))
    """
    metadata: Dict[str, Any] = {}
    if json is not None:
        metadata[config.JSON_TAG_KEY] = json
    if groups is not None:
        metadata[tag_key] = groups
    if embedded:
        metadata[config.EMBEDDED_TAG_KEY] = True
    return metadata


def group_field(
    groups: Any = None,
    *,
    json: Optional[str] = None,
    embedded: bool = False,
    tag_key: str = config.DEFAULT_TAG_KEY,
    **field_kwargs: Any,
) -> Any:
    """dataclasses.field() with group/json metadata filled in.

    Extra keyword arguments (default, default_factory, repr, ...) are
    passed through to dataclasses.field().
    """
    metadata = dict(field_kwargs.pop("metadata", None) or {})
    metadata.update(tags(json, groups, embedded=embedded, tag_key=tag_key))
    return dataclasses.field(metadata=metadata, **field_kwargs)


def is_dataclass_type(obj: Any) -> bool:
    return isinstance(obj, type) and dataclasses.is_dataclass(obj)


def resolve_fields(cls: Any, tag_key: str) -> Tuple[FieldInfo, ...]:
    """Resolve the emitted-field table for a dataclass type.

    Args:
        cls: The type to inspect. Non-dataclass types yield ().
        tag_key: Metadata key holding each field's groups.

    Returns:
        Tuple of FieldInfo in declaration order, embedded members
        flattened in place.

    Raises:
        ReflectionError: If the type cannot be introspected (unresolvable
            embedded annotation, embedding cycle, broken metadata).
    """
    if not is_dataclass_type(cls):
        return ()
    try:
        return tuple(_resolve(cls, tag_key, (cls,)))
    except JSONGroupError:
        raise
    except Exception as exc:
        raise ReflectionError(
            _type_name(cls), cause=exc,
            message="failed to resolve dataclass fields",
        ) from exc


def _resolve(cls: type, tag_key: str, lineage: Tuple[type, ...]) -> list:
    fields = []
    for i, f in enumerate(dataclasses.fields(cls)):
        if f.name.startswith("_"):
            continue

        meta = f.metadata
        key, omitempty, omitzero = parse_json_tag(
            f.name, meta.get(config.JSON_TAG_KEY, "")
        )
        if key == "-":
            continue

        embedded = bool(meta.get(config.EMBEDDED_TAG_KEY, False))
        if embedded:
            target = _declared_type(cls, f)
            if is_dataclass_type(target):
                if target in lineage:
                    raise ReflectionError(
                        _type_name(cls),
                        message=f"embedding cycle through {_type_name(target)}",
                    )
                for nested in _resolve(target, tag_key, lineage + (target,)):
                    fields.append(dataclasses.replace(
                        nested,
                        index=(i,) + nested.index,
                        attr_path=(f.name,) + nested.attr_path,
                        name=f"{f.name}.{nested.name}",
                    ))
                continue

        fields.append(FieldInfo(
            index=(i,),
            attr_path=(f.name,),
            name=f.name,
            key=key,
            groups=parse_groups_tag(meta.get(tag_key)),
            omitempty=omitempty,
            omitzero=omitzero,
            anonymous=embedded,
        ))
    return fields


def _declared_type(cls: type, f: dataclasses.Field) -> Any:
    """Return a field's annotation, resolving string annotations."""
    if not isinstance(f.type, str):
        return f.type
    module = sys.modules.get(cls.__module__)
    globalns = vars(module) if module is not None else None
    return typing.get_type_hints(cls, globalns=globalns)[f.name]


def _type_name(cls: Any) -> str:
    return getattr(cls, "__qualname__", None) or repr(cls)
