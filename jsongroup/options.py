"""Serialization options: group combination mode and output policies.

WHY: Every marshal call needs the same handful of knobs (how requested
groups combine, null-vs-omit policy, recursion and cycle limits). An
immutable options value is safe to share between threads and calls.

HOW: Options is a frozen dataclass. The with_* builder methods return a
modified copy via dataclasses.replace, so a base configuration can be
specialised without affecting other holders of it.

RULES:
- Options instances are never mutated
- null_if_empty wins over ignore_nil_pointers: drops_nil is false whenever
  null_if_empty is on, however the instance was built
- with_null_if_empty(True) also clears ignore_nil_pointers so the two
  flags read consistently
- max_depth 0 means unlimited; negative values raise ValueError
- cache_capacity None means "leave the cache as it is"
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Optional, Union

from jsongroup import config


class GroupMode(str, enum.Enum):
    """How a field's groups are matched against the requested groups.

    RULES:
    - ANY: the field shares at least one group with the request (OR)
    - ALL: the field carries every requested group (AND)
    """

    ANY = "any"
    ALL = "all"

    @classmethod
    def parse(cls, value: Union[str, "GroupMode"]) -> "GroupMode":
        """Accept a GroupMode, its value, or the aliases "or" / "and"."""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        aliases = {"or": cls.ANY, "and": cls.ALL}
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(
                f"Unknown group mode {value!r}. Use one of: any, all, or, and."
            ) from None


@dataclass(frozen=True)
class Options:
    """Per-call serialization configuration.

    Attributes:
        group_mode: ANY (default) or ALL combination of requested groups.
        top_level_key: When non-empty, marshal output is wrapped as
            ``{top_level_key: document}``.
        tag_key: Field-metadata key that lists a field's groups.
        null_if_empty: Emit ``null`` for empty/nil values instead of
            omitting them. Overrides ``omitempty``.
        ignore_nil_pointers: Drop fields whose value is ``None``. Has no
            effect while ``null_if_empty`` is on.
        max_depth: Maximum container nesting, 0 for unlimited.
        disable_circular_check: Skip cycle detection. Only safe together
            with a positive max_depth.
        cache_capacity: When set, the field cache used by the call is
            resized to this capacity before traversal.
    """

    group_mode: GroupMode = GroupMode.ANY
    top_level_key: str = ""
    tag_key: str = config.DEFAULT_TAG_KEY
    null_if_empty: bool = False
    ignore_nil_pointers: bool = True
    max_depth: int = config.DEFAULT_MAX_DEPTH
    disable_circular_check: bool = False
    cache_capacity: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.tag_key:
            raise ValueError("tag_key must be a non-empty string")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.cache_capacity is not None and self.cache_capacity < 0:
            raise ValueError(
                f"cache_capacity must be >= 0, got {self.cache_capacity}"
            )
        if not isinstance(self.group_mode, GroupMode):
            object.__setattr__(self, "group_mode", GroupMode.parse(self.group_mode))

    @property
    def drops_nil(self) -> bool:
        """True when None values are dropped rather than emitted as null."""
        return self.ignore_nil_pointers and not self.null_if_empty

    @classmethod
    def default(cls) -> "Options":
        return cls()

    def with_group_mode(self, mode: Union[str, GroupMode]) -> "Options":
        return replace(self, group_mode=GroupMode.parse(mode))

    def with_top_level_key(self, key: str) -> "Options":
        return replace(self, top_level_key=key)

    def with_tag_key(self, key: str) -> "Options":
        return replace(self, tag_key=key)

    def with_null_if_empty(self, enable: bool) -> "Options":
        """Toggle null output for empty values.

        Enabling it also disables nil-pointer suppression, since a dropped
        field can never be emitted as null.
        """
        if enable:
            return replace(self, null_if_empty=True, ignore_nil_pointers=False)
        return replace(self, null_if_empty=False)

    def with_ignore_nil_pointers(self, enable: bool) -> "Options":
        return replace(self, ignore_nil_pointers=enable)

    def with_max_depth(self, depth: int) -> "Options":
        return replace(self, max_depth=depth)

    def with_disable_circular_check(self, disable: bool) -> "Options":
        return replace(self, disable_circular_check=disable)

    def with_cache_capacity(self, capacity: Optional[int]) -> "Options":
        return replace(self, cache_capacity=capacity)


def default_options() -> Options:
    """Return the default Options (ANY mode, nil pointers ignored)."""
    return Options.default()
