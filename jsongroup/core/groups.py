"""Group filter: decides whether a field is emitted for a request.

RULES:
- No requested groups → every field is included (unfiltered)
- A field without groups is excluded whenever groups are requested
- ANY: included if the field shares at least one requested group
- ALL: included only if the field carries every requested group
"""

from __future__ import annotations

from typing import Iterable, Sequence

from jsongroup.options import GroupMode


def include(
    field_groups: Iterable[str],
    requested: Sequence[str],
    mode: GroupMode = GroupMode.ANY,
) -> bool:
    if not requested:
        return True
    declared = set(field_groups)
    if not declared:
        return False
    if mode is GroupMode.ALL:
        return all(g in declared for g in requested)
    return any(g in declared for g in requested)
