"""Release-aware ordering of version-like strings such as tag names.

A version is split into items at ``.``, ``-``, ``_``, ``+`` and at every
digit/non-digit transition. Numeric items compare numerically and outrank
qualifiers; qualifiers are ordered

    dev < alpha < beta < milestone < rc < snapshot < <other> < release < sp

with unknown qualifiers compared alphabetically among themselves. Trailing
zeros and release qualifiers are dropped, so ``1.0``, ``1.0.0`` and
``1.0-final`` are equal, and a missing item counts as a release marker:
``1.0 > 1.0-rc1`` and ``1.0 > 1.0.0-dev``.
"""

import functools
import re
from typing import Callable, List, Optional, Tuple, Union

Item = Union[int, str]

_SEPARATORS = re.compile(r"[.\-_+]")
_RUNS = re.compile(r"\d+|\D+")

_QUALIFIER_RANKS = {
    "dev": 0,
    "alpha": 1,
    "a": 1,
    "beta": 2,
    "b": 2,
    "milestone": 3,
    "m": 3,
    "rc": 4,
    "cr": 4,
    "snapshot": 5,
    "": 7,
    "ga": 7,
    "final": 7,
    "release": 7,
    "sp": 8,
}
_UNKNOWN_RANK = 6
_RELEASE_RANK = 7


def parse_items(version: str) -> List[Item]:
    """Split a version string into comparable items with trailing null items removed."""
    items: List[Item] = []
    for part in _SEPARATORS.split(version.strip().lower()):
        for run in _RUNS.findall(part):
            items.append(int(run) if run.isdigit() else run)
    while items and _is_null(items[-1]):
        items.pop()
    return items


def _is_null(item: Item) -> bool:
    if isinstance(item, int):
        return item == 0
    return _QUALIFIER_RANKS.get(item) == _RELEASE_RANK


def _qualifier_key(item: Optional[str]) -> Tuple[int, str]:
    if item is None:
        return _RELEASE_RANK, ""
    rank = _QUALIFIER_RANKS.get(item, _UNKNOWN_RANK)
    return rank, item if rank == _UNKNOWN_RANK else ""


def _sign(left, right) -> int:
    return (left > right) - (left < right)


def _compare_items(left: Optional[Item], right: Optional[Item]) -> int:
    if isinstance(left, int) and isinstance(right, int):
        return _sign(left, right)
    if isinstance(left, int):
        if right is None:
            return _sign(left, 0)
        return 1
    if isinstance(right, int):
        return -_compare_items(right, left)
    return _sign(_qualifier_key(left), _qualifier_key(right))


def compare_versions(left: str, right: str) -> int:
    """Return -1, 0 or 1 as ``left`` orders before, equal to or after ``right``."""
    left_items = parse_items(left)
    right_items = parse_items(right)
    for index in range(max(len(left_items), len(right_items))):
        result = _compare_items(
            left_items[index] if index < len(left_items) else None,
            right_items[index] if index < len(right_items) else None,
        )
        if result:
            return result
    return 0


version_sort_key: Callable[[str], object] = functools.cmp_to_key(compare_versions)
