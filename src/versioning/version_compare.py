"""Heuristic ordering for repository version strings.

This is not a full Maven ComparableVersion or semver implementation. Versions
are split on ``.`` and ``-``; the shorter list is padded with ``"0"``; each
part is compared with these rules, in order:

1. ``SNAPSHOT`` (any case) sorts below any other part.
2. Two integer parts compare numerically.
3. Anything else compares as case-insensitive text.

So ``1.10.0 > 1.9.0`` and ``1.2.0-SNAPSHOT < 1.2.0``, but qualifiers such as
``RC1`` are ordered alphabetically. Nothing here raises.
"""

import re
from functools import lru_cache
from typing import Tuple

from constants import Constants

_SEPARATORS = re.compile(r"[.-]")
_SNAPSHOT = "snapshot"


@lru_cache(maxsize=Constants.VERSION_CACHE_SIZE)
def _split(version: str) -> Tuple[str, ...]:
    return tuple(_SEPARATORS.split(version))


def _as_int(part: str):
    # int() accepts surrounding whitespace, underscores and a sign; restrict to plain digits
    if part.isdigit() and part.isascii():
        return int(part)
    if part[:1] in "+-" and part[1:].isdigit() and part[1:].isascii():
        return int(part)
    return None


def _compare_parts(p1: str, p2: str) -> int:
    snap1 = p1.lower() == _SNAPSHOT
    snap2 = p2.lower() == _SNAPSHOT
    if snap1 and not snap2:
        return -1
    if snap2 and not snap1:
        return 1

    n1, n2 = _as_int(p1), _as_int(p2)
    if n1 is not None and n2 is not None:
        return (n1 > n2) - (n1 < n2)

    l1, l2 = p1.lower(), p2.lower()
    return (l1 > l2) - (l1 < l2)


def compare(v1: str, v2: str) -> int:
    """Compare two version strings.

    Returns:
        -1, 0 or 1 as ``v1`` is older than, equal to, or newer than ``v2``.
    """
    parts1 = _split(v1)
    parts2 = _split(v2)
    for i in range(max(len(parts1), len(parts2))):
        p1 = parts1[i] if i < len(parts1) else "0"
        p2 = parts2[i] if i < len(parts2) else "0"
        result = _compare_parts(p1, p2)
        if result != 0:
            return result
    return 0


def is_newer(v1: str, v2: str) -> bool:
    """True when ``v1`` sorts strictly after ``v2``."""
    return compare(v1, v2) > 0


def clear_cache() -> None:
    _split.cache_clear()
