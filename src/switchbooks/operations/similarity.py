"""Name similarity used to surface near-duplicate categories and payees.

Two names are similar when, after normalization (lowercase, only ASCII
letters and digits kept), one contains the other or their edit-distance
ratio ``1 - distance / max(len)`` is at least ``SIMILARITY_THRESHOLD``.
"""

import re
from typing import Callable, Iterable, TypeVar

SIMILARITY_THRESHOLD = 0.7
MAX_MATCHES = 3

T = TypeVar("T")

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize(name: str) -> str:
    """Lowercase a name and strip everything but ASCII letters and digits."""
    return _NON_ALNUM.sub("", name.lower())


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance (insertions, deletions, substitutions) between two strings."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (char_a != char_b),
                )
            )
        previous = current
    return previous[-1]


def similarity_ratio(a: str, b: str) -> float:
    """Return 1.0 for identical strings down to 0.0 for nothing in common."""
    if a == b:
        return 1.0
    longest = max(len(a), len(b))
    if min(len(a), len(b)) == 0:
        return 0.0
    return (longest - levenshtein_distance(a, b)) / longest


def is_similar(a: str, b: str) -> bool:
    """Check two raw names against the containment and ratio rules."""
    left, right = normalize(a), normalize(b)
    if not left or not right:
        return False
    if left in right or right in left:
        return True
    return similarity_ratio(left, right) >= SIMILARITY_THRESHOLD


def find_similar(
    target: str,
    candidates: Iterable[T],
    key: Callable[[T], str] = str,
    limit: int = MAX_MATCHES,
) -> list[T]:
    """Return up to ``limit`` candidates whose name is similar to ``target``.

    Args:
        target: Name being checked
        candidates: Objects to compare against, in preference order
        key: Extracts the name from a candidate
        limit: Maximum number of matches

    Returns:
        Matching candidates in their original order
    """
    matches = []
    for candidate in candidates:
        if is_similar(target, key(candidate)):
            matches.append(candidate)
            if len(matches) >= limit:
                break
    return matches
