"""Order-independent pairing of two track IDs into a single integer key.

Edges between two tracked cells are identified across time by the Cantor
pairing of the sorted pair of their track IDs. The key does not depend on
which cell is the edge source, so the same neighbour relationship maps to the
same key in every frame.
"""

from math import isqrt
from typing import Tuple

__all__ = ['encode', 'decode']


def encode(a: int, b: int) -> int:
    """Encode the unordered pair ``{a, b}`` into one non-negative integer.

    Parameters
    ----------
    a, b : int
        Non-negative track IDs.

    Returns
    -------
    int
        Cantor pairing of ``(min(a, b), max(a, b))``.

    Raises
    ------
    ValueError
        If either value is negative (untracked cells must be filtered out
        by the caller).

    Examples
    --------
    >>> encode(3, 5) == encode(5, 3)
    True
    >>> decode(encode(5, 3))
    (3, 5)
    """
    if a < 0 or b < 0:
        raise ValueError(f"Pairing requires non-negative track IDs, got ({a}, {b})")

    lo, hi = (a, b) if a <= b else (b, a)
    s = lo + hi
    return s * (s + 1) // 2 + hi


def decode(key: int) -> Tuple[int, int]:
    """Invert :func:`encode`, returning ``(min, max)``."""
    if key < 0:
        raise ValueError(f"Pair code must be non-negative, got {key}")

    w = (isqrt(8 * key + 1) - 1) // 2
    t = w * (w + 1) // 2
    hi = key - t
    lo = w - hi
    return lo, hi
