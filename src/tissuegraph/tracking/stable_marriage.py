"""Gale-Shapley deferred acceptance.

Grooms propose to brides in order of their preference lists; a bride keeps
the best proposer seen so far according to her own list. The result is the
groom-optimal stable matching, independent of the order in which free
grooms propose.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Mapping, Sequence, TypeVar

__all__ = ['StableMatching', 'stable_match', 'is_stable']

logger = logging.getLogger(__name__)

G = TypeVar("G", bound=Hashable)
B = TypeVar("B", bound=Hashable)


@dataclass
class StableMatching:
    """Outcome of :func:`stable_match`.

    Attributes
    ----------
    marriage : dict
        bride -> groom.
    unmatched_brides : list
        Brides without a partner, in input order.
    unmatched_grooms : list
        Grooms that exhausted their list without a partner, in input order.
    """
    marriage: Dict = field(default_factory=dict)
    unmatched_brides: List = field(default_factory=list)
    unmatched_grooms: List = field(default_factory=list)

    def groom_of(self, bride):
        return self.marriage.get(bride)

    def bride_of(self, groom):
        for bride, g in self.marriage.items():
            if g == groom:
                return bride
        return None


def stable_match(
    groom_prefs: Mapping[G, Sequence[B]],
    bride_prefs: Mapping[B, Sequence[G]],
) -> StableMatching:
    """Solve the stable marriage problem with grooms proposing.

    Parameters
    ----------
    groom_prefs : mapping
        groom -> brides ordered best first.
    bride_prefs : mapping
        bride -> grooms ordered best first. A bride rejects any proposer
        absent from her list. Brides that appear only here stay unmatched.

    Returns
    -------
    StableMatching

    Examples
    --------
    >>> result = stable_match({"a": ["x"], "b": ["x"]}, {"x": ["b", "a"]})
    >>> result.marriage
    {'x': 'b'}
    >>> result.unmatched_grooms
    ['a']
    """
    rank: Dict[B, Dict[G, int]] = {
        bride: {groom: i for i, groom in enumerate(prefs)}
        for bride, prefs in bride_prefs.items()
    }

    next_choice: Dict[G, int] = {groom: 0 for groom in groom_prefs}
    husband: Dict[B, G] = {}
    free = deque(groom_prefs)

    while free:
        groom = free.popleft()
        prefs = groom_prefs[groom]

        while next_choice[groom] < len(prefs):
            bride = prefs[next_choice[groom]]
            next_choice[groom] += 1

            bride_rank = rank.get(bride, {})
            if groom not in bride_rank:
                continue

            current = husband.get(bride)
            if current is None:
                husband[bride] = groom
                break

            if bride_rank[groom] < bride_rank[current]:
                husband[bride] = groom
                free.append(current)
                break

    married_grooms = set(husband.values())
    brides = list(bride_prefs)
    for prefs in groom_prefs.values():
        for bride in prefs:
            if bride not in bride_prefs and bride not in brides:
                brides.append(bride)

    # Preserve bride input order in the marriage mapping
    marriage = {bride: husband[bride] for bride in brides if bride in husband}

    result = StableMatching(
        marriage=marriage,
        unmatched_brides=[bride for bride in brides if bride not in husband],
        unmatched_grooms=[groom for groom in groom_prefs if groom not in married_grooms],
    )

    logger.debug(
        "Stable matching: %d pairs, %d unmatched brides, %d unmatched grooms",
        len(result.marriage), len(result.unmatched_brides), len(result.unmatched_grooms),
    )
    return result


def is_stable(
    matching: StableMatching,
    groom_prefs: Mapping[G, Sequence[B]],
    bride_prefs: Mapping[B, Sequence[G]],
) -> bool:
    """True if no groom and bride both prefer each other to their partners."""
    wife = {groom: bride for bride, groom in matching.marriage.items()}

    for groom, prefs in groom_prefs.items():
        for bride in prefs:
            if wife.get(groom) == bride:
                break
            b_prefs = list(bride_prefs.get(bride, []))
            if groom not in b_prefs:
                continue
            current = matching.marriage.get(bride)
            if current is None or b_prefs.index(groom) < b_prefs.index(current):
                return False
    return True
