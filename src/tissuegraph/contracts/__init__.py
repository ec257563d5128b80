"""Stage contracts: fail-fast enforcement of structural invariants.

Contracts fail immediately and loudly when the input graph or a tracking
stage does not hold its promised invariants.

Key principle:
- Pydantic validates config correctness
- Contracts validate graph and stage correctness
- Tracking algorithms tag ambiguous outcomes on the cells
"""

from tissuegraph.contracts.failure import ContractViolation
from tissuegraph.contracts.base import require
from tissuegraph.contracts.graph import assert_frames_contiguous, assert_unique_track_ids
from tissuegraph.contracts.tracking import assert_tracked, assert_lineage_consistent

__all__ = [
    "ContractViolation",
    "require",
    "assert_frames_contiguous",
    "assert_unique_track_ids",
    "assert_tracked",
    "assert_lineage_consistent",
]
