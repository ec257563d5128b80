"""Tracking stage contract.

Called after cell tracking. Verifies that the lineage links form
consistent chains before edge tracking and T1 detection rely on them.
"""

from typing import TYPE_CHECKING

from tissuegraph.contracts.base import require
from tissuegraph.contracts.graph import assert_unique_track_ids

if TYPE_CHECKING:
    from tissuegraph.graphs import SpatioTemporalGraph


def assert_tracked(st_graph: "SpatioTemporalGraph") -> None:
    """Enforce that a tracking pass has completed."""
    require(
        st_graph.has_tracking(),
        "Tracking contract violated: graph has no tracking, run cell tracking first",
    )


def assert_lineage_consistent(st_graph: "SpatioTemporalGraph") -> None:
    """Enforce lineage chain integrity.

    - ``cell.previous.next is cell`` and ``cell.next.previous is cell``
    - following ``previous`` terminates (no cycles) at ``cell.first``
    - valid track IDs are unique per frame

    Raises
    ------
    ContractViolation
        If any invariant is violated.
    """
    assert_tracked(st_graph)

    for frame in st_graph:
        assert_unique_track_ids(frame)

        for cell in frame:
            if cell.previous is not None:
                require(
                    cell.previous.next is cell,
                    f"Tracking contract violated: broken previous link at frame {frame.frame_no}, cell {cell.track_id}",
                )
                require(
                    cell.previous.frame_no < cell.frame_no,
                    f"Tracking contract violated: previous link does not go back in time at frame {frame.frame_no}",
                )
            if cell.next is not None:
                require(
                    cell.next.previous is cell,
                    f"Tracking contract violated: broken next link at frame {frame.frame_no}, cell {cell.track_id}",
                )

            if cell.first is None:
                continue

            root = cell
            steps = 0
            while root.previous is not None:
                root = root.previous
                steps += 1
                require(
                    steps <= st_graph.size(),
                    f"Tracking contract violated: cycle in lineage of cell {cell.track_id} at frame {frame.frame_no}",
                )
            require(
                root is cell.first,
                f"Tracking contract violated: chain of cell {cell.track_id} at frame {frame.frame_no} "
                f"does not end at its first cell",
            )
