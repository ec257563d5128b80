"""T1 transition: loss of a tracked edge and the neighbour exchange around it.

A transition is derived from the presence timeline of one edge. The two
cells that lose the edge are the losers; the two cells that become
neighbours across the lost edge are the winners.
"""

import logging
from typing import Dict, Sequence, Tuple

import numpy as np

from tissuegraph.graphs import Cell, SpatioTemporalGraph
from tissuegraph.transitions.cell_tile import PolygonalCellTile

__all__ = ['T1Transition', 'longest_gap']

logger = logging.getLogger(__name__)

NO_WINNERS = (-1, -1)


def longest_gap(timeline: np.ndarray) -> Tuple[int, int]:
    """Start index and length of the longest run of False entries.

    Ties resolve to the earliest run. Returns ``(-1, 0)`` for a timeline
    without any False entry.
    """
    best_start, best_length = -1, 0
    run_start, run_length = -1, 0
    for i, present in enumerate(timeline):
        if present:
            run_length = 0
            continue
        if run_length == 0:
            run_start = i
        run_length += 1
        if run_length > best_length:
            best_start, best_length = run_start, run_length
    return best_start, best_length


class T1Transition:
    """Neighbour exchange detected on one edge timeline.

    Parameters
    ----------
    st_graph : SpatioTemporalGraph
        Tracked graph the timeline was built from.
    pair : sequence of int
        Track IDs of the two loser cells.
    timeline : numpy.ndarray of bool
        Presence of the edge from ``starting_frame`` on.
    starting_frame : int, default 0
        Frame of timeline index 0.

    Attributes
    ----------
    detection_time : int
        Frame where the longest absence of the edge starts.
    transition_length : int
        Number of frames of that absence.
    old_edge_survival_length : int
        Number of frames the edge was present before that absence.

    Raises
    ------
    ValueError
        If ``pair`` is not two track IDs or the timeline has no gap.
    """

    def __init__(self, st_graph: SpatioTemporalGraph, pair: Sequence[int],
                 timeline: np.ndarray, starting_frame: int = 0):
        if len(pair) != 2:
            raise ValueError(f"Loser pair must hold two track IDs, got {pair!r}")

        timeline = np.asarray(timeline, dtype=bool)
        start, length = longest_gap(timeline)
        if length == 0:
            raise ValueError(f"Timeline of edge {tuple(pair)} has no gap, no transition to detect")

        self.st_graph = st_graph
        self.loser_nodes: Tuple[int, int] = tuple(sorted(int(p) for p in pair))
        self.winner_nodes: Tuple[int, int] = NO_WINNERS
        self.timeline = timeline
        self.starting_frame = starting_frame

        self.detection_time = start + starting_frame
        self.transition_length = length
        self.old_edge_survival_length = int(np.count_nonzero(timeline[:start]))

    def __repr__(self):
        w, l = self.winner_nodes, self.loser_nodes
        return f"T1Transition([{w[0]} + {w[1]}, {l[0]} - {l[1]}] @ {self.detection_time})"

    def length(self) -> int:
        return self.transition_length

    def has_winners(self) -> bool:
        return all(w >= 0 for w in self.winner_nodes)

    def _losers_before_detection(self) -> Tuple[Cell, Cell]:
        frame = self.st_graph.frame(self.detection_time - 1)
        l1, l2 = self.loser_nodes
        return frame.cell_by_track_id(l1), frame.cell_by_track_id(l2)

    def on_boundary(self) -> bool:
        """Either loser touches the border in the frame before detection."""
        l1, l2 = self._losers_before_detection()
        return l1.on_boundary() or l2.on_boundary()

    def find_side_gain(self, cell_tiles: Dict[Cell, PolygonalCellTile]) -> bool:
        """Identify the winners from the lost edge geometry.

        In the frame before detection, neighbours of the first loser
        (other than the second loser) touching the shared boundary of the
        losers are the winners. Exactly two are expected; otherwise a
        warning is logged and the winners stay unset.

        Returns
        -------
        bool
            True if the winners were found.
        """
        l1, l2 = self._losers_before_detection()
        frame = self.st_graph.frame(self.detection_time - 1)

        tile = cell_tiles.get(l1)
        lost_edge = tile.tile_edge(l2) if tile is not None else None
        if lost_edge is None:
            lost_edge = l1.geometry.intersection(l2.geometry)
        if lost_edge.is_empty:
            logger.warning("No lost edge geometry at frame %d for %r", frame.frame_no, self)
            return False

        side_gain = [
            n.track_id for n in frame.neighbors_of(l1)
            if n is not l2 and n.geometry.intersects(lost_edge)
        ]
        if len(side_gain) != 2:
            logger.warning(
                "Expected 2 winner cells at frame %d for losers %s, found %s",
                frame.frame_no, self.loser_nodes, side_gain,
            )
            return False

        self.winner_nodes = tuple(sorted(side_gain))
        return True
