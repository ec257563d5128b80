"""Presence timelines of tracked neighbour relationships.

Every edge of the starting frame whose two cells are tracked is followed
through the later frames by its pair code. The timeline of an edge holds
one boolean per frame from the starting frame on.

An edge missing from a frame only counts as a topological change when both
of its cells are still present. When one of the cells disappears:

- it was on the border in the frame before: the timeline is truncated
  there, the loss is inconclusive;
- it was interior (or absent as well): the timeline is abandoned, the loss
  is a tracking or segmentation issue.
"""

import logging
from typing import Dict

import numpy as np

from tissuegraph.contracts import assert_tracked, require
from tissuegraph.graphs import SpatioTemporalGraph, decode

__all__ = ['EdgeTracking', 'track_edges']

logger = logging.getLogger(__name__)


class EdgeTracking:
    """Track the edges of ``starting_frame_no`` through the graph.

    Parameters
    ----------
    st_graph : SpatioTemporalGraph
        Graph on which cell tracking has completed. It is only read.
    starting_frame_no : int, default 0
        Frame whose edges are followed.
    """

    def __init__(self, st_graph: SpatioTemporalGraph, starting_frame_no: int = 0):
        self.st_graph = st_graph
        self.starting_frame_no = starting_frame_no
        self.tracked_edges: Dict[int, np.ndarray] = {}

    @property
    def full_length(self) -> int:
        return self.st_graph.size() - self.starting_frame_no

    def track_edges(self) -> Dict[int, np.ndarray]:
        """Build the timelines.

        Returns
        -------
        dict
            pair code -> boolean numpy array, keys in ascending order.

        Raises
        ------
        ContractViolation
            If the graph is not tracked or the starting frame is out of range.
        """
        assert_tracked(self.st_graph)
        require(
            0 <= self.starting_frame_no < self.st_graph.size(),
            f"Edge tracking contract violated: starting frame {self.starting_frame_no} "
            f"out of range [0, {self.st_graph.size()})",
        )

        self._initialize()
        for i in range(self.starting_frame_no + 1, self.st_graph.size()):
            self._mark_present(i)
            self._prune(i)

        self.tracked_edges = {code: self.tracked_edges[code] for code in sorted(self.tracked_edges)}

        logger.info(
            "Edge tracking from frame %d: %d timelines, %d with gaps",
            self.starting_frame_no, len(self.tracked_edges),
            sum(1 for t in self.tracked_edges.values() if not t.all()),
        )
        return self.tracked_edges

    def _initialize(self) -> None:
        frame = self.st_graph.frame(self.starting_frame_no)
        self.tracked_edges = {}
        for edge in frame.tracked_edges():
            timeline = np.zeros(self.full_length, dtype=bool)
            timeline[0] = True
            self.tracked_edges[edge.pair_code] = timeline

    def _mark_present(self, i: int) -> None:
        index = i - self.starting_frame_no
        for edge in self.st_graph.frame(i).tracked_edges():
            timeline = self.tracked_edges.get(edge.pair_code)
            if timeline is not None and index < len(timeline):
                timeline[index] = True

    def _prune(self, i: int) -> None:
        frame = self.st_graph.frame(i)
        frame_pre = self.st_graph.frame(i - 1)

        to_truncate = []
        to_abandon = []
        for code, timeline in self.tracked_edges.items():
            if len(timeline) < self.full_length:
                continue

            for track_id in decode(code):
                if frame.has_track_id(track_id):
                    continue
                if frame_pre.has_track_id(track_id) and frame_pre.cell_by_track_id(track_id).on_boundary():
                    to_truncate.append(code)
                else:
                    to_abandon.append(code)
                break

        for code in to_truncate:
            self.tracked_edges[code] = self.tracked_edges[code][:i - self.starting_frame_no].copy()
        for code in to_abandon:
            del self.tracked_edges[code]

        if to_truncate or to_abandon:
            logger.debug(
                "Frame %d: %d timelines truncated at the border, %d abandoned",
                i, len(to_truncate), len(to_abandon),
            )


def track_edges(st_graph: SpatioTemporalGraph, start_frame: int = 0) -> Dict[int, np.ndarray]:
    """Functional shortcut for :meth:`EdgeTracking.track_edges`."""
    return EdgeTracking(st_graph, start_frame).track_edges()
