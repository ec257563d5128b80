"""Time-ordered sequence of frame graphs.

The spatio-temporal graph owns every FrameGraph of a time-lapse and the
running track-ID counter used when new lineages start (first frame,
divisions, manual insertions). Cell links across frames are owned
collectively by this structure: discarding it discards the whole lineage.
"""

import logging
from typing import Iterable, Iterator, List, Optional

from tissuegraph.contracts.base import require
from tissuegraph.graphs.events import Division, Elimination
from tissuegraph.graphs.frame_graph import FrameGraph

__all__ = ['SpatioTemporalGraph']

logger = logging.getLogger(__name__)


class SpatioTemporalGraph:
    """Ordered frames ``0..N-1`` plus graph-wide tracking metadata.

    Parameters
    ----------
    frames : iterable of FrameGraph, optional
        Initial frames; ``frames[i].frame_no`` must equal ``i``.

    Notes
    -----
    - ``frame(t)`` and ``set_frame(graph, t)`` fail fast with
      :class:`~tissuegraph.contracts.ContractViolation` on out-of-range
      indices or mismatching frame numbers.
    - ``allocate_track_id()`` is monotonic and never hands out an ID twice
      for the lifetime of the instance.
    """

    def __init__(self, frames: Optional[Iterable[FrameGraph]] = None):
        self._frames: List[FrameGraph] = []
        self._has_tracking = False
        self._has_voronoi = False
        self._next_track_id = 0

        for graph in frames or []:
            self.add_frame(graph)

    def __repr__(self):
        return f"SpatioTemporalGraph(frames={len(self._frames)}, tracking={self._has_tracking})"

    def __len__(self) -> int:
        return len(self._frames)

    def __iter__(self) -> Iterator[FrameGraph]:
        return iter(self._frames)

    def size(self) -> int:
        return len(self._frames)

    def frame(self, t: int) -> FrameGraph:
        require(
            0 <= t < len(self._frames),
            f"SpatioTemporalGraph contract violated: frame {t} out of range [0, {len(self._frames)})",
        )
        return self._frames[t]

    def set_frame(self, graph: FrameGraph, t: int) -> None:
        """Replace frame ``t`` or append when ``t == size()``."""
        require(
            0 <= t <= len(self._frames),
            f"SpatioTemporalGraph contract violated: cannot set frame {t} on a graph of {len(self._frames)} frames",
        )
        require(
            graph.frame_no == t,
            f"SpatioTemporalGraph contract violated: frame graph numbered {graph.frame_no} set at index {t}",
        )
        if t < len(self._frames):
            self._frames[t] = graph
        else:
            self._frames.append(graph)

    def add_frame(self, graph: FrameGraph) -> None:
        self.set_frame(graph, len(self._frames))

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def has_tracking(self) -> bool:
        return self._has_tracking

    def set_tracking(self, state: bool) -> None:
        self._has_tracking = state

    def has_voronoi(self) -> bool:
        return self._has_voronoi

    def set_voronoi(self, state: bool) -> None:
        self._has_voronoi = state

    def allocate_track_id(self) -> int:
        """Return a fresh lineage ID."""
        track_id = self._next_track_id
        self._next_track_id += 1
        return track_id

    def update_track_id(self, highest: int) -> None:
        """Make sure future allocations are above ``highest``."""
        if highest >= self._next_track_id:
            self._next_track_id = highest + 1

    @property
    def next_track_id(self) -> int:
        return self._next_track_id

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def divisions(self) -> List[Division]:
        """Divisions recorded on cells, ordered by time point."""
        found = {}
        for graph in self._frames:
            for cell in graph:
                if cell.division is not None:
                    found[id(cell.division)] = cell.division
        return sorted(found.values(), key=lambda d: (d.time_point, d.child1.track_id))

    def eliminations(self) -> List[Elimination]:
        """Eliminations recorded on cells, ordered by time point."""
        found = [cell.elimination for graph in self._frames for cell in graph
                 if cell.elimination is not None]
        return sorted(found, key=lambda e: (e.time_point, e.track_id))
