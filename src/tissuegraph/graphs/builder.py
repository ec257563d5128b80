"""Construct frame graphs from per-frame polygon sets.

Polygons come from an external segmentation step. When the adjacency is not
supplied with them, two polygons are neighbours if they share a boundary
segment of positive length; touching at a single point does not count.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from shapely.geometry import Polygon
from shapely.strtree import STRtree

from tissuegraph.graphs.border import mark_border_cells
from tissuegraph.graphs.cell import Cell
from tissuegraph.graphs.frame_graph import FrameGraph
from tissuegraph.graphs.spatio_temporal import SpatioTemporalGraph

__all__ = ['build_frame', 'build_spatio_temporal_graph', 'find_adjacency']

logger = logging.getLogger(__name__)


def find_adjacency(polygons: Sequence[Polygon], min_shared_length: float = 0.0) -> List[Tuple[int, int]]:
    """Index pairs ``(i, j)``, ``i < j``, of polygons sharing a boundary.

    Parameters
    ----------
    polygons : sequence of Polygon
        Cell outlines of one frame.
    min_shared_length : float, default 0.0
        Shared boundaries must be strictly longer than this.
    """
    tree = STRtree(list(polygons))
    pairs = []
    for i, poly in enumerate(polygons):
        for j in sorted(int(k) for k in tree.query(poly)):
            if j <= i:
                continue
            shared = poly.intersection(polygons[j])
            if shared.length > min_shared_length:
                pairs.append((i, j))
    return pairs


def build_frame(
    polygons: Sequence[Polygon],
    frame_no: int = 0,
    adjacency: Optional[Iterable[Tuple[int, int]]] = None,
    min_shared_length: float = 0.0,
    mark_border: bool = True,
) -> FrameGraph:
    """Create a FrameGraph with one cell per polygon.

    Parameters
    ----------
    polygons : sequence of Polygon
        Cell outlines; the polygon index becomes ``Cell.cell_id``.
    frame_no : int
        Time index of the frame.
    adjacency : iterable of (int, int), optional
        Neighbouring polygon indices. Derived from geometry when omitted.
    min_shared_length : float
        Minimal shared boundary length when adjacency is derived.
    mark_border : bool
        Flag cells on the outer border of the tiling.

    Returns
    -------
    FrameGraph
    """
    frame = FrameGraph(frame_no)
    cells = [Cell(poly, cell_id=i) for i, poly in enumerate(polygons)]
    for cell in cells:
        frame.add_cell(cell)

    if adjacency is None:
        adjacency = find_adjacency(polygons, min_shared_length)

    for i, j in adjacency:
        frame.add_edge(cells[i], cells[j])

    if mark_border and cells:
        mark_border_cells(frame)

    logger.debug("Built frame %d: %d cells, %d edges", frame_no, frame.size(), frame.edge_count())
    return frame


def build_spatio_temporal_graph(
    polygon_series: Iterable[Sequence[Polygon]],
    adjacency_series: Optional[Iterable[Iterable[Tuple[int, int]]]] = None,
    min_shared_length: float = 0.0,
    mark_border: bool = True,
) -> SpatioTemporalGraph:
    """Build one frame per polygon set, numbered in iteration order."""
    st_graph = SpatioTemporalGraph()
    polygon_series = list(polygon_series)
    if adjacency_series is None:
        adjacency_series = [None] * len(polygon_series)
    else:
        adjacency_series = list(adjacency_series)

    for t, (polygons, adjacency) in enumerate(zip(polygon_series, adjacency_series)):
        st_graph.add_frame(build_frame(
            polygons,
            frame_no=t,
            adjacency=adjacency,
            min_shared_length=min_shared_length,
            mark_border=mark_border,
        ))

    logger.info("Built spatio-temporal graph with %d frames", st_graph.size())
    return st_graph
