"""Polygonal tiles: per-cell intersections with every neighbour."""

import logging
from typing import Dict, Iterable, Optional

from shapely.geometry import GeometryCollection
from shapely.geometry.base import BaseGeometry

from tissuegraph.graphs import Cell, FrameGraph, SpatioTemporalGraph

__all__ = ['PolygonalCellTile', 'create_polygonal_tiles']

logger = logging.getLogger(__name__)


class PolygonalCellTile:
    """Shared boundaries of ``cell`` with each of its neighbours in ``frame``.

    Degenerate intersections are kept as empty geometries so that a
    neighbour without a shared boundary is still listed.
    """

    def __init__(self, cell: Cell, frame: FrameGraph):
        self.cell = cell
        self.tiles: Dict[Cell, BaseGeometry] = {}

        for neighbor in frame.neighbors_of(cell):
            intersection = cell.geometry.intersection(neighbor.geometry)
            if intersection.is_empty:
                intersection = GeometryCollection()
            self.tiles[neighbor] = intersection

    def __repr__(self):
        return f"PolygonalCellTile({self.cell!r}, neighbors={len(self.tiles)})"

    def tile_edge(self, neighbor: Cell) -> Optional[BaseGeometry]:
        """Intersection with ``neighbor``, None if it is not a neighbour."""
        return self.tiles.get(neighbor)

    def tile_intersection_no(self) -> int:
        return len(self.tiles)


def create_polygonal_tiles(st_graph: SpatioTemporalGraph,
                           frames: Optional[Iterable[int]] = None) -> Dict[Cell, PolygonalCellTile]:
    """Build the tiles of every cell in ``frames`` (all frames by default)."""
    if frames is None:
        frames = range(st_graph.size())

    tiles: Dict[Cell, PolygonalCellTile] = {}
    for t in frames:
        frame = st_graph.frame(t)
        for cell in frame:
            tiles[cell] = PolygonalCellTile(cell, frame)

    logger.debug("Created %d polygonal tiles", len(tiles))
    return tiles
