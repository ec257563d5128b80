"""Centroid Voronoi tessellation of every frame.

Each cell is paired with the Voronoi region of its centroid, clipped to
the union of the frame. The difference between the cell area and the
region area measures how far the tiling is from a centroidal Voronoi
packing.
"""

import logging
from typing import Dict

import pandas as pd
import shapely
from shapely.geometry import MultiPoint
from shapely.geometry.base import BaseGeometry
from shapely.strtree import STRtree

from tissuegraph.graphs import Cell, FrameGraph, SpatioTemporalGraph

__all__ = ['VoronoiGenerator', 'VORONOI_COLUMNS']

logger = logging.getLogger(__name__)

VORONOI_COLUMNS = ["frame", "track_id", "cell_area", "voronoi_area", "area_difference"]


class VoronoiGenerator:
    """Voronoi regions and area differences for all cells of ``st_graph``.

    Attributes
    ----------
    cell_voronoi : dict
        Cell to its clipped Voronoi region.
    area_difference : dict
        Cell to ``cell area - region area``.

    Examples
    --------
    >>> voronoi = VoronoiGenerator(st_graph)
    >>> st_graph.has_voronoi()
    True
    >>> voronoi.table().head()
    """

    def __init__(self, st_graph: SpatioTemporalGraph):
        self.st_graph = st_graph
        self.cell_voronoi: Dict[Cell, BaseGeometry] = {}
        self.area_difference: Dict[Cell, float] = {}

        for frame in st_graph:
            self._tessellate(frame)

        st_graph.set_voronoi(True)
        logger.info("Voronoi tessellation of %d cells in %d frames",
                    len(self.cell_voronoi), st_graph.size())

    def _tessellate(self, frame: FrameGraph) -> None:
        cells = frame.cells()
        if not cells:
            return

        union = frame.union()
        if len(cells) == 1:
            self._assign(cells[0], union)
            return

        centroids = [c.centroid for c in cells]
        diagram = shapely.voronoi_polygons(MultiPoint(centroids), extend_to=union)
        tree = STRtree(centroids)

        for region in diagram.geoms:
            clipped = region.intersection(union)
            for i in tree.query(region, predicate="contains"):
                self._assign(cells[int(i)], clipped)

        missing = sum(1 for c in cells if c not in self.cell_voronoi)
        if missing:
            logger.warning("Frame %d: %d cells without Voronoi region", frame.frame_no, missing)

    def _assign(self, cell: Cell, region: BaseGeometry) -> None:
        self.cell_voronoi[cell] = region
        self.area_difference[cell] = cell.area - region.area

    def table(self) -> pd.DataFrame:
        """One row per cell with its Voronoi area, in frame and cell order."""
        rows = [
            {
                "frame": cell.frame_no,
                "track_id": cell.track_id,
                "cell_area": cell.area,
                "voronoi_area": self.cell_voronoi[cell].area,
                "area_difference": self.area_difference[cell],
            }
            for frame in self.st_graph
            for cell in frame
            if cell in self.cell_voronoi
        ]
        return pd.DataFrame(rows, columns=VORONOI_COLUMNS)
