"""Identify cells on the outer border of a segmented frame.

Border cells have incomplete neighbourhoods, so their neighbour relationships
are unreliable. A cell is on the border when part of its outline (positive
length) lies on the exterior outline of the union of all cells.
"""

import logging

from shapely.geometry import MultiLineString
from shapely.geometry.base import BaseGeometry

from tissuegraph.graphs.frame_graph import FrameGraph

__all__ = ['mark_border_cells', 'remove_border_layer', 'outer_outline']

logger = logging.getLogger(__name__)


def outer_outline(union: BaseGeometry) -> BaseGeometry:
    """Exterior rings of a (Multi)Polygon union; holes are ignored."""
    if union.is_empty:
        return MultiLineString()
    if union.geom_type == "Polygon":
        return union.exterior
    if union.geom_type == "MultiPolygon":
        return MultiLineString([part.exterior for part in union.geoms])
    return union.boundary


def mark_border_cells(frame: FrameGraph) -> int:
    """Set ``Cell.boundary`` for every cell of ``frame``.

    Returns
    -------
    int
        Number of border cells.
    """
    outline = outer_outline(frame.union())
    count = 0
    for cell in frame:
        shared = cell.geometry.boundary.intersection(outline)
        cell.boundary = shared.length > 0
        count += cell.boundary

    logger.debug("Frame %d: %d border cells", frame.frame_no, count)
    return count


def remove_border_layer(frame: FrameGraph) -> int:
    """Remove the current border cells and mark the next layer.

    Returns
    -------
    int
        Number of removed cells.
    """
    if frame.size() == 0:
        return 0

    mark_border_cells(frame)
    border = [cell for cell in frame if cell.on_boundary()]
    for cell in border:
        frame.remove_cell(cell)

    if frame.size() > 0:
        mark_border_cells(frame)

    logger.info("Frame %d: removed %d border cells", frame.frame_no, len(border))
    return len(border)
