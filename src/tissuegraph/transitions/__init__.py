"""T1 neighbour-exchange detection."""

from tissuegraph.transitions.cell_tile import PolygonalCellTile, create_polygonal_tiles
from tissuegraph.transitions.t1_transition import T1Transition, longest_gap
from tissuegraph.transitions.detect import find_transitions, detect_t1_transitions

__all__ = [
    'PolygonalCellTile',
    'create_polygonal_tiles',
    'T1Transition',
    'longest_gap',
    'find_transitions',
    'detect_t1_transitions',
]
