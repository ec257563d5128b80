"""T1 transition detection over edge timelines."""

import logging
from typing import Dict, List, Mapping

import numpy as np

from tissuegraph.contracts import assert_tracked
from tissuegraph.graphs import Cell, SpatioTemporalGraph, decode
from tissuegraph.tracking.edge_tracking import track_edges
from tissuegraph.transitions.cell_tile import PolygonalCellTile, create_polygonal_tiles
from tissuegraph.transitions.t1_transition import T1Transition

__all__ = ['find_transitions', 'detect_t1_transitions']

logger = logging.getLogger(__name__)


def find_transitions(
    st_graph: SpatioTemporalGraph,
    cell_tiles: Dict[Cell, PolygonalCellTile],
    tracked_edges: Mapping[int, np.ndarray],
    min_transition_length: int = 1,
    min_old_edge_survival: int = 1,
    starting_frame: int = 0,
    require_winners: bool = False,
) -> List[T1Transition]:
    """Build a transition for every timeline with a gap.

    Parameters
    ----------
    st_graph : SpatioTemporalGraph
        Tracked graph.
    cell_tiles : dict
        Cell -> PolygonalCellTile, see :func:`create_polygonal_tiles`.
    tracked_edges : mapping
        pair code -> presence timeline, see :func:`track_edges`.
    min_transition_length : int, default 1
        Shorter absences are discarded as flicker.
    min_old_edge_survival : int, default 1
        Edges present for fewer frames before the absence are discarded.
    starting_frame : int, default 0
        Frame of timeline index 0.
    require_winners : bool, default False
        Drop transitions whose winners could not be resolved.

    Returns
    -------
    list of T1Transition
        Ordered by detection time, then losers.
    """
    transitions = []
    skipped = 0

    for code, timeline in tracked_edges.items():
        if np.all(timeline):
            continue

        transition = T1Transition(st_graph, decode(code), timeline, starting_frame)
        if (transition.length() < min_transition_length
                or transition.old_edge_survival_length < min_old_edge_survival):
            skipped += 1
            continue

        found = transition.find_side_gain(cell_tiles)
        if require_winners and not found:
            skipped += 1
            continue

        transitions.append(transition)

    transitions.sort(key=lambda t: (t.detection_time, t.loser_nodes))

    logger.info(
        "Found %d T1 transitions (%d with winners, %d discarded)",
        len(transitions), sum(t.has_winners() for t in transitions), skipped,
    )
    return transitions


def detect_t1_transitions(st_graph: SpatioTemporalGraph, config) -> List[T1Transition]:
    """Tiles, edge tracking and transition finding with a resolved config."""
    assert_tracked(st_graph)

    starting_frame = config.edges.starting_frame
    cell_tiles = create_polygonal_tiles(st_graph, range(starting_frame, st_graph.size()))
    tracked = track_edges(st_graph, starting_frame)

    return find_transitions(
        st_graph,
        cell_tiles,
        tracked,
        min_transition_length=config.transitions.min_transition_length,
        min_old_edge_survival=config.transitions.min_old_edge_survival,
        starting_frame=starting_frame,
        require_winners=config.transitions.require_winners,
    )
