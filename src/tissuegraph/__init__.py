"""tissuegraph: cell tracking and T1 transition detection on polygon tilings.

Per-frame cell polygons are assembled into frame graphs, linked over time
by stable-marriage nearest-neighbour tracking, and scanned for neighbour
exchanges through edge presence timelines.
"""

__version__ = "0.1.0"

from tissuegraph.graphs import (
    Cell,
    Edge,
    FrameGraph,
    SpatioTemporalGraph,
    TrackStatus,
    build_frame,
    build_spatio_temporal_graph,
)
from tissuegraph.tracking import NearestNeighborTracking, EdgeTracking, track_edges
from tissuegraph.transitions import T1Transition, detect_t1_transitions
from tissuegraph.pipeline import TrackingPipeline

__all__ = [
    '__version__',
    'Cell',
    'Edge',
    'FrameGraph',
    'SpatioTemporalGraph',
    'TrackStatus',
    'build_frame',
    'build_spatio_temporal_graph',
    'NearestNeighborTracking',
    'EdgeTracking',
    'track_edges',
    'T1Transition',
    'detect_t1_transitions',
    'TrackingPipeline',
]
