"""Cell and edge tracking across the frames of a spatio-temporal graph."""

from tissuegraph.tracking.stable_marriage import StableMatching, stable_match, is_stable
from tissuegraph.tracking.nearest_neighbor import (
    NearestNeighborTracking,
    TrackingReport,
    track_cells,
    most_recent_correspondence,
    update_correspondence,
)
from tissuegraph.tracking.edge_tracking import EdgeTracking, track_edges

__all__ = [
    'StableMatching',
    'stable_match',
    'is_stable',
    'NearestNeighborTracking',
    'TrackingReport',
    'track_cells',
    'most_recent_correspondence',
    'update_correspondence',
    'EdgeTracking',
    'track_edges',
]
