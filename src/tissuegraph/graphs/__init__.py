"""Graph data model: cells, edges, frame graphs and the spatio-temporal graph."""

from tissuegraph.graphs.pairing import encode, decode
from tissuegraph.graphs.cell import Cell, TrackStatus
from tissuegraph.graphs.edge import Edge
from tissuegraph.graphs.events import Division, Elimination
from tissuegraph.graphs.frame_graph import FrameGraph
from tissuegraph.graphs.spatio_temporal import SpatioTemporalGraph
from tissuegraph.graphs.border import mark_border_cells, remove_border_layer
from tissuegraph.graphs.builder import build_frame, build_spatio_temporal_graph, find_adjacency

__all__ = [
    'encode',
    'decode',
    'Cell',
    'TrackStatus',
    'Edge',
    'Division',
    'Elimination',
    'FrameGraph',
    'SpatioTemporalGraph',
    'mark_border_cells',
    'remove_border_layer',
    'build_frame',
    'build_spatio_temporal_graph',
    'find_adjacency',
]
