"""Tabular summaries of tracking results."""

from tissuegraph.analysis.summary import (
    frame_summary,
    cells_table,
    divisions_table,
    eliminations_table,
    transitions_table,
    always_tracked_lineages,
)
from tissuegraph.analysis.voronoi import VoronoiGenerator

__all__ = [
    'frame_summary',
    'cells_table',
    'divisions_table',
    'eliminations_table',
    'transitions_table',
    'always_tracked_lineages',
    'VoronoiGenerator',
]
