"""Tabular summaries of a tracked spatio-temporal graph.

All tables are pandas DataFrames with fixed columns, so empty results keep
their schema and can be concatenated across runs.
"""

import logging
from typing import Iterable, Set

import pandas as pd

from tissuegraph.graphs import SpatioTemporalGraph

__all__ = [
    'frame_summary',
    'cells_table',
    'divisions_table',
    'eliminations_table',
    'transitions_table',
    'always_tracked_lineages',
]

logger = logging.getLogger(__name__)

FRAME_COLUMNS = ["frame", "cells", "area", "divisions", "eliminations", "border_cells", "tracked_cells"]
CELL_COLUMNS = ["frame", "track_id", "status", "centroid_x", "centroid_y", "area", "on_boundary", "first_track_id"]
DIVISION_COLUMNS = ["time_point", "mother_track_id", "child1_track_id", "child2_track_id"]
ELIMINATION_COLUMNS = ["time_point", "track_id", "centroid_x", "centroid_y"]
TRANSITION_COLUMNS = [
    "loser_1", "loser_2", "winner_1", "winner_2",
    "detection_time", "length", "old_edge_survival", "on_boundary",
]


def frame_summary(st_graph: SpatioTemporalGraph) -> pd.DataFrame:
    """One row per frame.

    A division is counted in the frame where its mother was last observed.
    This is usually the frame before the children appear, or earlier when
    the lineage skipped frames. An elimination is counted in the frame of
    its last observation.
    """
    divisions = [0] * st_graph.size()
    for division in st_graph.divisions():
        divisions[division.mother.frame_no] += 1

    eliminations = [0] * st_graph.size()
    for elimination in st_graph.eliminations():
        eliminations[elimination.time_point] += 1

    rows = []
    for frame in st_graph:
        cells = frame.cells()
        rows.append({
            "frame": frame.frame_no,
            "cells": len(cells),
            "area": float(sum(c.area for c in cells)),
            "divisions": divisions[frame.frame_no],
            "eliminations": eliminations[frame.frame_no],
            "border_cells": sum(1 for c in cells if c.on_boundary()),
            "tracked_cells": sum(1 for c in cells if c.is_tracked()),
        })
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def cells_table(st_graph: SpatioTemporalGraph) -> pd.DataFrame:
    """One row per cell of every frame."""
    rows = []
    for frame in st_graph:
        for cell in frame:
            c = cell.centroid
            rows.append({
                "frame": frame.frame_no,
                "track_id": cell.track_id,
                "status": cell.status.name,
                "centroid_x": c.x,
                "centroid_y": c.y,
                "area": cell.area,
                "on_boundary": cell.on_boundary(),
                "first_track_id": cell.first.track_id if cell.first is not None else -1,
            })
    return pd.DataFrame(rows, columns=CELL_COLUMNS)


def divisions_table(st_graph: SpatioTemporalGraph) -> pd.DataFrame:
    rows = [
        {
            "time_point": d.time_point,
            "mother_track_id": d.mother.track_id,
            "child1_track_id": d.child1.track_id,
            "child2_track_id": d.child2.track_id,
        }
        for d in st_graph.divisions()
    ]
    return pd.DataFrame(rows, columns=DIVISION_COLUMNS)


def eliminations_table(st_graph: SpatioTemporalGraph) -> pd.DataFrame:
    rows = [
        {
            "time_point": e.time_point,
            "track_id": e.track_id,
            "centroid_x": e.cell.centroid.x,
            "centroid_y": e.cell.centroid.y,
        }
        for e in st_graph.eliminations()
    ]
    return pd.DataFrame(rows, columns=ELIMINATION_COLUMNS)


def transitions_table(transitions: Iterable) -> pd.DataFrame:
    """One row per T1 transition, winners are -1 when unresolved."""
    rows = []
    for t in transitions:
        rows.append({
            "loser_1": t.loser_nodes[0],
            "loser_2": t.loser_nodes[1],
            "winner_1": t.winner_nodes[0],
            "winner_2": t.winner_nodes[1],
            "detection_time": t.detection_time,
            "length": t.length(),
            "old_edge_survival": t.old_edge_survival_length,
            "on_boundary": t.on_boundary(),
        })
    return pd.DataFrame(rows, columns=TRANSITION_COLUMNS)


def always_tracked_lineages(st_graph: SpatioTemporalGraph) -> Set[int]:
    """Track IDs of first-frame lineages still tracked in the last frame."""
    if st_graph.size() == 0:
        return set()

    last_frame_no = st_graph.size() - 1
    lineages = set()
    for cell in st_graph.frame(0):
        if cell.first is not cell:
            continue
        last = cell.last()
        if last.frame_no == last_frame_no and last.is_tracked():
            lineages.add(cell.track_id)

    logger.debug("%d lineages tracked through all %d frames", len(lineages), st_graph.size())
    return lineages
