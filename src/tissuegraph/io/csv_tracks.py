"""Restore a tracking pass from saved CSV tables.

``PipelineResult.save`` writes ``cells.csv``, ``divisions.csv`` and
``eliminations.csv``. :class:`CsvTrackReader` applies them to a graph
rebuilt from the same polygons, so a tracked graph can be reloaded
without running the tracker again.

Rows of ``cells.csv`` are matched to the cell whose polygon contains the
saved centroid, or whose centroid lies within ``tolerance`` of it. Links
are rebuilt from ``first_track_id``: consecutive cells of a lineage are
chained when at most ``link_range`` frames apart. Cells carrying a status
code keep it after being linked.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pandas as pd
from shapely.geometry import Point
from shapely.strtree import STRtree

from tissuegraph.contracts import require
from tissuegraph.graphs import Cell, Division, Elimination, FrameGraph, SpatioTemporalGraph, TrackStatus
from tissuegraph.tracking import TrackingReport, most_recent_correspondence, update_correspondence

__all__ = ['CsvTrackReader', 'read_tracking']

logger = logging.getLogger(__name__)

CELLS_FILE = "cells.csv"
DIVISIONS_FILE = "divisions.csv"
ELIMINATIONS_FILE = "eliminations.csv"


class CsvTrackReader:
    """Drop-in replacement for a tracking pass that reads saved tables.

    Parameters
    ----------
    st_graph : SpatioTemporalGraph
        Graph built from the polygons the tables were written for. It is
        mutated in place; earlier links are dropped.
    input_dir : str or Path
        Directory holding the CSV tables.
    link_range : int, default 5
        Largest frame gap bridged between two cells of a lineage.
    tolerance : float, default 1e-6
        Centroid distance accepted when no polygon contains a saved centroid.

    Examples
    --------
    >>> st_graph = build_spatio_temporal_graph(read_wkt_series("data/frames"))
    >>> report = CsvTrackReader(st_graph, "output").track()
    >>> st_graph.has_tracking()
    True
    """

    def __init__(self, st_graph: SpatioTemporalGraph, input_dir: Union[str, Path],
                 link_range: int = 5, tolerance: float = 1e-6):
        require(link_range >= 1, f"Tracking contract violated: link range {link_range} < 1")
        self.st_graph = st_graph
        self.input_dir = Path(input_dir)
        self.link_range = link_range
        self.tolerance = tolerance

        self._index: Dict[int, Tuple[List[Cell], STRtree, STRtree]] = {}
        self._last_seen: Dict[int, Cell] = {}

    def track(self) -> TrackingReport:
        """Apply the saved track IDs, links, divisions and eliminations.

        Raises
        ------
        FileNotFoundError
            If ``cells.csv`` is missing. The event tables are optional.
        """
        cells_path = self.input_dir / CELLS_FILE
        if not cells_path.exists():
            raise FileNotFoundError(f"Tracking table not found: {cells_path}")

        self._reset()
        report = TrackingReport(frames=self.st_graph.size())
        highest = -1

        cells = pd.read_csv(cells_path)
        for t, rows in cells.groupby("frame", sort=True):
            t = int(t)
            if t >= self.st_graph.size():
                logger.warning("Skipping %d rows of frame %d, graph has %d frames",
                               len(rows), t, self.st_graph.size())
                continue
            for row in rows.itertuples(index=False):
                cell = self._cell_at(t, row.centroid_x, row.centroid_y)
                if cell is None:
                    logger.warning("Frame %d: no cell at (%.2f, %.2f) for track %d",
                                   t, row.centroid_x, row.centroid_y, row.track_id)
                    continue
                cell.boundary = bool(row.on_boundary)
                report.matched += self._restore_cell(cell, int(row.track_id), int(row.first_track_id))
                highest = max(highest, int(row.track_id), int(row.first_track_id))

        report.divisions = self._read_divisions()
        report.eliminated = self._read_eliminations()

        for frame in self.st_graph:
            for cell in frame:
                status = cell.status
                if status is TrackStatus.MISSING_PREVIOUS:
                    report.missing_previous += 1
                elif status is TrackStatus.MISSING_NEXT:
                    report.missing_next += 1
                elif status is TrackStatus.MISSING_BOTH:
                    report.missing_both += 1
        if self.st_graph.size() > 0:
            report.lineages = sum(1 for c in self.st_graph.frame(0) if c.first is c)

        self._index.clear()
        self._last_seen.clear()
        self.st_graph.update_track_id(highest)
        self.st_graph.set_tracking(True)

        logger.info(
            "Restored tracking from %s: %d lineages, %d divisions, %d eliminations",
            self.input_dir, report.lineages, report.divisions, report.eliminated,
        )
        return report

    def _reset(self) -> None:
        self._index.clear()
        self._last_seen.clear()
        for frame in self.st_graph:
            for cell in frame:
                cell.previous = None
                cell.next = None
                cell.first = None
                cell.division = None
                cell.elimination = None
                cell.track_id = int(TrackStatus.UNTRACKED)
        self.st_graph.set_tracking(False)

    def _restore_cell(self, cell: Cell, track_id: int, lineage: int) -> int:
        """Set the track ID of ``cell`` and chain it to its lineage; 1 if linked."""
        linked = 0
        if lineage >= 0:
            previous = self._last_seen.get(lineage)
            if previous is not None and 0 < cell.frame_no - previous.frame_no <= self.link_range:
                update_correspondence(cell, previous)
                linked = 1
            else:
                cell.first = cell
                cell.track_id = lineage
            self._last_seen[lineage] = cell
        elif track_id == lineage and track_id != int(TrackStatus.UNTRACKED):
            # Lineage root that was tagged in its own frame
            cell.first = cell

        if track_id < 0 or lineage < 0:
            cell.track_id = track_id
        return linked

    def _read_divisions(self) -> int:
        table = self._read_optional(DIVISIONS_FILE)
        count = 0
        for row in table.itertuples(index=False):
            t = int(row.time_point)
            if t >= self.st_graph.size():
                continue
            root = self._last_seen.get(int(row.mother_track_id))
            child1 = self._by_track_id(self.st_graph.frame(t), int(row.child1_track_id))
            child2 = self._by_track_id(self.st_graph.frame(t), int(row.child2_track_id))
            if root is None or child1 is None or child2 is None:
                logger.warning("Skipping division of lineage %d at frame %d, cells not found",
                               row.mother_track_id, t)
                continue
            Division(most_recent_correspondence(root.first, t), child1, child2, t)
            count += 1
        return count

    def _read_eliminations(self) -> int:
        table = self._read_optional(ELIMINATIONS_FILE)
        count = 0
        for row in table.itertuples(index=False):
            t = int(row.time_point)
            if t >= self.st_graph.size():
                continue
            cell = self._cell_at(t, row.centroid_x, row.centroid_y)
            if cell is None:
                logger.warning("Skipping elimination of lineage %d at frame %d, cell not found",
                               row.track_id, t)
                continue
            Elimination(cell, t, int(row.track_id))
            count += 1
        return count

    def _read_optional(self, name: str) -> pd.DataFrame:
        path = self.input_dir / name
        if not path.exists():
            logger.debug("No %s in %s", name, self.input_dir)
            return pd.DataFrame()
        return pd.read_csv(path)

    def _cell_at(self, t: int, x: float, y: float) -> Optional[Cell]:
        if t not in self._index:
            cells = self.st_graph.frame(t).cells()
            self._index[t] = (
                cells,
                STRtree([c.geometry for c in cells]),
                STRtree([c.centroid for c in cells]),
            )
        cells, polygons, centroids = self._index[t]
        if not cells:
            return None

        point = Point(x, y)
        hits = polygons.query(point, predicate="within")
        if len(hits) > 0:
            return cells[int(min(hits))]

        nearest = centroids.query_nearest(point, max_distance=self.tolerance)
        if len(nearest) > 0:
            return cells[int(min(nearest))]
        return None

    @staticmethod
    def _by_track_id(frame: FrameGraph, track_id: int) -> Optional[Cell]:
        try:
            return frame.cell_by_track_id(track_id)
        except KeyError:
            return None


def read_tracking(st_graph: SpatioTemporalGraph, input_dir: Union[str, Path],
                  link_range: int = 5) -> TrackingReport:
    """Restore the tracking saved in ``input_dir`` onto ``st_graph``."""
    return CsvTrackReader(st_graph, input_dir, link_range=link_range).track()
