"""Cell entity: one segmented polygon at one time point.

A Cell carries its polygon, a cached centroid, the lineage identifier
assigned by tracking and the temporal links to its correspondents in
neighbouring frames. Cells are owned by their FrameGraph; links between
cells of different frames are plain relations managed by the tracking
engines.
"""

import logging
from enum import IntEnum
from typing import Callable, Optional, TYPE_CHECKING

from shapely.geometry import Point, Polygon

from tissuegraph.contracts.base import require

if TYPE_CHECKING:
    from tissuegraph.graphs.events import Division, Elimination

__all__ = ['Cell', 'TrackStatus']

logger = logging.getLogger(__name__)


class TrackStatus(IntEnum):
    """Tracking state of a cell.

    Non-negative track IDs are valid lineage identifiers and map to
    ``TRACKED``. The negative members are the reserved status codes stored
    in ``Cell.track_id`` when tracking could not resolve the cell.
    """
    TRACKED = 0
    UNTRACKED = -1
    MISSING_PREVIOUS = -2
    MISSING_NEXT = -3
    MISSING_BOTH = -4
    DIVIDING = -5
    SIBLING_MISSING = -6
    ELIMINATED = -7
    SIBLING_ELIMINATED = -8

    @classmethod
    def of(cls, track_id: int) -> "TrackStatus":
        """Map a raw track ID to its status."""
        if track_id >= 0:
            return cls.TRACKED
        return cls(track_id)


class Cell:
    """Polygonal cell of a single frame.

    Parameters
    ----------
    geometry : shapely.geometry.Polygon
        Cell outline. Must be a non-empty polygon.
    cell_id : int, optional
        Label of the cell in its source segmentation (informative only).

    Notes
    -----
    - ``previous``/``next`` link to the corresponding cell in an earlier or
      later frame (at most one each), ``first`` to the root of the lineage.
    - ``track_id`` holds either a lineage ID (>= 0) or a reserved
      :class:`TrackStatus` code.
    """

    def __init__(self, geometry: Polygon, cell_id: Optional[int] = None):
        require(
            geometry is not None and not geometry.is_empty,
            f"Cell contract violated: cell {cell_id} has no geometry",
        )
        require(
            geometry.geom_type == "Polygon",
            f"Cell contract violated: cell {cell_id} geometry is {geometry.geom_type}, expected Polygon",
        )

        self._geometry = geometry
        self._centroid: Optional[Point] = None
        self.cell_id = cell_id
        self.frame_no = -1

        self._track_id = int(TrackStatus.UNTRACKED)
        self._on_track_change: Optional[Callable[[], None]] = None

        self.boundary = False
        self.previous: Optional["Cell"] = None
        self.next: Optional["Cell"] = None
        self.first: Optional["Cell"] = None

        self.division: Optional["Division"] = None
        self.elimination: Optional["Elimination"] = None

    def __repr__(self):
        c = self.centroid
        return f"Cell(frame={self.frame_no}, track_id={self._track_id}, centroid=({c.x:.1f}, {c.y:.1f}))"

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    @property
    def geometry(self) -> Polygon:
        return self._geometry

    @property
    def centroid(self) -> Point:
        if self._centroid is None:
            self._centroid = self._geometry.centroid
        return self._centroid

    @property
    def area(self) -> float:
        return self._geometry.area

    def distance_to(self, other: "Cell") -> float:
        """Euclidean distance between the two centroids."""
        return self.centroid.distance(other.centroid)

    # ------------------------------------------------------------------
    # Tracking state
    # ------------------------------------------------------------------

    @property
    def track_id(self) -> int:
        return self._track_id

    @track_id.setter
    def track_id(self, value: int):
        value = int(value)
        require(
            value >= int(TrackStatus.SIBLING_ELIMINATED),
            f"Cell contract violated: {value} is not a track ID or reserved status code",
        )
        if value != self._track_id:
            self._track_id = value
            if self._on_track_change is not None:
                self._on_track_change()

    @property
    def status(self) -> TrackStatus:
        return TrackStatus.of(self._track_id)

    def mark(self, status: TrackStatus) -> None:
        """Replace the track ID with a reserved status code."""
        require(
            status is not TrackStatus.TRACKED,
            "Cell contract violated: TRACKED is not a reserved code, assign track_id instead",
        )
        self.track_id = int(status)

    def is_tracked(self) -> bool:
        return self._track_id >= 0

    def on_boundary(self) -> bool:
        return self.boundary

    def has_next(self) -> bool:
        return self.next is not None

    def has_previous(self) -> bool:
        return self.previous is not None

    def has_observed_division(self) -> bool:
        return self.division is not None

    def has_observed_elimination(self) -> bool:
        return self.elimination is not None

    def last(self) -> "Cell":
        """Follow ``next`` links to the most recent cell of the chain."""
        cell = self
        while cell.next is not None:
            cell = cell.next
        return cell
