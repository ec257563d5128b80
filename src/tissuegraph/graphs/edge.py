"""Neighbour relationship between two cells of one frame."""

from typing import Optional, TYPE_CHECKING

from shapely.geometry.base import BaseGeometry

from tissuegraph.graphs import pairing

if TYPE_CHECKING:
    from tissuegraph.graphs.cell import Cell

__all__ = ['Edge']


class Edge:
    """Undirected adjacency between ``source`` and ``target``.

    The time-invariant identity of an edge is its pair code, the pairing of
    both endpoint track IDs. It only exists once both endpoints are tracked.
    """

    __slots__ = ('source', 'target', '_geometry')

    def __init__(self, source: "Cell", target: "Cell"):
        self.source = source
        self.target = target
        self._geometry: Optional[BaseGeometry] = None

    def __repr__(self):
        return f"Edge({self.source.track_id}, {self.target.track_id})"

    def other(self, cell: "Cell") -> "Cell":
        if cell is self.source:
            return self.target
        if cell is self.target:
            return self.source
        raise ValueError(f"{cell!r} is not an endpoint of {self!r}")

    def is_tracked(self) -> bool:
        """True when both endpoints carry a valid track ID."""
        return self.source.is_tracked() and self.target.is_tracked()

    @property
    def pair_code(self) -> int:
        """Pairing of the endpoint track IDs.

        Raises
        ------
        ValueError
            If either endpoint is not tracked.
        """
        return pairing.encode(self.source.track_id, self.target.track_id)

    @property
    def geometry(self) -> BaseGeometry:
        """Shared boundary of the two cells, computed on first access.

        Degenerate contacts give an empty or point geometry; callers treat
        zero length as no shared boundary.
        """
        if self._geometry is None:
            self._geometry = self.source.geometry.intersection(self.target.geometry)
        return self._geometry

    def has_geometry(self) -> bool:
        return self._geometry is not None

    @property
    def length(self) -> float:
        return self.geometry.length
