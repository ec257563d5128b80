"""Planar graph of the cells segmented in one frame.

Vertices are :class:`~tissuegraph.graphs.cell.Cell` objects and edges are
neighbour relationships (shared boundaries). Adjacency is stored in a
``networkx.Graph``, so neighbour lookups always reflect the current edge
set. Two lookup indices are maintained on top of it:

- track ID -> Cell
- pair code -> Edge

Both indices are rebuilt lazily and invalidated whenever a cell changes its
track ID or the vertex/edge set changes.
"""

import logging
from typing import Dict, Iterator, List, Optional

import networkx as nx
from shapely.ops import unary_union
from shapely.geometry.base import BaseGeometry

from tissuegraph.contracts.base import require
from tissuegraph.graphs.cell import Cell
from tissuegraph.graphs.edge import Edge

__all__ = ['FrameGraph']

logger = logging.getLogger(__name__)

EDGE_KEY = "edge"


class FrameGraph:
    """Undirected cell graph for a single time point.

    Parameters
    ----------
    frame_no : int, default 0
        Time index represented by this graph.

    Examples
    --------
    >>> frame = FrameGraph(0)
    >>> a, b = Cell(box(0, 0, 1, 1)), Cell(box(1, 0, 2, 1))
    >>> frame.add_cell(a); frame.add_cell(b)
    >>> edge = frame.add_edge(a, b)
    >>> frame.neighbors_of(a)
    [b]
    """

    def __init__(self, frame_no: int = 0):
        self._frame_no = frame_no
        self._graph = nx.Graph()
        self._order: Dict[Cell, int] = {}
        self._next_index = 0

        self._track_index: Optional[Dict[int, Cell]] = None
        self._pair_index: Optional[Dict[int, Edge]] = None
        self._union: Optional[BaseGeometry] = None

    def __repr__(self):
        return f"FrameGraph(frame_no={self._frame_no}, cells={len(self)}, edges={self._graph.number_of_edges()})"

    @property
    def frame_no(self) -> int:
        return self._frame_no

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_cell(self, cell: Cell) -> None:
        """Add a cell; adding a cell already present is a no-op."""
        if cell in self._order:
            return
        self._graph.add_node(cell)
        self._order[cell] = self._next_index
        self._next_index += 1
        cell.frame_no = self._frame_no
        cell._on_track_change = self._invalidate_indices
        self._invalidate_indices()
        self._union = None

    def remove_cell(self, cell: Cell) -> None:
        """Remove a cell together with all its edges."""
        require(cell in self._order, f"FrameGraph contract violated: {cell!r} not in frame {self._frame_no}")
        self._graph.remove_node(cell)
        del self._order[cell]
        cell._on_track_change = None
        self._invalidate_indices()
        self._union = None

    def add_edge(self, c1: Cell, c2: Cell) -> Edge:
        """Connect two cells of this frame and return the edge object."""
        require(
            c1 in self._order and c2 in self._order,
            f"FrameGraph contract violated: edge endpoints must belong to frame {self._frame_no}",
        )
        require(c1 is not c2, "FrameGraph contract violated: self loops are not allowed")

        if self._graph.has_edge(c1, c2):
            return self._graph.edges[c1, c2][EDGE_KEY]

        edge = Edge(c1, c2)
        self._graph.add_edge(c1, c2, **{EDGE_KEY: edge})
        self._pair_index = None
        return edge

    def remove_edge(self, c1: Cell, c2: Cell) -> None:
        require(
            self._graph.has_edge(c1, c2),
            f"FrameGraph contract violated: no edge between {c1!r} and {c2!r}",
        )
        self._graph.remove_edge(c1, c2)
        self._pair_index = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def __iter__(self) -> Iterator[Cell]:
        return iter(self._order)

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, cell) -> bool:
        return cell in self._order

    def size(self) -> int:
        """Number of cells in the frame."""
        return len(self._order)

    def cells(self) -> List[Cell]:
        """Cells in insertion order."""
        return list(self._order)

    def index_of(self, cell: Cell) -> int:
        """Insertion index of a cell, used for deterministic ordering."""
        return self._order[cell]

    def edges(self) -> List[Edge]:
        return [data[EDGE_KEY] for _, _, data in self._graph.edges(data=True)]

    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    def neighbors_of(self, cell: Cell) -> List[Cell]:
        """Neighbouring cells, sorted by insertion index."""
        return sorted(self._graph.neighbors(cell), key=self._order.__getitem__)

    def degree(self, cell: Cell) -> int:
        return self._graph.degree(cell)

    def has_edge(self, c1: Cell, c2: Cell) -> bool:
        return self._graph.has_edge(c1, c2)

    def get_edge(self, c1: Cell, c2: Cell) -> Edge:
        return self._graph.edges[c1, c2][EDGE_KEY]

    def has_track_id(self, track_id: int) -> bool:
        return track_id >= 0 and track_id in self._get_track_index()

    def cell_by_track_id(self, track_id: int) -> Cell:
        """Cell carrying ``track_id``.

        Raises
        ------
        KeyError
            If no cell of the frame has that track ID.
        """
        return self._get_track_index()[track_id]

    def edge_by_pair_code(self, code: int) -> Edge:
        """Edge whose tracked endpoints pair to ``code``.

        Raises
        ------
        KeyError
            If no tracked edge of the frame has that pair code.
        """
        return self._get_pair_index()[code]

    def has_pair_code(self, code: int) -> bool:
        return code in self._get_pair_index()

    def tracked_edges(self) -> List[Edge]:
        """Edges whose both endpoints are tracked."""
        return [e for e in self.edges() if e.is_tracked()]

    def union(self) -> BaseGeometry:
        """Union of all cell polygons (cached)."""
        if self._union is None:
            self._union = unary_union([c.geometry for c in self._order])
        return self._union

    def to_networkx(self) -> nx.Graph:
        """Copy of the underlying graph."""
        return self._graph.copy()

    # ------------------------------------------------------------------
    # Indices
    # ------------------------------------------------------------------

    def _invalidate_indices(self) -> None:
        self._track_index = None
        self._pair_index = None

    def _get_track_index(self) -> Dict[int, Cell]:
        if self._track_index is None:
            index: Dict[int, Cell] = {}
            for cell in self._order:
                if cell.track_id < 0:
                    continue
                require(
                    cell.track_id not in index,
                    f"FrameGraph contract violated: track ID {cell.track_id} used twice in frame {self._frame_no}",
                )
                index[cell.track_id] = cell
            self._track_index = index
        return self._track_index

    def _get_pair_index(self) -> Dict[int, Edge]:
        if self._pair_index is None:
            # Duplicate track IDs are rejected while building the track index
            self._get_track_index()
            self._pair_index = {e.pair_code: e for e in self.edges() if e.is_tracked()}
        return self._pair_index
