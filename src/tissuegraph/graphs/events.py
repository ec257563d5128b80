"""Lineage events: divisions and eliminations."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tissuegraph.graphs.cell import Cell

__all__ = ['Division', 'Elimination']


@dataclass(frozen=True, eq=False)
class Division:
    """A mother cell splitting into two children.

    ``time_point`` is the frame in which the children first appear. The
    event registers itself on the mother and on both children.
    """
    mother: "Cell"
    child1: "Cell"
    child2: "Cell"
    time_point: int

    def __post_init__(self):
        for cell in (self.mother, self.child1, self.child2):
            cell.division = self

    def children(self):
        return self.child1, self.child2

    def is_child(self, cell: "Cell") -> bool:
        return cell is self.child1 or cell is self.child2


@dataclass(frozen=True, eq=False)
class Elimination:
    """A cell whose lineage has no successor after ``time_point``."""
    cell: "Cell"
    time_point: int
    track_id: int = field(default=-1)

    def __post_init__(self):
        self.cell.elimination = self
