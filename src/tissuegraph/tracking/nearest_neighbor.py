"""Nearest-neighbour cell tracking resolved by stable matching.

Cells of frame ``t`` are linked to lineages started in earlier frames.
A previous cell is a candidate parent of a later cell when the later
polygon contains its centroid; candidates are collected up to
``link_range`` frames ahead. For every frame the lineage roots ("grooms")
and the frame's cells ("brides") rank each other by centroid distance and
are paired with deferred acceptance.

Brides left over are rescued (late re-link), explained as divisions, or
reported missing. Grooms left over, and lineages that found no candidate
at all, end in their most recent frame and are eventually tagged as lost
or eliminated unless a later frame picks them up again.

Rules
-----
- Frames are processed in strict temporal order.
- Links are written only once the matching of a frame is final.
- Ambiguous outcomes are tagged on the cells with a
  :class:`~tissuegraph.graphs.TrackStatus` code, never raised.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from shapely.strtree import STRtree

from tissuegraph.contracts import assert_frames_contiguous, require
from tissuegraph.graphs import Cell, Division, Elimination, SpatioTemporalGraph, TrackStatus
from tissuegraph.tracking.stable_marriage import StableMatching, stable_match

__all__ = [
    'NearestNeighborTracking',
    'TrackingReport',
    'track_cells',
    'most_recent_correspondence',
    'update_correspondence',
]

logger = logging.getLogger(__name__)


@dataclass
class TrackingReport:
    """Counts collected during one tracking pass."""
    frames: int = 0
    lineages: int = 0
    matched: int = 0
    rescued: int = 0
    divisions: int = 0
    missing_previous: int = 0
    missing_next: int = 0
    missing_both: int = 0
    eliminated: int = 0


def most_recent_correspondence(first: Cell, time_point: int) -> Cell:
    """Latest cell of the chain rooted at ``first`` observed before ``time_point``."""
    cell = first
    while cell.next is not None and cell.next.frame_no < time_point:
        cell = cell.next
    return cell


def update_correspondence(cell: Cell, previous: Cell) -> None:
    """Append ``cell`` to the chain ending in ``previous``."""
    require(
        previous.first is not None,
        f"Tracking contract violated: {previous!r} is not part of a lineage",
    )
    cell.previous = previous
    previous.next = cell
    cell.first = previous.first
    cell.track_id = previous.first.track_id


class NearestNeighborTracking:
    """Stable-marriage correspondence engine.

    Parameters
    ----------
    st_graph : SpatioTemporalGraph
        Graph with at least two contiguous frames. It is mutated in place.
    link_range : int, default 5
        Number of frames searched ahead for correspondences.

    Examples
    --------
    >>> tracker = NearestNeighborTracking(st_graph, link_range=2)
    >>> report = tracker.track()
    >>> st_graph.has_tracking()
    True
    """

    def __init__(self, st_graph: SpatioTemporalGraph, link_range: int = 5):
        require(link_range >= 1, f"Tracking contract violated: link range {link_range} < 1")
        self.st_graph = st_graph
        self.link_range = link_range

        # Transient parent candidates, keyed by the later cell
        self._candidates: Dict[Cell, List[Cell]] = {}
        self._trees: Dict[int, Tuple[STRtree, List[Cell]]] = {}
        self._frame0_union = None

    def track(self) -> TrackingReport:
        """Run the tracking pass over all frames.

        Returns
        -------
        TrackingReport

        Raises
        ------
        ContractViolation
            If the graph has fewer than two frames or is malformed.
        """
        st_graph = self.st_graph
        assert_frames_contiguous(st_graph, min_frames=2)

        self._reset()
        self._frame0_union = st_graph.frame(0).union()
        report = TrackingReport(frames=st_graph.size())

        # Insertion-ordered sets
        lost_previous: Dict[Cell, None] = {}
        lost_next: Dict[Cell, None] = {}

        for t in range(st_graph.size()):
            if t == 0:
                self._start_lineages()
                report.lineages = st_graph.frame(0).size()
            else:
                matching = self._link_time_point(t)
                report.matched += len(matching.marriage)
                unmatched_grooms = list(matching.unmatched_grooms)

                for bride in matching.unmatched_brides:
                    self._resolve_bride(bride, t, unmatched_grooms, lost_previous, report)

                for groom in unmatched_grooms:
                    lost_next[most_recent_correspondence(groom, t)] = None

                # Lineages without any candidate in frame t never became grooms
                for cell in st_graph.frame(t - 1):
                    if cell.first is None or cell.next is not None:
                        continue
                    if cell.division is not None and cell.division.mother is cell:
                        continue
                    lost_next[cell] = None

            self._collect_candidates(t)

        self._tag_lost(lost_previous, lost_next, report)

        self._candidates.clear()
        self._trees.clear()
        st_graph.set_tracking(True)

        logger.info(
            "Tracked %d frames: %d lineages, %d divisions, %d eliminations, "
            "%d missing previous, %d missing next",
            report.frames, report.lineages, report.divisions, report.eliminated,
            report.missing_previous, report.missing_next + report.missing_both,
        )
        return report

    # ------------------------------------------------------------------
    # Frame steps
    # ------------------------------------------------------------------

    def _reset(self) -> None:
        """Drop links and tags left by an earlier pass."""
        self._candidates.clear()
        self._trees.clear()
        for frame in self.st_graph:
            for cell in frame:
                cell.previous = None
                cell.next = None
                cell.first = None
                cell.division = None
                cell.elimination = None
                cell.track_id = int(TrackStatus.UNTRACKED)
        self.st_graph.set_tracking(False)

    def _start_lineages(self) -> None:
        for cell in self.st_graph.frame(0):
            cell.first = cell
            cell.track_id = self.st_graph.allocate_track_id()

    def _collect_candidates(self, t: int) -> None:
        """Register the cells of frame ``t`` as parent candidates ahead."""
        st_graph = self.st_graph
        current_cells = st_graph.frame(t).cells()

        for k in range(1, self.link_range + 1):
            if t + k >= st_graph.size():
                break
            tree, later_cells = self._tree_of(t + k)
            for current in current_cells:
                hits = tree.query(current.centroid, predicate="within")
                for i in sorted(hits):
                    self._candidates.setdefault(later_cells[i], []).append(current)

    def _tree_of(self, t: int) -> Tuple[STRtree, List[Cell]]:
        if t not in self._trees:
            cells = self.st_graph.frame(t).cells()
            self._trees[t] = (STRtree([c.geometry for c in cells]), cells)
        return self._trees[t]

    def _link_time_point(self, t: int) -> StableMatching:
        """Match lineage roots against the cells of frame ``t`` and link them."""
        frame = self.st_graph.frame(t)
        groom_scores: Dict[Cell, List[Tuple[float, int, Cell]]] = {}
        bride_scores: Dict[Cell, List[Tuple[float, Tuple[int, int], Cell]]] = {}

        for bride in frame:
            candidates = self._candidates.pop(bride, [])

            best: Dict[Cell, float] = {}
            for candidate in candidates:
                first = candidate.first
                if first is None:
                    continue
                d = candidate.distance_to(bride)
                if first not in best or d < best[first]:
                    best[first] = d

            if not best:
                if self._frame0_union.contains(bride.centroid):
                    bride_scores[bride] = []
                continue

            bride_scores[bride] = [(d, self._root_order(first), first) for first, d in best.items()]
            for first, d in best.items():
                groom_scores.setdefault(first, []).append((d, frame.index_of(bride), bride))

        groom_prefs = {g: [b for _, _, b in sorted(s, key=_score_key)] for g, s in groom_scores.items()}
        bride_prefs = {b: [g for _, _, g in sorted(s, key=_score_key)] for b, s in bride_scores.items()}

        matching = stable_match(groom_prefs, bride_prefs)

        for bride, groom in matching.marriage.items():
            update_correspondence(bride, most_recent_correspondence(groom, t))

        logger.debug(
            "Frame %d: %d matched, %d unmatched cells, %d lineages without candidate",
            t, len(matching.marriage), len(matching.unmatched_brides), len(matching.unmatched_grooms),
        )
        return matching

    def _root_order(self, first: Cell) -> Tuple[int, int]:
        return first.frame_no, self.st_graph.frame(first.frame_no).index_of(first)

    # ------------------------------------------------------------------
    # Unmatched cells
    # ------------------------------------------------------------------

    def _rescue_candidate(self, bride: Cell, t: int) -> Optional[Cell]:
        """Lineage root of the closest earlier tracked cell containing the bride centroid."""
        for k in range(1, self.link_range + 1):
            if t - k < 0:
                break
            tree, cells = self._tree_of(t - k)
            hits = sorted(tree.query(bride.centroid, predicate="within"))
            for i in hits:
                cell = cells[i]
                if cell.is_tracked() and cell.first is not None:
                    return cell.first
        return None

    def _resolve_bride(self, bride: Cell, t: int, unmatched_grooms: List[Cell],
                       lost_previous: Dict[Cell, None], report: TrackingReport) -> None:
        rescued = self._rescue_candidate(bride, t)
        if rescued is None:
            logger.warning("Frame %d: no rescue candidate for cell at %s", t, _fmt(bride))
            lost_previous[bride] = None
            return

        last = most_recent_correspondence(rescued, t)

        if rescued in unmatched_grooms:
            update_correspondence(bride, last)
            unmatched_grooms.remove(rescued)
            lost_previous[bride] = None
            report.rescued += 1
            logger.debug("Frame %d: rescued lineage %d", t, rescued.track_id)
            return

        if not last.geometry.contains(bride.centroid):
            logger.warning(
                "Frame %d: cell at %s lies outside the previous geometry of lineage %d",
                t, _fmt(bride), rescued.track_id,
            )
            lost_previous[bride] = None
            return

        frame = self.st_graph.frame(t)
        siblings = [
            n for n in frame.neighbors_of(bride)
            if n.first is rescued and last.geometry.contains(n.centroid)
        ]
        if len(siblings) != 1:
            logger.warning(
                "Frame %d: failed division of lineage %d, %d candidate siblings",
                t, rescued.track_id, len(siblings),
            )
            lost_previous[bride] = None
            return

        self._divide(last, bride, siblings[0], t)
        report.divisions += 1

    def _divide(self, mother: Cell, child: Cell, sibling: Cell, t: int) -> Division:
        """Start two new lineages below ``mother``."""
        if sibling.previous is not None:
            sibling.previous.next = None
        sibling.previous = None
        mother.next = None

        for cell in (child, sibling):
            cell.first = cell
            cell.track_id = self.st_graph.allocate_track_id()

        division = Division(mother, child, sibling, t)
        logger.info(
            "Frame %d: division %d -> (%d, %d)",
            t, mother.track_id, child.track_id, sibling.track_id,
        )
        return division

    def _tag_lost(self, lost_previous: Dict[Cell, None], lost_next: Dict[Cell, None],
                  report: TrackingReport) -> None:
        for cell in lost_previous:
            cell.mark(TrackStatus.MISSING_PREVIOUS)
        report.missing_previous = len(lost_previous)

        for cell in lost_next:
            # Lineage picked up again in a later frame
            if cell.next is not None:
                continue
            # Divided after a gap; the lineage ended in its children
            if cell.division is not None and cell.division.mother is cell:
                continue
            if cell in lost_previous:
                cell.mark(TrackStatus.MISSING_BOTH)
                report.missing_both += 1
            elif cell.on_boundary():
                cell.mark(TrackStatus.MISSING_NEXT)
                report.missing_next += 1
            else:
                track_id = cell.track_id
                cell.mark(TrackStatus.ELIMINATED)
                Elimination(cell, cell.frame_no, track_id)
                report.eliminated += 1


def _score_key(entry):
    return entry[0], entry[1]


def _fmt(cell: Cell) -> str:
    c = cell.centroid
    return f"({c.x:.1f}, {c.y:.1f})"


def track_cells(st_graph: SpatioTemporalGraph, config) -> TrackingReport:
    """Track ``st_graph`` with the link range of a resolved config."""
    return NearestNeighborTracking(st_graph, link_range=config.tracking.link_range).track()
