"""Tests for nearest-neighbour cell tracking."""

import logging

import pytest
from shapely.geometry import box

pytestmark = pytest.mark.unit

from tissuegraph.contracts import ContractViolation, assert_lineage_consistent
from tissuegraph.graphs import TrackStatus, build_spatio_temporal_graph
from tissuegraph.tracking import (
    NearestNeighborTracking,
    most_recent_correspondence,
    track_cells,
)

from tests.helpers.tiling import grid_polygons, grid_with_split


def _by_cell_id(frame):
    return {c.cell_id: c for c in frame}


class TestStaticTissue:
    """Tracking of identical frames."""

    def test_ids_persist(self, static_grid_graph):
        report = NearestNeighborTracking(static_grid_graph).track()

        assert static_grid_graph.has_tracking()
        assert report.frames == 3
        assert report.lineages == 9
        assert report.matched == 18
        for frame in static_grid_graph:
            assert [c.track_id for c in frame] == list(range(9))

    def test_chains_link_consecutive_frames(self, static_grid_graph):
        NearestNeighborTracking(static_grid_graph).track()

        f0, f1, f2 = (static_grid_graph.frame(t).cells() for t in range(3))
        for a, b, c in zip(f0, f1, f2):
            assert a.next is b and b.previous is a
            assert b.next is c and c.previous is b
            assert c.first is a and a.first is a
        assert_lineage_consistent(static_grid_graph)

    def test_no_events(self, static_grid_graph):
        report = NearestNeighborTracking(static_grid_graph).track()
        assert report.divisions == 0
        assert report.eliminated == 0
        assert static_grid_graph.divisions() == []
        assert static_grid_graph.eliminations() == []

    def test_shifted_frames(self):
        """Small drift keeps centroids inside the next polygons."""
        st_graph = build_spatio_temporal_graph([
            grid_polygons(3, 3),
            grid_polygons(3, 3, dx=0.2, dy=-0.1),
            grid_polygons(3, 3, dx=0.4, dy=-0.2),
        ])
        NearestNeighborTracking(st_graph).track()
        assert [c.track_id for c in st_graph.frame(2)] == list(range(9))

    def test_rerun_resets_previous_pass(self, static_grid_graph):
        tracker = NearestNeighborTracking(static_grid_graph)
        tracker.track()
        report = tracker.track()
        assert report.matched == 18
        assert_lineage_consistent(static_grid_graph)


class TestContracts:
    """Preconditions of the tracking pass."""

    def test_single_frame_rejected(self):
        st_graph = build_spatio_temporal_graph([grid_polygons(2, 2)])
        with pytest.raises(ContractViolation, match="at least 2"):
            NearestNeighborTracking(st_graph).track()

    def test_link_range_must_be_positive(self, static_grid_graph):
        with pytest.raises(ContractViolation, match="link range"):
            NearestNeighborTracking(static_grid_graph, link_range=0)


class TestDivision:
    """Detection of a cell splitting in two."""

    def test_two_way_split(self):
        st_graph = build_spatio_temporal_graph([grid_polygons(3, 3), grid_with_split([0.6])])
        report = NearestNeighborTracking(st_graph).track()

        assert report.divisions == 1
        mother = st_graph.frame(0).cells()[4]
        left, right = st_graph.frame(1).cells()[8:]

        division = mother.division
        assert division is not None
        assert division.mother is mother
        assert division.time_point == 1
        assert set(division.children()) == {left, right}
        assert mother.next is None
        assert mother.track_id == 4

        # Children start fresh lineages
        assert right.track_id == 9
        assert left.track_id == 10
        assert left.first is left and right.first is right
        assert left.previous is None and right.previous is None
        assert_lineage_consistent(st_graph)

    def test_mother_is_not_eliminated(self):
        st_graph = build_spatio_temporal_graph([grid_polygons(3, 3), grid_with_split([0.6])])
        NearestNeighborTracking(st_graph).track()
        mother = st_graph.frame(0).cells()[4]
        assert mother.is_tracked()
        assert mother.elimination is None

    def test_three_way_split(self):
        """Only one sibling can be explained; the third strip misses its previous."""
        st_graph = build_spatio_temporal_graph([grid_polygons(3, 3), grid_with_split([0.3, 0.7])])
        report = NearestNeighborTracking(st_graph).track()

        left, middle, right = st_graph.frame(1).cells()[8:]
        assert report.divisions == 1
        assert left.division is middle.division is not None
        assert left.track_id == 9
        assert middle.track_id == 10
        assert right.status is TrackStatus.MISSING_PREVIOUS
        assert report.missing_previous == 1

    def test_division_after_gap_keeps_mother(self):
        """Mother last seen two frames before its children is not eliminated."""
        st_graph = build_spatio_temporal_graph([
            grid_polygons(3, 3),
            grid_polygons(3, 3, skip={(1, 1)}),
            grid_with_split([0.6]),
        ])
        report = NearestNeighborTracking(st_graph, link_range=2).track()

        mother = st_graph.frame(0).cells()[4]
        left, right = st_graph.frame(2).cells()[8:]
        assert report.divisions == 1
        assert report.eliminated == 0
        assert mother.division.time_point == 2
        assert set(mother.division.children()) == {left, right}
        assert mother.track_id == 4
        assert mother.elimination is None
        assert st_graph.eliminations() == []
        assert (right.track_id, left.track_id) == (9, 10)

    def test_failed_division_logs_warning(self, caplog):
        st_graph = build_spatio_temporal_graph([grid_polygons(3, 3), grid_with_split([0.3, 0.7])])
        with caplog.at_level(logging.WARNING, logger="tissuegraph.tracking.nearest_neighbor"):
            NearestNeighborTracking(st_graph).track()
        assert "failed division" in caplog.text


class TestLostCells:
    """Eliminations, lost lineages and unexplained cells."""

    def test_interior_cell_eliminated(self):
        st_graph = build_spatio_temporal_graph([
            grid_polygons(3, 3),
            grid_polygons(3, 3, skip={(1, 1)}),
        ])
        report = NearestNeighborTracking(st_graph).track()

        center = st_graph.frame(0).cells()[4]
        assert center.status is TrackStatus.ELIMINATED
        assert report.eliminated == 1
        elimination = center.elimination
        assert elimination.time_point == 0
        assert elimination.track_id == 4
        assert st_graph.eliminations() == [elimination]

    def test_border_cell_missing_next(self):
        st_graph = build_spatio_temporal_graph([
            grid_polygons(3, 3),
            grid_polygons(3, 3, skip={(0, 0)}),
        ])
        report = NearestNeighborTracking(st_graph).track()

        corner = st_graph.frame(0).cells()[0]
        assert corner.status is TrackStatus.MISSING_NEXT
        assert corner.elimination is None
        assert report.missing_next == 1
        assert report.eliminated == 0

    def test_gap_bridged_within_link_range(self):
        frames = [grid_polygons(3, 3), grid_polygons(3, 3, skip={(1, 1)}), grid_polygons(3, 3)]
        st_graph = build_spatio_temporal_graph(frames)
        NearestNeighborTracking(st_graph, link_range=2).track()

        center0 = st_graph.frame(0).cells()[4]
        center2 = _by_cell_id(st_graph.frame(2))[4]
        assert center0.next is center2
        assert center2.track_id == 4
        assert center0.track_id == 4
        assert center0.elimination is None

    def test_gap_beyond_link_range(self):
        frames = [grid_polygons(3, 3), grid_polygons(3, 3, skip={(1, 1)}), grid_polygons(3, 3)]
        st_graph = build_spatio_temporal_graph(frames)
        NearestNeighborTracking(st_graph, link_range=1).track()

        center0 = st_graph.frame(0).cells()[4]
        center2 = _by_cell_id(st_graph.frame(2))[4]
        assert center0.status is TrackStatus.ELIMINATED
        assert center2.status is TrackStatus.MISSING_PREVIOUS
        assert center2.previous is None

    def test_cell_outside_first_frame_stays_untracked(self):
        st_graph = build_spatio_temporal_graph([
            grid_polygons(3, 3),
            grid_polygons(3, 3) + [box(3, 0, 4, 1)],
        ])
        report = NearestNeighborTracking(st_graph).track()

        newcomer = st_graph.frame(1).cells()[-1]
        assert newcomer.status is TrackStatus.UNTRACKED
        assert report.missing_previous == 0


class TestRescue:
    """Late re-link of a lineage that lost the matching."""

    @pytest.fixture
    def merged_graph(self):
        """Two cells covered by one large and one thin cell, then merged."""
        return build_spatio_temporal_graph([
            [box(0, 0, 1, 1), box(1, 0, 2, 1)],
            [box(0, 0, 1.7, 1), box(1.7, 0, 2, 1)],
            [box(0, 0, 2, 1)],
        ])

    def test_rescued_cell_joins_lost_lineage(self, merged_graph):
        report = NearestNeighborTracking(merged_graph).track()

        a, b = merged_graph.frame(0).cells()
        wide, thin = merged_graph.frame(1).cells()
        assert wide.previous is a
        assert thin.previous is b
        assert thin.first is b
        assert report.rescued == 1

    def test_rescued_cell_lost_again_is_missing_both(self, merged_graph):
        report = NearestNeighborTracking(merged_graph).track()

        thin = merged_graph.frame(1).cells()[1]
        merged = merged_graph.frame(2).cells()[0]
        assert thin.status is TrackStatus.MISSING_BOTH
        assert merged.track_id == 0
        assert report.missing_both == 1
        assert report.missing_previous == 1


class TestHelpers:
    """Module-level helpers and the config shortcut."""

    def test_most_recent_correspondence(self, static_grid_graph):
        NearestNeighborTracking(static_grid_graph).track()
        first = static_grid_graph.frame(0).cells()[2]
        assert most_recent_correspondence(first, 1) is first
        assert most_recent_correspondence(first, 2) is static_grid_graph.frame(1).cells()[2]
        assert most_recent_correspondence(first, 5) is static_grid_graph.frame(2).cells()[2]

    def test_track_cells_uses_config(self, make_config):
        frames = [grid_polygons(3, 3), grid_polygons(3, 3, skip={(1, 1)}), grid_polygons(3, 3)]
        st_graph = build_spatio_temporal_graph(frames)
        report = track_cells(st_graph, make_config(LINK_RANGE=1))
        assert report.eliminated == 1
