"""Tests for tabular summaries."""

import pytest

pytestmark = pytest.mark.unit

from tissuegraph.analysis import (
    always_tracked_lineages,
    cells_table,
    divisions_table,
    eliminations_table,
    frame_summary,
    transitions_table,
)
from tissuegraph.analysis.summary import CELL_COLUMNS, TRANSITION_COLUMNS
from tissuegraph.graphs import SpatioTemporalGraph, build_spatio_temporal_graph
from tissuegraph.tracking import NearestNeighborTracking, track_edges
from tissuegraph.transitions import create_polygonal_tiles, find_transitions

from tests.helpers.tiling import grid_polygons, grid_with_split


@pytest.fixture
def dividing_graph():
    st_graph = build_spatio_temporal_graph([grid_polygons(3, 3), grid_with_split([0.6])])
    NearestNeighborTracking(st_graph).track()
    return st_graph


@pytest.fixture
def eliminating_graph():
    st_graph = build_spatio_temporal_graph([
        grid_polygons(3, 3),
        grid_polygons(3, 3, skip={(1, 1)}),
    ])
    NearestNeighborTracking(st_graph).track()
    return st_graph


@pytest.fixture
def gap_division_graph():
    """Centre cell missing in frame 1, split in frame 2."""
    st_graph = build_spatio_temporal_graph([
        grid_polygons(3, 3),
        grid_polygons(3, 3, skip={(1, 1)}),
        grid_with_split([0.6]),
    ])
    NearestNeighborTracking(st_graph, link_range=2).track()
    return st_graph


class TestFrameSummary:
    """Test frame_summary()."""

    def test_division_counted_in_mother_frame(self, dividing_graph):
        summary = frame_summary(dividing_graph)
        assert list(summary["divisions"]) == [1, 0]
        assert list(summary["cells"]) == [9, 10]
        assert summary["area"].tolist() == pytest.approx([9.0, 9.0])

    def test_division_after_gap_counted_where_mother_last_seen(self, gap_division_graph):
        summary = frame_summary(gap_division_graph)
        assert list(summary["divisions"]) == [1, 0, 0]
        assert list(summary["eliminations"]) == [0, 0, 0]

    def test_elimination_counted_in_last_frame(self, eliminating_graph):
        summary = frame_summary(eliminating_graph)
        assert list(summary["eliminations"]) == [1, 0]
        assert list(summary["tracked_cells"]) == [8, 8]

    def test_empty_graph_keeps_columns(self):
        summary = frame_summary(SpatioTemporalGraph())
        assert summary.empty
        assert "divisions" in summary.columns


class TestEventTables:
    """Test the per-event tables."""

    def test_cells_table(self, eliminating_graph):
        table = cells_table(eliminating_graph)
        assert list(table.columns) == CELL_COLUMNS
        assert len(table) == 17
        center = table[(table["frame"] == 0) & (table["status"] == "ELIMINATED")]
        assert len(center) == 1
        assert center["centroid_x"].iloc[0] == pytest.approx(1.5)

    def test_divisions_table(self, dividing_graph):
        table = divisions_table(dividing_graph)
        assert table.to_dict("records") == [
            {"time_point": 1, "mother_track_id": 4, "child1_track_id": 9, "child2_track_id": 10},
        ]

    def test_divisions_table_after_gap(self, gap_division_graph):
        table = divisions_table(gap_division_graph)
        assert table.to_dict("records") == [
            {"time_point": 2, "mother_track_id": 4, "child1_track_id": 9, "child2_track_id": 10},
        ]

    def test_eliminations_table(self, eliminating_graph):
        table = eliminations_table(eliminating_graph)
        assert table["track_id"].tolist() == [4]
        assert table["time_point"].tolist() == [0]

    def test_empty_tables(self, static_grid_graph):
        NearestNeighborTracking(static_grid_graph).track()
        assert divisions_table(static_grid_graph).empty
        assert eliminations_table(static_grid_graph).empty
        assert list(transitions_table([]).columns) == TRANSITION_COLUMNS


class TestTransitionsTable:
    """Test transitions_table()."""

    def test_t1_row(self, t1_graph):
        NearestNeighborTracking(t1_graph).track()
        transitions = find_transitions(t1_graph, create_polygonal_tiles(t1_graph), track_edges(t1_graph))

        table = transitions_table(transitions)
        assert table.to_dict("records") == [{
            "loser_1": 0, "loser_2": 1, "winner_1": 2, "winner_2": 3,
            "detection_time": 2, "length": 2, "old_edge_survival": 2, "on_boundary": True,
        }]


class TestAlwaysTracked:
    """Test always_tracked_lineages()."""

    def test_static_tissue(self, static_grid_graph):
        NearestNeighborTracking(static_grid_graph).track()
        assert always_tracked_lineages(static_grid_graph) == set(range(9))

    def test_eliminated_lineage_excluded(self, eliminating_graph):
        assert always_tracked_lineages(eliminating_graph) == set(range(9)) - {4}

    def test_dividing_lineage_excluded(self, dividing_graph):
        assert 4 not in always_tracked_lineages(dividing_graph)
