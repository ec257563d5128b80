"""Tests for restoring tracking from saved tables."""

import logging

import pandas as pd
import pytest
from pandas.testing import assert_frame_equal
from shapely.geometry import box

pytestmark = pytest.mark.integration

from tissuegraph.analysis import cells_table, divisions_table, eliminations_table
from tissuegraph.contracts import assert_lineage_consistent
from tissuegraph.graphs import TrackStatus, build_spatio_temporal_graph
from tissuegraph.io import CsvTrackReader, read_tracking
from tissuegraph.pipeline import PipelineResult
from tissuegraph.tracking import NearestNeighborTracking

from tests.helpers.tiling import grid_polygons, grid_with_split


def _division_after_gap():
    return [grid_polygons(3, 3), grid_polygons(3, 3, skip={(1, 1)}), grid_with_split([0.6])]


def _elimination():
    return [grid_polygons(3, 3), grid_polygons(3, 3, skip={(1, 1)})]


def _rescue_then_merge():
    return [
        [box(0, 0, 1, 1), box(1, 0, 2, 1)],
        [box(0, 0, 1.7, 1), box(1.7, 0, 2, 1)],
        [box(0, 0, 2, 1)],
    ]


def _save_tracked(frames, link_range, out_dir):
    st_graph = build_spatio_temporal_graph(frames)
    report = NearestNeighborTracking(st_graph, link_range=link_range).track()
    PipelineResult(st_graph, report).save(out_dir)
    return st_graph, report


class TestRoundTrip:
    """Tables saved after tracking restore the same graph state."""

    @pytest.mark.parametrize("frames, link_range", [
        (_division_after_gap(), 2),
        (_elimination(), 5),
        (_rescue_then_merge(), 5),
    ], ids=["division_after_gap", "elimination", "rescue_then_merge"])
    def test_tables_identical(self, frames, link_range, tmp_path):
        tracked, report = _save_tracked(frames, link_range, tmp_path)

        restored = build_spatio_temporal_graph(frames)
        restored_report = read_tracking(restored, tmp_path, link_range=link_range)

        assert restored.has_tracking()
        assert_lineage_consistent(restored)
        assert_frame_equal(cells_table(restored), cells_table(tracked))
        assert_frame_equal(divisions_table(restored), divisions_table(tracked))
        assert_frame_equal(eliminations_table(restored), eliminations_table(tracked))
        assert restored_report.divisions == report.divisions
        assert restored_report.eliminated == report.eliminated
        assert restored.next_track_id == tracked.next_track_id

    def test_division_links(self, tmp_path):
        _save_tracked(_division_after_gap(), 2, tmp_path)
        st_graph = build_spatio_temporal_graph(_division_after_gap())
        report = CsvTrackReader(st_graph, tmp_path, link_range=2).track()

        mother = st_graph.frame(0).cells()[4]
        left, right = st_graph.frame(2).cells()[8:]
        assert report.divisions == 1
        assert mother.division.time_point == 2
        assert mother.division.child1 is right
        assert mother.division.child2 is left
        assert mother.next is None
        assert left.first is left and right.first is right
        assert st_graph.frame(2).cells()[0].previous is st_graph.frame(1).cells()[0]

    def test_tagged_cell_relinked(self, tmp_path):
        _save_tracked(_rescue_then_merge(), 5, tmp_path)
        st_graph = build_spatio_temporal_graph(_rescue_then_merge())
        read_tracking(st_graph, tmp_path)

        b = st_graph.frame(0).cells()[1]
        thin = st_graph.frame(1).cells()[1]
        assert thin.status is TrackStatus.MISSING_BOTH
        assert thin.previous is b
        assert thin.first is b

    def test_new_ids_allocated_above_restored(self, tmp_path):
        _save_tracked(_division_after_gap(), 2, tmp_path)
        st_graph = build_spatio_temporal_graph(_division_after_gap())
        read_tracking(st_graph, tmp_path, link_range=2)
        assert st_graph.allocate_track_id() == 11


class TestReaderInputs:
    """Missing tables and unmatched rows."""

    def test_missing_cells_table(self, tmp_path):
        st_graph = build_spatio_temporal_graph(_elimination())
        with pytest.raises(FileNotFoundError, match="cells.csv"):
            read_tracking(st_graph, tmp_path)

    def test_event_tables_optional(self, tmp_path):
        _save_tracked(_elimination(), 5, tmp_path)
        (tmp_path / "eliminations.csv").unlink()
        (tmp_path / "divisions.csv").unlink()

        st_graph = build_spatio_temporal_graph(_elimination())
        report = read_tracking(st_graph, tmp_path)

        assert report.eliminated == 0
        assert st_graph.eliminations() == []
        assert st_graph.frame(0).cells()[4].status is TrackStatus.ELIMINATED

    def test_unmatched_row_logged(self, tmp_path, caplog):
        _save_tracked(_elimination(), 5, tmp_path)
        cells = pd.read_csv(tmp_path / "cells.csv")
        cells.loc[0, ["centroid_x", "centroid_y"]] = [50.0, 50.0]
        cells.to_csv(tmp_path / "cells.csv", index=False)

        st_graph = build_spatio_temporal_graph(_elimination())
        with caplog.at_level(logging.WARNING, logger="tissuegraph.io.csv_tracks"):
            read_tracking(st_graph, tmp_path)

        assert "no cell at (50.00, 50.00)" in caplog.text
        assert st_graph.frame(0).cells()[0].status is TrackStatus.UNTRACKED

    def test_previous_links_dropped(self, tmp_path):
        tracked, _ = _save_tracked(_elimination(), 5, tmp_path)
        read_tracking(tracked, tmp_path)
        assert_lineage_consistent(tracked)
        assert_frame_equal(
            cells_table(tracked),
            cells_table(_save_tracked(_elimination(), 5, tmp_path / "again")[0]),
        )
