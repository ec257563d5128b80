"""Tests for stage contracts.

These tests verify that contracts are enforced at stage boundaries.
They test contract violations directly, without defensive logic downstream.
"""

import pytest
from shapely.geometry import box

pytestmark = pytest.mark.unit

from tissuegraph.contracts import (
    ContractViolation,
    require,
    assert_frames_contiguous,
    assert_unique_track_ids,
    assert_tracked,
    assert_lineage_consistent,
)
from tissuegraph.graphs import Cell, FrameGraph, SpatioTemporalGraph

from tests.helpers.tiling import manual_frame, manual_graph


class TestRequire:
    """Test the base enforcement helper."""

    def test_require_passes_silently(self):
        require(True, "never raised")

    def test_require_raises_with_message(self):
        with pytest.raises(ContractViolation, match="frame 3 out of range"):
            require(False, "frame 3 out of range")

    def test_contract_violation_is_runtime_error(self):
        """Callers catching RuntimeError also see contract violations."""
        assert issubclass(ContractViolation, RuntimeError)


class TestFrameContract:
    """Test frame stage contract."""

    def test_contiguous_frames_pass(self):
        st_graph = SpatioTemporalGraph([FrameGraph(0), FrameGraph(1)])
        # Should not raise
        assert_frames_contiguous(st_graph, min_frames=2)

    def test_too_few_frames_fail(self):
        st_graph = SpatioTemporalGraph([FrameGraph(0)])
        with pytest.raises(ContractViolation, match="at least 2"):
            assert_frames_contiguous(st_graph, min_frames=2)

    def test_empty_graph_fails(self):
        with pytest.raises(ContractViolation):
            assert_frames_contiguous(SpatioTemporalGraph())

    def test_misnumbered_frame_rejected_on_insert(self):
        """The graph itself refuses frames at the wrong index."""
        st_graph = SpatioTemporalGraph([FrameGraph(0)])
        with pytest.raises(ContractViolation, match="numbered 2"):
            st_graph.add_frame(FrameGraph(2))


class TestTrackIdContract:
    """Test per-frame track ID uniqueness."""

    def test_unique_ids_pass(self):
        assert_unique_track_ids(manual_frame(0, [0, 1, 2], []))

    def test_negative_codes_may_repeat(self):
        """Reserved status codes are not lineage IDs."""
        frame = manual_frame(0, [0, 1, 2], [])
        for cell in frame.cells()[1:]:
            cell.track_id = -2
        assert_unique_track_ids(frame)

    def test_duplicate_ids_fail(self):
        frame = manual_frame(0, [0, 1, 2], [])
        frame.cells()[2].track_id = 0
        with pytest.raises(ContractViolation, match="used twice"):
            assert_unique_track_ids(frame)


class TestTrackingContract:
    """Test tracking stage contract."""

    def test_untracked_graph_fails(self):
        st_graph = SpatioTemporalGraph([FrameGraph(0)])
        with pytest.raises(ContractViolation, match="run cell tracking first"):
            assert_tracked(st_graph)

    def test_consistent_chain_passes(self):
        st_graph = manual_graph([([0], [], ()), ([0], [], ())])
        a = st_graph.frame(0).cells()[0]
        b = st_graph.frame(1).cells()[0]
        a.first = a
        b.first = a
        a.next, b.previous = b, a
        assert_lineage_consistent(st_graph)

    def test_broken_back_link_fails(self):
        st_graph = manual_graph([([0], [], ()), ([0], [], ())])
        a = st_graph.frame(0).cells()[0]
        b = st_graph.frame(1).cells()[0]
        a.first = a
        b.first = a
        b.previous = a
        with pytest.raises(ContractViolation, match="broken previous link"):
            assert_lineage_consistent(st_graph)

    def test_chain_not_ending_at_first_fails(self):
        st_graph = manual_graph([([0], [], ()), ([0], [], ())])
        a = st_graph.frame(0).cells()[0]
        b = st_graph.frame(1).cells()[0]
        a.first = a
        b.first = b
        a.next, b.previous = b, a
        with pytest.raises(ContractViolation, match="does not end at its first cell"):
            assert_lineage_consistent(st_graph)

    def test_unlinked_cell_with_lineage_root_passes(self):
        st_graph = SpatioTemporalGraph([FrameGraph(0)])
        cell = Cell(box(0, 0, 1, 1))
        st_graph.frame(0).add_cell(cell)
        cell.first = cell
        cell.track_id = 0
        st_graph.set_tracking(True)
        assert_lineage_consistent(st_graph)
