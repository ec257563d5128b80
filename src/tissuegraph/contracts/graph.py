"""Frame stage contract.

Enforces that the spatio-temporal graph handed to tracking is structurally
sound: contiguous frames, geometry on every cell, unique track IDs.
"""

from typing import TYPE_CHECKING

from tissuegraph.contracts.base import require

if TYPE_CHECKING:
    from tissuegraph.graphs import FrameGraph, SpatioTemporalGraph


def assert_frames_contiguous(st_graph: "SpatioTemporalGraph", min_frames: int = 1) -> None:
    """Enforce frame numbering and geometry invariants.

    Parameters
    ----------
    st_graph : SpatioTemporalGraph
        Graph to check.
    min_frames : int, default 1
        Minimal number of frames required by the calling stage.

    Raises
    ------
    ContractViolation
        If a frame is misnumbered, a cell lacks geometry or there are too
        few frames.
    """
    require(
        st_graph.size() >= min_frames,
        f"Frame contract violated: {st_graph.size()} frames, at least {min_frames} required",
    )

    for i, frame in enumerate(st_graph):
        require(
            frame.frame_no == i,
            f"Frame contract violated: frame at index {i} is numbered {frame.frame_no}",
        )
        for cell in frame:
            require(
                cell.geometry is not None and not cell.geometry.is_empty,
                f"Frame contract violated: cell {cell.cell_id} of frame {i} has no geometry",
            )


def assert_unique_track_ids(frame: "FrameGraph") -> None:
    """Enforce that no two cells of ``frame`` share a valid track ID."""
    seen = set()
    for cell in frame:
        if cell.track_id < 0:
            continue
        require(
            cell.track_id not in seen,
            f"Tracking contract violated: track ID {cell.track_id} used twice in frame {frame.frame_no}",
        )
        seen.add(cell.track_id)
