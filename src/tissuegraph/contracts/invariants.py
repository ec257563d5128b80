"""Formal invariants of the tracking stages.

This file documents what each stage MUST produce. Use it as a reviewer
anchor and system reference; the checks live in graph.py and tracking.py.
"""

PIPELINE_INVARIANTS = {
    "frames": [
        "Frames are contiguous: frames[i].frame_no == i",
        "Every cell has a non-empty polygon geometry",
        "Every edge connects two cells of the same frame",
    ],

    "tracking": [
        "st_graph.has_tracking() is True",
        "No two cells of one frame share a non-negative track ID",
        "Every cell has a track ID >= 0 or a reserved TrackStatus code",
        "cell.previous.next is cell for every linked cell",
        "Following previous links terminates at cell.first",
        "Division children are roots of their own chains",
    ],

    "edges": [
        "Timelines are keyed by the pairing of two valid track IDs",
        "Timeline index 0 is the starting frame and is always present",
        "Timelines are either full length or truncated at a border exit",
    ],

    "transitions": [
        "Loser pair is a tracked edge of the frame before detection",
        "Detection time is the onset of the longest stable absence",
        "Winners are either both set or both unset",
    ],
}

# Which stages are optional vs required
STAGE_REQUIREMENTS = {
    "frames": "REQUIRED",
    "tracking": "REQUIRED",     # Edge tracking depends on it
    "edges": "OPTIONAL",        # Only for T1 detection
    "transitions": "OPTIONAL",
}
