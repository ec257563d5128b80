"""tissuegraph user configuration.

This is the user-facing configuration file. Modify settings here to
customize the tracking run. Advanced settings can be given as nested
sections ("tracking", "edges", "transitions", "builder").

Usage:
    python scripts/run_tracking.py --config scripts/user_config.py
    python scripts/run_tracking.py data/frames --config scripts/user_config.py --link-range 2
"""

CONFIG = {
    # ========================================================================
    # INPUT & OUTPUT
    # ========================================================================
    "INPUT_DIR": "data/frames",     # frame_000.wkt, frame_001.wkt, ...
    "OUTPUT_DIR": "output",         # CSV tables, log and runtime config

    # ========================================================================
    # CELL TRACKING
    # ========================================================================
    "LINK_RANGE": 5,                # Frames searched ahead for correspondences
    "BORDER_LAYERS": 1,             # Border layers removed from the first frame

    # ========================================================================
    # EDGE TRACKING & T1 TRANSITIONS
    # ========================================================================
    "STARTING_FRAME": 0,            # Frame whose edges are followed
    "MIN_TRANSITION_LENGTH": 2,     # Minimal frames of edge absence
    "MIN_OLD_EDGE_SURVIVAL": 2,     # Minimal frames of edge presence before the loss

    # ========================================================================
    # ADVANCED
    # ========================================================================
    "transitions": {
        "require_winners": False,
    },
    "LOG_LEVEL": "INFO",
}
