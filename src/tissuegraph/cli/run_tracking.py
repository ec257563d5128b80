"""Core tracking run logic.

This module contains the actual runner, separated from argument parsing
details. Scripts are thin wrappers; this is the real implementation.
"""

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from tissuegraph.pipeline import PipelineResult, TrackingPipeline, setup_logging
from tissuegraph.schemas import init_runtime_config

logger = logging.getLogger(__name__)


def run_tracking(
    input_dir: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    user_config_path: Optional[str] = None,
    verbose: bool = False,
    pattern: str = "frame_%03d.wkt",
) -> PipelineResult:
    """Track the WKT frames of ``input_dir`` and save the tables.

    This is the core execution function. It:
    1. Loads and resolves configuration (Param < User < CLI)
    2. Configures logging (console, plus a log file in the output directory)
    3. Builds the spatio-temporal graph and runs the pipeline
    4. Writes the cells, divisions, eliminations, transitions and summary CSVs when
       an output directory is configured

    Parameters
    ----------
    input_dir : str, optional
        Directory of frame files. Overrides the configured INPUT_DIR.
    cli_args : dict, optional
        CLI overrides. Keys: output_dir, link_range, starting_frame,
        log_level. All optional.
    user_config_path : str, optional
        Python file with a CONFIG dict.
    verbose : bool, optional
        Enable DEBUG logging and log the full resolved config.
    pattern : str, optional
        Frame file name pattern, formatted with the frame index.

    Returns
    -------
    PipelineResult

    Raises
    ------
    FileNotFoundError
        If the user config or the frame files do not exist.
    ValueError
        If configuration validation fails or no input directory is known.

    Examples
    --------
    Run on a directory of frames::

        run_tracking("data/wing_disc", cli_args={"output_dir": "out", "link_range": 2})
    """
    cli_args = dict(cli_args or {})
    if input_dir is not None:
        cli_args["input_dir"] = str(input_dir)
    if verbose and cli_args.get("log_level") is None:
        cli_args["log_level"] = "DEBUG"

    config = init_runtime_config(cli_args, user_config_path)

    log_file = None
    if config.output_dir is not None:
        log_file = Path(config.output_dir) / f"tracking_{config.run_id}.log"
    setup_logging(config.logging.level, log_file)

    logger.info("Input:  %s", config.input_dir)
    logger.info("Output: %s", config.output_dir)
    logger.info("Link range: %d, starting frame: %d", config.tracking.link_range, config.edges.starting_frame)
    if verbose:
        logger.debug("Full internal configuration:\n%s", json.dumps(config.model_dump(), indent=2))

    result = TrackingPipeline(config).run_from_dir(config.input_dir, pattern)

    if config.output_dir is not None:
        result.save(config.output_dir)

    return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tissuegraph-track",
        description="Track cells and detect T1 transitions in a time-lapse of segmented polygons",
    )
    parser.add_argument("input_dir", nargs="?", help="Directory with frame_000.wkt, frame_001.wkt, ...")
    parser.add_argument("-c", "--config", help="Path to user config file (Python file with CONFIG dict)")
    parser.add_argument("-o", "--output-dir", help="Directory for the CSV tables")
    parser.add_argument("--link-range", type=int, help="Frames searched ahead for correspondences")
    parser.add_argument("--starting-frame", type=int, help="Frame whose edges are tracked")
    parser.add_argument("--pattern", default="frame_%03d.wkt", help="Frame file name pattern")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    result = run_tracking(
        args.input_dir,
        cli_args={
            "output_dir": args.output_dir,
            "link_range": args.link_range,
            "starting_frame": args.starting_frame,
        },
        user_config_path=args.config,
        verbose=args.verbose,
        pattern=args.pattern,
    )

    print(f"\n{'='*60}")
    print("tissuegraph tracking")
    print('='*60)
    print(f"Frames:      {result.st_graph.size()}")
    print(f"Lineages:    {result.report.lineages}")
    print(f"Divisions:   {result.report.divisions}")
    print(f"Eliminated:  {result.report.eliminated}")
    print(f"Transitions: {len(result.transitions)}")
    print('='*60)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
