"""Runtime initialization for command-line tracking runs.

This module handles the initialization responsibilities of a CLI run:
- Loading the user config file (a Python file holding a CONFIG dict)
- Configuration resolution (CLI > User > Param)
- Output directory creation
- Configuration persistence with run ID
"""

import importlib.util
import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from tissuegraph.schemas.resolve import resolve_config
from tissuegraph.schemas.param import ParamConfig
from tissuegraph.schemas.user import UserConfig
from tissuegraph.schemas.cli import CLIConfig
from tissuegraph.schemas.internal import InternalConfig

logger = logging.getLogger(__name__)


def load_user_config_dict(config_path: str) -> dict:
    """Load the user config dict from a Python file.

    The first module attribute whose name starts with ``CONFIG`` and whose
    value is a dict is returned.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file defines no CONFIG dict.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("tissuegraph_user_config", path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Could not load config module from {path}")

    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def generate_run_id() -> str:
    """Timestamped unique run identifier."""
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    return f"{stamp}_{uuid.uuid4().hex[:8]}"


def persist_runtime_config(config: InternalConfig) -> Path:
    """Save the resolved configuration next to the run outputs."""
    output_dir = Path(config.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    config_file = output_dir / f"runtime_config_{config.run_id}.json"
    config_dict = config.model_dump()
    config_dict["created_at"] = datetime.now(timezone.utc).isoformat()

    with open(config_file, 'w') as f:
        json.dump(config_dict, f, indent=2, default=str)

    logger.info("Runtime config saved: %s", config_file)
    return config_file


def init_runtime_config(
    cli_args: Optional[dict] = None,
    user_config_path: Optional[str] = None,
) -> InternalConfig:
    """Resolve the configuration of a CLI run.

    Parameters
    ----------
    cli_args : dict, optional
        Command-line overrides (CLIConfig fields); None values are dropped.
    user_config_path : str, optional
        Python file with a CONFIG dict.

    Returns
    -------
    InternalConfig
        Resolved config carrying a fresh ``run_id``. When ``output_dir`` is
        set, the directory is created and the config persisted into it.
    """
    user_cfg = UserConfig()
    if user_config_path:
        user_cfg = UserConfig.model_validate(load_user_config_dict(user_config_path))

    cli_cfg = CLIConfig.model_validate(
        {k: v for k, v in (cli_args or {}).items() if v is not None}
    )

    resolved = resolve_config(ParamConfig(), user_cfg, cli_cfg).model_dump()
    resolved["run_id"] = generate_run_id()
    config = InternalConfig.model_validate(resolved)

    if config.output_dir is not None:
        persist_runtime_config(config)

    logger.info("Runtime initialization complete. Run ID: %s", config.run_id)
    return config
