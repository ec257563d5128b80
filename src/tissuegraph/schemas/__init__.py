"""Pydantic configuration schemas for tissuegraph.

This module provides strictly typed configuration models for the tracking
pipeline. All configuration validation, coercion, and normalization happens
at schema validation time via Pydantic.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
init_runtime_config : function
    Config resolution for CLI runs (user file, run ID, persistence)
"""

from tissuegraph.schemas.resolve import resolve_config, deep_merge
from tissuegraph.schemas.internal import InternalConfig
from tissuegraph.schemas.param import ParamConfig
from tissuegraph.schemas.user import UserConfig
from tissuegraph.schemas.cli import CLIConfig
from tissuegraph.schemas.initialization import init_runtime_config, load_user_config_dict

__all__ = [
    'resolve_config',
    'deep_merge',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
    'init_runtime_config',
    'load_user_config_dict',
]
