"""Merge the configuration layers into one ``InternalConfig``.

Layers, later ones winning: ``ParamConfig`` defaults, the user file
(``UserConfig``), command-line flags (``CLIConfig``).
"""

from typing import Union, Optional
from tissuegraph.schemas.param import ParamConfig
from tissuegraph.schemas.user import UserConfig
from tissuegraph.schemas.cli import CLIConfig
from tissuegraph.schemas.internal import InternalConfig


def deep_merge(base: dict, *overrides: dict) -> dict:
    """Recursively merge ``overrides`` into a copy of ``base``.

    Nested dicts merge key by key; any other value replaces the earlier one.

    Examples
    --------
    >>> base = {"tracking": {"link_range": 5, "mark_border": True}}
    >>> deep_merge(base, {"tracking": {"link_range": 2}, "output_dir": "out"})
    {'tracking': {'link_range': 2, 'mark_border': True}, 'output_dir': 'out'}
    """
    merged = dict(base)
    for override in overrides:
        for key, value in override.items():
            if isinstance(merged.get(key), dict) and isinstance(value, dict):
                merged[key] = deep_merge(merged[key], value)
            else:
                merged[key] = value
    return merged


def _as_model(cfg, model):
    if cfg is None or (isinstance(cfg, dict) and not cfg):
        return model()
    if isinstance(cfg, model):
        return cfg
    return model.model_validate(cfg)


def resolve_config(
    param_cfg: Optional[Union[dict, ParamConfig]] = None,
    user_cfg: Optional[Union[dict, UserConfig]] = None,
    cli_cfg: Optional[Union[dict, CLIConfig]] = None,
) -> InternalConfig:
    """Validate each layer and merge them into a frozen config.

    Parameters
    ----------
    param_cfg : dict or ParamConfig, optional
        Defaults. ``ParamConfig()`` when None.
    user_cfg : dict or UserConfig, optional
        User file values, flat aliases (``LINK_RANGE``) or nested sections.
    cli_cfg : dict or CLIConfig, optional
        Command-line overrides; None entries are ignored.

    Raises
    ------
    pydantic.ValidationError
        If a layer or the merged result is invalid.

    Examples
    --------
    >>> config = resolve_config(ParamConfig(), {"LINK_RANGE": 3}, {"starting_frame": 2})
    >>> config.tracking.link_range
    3
    >>> config.edges.starting_frame
    2
    """
    param = _as_model(param_cfg, ParamConfig)
    user = _as_model(user_cfg, UserConfig)
    cli = _as_model(cli_cfg, CLIConfig)

    merged = deep_merge(
        param.model_dump(),
        user.to_internal_overrides(),
        cli.to_internal_overrides(),
    )

    return InternalConfig.model_validate(merged)
