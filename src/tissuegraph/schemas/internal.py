"""Frozen configuration handed to the pipeline stages.

Every field is filled in by :func:`tissuegraph.schemas.resolve_config`;
stage code reads attributes directly and never supplies its own defaults.
"""

from typing import Literal, Optional
from pydantic import Field, ConfigDict
from tissuegraph.schemas.base import TissueBaseModel


class InternalBuilderConfig(TissueBaseModel):
    min_shared_length: float = Field(ge=0)


class InternalTrackingConfig(TissueBaseModel):
    link_range: int = Field(ge=1, le=100)
    border_elimination_layers: int = Field(ge=0, le=10)
    mark_border: bool


class InternalEdgesConfig(TissueBaseModel):
    starting_frame: int = Field(ge=0)


class InternalTransitionsConfig(TissueBaseModel):
    min_transition_length: int = Field(ge=1)
    min_old_edge_survival: int = Field(ge=0)
    require_winners: bool


class InternalLoggingConfig(TissueBaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class InternalConfig(TissueBaseModel):
    """Resolved settings of one run.

    Stages take the whole object and pick their section::

        tracker = NearestNeighborTracking(st_graph, config.tracking.link_range)

    ``input_dir`` and ``output_dir`` stay None for in-memory runs, and
    ``run_id`` is set by :func:`init_runtime_config`.
    """

    input_dir: Optional[str] = None
    output_dir: Optional[str] = None
    run_id: Optional[str] = None
    builder: InternalBuilderConfig
    tracking: InternalTrackingConfig
    edges: InternalEdgesConfig
    transitions: InternalTransitionsConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,
    )
