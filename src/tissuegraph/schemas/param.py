"""Default values of every tunable setting.

User files and command-line flags only override what they name; the rest
comes from here. Stages receive the merged ``InternalConfig``, never this
model.
"""

from typing import Literal
from pydantic import Field, field_validator
from tissuegraph.schemas.base import TissueBaseModel


class BuilderConfig(TissueBaseModel):
    """Frame graph construction from polygons."""
    min_shared_length: float = Field(
        0.0, ge=0, description="Minimal shared boundary length for two cells to be neighbours"
    )

    @field_validator("min_shared_length", mode="before")
    @classmethod
    def coerce_length_to_float(cls, v):
        """Allow int or float for the shared length."""
        return float(v)


class TrackingConfig(TissueBaseModel):
    """Cell tracking configuration."""
    link_range: int = Field(5, ge=1, le=100, description="Frames searched ahead for correspondences")
    border_elimination_layers: int = Field(
        1, ge=0, le=10, description="Border cell layers removed from the first frame before tracking"
    )
    mark_border: bool = True


class EdgesConfig(TissueBaseModel):
    """Edge tracking configuration."""
    starting_frame: int = Field(0, ge=0, description="Frame whose edges are followed")


class TransitionsConfig(TissueBaseModel):
    """T1 transition filtering."""
    min_transition_length: int = Field(1, ge=1, description="Minimal frames of edge absence")
    min_old_edge_survival: int = Field(1, ge=0, description="Minimal frames of edge presence before absence")
    require_winners: bool = False


class LoggingConfig(TissueBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        """Accept lowercase level names."""
        if isinstance(v, str):
            return v.upper().strip()
        return v


class ParamConfig(TissueBaseModel):
    """Defaults grouped by pipeline stage.

    Examples
    --------
    >>> ParamConfig().tracking.link_range
    5
    """

    builder: BuilderConfig = Field(default_factory=BuilderConfig)
    tracking: TrackingConfig = Field(default_factory=TrackingConfig)
    edges: EdgesConfig = Field(default_factory=EdgesConfig)
    transitions: TransitionsConfig = Field(default_factory=TransitionsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
