"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs with aliases for common naming patterns
(e.g., LINK_RANGE -> tracking.link_range, STARTING_FRAME ->
edges.starting_frame).

UserConfig is intentionally minimal - users only specify what they want to
override from the expert defaults. Unknown keys are ignored so that config
files can carry notes or settings of other tools.
"""

from typing import Optional
from pydantic import Field, field_validator
from tissuegraph.schemas.base import TissueBaseModel


class UserBuilderConfig(TissueBaseModel):
    """User-facing frame construction config."""
    min_shared_length: Optional[float] = None


class UserTrackingConfig(TissueBaseModel):
    """User-facing tracking config."""
    link_range: Optional[int] = None
    border_elimination_layers: Optional[int] = None
    mark_border: Optional[bool] = None


class UserEdgesConfig(TissueBaseModel):
    """User-facing edge tracking config."""
    starting_frame: Optional[int] = None


class UserTransitionsConfig(TissueBaseModel):
    """User-facing transition filter config."""
    min_transition_length: Optional[int] = None
    min_old_edge_survival: Optional[int] = None
    require_winners: Optional[bool] = None


class UserConfig(TissueBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Users only specify
    what they want to override from ParamConfig defaults.

    Usage
    -----
        user_cfg = UserConfig(
            LINK_RANGE=3,
            INPUT_DIR="/data/wing_disc/frames",
            OUTPUT_DIR="/data/wing_disc/tracking",
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Paths
    input_dir: Optional[str] = Field(None, alias="INPUT_DIR")
    output_dir: Optional[str] = Field(None, alias="OUTPUT_DIR")

    # Flat aliases
    link_range: Optional[int] = Field(None, alias="LINK_RANGE")
    border_layers: Optional[int] = Field(None, alias="BORDER_LAYERS")
    starting_frame: Optional[int] = Field(None, alias="STARTING_FRAME")
    min_transition_length: Optional[int] = Field(None, alias="MIN_TRANSITION_LENGTH")
    min_old_edge_survival: Optional[int] = Field(None, alias="MIN_OLD_EDGE_SURVIVAL")
    log_level: Optional[str] = Field(None, alias="LOG_LEVEL")

    # Nested overrides (advanced users)
    builder: Optional[UserBuilderConfig] = None
    tracking: Optional[UserTrackingConfig] = None
    edges: Optional[UserEdgesConfig] = None
    transitions: Optional[UserTransitionsConfig] = None

    model_config = TissueBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept lowercase level names."""
        if isinstance(v, str):
            return v.upper().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.input_dir is not None:
            overrides["input_dir"] = str(self.input_dir)
        if self.output_dir is not None:
            overrides["output_dir"] = str(self.output_dir)

        # Tracking section
        tracking = {}
        if self.link_range is not None:
            tracking["link_range"] = self.link_range
        if self.border_layers is not None:
            tracking["border_elimination_layers"] = self.border_layers
        if self.tracking is not None:
            tracking.update(self.tracking.model_dump(exclude_none=True))
        if tracking:
            overrides["tracking"] = tracking

        # Builder section
        if self.builder is not None:
            builder = self.builder.model_dump(exclude_none=True)
            if builder:
                overrides["builder"] = builder

        # Edges section
        edges = {}
        if self.starting_frame is not None:
            edges["starting_frame"] = self.starting_frame
        if self.edges is not None:
            edges.update(self.edges.model_dump(exclude_none=True))
        if edges:
            overrides["edges"] = edges

        # Transitions section
        transitions = {}
        if self.min_transition_length is not None:
            transitions["min_transition_length"] = self.min_transition_length
        if self.min_old_edge_survival is not None:
            transitions["min_old_edge_survival"] = self.min_old_edge_survival
        if self.transitions is not None:
            transitions.update(self.transitions.model_dump(exclude_none=True))
        if transitions:
            overrides["transitions"] = transitions

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
