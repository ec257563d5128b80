"""Shared pydantic base for the configuration layers."""

from pydantic import BaseModel, ConfigDict


class TissueBaseModel(BaseModel):
    """Strict model: unknown keys are rejected and assignments re-validated."""

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
    )
