"""Overrides taken from the ``tissuegraph-track`` command line."""

from typing import Literal, Optional
from pydantic import Field
from tissuegraph.schemas.base import TissueBaseModel


class CLIConfig(TissueBaseModel):
    """Flags that commonly change between runs; the top configuration layer.

    Unset flags stay None and leave the lower layers untouched::

        resolve_config(ParamConfig(), user_cfg, CLIConfig(link_range=2))
    """

    input_dir: Optional[str] = None
    output_dir: Optional[str] = None
    link_range: Optional[int] = Field(None, ge=1)
    starting_frame: Optional[int] = Field(None, ge=0)
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    def to_internal_overrides(self) -> dict:
        """Nested dict of the flags that were given, shaped like ``InternalConfig``."""
        sections = {
            "tracking": {"link_range": self.link_range},
            "edges": {"starting_frame": self.starting_frame},
            "logging": {"level": self.log_level},
        }
        overrides = {
            key: str(value)
            for key, value in (("input_dir", self.input_dir), ("output_dir", self.output_dir))
            if value is not None
        }
        for section, values in sections.items():
            given = {k: v for k, v in values.items() if v is not None}
            if given:
                overrides[section] = given
        return overrides
