"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated
and contains explicit values for everything the resolver reads.
"""

from typing import Literal
from pydantic import ConfigDict, Field
from imgparams.schemas.base import ImgParamsBaseModel


class InternalPriorityConfig(ImgParamsBaseModel):
    """Runtime dialect priorities."""
    path: int
    legacy: int
    standard: int
    compact: int
    derived_boost: int


class InternalLegacyConfig(ImgParamsBaseModel):
    """Runtime legacy dialect constants."""
    prefix: str
    default_overlay_offset: float
    blur_scale: float
    blur_max: float
    sharpen_max: float
    quality_levels: dict[str, int]


class InternalFeaturesConfig(ImgParamsBaseModel):
    """Runtime feature gates."""
    advanced: bool


class InternalPathConfig(ImgParamsBaseModel):
    """Runtime path dialect settings."""
    derivatives: list[str]


class InternalLoggingConfig(ImgParamsBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(ImgParamsBaseModel):
    """Authoritative runtime configuration.

    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.boost = config.priorities.derived_boost  # NOT .get()

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation in runtime code
    """

    priorities: InternalPriorityConfig
    legacy: InternalLegacyConfig
    features: InternalFeaturesConfig
    path: InternalPathConfig
    logging: InternalLoggingConfig = Field(
        default_factory=lambda: InternalLoggingConfig(level="INFO")
    )

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )
