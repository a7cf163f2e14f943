"""ParamConfig: Expert defaults for the parameter resolution pipeline.

This module defines the complete default configuration. Every tunable of
the resolver has its default here; no runtime code defines fallback values.

Runtime code NEVER reads from ParamConfig directly - it only receives
InternalConfig.
"""

from typing import Literal
from pydantic import Field, field_validator
from imgparams.schemas.base import ImgParamsBaseModel


# =============================================================================
# Nested Configuration Models
# =============================================================================

class PriorityConfig(ImgParamsBaseModel):
    """Base priority per dialect and the boost given to derived instances."""
    path: int = Field(60, ge=0, description="Path-segment dialect")
    legacy: int = Field(55, ge=0, description="Legacy vendor dialect")
    standard: int = Field(50, ge=0, description="Standard named-parameter dialect")
    compact: int = Field(50, ge=0, description="Compact short-key dialect")
    derived_boost: int = Field(20, ge=1, description="Boost for remapped/derived instances")


class LegacyConfig(ImgParamsBaseModel):
    """Translation constants for the legacy vendor dialect."""
    prefix: str = "im"
    default_overlay_offset: float = Field(5, ge=0)
    blur_scale: float = Field(2.5, gt=0)
    blur_max: float = Field(250.0, gt=0)
    sharpen_max: float = Field(10.0, gt=0)
    quality_levels: dict[str, int] = Field(
        default_factory=lambda: {"low": 50, "medium": 75, "high": 90}
    )

    @field_validator("prefix", mode="before")
    @classmethod
    def normalize_prefix(cls, v):
        """Vendor prefix is matched case-insensitively."""
        if isinstance(v, str):
            return v.lower().strip()
        return v

    @field_validator("quality_levels")
    @classmethod
    def check_quality_levels(cls, v):
        """Named quality levels must map into 1..100."""
        for name, level in v.items():
            if not 1 <= level <= 100:
                raise ValueError(f"quality level '{name}' out of range: {level}")
        return {name.lower(): level for name, level in v.items()}


class FeaturesConfig(ImgParamsBaseModel):
    """Feature gates."""
    advanced: bool = False


class PathConfig(ImgParamsBaseModel):
    """Path-segment dialect settings."""
    derivatives: list[str] = Field(
        default_factory=lambda: ["thumbnail", "avatar", "banner", "header", "preview"]
    )

    @field_validator("derivatives", mode="before")
    @classmethod
    def normalize_derivatives(cls, v):
        """Accept a comma separated string and lowercase every name."""
        if isinstance(v, str):
            v = [item for item in v.split(",") if item.strip()]
        return [str(item).strip().lower() for item in v]


class LoggingConfig(ImgParamsBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(ImgParamsBaseModel):
    """Complete expert configuration with all defaults.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    priorities: PriorityConfig = Field(default_factory=PriorityConfig)
    legacy: LegacyConfig = Field(default_factory=LegacyConfig)
    features: FeaturesConfig = Field(default_factory=FeaturesConfig)
    path: PathConfig = Field(default_factory=PathConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
