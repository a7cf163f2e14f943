"""UserConfig: Forgiving, minimal user-facing configuration.

Accepts user inputs with aliases for common naming patterns
(e.g., ADVANCED_FEATURES -> advanced_features, LOG_LEVEL -> log_level).
Users only specify what they want to override from the expert defaults.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from imgparams.schemas.base import ImgParamsBaseModel


class UserPriorityConfig(ImgParamsBaseModel):
    """User-facing dialect priorities."""
    path: Optional[int] = None
    legacy: Optional[int] = None
    standard: Optional[int] = None
    compact: Optional[int] = None
    derived_boost: Optional[int] = None


class UserLegacyConfig(ImgParamsBaseModel):
    """User-facing legacy dialect constants."""
    prefix: Optional[str] = None
    default_overlay_offset: Optional[float] = None
    blur_scale: Optional[float] = None
    blur_max: Optional[float] = None
    sharpen_max: Optional[float] = None
    quality_levels: Optional[dict[str, int]] = None


class UserConfig(ImgParamsBaseModel):
    """User-facing configuration schema.

    Usage
    -----
        user_cfg = UserConfig(
            ADVANCED_FEATURES=True,
            DERIVATIVES="thumbnail,hero",
            OVERLAY_OFFSET=10,
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    advanced_features: Optional[bool] = Field(None, alias="ADVANCED_FEATURES")
    derivatives: Optional[list[str]] = Field(None, alias="DERIVATIVES")
    overlay_offset: Optional[float] = Field(None, alias="OVERLAY_OFFSET")
    vendor_prefix: Optional[str] = Field(None, alias="VENDOR_PREFIX")
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = Field(
        None, alias="LOG_LEVEL"
    )

    # Nested overrides (advanced users)
    priorities: Optional[UserPriorityConfig] = None
    legacy: Optional[UserLegacyConfig] = None

    model_config = ImgParamsBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("derivatives", mode="before")
    @classmethod
    def split_derivatives(cls, v):
        """Accept a comma separated string of derivative names."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

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

        if self.advanced_features is not None:
            overrides["features"] = {"advanced": self.advanced_features}

        if self.derivatives is not None:
            overrides["path"] = {"derivatives": list(self.derivatives)}

        legacy = {}
        if self.overlay_offset is not None:
            legacy["default_overlay_offset"] = self.overlay_offset
        if self.vendor_prefix is not None:
            legacy["prefix"] = self.vendor_prefix
        if self.legacy is not None:
            legacy.update(self.legacy.model_dump(exclude_none=True))
        if legacy:
            overrides["legacy"] = legacy

        if self.priorities is not None:
            priorities = self.priorities.model_dump(exclude_none=True)
            if priorities:
                overrides["priorities"] = priorities

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
