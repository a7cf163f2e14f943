"""CLIConfig: Command-line operational overrides.

Minimal configuration for settings that commonly change between runs of
the resolver CLI: the advanced-features gate and verbosity.
"""

from typing import Literal, Optional
from imgparams.schemas.base import ImgParamsBaseModel


class CLIConfig(ImgParamsBaseModel):
    """Command-line configuration overrides.

    Highest priority in config resolution.

    Usage
    -----
        cli_cfg = CLIConfig(advanced_features=True, log_level="DEBUG")
        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    advanced_features: Optional[bool] = None
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.advanced_features is not None:
            overrides["features"] = {"advanced": self.advanced_features}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
