"""imgparams user configuration.

This is the user-facing configuration file. Modify settings here to
customize resolver behavior. Expert defaults live in imgparams.schemas.param.

Usage:
    python scripts/resolve_url.py "/cat.jpg?w=800" --config scripts/user_config.py
"""

CONFIG = {
    # ========================================================================
    # FEATURES
    # ========================================================================
    "ADVANCED_FEATURES": False,   # blur, mirror, composite, if-dimension

    # ========================================================================
    # PATH DIALECT
    # ========================================================================
    "DERIVATIVES": "thumbnail,avatar,banner,header,preview",

    # ========================================================================
    # LEGACY VENDOR DIALECT
    # ========================================================================
    "VENDOR_PREFIX": "im",
    "OVERLAY_OFFSET": 5,          # Default composite placement offset

    # ========================================================================
    # LOGGING
    # ========================================================================
    "LOG_LEVEL": "INFO",

    # Nested overrides (advanced users)
    # "priorities": {"path": 60, "legacy": 55, "standard": 50, "compact": 50},
    # "legacy": {"quality_levels": {"low": 50, "medium": 75, "high": 90}},
}
