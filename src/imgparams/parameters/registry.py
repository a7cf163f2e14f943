"""Static parameter registry and size-code table.

Both tables are built once at import time and exposed read-only through
``MappingProxyType``. Nothing in the pipeline mutates them.
"""

import re
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Optional

from imgparams.schemas.base import RecordModel
from imgparams.schemas.records import OverlayDescriptor, OverlayFragment

__all__ = [
    'ParameterType',
    'ParameterDefinition',
    'PARAMETER_REGISTRY',
    'SIZE_CODES',
    'lookup_definition',
]


class ParameterType(str, Enum):
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"
    ENUM = "enum"
    STRUCTURED = "structured"


class ParameterDefinition(RecordModel):
    """Registry entry for one canonical parameter.

    Attributes
    ----------
    name : str
        Canonical name.
    type : ParameterType
        Coercion hint for raw string values.
    accepts_auto : bool
        Whether the literal ``auto`` is valid in place of a typed value.
    validator : callable, optional
        Predicate run before the ``allowed_values`` check.
    default_value : Any, optional
        Substituted when validation fails. ``None`` means "drop instead".
    allowed_values : tuple, optional
        Closed value set for enum-like parameters.
    formatter : callable, optional
        Maps the validated value to its downstream wire representation.
    aliases : tuple of str
        Short names accepted by the compact and path dialects.
    internal : bool
        Internal-only names never reach the canonical option map.
    dialects : tuple of str
        When non-empty, only these dialects may produce the parameter.
    """

    name: str
    type: ParameterType
    accepts_auto: bool = False
    validator: Optional[Callable[[Any], bool]] = None
    default_value: Any = None
    allowed_values: Optional[tuple] = None
    formatter: Optional[Callable[[Any], Any]] = None
    aliases: tuple[str, ...] = ()
    internal: bool = False
    dialects: tuple[str, ...] = ()

    def is_valid(self, value: Any) -> bool:
        if self.accepts_auto and value == "auto":
            return True
        if self.validator is not None and not self.validator(value):
            return False
        if self.allowed_values is not None and value not in self.allowed_values:
            return False
        return True

    def accepted_by(self, dialect: str) -> bool:
        return not self.dialects or dialect in self.dialects

    def format(self, value: Any) -> Any:
        if self.formatter is None or value == "auto":
            return value
        return self.formatter(value)


# =============================================================================
# Validators and formatters
# =============================================================================

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")
_ASPECT = re.compile(r"^\d+(?:\.\d+)?[:-]\d+(?:\.\d+)?$")
_TRIM = re.compile(r"^\d+(?:\.\d+)?(?:;\d+(?:\.\d+)?){3}$")


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _in_range(low: float, high: float) -> Callable[[Any], bool]:
    def check(value) -> bool:
        return _is_number(value) and low <= value <= high
    return check


def _is_positive(value) -> bool:
    return _is_number(value) and value > 0


def _is_bool(value) -> bool:
    return isinstance(value, bool)


def _is_text(value) -> bool:
    return isinstance(value, str) and bool(value)


def _is_focal(value) -> bool:
    if not isinstance(value, str) or "," not in value:
        return False
    try:
        x, y = (float(part) for part in value.split(","))
    except ValueError:
        return False
    return 0 <= x <= 1 and 0 <= y <= 1


def _is_background(value) -> bool:
    return isinstance(value, str) and (value == "transparent" or bool(_HEX_COLOR.match(value)))


def _is_overlay_list(value) -> bool:
    return (
        isinstance(value, list)
        and len(value) > 0
        and all(isinstance(item, (OverlayFragment, OverlayDescriptor)) for item in value)
    )


def _integral(value):
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _whole(value):
    """Round a pixel dimension half-up, never below one pixel."""
    if isinstance(value, float):
        return max(1, int(value + 0.5))
    return value


def _format_aspect(value: str) -> str:
    return value.replace("-", ":")


def _format_overlays(value) -> list:
    return [item.to_wire() for item in value if isinstance(item, OverlayDescriptor)]


# =============================================================================
# Tables
# =============================================================================

SIZE_CODES = MappingProxyType({
    "xxu": 40,
    "xu": 80,
    "u": 160,
    "xxxs": 300,
    "xxs": 400,
    "xs": 500,
    "s": 600,
    "m": 700,
    "l": 750,
    "xl": 900,
    "xxl": 1100,
    "xxxl": 1400,
    "sg": 1600,
    "g": 2000,
    "xg": 3000,
    "xxg": 4000,
})

_DEFINITIONS = [
    ParameterDefinition(name="width", type=ParameterType.NUMBER, accepts_auto=True,
                        validator=_is_positive, formatter=_whole, aliases=("w",)),
    ParameterDefinition(name="height", type=ParameterType.NUMBER, accepts_auto=True,
                        validator=_is_positive, formatter=_whole, aliases=("h",)),
    ParameterDefinition(name="fit", type=ParameterType.ENUM, default_value="cover",
                        allowed_values=("cover", "contain", "crop", "pad", "scale-down")),
    ParameterDefinition(name="quality", type=ParameterType.NUMBER, accepts_auto=True,
                        validator=_in_range(1, 100), default_value=85,
                        formatter=_integral, aliases=("q",)),
    ParameterDefinition(name="format", type=ParameterType.ENUM, default_value="auto",
                        allowed_values=("webp", "avif", "jpeg", "png", "gif", "auto",
                                        "json", "baseline-jpeg")),
    ParameterDefinition(name="gravity", type=ParameterType.ENUM, default_value="center",
                        allowed_values=("center", "face", "auto", "left", "right", "top",
                                        "bottom", "top-left", "top-right", "bottom-left",
                                        "bottom-right")),
    ParameterDefinition(name="aspect", type=ParameterType.STRING,
                        validator=lambda v: isinstance(v, str) and bool(_ASPECT.match(v)),
                        formatter=_format_aspect, aliases=("r",)),
    ParameterDefinition(name="focal", type=ParameterType.STRING, validator=_is_focal,
                        aliases=("p",)),
    ParameterDefinition(name="ctx", type=ParameterType.BOOLEAN, validator=_is_bool,
                        aliases=("s",)),
    ParameterDefinition(name="dpr", type=ParameterType.NUMBER, validator=_in_range(1, 3),
                        default_value=1, formatter=_integral),
    ParameterDefinition(name="background", type=ParameterType.STRING,
                        validator=_is_background),
    ParameterDefinition(name="blur", type=ParameterType.NUMBER, validator=_in_range(0, 250),
                        formatter=_integral),
    ParameterDefinition(name="sharpen", type=ParameterType.NUMBER, validator=_in_range(0, 10),
                        formatter=_integral),
    ParameterDefinition(name="brightness", type=ParameterType.NUMBER,
                        validator=_in_range(0, 10), default_value=1),
    ParameterDefinition(name="contrast", type=ParameterType.NUMBER,
                        validator=_in_range(0, 10), default_value=1),
    ParameterDefinition(name="saturation", type=ParameterType.NUMBER,
                        validator=_in_range(0, 10), default_value=1),
    ParameterDefinition(name="rotate", type=ParameterType.NUMBER, validator=_is_number,
                        allowed_values=(90, 180, 270), formatter=_integral),
    ParameterDefinition(name="flip", type=ParameterType.BOOLEAN, validator=_is_bool),
    ParameterDefinition(name="flop", type=ParameterType.BOOLEAN, validator=_is_bool),
    ParameterDefinition(name="trim", type=ParameterType.STRING,
                        validator=lambda v: isinstance(v, str) and bool(_TRIM.match(v))),
    ParameterDefinition(name="metadata", type=ParameterType.ENUM, default_value="none",
                        allowed_values=("none", "copyright", "keep")),
    ParameterDefinition(name="strip", type=ParameterType.BOOLEAN, validator=_is_bool,
                        default_value=False),
    ParameterDefinition(name="anim", type=ParameterType.BOOLEAN, validator=_is_bool,
                        default_value=True),
    ParameterDefinition(name="allowExpansion", type=ParameterType.BOOLEAN, validator=_is_bool,
                        default_value=False),
    ParameterDefinition(name="compression", type=ParameterType.ENUM, allowed_values=("fast",)),
    ParameterDefinition(name="onerror", type=ParameterType.ENUM, allowed_values=("redirect",)),
    ParameterDefinition(name="overlays", type=ParameterType.STRUCTURED,
                        validator=_is_overlay_list, formatter=_format_overlays),
    # Internal-only names
    ParameterDefinition(name="size_code", type=ParameterType.ENUM,
                        allowed_values=tuple(SIZE_CODES), aliases=("f",), internal=True,
                        dialects=("compact", "path")),
    ParameterDefinition(name="derivative", type=ParameterType.STRING, validator=_is_text,
                        internal=True, dialects=("path",)),
    ParameterDefinition(name="condition", type=ParameterType.STRING, validator=_is_text,
                        internal=True, dialects=("legacy-vendor",)),
    ParameterDefinition(name="imwidth", type=ParameterType.NUMBER, validator=_is_positive,
                        internal=True, dialects=("legacy-vendor",)),
    ParameterDefinition(name="imheight", type=ParameterType.NUMBER, validator=_is_positive,
                        internal=True, dialects=("legacy-vendor",)),
]

PARAMETER_REGISTRY = MappingProxyType({d.name: d for d in _DEFINITIONS})

_ALIASES = MappingProxyType({
    alias: definition.name for definition in _DEFINITIONS for alias in definition.aliases
})


def lookup_definition(name: str, allow_alias: bool = False) -> Optional[ParameterDefinition]:
    """Return the definition for a canonical name, or an alias when allowed."""
    definition = PARAMETER_REGISTRY.get(name)
    if definition is None and allow_alias:
        canonical = _ALIASES.get(name)
        if canonical is not None:
            definition = PARAMETER_REGISTRY[canonical]
    return definition
