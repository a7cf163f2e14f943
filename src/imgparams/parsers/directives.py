"""Legacy vendor directive table.

Every legacy spelling (dot notation, equals notation and the two path
forms) is first reduced to a ``(directive, arguments)`` pair. This module
decodes such pairs into ``(canonical name, value)`` pairs, so equivalent
spellings always produce identical results.

Argument strings are comma separated clauses. A clause is ``key=value``,
``key:value`` or a bare positional value; commas inside parentheses do not
split (``Resize=(800,600)``).
"""

import logging
import re
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Optional

from pydantic import ValidationError

from imgparams.parameters.coercion import (
    fold_rotation,
    parse_boolean,
    parse_number,
    split_top_level,
)
from imgparams.schemas.records import OverlayFragment

if TYPE_CHECKING:
    from imgparams.schemas.internal import InternalLegacyConfig

__all__ = [
    'DirectiveDecoder',
    'canonical_directive',
    'parse_clauses',
    'ADVANCED_DIRECTIVES',
    'RESIZE_MODES',
]

logger = logging.getLogger(__name__)

DecodedPairs = list[tuple[str, Any]]

RESIZE_MODES = MappingProxyType({
    "fit": "contain",
    "stretch": "scale-down",
    "fill": "cover",
    "crop": "crop",
    "pad": "pad",
})

METADATA_MODES = MappingProxyType({
    "none": "none",
    "no": "none",
    "copyright": "copyright",
    "minimal": "copyright",
    "all": "keep",
    "keep": "keep",
})

MIRROR_MODES = MappingProxyType({
    "horizontal": ("flip",),
    "h": ("flip",),
    "vertical": ("flop",),
    "v": ("flop",),
    "both": ("flip", "flop"),
    "hv": ("flip", "flop"),
    "vh": ("flip", "flop"),
})

POLICY_FITS = MappingProxyType({
    "letterbox": "pad",
    "cropfit": "cover",
})

SUPPORTED_FORMATS = frozenset({"webp", "jpeg", "png", "gif", "avif", "auto"})
FORMAT_ALIASES = MappingProxyType({"jpg": "jpeg"})

DIRECTIVE_ALIASES = MappingProxyType({
    "watermark": "composite",
    "ifdimension": "if-dimension",
    "unsharp": "sharpen",
    "backgroundcolor": "background",
    "animationframeindex": "frame",
    "smartcrop": "featurecrop",
})

# Directives only honoured when advanced features are enabled
ADVANCED_DIRECTIVES = frozenset({"blur", "mirror", "composite", "if-dimension"})

_CLAUSE = re.compile(r"^([A-Za-z][\w-]*)\s*[:=]\s*(.*)$", re.DOTALL)
_HEX = re.compile(r"^[0-9A-Fa-f]{6}$")
_SHORT_HEX = re.compile(r"^[0-9A-Fa-f]{3}$")


def canonical_directive(name: str) -> str:
    key = name.strip().lower()
    return DIRECTIVE_ALIASES.get(key, key)


def _normalize_key(key: str) -> str:
    return key.lower().replace("-", "").replace("_", "")


def parse_clauses(raw: str) -> list[tuple[Optional[str], str]]:
    """Split an argument string into ``(key, value)`` clauses.

    Positional clauses have a key of ``None``.

    >>> parse_clauses("width:800,height=600")
    [('width', '800'), ('height', '600')]
    >>> parse_clauses("(800,600)")
    [(None, '800'), (None, '600')]
    """
    text = raw.strip()
    if text.startswith("(") and text.endswith(")"):
        text = text[1:-1]
    clauses = []
    for chunk in split_top_level(text):
        match = _CLAUSE.match(chunk)
        if match:
            clauses.append((_normalize_key(match.group(1)), match.group(2).strip()))
        else:
            clauses.append((None, chunk))
    return clauses


def _clause_map(raw: str) -> tuple[dict[str, str], list[str]]:
    named = {}
    positional = []
    for key, value in parse_clauses(raw):
        if key is None:
            positional.append(value)
        else:
            named.setdefault(key, value)
    return named, positional


def _first(named: dict, positional: list, *keys: str, index: int = 0) -> Optional[str]:
    for key in keys:
        if key in named:
            return named[key]
    if len(positional) > index:
        return positional[index]
    return None


def _number_text(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _offset_gravity(hoffset: float, voffset: float) -> str:
    horizontal = "left" if hoffset <= 0.25 else "right" if hoffset >= 0.75 else None
    vertical = "top" if voffset <= 0.25 else "bottom" if voffset >= 0.75 else None
    if horizontal and vertical:
        return f"{vertical}-{horizontal}"
    return vertical or horizontal or "center"


class DirectiveDecoder:
    """Decodes legacy directives for one request.

    A decoder is created per request: it numbers composite occurrences and
    records which advanced directives were skipped.

    Parameters
    ----------
    legacy : InternalLegacyConfig
        Legacy dialect constants (quality levels, blur scaling, prefix...).
    advanced_features : bool
        When False, blur, mirror, composite and condition directives are
        no-ops.
    """

    def __init__(self, legacy: "InternalLegacyConfig", advanced_features: bool):
        self.legacy = legacy
        self.advanced_features = advanced_features
        self.skipped: list[str] = []
        self._overlay_count = 0

        self._handlers: dict[str, Callable[[str], DecodedPairs]] = {
            "resize": self._resize,
            "crop": self._crop,
            "aspectcrop": self._aspect_crop,
            "quality": self._quality,
            "format": self._format,
            "rotate": self._rotate,
            "grayscale": self._grayscale,
            "contrast": lambda args: self._non_negative("contrast", args),
            "brightness": lambda args: self._non_negative("brightness", args),
            "sharpen": self._sharpen,
            "background": self._background,
            "metadata": self._metadata,
            "frame": lambda args: [("anim", False)],
            "facecrop": lambda args: [("gravity", "face"), ("fit", "cover")],
            "featurecrop": self._feature_crop,
            "blur": self._blur,
            "mirror": self._mirror,
            "composite": self._composite,
            "if-dimension": self._condition,
        }

        prefix = legacy.prefix
        self._query_handlers: dict[str, Callable[[str], DecodedPairs]] = {
            f"{prefix}width": lambda raw: self._vendor_dimension("imwidth", raw),
            f"{prefix}height": lambda raw: self._vendor_dimension("imheight", raw),
            f"{prefix}quality": self._quality,
            f"{prefix}format": self._format,
            f"{prefix}rotate": self._rotate,
            f"{prefix}crop": self._crop,
            f"{prefix}color": self._background,
            f"{prefix}policy": self._policy,
            f"{prefix}density": self._density,
            f"{prefix}bypass": lambda raw: [],
        }

    @property
    def query_keys(self) -> frozenset:
        return frozenset(self._query_handlers)

    def is_directive(self, name: str) -> bool:
        return canonical_directive(name) in self._handlers

    def decode(self, directive: str, args: str) -> DecodedPairs:
        """Decode one directive and its argument string."""
        name = canonical_directive(directive)
        handler = self._handlers.get(name)
        if handler is None:
            logger.debug("Ignoring unknown legacy directive: %s", directive)
            return []
        if name in ADVANCED_DIRECTIVES and not self.advanced_features:
            self.skipped.append(name)
            logger.debug("Skipping %s directive: advanced features disabled", name)
            return []
        pairs = handler(args)
        if not pairs:
            logger.debug("Legacy directive %s=%r produced no parameters", name, args)
        return pairs

    def decode_query_key(self, key: str, raw: str) -> DecodedPairs:
        """Decode a direct vendor query key such as ``imwidth``."""
        handler = self._query_handlers.get(key.lower())
        if handler is None:
            return []
        return handler(raw)

    # -------------------------------------------------------------------------
    # Geometry
    # -------------------------------------------------------------------------

    def _dimensions(self, named: dict, positional: list) -> DecodedPairs:
        pairs = []
        for index, name, short in ((0, "width", "w"), (1, "height", "h")):
            number = parse_number(_first(named, positional, name, short, index=index))
            if number is not None and number > 0:
                pairs.append((name, int(round(number))))
        return pairs

    def _resize(self, args: str) -> DecodedPairs:
        named, positional = _clause_map(args)
        pairs = self._dimensions(named, positional)
        mode = named.get("mode")
        if mode is not None:
            fit = RESIZE_MODES.get(mode.lower())
            if fit is None:
                logger.debug("Unknown resize mode: %s", mode)
            else:
                pairs.append(("fit", fit))
        return pairs

    def _crop(self, args: str) -> DecodedPairs:
        named, positional = _clause_map(args)
        if "rect" in named:
            rect = [parse_number(part) for part in split_top_level(named["rect"].strip("()"))]
        elif "x" in named and "y" in named:
            rect = [parse_number(named.get(key)) for key in ("x", "y")]
            rect += [parse_number(_first(named, [], name, short)) for name, short in
                     (("width", "w"), ("height", "h"))]
        elif len(positional) == 4:
            rect = [parse_number(part) for part in positional]
        else:
            rect = None

        if rect is not None:
            if len(rect) != 4 or any(value is None for value in rect):
                return []
            x, y, w, h = rect
            if x < 0 or y < 0 or w <= 0 or h <= 0:
                return []
            edges = (y, x + w, y + h, x)
            return [("trim", ";".join(_number_text(edge) for edge in edges))]

        pairs = self._dimensions(named, [])
        if pairs:
            pairs.append(("fit", "crop"))
        return pairs

    def _aspect_crop(self, args: str) -> DecodedPairs:
        named, _ = _clause_map(args)
        ratio_width = parse_number(named.get("width"))
        ratio_height = parse_number(named.get("height"))
        if (ratio_width is None or ratio_height is None) and "aspect" in named:
            parts = re.split(r"[:x-]", named["aspect"])
            if len(parts) == 2:
                ratio_width, ratio_height = parse_number(parts[0]), parse_number(parts[1])
        if not ratio_width or not ratio_height or ratio_width <= 0 or ratio_height <= 0:
            return []

        pairs = [
            ("aspect", f"{_number_text(ratio_width)}:{_number_text(ratio_height)}"),
            ("ctx", True),
        ]

        x = parse_number(named.get("xposition"))
        y = parse_number(named.get("yposition"))
        if x is not None and y is not None and 0 <= x <= 1 and 0 <= y <= 1:
            pairs.append(("focal", f"{x},{y}"))

        hoffset = parse_number(named.get("hoffset"))
        voffset = parse_number(named.get("voffset"))
        pairs.append((
            "gravity",
            _offset_gravity(0.5 if hoffset is None else hoffset, 0.5 if voffset is None else voffset),
        ))

        if parse_boolean(named.get("allowexpansion")):
            pairs.append(("background", "transparent"))
        return pairs

    def _feature_crop(self, args: str) -> DecodedPairs:
        named, positional = _clause_map(args)
        return self._dimensions(named, positional) + [("gravity", "auto"), ("fit", "cover")]

    def _rotate(self, args: str) -> DecodedPairs:
        named, positional = _clause_map(args)
        rotation = fold_rotation(_first(named, positional, "degrees", "angle", "value"))
        return [] if rotation is None else [("rotate", rotation)]

    def _policy(self, raw: str) -> DecodedPairs:
        fit = POLICY_FITS.get(raw.strip().lower())
        return [] if fit is None else [("fit", fit)]

    def _vendor_dimension(self, name: str, raw: str) -> DecodedPairs:
        number = parse_number(raw)
        if number is None or number <= 0:
            return []
        return [(name, int(round(number)))]

    # -------------------------------------------------------------------------
    # Output and adjustments
    # -------------------------------------------------------------------------

    def _quality(self, args: str) -> DecodedPairs:
        named, positional = _clause_map(args)
        raw = _first(named, positional, "quality", "value")
        if raw is None:
            return []
        level = self.legacy.quality_levels.get(raw.strip().lower())
        if level is not None:
            return [("quality", level)]
        number = parse_number(raw)
        return [] if number is None else [("quality", int(round(number)))]

    def _format(self, args: str) -> DecodedPairs:
        named, positional = _clause_map(args)
        raw = _first(named, positional, "format", "type", "value")
        if raw is None:
            return []
        fmt = raw.strip().lower()
        fmt = FORMAT_ALIASES.get(fmt, fmt)
        if fmt not in SUPPORTED_FORMATS:
            logger.debug("Unsupported legacy format %s, using auto", raw)
            fmt = "auto"
        return [("format", fmt)]

    def _density(self, raw: str) -> DecodedPairs:
        number = parse_number(raw)
        return [] if number is None else [("dpr", number)]

    def _grayscale(self, args: str) -> DecodedPairs:
        named, positional = _clause_map(args)
        raw = _first(named, positional, "grayscale", "value")
        if raw is not None and not parse_boolean(raw):
            return []
        return [("saturation", 0)]

    def _non_negative(self, name: str, args: str) -> DecodedPairs:
        named, positional = _clause_map(args)
        number = parse_number(_first(named, positional, name, "value"))
        if number is None or number < 0:
            return []
        return [(name, float(number))]

    def _sharpen(self, args: str) -> DecodedPairs:
        named, positional = _clause_map(args)
        amount = parse_number(_first(named, positional, "amount", "sharpen", "value"))
        if amount is None or amount < 0:
            return []
        if amount > 20:
            amount = amount / 10
        amount = min(amount, self.legacy.sharpen_max)
        return [("sharpen", int(amount) if float(amount).is_integer() else amount)]

    def _background(self, args: str) -> DecodedPairs:
        named, positional = _clause_map(args)
        raw = _first(named, positional, "color", "background", "value")
        if raw is None:
            return []
        color = raw.strip()
        if color.lower() == "transparent":
            return [("background", "transparent")]
        color = color.lstrip("#")
        if _SHORT_HEX.match(color):
            color = "".join(char * 2 for char in color)
        if not _HEX.match(color):
            return []
        return [("background", f"#{color.lower()}")]

    def _metadata(self, args: str) -> DecodedPairs:
        named, positional = _clause_map(args)
        raw = _first(named, positional, "metadata", "value")
        mode = METADATA_MODES.get((raw or "").strip().lower())
        return [] if mode is None else [("metadata", mode)]

    # -------------------------------------------------------------------------
    # Advanced features
    # -------------------------------------------------------------------------

    def _blur(self, args: str) -> DecodedPairs:
        named, positional = _clause_map(args)
        amount = parse_number(_first(named, positional, "amount", "blur", "value"))
        if amount is None:
            return []
        scaled = max(0.0, min(amount * self.legacy.blur_scale, self.legacy.blur_max))
        return [("blur", int(scaled) if scaled.is_integer() else scaled)]

    def _mirror(self, args: str) -> DecodedPairs:
        named, positional = _clause_map(args)
        raw = _first(named, positional, "mirror", "direction", "value")
        targets = MIRROR_MODES.get((raw or "").strip().lower())
        if targets is None:
            return []
        return [(target, True) for target in targets]

    def _composite(self, args: str) -> DecodedPairs:
        named, _ = _clause_map(args)
        fields: dict[str, Any] = {}

        url = named.get("url")
        image = named.get("image")
        if url is None and image is not None:
            if image.startswith("("):
                url = dict(parse_clauses(image)).get("url")
            else:
                url = image
        if url:
            fields["url"] = url

        if "placement" in named:
            fields["placement"] = named["placement"].lower()
        opacity = parse_number(named.get("opacity"))
        if opacity is not None:
            fields["opacity"] = max(0.0, min(opacity / 100, 1.0))
        for name in ("width", "height"):
            number = parse_number(named.get(name))
            if number is not None and number > 0:
                fields[name] = int(round(number))
        tile = named.get("tile", named.get("repeat"))
        if tile is not None:
            lowered = tile.strip().lower()
            fields["repeat"] = lowered if lowered in ("x", "y") else parse_boolean(lowered)
        for name in ("fit", "background"):
            if named.get(name):
                fields[name] = named[name]
        if "rotate" in named:
            fields["rotate"] = fold_rotation(named["rotate"])
        offset = parse_number(named.get("offset"))
        if offset is not None and offset >= 0:
            fields["offset"] = offset

        fields = {key: value for key, value in fields.items() if value is not None}
        try:
            fragment = OverlayFragment(occurrence=self._overlay_count, **fields)
        except ValidationError as exc:
            logger.debug("Dropping composite directive %r: %s", args, exc.errors()[0]["msg"])
            return []
        self._overlay_count += 1
        return [("overlays", fragment)]

    def _condition(self, args: str) -> DecodedPairs:
        text = args.strip()
        return [("condition", text)] if text else []
