"""Raw string to typed value coercion shared by every dialect parser."""

import json
import logging
import math
from typing import Any, Optional, Union

from pydantic import ValidationError

from imgparams.parameters.registry import ParameterDefinition, ParameterType
from imgparams.schemas.records import OverlayFragment

__all__ = [
    'parse_number',
    'parse_boolean',
    'split_top_level',
    'fold_rotation',
    'coerce_value',
    'decode_overlays',
]

logger = logging.getLogger(__name__)

_TRUE = frozenset({"true", "1", "yes", "on"})
_FALSE = frozenset({"false", "0", "no", "off"})


def parse_number(raw: Any) -> Optional[Union[int, float]]:
    """Parse a finite number, returning an ``int`` when it is integral.

    >>> parse_number("800")
    800
    >>> parse_number("1.5")
    1.5
    >>> parse_number("abc") is None
    True
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        number = float(raw)
    elif isinstance(raw, str):
        try:
            number = float(raw.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def parse_boolean(raw: Any) -> Optional[bool]:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
    return None


def split_top_level(raw: str, separator: str = ",") -> list[str]:
    """Split on ``separator`` except inside parentheses.

    >>> split_top_level("resize=(800,600),quality=80")
    ['resize=(800,600)', 'quality=80']
    """
    parts = []
    depth = 0
    current = []
    for char in raw:
        if char == "(":
            depth += 1
        elif char == ")" and depth > 0:
            depth -= 1
        if char == separator and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return [part.strip() for part in parts if part.strip()]


def fold_rotation(raw: Any) -> Optional[int]:
    """Fold an angle onto 90, 180 or 270 with a 45 degree capture window.

    Angles within 45 degrees of 0/360 produce no rotation (``None``).

    >>> fold_rotation("100")
    90
    >>> fold_rotation("-90")
    270
    >>> fold_rotation("30") is None
    True
    """
    angle = parse_number(raw)
    if angle is None:
        return None
    angle = ((angle % 360) + 360) % 360
    if 45 < angle <= 135:
        return 90
    if 135 < angle <= 225:
        return 180
    if 225 < angle <= 315:
        return 270
    return None


def coerce_value(definition: ParameterDefinition, raw: Any) -> Any:
    """Coerce a raw query/path value according to its registry type.

    Values that cannot be coerced are returned unchanged so the validation
    stage can substitute the registry default or drop them.
    """
    if not isinstance(raw, str):
        return raw
    text = raw.strip()
    if definition.accepts_auto and text.lower() == "auto":
        return "auto"

    if definition.type == ParameterType.NUMBER:
        number = parse_number(text)
        return text if number is None else number
    if definition.type == ParameterType.BOOLEAN:
        flag = parse_boolean(text)
        return text if flag is None else flag
    if definition.type == ParameterType.ENUM:
        return text.lower()
    if definition.type == ParameterType.STRUCTURED:
        fragments = decode_overlays(text)
        return text if fragments is None else fragments
    return text


def decode_overlays(raw: str) -> Optional[list[OverlayFragment]]:
    """Decode a JSON overlay object or array into fragments.

    Each array item becomes its own occurrence. Items that are not objects
    or fail validation are skipped.
    """
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError):
        logger.debug("Overlay payload is not JSON: %r", raw)
        return None

    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list):
        return None

    fragments = []
    for occurrence, item in enumerate(payload):
        if not isinstance(item, dict):
            continue
        fields = {key: value for key, value in item.items() if key in OverlayFragment.model_fields}
        fields.pop("occurrence", None)
        if "rotate" in fields:
            fields["rotate"] = fold_rotation(fields["rotate"])
        try:
            fragments.append(OverlayFragment(occurrence=occurrence, **fields))
        except ValidationError as exc:
            logger.debug("Skipping overlay item %d: %s", occurrence, exc.errors()[0]["msg"])
    return fragments or None
