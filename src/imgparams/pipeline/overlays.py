"""Overlay fragment collapsing and placement resolution."""

import logging
from types import MappingProxyType
from typing import Iterable, Optional

from pydantic import ValidationError

from imgparams.schemas.records import OverlayDescriptor, OverlayFragment

__all__ = ['PLACEMENTS', 'placement_offsets', 'collapse_fragments']

logger = logging.getLogger(__name__)

PLACEMENTS = MappingProxyType({
    "north": ("top",),
    "top": ("top",),
    "south": ("bottom",),
    "bottom": ("bottom",),
    "east": ("right",),
    "right": ("right",),
    "west": ("left",),
    "left": ("left",),
    "northeast": ("top", "right"),
    "topright": ("top", "right"),
    "northwest": ("top", "left"),
    "topleft": ("top", "left"),
    "southeast": ("bottom", "right"),
    "bottomright": ("bottom", "right"),
    "southwest": ("bottom", "left"),
    "bottomleft": ("bottom", "left"),
    "center": (),
})

_DESCRIPTOR_FIELDS = tuple(OverlayDescriptor.model_fields)


def placement_offsets(placement: str, magnitude: float) -> Optional[dict[str, float]]:
    """Translate a compass placement into directional offsets.

    Returns None for an unknown placement.

    >>> placement_offsets("southeast", 5)
    {'bottom': 5, 'right': 5}
    >>> placement_offsets("center", 5)
    {}
    """
    key = placement.strip().lower().replace("-", "").replace("_", "").replace(" ", "")
    edges = PLACEMENTS.get(key)
    if edges is None:
        return None
    return {edge: magnitude for edge in edges}


def collapse_fragments(
    fragments: Iterable[OverlayFragment],
    default_offset: float,
) -> list[OverlayDescriptor]:
    """Merge fragments per occurrence into ordered overlay descriptors.

    Within one occurrence later fragments override earlier ones. Offsets
    implied by a placement never override offsets given explicitly.
    Descriptors without a url, or with opposing edges both set (top and
    bottom, left and right), are dropped.
    """
    grouped: dict[int, dict] = {}
    for fragment in fragments:
        combined = grouped.setdefault(fragment.occurrence, {})
        combined.update(fragment.model_dump(exclude_none=True, exclude={"occurrence"}))

    descriptors = []
    for occurrence, combined in grouped.items():
        if not combined.get("url"):
            logger.debug("Dropping overlay %d: no url", occurrence)
            continue

        placement = combined.pop("placement", None)
        magnitude = combined.pop("offset", default_offset)
        if placement is not None:
            offsets = placement_offsets(placement, magnitude)
            if offsets is None:
                logger.debug("Overlay %d: unknown placement %s", occurrence, placement)
            else:
                for edge, value in offsets.items():
                    combined.setdefault(edge, value)

        if ("top" in combined and "bottom" in combined) or ("left" in combined and "right" in combined):
            logger.debug("Dropping overlay %d: conflicting edge offsets", occurrence)
            continue

        try:
            descriptors.append(OverlayDescriptor(
                **{key: combined[key] for key in _DESCRIPTOR_FIELDS if key in combined}
            ))
        except ValidationError as exc:
            logger.debug("Dropping overlay %d: %s", occurrence, exc.errors()[0]["msg"])

    logger.debug("Collapsed %d overlay descriptor(s)", len(descriptors))
    return descriptors
