"""Request-scoped records flowing through the resolution pipeline.

Every record here is created when a request enters the pipeline and is
discarded once the canonical option map has been produced. None of them
are shared across requests.
"""

import re
from enum import Enum
from typing import Any, Callable, Literal, Optional, Union
from urllib.parse import parse_qsl, unquote

from pydantic import Field

from imgparams.schemas.base import RecordModel


Dimensions = tuple[float, float]

_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")


class Source(str, Enum):
    """Provenance tag of a parameter instance."""
    STANDARD = "standard"
    COMPACT = "compact"
    PATH = "path"
    LEGACY = "legacy-vendor"
    DERIVED = "derived"


class ParameterInstance(RecordModel):
    """One parsed occurrence of a named parameter.

    Attributes
    ----------
    name : str
        Canonical parameter name (``width``, ``fit``, ``overlays``...).
    value : Any
        Scalar, or a list of overlay fragments/descriptors for ``overlays``.
    source : Source
        Dialect the instance came from, or ``derived`` for remapped values.
    priority : int
        Higher wins when several instances share a name.
    explicit_width, explicit_height : bool
        Set when a dimension was supplied by a human-authored source.
    origin : Source, optional
        Source of the instance a derived instance was produced from.
    derived_from : str, optional
        Name of the instance a derived instance was produced from.
    occurrence : int
        Position in the combined parse order; earlier wins exact ties.
    """

    name: str
    value: Any
    source: Source
    priority: int
    explicit_width: bool = False
    explicit_height: bool = False
    origin: Optional[Source] = None
    derived_from: Optional[str] = None
    occurrence: int = 0


class ImageRequest(RecordModel):
    """Raw request input: the URL path and the ordered query pairs."""

    path: str = "/"
    query: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_url(cls, url: str) -> "ImageRequest":
        """Build a request from an absolute URL or a ``path?query`` string.

        Only a leading ``scheme://host`` is removed; everything else before
        the ``?`` is path, so ``//a/b.jpg`` keeps both segments and no input
        raises.
        """
        head, _, query = url.partition("#")[0].partition("?")
        if _SCHEME.match(head):
            head = "/" + head.split("://", 1)[1].partition("/")[2]
        return cls(
            path=head or "/",
            query=tuple(parse_qsl(query, keep_blank_values=True)),
        )

    @property
    def query_keys(self) -> set[str]:
        return {key for key, _ in self.query}

    @property
    def segments(self) -> list[str]:
        """Non-empty, percent-decoded path segments."""
        return [unquote(segment) for segment in self.path.split("/") if segment]


class ProcessingContext(RecordModel):
    """Per-request inputs supplied by collaborators.

    ``dimensions`` takes precedence over ``dimension_lookup``. The lookup
    is only called when a condition directive needs evaluating, and at
    most once per request.
    """

    advanced_features: bool = False
    dimensions: Optional[Dimensions] = None
    dimension_lookup: Optional[Callable[[], Optional[Dimensions]]] = None


class ConditionDirective(RecordModel):
    """Parsed ``<property><operator><threshold>,<then clause>`` directive."""

    property_name: Literal["width", "height", "ratio", "format"]
    operator: Literal[">", ">=", "<", "<=", "=", "!="]
    threshold: float
    then_clause: str


class OverlayFragment(RecordModel):
    """Partial overlay properties from one source fragment.

    Fragments sharing an ``occurrence`` describe the same overlay and are
    collapsed into a single ``OverlayDescriptor``.
    """

    occurrence: int = 0
    url: Optional[str] = None
    placement: Optional[str] = None
    offset: Optional[float] = Field(None, ge=0)
    top: Optional[float] = None
    right: Optional[float] = None
    bottom: Optional[float] = None
    left: Optional[float] = None
    width: Optional[int] = Field(None, gt=0)
    height: Optional[int] = Field(None, gt=0)
    opacity: Optional[float] = Field(None, ge=0, le=1)
    repeat: Optional[Union[bool, Literal["x", "y"]]] = None
    fit: Optional[str] = None
    background: Optional[str] = None
    rotate: Optional[Literal[90, 180, 270]] = None


class OverlayDescriptor(RecordModel):
    """Fully resolved overlay, shaped like the downstream ``draw`` entry."""

    url: str
    top: Optional[float] = None
    right: Optional[float] = None
    bottom: Optional[float] = None
    left: Optional[float] = None
    width: Optional[int] = None
    height: Optional[int] = None
    opacity: Optional[float] = None
    repeat: Optional[Union[bool, Literal["x", "y"]]] = None
    fit: Optional[str] = None
    background: Optional[str] = None
    rotate: Optional[Literal[90, 180, 270]] = None

    def to_wire(self) -> dict:
        wire = {}
        for key, value in self.model_dump(exclude_none=True).items():
            if isinstance(value, float) and value.is_integer():
                value = int(value)
            wire[key] = value
        return wire


class ResolutionResult(RecordModel):
    """Canonical options plus diagnostic metadata for one request."""

    options: dict[str, Any]
    diagnostics: dict[str, Any] = Field(default_factory=dict)
