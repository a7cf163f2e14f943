"""Path dialect: options embedded as path segments.

Two segment shapes are recognised:

* ``_name=value`` or ``_name:value`` where ``name`` is a registry name or
  one of its short aliases (``/_width=800/``, ``/_fit:contain/``)
* a bare segment equal to a configured derivative name (``/thumbnail/``)
"""

import logging
import re
from typing import Optional

from imgparams.parameters.coercion import coerce_value
from imgparams.parameters.registry import ParameterDefinition, lookup_definition
from imgparams.parsers.base import Dialect, DialectParser
from imgparams.schemas.records import ImageRequest, ParameterInstance, ProcessingContext

__all__ = ['PathParser']

logger = logging.getLogger(__name__)

_OPTION_SEGMENT = re.compile(r"^_([A-Za-z][\w-]*)[=:](.*)$")


class PathParser(DialectParser):
    """Extracts one parameter instance per recognised path segment."""

    dialect = Dialect.PATH

    def __init__(self, config):
        super().__init__(config)
        self.derivatives = frozenset(config.path.derivatives)
        self.vendor_prefix = config.legacy.prefix

    def matches(self, request: ImageRequest) -> bool:
        for segment in request.segments:
            if segment.startswith("_") and ("=" in segment or ":" in segment):
                return True
            if segment.lower() in self.derivatives:
                return True
        return False

    def parse(
        self,
        request: ImageRequest,
        context: ProcessingContext,
        diagnostics: Optional[dict] = None,
    ) -> list[ParameterInstance]:
        instances = []
        for segment in request.segments:
            if segment.lower() in self.derivatives:
                instances.append(self.make_instance("derivative", segment.lower()))
                logger.debug("Path derivative segment: %s", segment)
                continue

            option = self._parse_option(segment)
            if option is None:
                continue
            definition, raw = option
            value = coerce_value(definition, raw)
            instances.append(self.make_instance(definition.name, value))
            logger.debug("Path parameter %s=%r", definition.name, value)
        return instances

    def _parse_option(self, segment: str) -> Optional[tuple[ParameterDefinition, str]]:
        match = _OPTION_SEGMENT.match(segment)
        if match is None:
            return None
        definition = lookup_definition(match.group(1).lower(), allow_alias=True)
        if definition is None or not definition.accepted_by(self.dialect.value):
            return None
        return definition, match.group(2)

    def is_option_segment(self, segment: str) -> bool:
        """True for segments that carry options rather than image path."""
        lowered = segment.lower()
        if lowered in self.derivatives or self._parse_option(segment) is not None:
            return True
        return lowered.startswith(f"{self.vendor_prefix}-") or lowered.startswith(
            f"{self.vendor_prefix}("
        )

    def strip_option_segments(self, path: str) -> str:
        """Return ``path`` without option, derivative and vendor segments.

        >>> parser.strip_option_segments("/thumbnail/_width=300/photos/cat.jpg")
        '/photos/cat.jpg'
        """
        request = ImageRequest(path=path)
        kept = [segment for segment in request.segments if not self.is_option_segment(segment)]
        return "/" + "/".join(kept)
