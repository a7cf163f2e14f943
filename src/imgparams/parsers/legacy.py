"""Legacy vendor dialect in all of its spellings.

With the default ``im`` prefix the following are equivalent::

    ?im.resize=width:800,height:600,mode:fit          dot notation
    ?im=Resize,width=800,height=600,mode=fit          equals notation
    /im-resize=width:800,height:600,mode:fit/...      path, single directive
    /im(resize=width:800,height:600,mode:fit)/...     path, directive group

Each spelling is reduced to ``(directive, arguments)`` pairs which a single
``DirectiveDecoder`` turns into parameter instances.
"""

import logging
from typing import Any, Optional

from imgparams.parameters.coercion import split_top_level
from imgparams.parsers.base import Dialect, DialectParser
from imgparams.parsers.directives import DirectiveDecoder
from imgparams.schemas.records import (
    ImageRequest,
    OverlayFragment,
    ParameterInstance,
    ProcessingContext,
)

__all__ = ['LegacyVendorParser']

logger = logging.getLogger(__name__)

_VENDOR_KEY_SUFFIXES = (
    "width", "height", "policy", "color", "quality", "format",
    "bypass", "crop", "rotate", "density",
)


class LegacyVendorParser(DialectParser):
    """Parses the three legacy vendor spellings into one instance list."""

    dialect = Dialect.LEGACY

    def __init__(self, config):
        super().__init__(config)
        self.prefix = config.legacy.prefix
        self.vendor_keys = frozenset(f"{self.prefix}{suffix}" for suffix in _VENDOR_KEY_SUFFIXES)

    def matches(self, request: ImageRequest) -> bool:
        for key in request.query_keys:
            lowered = key.lower()
            if lowered == self.prefix or lowered.startswith(f"{self.prefix}.") or lowered in self.vendor_keys:
                return True
        return any(self._is_vendor_segment(segment) for segment in request.segments)

    def parse(
        self,
        request: ImageRequest,
        context: ProcessingContext,
        diagnostics: Optional[dict] = None,
    ) -> list[ParameterInstance]:
        decoder = DirectiveDecoder(self.config.legacy, context.advanced_features)
        pairs: list[tuple[str, Any]] = []

        for key, raw in request.query:
            pairs.extend(self._decode_query_pair(decoder, key, raw))
        for segment in request.segments:
            for directive, args in self.split_segment(segment, decoder):
                pairs.extend(decoder.decode(directive, args))

        self._record_skipped(decoder, diagnostics)
        return self._to_instances(pairs)

    def parse_clause(
        self,
        clause: str,
        context: ProcessingContext,
        diagnostics: Optional[dict] = None,
    ) -> list[ParameterInstance]:
        """Parse one ``im.<param>=<value>`` or ``im=<Directive>,...`` string."""
        key, _, raw = clause.strip().partition("=")
        decoder = DirectiveDecoder(self.config.legacy, context.advanced_features)
        pairs = self._decode_query_pair(decoder, key, raw)
        self._record_skipped(decoder, diagnostics)
        return self._to_instances(pairs)

    def is_vendor_clause(self, clause: str) -> bool:
        lowered = clause.strip().lower()
        return lowered.startswith(f"{self.prefix}.") or lowered.startswith(f"{self.prefix}=")

    # -------------------------------------------------------------------------
    # Spelling normalization
    # -------------------------------------------------------------------------

    def split_query_pair(self, key: str, raw: str) -> Optional[tuple[str, str]]:
        """Reduce a dot- or equals-notation query pair to ``(directive, args)``.

        >>> parser.split_query_pair("im", "Resize,width=800,height=600")
        ('Resize', 'width=800,height=600')
        >>> parser.split_query_pair("im.quality", "80")
        ('quality', '80')
        """
        lowered = key.strip().lower()
        if lowered.startswith(f"{self.prefix}."):
            return key.strip()[len(self.prefix) + 1:], raw
        if lowered != self.prefix:
            return None

        chunks = split_top_level(raw)
        if not chunks:
            return None
        head, rest = chunks[0], chunks[1:]
        directive, sep, first = head.partition("=")
        if sep:
            rest = [first] + rest
        return directive.strip(), ",".join(rest)

    def split_segment(self, segment: str, decoder: DirectiveDecoder) -> list[tuple[str, str]]:
        """Reduce a vendor path segment to ``(directive, args)`` pairs."""
        lowered = segment.lower()
        if lowered.startswith(f"{self.prefix}(") and segment.endswith(")"):
            return self._split_group(segment[len(self.prefix) + 1:-1], decoder)
        if lowered.startswith(f"{self.prefix}-"):
            directive, _, args = segment[len(self.prefix) + 1:].partition("=")
            return [(directive, args)]
        return []

    def _split_group(self, inner: str, decoder: DirectiveDecoder) -> list[tuple[str, str]]:
        # A chunk starts a new directive only when its key names one; any
        # other chunk continues the argument list of the previous directive.
        groups: list[list[str]] = []
        for chunk in split_top_level(inner):
            name, sep, value = chunk.partition("=")
            if sep and decoder.is_directive(name):
                groups.append([name.strip(), value])
            elif groups:
                groups[-1][1] = f"{groups[-1][1]},{chunk}" if groups[-1][1] else chunk
            else:
                logger.debug("Dropping vendor group fragment without directive: %s", chunk)
        return [(name, args) for name, args in groups]

    def _is_vendor_segment(self, segment: str) -> bool:
        lowered = segment.lower()
        return lowered.startswith(f"{self.prefix}-") or lowered.startswith(f"{self.prefix}(")

    # -------------------------------------------------------------------------
    # Decoding
    # -------------------------------------------------------------------------

    def _decode_query_pair(self, decoder: DirectiveDecoder, key: str, raw: str) -> list[tuple[str, Any]]:
        if key.strip().lower() in decoder.query_keys:
            return decoder.decode_query_key(key.strip(), raw)
        split = self.split_query_pair(key, raw)
        if split is None:
            return []
        return decoder.decode(*split)

    def _to_instances(self, pairs: list[tuple[str, Any]]) -> list[ParameterInstance]:
        # All composite fragments of a request travel in one overlays instance
        instances: list[ParameterInstance] = []
        fragments: list[OverlayFragment] = []
        overlay_slot: Optional[int] = None
        for name, value in pairs:
            if name == "overlays":
                if overlay_slot is None:
                    overlay_slot = len(instances)
                    instances.append(None)
                fragments.append(value)
                continue
            instances.append(self.make_instance(name, value))
            logger.debug("Legacy parameter %s=%r", name, value)

        if overlay_slot is not None:
            instances[overlay_slot] = self.make_instance("overlays", fragments)
            logger.debug("Legacy overlays: %d fragment(s)", len(fragments))
        return instances

    @staticmethod
    def _record_skipped(decoder: DirectiveDecoder, diagnostics: Optional[dict]) -> None:
        if diagnostics is not None and decoder.skipped:
            diagnostics.setdefault("skipped", []).extend(decoder.skipped)
