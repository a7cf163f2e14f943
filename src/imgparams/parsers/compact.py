"""Compact dialect: single-letter query keys."""

import logging
from types import MappingProxyType
from typing import Optional

from imgparams.parameters.coercion import coerce_value
from imgparams.parameters.registry import PARAMETER_REGISTRY
from imgparams.parsers.base import Dialect, DialectParser
from imgparams.schemas.records import ImageRequest, ParameterInstance, ProcessingContext

__all__ = ['CompactParser', 'COMPACT_KEYS']

logger = logging.getLogger(__name__)

COMPACT_KEYS = MappingProxyType({
    "w": "width",
    "h": "height",
    "q": "quality",
    "r": "aspect",
    "p": "focal",
    "f": "size_code",
    "s": "ctx",
})


class CompactParser(DialectParser):
    """Maps short keys 1:1 onto canonical names.

    ``f`` is passed through as a ``size_code`` instance; resolving it to a
    width happens later in the processor so precedence can be respected.
    """

    dialect = Dialect.COMPACT

    def matches(self, request: ImageRequest) -> bool:
        return any(key in COMPACT_KEYS for key in request.query_keys)

    def parse(
        self,
        request: ImageRequest,
        context: ProcessingContext,
        diagnostics: Optional[dict] = None,
    ) -> list[ParameterInstance]:
        instances = []
        for key, raw in request.query:
            name = COMPACT_KEYS.get(key)
            if name is None:
                continue
            if name == "aspect":
                raw = raw.strip().replace("-", ":")
            value = coerce_value(PARAMETER_REGISTRY[name], raw)
            instances.append(self.make_instance(name, value))
            logger.debug("Compact parameter %s -> %s=%r", key, name, value)
        return instances
