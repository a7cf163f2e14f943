"""Standard dialect: one query key per canonical parameter name."""

import logging
from typing import Iterable, Optional

from imgparams.parameters.coercion import coerce_value
from imgparams.parameters.registry import lookup_definition
from imgparams.parsers.base import Dialect, DialectParser
from imgparams.schemas.records import ImageRequest, ParameterInstance, ProcessingContext

__all__ = ['StandardParser']

logger = logging.getLogger(__name__)


class StandardParser(DialectParser):
    """Parses ``width=800&fit=contain`` style query strings.

    Unknown keys, and names restricted to another dialect, are ignored.
    """

    dialect = Dialect.STANDARD

    def matches(self, request: ImageRequest) -> bool:
        return True

    def parse(
        self,
        request: ImageRequest,
        context: ProcessingContext,
        diagnostics: Optional[dict] = None,
    ) -> list[ParameterInstance]:
        return self.parse_pairs(request.query)

    def parse_pairs(self, pairs: Iterable[tuple[str, str]]) -> list[ParameterInstance]:
        """Parse ``(name, raw value)`` pairs expressed with canonical names."""
        instances = []
        for key, raw in pairs:
            definition = lookup_definition(key.strip())
            if definition is None or not definition.accepted_by(self.dialect.value):
                continue
            value = coerce_value(definition, raw)
            instances.append(self.make_instance(definition.name, value))
            logger.debug("Standard parameter %s=%r", definition.name, value)
        return instances
