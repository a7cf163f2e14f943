"""Parser selection by cheap presence checks."""

import logging
from typing import TYPE_CHECKING

from imgparams.parsers import PARSERS, Dialect, DialectParser
from imgparams.schemas.records import ImageRequest

if TYPE_CHECKING:
    from imgparams.schemas import InternalConfig

__all__ = ['ParserSelector']

logger = logging.getLogger(__name__)


class ParserSelector:
    """Returns the ordered subset of dialect parsers that apply to a request.

    The standard parser is always selected. Other dialects are selected by
    key or segment presence only; nothing is parsed here. Mixing dialects in
    one request is legal; conflicts are settled later by priority.
    """

    def __init__(self, config: "InternalConfig"):
        self.parsers: dict[Dialect, DialectParser] = {
            dialect: parser_cls(config) for dialect, parser_cls in PARSERS.items()
        }

    def select(self, request: ImageRequest) -> list[DialectParser]:
        selected = [
            parser for dialect, parser in self.parsers.items()
            if dialect == Dialect.STANDARD or parser.matches(request)
        ]
        logger.debug(
            "Selected dialects: %s",
            ", ".join(parser.dialect.value for parser in selected),
        )
        return selected

    def get(self, dialect: Dialect) -> DialectParser:
        return self.parsers[dialect]
