"""Shared contract of the dialect parsers.

The dialect set is closed: ``Dialect`` enumerates it and ``PARSERS`` in
``imgparams.parsers`` maps every member to its parser class.
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from imgparams.schemas.records import ImageRequest, ParameterInstance, ProcessingContext, Source

if TYPE_CHECKING:
    from imgparams.schemas import InternalConfig

__all__ = ['Dialect', 'DialectParser']

logger = logging.getLogger(__name__)


class Dialect(str, Enum):
    """URL syntaxes understood by the resolver, in evaluation order."""
    STANDARD = "standard"
    COMPACT = "compact"
    PATH = "path"
    LEGACY = "legacy-vendor"

    @property
    def source(self) -> Source:
        return Source(self.value)


class DialectParser:
    """Turns one dialect's syntax into a flat list of parameter instances.

    Subclasses set ``dialect`` and implement ``matches`` (a cheap presence
    check, never a full parse) and ``parse``.

    Parameters
    ----------
    config : InternalConfig
        Resolved runtime configuration; supplies the dialect base priority.
    """

    dialect: Dialect

    def __init__(self, config: "InternalConfig"):
        self.config = config
        self.base_priority = getattr(config.priorities, self._priority_key())

    def _priority_key(self) -> str:
        return "legacy" if self.dialect == Dialect.LEGACY else self.dialect.value

    def matches(self, request: ImageRequest) -> bool:
        raise NotImplementedError

    def parse(
        self,
        request: ImageRequest,
        context: ProcessingContext,
        diagnostics: Optional[dict] = None,
    ) -> list[ParameterInstance]:
        raise NotImplementedError

    def make_instance(self, name: str, value: Any) -> ParameterInstance:
        return ParameterInstance(
            name=name,
            value=value,
            source=self.dialect.source,
            priority=self.base_priority,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(priority={self.base_priority})"
