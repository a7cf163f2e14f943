"""Conditional transforms evaluated against image dimensions.

A condition has the form ``<property><operator><threshold>,<then clause>``
where property is ``width``, ``height``, ``ratio`` (width / height) or
``format``. Only the first comma separates the test from the then-clause,
so the clause may itself contain commas.

``format`` conditions are accepted syntactically but never hold: the
pipeline has no view of the source format.
"""

import logging
import operator
import re
from types import MappingProxyType
from typing import Optional

from imgparams.parameters.coercion import parse_number
from imgparams.schemas.records import ConditionDirective, Dimensions, ProcessingContext

__all__ = ['parse_condition', 'evaluate_condition', 'DimensionResolver']

logger = logging.getLogger(__name__)

_CONDITION = re.compile(r"^(width|height|ratio|format)\s*(>=|<=|!=|==|=|>|<)\s*([0-9]+(?:\.[0-9]+)?)$")

OPERATORS = MappingProxyType({
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
    "=": operator.eq,
    "!=": operator.ne,
})


def parse_condition(raw: str) -> Optional[ConditionDirective]:
    """Parse a condition string, returning None when malformed.

    >>> parse_condition("width>1000,im.resize=width:400").threshold
    1000.0
    """
    if not isinstance(raw, str) or "," not in raw:
        return None
    test, then_clause = raw.split(",", 1)
    match = _CONDITION.match(test.strip().lower())
    if match is None or not then_clause.strip():
        return None
    op = "=" if match.group(2) == "==" else match.group(2)
    return ConditionDirective(
        property_name=match.group(1),
        operator=op,
        threshold=float(match.group(3)),
        then_clause=then_clause.strip(),
    )


def evaluate_condition(directive: ConditionDirective, dimensions: Optional[Dimensions]) -> bool:
    """Evaluate a condition; unavailable properties evaluate to False."""
    if directive.property_name == "format":
        logger.debug("Format conditions cannot be evaluated; treating as false")
        return False
    if dimensions is None:
        logger.debug("No dimensions available; condition treated as false")
        return False

    width, height = dimensions
    if directive.property_name == "width":
        actual = width
    elif directive.property_name == "height":
        actual = height
    else:
        if height <= 0:
            return False
        actual = width / height

    result = OPERATORS[directive.operator](actual, directive.threshold)
    logger.debug(
        "Condition %s %s %s against %s: %s",
        directive.property_name, directive.operator, directive.threshold, actual, result,
    )
    return result


class DimensionResolver:
    """Supplies image dimensions for one request, calling the lookup at most once.

    A lookup that raises or returns something other than two positive numbers
    leaves dimensions unavailable.
    """

    def __init__(self, context: ProcessingContext):
        self.context = context
        self._resolved = False
        self._dimensions: Optional[Dimensions] = None

    def get(self) -> Optional[Dimensions]:
        if not self._resolved:
            self._resolved = True
            self._dimensions = self._resolve()
        return self._dimensions

    def _resolve(self) -> Optional[Dimensions]:
        if self.context.dimensions is not None:
            return self._checked(self.context.dimensions)
        if self.context.dimension_lookup is None:
            return None
        try:
            dimensions = self.context.dimension_lookup()
        except Exception as exc:
            logger.warning("Dimension lookup failed, skipping conditions: %s", exc)
            return None
        return self._checked(dimensions)

    @staticmethod
    def _checked(dimensions) -> Optional[Dimensions]:
        if dimensions is None:
            return None
        try:
            width, height = (parse_number(value) for value in dimensions)
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed dimensions: %r", dimensions)
            return None
        if width is None or height is None or width <= 0 or height <= 0:
            logger.warning("Ignoring malformed dimensions: %r", dimensions)
            return None
        return width, height
