"""Parameter resolution pipeline.

Selector -> dialect parsers -> processor (group, merge, validate, special
cases) -> formatter. ``ParameterHandler`` wires the stages together.
"""

from imgparams.pipeline.selector import ParserSelector
from imgparams.pipeline.processor import ParameterProcessor
from imgparams.pipeline.conditions import parse_condition, evaluate_condition, DimensionResolver
from imgparams.pipeline.overlays import placement_offsets, collapse_fragments
from imgparams.pipeline.formatter import format_options, to_query_string
from imgparams.pipeline.handler import ParameterHandler

__all__ = [
    'ParserSelector',
    'ParameterProcessor',
    'parse_condition',
    'evaluate_condition',
    'DimensionResolver',
    'placement_offsets',
    'collapse_fragments',
    'format_options',
    'to_query_string',
    'ParameterHandler',
]
