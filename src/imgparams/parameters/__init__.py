"""Parameter registry, size codes and value coercion."""

from imgparams.parameters.registry import (
    ParameterType,
    ParameterDefinition,
    PARAMETER_REGISTRY,
    SIZE_CODES,
    lookup_definition,
)
from imgparams.parameters.coercion import (
    parse_number,
    parse_boolean,
    split_top_level,
    fold_rotation,
    coerce_value,
    decode_overlays,
)

__all__ = [
    'ParameterType',
    'ParameterDefinition',
    'PARAMETER_REGISTRY',
    'SIZE_CODES',
    'lookup_definition',
    'parse_number',
    'parse_boolean',
    'split_top_level',
    'fold_rotation',
    'coerce_value',
    'decode_overlays',
]
