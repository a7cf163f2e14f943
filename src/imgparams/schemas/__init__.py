"""Pydantic schemas for imgparams.

Configuration layers and the request-scoped records of the parameter
resolution pipeline. All validation and coercion of configuration happens
at schema validation time via Pydantic.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
"""

from imgparams.schemas.resolve import resolve_config
from imgparams.schemas.internal import InternalConfig
from imgparams.schemas.param import ParamConfig
from imgparams.schemas.user import UserConfig
from imgparams.schemas.cli import CLIConfig
from imgparams.schemas.records import (
    Source,
    ParameterInstance,
    ImageRequest,
    ProcessingContext,
    ConditionDirective,
    OverlayFragment,
    OverlayDescriptor,
    ResolutionResult,
)

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
    'Source',
    'ParameterInstance',
    'ImageRequest',
    'ProcessingContext',
    'ConditionDirective',
    'OverlayFragment',
    'OverlayDescriptor',
    'ResolutionResult',
]
