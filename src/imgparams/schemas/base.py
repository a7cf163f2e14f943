"""Base Pydantic models with strict defaults for imgparams.

Configuration schemas (param, user, CLI, internal) inherit from
``ImgParamsBaseModel``. Request-scoped records that flow through the
resolution pipeline inherit from ``RecordModel``, which is frozen so a
record can only change by producing a copy.
"""

from pydantic import BaseModel, ConfigDict


class ImgParamsBaseModel(BaseModel):
    """Base model for all imgparams configuration schemas.

    Enforces strict validation:
    - No extra fields allowed
    - Validates assignments after initialization
    - Strips surrounding whitespace from strings
    """

    model_config = ConfigDict(
        extra='forbid',           # Reject unknown fields
        validate_assignment=True, # Validate on field mutation
        use_enum_values=True,     # Convert enums to values
        str_strip_whitespace=True,# Strip whitespace from strings
    )


class RecordModel(BaseModel):
    """Base model for immutable, request-scoped pipeline records.

    Records are never mutated in place. Use ``model_copy(update=...)`` to
    derive a changed record; every field not named in ``update`` (including
    the explicit-dimension flags) carries over unchanged.
    """

    model_config = ConfigDict(
        extra='forbid',
        frozen=True,
        arbitrary_types_allowed=True,
    )
