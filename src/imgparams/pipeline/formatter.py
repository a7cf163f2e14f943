"""Output formatting into the downstream transformation option map."""

import json
import logging
from typing import Any
from urllib.parse import urlencode

from imgparams.contracts import assert_canonical_options
from imgparams.parameters.registry import PARAMETER_REGISTRY
from imgparams.schemas.records import ParameterInstance

__all__ = ['format_options', 'to_query_string']

logger = logging.getLogger(__name__)


def format_options(working: dict[str, ParameterInstance]) -> dict[str, Any]:
    """Build the canonical option map from the resolved working set.

    Applies registry formatters and drops internal-only names (size codes,
    derivatives, conditions, vendor aliases). Explicit-dimension flags and
    other bookkeeping live on the instances and never reach the output.
    Keys follow registry order.

    Parameters
    ----------
    working : dict
        One ``ParameterInstance`` per name, as returned by the processor.

    Returns
    -------
    dict
        Canonical options keyed by downstream parameter name.

    Raises
    ------
    ContractViolation
        If the result breaks the output guarantees (a resolver bug).
    """
    options: dict[str, Any] = {}
    for name, definition in PARAMETER_REGISTRY.items():
        instance = working.get(name)
        if instance is None:
            continue
        if definition.internal:
            logger.debug("Omitting internal parameter %s=%r", name, instance.value)
            continue
        options[name] = definition.format(instance.value)

    assert_canonical_options(options)
    return options


def _query_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, dict)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def to_query_string(options: dict[str, Any]) -> str:
    """Render canonical options as a standard-dialect query string.

    >>> to_query_string({"width": 800, "fit": "contain"})
    'width=800&fit=contain'
    """
    return urlencode([(name, _query_text(value)) for name, value in options.items()])
