"""Output stage contract.

The canonical option map carries only downstream parameter names with
plain values: no internal names, no pipeline records.
"""

from imgparams.contracts.base import require
from imgparams.parameters.registry import PARAMETER_REGISTRY


def assert_canonical_options(options: dict) -> None:
    """Enforce the canonical option map guarantees.

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    for name, value in options.items():
        definition = PARAMETER_REGISTRY.get(name)
        require(
            definition is not None,
            f"Output contract violated: '{name}' is not a registered parameter"
        )
        require(
            not definition.internal,
            f"Output contract violated: internal parameter '{name}' leaked into options"
        )
        require(
            definition.is_valid(value) or name == "overlays",
            f"Output contract violated: '{name}' has invalid value {value!r}"
        )

    overlays = options.get("overlays")
    if overlays is not None:
        require(
            isinstance(overlays, list) and all(isinstance(item, dict) for item in overlays),
            "Output contract violated: overlays must be a list of mappings"
        )
        require(
            all(item.get("url") for item in overlays),
            "Output contract violated: every overlay needs a url"
        )
