"""Merge stage contract.

After merging, the working set holds exactly one instance per name, keyed
by that name.
"""

from imgparams.contracts.base import require
from imgparams.schemas.records import ParameterInstance


def assert_merged(working: dict) -> None:
    """Enforce the one-instance-per-name guarantee of the working set.

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    for name, instance in working.items():
        require(
            isinstance(instance, ParameterInstance),
            f"Merge contract violated: '{name}' is {type(instance).__name__}, expected ParameterInstance"
        )
        require(
            instance.name == name,
            f"Merge contract violated: key '{name}' holds instance named '{instance.name}'"
        )
