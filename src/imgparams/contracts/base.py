"""Base contract enforcement utilities."""

from imgparams.contracts.failure import ContractViolation


def require(condition: bool, message: str) -> None:
    """Enforce a pipeline contract.

    Parameters
    ----------
    condition : bool
        The invariant that must be true. If False, ContractViolation is raised.
    message : str
        Error message explaining the contract violation.

    Raises
    ------
    ContractViolation
        If condition is False.

    Examples
    --------
    >>> require(len(bucket) == 1, "Merge contract: duplicate 'width' instances")
    """
    if not condition:
        raise ContractViolation(message)
