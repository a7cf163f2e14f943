"""Failure type for contract violations.

Contracts fail fast, loud, and once. All violations raise the same
exception type, allowing callers to handle resolver bugs uniformly.
"""


class ContractViolation(RuntimeError):
    """Raised when a pipeline stage breaks the invariants it promised.

    This indicates a bug in resolver logic, never bad request input:
    malformed parameters are dropped or defaulted, not raised.

    Key distinction:
    - ValidationError: configuration error (handled by Pydantic)
    - ContractViolation: resolver bug (programmer error)
    """
    pass
