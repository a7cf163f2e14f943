"""Pipeline contracts: fail-fast enforcement of stage invariants.

Key principle:
- Pydantic validates config correctness
- Contracts validate pipeline correctness
- Parsers absorb malformed request input
"""

from imgparams.contracts.failure import ContractViolation
from imgparams.contracts.base import require
from imgparams.contracts.merge import assert_merged
from imgparams.contracts.output import assert_canonical_options
from imgparams.contracts.invariants import PIPELINE_INVARIANTS

__all__ = [
    "ContractViolation",
    "require",
    "assert_merged",
    "assert_canonical_options",
    "PIPELINE_INVARIANTS",
]
