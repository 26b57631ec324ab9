"""seqflow — In-process sequence coordination toolkit.

Combinators over finite sequences and caller-supplied functions:

    1. Collections   — sequenced / unsequenced equality and hashing, helpers
    2. Ordering      — stable topological sort, execution waves
    3. Transactions  — apply with rollback
    4. Fallback      — first success wins
    5. Concurrency   — bounded-parallel async iteration

Every call owns its own state; nothing is shared between invocations.
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"

from seqflow.collections import (
    KeyComparer,
    sequenced_equals,
    sequenced_hash,
    unsequenced_equals,
    unsequenced_hash,
)
from seqflow.exceptions import (
    CycleDetectedError,
    ElementCancelledError,
    InvalidSchedulingContextError,
    OrchestrationError,
    SeqflowError,
)
from seqflow.orchestration import (
    ConcurrencyGate,
    apply_with_rollback,
    execution_waves,
    for_each_async,
    topological_sort,
    try_each,
)

__all__ = [
    "__version__",
    "ConcurrencyGate",
    "CycleDetectedError",
    "ElementCancelledError",
    "InvalidSchedulingContextError",
    "KeyComparer",
    "OrchestrationError",
    "SeqflowError",
    "apply_with_rollback",
    "execution_waves",
    "for_each_async",
    "sequenced_equals",
    "sequenced_hash",
    "topological_sort",
    "try_each",
    "unsequenced_equals",
    "unsequenced_hash",
]
