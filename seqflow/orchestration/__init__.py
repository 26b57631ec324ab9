"""Orchestration layer — ordering engine, transactional applier, fallback executor, bounded concurrency."""

from seqflow.orchestration.concurrency import for_each_async
from seqflow.orchestration.fallback import try_each
from seqflow.orchestration.gate import ConcurrencyGate
from seqflow.orchestration.ordering import (
    VisitState,
    build_dependency_graph,
    execution_waves,
    topological_sort,
)
from seqflow.orchestration.transaction import RollbackJournal, apply_with_rollback

__all__ = [
    "ConcurrencyGate",
    "RollbackJournal",
    "VisitState",
    "apply_with_rollback",
    "build_dependency_graph",
    "execution_waves",
    "for_each_async",
    "topological_sort",
    "try_each",
]
