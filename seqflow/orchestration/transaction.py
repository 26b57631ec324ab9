"""Orchestration layer — Transactional applier.

Applies an action to every element of a sequence with all-or-nothing
semantics.  When an apply fails, the compensating rollback action runs for
every element that was already applied, most recent first, and the
original apply error is re-raised.

Rollback failures never interrupt the rollback pass and never replace the
apply error: each attempt yields an error value that is logged before the
pass moves on to the next journal entry.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Generic, TypeVar

from seqflow.logging import describe, describe_error, get_logger, operation_context

log = get_logger(__name__)

T = TypeVar("T")


class RollbackJournal(Generic[T]):
    """Ordered record of the elements whose apply action succeeded."""

    def __init__(self) -> None:
        self._entries: list[T] = []

    def record(self, element: T) -> None:
        self._entries.append(element)

    def reversed(self) -> Iterator[T]:
        """Iterate from the most recently applied element back to the first."""
        return reversed(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def _attempt_rollback(element: T, rollback: Callable[[T], object]) -> Exception | None:
    """Run *rollback* for one element and return its error instead of raising it."""
    try:
        rollback(element)
    except Exception as exc:
        return exc
    return None


def apply_with_rollback(
    elements: Iterable[T],
    apply: Callable[[T], object],
    rollback: Callable[[T], object],
) -> None:
    """Apply *apply* to each element; undo the applied ones if any apply fails.

    Args:
        elements: The elements to apply the action for, in order.
        apply:    The action to apply to each element.
        rollback: The compensating action, called for every element that
                  *apply* succeeded on when a later element fails.  The
                  failing element itself is not rolled back.

    Raises:
        Exception: Whatever *apply* raised, after the rollback pass completed.
    """
    journal: RollbackJournal[T] = RollbackJournal()

    with operation_context("apply_with_rollback"):
        for element in elements:
            try:
                apply(element)
            except Exception as exc:
                rolled_back = len(journal)
                _rollback_all(journal, rollback)
                log.warning(
                    "apply_failed",
                    element=describe(element),
                    error=describe_error(exc),
                    error_type=type(exc).__name__,
                    rollback_count=rolled_back,
                )
                raise
            journal.record(element)


def _rollback_all(journal: RollbackJournal[T], rollback: Callable[[T], object]) -> None:
    for element in journal.reversed():
        error = _attempt_rollback(element, rollback)
        if error is not None:
            log.error(
                "rollback_failed",
                element=describe(element),
                error=describe_error(error),
                error_type=type(error).__name__,
            )
        else:
            log.debug("rollback_completed", element=describe(element))
