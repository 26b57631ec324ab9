"""Orchestration layer — Fallback executor.

Runs an action against the elements of a fallback chain one at a time and
stops at the first success.  Every failure except the last is logged and
suppressed; the last one propagates unchanged.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TypeVar

from seqflow.logging import describe, describe_error, get_logger, operation_context

log = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")

_MISSING = object()


def try_each(elements: Iterable[T], action: Callable[[T], R]) -> R | None:
    """Apply *action* to the first element it succeeds on and return its result.

    Empty input is a no-op that returns None.

    Raises:
        Exception: The exception *action* raised for the last element, when
            every attempt failed.
    """
    iterator = iter(elements)
    current = next(iterator, _MISSING)
    attempt = 0

    with operation_context("try_each"):
        while current is not _MISSING:
            attempt += 1
            try:
                return action(current)  # type: ignore[arg-type]
            except Exception as exc:
                following = next(iterator, _MISSING)
                if following is _MISSING:
                    raise
                log.warning(
                    "fallback_attempt_failed",
                    attempt=attempt,
                    element=describe(current),
                    error=describe_error(exc),
                    error_type=type(exc).__name__,
                )
                current = following

    return None
