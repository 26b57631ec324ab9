"""seqflow — Exception hierarchy.

All exceptions raised by seqflow itself inherit from SeqflowError so that
callers can catch the full family with a single except clause when needed.
Exceptions raised by caller-supplied actions (apply, fallback and element
actions) are never wrapped: they reach the caller unchanged.  The one
exception is a stray ``CancelledError`` from an element action, which is
not an ``Exception`` and is reported as ElementCancelledError instead.

Hierarchy:
    SeqflowError
    └── OrchestrationError
        ├── CycleDetectedError
        ├── InvalidSchedulingContextError
        └── ElementCancelledError
"""

from __future__ import annotations

from typing import Any


class SeqflowError(Exception):
    """Base exception for all seqflow errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context or {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context})"


# ---------------------------------------------------------------------------
# Orchestration layer
# ---------------------------------------------------------------------------


class OrchestrationError(SeqflowError):
    """Base for all orchestration errors."""


class CycleDetectedError(OrchestrationError):
    """The dependency relation contains a cycle."""

    def __init__(self, cycle: list[Any]) -> None:
        super().__init__(
            f"Dependency cycle detected: {' -> '.join(str(e) for e in cycle)}",
            context={"cycle": cycle},
        )
        self.cycle = cycle


class InvalidSchedulingContextError(OrchestrationError):
    """The caller's execution context cannot dispatch work concurrently."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            f"Cannot schedule concurrent work: {reason}",
            context={"reason": reason},
        )
        self.reason = reason


class ElementCancelledError(OrchestrationError):
    """An element action ended in cancellation nobody requested.

    Raised by ``for_each_async`` when an action lets a ``CancelledError``
    escape (e.g. by awaiting a future that was cancelled elsewhere) while
    the caller itself was not cancelled.  The original ``CancelledError`` is
    chained as ``__cause__``.
    """

    def __init__(self, index: int, element: str) -> None:
        super().__init__(
            f"Action for element {index} ({element}) was cancelled",
            context={"index": index, "element": element},
        )
        self.index = index
        self.element = element
