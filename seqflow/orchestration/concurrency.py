"""Orchestration layer — Bounded concurrency iterator.

``for_each_async`` fans an async action out over a sequence while keeping
at most ``max_parallel`` actions in flight.  A :class:`ConcurrencyGate`
slot is taken before each element's task is created and given back when
that task settles, so new elements start as soon as slots free up.

Failure policy (first error wins):
  * once an action fails, no further elements are scheduled;
  * actions that already started run to completion, they are not cancelled;
  * after every started action has settled, the first failure is raised;
    later failures are only logged.

An action that ends in a ``CancelledError`` nobody asked for counts as a
failure and surfaces as :class:`ElementCancelledError`.

Cancelling the task that awaits ``for_each_async`` cancels the actions still
in flight before the cancellation propagates.  There is no built-in
timeout; wrap the call in ``asyncio.timeout()`` where one is needed.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

from seqflow.exceptions import ElementCancelledError, InvalidSchedulingContextError
from seqflow.logging import bind_operation_context, describe, describe_error, get_logger
from seqflow.orchestration.gate import ConcurrencyGate

log = get_logger(__name__)

T = TypeVar("T")

AsyncAction = Callable[[T], Awaitable[Any]]

DEFAULT_MAX_PARALLEL = 10


def _resolve_max_parallel(max_parallel: int | None) -> int:
    if max_parallel is None:
        return DEFAULT_MAX_PARALLEL
    if isinstance(max_parallel, bool) or not isinstance(max_parallel, int):
        raise ValueError(f"max_parallel must be an int, got {max_parallel!r}")
    if max_parallel < 1:
        raise ValueError(f"max_parallel must be >= 1, got {max_parallel}")
    return max_parallel


def _require_event_loop() -> asyncio.AbstractEventLoop:
    """Return the running loop, or fail if the caller cannot run tasks concurrently."""
    try:
        return asyncio.get_running_loop()
    except RuntimeError as exc:
        raise InvalidSchedulingContextError(
            "no running asyncio event loop; await for_each_async from a coroutine "
            "driven by asyncio.run() or an equivalent loop"
        ) from exc


def _cancel_requested() -> bool:
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0


def _cancelled_error(
    index: int, element: object, cause: BaseException | None
) -> ElementCancelledError:
    error = ElementCancelledError(index, describe(element))
    error.__cause__ = cause
    return error


async def for_each_async(
    elements: Iterable[T],
    action: AsyncAction[T],
    max_parallel: int | None = None,
) -> None:
    """Run *action* for every element with at most *max_parallel* in flight.

    Args:
        elements:     The elements to process.  Each is scheduled exactly once;
                      completion order is unspecified.
        action:       Coroutine function called once per element.
        max_parallel: Maximum number of concurrently running actions.  Defaults
                      to ``DEFAULT_MAX_PARALLEL``.

    Raises:
        ValueError: If *max_parallel* is not a positive int.
        InvalidSchedulingContextError: If no asyncio event loop is running.
        ElementCancelledError: If an action was cancelled while the caller was not.
        Exception: The first exception raised by *action*.
    """
    limit = _resolve_max_parallel(max_parallel)
    loop = _require_event_loop()
    gate = ConcurrencyGate(limit)
    failures: list[Exception] = []
    launched: dict[asyncio.Task[None], tuple[int, T]] = {}

    def _fail(index: int, element: T, error: Exception) -> None:
        suppressed = bool(failures)
        if not suppressed:
            failures.append(error)
        log.warning(
            "element_action_failed",
            index=index,
            element=describe(element),
            error=describe_error(error),
            error_type=type(error).__name__,
            suppressed=suppressed,
        )

    async def _run(index: int, element: T) -> None:
        bind_operation_context("for_each_async")
        try:
            await action(element)
        except asyncio.CancelledError as exc:
            if _cancel_requested():
                raise
            _fail(index, element, _cancelled_error(index, element, exc))
        except Exception as exc:
            _fail(index, element, exc)
        finally:
            gate.release()

    try:
        for index, element in enumerate(elements):
            if failures:
                break
            await gate.acquire()
            if failures:
                # A running action failed while this element waited for a slot.
                gate.release()
                break
            launched[loop.create_task(_run(index, element))] = (index, element)
    except asyncio.CancelledError:
        await _cancel_all(list(launched))
        raise
    except Exception:
        # The input iterable itself raised; let started actions finish first.
        await _settle(list(launched))
        raise

    await _settle(list(launched))

    if not failures:
        # An action that cancelled its own task ends cancelled without reporting.
        for task, (index, element) in launched.items():
            if task.cancelled():
                _fail(index, element, _cancelled_error(index, element, None))
                break

    if failures:
        log.debug("for_each_async_failed", launched=len(launched))
        raise failures[0]


async def _settle(tasks: list[asyncio.Task[None]]) -> None:
    """Wait for every task; cancel them all if the waiter itself is cancelled."""
    if not tasks:
        return
    try:
        await asyncio.wait(tasks)
    except asyncio.CancelledError:
        await _cancel_all(tasks)
        raise


async def _cancel_all(tasks: list[asyncio.Task[None]]) -> None:
    for task in tasks:
        task.cancel()
    if tasks:
        await asyncio.gather(*tasks, return_exceptions=True)
