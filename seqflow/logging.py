"""seqflow — Structured logging.

Combinators log suppressed failures (rollback errors, failed fallback
attempts, element failures after the first) through structlog.  Records
emitted while ``apply_with_rollback``, ``try_each`` or ``for_each_async``
runs carry an ``operation`` key naming that combinator.

Logging must never change a combinator's outcome, so values that end up in
log fields go through :func:`describe` / :func:`describe_error`, which never
raise.

seqflow never calls ``configure_logging`` on its own: applications embedding
the toolkit decide where records go.  Without configuration, structlog's
defaults print to stdout.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Any

import structlog
from structlog.types import EventDict, WrappedLogger

# Context variable — automatically injected into log records when set.
_ctx_operation: ContextVar[str | None] = ContextVar("operation", default=None)


def bind_operation_context(operation: str) -> Token[str | None]:
    """Bind the running combinator name to the current async task / thread.

    Returns the token that restores the previous value when passed to
    :func:`clear_operation_context`.
    """
    return _ctx_operation.set(operation)


def clear_operation_context(token: Token[str | None] | None = None) -> None:
    if token is not None:
        _ctx_operation.reset(token)
    else:
        _ctx_operation.set(None)


@contextmanager
def operation_context(operation: str) -> Iterator[None]:
    """Bind *operation* for the duration of a synchronous combinator call."""
    token = bind_operation_context(operation)
    try:
        yield
    finally:
        clear_operation_context(token)


def describe(value: object) -> str:
    """``repr(value)``, falling back to the default object repr if that raises."""
    try:
        return repr(value)
    except Exception:
        return object.__repr__(value)


def describe_error(error: BaseException) -> str:
    """``str(error)``, or a placeholder naming the type if that raises."""
    try:
        return str(error)
    except Exception:
        return f"<unprintable {type(error).__name__}>"


def _inject_context_vars(
    _logger: WrappedLogger, _method: str, event_dict: EventDict
) -> EventDict:
    """Add ContextVar values to every log record."""
    if (operation := _ctx_operation.get()) is not None:
        event_dict.setdefault("operation", operation)
    return event_dict


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def configure_logging(
    level: str = "info",
    format: str = "console",
    log_file: str | None = None,
) -> None:
    """Route structlog through stdlib logging with console or JSON rendering.

    Args:
        level:    One of debug, info, warning, error, critical.
        format:   ``"console"`` or ``"json"``.
        log_file: Optional path to write logs to in addition to stdout.
    """
    pre_chain: list[Any] = [
        _inject_context_vars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    renderer: Any = (
        structlog.processors.JSONRenderer()
        if format == "json"
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )

    targets: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        targets.append(logging.FileHandler(log_file))
    for handler in targets:
        handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = targets
    root_logger.setLevel(level.upper())


def configure_from_settings() -> None:
    """Apply the ``logging`` block of the active settings."""
    from seqflow.config import get_settings

    cfg = get_settings().logging
    configure_logging(
        level=cfg.level,
        format=cfg.format,
        log_file=str(cfg.file) if cfg.file else None,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger for *name*.

    Usage::

        log = get_logger(__name__)
        log.warning("rollback_failed", element=describe(element), error="disk full")
    """
    return structlog.get_logger(name)
