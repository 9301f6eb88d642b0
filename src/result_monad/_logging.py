"""Structured logging for result-monad.

The library never prints on its own. Its records (retry attempts, abandoned
operations, duplicate callbacks) go to stdlib loggers under ``result_monad.*``
through ``library_logger`` and stay silent until the application either
configures stdlib logging or calls ``configure_logging()``.

``configure_logging()`` installs structlog's ProcessorFormatter on the root
logger so structlog and stdlib records share one pipeline. Error payloads in
log fields (``DomainError`` or exceptions) are rendered as
``{'name', 'message'}`` dicts, and registered hooks see every entry after
rendering.

Example:
    ```python
    from result_monad import add_log_hook, configure_logging

    configure_logging('DEBUG', json_output=False)
    add_log_hook(lambda entry: metrics.increment(entry['event']))
    ```
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, MutableMapping
from typing import Any

import structlog

from result_monad.errors import DomainError, error_message, error_name

__all__ = [
    'add_log_hook',
    'clear_log_hooks',
    'configure_logging',
    'get_logger',
    'library_logger',
    'remove_log_hook',
]

type LogHook = Callable[[dict[str, Any]], None]

_log_hooks: list[LogHook] = []


def _render_errors(_logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Replace error payloads in field values with name/message dicts."""
    for key, value in list(event_dict.items()):
        if isinstance(value, DomainError):
            event_dict[key] = {'name': value.name, 'kind': value.kind.value, 'message': value.message}
        elif isinstance(value, BaseException) and key != 'exc_info':
            event_dict[key] = {'name': error_name(value), 'message': error_message(value)}
    return event_dict


def _run_hooks(_logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    for hook in tuple(_log_hooks):
        try:
            hook(dict(event_dict))
        except Exception:
            continue  # a broken hook must not break logging
    return event_dict


def _shared_processors() -> list[Any]:
    """Processors applied to both structlog and stdlib (foreign) records."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt='iso'),
        structlog.stdlib.ExtraAdder(),
        _render_errors,
        _run_hooks,
    ]


def configure_logging(level: str = 'INFO', *, json_output: bool = True) -> None:
    """Route structlog and stdlib logging through one structured pipeline.

    Replaces the root logger's handlers with a single stderr handler.

    Args:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL").
        json_output: If True, emit JSON lines. If False, use console output,
            coloured when stderr is a terminal.
    """
    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if json_output:
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_shared_processors(),
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))


def get_logger(name: str | None = None) -> Any:
    """Get a structlog logger for application code.

    Args:
        name: Logger name. If None, structlog infers the caller's module.

    Returns:
        A structlog BoundLogger.
    """
    return structlog.get_logger(name)


def library_logger(name: str) -> Any:
    """Get the logger the library itself writes to.

    Events are filtered by the stdlib level of ``name`` and handed to stdlib
    logging, with key-value pairs carried as ``extra``. The ``ExtraAdder`` in
    the shared chain turns them back into fields once logging is configured.

    Args:
        name: Dotted module name, e.g. ``result_monad.combinators``.

    Returns:
        A structlog BoundLogger that never prints on its own.
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.render_to_log_kwargs,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
    )


# --- Hooks ---


def add_log_hook(hook: LogHook) -> None:
    """Register a hook called with a copy of every log entry.

    Hooks run inside the configured pipeline, after error rendering. Hooks
    that raise are skipped.

    Args:
        hook: Callable that receives the entry dict.
    """
    _log_hooks.append(hook)


def remove_log_hook(hook: LogHook) -> None:
    """Remove a previously registered hook. Unknown hooks are ignored."""
    if hook in _log_hooks:
        _log_hooks.remove(hook)


def clear_log_hooks() -> None:
    """Remove all registered hooks."""
    _log_hooks.clear()
