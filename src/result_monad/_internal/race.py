"""Settle an awaitable into a Result, optionally racing a cancellation token.

The race runs at the event-loop level: the operation and ``token.wait()``
become two tasks and whichever completes first decides the outcome. If the
token wins, the operation task is detached, not cancelled. It is kept alive in
``_abandoned`` until it finishes, and its outcome is logged and dropped.
Callers racing their own timers pass ``abandon=False`` to cancel instead.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any

from result_monad._logging import library_logger
from result_monad.result import Err, Ok, cancelled

if TYPE_CHECKING:
    from result_monad.cancellation import CancellationToken

__all__ = ['abandoned_count', 'settle']

logger = library_logger(__name__)

_abandoned: set[asyncio.Future[Any]] = set()


def abandoned_count() -> int:
    """Number of abandoned operations still running."""
    return len(_abandoned)


async def settle[T](
    awaitable: Awaitable[T],
    token: CancellationToken | None = None,
    *,
    abandon: bool = True,
) -> Ok[T] | Err[Any]:
    """Await ``awaitable`` and wrap its outcome.

    Args:
        awaitable: Work to await.
        token: Optional cancellation token. Checked before starting, then raced.
        abandon: If True, work that loses the race keeps running detached. If
            False, it is cancelled, which suits the library's own timers.

    Returns:
        Ok(value), Err(exception), or a cancelled Err if the token fired first.
        On a tie the operation's outcome wins.
    """
    if token is None:
        try:
            return Ok(await awaitable)
        except Exception as exc:
            return Err(exc)

    if token.is_cancelled:
        _discard_unstarted(awaitable)
        return cancelled(token.operation_id, token.reason)

    operation = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(token.wait())
    try:
        await asyncio.wait((operation, waiter), return_when=asyncio.FIRST_COMPLETED)
    except BaseException:
        # The caller itself is being cancelled; nobody is left to observe the work.
        operation.cancel()
        raise
    finally:
        waiter.cancel()

    if operation.done():
        try:
            return Ok(operation.result())
        except Exception as exc:
            return Err(exc)

    if abandon:
        _abandon(operation, token)
    else:
        operation.cancel()
    return cancelled(token.operation_id, token.reason)


def _discard_unstarted(awaitable: Awaitable[Any]) -> None:
    # A coroutine that is never awaited would warn on garbage collection.
    if inspect.iscoroutine(awaitable):
        awaitable.close()


def _abandon(operation: asyncio.Future[Any], token: CancellationToken) -> None:
    _abandoned.add(operation)
    logger.debug('operation_abandoned', operation_id=token.operation_id, reason=token.reason)

    def _on_done(fut: asyncio.Future[Any]) -> None:
        _abandoned.discard(fut)
        if fut.cancelled():
            outcome = 'cancelled'
        elif fut.exception() is not None:
            outcome = f'error: {fut.exception()!r}'
        else:
            outcome = 'ok'
        logger.debug('abandoned_operation_finished', operation_id=token.operation_id, outcome=outcome)

    operation.add_done_callback(_on_done)
