"""Free functions that build, compose and retry Results.

Examples:
    >>> combine_all([Ok(1), Ok(2), Ok(3)])
    Ok(value=[1, 2, 3])
    >>> from_predicate(17, lambda age: age >= 18, 'must be an adult').is_failure()
    True
    >>>
    >>> async def fetch() -> Result[dict, Exception]:
    ...     return await try_async(lambda: client.get('/health'))
    >>>
    >>> async def main():
    ...     result = await retry(fetch, RetryOptions(max_attempts=5, delay_ms=100))
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import TYPE_CHECKING, Any

import anyio

from result_monad._config import get_config
from result_monad._internal.race import settle
from result_monad._logging import library_logger
from result_monad.errors import DomainError
from result_monad.result import Err, Ok, cancelled
from result_monad.types import RetryOptions

if TYPE_CHECKING:
    from result_monad.cancellation import CancellationToken

__all__ = [
    'bridge_callback',
    'combine_all',
    'from_predicate',
    'map_result',
    'retry',
    'try_async',
    'with_fallback',
]

logger = library_logger(__name__)


def _normalize_error(error: object) -> DomainError | BaseException:
    """Keep real errors; turn any other value into a technical error."""
    if isinstance(error, DomainError | BaseException):
        return error
    return DomainError.technical(str(error))


def combine_all[T, E](results: Iterable[Ok[T] | Err[E]]) -> Ok[list[T]] | Err[E]:
    """Collect an iterable of Results into a Result of list.

    Short-circuits on the first Err encountered; the iterable is consumed
    lazily, so elements after it are never produced.

    Args:
        results: An iterable of Result values.

    Returns:
        Ok(list[T]) if all results are Ok, otherwise the first Err itself.

    Examples:
        >>> combine_all([Ok(1), Ok(2), Ok(3)])
        Ok(value=[1, 2, 3])
        >>> combine_all([])
        Ok(value=[])
        >>> combine_all([Ok(1), Err('fail'), Ok(3)])
        Err(error='fail')
    """
    values: list[T] = []
    for result in results:
        if isinstance(result, Err):
            return result
        values.append(result.value)
    return Ok(values)


async def try_async[T](f: Callable[[], Awaitable[T]]) -> Ok[T] | Err[Exception]:
    """Await ``f()`` and capture its outcome.

    Args:
        f: Zero-argument async callable.

    Returns:
        Ok(value), or Err(exception) if calling or awaiting f raised.
    """
    try:
        return Ok(await f())
    except Exception as exc:
        return Err(exc)


async def bridge_callback[T](f: Callable[..., Any], *args: Any, **kwargs: Any) -> Ok[T] | Err[Any]:
    """Call a callback-style function and await its outcome as a Result.

    ``f`` is called as ``f(*args, callback, **kwargs)`` and must eventually call
    ``callback(error, value)``. A truthy ``error`` makes an Err, so falsy values
    such as ``None``, ``0`` or ``''`` mean success. Truthy values that are not
    errors are turned into technical errors via ``str()``. Only the
    first callback invocation counts. The callback may be invoked from another
    thread.

    Args:
        f: Function taking a trailing ``(error, value)`` callback.
        *args: Positional arguments placed before the callback.
        **kwargs: Keyword arguments passed through.

    Returns:
        Ok(value), Err(error), or Err(exception) if f raised synchronously.

    Example:
        ```python
        def read_config(path, callback):
            executor.submit(lambda: callback(None, Path(path).read_text()))

        result = await bridge_callback(read_config, 'app.toml')
        ```
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future[Ok[T] | Err[Any]] = loop.create_future()

    def resolve(outcome: Ok[T] | Err[Any]) -> None:
        if future.done():
            logger.debug('callback_invoked_again', function=getattr(f, '__name__', repr(f)))
            return
        future.set_result(outcome)

    def deliver(outcome: Ok[T] | Err[Any]) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            resolve(outcome)
        else:
            loop.call_soon_threadsafe(resolve, outcome)

    def callback(error: object = None, value: Any = None) -> None:
        if error:
            deliver(Err(_normalize_error(error)))
        else:
            deliver(Ok(value))

    try:
        f(*args, callback, **kwargs)
    except Exception as exc:
        resolve(Err(exc))

    return await future


def from_predicate[T](value: T, predicate: Callable[[T], bool], message: str) -> Ok[T] | Err[ValueError]:
    """Lift a predicate check into a Result.

    Returns:
        Ok(value) if the predicate holds, otherwise Err(ValueError(message)).
    """
    if predicate(value):
        return Ok(value)
    return Err(ValueError(message))


def map_result[T, U, E](result: Ok[T] | Err[E], mapper: Callable[[T], U]) -> Ok[U] | Err[E]:
    """Free-function form of ``result.map(mapper)``."""
    return result.map(mapper)


def with_fallback[T, E](result: Ok[T] | Err[E], fallback: T) -> Ok[T]:
    """Return result if Ok, otherwise Ok(fallback)."""
    if isinstance(result, Ok):
        return result
    return Ok(fallback)


async def retry[T](
    f: Callable[[], Awaitable[Ok[T] | Err[Any]]],
    options: RetryOptions | None = None,
    *,
    cancel_token: CancellationToken | None = None,
) -> Ok[T] | Err[Any]:
    """Call ``f`` until it succeeds, with exponential backoff between attempts.

    ``f`` runs at most ``max_attempts + 1`` times, one call at a time. After each
    failed attempt except the last, the wait is ``delay_ms`` and then doubles.
    An exception raised by ``f`` counts as a failed attempt.

    Args:
        f: Zero-argument async callable returning a Result.
        options: Retry policy. Defaults to ``get_config().retry``.
        cancel_token: Checked before each attempt and raced against each wait.

    Returns:
        The first Ok, the last failure when every attempt failed, or a
        cancelled Err if the token fired.

    Example:
        ```python
        async def fetch() -> Result[bytes, Exception]:
            return await try_async(lambda: client.get(url))

        # 1 call + up to 3 retries, waiting 100ms, 200ms, 400ms
        result = await retry(fetch, RetryOptions(max_attempts=3, delay_ms=100))
        ```
    """
    policy = options if options is not None else get_config().retry
    delay_ms = policy.delay_ms
    attempt = 0

    while True:
        if cancel_token is not None and cancel_token.is_cancelled:
            return cancelled(cancel_token.operation_id, cancel_token.reason)

        try:
            outcome = await f()
        except Exception as exc:
            outcome = Err(exc)

        if isinstance(outcome, Ok):
            if attempt:
                logger.debug('retry_succeeded', attempt=attempt + 1)
            return outcome

        if attempt == policy.max_attempts:
            logger.debug('retry_exhausted', attempts=attempt + 1)
            return outcome

        logger.debug('retry_attempt_failed', attempt=attempt + 1, delay_ms=delay_ms, error=outcome.error)
        if cancel_token is None:
            await anyio.sleep(delay_ms / 1000)
        elif (await settle(anyio.sleep(delay_ms / 1000), cancel_token, abandon=False)).is_cancelled():
            # Backoff timers are cancelled, never abandoned.
            return cancelled(cancel_token.operation_id, cancel_token.reason)
        delay_ms *= 2
        attempt += 1
