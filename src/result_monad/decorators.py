"""@safe and @safe_async: decorator forms of the exception-catching boundaries.

Decorated functions return a Result instead of raising. A raised
``DomainException`` comes back as the ``DomainError`` it carries, so code that
crossed into raise-based style through ``to_awaitable()`` or ``to_exception()``
lands in Result style again with its error intact.

Example:
    ```python
    class UserRepository:
        @safe(exceptions=(KeyError,), map_error=lambda e: DomainError.not_found('User', e.args[0]))
        def get(self, user_id: str) -> User:
            return self._rows[user_id]

    repo.get('42').flat_map(check_active).map(render_profile)
    ```
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, overload

import wrapt

from result_monad.errors import DomainError, DomainException
from result_monad.result import Err, Ok

__all__ = ['safe', 'safe_async']

type ErrorMapper = Callable[[Exception], Any]


def _payload(exc: Exception, map_error: ErrorMapper | None) -> Any:
    """Error value stored in the Err for a caught exception."""
    if map_error is not None:
        return map_error(exc)
    if isinstance(exc, DomainException):
        return exc.to_struct()
    return exc


@overload
def safe[**P, T](
    func: Callable[P, T],
) -> Callable[P, Ok[T] | Err[DomainError | Exception]]: ...


@overload
def safe[**P, T](
    func: None = None,
    *,
    exceptions: tuple[type[Exception], ...] | None = None,
    map_error: ErrorMapper | None = None,
) -> Callable[[Callable[P, T]], Callable[P, Ok[T] | Err[Any]]]: ...


def safe(
    func: Callable[..., Any] | None = None,
    *,
    exceptions: tuple[type[Exception], ...] | None = None,
    map_error: ErrorMapper | None = None,
) -> Any:
    """Make a raising function return ``Ok(value)`` or ``Err(error)``.

    Works bare (``@safe``) or configured (``@safe(...)``), on plain functions
    and on methods.

    Args:
        func: The function to wrap (when used without parentheses).
        exceptions: Exception types to catch. Defaults to (Exception,). Other
            exceptions propagate.
        map_error: Builds the Err payload from the caught exception, e.g. a
            ``DomainError`` constructor. Without it a ``DomainException`` is
            unwrapped to its ``DomainError`` and anything else is kept as is.

    Returns:
        The wrapped function.

    Example:
        ```python
        @safe(exceptions=(ValueError,), map_error=lambda e: DomainError.validation(str(e)))
        def parse_quantity(raw: str) -> int:
            return int(raw)

        parse_quantity('3')
        # Ok(value=3)
        parse_quantity('three').error.message
        # "Validation Error: invalid literal for int() with base 10: 'three'"
        ```
    """
    catch = exceptions if exceptions is not None else (Exception,)

    @wrapt.decorator
    def wrapper(wrapped: Callable[..., Any], instance: Any, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        try:
            return Ok(wrapped(*args, **kwargs))
        except catch as exc:
            return Err(_payload(exc, map_error))

    if func is not None:
        return wrapper(func)
    return wrapper


@overload
def safe_async[**P, T](
    func: Callable[P, Awaitable[T]],
) -> Callable[P, Awaitable[Ok[T] | Err[DomainError | Exception]]]: ...


@overload
def safe_async[**P, T](
    func: None = None,
    *,
    exceptions: tuple[type[Exception], ...] | None = None,
    map_error: ErrorMapper | None = None,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[Ok[T] | Err[Any]]]]: ...


def safe_async(
    func: Callable[..., Awaitable[Any]] | None = None,
    *,
    exceptions: tuple[type[Exception], ...] | None = None,
    map_error: ErrorMapper | None = None,
) -> Any:
    """Coroutine form of ``safe``; the same options apply.

    Example:
        ```python
        @safe_async(
            exceptions=(TimeoutError,),
            map_error=lambda e: DomainError.timeout('load_invoice', 5000, cause=e),
        )
        async def load_invoice(invoice_id: str) -> Invoice:
            return await billing.fetch(invoice_id)
        ```
    """
    catch = exceptions if exceptions is not None else (Exception,)

    @wrapt.decorator
    async def wrapper(
        wrapped: Callable[..., Awaitable[Any]],
        instance: Any,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Any:
        try:
            return Ok(await wrapped(*args, **kwargs))
        except catch as exc:
            return Err(_payload(exc, map_error))

    if func is not None:
        return wrapper(func)
    return wrapper
