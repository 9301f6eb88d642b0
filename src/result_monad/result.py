"""Result type: Ok[T] | Err[E] for explicit error handling.

``Ok`` and ``Err`` are frozen structs, so a Result can never hold both a value
and an error, and can never be changed once built. Every operator returns a
Result; only the ``.value`` / ``.error`` accessors raise, and only when used
on the wrong variant.

Example:
    ```python
    from result_monad import Err, Ok, from_throwable

    def divide(a: float, b: float) -> float:
        if b == 0:
            raise ZeroDivisionError('Division by zero')
        return a / b

    from_throwable(lambda: divide(10, 2))
    # Ok(value=5.0)

    match from_throwable(lambda: divide(10, 0)):
        case Ok(value):
            print(value)
        case Err(error):
            print(error)  # Division by zero
    ```
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, NoReturn, TypeIs

import msgspec

from result_monad.errors import DomainError, ResultAccessError, error_message, error_name

if TYPE_CHECKING:
    from result_monad.cancellation import CancellationToken

__all__ = [
    'Err',
    'Ok',
    'Result',
    'cancelled',
    'failure',
    'from_awaitable',
    'from_throwable',
    'success',
]


class Ok[T](msgspec.Struct, frozen=True):
    """Success variant of Result containing a value of type T.

    Examples:
        >>> ok = Ok(42)
        >>> ok.value
        42
        >>> ok.map(lambda x: x * 2)
        Ok(value=84)
    """

    value: T

    def is_success(self) -> TypeIs[Ok[T]]:
        """Return True if the result is Ok.

        This method provides type narrowing - after checking is_success(),
        the type checker knows the result is Ok[T].
        """
        return True

    def is_failure(self) -> TypeIs[Err[object]]:
        """Return False since this is Ok."""
        return False

    def is_cancelled(self) -> bool:
        """Return False since this is Ok."""
        return False

    @property
    def error(self) -> NoReturn:
        """Raise since Ok has no error.

        Raises:
            ResultAccessError: Always.
        """
        raise ResultAccessError(f'Cannot access error of a successful result: Ok({self.value!r})')

    def map[U](self, f: Callable[[T], U]) -> Ok[U]:
        """Apply a function to the contained value.

        Args:
            f: Function to apply to the Ok value.

        Returns:
            Ok containing the result of applying f to the value.
        """
        return Ok(f(self.value))

    def map_error[F](self, _f: Callable[[Any], F]) -> Ok[T]:
        """Return self unchanged since this is Ok."""
        return self

    def flat_map[U, E](self, f: Callable[[T], Ok[U] | Err[E]]) -> Ok[U] | Err[E | Exception]:
        """Apply a function that returns a Result to the contained value.

        Also known as and_then or bind. The Result returned by f is passed
        through as-is; if f raises, the exception becomes the Err.

        Args:
            f: Function that takes T and returns Result[U, E].

        Returns:
            The Result returned by f, or Err(exception).
        """
        try:
            return f(self.value)
        except Exception as exc:
            return Err(exc)

    def tap(self, f: Callable[[T], Any]) -> Ok[T]:
        """Call f with the value for its side effect and return self."""
        f(self.value)
        return self

    def tap_error(self, _f: Callable[[Any], Any]) -> Ok[T]:
        """Return self unchanged since this is Ok."""
        return self

    def match[U](self, on_success: Callable[[T], U], on_failure: Callable[[Any], U]) -> U:  # noqa: ARG002
        """Dispatch to on_success with the value."""
        return on_success(self.value)

    def get_or_else(self, default: T) -> T:  # noqa: ARG002
        """Return the contained value, ignoring the default."""
        return self.value

    def get_or_call(self, f: Callable[[Any], T]) -> T:  # noqa: ARG002
        """Return the contained value, without calling the fallback."""
        return self.value

    def recover(self, _f: Callable[[Any], Ok[T] | Err[Any]]) -> Ok[T]:
        """Return self unchanged since this is Ok."""
        return self

    def or_else(self, _alternative: Ok[T] | Err[Any]) -> Ok[T]:
        """Return self since this is Ok."""
        return self

    async def to_awaitable(self) -> T:
        """Resolve to the contained value."""
        return self.value

    def to_json(self) -> dict[str, Any]:
        """Return ``{'success': True, 'value': value}``."""
        return {'success': True, 'value': self.value}

    async def async_map[U](
        self,
        f: Callable[[T], Awaitable[U]],
        cancel_token: CancellationToken | None = None,
    ) -> Ok[U] | Err[Any]:
        """Await an async function on the value.

        If a token is given and already cancelled, f is never called. Otherwise
        f(value) is raced against the token; when the token wins, the pending
        operation is abandoned (left running, its outcome discarded).

        Args:
            f: Async function to apply to the value.
            cancel_token: Optional token to race against.

        Returns:
            Ok(awaited value), Err(exception) if f raised, or a cancelled Err.

        Example:
            ```python
            async def double(x: int) -> int:
                return x * 2

            async def example():
                assert await Ok(5).async_map(double) == Ok(10)
            ```
        """
        from result_monad._internal.race import settle

        if cancel_token is not None and cancel_token.is_cancelled:
            return cancelled(cancel_token.operation_id, cancel_token.reason)
        try:
            awaitable = f(self.value)
        except Exception as exc:
            return Err(exc)
        return await settle(awaitable, cancel_token)

    async def async_flat_map[U, E](
        self,
        f: Callable[[T], Awaitable[Ok[U] | Err[E]]],
        cancel_token: CancellationToken | None = None,
    ) -> Ok[U] | Err[Any]:
        """Await an async function returning a Result, without double-wrapping.

        Same cancellation and exception contract as ``async_map``.

        Args:
            f: Async function that takes T and returns Result[U, E].
            cancel_token: Optional token to race against.

        Returns:
            The inner Result, Err(exception) if f raised, or a cancelled Err.
        """
        outcome = await self.async_map(f, cancel_token)
        if isinstance(outcome, Ok):
            return outcome.value
        return outcome


class Err[E](msgspec.Struct, frozen=True, repr_omit_defaults=True):
    """Error variant of Result containing an error of type E.

    ``cancelled`` is set only by the ``cancelled()`` factory; a cancelled Err
    is still an ordinary failure.

    Examples:
        >>> err = Err(ValueError('boom'))
        >>> err.is_failure()
        True
        >>> err.get_or_else(0)
        0
    """

    error: E
    cancelled: bool = False

    def is_success(self) -> TypeIs[Ok[object]]:
        """Return False since this is Err."""
        return False

    def is_failure(self) -> TypeIs[Err[E]]:
        """Return True if the result is Err.

        This method provides type narrowing - after checking is_failure(),
        the type checker knows the result is Err[E].
        """
        return True

    def is_cancelled(self) -> bool:
        """Return True only for Results built by ``cancelled()``."""
        return self.cancelled

    @property
    def value(self) -> NoReturn:
        """Raise since Err has no value.

        Raises:
            ResultAccessError: Always.
        """
        raise ResultAccessError(f'Cannot access value of a failed result. Error: {error_message(self.error)}')

    def map[T, U](self, _f: Callable[[T], U]) -> Err[E]:
        """Return self unchanged since this is Err."""
        return self

    def map_error[F](self, f: Callable[[E], F]) -> Err[F]:
        """Apply a function to the contained error.

        Args:
            f: Function to apply to the error value.

        Returns:
            Err containing the transformed error.
        """
        return Err(f(self.error))

    def flat_map[T, U](self, _f: Callable[[T], Ok[U] | Err[E]]) -> Err[E]:
        """Return self unchanged since this is Err."""
        return self

    def tap(self, _f: Callable[[Any], Any]) -> Err[E]:
        """Return self unchanged since this is Err."""
        return self

    def tap_error(self, f: Callable[[E], Any]) -> Err[E]:
        """Call f with the error for its side effect and return self."""
        f(self.error)
        return self

    def match[U](self, on_success: Callable[[Any], U], on_failure: Callable[[E], U]) -> U:  # noqa: ARG002
        """Dispatch to on_failure with the error."""
        return on_failure(self.error)

    def get_or_else[T](self, default: T) -> T:
        """Return the default value since this is Err."""
        return default

    def get_or_call[T](self, f: Callable[[E], T]) -> T:
        """Compute a fallback value from the error."""
        return f(self.error)

    def recover[T, F](self, f: Callable[[E], Ok[T] | Err[F]]) -> Ok[T] | Err[F]:
        """Apply a recovery function to the error.

        Args:
            f: Function that takes the error and returns a new Result.

        Returns:
            The Result returned by f.
        """
        return f(self.error)

    def or_else[T, F](self, alternative: Ok[T] | Err[F]) -> Ok[T] | Err[F]:
        """Return the (already built) alternative since this is Err."""
        return alternative

    async def to_awaitable(self) -> NoReturn:
        """Raise the error.

        A ``DomainError`` is raised as its ``DomainException``; any other
        non-exception payload is wrapped in ``Exception``.
        """
        error = self.error
        if isinstance(error, BaseException):
            raise error
        if isinstance(error, DomainError):
            raise error.to_exception()
        raise Exception(error_message(error))

    def to_json(self) -> dict[str, Any]:
        """Return ``{'success': False, 'error': {'name': ..., 'message': ...}}``."""
        return {
            'success': False,
            'error': {'name': error_name(self.error), 'message': error_message(self.error)},
        }

    async def async_map(
        self,
        _f: Callable[[Any], Awaitable[Any]],
        cancel_token: CancellationToken | None = None,  # noqa: ARG002
    ) -> Err[E]:
        """Return self without calling f since this is Err."""
        return self

    async def async_flat_map(
        self,
        _f: Callable[[Any], Awaitable[Any]],
        cancel_token: CancellationToken | None = None,  # noqa: ARG002
    ) -> Err[E]:
        """Return self without calling f since this is Err."""
        return self


type Result[T, E = DomainError | Exception] = Ok[T] | Err[E]


def success[T](value: T = None) -> Ok[T]:  # type: ignore[assignment]
    """Build an Ok. Calling it without a value gives ``Ok(None)``."""
    return Ok(value)


def failure[E](error: E) -> Err[E]:
    """Build an Err."""
    return Err(error)


def cancelled(operation_id: str | None = None, reason: str | None = None) -> Err[DomainError]:
    """Build a cancelled Err carrying a Cancellation-kind error.

    Args:
        operation_id: Identifier of the aborted operation.
        reason: Message override; defaults to 'Operation was cancelled'.

    Returns:
        Err whose ``is_cancelled()`` is True.
    """
    if reason:
        error = DomainError.cancellation(reason, operation_id=operation_id)
    else:
        error = DomainError.cancellation(operation_id=operation_id)
    return Err(error, cancelled=True)


def from_throwable[T](f: Callable[[], T]) -> Ok[T] | Err[Exception]:
    """Call f and capture its outcome.

    Args:
        f: Zero-argument callable that may raise.

    Returns:
        Ok(return value), or Err(exception) if f raised.

    Example:
        ```python
        from_throwable(lambda: int('42'))
        # Ok(value=42)
        from_throwable(lambda: int('x')).is_failure()
        # True
        ```
    """
    try:
        return Ok(f())
    except Exception as exc:
        return Err(exc)


async def from_awaitable[T](
    awaitable: Awaitable[T],
    cancel_token: CancellationToken | None = None,
) -> Ok[T] | Err[Any]:
    """Bridge an external awaitable into a Result.

    Same cancellation contract as ``Ok.async_map``: an already-cancelled token
    short-circuits, otherwise the awaitable is raced against the token.

    Args:
        awaitable: Coroutine, task or future to await.
        cancel_token: Optional token to race against.

    Returns:
        Ok(value), Err(exception), or a cancelled Err.
    """
    from result_monad._internal.race import settle

    return await settle(awaitable, cancel_token)
