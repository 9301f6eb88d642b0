"""Cooperative cancellation: a source that cancels and a token that observes.

The owner of an operation keeps the ``CancellationSource``; callees only get
its read-only ``CancellationToken``. A token can be polled
(``is_cancelled``), subscribed to (``subscribe``) and awaited (``wait``).

Cancelling never interrupts running work. Async operators that receive a
token race the work against it and, if the token fires first, stop waiting and
return a cancelled Result. The abandoned work keeps running unobserved.

Example:
    ```python
    source = CancellationSource(operation_id='fetch-user')

    async def handler():
        result = await Ok(user_id).async_map(fetch_user, source.token)
        if result.is_cancelled():
            ...

    source.cancel('client disconnected')
    ```

aiologic primitives make ``cancel()`` safe to call from any thread.
"""

from __future__ import annotations

from collections.abc import Callable

import aiologic

__all__ = ['CancellationSource', 'CancellationToken']


class CancellationToken:
    """Read-only view of a cancellation request.

    Attributes:
        _event: Set once, when cancellation is requested.
        _lock: Guards the cancelled flag and the subscriber list.
        _callbacks: Subscribers still waiting for cancellation.
    """

    __slots__ = ('_callbacks', '_cancelled', '_event', '_lock', '_operation_id', '_reason')

    def __init__(self, operation_id: str | None = None) -> None:
        self._event = aiologic.Event()
        self._lock = aiologic.Lock()
        self._callbacks: list[Callable[[CancellationToken], object]] = []
        self._cancelled = False
        self._operation_id = operation_id
        self._reason: str | None = None

    @property
    def is_cancelled(self) -> bool:
        """True once cancellation has been requested."""
        return self._cancelled

    @property
    def operation_id(self) -> str | None:
        """Identifier of the operation this token guards."""
        return self._operation_id

    @property
    def reason(self) -> str | None:
        """Reason given to ``cancel()``, if any."""
        return self._reason

    def subscribe(self, callback: Callable[[CancellationToken], object]) -> Callable[[], None]:
        """Call ``callback(token)`` when cancellation is requested.

        If the token is already cancelled, the callback runs immediately.

        Args:
            callback: Called once, with this token.

        Returns:
            A function that removes the subscription.
        """
        with self._lock:
            if not self._cancelled:
                self._callbacks.append(callback)
                return lambda: self._unsubscribe(callback)
        callback(self)
        return lambda: None

    def _unsubscribe(self, callback: Callable[[CancellationToken], object]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    async def wait(self) -> None:
        """Suspend until cancellation is requested."""
        await self._event

    def _cancel(self, reason: str | None) -> bool:
        with self._lock:
            if self._cancelled:
                return False
            self._cancelled = True
            self._reason = reason
            callbacks, self._callbacks = self._callbacks, []
        self._event.set()
        for callback in callbacks:
            callback(self)
        return True

    def __repr__(self) -> str:
        state = 'cancelled' if self._cancelled else 'active'
        return f'CancellationToken(operation_id={self._operation_id!r}, {state})'


class CancellationSource:
    """Owner side of a cancellation token."""

    __slots__ = ('_token',)

    def __init__(self, operation_id: str | None = None) -> None:
        self._token = CancellationToken(operation_id)

    @property
    def token(self) -> CancellationToken:
        """The token to hand to operations."""
        return self._token

    @property
    def cancelled(self) -> bool:
        return self._token.is_cancelled

    def cancel(self, reason: str | None = None) -> bool:
        """Request cancellation. Idempotent.

        Args:
            reason: Optional message for the resulting Cancellation error.

        Returns:
            True if this call cancelled the token, False if it already was.
        """
        return self._token._cancel(reason)

    def __repr__(self) -> str:
        return f'CancellationSource({self._token!r})'
