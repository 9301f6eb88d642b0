"""Domain error taxonomy: tagged struct variant for Result and raise-based twin.

Every domain error is a single frozen ``DomainError`` struct discriminated by its
``kind``. Constructors render the kind-prefixed message once, at the failure
site, so the struct never changes afterwards.

Example:
    ```python
    from result_monad import DomainError, ErrorKind, failure

    db_error = DomainError.technical('connection reset')
    missing = DomainError.not_found('User', '42', cause=db_error)

    missing.message
    # "Not Found: User with id '42' could not be found"
    missing.messages()
    # ["Not Found: User with id '42' could not be found", 'Technical Error: connection reset']
    missing.is_a(ErrorKind.NOT_FOUND)
    # True
    ```
"""

from __future__ import annotations

from enum import Enum
from typing import Any

import msgspec

__all__ = [
    'DomainError',
    'DomainException',
    'ErrorKind',
    'ResultAccessError',
    'error_message',
    'error_name',
]


class ErrorKind(Enum):
    """Discriminator for ``DomainError``."""

    VALIDATION = 'validation'
    NOT_FOUND = 'not_found'
    UNAUTHORIZED = 'unauthorized'
    BUSINESS_RULE = 'business_rule'
    TECHNICAL = 'technical'
    TIMEOUT = 'timeout'
    CONCURRENCY = 'concurrency'
    CANCELLATION = 'cancellation'


_DISPLAY_NAMES: dict[ErrorKind, str] = {
    ErrorKind.VALIDATION: 'ValidationError',
    ErrorKind.NOT_FOUND: 'NotFoundError',
    ErrorKind.UNAUTHORIZED: 'UnauthorizedError',
    ErrorKind.BUSINESS_RULE: 'BusinessRuleError',
    ErrorKind.TECHNICAL: 'TechnicalError',
    ErrorKind.TIMEOUT: 'TimeoutError',
    ErrorKind.CONCURRENCY: 'ConcurrencyError',
    ErrorKind.CANCELLATION: 'CancellationError',
}

# Specializations: kind -> the more general kind it also satisfies.
_PARENT_KINDS: dict[ErrorKind, ErrorKind] = {
    ErrorKind.TIMEOUT: ErrorKind.TECHNICAL,
    ErrorKind.CANCELLATION: ErrorKind.TECHNICAL,
}

DEFAULT_UNAUTHORIZED_MESSAGE = 'You are not authorized to perform this operation'
DEFAULT_CANCELLATION_MESSAGE = 'Operation was cancelled'


def _with_id(resource: str, resource_id: str | None) -> str:
    if resource_id:
        return f"{resource} with id '{resource_id}'"
    return resource


def _format_ms(duration_ms: float) -> str:
    if float(duration_ms).is_integer():
        return str(int(duration_ms))
    return str(duration_ms)


class DomainError(msgspec.Struct, frozen=True):
    """Domain failure carried in the error channel of a Result.

    Attributes:
        kind: What went wrong, semantically.
        message: Rendered, kind-prefixed message.
        cause: Earlier error this one wraps, if any.
        resource: Resource name (NotFound, Concurrency).
        resource_id: Resource identifier (NotFound, Concurrency).
        operation: Operation name (Timeout).
        timeout_ms: Exceeded deadline in milliseconds (Timeout).
        operation_id: Identifier of the aborted operation (Cancellation).
    """

    kind: ErrorKind
    message: str
    cause: DomainError | BaseException | None = None
    resource: str | None = None
    resource_id: str | None = None
    operation: str | None = None
    timeout_ms: float | None = None
    operation_id: str | None = None

    # --- Constructors ---

    @classmethod
    def validation(cls, message: str, cause: DomainError | BaseException | None = None) -> DomainError:
        """Input failed a correctness rule."""
        return cls(ErrorKind.VALIDATION, f'Validation Error: {message}', cause)

    @classmethod
    def not_found(
        cls,
        resource: str,
        resource_id: str | None = None,
        cause: DomainError | BaseException | None = None,
    ) -> DomainError:
        """Referenced resource is absent.

        Args:
            resource: Resource name, e.g. ``'User'``.
            resource_id: Optional identifier; rendered only when present.
            cause: Optional underlying error.
        """
        return cls(
            ErrorKind.NOT_FOUND,
            f'Not Found: {_with_id(resource, resource_id)} could not be found',
            cause,
            resource=resource,
            resource_id=resource_id,
        )

    @classmethod
    def unauthorized(
        cls,
        message: str = DEFAULT_UNAUTHORIZED_MESSAGE,
        cause: DomainError | BaseException | None = None,
    ) -> DomainError:
        """Caller lacks permission."""
        return cls(ErrorKind.UNAUTHORIZED, f'Unauthorized: {message}', cause)

    @classmethod
    def business_rule(cls, message: str, cause: DomainError | BaseException | None = None) -> DomainError:
        """A domain invariant was violated."""
        return cls(ErrorKind.BUSINESS_RULE, f'Business Rule Violation: {message}', cause)

    @classmethod
    def technical(cls, message: str, cause: DomainError | BaseException | None = None) -> DomainError:
        """Infrastructure or runtime failure."""
        return cls(ErrorKind.TECHNICAL, f'Technical Error: {message}', cause)

    @classmethod
    def timeout(
        cls,
        operation: str,
        timeout_ms: float,
        cause: DomainError | BaseException | None = None,
    ) -> DomainError:
        """Operation exceeded its deadline. Rendered as a technical error."""
        return cls(
            ErrorKind.TIMEOUT,
            f"Technical Error: Operation '{operation}' timed out after {_format_ms(timeout_ms)}ms",
            cause,
            operation=operation,
            timeout_ms=timeout_ms,
        )

    @classmethod
    def concurrency(
        cls,
        resource: str,
        resource_id: str | None = None,
        cause: DomainError | BaseException | None = None,
    ) -> DomainError:
        """Resource was modified by a concurrent actor."""
        return cls(
            ErrorKind.CONCURRENCY,
            f'Concurrency Error: {_with_id(resource, resource_id)} was modified by another process',
            cause,
            resource=resource,
            resource_id=resource_id,
        )

    @classmethod
    def cancellation(
        cls,
        message: str = DEFAULT_CANCELLATION_MESSAGE,
        operation_id: str | None = None,
        cause: DomainError | BaseException | None = None,
    ) -> DomainError:
        """Operation was aborted before completion.

        Unlike timeouts, the message carries no technical prefix.
        """
        return cls(
            ErrorKind.CANCELLATION,
            f'Cancellation: {message}',
            cause,
            operation_id=operation_id,
        )

    # --- Queries ---

    @property
    def name(self) -> str:
        """Display name of the kind, e.g. ``'NotFoundError'``."""
        return _DISPLAY_NAMES[self.kind]

    def is_a(self, kind: ErrorKind) -> bool:
        """Check the kind, honouring specializations.

        Timeout and Cancellation errors are also Technical errors.

        Args:
            kind: Kind to test against.

        Returns:
            bool: True if this error is of ``kind`` or specializes it.
        """
        current: ErrorKind | None = self.kind
        while current is not None:
            if current is kind:
                return True
            current = _PARENT_KINDS.get(current)
        return False

    def chain(self) -> list[DomainError | BaseException]:
        """Return this error followed by its causes, outermost first.

        Exception causes are followed through ``__cause__``. The walk stops at
        the first object already seen.
        """
        chain: list[DomainError | BaseException] = []
        seen: set[int] = set()
        current: Any = self
        while current is not None and id(current) not in seen:
            seen.add(id(current))
            chain.append(current)
            current = current.cause if isinstance(current, DomainError) else current.__cause__
        return chain

    def messages(self) -> list[str]:
        """Flattened messages from this error down to the innermost cause."""
        return [error_message(err) for err in self.chain()]

    def root_cause(self) -> DomainError | BaseException:
        """Innermost error of the chain (``self`` when there is no cause)."""
        return self.chain()[-1]

    def to_exception(self) -> DomainException:
        """Convert to exception for raise-based code."""
        return DomainException(self)

    def __str__(self) -> str:
        return self.message


class DomainException(Exception):
    """Raise-based twin of ``DomainError``.

    Raised at the ``to_awaitable`` boundary. The struct's cause chain is
    mirrored onto ``__cause__`` so tracebacks show it.
    """

    def __init__(self, error: DomainError) -> None:
        self.error = error
        super().__init__(error.message)
        cause = error.cause
        if isinstance(cause, DomainError):
            self.__cause__ = cause.to_exception()
        elif cause is not None:
            self.__cause__ = cause

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind

    def to_struct(self) -> DomainError:
        """Convert to struct for Result-based code."""
        return self.error


class ResultAccessError(RuntimeError):
    """A Result was read through the wrong variant.

    Reading ``.value`` of an ``Err`` or ``.error`` of an ``Ok`` is a misuse of
    the API, never a domain failure.
    """


def error_name(error: object) -> str:
    """Display name for any error payload, defaulting to ``'Error'``."""
    if isinstance(error, DomainError):
        return error.name
    if isinstance(error, BaseException):
        return type(error).__name__
    return 'Error'


def error_message(error: object) -> str:
    """Message for any error payload, defaulting to ``'Unknown error'``."""
    if isinstance(error, DomainError):
        message = error.message
    elif error is None:
        message = ''
    else:
        message = str(error)
    return message or 'Unknown error'
