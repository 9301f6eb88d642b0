"""Fluent validation that ends in a Result.

``Validator`` collects rule violations for a value and its fields, then
``validate()`` turns them into ``Ok(value)`` or an ``Err`` carrying a single
Validation-kind ``DomainError``. Messages may contain ``{path}``, replaced by
the dotted field path (or ``value`` at the top level).

Example:
    ```python
    result = (
        validate(user)
        .field('name', lambda v: v.required().not_empty().max_length(100))
        .field('email', lambda v: v.required().email())
        .field('age', lambda v: v.is_number().min(18))
        .each('tags', lambda v: v.not_empty())
        .validate()
    )
    # Err(error=DomainError(kind=<ErrorKind.VALIDATION: 'validation'>,
    #     message='Validation Error: age must be at least 18'))
    ```

``from_schema`` does the same for typed data, delegating to ``msgspec.convert``.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, Self

import msgspec

from result_monad.errors import DomainError
from result_monad.result import Err, Ok

__all__ = ['Validator', 'from_schema', 'validate']

_EMAIL = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')

type Rules[V] = Callable[[Validator[V]], object]


def _join_path(path: Sequence[str]) -> str:
    joined = ''
    for segment in path:
        if joined and not segment.startswith('['):
            joined += '.'
        joined += segment
    return joined


def _is_number(value: object) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


class Validator[T]:
    """Accumulates rule violations for one value.

    Rules only judge values of the type they apply to: string rules skip
    non-strings, numeric bounds skip non-numbers. Use ``required`` and
    ``is_number`` to demand presence and type.
    """

    __slots__ = ('_errors', '_message', '_path', '_value')

    def __init__(self, value: T, path: Sequence[str] = ()) -> None:
        self._value = value
        self._path = tuple(path)
        self._errors: list[str] = []
        self._message: str | None = None

    @classmethod
    def for_value(cls, value: T) -> Validator[T]:
        """Start a validation chain for ``value``."""
        return cls(value)

    @property
    def errors(self) -> tuple[str, ...]:
        """Violations collected so far, in rule order."""
        return tuple(self._errors)

    # --- Structure ---

    def field(self, name: str, rules: Rules[Any]) -> Self:
        """Validate a field, read by key from mappings or by attribute otherwise.

        A missing field is validated as ``None``.
        """
        child = Validator(self._get(name), (*self._path, name))
        rules(child)
        self._errors.extend(child._errors)
        return self

    def each(self, name: str, rules: Rules[Any]) -> Self:
        """Validate every item of a list field, with ``name[i]`` paths."""
        items = self._get(name)
        path = (*self._path, name)
        if items is None:
            self._errors.append(f"Property '{_join_path(path)}' is missing or null")
            return self
        if isinstance(items, str | bytes | Mapping) or not isinstance(items, Iterable):
            self._errors.append(f"Property '{_join_path(path)}' is not a list")
            return self
        for index, item in enumerate(items):
            child = Validator(item, (*path, f'[{index}]'))
            rules(child)
            self._errors.extend(child._errors)
        return self

    def _get(self, name: str) -> Any:
        if isinstance(self._value, Mapping):
            return self._value.get(name)
        return getattr(self._value, name, None)

    # --- Rules ---

    def with_message(self, message: str) -> Self:
        """Use ``message`` for the next violation instead of the rule's default."""
        self._message = message
        return self

    def required(self) -> Self:
        return self._check(self._value is not None, '{path} is required')

    def not_empty(self) -> Self:
        value = self._value
        if isinstance(value, str):
            return self._check(value.strip() != '', '{path} cannot be empty')
        return self

    def min_length(self, length: int) -> Self:
        value = self._value
        if isinstance(value, str):
            return self._check(len(value) >= length, f'{{path}} must be at least {length} characters')
        return self

    def max_length(self, length: int) -> Self:
        value = self._value
        if isinstance(value, str):
            return self._check(len(value) <= length, f'{{path}} cannot exceed {length} characters')
        return self

    def is_number(self) -> Self:
        value = self._value
        ok = _is_number(value) and not (isinstance(value, float) and math.isnan(value))
        return self._check(ok, '{path} must be a number')

    def min(self, minimum: float) -> Self:
        if _is_number(self._value):
            return self._check(self._value >= minimum, f'{{path}} must be at least {minimum}')
        return self

    def max(self, maximum: float) -> Self:
        if _is_number(self._value):
            return self._check(self._value <= maximum, f'{{path}} cannot exceed {maximum}')
        return self

    def email(self) -> Self:
        value = self._value
        if isinstance(value, str):
            return self._check(_EMAIL.match(value) is not None, '{path} must be a valid email address')
        return self

    def matches(self, pattern: str | re.Pattern[str]) -> Self:
        """Require ``pattern`` to be found somewhere in a string value."""
        value = self._value
        if isinstance(value, str):
            return self._check(re.search(pattern, value) is not None, '{path} does not match the required pattern')
        return self

    def one_of(self, allowed: Iterable[object]) -> Self:
        options = list(allowed)
        listed = ', '.join(str(option) for option in options)
        return self._check(self._value in options, f'{{path}} must be one of: {listed}')

    def custom(self, predicate: Callable[[T], bool], message: str = 'Validation failed for {path}') -> Self:
        return self._check(predicate(self._value), message)

    # --- Terminal ---

    def validate(self) -> Ok[T] | Err[DomainError]:
        """Return Ok(value), or Err with every violation joined by ', '."""
        if not self._errors:
            return Ok(self._value)
        return Err(DomainError.validation(', '.join(self._errors)))

    def _check(self, passed: bool, default_message: str) -> Self:
        if not passed:
            # Passing rules leave a pending custom message for the next violation.
            message, self._message = self._message, None
            path = _join_path(self._path) or 'value'
            self._errors.append((message or default_message).replace('{path}', path))
        return self

    def __repr__(self) -> str:
        return f'Validator(path={_join_path(self._path) or "value"!r}, errors={len(self._errors)})'


def validate[T](value: T) -> Validator[T]:
    """Shorthand for ``Validator.for_value(value)``."""
    return Validator.for_value(value)


def from_schema[T](schema: type[T]) -> Callable[[object], Ok[T] | Err[DomainError]]:
    """Build a validating converter for ``schema``.

    Args:
        schema: Any type msgspec can convert to (Struct, dataclass, TypedDict, ...).

    Returns:
        A function mapping raw data to Ok(converted) or a Validation-kind Err
        whose cause is the ``msgspec.ValidationError``.

    Example:
        ```python
        class User(msgspec.Struct):
            name: str
            age: Annotated[int, msgspec.Meta(ge=18)]

        parse_user = from_schema(User)
        parse_user({'name': 'Ada', 'age': 36})
        # Ok(value=User(name='Ada', age=36))
        ```
    """

    def convert(data: object) -> Ok[T] | Err[DomainError]:
        try:
            return Ok(msgspec.convert(data, type=schema))
        except msgspec.ValidationError as exc:
            return Err(DomainError.validation(str(exc), cause=exc))

    return convert
