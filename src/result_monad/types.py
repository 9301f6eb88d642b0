"""Constrained type aliases and option structs.

Constraints declared with ``msgspec.Meta`` are enforced whenever values are
decoded or converted (``msgspec.convert``, ``msgspec.json.decode``), so options
read from files or environment mappings are rejected at load time with a
clear message.

Usage:
    >>> import msgspec
    >>> from result_monad.types import RetryOptions
    >>>
    >>> RetryOptions.from_mapping({'max_attempts': 5, 'delay_ms': 100})
    RetryOptions(max_attempts=5, delay_ms=100.0)
    >>>
    >>> RetryOptions.from_mapping({'max_attempts': -1})
    # ValidationError: Expected `int` >= 0 - at `$.max_attempts`

See Also:
    - https://jcristharif.com/msgspec/constraints.html
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any

import msgspec

__all__ = [
    'DelayMs',
    'NonNegativeInt',
    'RetryOptions',
]

NonNegativeInt = Annotated[int, msgspec.Meta(ge=0)]
"""Integer greater than or equal to zero.

Valid: 0, 1, 100
Invalid: -1, -100
"""

DelayMs = Annotated[float, msgspec.Meta(ge=0.0, le=86_400_000.0)]
"""Delay in milliseconds.

Valid range: 0 to 86,400,000 (24 hours, inclusive). The upper bound catches
seconds-vs-milliseconds mix-ups in the other direction.
"""

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_DELAY_MS = 300


class RetryOptions(msgspec.Struct, frozen=True, kw_only=True):
    """Retry policy for ``retry()``.

    Attributes:
        max_attempts: Retries after the first attempt; total calls is max_attempts + 1.
        delay_ms: Wait before the first retry; doubled after every retry.
    """

    max_attempts: NonNegativeInt = DEFAULT_MAX_ATTEMPTS
    delay_ms: DelayMs = DEFAULT_DELAY_MS

    def __post_init__(self) -> None:
        if self.max_attempts < 0:
            msg = f'max_attempts must be >= 0, got {self.max_attempts}'
            raise ValueError(msg)
        if self.delay_ms < 0:
            msg = f'delay_ms must be >= 0, got {self.delay_ms}'
            raise ValueError(msg)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RetryOptions:
        """Build options from untrusted data, enforcing the field constraints.

        Raises:
            msgspec.ValidationError: If a field violates its type or constraints.
        """
        return msgspec.convert(dict(data), type=cls)
