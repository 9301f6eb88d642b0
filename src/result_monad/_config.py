"""Library configuration: ResultConfig, environment defaults, and initialization."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from result_monad._logging import configure_logging
from result_monad.types import DEFAULT_DELAY_MS, DEFAULT_MAX_ATTEMPTS, RetryOptions

__all__ = [
    'ENV_LOG_LEVEL',
    'ENV_RETRY_DELAY_MS',
    'ENV_RETRY_MAX_ATTEMPTS',
    'ResultConfig',
    'get_config',
    'init',
]

ENV_RETRY_MAX_ATTEMPTS = 'RESULT_MONAD_RETRY_MAX_ATTEMPTS'
ENV_RETRY_DELAY_MS = 'RESULT_MONAD_RETRY_DELAY_MS'
ENV_LOG_LEVEL = 'RESULT_MONAD_LOG_LEVEL'

_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass(frozen=True)
class ResultConfig:
    """Configuration for result-monad.

    Attributes:
        retry: Default policy for ``retry()`` calls made without options.
        log_level: Logging level (e.g., "DEBUG", "INFO"). None = leave logging alone.
    """

    retry: RetryOptions = field(default_factory=RetryOptions)
    log_level: str | None = None


# Global configuration (set by init())
_config: ResultConfig | None = None


def _env_number(name: str, default: float, *, integer: bool) -> float:
    """Read a non-negative number from the environment, warning on junk."""
    raw = os.environ.get(name, '').strip()
    if not raw:
        return default
    try:
        value = int(raw) if integer else float(raw)
    except ValueError:
        logging.warning("Invalid %s value '%s', using default %s", name, raw, default)
        return default
    if value < 0:
        logging.warning("Negative %s value '%s', using default %s", name, raw, default)
        return default
    return value


def _detect_retry() -> RetryOptions:
    """Build the default retry policy from the environment.

    Priority:
    1. RESULT_MONAD_RETRY_MAX_ATTEMPTS / RESULT_MONAD_RETRY_DELAY_MS
    2. Built-in defaults (3 retries, 300 ms)
    """
    return RetryOptions(
        max_attempts=int(_env_number(ENV_RETRY_MAX_ATTEMPTS, DEFAULT_MAX_ATTEMPTS, integer=True)),
        delay_ms=_env_number(ENV_RETRY_DELAY_MS, DEFAULT_DELAY_MS, integer=False),
    )


def _detect_log_level() -> str | None:
    raw = os.environ.get(ENV_LOG_LEVEL, '').strip().upper()
    if not raw:
        return None
    if raw not in _LOG_LEVELS:
        logging.warning("Unknown %s value '%s', logging left unconfigured", ENV_LOG_LEVEL, raw)
        return None
    return raw


def init(
    max_attempts: int | None = None,
    delay_ms: float | None = None,
    log_level: str | None = None,
) -> ResultConfig:
    """Initialize result-monad with the given configuration.

    Unset arguments fall back to the environment, then to built-in defaults.

    Args:
        max_attempts: Default retry count for ``retry()``.
        delay_ms: Default initial backoff delay for ``retry()``.
        log_level: Logging level ("DEBUG", "INFO", etc.). None = leave logging alone.

    Returns:
        The ResultConfig that was set.

    Example:
        ```python
        from result_monad import init

        # Environment and defaults
        init()

        # Explicit configuration
        init(max_attempts=5, delay_ms=100, log_level='DEBUG')
        ```
    """
    global _config  # noqa: PLW0603

    detected = _detect_retry()
    retry = RetryOptions(
        max_attempts=detected.max_attempts if max_attempts is None else max_attempts,
        delay_ms=detected.delay_ms if delay_ms is None else delay_ms,
    )
    resolved_level = log_level if log_level is not None else _detect_log_level()

    _config = ResultConfig(retry=retry, log_level=resolved_level)

    if resolved_level is not None:
        configure_logging(resolved_level)

    return _config


def get_config() -> ResultConfig:
    """Get the current configuration.

    Unlike a runtime that must be started, the library works without
    ``init()``: the environment-derived defaults are returned instead.

    Returns:
        The current ResultConfig.
    """
    if _config is None:
        return ResultConfig(retry=_detect_retry(), log_level=_detect_log_level())
    return _config


def _reset() -> None:
    """Forget any ``init()`` call. Used by tests."""
    global _config  # noqa: PLW0603
    _config = None
