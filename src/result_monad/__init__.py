"""result-monad: explicit success/failure values instead of exceptions.

Flat imports (preferred):
    from result_monad import Result, Ok, Err, success, failure, cancelled
    from result_monad import DomainError, ErrorKind, combine_all, retry

Submodule imports (for organization):
    from result_monad.result import Ok, Err, Result
    from result_monad.errors import DomainError, ErrorKind
    from result_monad.combinators import retry, RetryOptions
    from result_monad.cancellation import CancellationSource
"""

# Configuration
from result_monad._config import ResultConfig, get_config, init

# Logging
from result_monad._logging import add_log_hook, clear_log_hooks, configure_logging, get_logger, remove_log_hook

# Cancellation
from result_monad.cancellation import CancellationSource, CancellationToken

# Combinators
from result_monad.combinators import (
    bridge_callback,
    combine_all,
    from_predicate,
    map_result,
    retry,
    try_async,
    with_fallback,
)

# Decorators
from result_monad.decorators import safe, safe_async

# Errors
from result_monad.errors import (
    DomainError,
    DomainException,
    ErrorKind,
    ResultAccessError,
)

# Result types
from result_monad.result import (
    Err,
    Ok,
    Result,
    cancelled,
    failure,
    from_awaitable,
    from_throwable,
    success,
)
from result_monad.types import RetryOptions

# Validation
from result_monad.validation import Validator, from_schema, validate

__all__ = [
    # Cancellation
    'CancellationSource',
    'CancellationToken',
    # Errors
    'DomainError',
    'DomainException',
    # Result types
    'Err',
    'ErrorKind',
    'Ok',
    'Result',
    'ResultAccessError',
    # Configuration
    'ResultConfig',
    'RetryOptions',
    # Validation
    'Validator',
    # Logging
    'add_log_hook',
    # Combinators
    'bridge_callback',
    'cancelled',
    'clear_log_hooks',
    'combine_all',
    'configure_logging',
    'failure',
    'from_awaitable',
    'from_predicate',
    'from_schema',
    'from_throwable',
    'get_config',
    'get_logger',
    'init',
    'map_result',
    'remove_log_hook',
    'retry',
    'safe',
    'safe_async',
    'success',
    'try_async',
    'validate',
    'with_fallback',
]
