"""Tests for verifying import styles work correctly."""

import result_monad


class TestFlatImports:
    """Verify flat imports from result_monad work."""

    def test_result_types(self) -> None:
        """Test importing Result types from root."""
        from result_monad import Err, Ok, Result, cancelled, failure, success

        result: Result[int] = success(1)
        assert result == Ok(1)
        assert failure('e') == Err('e')
        assert cancelled().is_cancelled()

    def test_errors(self) -> None:
        """Test importing the error taxonomy from root."""
        from result_monad import DomainError, DomainException, ErrorKind, ResultAccessError

        assert DomainError.technical('x').kind is ErrorKind.TECHNICAL
        assert issubclass(DomainException, Exception)
        assert issubclass(ResultAccessError, RuntimeError)

    def test_combinators(self) -> None:
        """Test importing combinators from root."""
        from result_monad import (
            bridge_callback,
            combine_all,
            from_awaitable,
            from_predicate,
            from_throwable,
            map_result,
            retry,
            try_async,
            with_fallback,
        )

        for fn in (
            bridge_callback,
            combine_all,
            from_awaitable,
            from_predicate,
            from_throwable,
            map_result,
            retry,
            try_async,
            with_fallback,
        ):
            assert callable(fn)

    def test_decorators_and_validation(self) -> None:
        """Test importing decorators and validation from root."""
        from result_monad import Validator, from_schema, safe, safe_async, validate

        assert callable(safe)
        assert callable(safe_async)
        assert isinstance(validate(1), Validator)
        assert callable(from_schema(int))

    def test_runtime_surface(self) -> None:
        """Test importing config, logging and cancellation from root."""
        from result_monad import (
            CancellationSource,
            CancellationToken,
            ResultConfig,
            RetryOptions,
            add_log_hook,
            clear_log_hooks,
            configure_logging,
            get_config,
            get_logger,
            init,
            remove_log_hook,
        )

        assert isinstance(CancellationSource().token, CancellationToken)
        assert isinstance(get_config(), ResultConfig)
        assert RetryOptions().max_attempts == 3
        for fn in (add_log_hook, clear_log_hooks, configure_logging, get_logger, init, remove_log_hook):
            assert callable(fn)

    def test_all_names_resolve(self) -> None:
        """Every name in __all__ is importable."""
        for name in result_monad.__all__:
            assert hasattr(result_monad, name), name


class TestSubmoduleImports:
    """Verify submodule imports work."""

    def test_submodules(self) -> None:
        from result_monad.cancellation import CancellationSource
        from result_monad.combinators import retry
        from result_monad.errors import DomainError
        from result_monad.result import Ok
        from result_monad.types import RetryOptions
        from result_monad.validation import Validator

        assert result_monad.CancellationSource is CancellationSource
        assert result_monad.retry is retry
        assert result_monad.DomainError is DomainError
        assert result_monad.Ok is Ok
        assert result_monad.RetryOptions is RetryOptions
        assert result_monad.Validator is Validator
