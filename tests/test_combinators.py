"""Tests for free-function combinators and retry."""

import asyncio
import threading

import anyio
import pytest
from result_monad import (
    CancellationSource,
    DomainError,
    Err,
    ErrorKind,
    Ok,
    RetryOptions,
    bridge_callback,
    combine_all,
    failure,
    from_predicate,
    init,
    map_result,
    retry,
    success,
    try_async,
    with_fallback,
)
from result_monad._internal import race


class TestCombineAll:
    """Tests for combine_all."""

    def test_all_ok(self):
        assert combine_all([Ok(1), Ok(2), Ok(3)]) == Ok([1, 2, 3])

    def test_empty(self):
        assert combine_all([]) == Ok([])

    def test_first_failure_wins(self):
        first = failure(DomainError.validation('first'))
        second = failure(DomainError.validation('second'))
        assert combine_all([Ok(1), first, second]) is first

    def test_lazy_iterable_stops_at_failure(self):
        produced = []

        def gen():
            for i in range(5):
                produced.append(i)
                yield Ok(i) if i != 2 else Err('stop')

        assert combine_all(gen()) == Err('stop')
        assert produced == [0, 1, 2]

    def test_preserves_order(self):
        assert combine_all(Ok(c) for c in 'abc') == Ok(['a', 'b', 'c'])


class TestTryAsync:
    """Tests for try_async."""

    async def test_ok(self):
        async def fetch():
            return {'status': 'up'}

        assert await try_async(fetch) == Ok({'status': 'up'})

    async def test_exception(self):
        async def fetch():
            raise TimeoutError('slow')

        result = await try_async(fetch)
        assert isinstance(result.error, TimeoutError)

    async def test_sync_raise(self):
        def fetch():
            raise ValueError('never awaited')

        result = await try_async(fetch)
        assert isinstance(result.error, ValueError)


class TestBridgeCallback:
    """Tests for bridge_callback."""

    async def test_value(self):
        def read(path, callback):
            callback(None, f'contents of {path}')

        assert await bridge_callback(read, 'a.txt') == Ok('contents of a.txt')

    async def test_error(self):
        def read(path, callback):
            callback(FileNotFoundError(path))

        result = await bridge_callback(read, 'a.txt')
        assert isinstance(result.error, FileNotFoundError)

    async def test_domain_error(self):
        err = DomainError.unauthorized()

        def read(callback):
            callback(err)

        assert await bridge_callback(read) == Err(err)

    async def test_non_error_value_becomes_technical(self):
        def read(callback):
            callback('EACCES')

        result = await bridge_callback(read)
        assert result.error.kind is ErrorKind.TECHNICAL
        assert result.error.message == 'Technical Error: EACCES'

    async def test_falsy_error_means_success(self):
        def read(callback):
            callback(0, 'ok with zero')

        def read_blank(callback):
            callback('', 'ok with blank')

        assert await bridge_callback(read) == Ok('ok with zero')
        assert await bridge_callback(read_blank) == Ok('ok with blank')

    async def test_keyword_arguments(self):
        def read(path, callback, *, encoding='utf-8'):
            callback(None, (path, encoding))

        assert await bridge_callback(read, 'a.txt', encoding='latin-1') == Ok(('a.txt', 'latin-1'))

    async def test_sync_raise(self):
        def read(callback):
            raise OSError('cannot start')

        result = await bridge_callback(read)
        assert isinstance(result.error, OSError)

    async def test_only_first_invocation_counts(self):
        def read(callback):
            callback(None, 'first')
            callback(None, 'second')
            callback(ValueError('late'))

        assert await bridge_callback(read) == Ok('first')

    async def test_callback_from_worker_thread(self):
        def read(callback):
            threading.Thread(target=callback, args=(None, 'from thread')).start()

        assert await asyncio.wait_for(bridge_callback(read), timeout=1) == Ok('from thread')

    async def test_callback_later_on_loop(self):
        def read(callback):
            asyncio.get_running_loop().call_soon(callback, None, 7)

        assert await bridge_callback(read) == Ok(7)


class TestSmallCombinators:
    """Tests for from_predicate, map_result and with_fallback."""

    def test_from_predicate_holds(self):
        assert from_predicate(21, lambda age: age >= 18, 'must be an adult') == Ok(21)

    def test_from_predicate_fails(self):
        result = from_predicate(17, lambda age: age >= 18, 'must be an adult')
        assert isinstance(result.error, ValueError)
        assert str(result.error) == 'must be an adult'

    def test_map_result(self):
        assert map_result(Ok(2), lambda x: x + 1) == Ok(3)
        err = failure(DomainError.technical('x'))
        assert map_result(err, lambda x: x + 1) is err

    def test_with_fallback(self):
        assert with_fallback(Ok(1), 0) == Ok(1)
        assert with_fallback(failure(DomainError.technical('x')), 0) == Ok(0)


def flaky(failures: int, calls: list[int]):
    """Build an operation that fails ``failures`` times, then succeeds."""

    async def operation():
        calls.append(len(calls) + 1)
        if len(calls) <= failures:
            return failure(DomainError.technical(f'attempt {len(calls)} failed'))
        return success('done')

    return operation


class TestRetry:
    """Tests for retry with exponential backoff."""

    async def test_succeeds_after_failures(self, sleeps):
        calls: list[int] = []
        result = await retry(flaky(2, calls), RetryOptions(max_attempts=3, delay_ms=10))
        assert result == Ok('done')
        assert calls == [1, 2, 3]
        assert sleeps == pytest.approx([0.01, 0.02])

    async def test_first_try_success_never_sleeps(self, sleeps):
        calls: list[int] = []
        assert await retry(flaky(0, calls), RetryOptions(max_attempts=3, delay_ms=10)) == Ok('done')
        assert calls == [1]
        assert sleeps == []

    async def test_exhausted_returns_last_failure(self, sleeps):
        calls: list[int] = []
        result = await retry(flaky(10, calls), RetryOptions(max_attempts=2, delay_ms=10))
        assert calls == [1, 2, 3]
        assert result.error.message == 'Technical Error: attempt 3 failed'
        assert len(sleeps) == 2

    async def test_backoff_doubles(self, sleeps):
        calls: list[int] = []
        result = await retry(flaky(10, calls), RetryOptions(max_attempts=5, delay_ms=300))
        assert result.is_failure()
        assert len(calls) == 6
        assert sleeps == pytest.approx([0.3, 0.6, 1.2, 2.4, 4.8])

    async def test_zero_attempts_calls_once(self, sleeps):
        calls: list[int] = []
        result = await retry(flaky(10, calls), RetryOptions(max_attempts=0, delay_ms=10))
        assert result.is_failure()
        assert calls == [1]
        assert sleeps == []

    async def test_exception_counts_as_failure(self, sleeps):
        attempts = []

        async def operation():
            attempts.append(1)
            if len(attempts) < 2:
                raise ConnectionResetError('reset')
            return success(len(attempts))

        assert await retry(operation, RetryOptions(max_attempts=1, delay_ms=1)) == Ok(2)

    async def test_exhausted_with_exception_returns_it(self, sleeps):
        async def operation():
            raise ConnectionResetError('reset')

        result = await retry(operation, RetryOptions(max_attempts=1, delay_ms=1))
        assert isinstance(result.error, ConnectionResetError)

    async def test_defaults_from_config(self, sleeps):
        init(max_attempts=1, delay_ms=5)
        calls: list[int] = []
        result = await retry(flaky(10, calls))
        assert calls == [1, 2]
        assert sleeps == pytest.approx([0.005])
        assert result.is_failure()

    async def test_builtin_defaults(self, sleeps, monkeypatch):
        monkeypatch.delenv('RESULT_MONAD_RETRY_MAX_ATTEMPTS', raising=False)
        monkeypatch.delenv('RESULT_MONAD_RETRY_DELAY_MS', raising=False)
        calls: list[int] = []
        await retry(flaky(10, calls))
        assert len(calls) == 4
        assert sleeps == pytest.approx([0.3, 0.6, 1.2])

    async def test_pre_cancelled_token(self, sleeps):
        source = CancellationSource('sync')
        source.cancel()
        calls: list[int] = []
        result = await retry(flaky(0, calls), RetryOptions(max_attempts=3, delay_ms=10), cancel_token=source.token)
        assert result.is_cancelled()
        assert result.error.operation_id == 'sync'
        assert calls == []

    async def test_cancelled_between_attempts(self, sleeps):
        source = CancellationSource()
        calls = []

        async def operation():
            calls.append(1)
            source.cancel('giving up')
            return failure(DomainError.technical('down'))

        result = await retry(operation, RetryOptions(max_attempts=3, delay_ms=10), cancel_token=source.token)
        assert result.is_cancelled()
        assert result.error.message == 'Cancellation: giving up'
        assert calls == [1]

    async def test_token_active_runs_normally(self, sleeps):
        source = CancellationSource()
        calls: list[int] = []
        result = await retry(flaky(1, calls), RetryOptions(max_attempts=3, delay_ms=10), cancel_token=source.token)
        assert result == Ok('done')
        assert sleeps == pytest.approx([0.01])

    async def test_cancel_during_real_backoff(self):
        source = CancellationSource()
        calls: list[int] = []

        async def cancel_soon():
            await asyncio.sleep(0.01)
            source.cancel()

        canceller = asyncio.create_task(cancel_soon())
        result = await asyncio.wait_for(
            retry(flaky(10, calls), RetryOptions(max_attempts=3, delay_ms=60_000), cancel_token=source.token),
            timeout=2,
        )
        await canceller
        assert result.is_cancelled()
        assert calls == [1]
        assert race.abandoned_count() == 0

    async def test_cancel_stops_backoff_timer(self, monkeypatch):
        source = CancellationSource()
        timer_started = asyncio.Event()
        timer_outcome: list[str] = []

        async def recording_sleep(delay):
            timer_started.set()
            try:
                await asyncio.sleep(delay)
            except asyncio.CancelledError:
                timer_outcome.append('cancelled')
                raise
            timer_outcome.append('elapsed')

        monkeypatch.setattr(anyio, 'sleep', recording_sleep)
        task = asyncio.create_task(
            retry(flaky(10, []), RetryOptions(max_attempts=3, delay_ms=60_000), cancel_token=source.token)
        )
        await timer_started.wait()
        source.cancel('shutdown')
        result = await asyncio.wait_for(task, timeout=2)
        for _ in range(3):
            await asyncio.sleep(0)

        assert result.error.message == 'Cancellation: shutdown'
        assert timer_outcome == ['cancelled']
        assert race.abandoned_count() == 0
