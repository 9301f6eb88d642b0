"""Pytest configuration and shared fixtures for result-monad tests."""

from __future__ import annotations

import logging
from collections.abc import Generator

import anyio
import pytest
from result_monad import DomainError, Err, Ok, _config, clear_log_hooks


@pytest.fixture
def sample_ok():
    """Sample Ok value for testing."""
    return Ok(42)


@pytest.fixture
def sample_err():
    """Sample Err value for testing."""
    return Err(DomainError.validation('bad input'))


@pytest.fixture(autouse=True)
def reset_config() -> Generator[None]:
    """Forget init() calls between tests."""
    _config._reset()
    yield
    _config._reset()


@pytest.fixture
def restore_logging() -> Generator[None]:
    """Restore root logger handlers, level and hooks after a test reconfigures logging."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    clear_log_hooks()
    yield
    clear_log_hooks()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Replace anyio.sleep with a recorder that returns immediately."""
    recorded: list[float] = []

    async def fake_sleep(delay: float) -> None:
        recorded.append(delay)

    monkeypatch.setattr(anyio, 'sleep', fake_sleep)
    return recorded
