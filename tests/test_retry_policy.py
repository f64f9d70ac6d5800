import asyncio

import httpx
import pytest

from application.services import RetryPolicy, is_transient_error
from application.services import retry_policy as retry_module
from core.logging import get_logger
from domain.exceptions import PermanentExternalError, TransientExternalError

log = get_logger(__name__, service="test")


@pytest.fixture
def sleeps(monkeypatch):
    recorded = []

    async def fake_sleep(seconds):
        recorded.append(seconds)

    monkeypatch.setattr(retry_module.asyncio, "sleep", fake_sleep)
    return recorded


def _flaky(failures, exc):
    calls = {"n": 0}

    async def supplier():
        calls["n"] += 1
        if calls["n"] <= failures:
            raise exc
        return "ok"

    return supplier, calls


def test_from_settings_matches_special_queue_policy():
    policy = RetryPolicy.from_settings()
    assert policy.max_attempts == 3
    assert [policy.backoff_ms(1), policy.backoff_ms(2)] == [1000, 2000]


@pytest.mark.parametrize("exc, status, expected", [
    (TransientExternalError("429", status_code=429), 429, True),
    (PermanentExternalError("404", status_code=404), 404, False),
    (httpx.ConnectError("refused"), None, True),
    (asyncio.TimeoutError(), None, True),
    (None, 503, True),
    (None, 400, False),
])
def test_is_transient_error(exc, status, expected):
    assert is_transient_error(exc, status) is expected


@pytest.mark.asyncio
async def test_transient_failures_are_retried_with_backoff(sleeps):
    supplier, calls = _flaky(2, TransientExternalError("HTTP 503", status_code=503))
    policy = RetryPolicy(max_attempts=3, backoff_base_ms=1000, backoff_factor=2.0)

    assert await policy.run(supplier, logger=log) == "ok"
    assert calls["n"] == 3
    assert sleeps == [1.0, 2.0]


@pytest.mark.asyncio
async def test_exhausted_attempts_reraise_last_error(sleeps):
    supplier, calls = _flaky(10, TransientExternalError("HTTP 503", status_code=503))
    policy = RetryPolicy(max_attempts=3, backoff_base_ms=1000, backoff_factor=2.0)

    with pytest.raises(TransientExternalError):
        await policy.run(supplier, logger=log, context={"queue": 1700})
    assert calls["n"] == 3


@pytest.mark.asyncio
async def test_permanent_error_is_not_retried(sleeps):
    supplier, calls = _flaky(1, PermanentExternalError("HTTP 404", status_code=404))
    policy = RetryPolicy(max_attempts=3, backoff_base_ms=1000, backoff_factor=2.0)

    with pytest.raises(PermanentExternalError):
        await policy.run(supplier, logger=log)
    assert calls["n"] == 1
    assert sleeps == []
