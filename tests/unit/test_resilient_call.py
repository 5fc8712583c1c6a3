import pytest

from conftest import RecordingSleep
from app.core.exceptions import ExternalServiceError, RateLimitedError
from app.services.resilient_call import FALLBACK, SUCCESS, RetryPolicy, call_with_fallback


def _script(*outcomes):
    remaining = list(outcomes)
    calls = []

    async def operation():
        calls.append(1)
        outcome = remaining.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    return operation, calls


def test_delays_double_and_are_capped():
    policy = RetryPolicy(max_retries=6, base_delay=1.0, max_delay=10.0)

    assert [policy.delay_for(n) for n in range(5)] == [1.0, 2.0, 4.0, 8.0, 10.0]


async def test_success_on_first_attempt():
    sleep = RecordingSleep()
    operation, calls = _script("ok")

    result = await call_with_fallback(operation, lambda: "fallback", policy=RetryPolicy(), sleep=sleep)

    assert result.status == SUCCESS
    assert result.value == "ok"
    assert result.attempts == 1
    assert sleep.delays == []


async def test_rate_limits_are_retried_with_backoff_then_succeed():
    sleep = RecordingSleep()
    operation, calls = _script(RateLimitedError("429"), RateLimitedError("429"), "ok")

    result = await call_with_fallback(operation, lambda: "fallback", policy=RetryPolicy(), sleep=sleep)

    assert result.succeeded
    assert result.attempts == 3
    assert sleep.delays == [1.0, 2.0]
    assert result.waited_seconds == pytest.approx(3.0)


async def test_persistent_rate_limit_waits_then_falls_back():
    sleep = RecordingSleep()
    operation, calls = _script(*[RateLimitedError("429") for _ in range(4)])

    result = await call_with_fallback(operation, lambda: "fallback", policy=RetryPolicy(), sleep=sleep)

    assert result.status == FALLBACK
    assert result.value == "fallback"
    assert len(calls) == 4
    assert sleep.delays == [1.0, 2.0, 4.0]
    assert result.waited_seconds == pytest.approx(7.0)
    assert isinstance(result.error, RateLimitedError)


async def test_other_errors_fall_back_without_retrying():
    sleep = RecordingSleep()
    operation, calls = _script(ExternalServiceError("boom"), "never reached")

    result = await call_with_fallback(operation, lambda: "fallback", policy=RetryPolicy(), sleep=sleep)

    assert result.status == FALLBACK
    assert len(calls) == 1
    assert sleep.delays == []
    assert str(result.error) == "boom"


async def test_fallback_is_only_built_when_needed():
    built = []
    operation, _ = _script("ok")

    await call_with_fallback(operation, lambda: built.append(1), policy=RetryPolicy(), sleep=RecordingSleep())

    assert built == []
