import asyncio
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from tobugo.agents.retry import RetryPolicy, classify_error
from tobugo.core.errors import (
    OVERLOADED,
    OVERLOADED_MESSAGE,
    RATE_LIMITED,
    RATE_LIMITED_MESSAGE,
    MalformedOutputError,
    PermanentProviderError,
    TransientProviderError,
)


class ResourceExhausted(Exception):
    pass


class Flaky:
    """Raises the queued errors in order, then returns "ok"."""

    def __init__(self, *errors):
        self.errors = list(errors)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return "ok"


@pytest.mark.parametrize(
    "error,expected",
    [
        (Exception("503 Service Unavailable"), OVERLOADED),
        (Exception("The model is overloaded. Please try again later."), OVERLOADED),
        (Exception("429 Too Many Requests"), RATE_LIMITED),
        (ResourceExhausted("quota"), RATE_LIMITED),
        (Exception("RESOURCE_EXHAUSTED: quota exceeded"), RATE_LIMITED),
        (Exception("Rate limit reached for requests"), RATE_LIMITED),
        (Exception("401 API key not valid"), None),
        (ValueError("bad request"), None),
    ],
)
def test_classify_error(error, expected):
    assert classify_error(error) == expected


def test_delays_double():
    policy = RetryPolicy(max_attempts=3, base_delay=2.0)
    assert [policy.delay_for(n) for n in (1, 2)] == [2.0, 4.0]


@pytest.mark.parametrize(
    "base_delay,expected",
    [(1.0, [1.0, 2.0, 4.0]), (0.5, [0.5, 1.0, 2.0]), (3.0, [3.0, 6.0, 12.0])],
)
def test_delays_scale_with_base_delay(base_delay, expected):
    policy = RetryPolicy(base_delay=base_delay)
    assert [policy.delay_for(n) for n in (1, 2, 3)] == expected


def test_recovers_after_transient_failures(sleeps):
    call = Flaky(Exception("503 overloaded"), Exception("429 rate limit"))
    policy = RetryPolicy(max_attempts=3, base_delay=2.0, sleep=sleeps)

    result = asyncio.run(policy.run(call))

    assert result == "ok"
    assert call.calls == 3
    assert sleeps.delays == [2.0, 4.0]


def test_persistent_overload_gives_up_after_three_attempts(sleeps):
    call = Flaky(*[Exception("503 Service Unavailable")] * 5)
    policy = RetryPolicy(max_attempts=3, base_delay=2.0, sleep=sleeps)

    with pytest.raises(TransientProviderError) as exc_info:
        asyncio.run(policy.run(call))

    error = exc_info.value
    assert call.calls == 3
    assert sleeps.delays == [2.0, 4.0]
    assert error.kind == OVERLOADED
    assert error.attempts == 3
    assert error.status_code == 503
    assert error.user_message == OVERLOADED_MESSAGE


def test_persistent_rate_limit_maps_to_429(sleeps):
    call = Flaky(*[ResourceExhausted("429 quota")] * 3)
    policy = RetryPolicy(max_attempts=3, base_delay=2.0, sleep=sleeps)

    with pytest.raises(TransientProviderError) as exc_info:
        asyncio.run(policy.run(call))

    assert exc_info.value.kind == RATE_LIMITED
    assert exc_info.value.status_code == 429
    assert exc_info.value.user_message == RATE_LIMITED_MESSAGE


def test_permanent_failure_aborts_immediately(sleeps):
    call = Flaky(Exception("401 API key not valid"), Exception("503"))
    policy = RetryPolicy(max_attempts=3, base_delay=2.0, sleep=sleeps)

    with pytest.raises(PermanentProviderError) as exc_info:
        asyncio.run(policy.run(call, operation="optimize itinerary"))

    assert call.calls == 1
    assert sleeps.delays == []
    assert exc_info.value.status_code == 502
    assert exc_info.value.user_message == "Failed to optimize itinerary: 401 API key not valid"


def test_generation_errors_pass_through(sleeps):
    call = Flaky(MalformedOutputError("not json"))
    policy = RetryPolicy(sleep=sleeps)

    with pytest.raises(MalformedOutputError):
        asyncio.run(policy.run(call))

    assert call.calls == 1
    assert sleeps.delays == []


def test_custom_classifier(sleeps):
    call = Flaky(KeyError("anything"))
    policy = RetryPolicy(max_attempts=2, base_delay=3.0, classify=lambda e: OVERLOADED, sleep=sleeps)

    assert asyncio.run(policy.run(call)) == "ok"
    assert sleeps.delays == [3.0]
