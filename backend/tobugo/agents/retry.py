"""
Retry/backoff policy for generative model calls.

Transient provider failures (overload, rate limiting) are retried with
exponential backoff; everything else aborts on the first failure. The waits
use asyncio.sleep so one request backing off never stalls the others.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from tobugo.agents.llm import LLMUnavailableError
from tobugo.core.config import RETRY_BASE_SECONDS, RETRY_MAX_ATTEMPTS
from tobugo.core.errors import (
    OVERLOADED,
    RATE_LIMITED,
    GenerationError,
    PermanentProviderError,
    TransientProviderError,
)

T = TypeVar("T")

OVERLOADED_MARKERS: tuple[str, ...] = (
    "503",
    "overloaded",
    "unavailable",
)
RATE_LIMITED_MARKERS: tuple[str, ...] = (
    "429",
    "resource_exhausted",
    "resourceexhausted",
    "resource exhausted",
    "rate limit",
    "ratelimit",
    "too many requests",
)


def classify_error(error: BaseException) -> str | None:
    """
    Return OVERLOADED, RATE_LIMITED, or None for a permanent failure.

    Looks at the exception type name and message, since provider SDKs surface
    status codes in either place.
    """
    if isinstance(error, LLMUnavailableError):
        return None
    text = f"{type(error).__name__}: {error}".lower()
    if any(marker in text for marker in OVERLOADED_MARKERS):
        return OVERLOADED
    if any(marker in text for marker in RATE_LIMITED_MARKERS):
        return RATE_LIMITED
    return None


@dataclass
class RetryPolicy:
    max_attempts: int = RETRY_MAX_ATTEMPTS
    base_delay: float = RETRY_BASE_SECONDS
    classify: Callable[[BaseException], str | None] = classify_error
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)

    def delay_for(self, attempt: int) -> float:
        """Wait after the given (1-based) failed attempt, doubling each time: 2s, then 4s."""
        return self.base_delay * 2 ** (attempt - 1)

    async def run(self, call: Callable[[], Awaitable[T]], operation: str = "generate itinerary") -> T:
        """
        Await ``call()`` until it succeeds or the policy gives up.

        Raises TransientProviderError once retries are exhausted and
        PermanentProviderError immediately for unclassified failures.
        GenerationError raised by the call itself is propagated untouched.
        """
        for attempt in range(1, self.max_attempts + 1):
            api_start = time.time()
            try:
                print(f"[API] Calling model to {operation} (attempt {attempt}/{self.max_attempts})...")
                result = await call()
                api_latency = (time.time() - api_start) * 1000
                print(f"[API] ✅ Model call succeeded")
                print(f"[PERF] API latency: {api_latency:.2f}ms")
                return result
            except GenerationError:
                raise
            except Exception as e:
                api_latency = (time.time() - api_start) * 1000
                kind = self.classify(e)
                print(f"[API] ❌ Model call failed after {api_latency:.2f}ms")
                print(f"[ERROR] Attempt {attempt}/{self.max_attempts}")
                print(f"[ERROR] Error type: {type(e).__name__}")
                print(f"[ERROR] Error message: {str(e)}")

                if kind is None:
                    print(f"[ERROR] Cause: permanent provider failure, not retrying")
                    raise PermanentProviderError(str(e), operation=operation, attempts=attempt) from e

                print(f"[ERROR] Cause: {kind.replace('_', ' ')}")
                if attempt >= self.max_attempts:
                    print(f"[ERROR] All {self.max_attempts} attempts failed")
                    raise TransientProviderError(str(e), kind=kind, attempts=attempt) from e

                retry_delay = self.delay_for(attempt)
                print(f"[RETRY] Waiting {retry_delay}s before retry...")
                await self.sleep(retry_delay)

        # max_attempts < 1
        raise PermanentProviderError("retry policy allows no attempts", operation=operation, attempts=0)


__all__ = [
    "OVERLOADED_MARKERS",
    "RATE_LIMITED_MARKERS",
    "classify_error",
    "RetryPolicy",
]
