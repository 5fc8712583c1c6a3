"""
Resilient external call - bounded exponential backoff on rate limits, then a
deterministic fallback.

The primitive never raises for a failed operation: the caller always receives a
ResilientResult tagged "success" or "fallback".
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from app.core.config import settings
from app.core.exceptions import RateLimitedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

SUCCESS = "success"
FALLBACK = "fallback"


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 10.0
    factor: float = 2.0

    def delay_for(self, attempt: int) -> float:
        """Wait before retry number attempt+1 (attempt is zero-based)"""
        return min(self.base_delay * (self.factor ** attempt), self.max_delay)

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(
            max_retries=settings.AI_MAX_RETRIES,
            base_delay=settings.AI_BACKOFF_BASE_SECONDS,
            max_delay=settings.AI_BACKOFF_MAX_SECONDS,
        )


@dataclass
class ResilientResult(Generic[T]):
    status: str
    value: T
    attempts: int
    waited_seconds: float = 0.0
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCESS


async def call_with_fallback(
    operation: Callable[[], Awaitable[T]],
    fallback: Callable[[], T],
    policy: Optional[RetryPolicy] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    label: str = "external call",
) -> ResilientResult[T]:
    """
    Run operation, retrying only on RateLimitedError.

    Args:
        operation: Zero-argument coroutine factory performing the external call
        fallback: Producer invoked once every attempt has failed
        policy: Backoff settings; defaults to the configured AI policy
        sleep: Awaitable sleep, injectable for tests
        label: Name used in log lines

    Returns:
        ResilientResult tagged success or fallback
    """
    policy = policy or RetryPolicy.from_settings()
    waited = 0.0
    attempt = 0
    last_error: Optional[BaseException] = None

    while True:
        try:
            value = await operation()
            return ResilientResult(status=SUCCESS, value=value, attempts=attempt + 1, waited_seconds=waited)
        except RateLimitedError as e:
            last_error = e
            if attempt >= policy.max_retries:
                logger.warning(
                    f"{label}: rate limited, retries exhausted after {attempt + 1} attempts")
                break
            delay = policy.delay_for(attempt)
            logger.info(
                f"{label}: rate limit hit, retrying in {delay:.1f}s (attempt {attempt + 1}/{policy.max_retries})")
            await sleep(delay)
            waited += delay
            attempt += 1
        except Exception as e:
            last_error = e
            logger.warning(f"{label}: failed without retry: {str(e)}")
            break

    logger.warning(f"{label}: using fallback")
    return ResilientResult(
        status=FALLBACK,
        value=fallback(),
        attempts=attempt + 1,
        waited_seconds=waited,
        error=last_error,
    )
