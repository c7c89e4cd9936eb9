"""Retry helpers for the calling query layer."""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

import structlog

from backoffice.api.errors import ApiException

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Capped exponential backoff: attempt i waits min(base * 2**i, cap)."""
    retries: int = 2
    base_delay: float = 1.0
    max_delay: float = 30.0

    def delay_for(self, attempt: int) -> float:
        return min(self.base_delay * (2 ** attempt), self.max_delay)

    @classmethod
    def from_settings(cls, settings) -> "RetryPolicy":
        return cls(
            retries=settings.retry.retries,
            base_delay=settings.retry.base_delay_seconds,
            max_delay=settings.retry.max_delay_seconds,
        )


async def call_with_retry(
    func: Callable[..., Awaitable[T]],
    *args,
    policy: RetryPolicy,
    **kwargs,
) -> T:
    """Await ``func`` retrying transport and 5xx failures; 4xx propagate at once."""
    for attempt in range(policy.retries + 1):
        try:
            return await func(*args, **kwargs)
        except ApiException as e:
            if not e.is_retryable or attempt == policy.retries:
                raise
            delay = policy.delay_for(attempt)
            logger.warning(
                "Retrying request",
                call=getattr(func, "__qualname__", repr(func)),
                attempt=attempt + 1,
                status=e.status,
                delay_seconds=delay,
            )
            await asyncio.sleep(delay)
    raise AssertionError("unreachable")


def retry_async(policy: RetryPolicy):
    def decorator(func: Callable[..., Awaitable[T]]):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            return await call_with_retry(func, *args, policy=policy, **kwargs)
        return wrapper
    return decorator
