"""
Prolink AI - Provider Retry Policies
======================================

What:  Pluggable policy deciding how many times a provider call is attempted.
How:   ProviderGateway hands every provider coroutine to `policy.call()`.
       SingleAttempt runs it once. TenacityRetryPolicy wraps it in tenacity's
       AsyncRetrying with exponential backoff + jitter, retrying only on
       ProviderError.
Who:   Built by build_ai_service() from RETRY_* settings.

Default is SingleAttempt (RETRY_MAX_ATTEMPTS=1).
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from prolink_ai.exceptions import ProviderError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy(ABC):
    """Runs one provider coroutine function under some attempt strategy."""

    @abstractmethod
    async def call(self, fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        ...


class SingleAttempt(RetryPolicy):
    """One attempt; whatever the provider raises propagates unchanged."""

    async def call(self, fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        return await fn(*args, **kwargs)


class TenacityRetryPolicy(RetryPolicy):
    """
    Retries ProviderError with exponential backoff and jitter.

    wait = min(max_wait, min_wait * 2^attempt) + random(0, jitter)
    The last ProviderError is re-raised once attempts are exhausted.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        min_wait: float = 1,
        max_wait: float = 10,
        jitter: float = 1,
    ):
        self.max_attempts = max_attempts
        self.min_wait = min_wait
        self.max_wait = max_wait
        self.jitter = jitter

    async def call(self, fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(ProviderError),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential_jitter(
                initial=self.min_wait,
                max=self.max_wait,
                jitter=self.jitter,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return await retrying(fn, *args, **kwargs)


def build_retry_policy(max_attempts: int, min_wait: float = 1, max_wait: float = 10) -> RetryPolicy:
    if max_attempts <= 1:
        return SingleAttempt()
    return TenacityRetryPolicy(max_attempts=max_attempts, min_wait=min_wait, max_wait=max_wait)
