from __future__ import annotations

import asyncio
import functools
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, Protocol, TypeVar

from ..errors import ErrorCode, ProviderError

T = TypeVar("T")


class AttemptLogger(Protocol):  # pragma: no cover - structural protocol
    def __call__(
        self,
        *,
        attempt: int,
        max_attempts: int,
        delay: float | None,
        error: ProviderError | None,
    ) -> None: ...


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 3
    delay_base: float = 2.0  # exponential base (base**attempt)
    retryable_codes: tuple[ErrorCode, ...] = (
        ErrorCode.TRANSIENT,
        ErrorCode.RATE_LIMIT,
        ErrorCode.TIMEOUT,
        ErrorCode.UNAVAILABLE,
        ErrorCode.TRANSPORT,
    )
    attempt_logger: AttemptLogger | None = None

    @classmethod
    def from_retries(cls, retries: int, **kwargs) -> "RetryConfig":
        """Build a config allowing ``retries`` retries after the first attempt."""
        return cls(max_attempts=max(retries, 0) + 1, **kwargs)

    def delays(self) -> Iterable[float]:
        for attempt in range(self.max_attempts - 1):
            yield self.delay_base**attempt


DEFAULT_RETRY_CONFIG = RetryConfig()


def retry(config: RetryConfig = DEFAULT_RETRY_CONFIG):
    """Return a decorator applying the retry policy to a coroutine function.

    - Retries only on configured retryable error codes
    - Exponential backoff using delay_base ** attempt
    - Preserves original function signature
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            last_exc: ProviderError | None = None
            for attempt, delay in enumerate(
                list(config.delays()) + [None]
            ):  # final attempt has delay None
                try:
                    result = await func(*args, **kwargs)
                    if config.attempt_logger:
                        config.attempt_logger(
                            attempt=attempt,
                            max_attempts=config.max_attempts,
                            delay=None,
                            error=None,
                        )
                    return result
                except ProviderError as e:
                    last_exc = e
                    if config.attempt_logger:
                        config.attempt_logger(
                            attempt=attempt,
                            max_attempts=config.max_attempts,
                            delay=delay,
                            error=e,
                        )
                    if (e.code in config.retryable_codes) and (delay is not None):
                        await asyncio.sleep(delay)
                        continue
                    raise
            if last_exc is None:  # pragma: no cover - unreachable with max_attempts >= 1
                raise RuntimeError(
                    "retry: reached terminal state without captured exception"
                )
            raise last_exc

        return wrapper

    return decorator


__all__ = [
    "RetryConfig",
    "DEFAULT_RETRY_CONFIG",
    "retry",
]
