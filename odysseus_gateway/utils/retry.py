"""Exponential backoff for transient failures"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

T = TypeVar("T")


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """
    Delay before the retry that follows a failed attempt.

    base * 2^(attempt-1), capped at max_delay: 1s, 2s, 4s, 8s, 10s, ...
    """
    if attempt < 1:
        raise ValueError("attempt must be >= 1")
    if base_delay < 0 or max_delay < 0:
        raise ValueError("base_delay and max_delay must be >= 0")
    return min(max_delay, base_delay * (2 ** (attempt - 1)))


async def retry_async(
    func: Callable[[], Awaitable[T]],
    *,
    is_retryable: Callable[[Exception], bool],
    max_attempts: int,
    base_delay: float,
    max_delay: float,
    on_retry: Optional[Callable[..., None]] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Await func until it succeeds, retrying only errors is_retryable accepts.

    Any other error propagates immediately. After the last attempt the
    final error propagates. The wait between attempts is an await on
    sleep, so cancelling the caller's task stops further attempts.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    attempt = 1
    while True:
        try:
            return await func()
        except Exception as exc:
            if not is_retryable(exc) or attempt >= max_attempts:
                raise

            delay = backoff_delay(attempt, base_delay, max_delay)
            if on_retry is not None:
                on_retry(attempt=attempt, delay_seconds=delay, exception=exc)
            await sleep(delay)
            attempt += 1
