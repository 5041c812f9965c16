"""Bounded retries with capped exponential backoff.

``BackoffPolicy`` says how many attempts to make and how long to wait after
each failed one. ``retry_with_policy`` runs an async operation under a
policy. Attempts are strictly sequential: each one completes before the
next is considered.
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

MAX_ATTEMPTS = 3
INITIAL_DELAY = 1.0  # seconds
MAX_DELAY = 5.0  # seconds


@dataclass(frozen=True)
class BackoffPolicy:
    max_attempts: int = MAX_ATTEMPTS
    initial_delay: float = INITIAL_DELAY
    max_delay: float = MAX_DELAY

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.initial_delay < 0 or self.max_delay < 0:
            raise ValueError("Delays cannot be negative")

    def next_delay(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number `attempt` (1-based)."""
        if attempt < 1:
            raise ValueError("Attempts are numbered from 1")
        return min(self.initial_delay * 2 ** (attempt - 1), self.max_delay)

    def delays(self) -> list[float]:
        """Every wait a fully failing run goes through."""
        return [self.next_delay(attempt) for attempt in range(1, self.max_attempts)]


@dataclass(frozen=True)
class RetryOutcome:
    attempts: int
    value: Any = None
    error: Exception | None = None
    abandoned: bool = False

    @property
    def succeeded(self) -> bool:
        return self.error is None


async def _should_go_on(should_continue) -> bool:
    result = should_continue()
    if inspect.isawaitable(result):
        result = await result
    return bool(result)


async def retry_with_policy(
    operation: Callable[[int], Awaitable[Any]],
    policy: BackoffPolicy,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    should_continue: Callable[[], Any] | None = None,
    on_failure: Callable[[int, Exception], None] | None = None,
) -> RetryOutcome:
    """Run ``operation(attempt)`` until it returns or the policy is exhausted.

    Any exception from the operation counts as a failed attempt. Between
    attempts the combinator awaits ``sleep(policy.next_delay(attempt))``.
    ``should_continue`` (sync or async) is consulted before every retry; when
    it returns False no further attempt is started and the outcome is marked
    abandoned.

    Never raises on behalf of the operation: the last error is returned in
    the outcome.
    """
    error: Exception | None = None
    for attempt in range(1, policy.max_attempts + 1):
        try:
            value = await operation(attempt)
        except Exception as exc:
            error = exc
            if on_failure is not None:
                on_failure(attempt, exc)
        else:
            return RetryOutcome(attempts=attempt, value=value)

        if attempt == policy.max_attempts:
            break
        if should_continue is not None and not await _should_go_on(should_continue):
            return RetryOutcome(attempts=attempt, error=error, abandoned=True)
        await sleep(policy.next_delay(attempt))

    return RetryOutcome(attempts=policy.max_attempts, error=error)
