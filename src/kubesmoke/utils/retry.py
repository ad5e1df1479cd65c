"""Retry utilities for kubesmoke.

Every readiness check is built on :func:`poll_until`: probe a resource, test
the observation against a readiness predicate, and wait between attempts until
either the predicate holds or the retry budget is spent.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, Field
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
    wait_fixed,
)
from tenacity.wait import wait_base

from kubesmoke.core.exceptions import TransientAPIError
from kubesmoke.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
I = TypeVar("I")
R = TypeVar("R")

SleepFunc = Callable[[float], Awaitable[None]]


class RetryPolicy(BaseModel):
    """Bounded retry budget applied to each polled resource.

    The defaults allow 12 attempts 10 seconds apart, bounding the wait for
    any single resource to roughly two minutes.
    """

    max_attempts: int = Field(12, ge=1)
    interval_seconds: float = Field(10.0, ge=0)
    backoff: Literal["fixed", "exponential"] = "fixed"
    max_interval_seconds: float = Field(60.0, ge=0)

    def wait_strategy(self) -> wait_base:
        """Build the tenacity wait strategy for this policy."""
        if self.backoff == "exponential":
            return wait_exponential(
                multiplier=self.interval_seconds,
                min=self.interval_seconds,
                max=self.max_interval_seconds,
            )
        return wait_fixed(self.interval_seconds)

    @property
    def max_wait_seconds(self) -> float:
        """Upper bound of time spent waiting on one resource."""
        if self.backoff == "exponential":
            return sum(
                min(self.interval_seconds * 2 ** (n - 1), self.max_interval_seconds)
                for n in range(1, self.max_attempts + 1)
            )
        return self.max_attempts * self.interval_seconds


class ConvergenceState(str, Enum):
    """States of a single readiness poll."""

    PENDING = "pending"
    POLLING = "polling"
    CONVERGED = "converged"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class PollOutcome(Generic[T]):
    """Terminal result of polling one resource.

    Attributes:
        state: CONVERGED or EXHAUSTED
        attempts: Number of probes made
        value: Last successful observation, even when exhausted
        last_error: Error raised by the final probe, if it failed
    """

    state: ConvergenceState
    attempts: int
    value: T | None = None
    last_error: Exception | None = None

    @property
    def converged(self) -> bool:
        """Whether the readiness predicate was satisfied."""
        return self.state is ConvergenceState.CONVERGED


async def poll_until(
    probe: Callable[[], Awaitable[T]],
    predicate: Callable[[T], bool],
    policy: RetryPolicy,
    resource: str,
    status: str = "ready",
    sleep: SleepFunc = asyncio.sleep,
) -> PollOutcome[T]:
    """Poll a resource until it satisfies a readiness predicate.

    A probe raising TransientAPIError counts the same as an observation that
    fails the predicate: the attempt is spent and, budget permitting, retried
    after a wait. Any other exception propagates immediately.

    Args:
        probe: Coroutine function observing the resource
        predicate: Readiness predicate over an observation
        policy: Retry budget and wait strategy
        resource: Resource description for log lines
        status: Desired status for log lines
        sleep: Awaitable sleep used between attempts

    Returns:
        PollOutcome in CONVERGED or EXHAUSTED state
    """
    last_seen: T | None = None

    def before_sleep(retry_state: RetryCallState) -> None:
        """Log the wait before the next attempt."""
        outcome = retry_state.outcome
        error = outcome.exception() if outcome and outcome.failed else None
        logger.info(
            "waiting_for_resource",
            resource=resource,
            status=status,
            state=ConvergenceState.POLLING.value,
            attempt=retry_state.attempt_number,
            remaining=policy.max_attempts - retry_state.attempt_number,
            error=str(error) if error else None,
        )

    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=policy.wait_strategy(),
        retry=(
            retry_if_exception_type(TransientAPIError)
            | retry_if_result(lambda observed: not predicate(observed))
        ),
        before_sleep=before_sleep,
        sleep=sleep,
    )

    logger.debug(
        "poll_started",
        resource=resource,
        state=ConvergenceState.PENDING.value,
        max_attempts=policy.max_attempts,
        max_wait_seconds=policy.max_wait_seconds,
    )

    try:
        async for attempt in retrying:
            with attempt:
                observed = await probe()
            if not attempt.retry_state.outcome.failed:
                last_seen = observed
                attempt.retry_state.set_result(observed)
    except RetryError as e:
        final = e.last_attempt
        logger.warning(
            "poll_exhausted",
            resource=resource,
            status=status,
            attempts=final.attempt_number,
        )
        return PollOutcome(
            state=ConvergenceState.EXHAUSTED,
            attempts=final.attempt_number,
            value=last_seen,
            last_error=final.exception() if final.failed else None,
        )

    logger.debug(
        "poll_converged",
        resource=resource,
        status=status,
        attempts=attempt.retry_state.attempt_number,
    )
    return PollOutcome(
        state=ConvergenceState.CONVERGED,
        attempts=attempt.retry_state.attempt_number,
        value=observed,
    )


async def poll_each(
    items: Sequence[I],
    poll_one: Callable[[I], Awaitable[R]],
    concurrency: int = 1,
) -> list[R]:
    """Poll every item against its own retry budget.

    Items are polled one after another unless concurrency allows several at
    once. One item exhausting its budget never prevents the others from being
    polled.

    Args:
        items: Items to poll
        poll_one: Coroutine function polling a single item
        concurrency: Maximum number of items polled at the same time

    Returns:
        Results in the same order as items
    """
    if concurrency <= 1:
        return [await poll_one(item) for item in items]

    semaphore = asyncio.Semaphore(concurrency)

    async def _bounded(item: I) -> R:
        async with semaphore:
            return await poll_one(item)

    return list(await asyncio.gather(*(_bounded(item) for item in items)))
