"""Bounded polling with a fixed interval."""

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, TypeVar

from src.core.logging import get_logger

logger = get_logger("retry")

T = TypeVar("T")


@dataclass(frozen=True)
class PollOutcome(Generic[T]):
    """Last observed value and how long it took to get there."""

    value: T
    attempts: int
    elapsed: float
    done: bool


@dataclass(frozen=True)
class RetryPolicy:
    """Poll up to ``max_attempts`` times, ``interval`` seconds apart.

    Cancelling the awaiting task stops polling at the next sleep or fetch.
    """

    max_attempts: int = 30
    interval: float = 2.0

    @property
    def ceiling(self) -> float:
        return self.max_attempts * self.interval

    async def poll(
        self,
        fetch: Callable[[T], Awaitable[T]],
        initial: T,
        is_done: Callable[[T], bool],
        label: str = "operation",
    ) -> PollOutcome[T]:
        started = time.monotonic()
        value = initial
        attempts = 0
        done = is_done(value)

        while not done and attempts < self.max_attempts:
            await asyncio.sleep(self.interval)
            value = await fetch(value)
            attempts += 1
            done = is_done(value)
            logger.debug(f"Polling {label}... (attempt {attempts}/{self.max_attempts})")

        return PollOutcome(
            value=value,
            attempts=attempts,
            elapsed=time.monotonic() - started,
            done=done,
        )
