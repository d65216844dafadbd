"""
Bounded Retry Helper

Runs an action a fixed number of times, each attempt bounded by its own
timeout. A failed attempt is logged and recorded, and the loop moves on:
nothing is raised to the caller. Used where the portal renders interstitial
prompts inconsistently.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from ..models import AttemptRecord

logger = logging.getLogger(__name__)


# Receives the per-attempt timeout in ms
AttemptAction = Callable[[int], Awaitable[object]]
FailureHandler = Callable[[int, BaseException], None]


@dataclass
class BoundedRetry:
    """
    Fixed-count attempt loop.

    Attributes:
        max_attempts: Number of attempts, always all executed
        per_attempt_timeout: Timeout handed to each attempt, in ms
        name: Label used in log messages
        attempts: History of all attempts
    """

    max_attempts: int
    per_attempt_timeout: int
    name: str = "attempt"
    attempts: list[AttemptRecord] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        """Number of attempts that completed without error."""
        return sum(1 for attempt in self.attempts if attempt.success)

    async def run(
        self,
        action: AttemptAction,
        on_failure: Optional[FailureHandler] = None,
    ) -> list[AttemptRecord]:
        """
        Execute the action max_attempts times.

        Args:
            action: Coroutine function called with the per-attempt timeout
            on_failure: Called with (attempt number, error) instead of the
                default debug log

        Returns:
            AttemptRecord for every attempt
        """
        on_failure = on_failure or self._log_failure

        for number in range(1, self.max_attempts + 1):
            started = time.monotonic()
            try:
                # Hard cap in case the action ignores its timeout
                await asyncio.wait_for(
                    action(self.per_attempt_timeout),
                    timeout=self.per_attempt_timeout / 1000 * 2 + 5,
                )
            except Exception as e:
                self._record(number, started, error=str(e) or type(e).__name__)
                on_failure(number, e)
            else:
                self._record(number, started)

        return self.attempts

    def _record(self, number: int, started: float, error: Optional[str] = None) -> None:
        self.attempts.append(
            AttemptRecord(
                attempt=number,
                success=error is None,
                duration_ms=int((time.monotonic() - started) * 1000),
                error=error,
            )
        )

    def _log_failure(self, number: int, error: BaseException) -> None:
        logger.debug(f"{self.name} attempt {number} failed: {error}")


async def run_bounded(
    action: AttemptAction,
    *,
    max_attempts: int,
    per_attempt_timeout: int,
    name: str = "attempt",
    on_failure: Optional[FailureHandler] = None,
) -> list[AttemptRecord]:
    """
    Convenience wrapper around BoundedRetry.

    Args:
        action: Coroutine function called with the per-attempt timeout (ms)
        max_attempts: Number of attempts
        per_attempt_timeout: Timeout passed to each attempt (ms)
        name: Label for log messages
        on_failure: Optional failure callback (default: debug log and continue)

    Returns:
        AttemptRecord for every attempt
    """
    retry = BoundedRetry(
        max_attempts=max_attempts,
        per_attempt_timeout=per_attempt_timeout,
        name=name,
    )
    return await retry.run(action, on_failure=on_failure)
