"""
Unit tests for the bounded retry helper.
"""

import pytest

from moose_automation.workflows.retry import BoundedRetry, run_bounded


class TestBoundedRetry:
    """Fixed-count attempt loop."""

    @pytest.mark.asyncio
    async def test_runs_every_attempt(self):
        timeouts = []

        async def action(timeout):
            timeouts.append(timeout)

        attempts = await run_bounded(action, max_attempts=3, per_attempt_timeout=2000)

        assert timeouts == [2000, 2000, 2000]
        assert [a.attempt for a in attempts] == [1, 2, 3]
        assert all(a.success for a in attempts)
        assert all(a.error is None for a in attempts)

    @pytest.mark.asyncio
    async def test_failures_recorded_and_loop_continues(self):
        calls = []

        async def flaky(timeout):
            calls.append(timeout)
            if len(calls) == 2:
                raise RuntimeError("modal detached")

        retry = BoundedRetry(max_attempts=3, per_attempt_timeout=100, name="Modal handling")
        attempts = await retry.run(flaky)

        assert len(calls) == 3
        assert [a.success for a in attempts] == [True, False, True]
        assert attempts[1].error == "modal detached"
        assert retry.succeeded == 2

    @pytest.mark.asyncio
    async def test_on_failure_receives_attempt_and_error(self):
        seen = []

        async def always_fails(timeout):
            raise ValueError("not clickable")

        await run_bounded(
            always_fails,
            max_attempts=2,
            per_attempt_timeout=50,
            on_failure=lambda number, error: seen.append((number, str(error))),
        )

        assert seen == [(1, "not clickable"), (2, "not clickable")]

    @pytest.mark.asyncio
    async def test_error_without_message_uses_type_name(self):
        async def fails(timeout):
            raise RuntimeError()

        attempts = await run_bounded(fails, max_attempts=1, per_attempt_timeout=10)

        assert attempts[0].error == "RuntimeError"

    @pytest.mark.asyncio
    async def test_zero_attempts_does_nothing(self):
        async def action(timeout):
            raise AssertionError("should not run")

        attempts = await run_bounded(action, max_attempts=0, per_attempt_timeout=10)

        assert attempts == []
