"""
Retry Executor Unit Tests.

Covers:
- Happy path: success on first or later attempt returns immediately
- Exhaustion: exactly max_attempts attempts, delays only between attempts
- Edge cases: max_attempts=1, fatal errors, per-attempt timeout
- Reentrancy: concurrent invocations do not share retry state
"""

import asyncio

import pytest
from unittest.mock import AsyncMock

from arvr_infra.core.exceptions import RetryExhaustedError
from arvr_infra.core.reporter import Reporter
from arvr_infra.core.retry import RetryExecutor, RetryPolicy


class TestRetrySuccess:

    async def test_first_attempt_success_makes_single_call(self, executor, sleeps):
        operation = AsyncMock(return_value="done")

        result = await executor.run(operation, "Create Thing")

        assert result == "done"
        assert operation.await_count == 1
        assert sleeps == []

    async def test_success_on_later_attempt_stops_retrying(self, executor, sleeps):
        operation = AsyncMock(side_effect=[RuntimeError("503"), "done"])

        result = await executor.run(operation, "Create Thing")

        assert result == "done"
        assert operation.await_count == 2
        assert sleeps == [5.0]

    async def test_success_on_last_attempt(self, executor, sleeps):
        operation = AsyncMock(side_effect=[RuntimeError("1"), RuntimeError("2"), "done"])

        assert await executor.run(operation, "Create Thing") == "done"
        assert operation.await_count == 3
        assert sleeps == [5.0, 5.0]

    async def test_recovery_is_reported(self, executor, reporter):
        operation = AsyncMock(side_effect=[RuntimeError("503"), "done"])

        await executor.run(operation, "Create Thing")

        recovered = reporter.of_kind("attempt_recovered")
        assert len(recovered) == 1
        assert recovered[0].attempt == 2


class TestRetryExhaustion:

    async def test_exactly_max_attempts_and_no_trailing_delay(self, executor, sleeps):
        operation = AsyncMock(side_effect=RuntimeError("always"))

        with pytest.raises(RetryExhaustedError):
            await executor.run(operation, "Create Thing")

        assert operation.await_count == 3
        # Two delays for three attempts: never after the final one
        assert sleeps == [5.0, 5.0]

    async def test_terminal_error_names_operation_and_wraps_last_cause(self, executor):
        errors = [RuntimeError("first"), RuntimeError("second"), RuntimeError("last")]
        operation = AsyncMock(side_effect=errors)

        with pytest.raises(RetryExhaustedError) as exc_info:
            await executor.run(operation, "Create Storage Account")

        error = exc_info.value
        assert error.operation_name == "Create Storage Account"
        assert error.attempts == 3
        assert error.last_error is errors[-1]
        assert error.__cause__ is errors[-1]
        assert "Create Storage Account" in str(error)
        assert "failed after 3 attempts" in str(error)

    async def test_every_failed_attempt_emits_a_warning_event(self, executor, reporter):
        operation = AsyncMock(side_effect=RuntimeError("always"))

        with pytest.raises(RetryExhaustedError):
            await executor.run(operation, "Create Thing")

        failures = reporter.of_kind("attempt_failed")
        assert [e.attempt for e in failures] == [1, 2, 3]
        assert [e.outcome for e in failures] == ["transient", "transient", "exhausted"]
        assert len(reporter.of_kind("retry_scheduled")) == 2


class TestRetryEdgeCases:

    async def test_single_attempt_means_no_retry(self, fake_sleep, sleeps):
        executor = RetryExecutor(RetryPolicy(max_attempts=1, delay_seconds=5.0), sleep=fake_sleep)
        operation = AsyncMock(side_effect=RuntimeError("nope"))

        with pytest.raises(RetryExhaustedError) as exc_info:
            await executor.run(operation, "Create Thing")

        assert operation.await_count == 1
        assert sleeps == []
        assert "failed after 1 attempt:" in str(exc_info.value)

    async def test_fatal_error_is_not_retried(self, fake_sleep, sleeps):
        class Forbidden(Exception):
            pass

        policy = RetryPolicy(max_attempts=3, delay_seconds=5.0, fatal_errors=(Forbidden,))
        reporter = Reporter()
        executor = RetryExecutor(policy, reporter, sleep=fake_sleep)
        operation = AsyncMock(side_effect=Forbidden("bad credentials"))

        with pytest.raises(RetryExhaustedError) as exc_info:
            await executor.run(operation, "Create Thing")

        assert operation.await_count == 1
        assert sleeps == []
        assert exc_info.value.attempts == 1
        assert reporter.of_kind("attempt_failed")[0].outcome == "fatal"

    async def test_hung_attempt_times_out_and_is_retried(self, fake_sleep, sleeps):
        policy = RetryPolicy(max_attempts=2, delay_seconds=1.0, attempt_timeout=0.01)
        executor = RetryExecutor(policy, sleep=fake_sleep)
        calls = []

        async def hangs_once():
            calls.append(1)
            if len(calls) == 1:
                await asyncio.sleep(10)
            return "late but fine"

        assert await executor.run(hangs_once, "Create Thing") == "late but fine"
        assert len(calls) == 2
        assert sleeps == [1.0]

    async def test_operation_factory_is_called_per_attempt(self, executor):
        # Each attempt must await a fresh coroutine
        factory_calls = []

        async def attempt():
            factory_calls.append(1)
            if len(factory_calls) < 3:
                raise ConnectionError("reset")
            return len(factory_calls)

        assert await executor.run(attempt, "Create Thing") == 3

    @pytest.mark.parametrize("kwargs", [
        {"max_attempts": 0},
        {"delay_seconds": -1},
        {"attempt_timeout": 0},
    ])
    def test_invalid_policy_rejected(self, kwargs):
        with pytest.raises(ValueError):
            RetryPolicy(**kwargs)


class TestRetryReentrancy:

    async def test_concurrent_operations_keep_separate_attempt_counts(self, executor):
        flaky = AsyncMock(side_effect=[RuntimeError("once"), "flaky-ok"])
        steady = AsyncMock(return_value="steady-ok")

        results = await asyncio.gather(
            executor.run(flaky, "Flaky"),
            executor.run(steady, "Steady"),
        )

        assert results == ["flaky-ok", "steady-ok"]
        assert flaky.await_count == 2
        assert steady.await_count == 1

    async def test_executor_reusable_after_exhaustion(self, executor):
        with pytest.raises(RetryExhaustedError):
            await executor.run(AsyncMock(side_effect=RuntimeError("x")), "First")

        assert await executor.run(AsyncMock(return_value=1), "Second") == 1
