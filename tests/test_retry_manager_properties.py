"""
Property-based tests for the Retry Manager module.

Uses Hypothesis to verify the attempt budget, immediate retries and
error pass-through.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from freenom_client.config import RetryConfig
from freenom_client.retry_manager import RetryManager, RetryResult


class FlakyOperation:
    """Operation that fails a fixed number of times before succeeding."""

    def __init__(self, failures: int, error: Exception = None) -> None:
        self.failures = failures
        self.error = error or RuntimeError("transient")
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class TestAttemptBudgetProperty:
    """The operation runs at most max_attempts times."""

    @given(
        max_attempts=st.integers(min_value=1, max_value=8),
        failures=st.integers(min_value=0, max_value=10),
    )
    @settings(max_examples=100)
    def test_attempts_never_exceed_budget(self, max_attempts: int, failures: int) -> None:
        """
        *For any* budget and number of leading failures, the operation is
        called min(failures + 1, budget) times and succeeds exactly when
        failures < budget.
        """
        sleep = RecordingSleep()
        manager = RetryManager(RetryConfig(max_attempts=max_attempts), sleep=sleep)
        operation = FlakyOperation(failures)

        result = manager.execute_with_retry(operation)

        assert operation.calls == min(failures + 1, max_attempts)
        assert result.attempts == operation.calls
        assert result.success is (failures < max_attempts)
        if result.success:
            assert result.result == "ok"
            assert result.last_error is None
        else:
            assert result.result is None
            assert result.last_error is operation.error

    def test_default_budget_is_five_attempts(self) -> None:
        manager = RetryManager()
        operation = FlakyOperation(failures=100)

        result = manager.execute_with_retry(operation)

        assert manager.max_attempts == 5
        assert operation.calls == 5
        assert result.attempts == 5
        assert not result.success

    def test_per_call_override(self) -> None:
        manager = RetryManager(RetryConfig(max_attempts=5))
        operation = FlakyOperation(failures=3)

        result = manager.execute_with_retry(operation, max_attempts=1)

        assert operation.calls == 1
        assert not result.success


class TestImmediateRetryProperty:

    @given(failures=st.integers(min_value=1, max_value=4))
    @settings(max_examples=25)
    def test_no_sleep_without_configured_delay(self, failures: int) -> None:
        sleep = RecordingSleep()
        manager = RetryManager(RetryConfig(max_attempts=5, delay_seconds=0.0), sleep=sleep)

        manager.execute_with_retry(FlakyOperation(failures))

        assert sleep.delays == []

    def test_fixed_delay_between_attempts(self) -> None:
        sleep = RecordingSleep()
        manager = RetryManager(RetryConfig(max_attempts=4, delay_seconds=0.5), sleep=sleep)

        manager.execute_with_retry(FlakyOperation(failures=10))

        # No pause after the final attempt
        assert sleep.delays == [0.5, 0.5, 0.5]


class TestRetryClassification:

    def test_non_retryable_error_stops_immediately(self) -> None:
        manager = RetryManager(RetryConfig(max_attempts=5))
        operation = FlakyOperation(failures=3, error=ValueError("static markup"))

        result = manager.execute_with_retry(
            operation,
            is_retryable=lambda e: not isinstance(e, ValueError),
        )

        assert operation.calls == 1
        assert isinstance(result.last_error, ValueError)

    def test_on_retry_hook_sees_each_failed_attempt(self) -> None:
        seen: list[int] = []
        manager = RetryManager(RetryConfig(max_attempts=5))

        result = manager.execute_with_retry(
            FlakyOperation(failures=2),
            on_retry=lambda attempt, error: seen.append(attempt),
        )

        assert result.success
        assert seen == [1, 2]

    def test_result_type(self) -> None:
        result = RetryManager().execute_with_retry(lambda: 42)

        assert isinstance(result, RetryResult)
        assert result.result == 42
        assert result.attempts == 1
