"""
Retry Manager for the Freenom client.

The console is flaky rather than overloaded, so a failed HTTP step is
repeated straight away with identical parameters, up to a fixed number of
attempts. The caller gets the outcome and the last error and decides how
to surface it.
"""

import time
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from .config import RetryConfig

T = TypeVar("T")


@dataclass
class RetryResult(Generic[T]):
    """Outcome of running an operation under the attempt budget."""

    success: bool
    result: Optional[T]
    attempts: int
    last_error: Optional[Exception]


class RetryManager:
    """Runs an operation until it succeeds or the attempt budget is spent."""

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Args:
            config: Attempt budget and the pause between attempts (none by default)
            sleep: Sleep function (replaceable in tests)
        """
        self._config = config or RetryConfig()
        self._sleep = sleep

    @property
    def max_attempts(self) -> int:
        return self._config.max_attempts

    def execute_with_retry(
        self,
        operation: Callable[[], T],
        is_retryable: Optional[Callable[[Exception], bool]] = None,
        max_attempts: Optional[int] = None,
        on_retry: Optional[Callable[[int, Exception], None]] = None,
    ) -> RetryResult[T]:
        """
        Call `operation` until it returns or the budget runs out.

        Args:
            operation: Zero-argument callable performing one attempt
            is_retryable: Decides whether an error is worth another attempt;
                every error is retried when omitted
            max_attempts: Budget for this call only (at least 1)
            on_retry: Called with (attempt number, error) before each retry

        Returns:
            RetryResult; on failure `last_error` holds the final exception
        """
        budget = max(1, self._config.max_attempts if max_attempts is None else max_attempts)
        error: Optional[Exception] = None

        for attempt in range(1, budget + 1):
            try:
                value = operation()
            except Exception as e:
                error = e
                retryable = is_retryable is None or is_retryable(e)
                if not retryable or attempt == budget:
                    return RetryResult(False, None, attempt, error)
                if on_retry is not None:
                    on_retry(attempt, e)
                if self._config.delay_seconds > 0:
                    self._sleep(self._config.delay_seconds)
                continue
            return RetryResult(True, value, attempt, None)

        # Unreachable: the last attempt always returns above.
        return RetryResult(False, None, budget, error)
