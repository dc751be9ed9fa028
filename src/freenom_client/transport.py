"""
HTTP transport for the Freenom console.

A thin wrapper over a synchronous httpx client that shares the session's
cookie jar, applies the fixed timeout and TLS policy, and turns every
transport-level failure (connection errors, timeouts, body-read errors,
non-200 statuses) into a retryable TransportError. Each logical HTTP step
runs through the RetryManager; when the budget is spent the last error is
raised with the calling operation's name as prefix.
"""

from dataclasses import dataclass
from http.cookiejar import CookieJar
from typing import Any, Mapping, Optional

import httpx

from .audit_logger import AuditLogger
from .config import TransportConfig
from .enums import LogLevel, TransportErrorCode
from .exceptions import TransportError
from .retry_manager import RetryManager


FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=UTF-8"


@dataclass
class TransportResponse:
    """Raw body and status of a successful HTTP exchange."""

    body: bytes
    status_code: int
    url: str

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class Transport:
    """
    Synchronous HTTP transport with a shared cookie jar and retry budget.

    The cookie jar belongs to the caller (the session store); the httpx
    client reads and writes it in place, so cookies set by the console
    accumulate across every request made through this transport.
    """

    def __init__(
        self,
        cookie_jar: CookieJar,
        config: Optional[TransportConfig] = None,
        retry_manager: Optional[RetryManager] = None,
        logger: Optional[AuditLogger] = None,
        http_transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Initialize the transport.

        Args:
            cookie_jar: Cookie jar shared with the session store
            config: Timeout, TLS and user-agent settings
            retry_manager: Retry budget applied to every HTTP step
            logger: Optional audit logger for retry diagnostics
            http_transport: Optional httpx transport (e.g. httpx.MockTransport)
        """
        self._config = config or TransportConfig()
        self._retry_manager = retry_manager or RetryManager()
        self._logger = logger
        self._client = httpx.Client(
            verify=self._config.verify_tls,
            timeout=httpx.Timeout(self._config.timeout_seconds),
            follow_redirects=True,
            cookies=cookie_jar,
            headers={"User-Agent": self._config.user_agent},
            transport=http_transport,
        )

    def __enter__(self) -> "Transport":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def execute(
        self,
        method: str,
        url: str,
        operation: str,
        params: Optional[Mapping[str, Any]] = None,
        data: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        max_attempts: Optional[int] = None,
    ) -> TransportResponse:
        """
        Perform one logical HTTP step under the retry budget.

        Args:
            method: HTTP method
            url: Target URL (without query string)
            operation: Caller name used to prefix the surfaced error
            params: Optional query parameters
            data: Optional form fields (sent url-encoded)
            headers: Optional extra request headers
            max_attempts: Optional override of the attempt budget

        Returns:
            TransportResponse of the first attempt that returned HTTP 200

        Raises:
            TransportError: If every attempt failed
        """
        request_headers = dict(headers or {})
        if data is not None:
            request_headers.setdefault("Content-Type", FORM_CONTENT_TYPE)

        def attempt() -> TransportResponse:
            return self._send_once(method, url, params, data, request_headers)

        def on_retry(attempt_no: int, error: Exception) -> None:
            if self._logger:
                self._logger.log(
                    LogLevel.WARN,
                    "Transport",
                    f"{operation}: attempt {attempt_no} failed, retrying",
                    {"url": url, "method": method, "error": str(error)},
                )

        result = self._retry_manager.execute_with_retry(
            attempt,
            is_retryable=lambda e: isinstance(e, TransportError),
            max_attempts=max_attempts,
            on_retry=on_retry,
        )
        if result.success:
            assert result.result is not None
            return result.result

        error = result.last_error
        if not isinstance(error, TransportError):
            assert error is not None
            raise error

        raise TransportError(
            code=error.code,
            message=f"{operation} {error.message}",
            details={**error.details, "attempts": result.attempts, "operation": operation},
        )

    def _send_once(
        self,
        method: str,
        url: str,
        params: Optional[Mapping[str, Any]],
        data: Optional[Mapping[str, Any]],
        headers: Mapping[str, str],
    ) -> TransportResponse:
        details = {"url": url, "method": method}
        try:
            response = self._client.request(
                method,
                url,
                params=params,
                data=data,
                headers=headers,
            )
        except httpx.TimeoutException as e:
            raise TransportError(
                code=TransportErrorCode.TIMEOUT.value,
                message=f"timed out after {self._config.timeout_seconds}s: {e}",
                details=details,
            ) from e
        except (httpx.ReadError, httpx.DecodingError) as e:
            raise TransportError(
                code=TransportErrorCode.READ_ERROR.value,
                message=f"read err: {e}",
                details=details,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(
                code=TransportErrorCode.NETWORK_ERROR.value,
                message=f"do err: {e}",
                details=details,
            ) from e

        if response.status_code != 200:
            raise TransportError(
                code=TransportErrorCode.HTTP_STATUS.value,
                message=f"errCode: {response.status_code}",
                details={**details, "status_code": response.status_code},
            )

        return TransportResponse(
            body=response.content,
            status_code=response.status_code,
            url=str(response.url),
        )
