"""
Audit Logger module for the Freenom client.

Every component logs through one AuditLogger. Entries are kept in memory
and written as JSON lines, as text lines, or both. Account passwords,
anti-forgery tokens and session cookies never reach the output: any data
key that looks like one is replaced before the entry is stored.
"""

import json
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, TextIO

from .enums import LogLevel


_SEVERITY = {level: rank for rank, level in enumerate(LogLevel)}

OUTPUT_FORMATS = ("json", "text", "both")


@dataclass
class LogEntry:
    """One structured log line."""

    timestamp: str
    level: LogLevel
    component: str
    message: str
    data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "level": self.level.value,
            "component": self.component,
            "message": self.message,
            "data": self.data,
        }


def _is_sensitive(key: Any, patterns: frozenset) -> bool:
    lowered = str(key).lower()
    return any(pattern in lowered for pattern in patterns)


class AuditLogger:
    """
    Structured logger with a severity threshold and secret masking.

    Masking works on key names, recursively through nested dicts and lists
    (login forms, request details attached to errors, cookie headers).
    """

    SENSITIVE_KEYS = frozenset({
        'password', 'pwd', 'token', 'secret', 'cookie', 'cookies',
        'authorization', 'auth', 'credential', 'credentials', 'session_id',
    })

    MASK_VALUE = "***MASKED***"

    def __init__(
        self,
        output_format: str = "text",
        output_stream: Optional[TextIO] = None,
        min_level: LogLevel = LogLevel.INFO,
    ):
        """
        Args:
            output_format: 'json', 'text' or 'both'
            output_stream: Where lines are written (stderr if omitted)
            min_level: Lowest severity that is recorded
        """
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"Invalid output_format: {output_format} (expected one of {', '.join(OUTPUT_FORMATS)})"
            )
        self._format = output_format
        self._stream = output_stream or sys.stderr
        self._min_level = min_level
        self._entries: list[LogEntry] = []

    @classmethod
    def from_level_name(
        cls,
        level: str,
        output_format: str = "text",
        output_stream: Optional[TextIO] = None,
    ) -> "AuditLogger":
        """Create a logger from a level name such as 'debug' or 'warn'; unknown names mean info."""
        try:
            min_level = LogLevel(level.lower())
        except ValueError:
            min_level = LogLevel.INFO
        return cls(output_format, output_stream, min_level)

    @property
    def output_format(self) -> str:
        return self._format

    @property
    def min_level(self) -> LogLevel:
        return self._min_level

    @property
    def entries(self) -> list[LogEntry]:
        return list(self._entries)

    def clear_entries(self) -> None:
        self._entries = []

    def is_enabled_for(self, level: LogLevel) -> bool:
        return _SEVERITY[level] >= _SEVERITY[self._min_level]

    def log(
        self,
        level: LogLevel,
        component: str,
        message: str,
        data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """
        Record an entry and write it out.

        Returns:
            The stored LogEntry, or None when the level is below the threshold
        """
        if not self.is_enabled_for(level):
            return None

        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=level,
            component=component,
            message=message,
            data=self.mask_sensitive_data(data or {}),
        )
        self._entries.append(entry)
        self._write(entry)
        return entry

    def debug(self, component: str, message: str, data: Optional[dict] = None) -> Optional[LogEntry]:
        return self.log(LogLevel.DEBUG, component, message, data)

    def info(self, component: str, message: str, data: Optional[dict] = None) -> Optional[LogEntry]:
        return self.log(LogLevel.INFO, component, message, data)

    def warn(self, component: str, message: str, data: Optional[dict] = None) -> Optional[LogEntry]:
        return self.log(LogLevel.WARN, component, message, data)

    def log_error(
        self,
        component: str,
        message: str,
        error: Optional[Exception] = None,
        request_url: Optional[str] = None,
        response_status_code: Optional[int] = None,
        additional_data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """
        Record an ERROR entry describing a failed step.

        For client errors (anything with `code` and `details`), the error
        code is added, and the request URL and HTTP status are taken from
        the details when not passed explicitly.

        Args:
            component: Component name generating the log
            message: What failed
            error: The exception that was raised
            request_url: URL of the failed request
            response_status_code: HTTP status of the failed response
            additional_data: Extra context (domain, operation, ...)
        """
        data = dict(additional_data or {})

        if error is not None:
            data["error_message"] = str(error)
            data["error_type"] = type(error).__name__
            code = getattr(error, "code", None)
            if code:
                data["error_code"] = code
            details = getattr(error, "details", None) or {}
            request_url = request_url or details.get("url")
            if response_status_code is None:
                response_status_code = details.get("status_code")

        if request_url is not None:
            data["request_url"] = request_url
        if response_status_code is not None:
            data["response_status_code"] = response_status_code

        return self.log(LogLevel.ERROR, component, message, data)

    def mask_sensitive_data(self, data: Any) -> Any:
        """
        Return a copy of `data` with sensitive values replaced by MASK_VALUE.

        The input is never modified. Non-dict values are returned as-is,
        lists and tuples are walked item by item.
        """
        if isinstance(data, dict):
            return {
                key: self.MASK_VALUE if _is_sensitive(key, self.SENSITIVE_KEYS)
                else self.mask_sensitive_data(value)
                for key, value in data.items()
            }
        if isinstance(data, (list, tuple)):
            return [self.mask_sensitive_data(item) for item in data]
        return data

    def format_json(self, entry: LogEntry) -> str:
        return json.dumps(entry.to_dict(), ensure_ascii=False, default=str)

    def format_text(self, entry: LogEntry) -> str:
        """`TIMESTAMP LEVEL [component] message {data}` on one line."""
        line = f"{entry.timestamp} {entry.level.value.upper()} [{entry.component}] {entry.message}"
        if entry.data:
            line += " " + json.dumps(entry.data, ensure_ascii=False, default=str)
        return line

    def _write(self, entry: LogEntry) -> None:
        lines = []
        if self._format != "text":
            lines.append(self.format_json(entry))
        if self._format != "json":
            lines.append(self.format_text(entry))
        for line in lines:
            self._stream.write(line + "\n")
        self._stream.flush()
