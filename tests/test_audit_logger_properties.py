"""
Property-based tests for Audit Logger module.

Uses Hypothesis to verify output formats, level filtering, masking of
credentials and session material, and error context.
"""

import json
from datetime import datetime
from io import StringIO

import pytest
from hypothesis import assume, given, settings
from hypothesis import strategies as st

from freenom_client.audit_logger import AuditLogger, LogEntry
from freenom_client.enums import LogLevel
from freenom_client.exceptions import TransportError


# Strategies for generating valid test data

@st.composite
def component_name_strategy(draw) -> str:
    """Generate valid component names."""
    return draw(st.text(
        alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_-"),
        min_size=1,
        max_size=30,
    ))


@st.composite
def message_strategy(draw) -> str:
    """Generate valid log messages."""
    return draw(st.text(
        alphabet=st.characters(
            whitelist_categories=('L', 'N', 'P', 'S', 'Z'),
            blacklist_characters='\x00\n\r',
        ),
        min_size=1,
        max_size=120,
    ))


@st.composite
def non_sensitive_key_strategy(draw) -> str:
    """Generate keys that are NOT sensitive."""
    key = draw(st.text(
        alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyz_"),
        min_size=1,
        max_size=20,
    ))
    for pattern in AuditLogger.SENSITIVE_KEYS:
        assume(pattern not in key.lower())
    return key


sensitive_key_strategy = st.sampled_from([
    'password', 'Password', 'pwd', 'token', 'csrf_token', 'cookie',
    'Cookies', 'session_id', 'authorization', 'credentials',
])


class TestOutputFormatProperty:

    @given(
        component=component_name_strategy(),
        message=message_strategy(),
    )
    @settings(max_examples=50)
    def test_both_format_writes_json_and_text(self, component: str, message: str) -> None:
        """
        *For any* entry logged with format 'both', the stream gets one JSON
        line followed by one text line describing the same entry.
        """
        stream = StringIO()
        logger = AuditLogger(output_format="both", output_stream=stream)

        logger.info(component, message, {"domain": "example.tk"})

        lines = stream.getvalue().splitlines()
        assert len(lines) == 2
        parsed = json.loads(lines[0])
        assert parsed["component"] == component
        assert parsed["message"] == message
        assert parsed["level"] == "info"
        assert parsed["data"] == {"domain": "example.tk"}
        assert f"INFO [{component}] {message}" in lines[1]

    def test_json_only_format(self) -> None:
        stream = StringIO()
        logger = AuditLogger(output_format="json", output_stream=stream)

        logger.warn("Transport", "ListDomains: attempt 1 failed, retrying")

        lines = stream.getvalue().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["level"] == "warn"

    def test_text_only_format(self) -> None:
        stream = StringIO()
        logger = AuditLogger(output_format="text", output_stream=stream)

        logger.info("SessionEngine", "Listed domains", {"count": 2})

        line = stream.getvalue().strip()
        timestamp = line.split(" ", 1)[0]
        assert datetime.fromisoformat(timestamp).tzinfo is not None
        assert line.endswith('{"count": 2}')
        assert "INFO [SessionEngine] Listed domains" in line

    def test_invalid_format_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            AuditLogger(output_format="xml")


class TestLevelFilterProperty:

    @given(
        min_level=st.sampled_from(list(LogLevel)),
        level=st.sampled_from(list(LogLevel)),
    )
    @settings(max_examples=50)
    def test_entries_below_minimum_are_dropped(self, min_level: LogLevel, level: LogLevel) -> None:
        order = list(LogLevel)
        stream = StringIO()
        logger = AuditLogger(output_stream=stream, min_level=min_level)

        entry = logger.log(level, "SessionEngine", "message")

        if order.index(level) >= order.index(min_level):
            assert isinstance(entry, LogEntry)
            assert logger.entries == [entry]
            assert stream.getvalue()
        else:
            assert entry is None
            assert logger.entries == []
            assert stream.getvalue() == ""

    def test_from_level_name(self) -> None:
        assert AuditLogger.from_level_name("DEBUG").min_level == LogLevel.DEBUG
        assert AuditLogger.from_level_name("warn").min_level == LogLevel.WARN
        assert AuditLogger.from_level_name("verbose").min_level == LogLevel.INFO


class TestSensitiveDataMaskingProperty:

    @given(key=sensitive_key_strategy, value=st.text(min_size=1, max_size=40))
    @settings(max_examples=50)
    def test_sensitive_data_masked(self, key: str, value: str) -> None:
        """
        *For any* sensitive key, the logged value is replaced by the mask and
        never reaches the output stream.
        """
        assume(value not in AuditLogger.MASK_VALUE)
        assume(value.strip())
        stream = StringIO()
        logger = AuditLogger(output_format="json", output_stream=stream)

        entry = logger.info("SessionEngine", "Logging in", {key: value, "username": "owner"})

        assert entry.data[key] == AuditLogger.MASK_VALUE
        assert entry.data["username"] == "owner"
        assert json.loads(stream.getvalue())["data"][key] == AuditLogger.MASK_VALUE

    @given(key=non_sensitive_key_strategy(), value=st.integers())
    @settings(max_examples=50)
    def test_non_sensitive_data_not_masked(self, key: str, value: int) -> None:
        logger = AuditLogger(output_stream=StringIO())

        entry = logger.info("SessionEngine", "message", {key: value})

        assert entry.data[key] == value

    def test_nested_sensitive_data_masked(self) -> None:
        logger = AuditLogger(output_stream=StringIO())
        data = {
            "request": {"url": "https://my.freenom.com/dologin.php", "form": {"password": "hunter2"}},
            "records": [{"name": "www", "token": "abc"}],
        }

        entry = logger.info("SessionEngine", "Submitting", data)

        assert entry.data["request"]["url"] == "https://my.freenom.com/dologin.php"
        assert entry.data["request"]["form"]["password"] == AuditLogger.MASK_VALUE
        assert entry.data["records"][0] == {"name": "www", "token": AuditLogger.MASK_VALUE}
        # The caller's dict is left untouched
        assert data["request"]["form"]["password"] == "hunter2"


class TestErrorContextProperty:

    @given(
        status_code=st.integers(min_value=400, max_value=599),
        message=message_strategy(),
    )
    @settings(max_examples=50)
    def test_error_logs_include_error_context(self, status_code: int, message: str) -> None:
        logger = AuditLogger(output_stream=StringIO())
        error = TransportError(code="http_status", message=f"ListDomains errCode: {status_code}")

        entry = logger.log_error(
            "SessionEngine",
            message,
            error=error,
            request_url="https://my.freenom.com/clientarea.php",
            response_status_code=status_code,
            additional_data={"domain": "example.tk"},
        )

        assert entry.level == LogLevel.ERROR
        assert entry.message == message
        assert entry.data["error_type"] == "TransportError"
        assert entry.data["error_code"] == "http_status"
        assert entry.data["error_message"] == f"ListDomains errCode: {status_code}"
        assert entry.data["request_url"] == "https://my.freenom.com/clientarea.php"
        assert entry.data["response_status_code"] == status_code
        assert entry.data["domain"] == "example.tk"

    def test_error_logs_with_minimal_context(self) -> None:
        logger = AuditLogger(output_stream=StringIO())

        entry = logger.log_error("RenewalLoop", "Renewal cycle failed", error=RuntimeError("boom"))

        assert entry.data == {"error_message": "boom", "error_type": "RuntimeError"}

    def test_clear_entries(self) -> None:
        logger = AuditLogger(output_stream=StringIO())
        logger.info("SessionEngine", "one")
        logger.info("SessionEngine", "two")

        logger.clear_entries()

        assert logger.entries == []
