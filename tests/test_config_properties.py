"""
Property-based tests for configuration module.

Covers endpoint derivation from the host, defaults, and loading of
FREENOM_* variables from the environment and from .env files.
"""

from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from freenom_client.config import (
    DEFAULT_HOST,
    ClientConfig,
    Credentials,
    EndpointConfig,
    load_config_from_env,
)


ENV_VARS = [
    "FREENOM_USERNAME",
    "FREENOM_PASSWORD",
    "FREENOM_HOST",
    "FREENOM_TIMEOUT",
    "FREENOM_VERIFY_TLS",
    "FREENOM_RETRY_ATTEMPTS",
    "FREENOM_RETRY_DELAY",
    "FREENOM_LOG_LEVEL",
    "FREENOM_LOG_FORMAT",
    "FREENOM_RENEW_MONTHS",
    "FREENOM_RENEW_DOMAIN",
    "FREENOM_RENEW_INTERVAL",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove FREENOM_* variables and keep dotenv from finding a stray .env."""
    for name in ENV_VARS:
        # setenv first so variables loaded from .env files are undone too
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


class TestEndpointProperty:

    @given(
        host=st.from_regex(r"https://[a-z]{1,10}\.example\.(com|net)", fullmatch=True),
        trailing_slash=st.booleans(),
    )
    @settings(max_examples=50)
    def test_urls_derive_from_host(self, host: str, trailing_slash: bool) -> None:
        """
        *For any* host with or without a trailing slash, every endpoint is the
        host joined with its path by exactly one slash.
        """
        endpoints = EndpointConfig(host=host + ("/" if trailing_slash else ""))

        assert endpoints.login_url == f"{host}/clientarea.php"
        assert endpoints.do_login_url == f"{host}/dologin.php"
        assert endpoints.domains_url == f"{host}/domains.php"
        assert endpoints.check_available_url == f"{host}/includes/domains/fn-available.php"

    def test_default_host(self) -> None:
        assert EndpointConfig().login_url == "https://my.freenom.com/clientarea.php"


class TestDefaults:

    def test_client_defaults(self) -> None:
        config = ClientConfig()

        assert config.endpoints.host == DEFAULT_HOST
        assert config.transport.timeout_seconds == 20.0
        assert config.transport.verify_tls is False
        assert config.retry.max_attempts == 5
        assert config.retry.delay_seconds == 0.0
        assert config.renewal.months == 12
        assert config.renewal.domain == ""
        assert config.credentials is None

    def test_credentials_repr_hides_password(self) -> None:
        text = repr(Credentials("owner@example.com", "c0rrect-h0rse"))

        assert "owner@example.com" in text
        assert "c0rrect-h0rse" not in text


class TestLoadFromEnv:

    def test_empty_environment_gives_defaults(self, clean_env) -> None:
        config = load_config_from_env()

        assert config.credentials is None
        assert config.retry.max_attempts == 5
        assert config.logging.level == "info"
        assert config.logging.output_format == "text"

    def test_variables_are_read(self, clean_env) -> None:
        clean_env.setenv("FREENOM_USERNAME", " owner@example.com ")
        clean_env.setenv("FREENOM_PASSWORD", "c0rrect-h0rse")
        clean_env.setenv("FREENOM_HOST", "https://console.example.com/")
        clean_env.setenv("FREENOM_TIMEOUT", "7.5")
        clean_env.setenv("FREENOM_VERIFY_TLS", "yes")
        clean_env.setenv("FREENOM_RETRY_ATTEMPTS", "3")
        clean_env.setenv("FREENOM_RETRY_DELAY", "0.25")
        clean_env.setenv("FREENOM_LOG_LEVEL", "DEBUG")
        clean_env.setenv("FREENOM_LOG_FORMAT", "JSON")
        clean_env.setenv("FREENOM_RENEW_MONTHS", "6")
        clean_env.setenv("FREENOM_RENEW_DOMAIN", "example.tk")
        clean_env.setenv("FREENOM_RENEW_INTERVAL", "3600")

        config = load_config_from_env()

        assert config.credentials == Credentials("owner@example.com", "c0rrect-h0rse")
        assert config.endpoints.login_url == "https://console.example.com/clientarea.php"
        assert config.transport.timeout_seconds == 7.5
        assert config.transport.verify_tls is True
        assert config.retry.max_attempts == 3
        assert config.retry.delay_seconds == 0.25
        assert config.logging.level == "debug"
        assert config.logging.output_format == "json"
        assert config.renewal.months == 6
        assert config.renewal.domain == "example.tk"
        assert config.renewal.interval_seconds == 3600.0

    @pytest.mark.parametrize("raw, expected", [("abc", 5), ("0", 1), ("-4", 1), ("9", 9)])
    def test_retry_attempts_are_sanitized(self, clean_env, raw: str, expected: int) -> None:
        clean_env.setenv("FREENOM_RETRY_ATTEMPTS", raw)

        assert load_config_from_env().retry.max_attempts == expected

    def test_env_file_is_loaded_without_overriding(self, clean_env, tmp_path: Path) -> None:
        env_file = tmp_path / "freenom.env"
        env_file.write_text(
            "FREENOM_USERNAME=file@example.com\n"
            "FREENOM_PASSWORD=from-file\n"
            "FREENOM_RENEW_MONTHS=3\n"
        )
        clean_env.setenv("FREENOM_RENEW_MONTHS", "9")

        config = load_config_from_env(env_file)

        assert config.credentials.username == "file@example.com"
        assert config.credentials.password == "from-file"
        assert config.renewal.months == 9
