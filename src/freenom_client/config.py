"""
Configuration dataclasses for the Freenom client.

This module defines the registrar endpoints, transport and retry settings,
logging options and renewal defaults, plus a loader that reads them from
the environment (optionally from a .env file).
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


DEFAULT_HOST = "https://my.freenom.com/"


@dataclass
class EndpointConfig:
    """Registrar console URLs, all derived from a single host."""

    host: str = DEFAULT_HOST

    def _url(self, path: str) -> str:
        return self.host.rstrip("/") + "/" + path

    @property
    def login_url(self) -> str:
        return self._url("clientarea.php")

    @property
    def do_login_url(self) -> str:
        return self._url("dologin.php")

    @property
    def domains_url(self) -> str:
        return self._url("domains.php")

    @property
    def check_available_url(self) -> str:
        return self._url("includes/domains/fn-available.php")


@dataclass
class TransportConfig:
    """HTTP transport settings."""

    timeout_seconds: float = 20.0
    # The console's certificate chain does not validate; verification stays
    # off unless explicitly enabled.
    verify_tls: bool = False
    user_agent: str = (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
    )


@dataclass
class RetryConfig:
    """Retry behavior configuration."""

    max_attempts: int = 5
    delay_seconds: float = 0.0


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class RenewalConfig:
    """Defaults for the renewal loop."""

    months: int = 12
    domain: str = ""  # empty renews every eligible domain
    interval_seconds: float = 24 * 60 * 60


@dataclass
class Credentials:
    """Account credentials for the registrar console."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


@dataclass
class ClientConfig:
    """Main configuration combining all sub-configurations."""

    endpoints: EndpointConfig = field(default_factory=EndpointConfig)
    transport: TransportConfig = field(default_factory=TransportConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    renewal: RenewalConfig = field(default_factory=RenewalConfig)
    credentials: Optional[Credentials] = None


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_config_from_env(env_file: Optional[Path] = None) -> ClientConfig:
    """
    Build a ClientConfig from FREENOM_* environment variables.

    Values from a .env file are loaded first without overriding variables
    that are already set. Unparseable numbers fall back to defaults.

    Args:
        env_file: Optional path to a .env file (defaults to dotenv's lookup)

    Returns:
        The assembled ClientConfig
    """
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv()

    username = (os.getenv("FREENOM_USERNAME", "") or "").strip()
    password = os.getenv("FREENOM_PASSWORD", "") or ""
    credentials = Credentials(username, password) if username else None

    return ClientConfig(
        endpoints=EndpointConfig(
            host=(os.getenv("FREENOM_HOST", DEFAULT_HOST) or DEFAULT_HOST).strip(),
        ),
        transport=TransportConfig(
            timeout_seconds=_float_env("FREENOM_TIMEOUT", 20.0),
            verify_tls=_bool_env("FREENOM_VERIFY_TLS", False),
        ),
        retry=RetryConfig(
            max_attempts=max(1, _int_env("FREENOM_RETRY_ATTEMPTS", 5)),
            delay_seconds=_float_env("FREENOM_RETRY_DELAY", 0.0),
        ),
        logging=LoggingConfig(
            level=(os.getenv("FREENOM_LOG_LEVEL", "info") or "info").lower(),
            output_format=(os.getenv("FREENOM_LOG_FORMAT", "text") or "text").lower(),
        ),
        renewal=RenewalConfig(
            months=_int_env("FREENOM_RENEW_MONTHS", 12),
            domain=(os.getenv("FREENOM_RENEW_DOMAIN", "") or "").strip(),
            interval_seconds=_float_env("FREENOM_RENEW_INTERVAL", 24 * 60 * 60),
        ),
        credentials=credentials,
    )
