"""
Enumeration types for the Freenom client.

These enums provide type-safe constants for session state, record types,
renewal outcomes, error codes and logging levels.
"""

from enum import Enum


class SessionState(Enum):
    """Authentication state of a session engine."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class RecordType(Enum):
    """DNS record types accepted by the registrar's DNS manager."""

    A = "A"
    AAAA = "AAAA"
    CNAME = "CNAME"
    LOC = "LOC"
    MX = "MX"
    NAPTR = "NAPTR"
    RP = "RP"
    TXT = "TXT"


class DnsAction(Enum):
    """Values of the `dnsaction` form field."""

    ADD = "add"
    MODIFY = "modify"
    DELETE = "delete"


class RenewOutcome(Enum):
    """Per-domain result of a renewal run."""

    NOT_RENEWABLE_YET = "not in renewable day"
    NOT_IN_PLAN = "not in renew plan"
    FAILED = "renew failed"
    SUCCESS = "renew success"


class TransportErrorCode(Enum):
    """Error codes for transport failures."""

    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    READ_ERROR = "read_error"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
