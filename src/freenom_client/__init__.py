"""
Freenom Client - scraping session engine for the Freenom client console.

This package logs in to the registrar's web console, lists owned domains,
reads and edits DNS records, renews free domains inside their renewal
window and checks free-domain availability, all by extracting data from
server-rendered pages because the registrar offers no API.
"""

__version__ = "0.1.0"

from freenom_client.exceptions import (
    FreenomError,
    ValidationError,
    TransportError,
    ParseError,
    SessionInvalidError,
    DomainNotFoundError,
    RegistrarRejectedError,
    NotImplementedFeatureError,
)
from freenom_client.enums import (
    SessionState,
    RecordType,
    DnsAction,
    RenewOutcome,
    TransportErrorCode,
    LogLevel,
)
from freenom_client.config import (
    EndpointConfig,
    TransportConfig,
    RetryConfig,
    LoggingConfig,
    RenewalConfig,
    Credentials,
    ClientConfig,
    load_config_from_env,
)
from freenom_client.models import (
    DomainRecord,
    DomainInfo,
    DomainListing,
    RenewalCandidate,
    RecordExtraction,
    DomainStatus,
    AvailabilityResult,
)
from freenom_client.retry_manager import (
    RetryManager,
    RetryResult,
)
from freenom_client.audit_logger import (
    AuditLogger,
    LogEntry,
)
from freenom_client.transport import (
    Transport,
    TransportResponse,
)
from freenom_client.extractor import (
    Extractor,
    RegexExtractor,
    ConsolePageParser,
    DnsOutcome,
    PatternName,
    PatternSpec,
    DEFAULT_PATTERNS,
)
from freenom_client.session_store import (
    SessionStore,
)
from freenom_client.session_engine import (
    SessionEngine,
)

__all__ = [
    # Exceptions
    "FreenomError",
    "ValidationError",
    "TransportError",
    "ParseError",
    "SessionInvalidError",
    "DomainNotFoundError",
    "RegistrarRejectedError",
    "NotImplementedFeatureError",
    # Enums
    "SessionState",
    "RecordType",
    "DnsAction",
    "RenewOutcome",
    "TransportErrorCode",
    "LogLevel",
    # Configuration
    "EndpointConfig",
    "TransportConfig",
    "RetryConfig",
    "LoggingConfig",
    "RenewalConfig",
    "Credentials",
    "ClientConfig",
    "load_config_from_env",
    # Models
    "DomainRecord",
    "DomainInfo",
    "DomainListing",
    "RenewalCandidate",
    "RecordExtraction",
    "DomainStatus",
    "AvailabilityResult",
    # Retry Manager
    "RetryManager",
    "RetryResult",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # Transport
    "Transport",
    "TransportResponse",
    # Extractor
    "Extractor",
    "RegexExtractor",
    "ConsolePageParser",
    "DnsOutcome",
    "PatternName",
    "PatternSpec",
    "DEFAULT_PATTERNS",
    # Session
    "SessionStore",
    "SessionEngine",
]
