"""
Data models for the Freenom client.

This module defines DNS records, cached domain information, rows scraped
from the console listings, and the availability-check JSON payload.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from .enums import RecordType


@dataclass
class DomainRecord:
    """A single DNS record as shown in the DNS manager."""

    type: str
    name: str
    ttl: int
    value: str
    priority: int = 0

    @property
    def is_mx(self) -> bool:
        return self.type.upper() == RecordType.MX.value

    def form_priority(self) -> str:
        """Priority as submitted in forms: only MX records carry one."""
        return str(self.priority) if self.is_mx else ""

    def matches(self, other: "DomainRecord") -> bool:
        """
        Check record identity.

        Type, name and value compare case-insensitively; ttl and priority
        compare exactly.
        """
        return (
            self.type.lower() == other.type.lower()
            and self.name.lower() == other.name.lower()
            and self.value.lower() == other.value.lower()
            and self.ttl == other.ttl
            and self.priority == other.priority
        )


@dataclass
class DomainInfo:
    """Cached information about an owned domain."""

    domain: str
    domain_id: str
    reg_date: str
    exp_date: str
    records: list[DomainRecord] = field(default_factory=list)
    # False until the DNS manager page has been read; an empty zone is valid
    records_loaded: bool = False


@dataclass
class DomainListing:
    """One row of the "My Domains" listing."""

    domain: str
    reg_date: str
    exp_date: str
    domain_id: str


@dataclass
class RenewalCandidate:
    """One row of the renewals listing."""

    domain: str
    days_until_expiry: int
    renewal_id: str


@dataclass
class RecordExtraction:
    """DNS rows parsed from a page, plus the rows that had to be skipped."""

    records: list[DomainRecord]
    errors: list[str] = field(default_factory=list)


@dataclass
class DomainStatus:
    """Availability of one name/TLD pair."""

    status: str
    domain: str
    tld: str
    type: str
    is_in_cart: int = 0

    @property
    def full_name(self) -> str:
        return self.domain + self.tld

    def is_free_and_available(self) -> bool:
        return self.status.upper() == "AVAILABLE" and self.type.upper() == "FREE"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DomainStatus":
        try:
            in_cart = int(data.get("is_in_cart") or 0)
        except (TypeError, ValueError):
            in_cart = 0
        return cls(
            status=str(data.get("status") or ""),
            domain=str(data.get("domain") or ""),
            tld=str(data.get("tld") or ""),
            type=str(data.get("type") or ""),
            is_in_cart=in_cart,
        )


@dataclass
class AvailabilityResult:
    """Payload of the availability-check endpoint."""

    status: str
    free_domains: list[DomainStatus] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "AvailabilityResult":
        if not isinstance(data, dict):
            raise TypeError(f"expected a JSON object, got {type(data).__name__}")
        raw_domains = data.get("free_domains") or []
        if not isinstance(raw_domains, list):
            raw_domains = []
        return cls(
            status=str(data.get("status") or ""),
            free_domains=[
                DomainStatus.from_dict(item)
                for item in raw_domains
                if isinstance(item, dict)
            ],
        )
