"""
Structured pattern extraction over the console's HTML.

The console offers no stable markup, so nothing here builds a DOM. Each
piece of data is located by a named pattern anchored on CSS-class
landmarks and yields fixed-arity tuples of captured groups. Malformed rows
simply do not match (or are skipped by the typed parsers), so one broken
row never aborts a whole page.

RegexExtractor is the only matching strategy shipped; anything that
implements the Extractor protocol can be handed to ConsolePageParser.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol, Union, runtime_checkable

from .exceptions import ParseError
from .models import (
    DomainListing,
    DomainRecord,
    RecordExtraction,
    RenewalCandidate,
)

Body = Union[bytes, str]


class PatternName(Enum):
    """Names of the patterns every extractor must support."""

    LOGIN_TOKEN = "login_token"
    LOGIN_SUCCESS = "login_success"
    DOMAIN_ROW = "domain_row"
    RECORD_ROW = "record_row"
    DNS_SUCCESS = "dns_success"
    DNS_ERROR = "dns_error"
    DNS_ERROR_MARKER = "dns_error_marker"
    RENEWAL_ROW = "renewal_row"
    ORDER_CONFIRMATION = "order_confirmation"


@dataclass(frozen=True)
class PatternSpec:
    """A named regular expression and the number of groups it must capture."""

    name: PatternName
    regex: str
    arity: int


DEFAULT_PATTERNS: dict[PatternName, PatternSpec] = {
    spec.name: spec
    for spec in (
        PatternSpec(
            PatternName.LOGIN_TOKEN,
            r'class="form-stacked".+?value="([^"]+?)"',
            1,
        ),
        PatternSpec(
            PatternName.LOGIN_SUCCESS,
            r'<span class="hidden-sm">Hello.+?</span>',
            0,
        ),
        PatternSpec(
            PatternName.DOMAIN_ROW,
            r'class="second"><[^>]+?>(.+?)\s+.+?class="third">(\d{4}-\d{2}-\d{2})'
            r'.+?class="fourth">(\d{4}-\d{2}-\d{2}).+?id=(\d+?)"',
            4,
        ),
        # ttl and priority are captured loosely so a bad value is reported
        # for its own row instead of shifting the match into the next one.
        PatternSpec(
            PatternName.RECORD_ROW,
            r'records\[\d+\]\[type\]" value="([^"]*)"'
            r'.+?records\[\d+\]\[name\]" value="([^"]*)"'
            r'.+?records\[\d+\]\[ttl\]" value="([^"]*)"'
            r'.+?records\[\d+\]\[value\]" value="([^"]*)"'
            r'.+?(?:records\[\d+\]\[priority\]" value="([^"]*)".+?)?</td>',
            5,
        ),
        PatternSpec(PatternName.DNS_SUCCESS, r'class="dnssuccess"', 0),
        PatternSpec(PatternName.DNS_ERROR, r'class="dnserror">(.+?)</li>', 1),
        PatternSpec(PatternName.DNS_ERROR_MARKER, r'class="dnserror"', 0),
        PatternSpec(
            PatternName.RENEWAL_ROW,
            r'<tr><td>([^<]+?)</td><td>[^<]+</td><td>[^<]+<span class="[^"]+">'
            r'(\d+)[^&]+&domain=(\d+)"',
            3,
        ),
        PatternSpec(PatternName.ORDER_CONFIRMATION, r'Order Confirmation', 0),
    )
}


@runtime_checkable
class Extractor(Protocol):
    """Matching strategy used by the page parser."""

    def find_all(self, name: PatternName, body: Body) -> list[tuple[str, ...]]:
        ...

    def find_first(self, name: PatternName, body: Body) -> Optional[tuple[str, ...]]:
        ...

    def contains(self, name: PatternName, body: Body) -> bool:
        ...


def _as_text(body: Body) -> str:
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return body


class RegexExtractor:
    """
    Extractor backed by compiled regular expressions.

    All patterns are compiled case-insensitive with DOTALL, since rows in
    the console markup span several lines.
    """

    def __init__(self, patterns: Optional[dict[PatternName, PatternSpec]] = None) -> None:
        self._specs = dict(DEFAULT_PATTERNS)
        if patterns:
            self._specs.update(patterns)
        self._compiled = {
            name: re.compile(spec.regex, re.IGNORECASE | re.DOTALL)
            for name, spec in self._specs.items()
        }

    def _pattern(self, name: PatternName) -> re.Pattern:
        try:
            compiled = self._compiled[name]
        except KeyError:
            raise ParseError(
                code="unknown_pattern",
                message=f"No pattern registered for {name.value}",
            ) from None
        expected = self._specs[name].arity
        if compiled.groups != expected:
            raise ParseError(
                code="pattern_arity",
                message=(
                    f"Pattern {name.value} captures {compiled.groups} groups, "
                    f"expected {expected}"
                ),
                details={"pattern": name.value},
            )
        return compiled

    def find_all(self, name: PatternName, body: Body) -> list[tuple[str, ...]]:
        compiled = self._pattern(name)
        return [
            tuple(group or "" for group in match.groups())
            for match in compiled.finditer(_as_text(body))
        ]

    def find_first(self, name: PatternName, body: Body) -> Optional[tuple[str, ...]]:
        match = self._pattern(name).search(_as_text(body))
        if match is None:
            return None
        return tuple(group or "" for group in match.groups())

    def contains(self, name: PatternName, body: Body) -> bool:
        return self._pattern(name).search(_as_text(body)) is not None


@dataclass
class DnsOutcome:
    """What a DNS-manager response says about the submitted change."""

    success: bool
    error: bool
    message: Optional[str] = None


class ConsolePageParser:
    """Turns raw console pages into typed values using an Extractor."""

    def __init__(self, extractor: Optional[Extractor] = None) -> None:
        self._extractor = extractor or RegexExtractor()

    @property
    def extractor(self) -> Extractor:
        return self._extractor

    def login_token(self, body: Body) -> str:
        """
        Extract the anti-forgery token from the login form.

        Raises:
            ParseError: If the form landmark or token is missing
        """
        match = self._extractor.find_first(PatternName.LOGIN_TOKEN, body)
        if match is None or len(match) != 1 or not match[0]:
            raise ParseError(
                code="token_missing",
                message="Login token not found in login page",
            )
        return match[0]

    def is_logged_in(self, body: Body) -> bool:
        return self._extractor.contains(PatternName.LOGIN_SUCCESS, body)

    def domain_listing(self, body: Body) -> list[DomainListing]:
        rows = []
        for match in self._extractor.find_all(PatternName.DOMAIN_ROW, body):
            if len(match) != 4:
                continue
            domain, reg_date, exp_date, domain_id = match
            rows.append(
                DomainListing(
                    domain=domain.strip(),
                    reg_date=reg_date,
                    exp_date=exp_date,
                    domain_id=domain_id,
                )
            )
        return rows

    def records(self, body: Body) -> RecordExtraction:
        """
        Extract every DNS record row.

        Rows whose ttl or priority is not an integer are skipped; the reason
        is kept in RecordExtraction.errors.
        """
        extraction = RecordExtraction(records=[])
        for index, match in enumerate(self._extractor.find_all(PatternName.RECORD_ROW, body)):
            if len(match) != 5:
                extraction.errors.append(f"row {index}: unexpected arity {len(match)}")
                continue
            record_type, name, ttl_raw, value, priority_raw = match
            try:
                ttl = int(ttl_raw)
            except ValueError:
                extraction.errors.append(f"row {index}: invalid ttl {ttl_raw!r}")
                continue
            try:
                priority = int(priority_raw) if priority_raw else 0
            except ValueError:
                extraction.errors.append(f"row {index}: invalid priority {priority_raw!r}")
                continue
            extraction.records.append(
                DomainRecord(
                    type=record_type,
                    name=name,
                    ttl=ttl,
                    value=value,
                    priority=priority,
                )
            )
        return extraction

    def dns_outcome(self, body: Body) -> DnsOutcome:
        """Read the success/error banner of a DNS-manager response."""
        success = self._extractor.contains(PatternName.DNS_SUCCESS, body)
        error_match = self._extractor.find_first(PatternName.DNS_ERROR, body)
        if error_match is not None:
            return DnsOutcome(success=success, error=True, message=error_match[0].strip())
        error = self._extractor.contains(PatternName.DNS_ERROR_MARKER, body)
        return DnsOutcome(success=success, error=error)

    def renewal_candidates(self, body: Body) -> list[RenewalCandidate]:
        rows = []
        for match in self._extractor.find_all(PatternName.RENEWAL_ROW, body):
            if len(match) != 3:
                continue
            domain, days_raw, renewal_id = match
            try:
                days = int(days_raw)
            except ValueError:
                continue
            rows.append(
                RenewalCandidate(
                    domain=domain.strip(),
                    days_until_expiry=days,
                    renewal_id=renewal_id,
                )
            )
        return rows

    def has_order_confirmation(self, body: Body) -> bool:
        return self._extractor.contains(PatternName.ORDER_CONFIRMATION, body)
