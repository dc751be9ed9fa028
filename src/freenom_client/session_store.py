"""
In-memory session state for one registrar account.

Holds the cookie jar, the anti-forgery token and the domain cache. Nothing
is persisted; a restart starts from an empty store. The store has no
locking and is meant to be owned by a single SessionEngine.
"""

import copy
from http.cookiejar import CookieJar
from typing import Optional

from .models import DomainInfo, DomainRecord


class SessionStore:
    """
    Cookie jar, token and domain cache of a session.

    The cache is append/update-only: domains are never removed once seen.
    """

    def __init__(self) -> None:
        self._cookie_jar = CookieJar()
        self._token = ""
        self._domains: dict[str, DomainInfo] = {}

    @property
    def cookie_jar(self) -> CookieJar:
        """The jar shared with the transport."""
        return self._cookie_jar

    @property
    def token(self) -> str:
        return self._token

    def set_token(self, token: str) -> None:
        self._token = token

    def has_session(self) -> bool:
        return bool(self._token)

    def clear_session(self) -> None:
        """Drop cookies and token. The domain cache is kept."""
        self._cookie_jar.clear()
        self._token = ""

    def get(self, domain: str) -> Optional[DomainInfo]:
        """
        Get a cached domain.

        Returns:
            A copy of the cached DomainInfo, or None if the domain is unknown
        """
        info = self._domains.get(domain)
        return copy.deepcopy(info) if info is not None else None

    def __contains__(self, domain: str) -> bool:
        return domain in self._domains

    def upsert(self, info: DomainInfo) -> DomainInfo:
        """
        Insert a domain or refresh its registrar fields.

        An existing entry keeps its cached DNS records; only the ID and the
        registration/expiry dates are replaced.

        Args:
            info: Fresh listing data for the domain

        Returns:
            A copy of the stored entry
        """
        existing = self._domains.get(info.domain)
        if existing is None:
            self._domains[info.domain] = DomainInfo(
                domain=info.domain,
                domain_id=info.domain_id,
                reg_date=info.reg_date,
                exp_date=info.exp_date,
                records=list(info.records),
                records_loaded=info.records_loaded,
            )
        else:
            existing.domain_id = info.domain_id
            existing.reg_date = info.reg_date
            existing.exp_date = info.exp_date
        return copy.deepcopy(self._domains[info.domain])

    def replace_records(self, domain: str, records: list[DomainRecord]) -> DomainInfo:
        """
        Overwrite the cached record list of a domain and mark it loaded.

        Raises:
            KeyError: If the domain is not cached
        """
        info = self._domains[domain]
        info.records = [copy.copy(record) for record in records]
        info.records_loaded = True
        return copy.deepcopy(info)

    def domains(self) -> dict[str, DomainInfo]:
        """Snapshot of the whole cache."""
        return copy.deepcopy(self._domains)
