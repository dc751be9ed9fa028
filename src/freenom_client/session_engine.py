"""
Session engine for the Freenom client console.

This module drives every registrar operation as a request/response cycle:
Transport (under the retry budget) fetches or submits a page, the
ConsolePageParser pulls the data out of the markup, and the SessionStore
cache is updated only once the console has confirmed the result.

The engine is a two-state machine. Only login() moves it to
AUTHENTICATED; any irrecoverable login failure clears the session and moves
it back. Every other operation except the availability check requires an
authenticated session and fails before touching the network otherwise.

An engine is not thread-safe: callers must serialize access to it.
"""

import json
from typing import Optional, Sequence

import httpx

from .audit_logger import AuditLogger
from .config import ClientConfig
from .enums import DnsAction, LogLevel, RecordType, RenewOutcome, SessionState
from .exceptions import (
    DomainNotFoundError,
    FreenomError,
    NotImplementedFeatureError,
    ParseError,
    RegistrarRejectedError,
    SessionInvalidError,
    TransportError,
    ValidationError,
)
from .extractor import ConsolePageParser
from .models import AvailabilityResult, DomainInfo, DomainRecord
from .retry_manager import RetryManager
from .session_store import SessionStore
from .transport import Transport


class SessionEngine:
    """
    Scraping session against the registrar console.

    Owns one SessionStore (cookies, token, domain cache). Construct one
    engine per account.
    """

    # Free domains can only be renewed within this many days of expiry
    RENEWABLE_DAYS = 14
    MIN_RENEW_MONTHS = 1
    MAX_RENEW_MONTHS = 12
    PAYMENT_METHOD = "credit"

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        store: Optional[SessionStore] = None,
        parser: Optional[ConsolePageParser] = None,
        logger: Optional[AuditLogger] = None,
        http_transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Initialize the session engine.

        Args:
            config: Client configuration (endpoints, transport, retry)
            store: Optional session store; a fresh one is created otherwise
            parser: Optional page parser (defaults to the regex extractor)
            logger: Optional audit logger
            http_transport: Optional httpx transport, e.g. httpx.MockTransport
        """
        self._config = config or ClientConfig()
        self._store = store or SessionStore()
        self._parser = parser or ConsolePageParser()
        self._logger = logger
        self._urls = self._config.endpoints
        self._transport = Transport(
            cookie_jar=self._store.cookie_jar,
            config=self._config.transport,
            retry_manager=RetryManager(self._config.retry),
            logger=logger,
            http_transport=http_transport,
        )
        self._state = SessionState.UNAUTHENTICATED

    def __enter__(self) -> "SessionEngine":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client."""
        self._transport.close()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_logged_in(self) -> bool:
        return self._state == SessionState.AUTHENTICATED

    def cached_domains(self) -> dict[str, DomainInfo]:
        """Snapshot of the domain cache."""
        return self._store.domains()

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def login(self, username: str, password: str) -> None:
        """
        Log in and store the session cookies and anti-forgery token.

        Args:
            username: Account e-mail
            password: Account password

        Raises:
            TransportError: If either HTTP step exhausts its retries
            ParseError: If the login form has no token
            RegistrarRejectedError: If the greeting banner is missing after login
        """
        self._log_info("Logging in", {"username": username})
        self.logout()

        try:
            page = self._transport.execute(
                "GET",
                self._urls.login_url,
                operation="Login (login page)",
            )
            token = self._parser.login_token(page.body)
            self._store.set_token(token)

            result = self._transport.execute(
                "POST",
                self._urls.do_login_url,
                operation="Login (submit)",
                data={"token": token, "username": username, "password": password},
                headers={"Referer": self._urls.login_url},
            )
            if not self._parser.is_logged_in(result.body):
                raise RegistrarRejectedError(
                    code="login_failed",
                    message="Login failed",
                    details={"username": username},
                )
        except FreenomError as e:
            self.logout()
            self._log_error("Login failed", e)
            raise

        self._state = SessionState.AUTHENTICATED
        self._log_info("Logged in", {"username": username})

    def logout(self) -> None:
        """Forget the local session (no request is sent to the console)."""
        self._store.clear_session()
        self._state = SessionState.UNAUTHENTICATED

    def _require_login(self) -> None:
        if self._state != SessionState.AUTHENTICATED or not self._store.has_session():
            raise SessionInvalidError(code="not_logged_in", message="NOT LOGGED IN")

    # ------------------------------------------------------------------
    # Domains
    # ------------------------------------------------------------------

    def list_domains(self) -> dict[str, str]:
        """
        List the account's domains and refresh the cache.

        Cached DNS records of already known domains are kept.

        Returns:
            Mapping of domain name to expiry date (YYYY-MM-DD)
        """
        self._require_login()

        page = self._transport.execute(
            "GET",
            self._urls.login_url,
            operation="ListDomains",
            params={"action": "domains"},
            headers={"Referer": self._urls.login_url},
        )

        domains: dict[str, str] = {}
        for row in self._parser.domain_listing(page.body):
            domains[row.domain] = row.exp_date
            self._store.upsert(
                DomainInfo(
                    domain=row.domain,
                    domain_id=row.domain_id,
                    reg_date=row.reg_date,
                    exp_date=row.exp_date,
                )
            )

        self._log_info("Listed domains", {"count": len(domains)})
        return domains

    def _resolve_zone(self, domain: str) -> DomainInfo:
        # Zone edits resubmit every record, so the list must be described first.
        info = self._resolve_domain(domain)
        if not info.records_loaded:
            info = self.get_domain_info(domain)
        return info

    def _check_record_types(self, records: Sequence[DomainRecord]) -> None:
        known = {record_type.value for record_type in RecordType}
        for record in records:
            if record.type.upper() not in known:
                raise ValidationError(
                    code="invalid_record_type",
                    message=f"Unsupported record type: {record.type}",
                    details={"type": record.type, "supported": sorted(known)},
                )

    def _resolve_domain(self, domain: str) -> DomainInfo:
        if domain in self._store:
            return self._store.get(domain)

        self.list_domains()
        info = self._store.get(domain)
        if info is None:
            raise DomainNotFoundError(
                code="domain_not_found",
                message="Domain not exists",
                details={"domain": domain},
            )
        return info

    def get_domain_info(self, domain: str) -> DomainInfo:
        """
        Fetch the DNS records of a domain and replace them in the cache.

        Rows that cannot be parsed are skipped and logged.

        Raises:
            DomainNotFoundError: If the domain is not in the account
        """
        self._require_login()
        info = self._resolve_domain(domain)

        page = self._transport.execute(
            "GET",
            self._urls.login_url,
            operation="GetDomainInfo",
            params=self._dns_params(domain, info),
            headers={"Referer": self._urls.login_url},
        )

        extraction = self._parser.records(page.body)
        for error in extraction.errors:
            self._log(LogLevel.WARN, "Skipped DNS record row", {"domain": domain, "reason": error})

        return self._store.replace_records(domain, extraction.records)

    # ------------------------------------------------------------------
    # DNS records
    # ------------------------------------------------------------------

    def add_record(self, domain: str, records: Sequence[DomainRecord]) -> None:
        """
        Add one or more DNS records in a single submission.

        Raises:
            ValidationError: If no records are given
            RegistrarRejectedError: With the console's message when available
        """
        self._require_login()
        if not records:
            raise ValidationError(code="empty_records", message="Empty records")
        self._check_record_types(records)

        info = self._resolve_domain(domain)

        form = {"token": self._store.token, "dnsaction": DnsAction.ADD.value}
        for i, record in enumerate(records):
            form[f"addrecord[{i}][name]"] = record.name
            form[f"addrecord[{i}][type]"] = record.type.upper()
            form[f"addrecord[{i}][ttl]"] = str(record.ttl)
            form[f"addrecord[{i}][value]"] = record.value
            form[f"addrecord[{i}][priority]"] = record.form_priority()
            form[f"addrecord[{i}][port]"] = ""
            form[f"addrecord[{i}][weight]"] = ""
            form[f"addrecord[{i}][forward_type]"] = "1"

        self._submit_dns_form("AddRecord", domain, info, form)

    def modify_record(
        self,
        domain: str,
        old_record: DomainRecord,
        new_record: DomainRecord,
    ) -> None:
        """
        Replace one DNS record.

        The console edits the whole zone at once, so every cached record is
        resubmitted; the first one matching old_record is swapped for
        new_record. If nothing matches, the unchanged zone is resubmitted.
        Records not yet read in this session are described first.
        """
        self._require_login()
        self._check_record_types([new_record])
        info = self._resolve_zone(domain)

        form = {"token": self._store.token, "dnsaction": DnsAction.MODIFY.value}
        matched = False
        for i, cached in enumerate(info.records):
            record = cached
            if not matched and old_record.matches(cached):
                record = new_record
                matched = True

            form[f"records[{i}][line]"] = ""
            form[f"records[{i}][type]"] = record.type.upper()
            form[f"records[{i}][name]"] = record.name
            form[f"records[{i}][ttl]"] = str(record.ttl)
            form[f"records[{i}][value]"] = record.value
            form[f"records[{i}][priority]"] = record.form_priority()

        if not matched:
            self._log(
                LogLevel.WARN,
                "No cached record matches; resubmitting records unchanged",
                {"domain": domain, "record": vars(old_record)},
            )

        self._submit_dns_form("ModifyRecord", domain, info, form)

    def delete_record_by_index(self, domain: str, index: int) -> None:
        """
        Delete the cached record at `index`.

        The domain must already be cached (get_domain_info); no listing is
        fetched implicitly.
        """
        self._require_login()
        if index < 0:
            raise ValidationError(
                code="index_out_of_range",
                message="recordIndex must greater or equal to 0",
            )

        info = self._store.get(domain)
        if info is None:
            raise DomainNotFoundError(
                code="domain_not_found",
                message="domain not exists",
                details={"domain": domain},
            )
        if index >= len(info.records):
            raise ValidationError(
                code="index_out_of_range",
                message="recordIndex out of bounds",
                details={"index": index, "records": len(info.records)},
            )

        self.delete_record(domain, info.records[index])

    def delete_record(self, domain: str, record: DomainRecord) -> None:
        """
        Delete a single DNS record.

        Any error banner counts as failure, with or without a message.
        """
        self._require_login()
        info = self._resolve_domain(domain)

        params = self._dns_params(domain, info)
        params.update({
            "dnsaction": DnsAction.DELETE.value,
            "records": record.type.upper(),
            "name": record.name,
            "value": record.value,
            "line": "",
            "ttl": str(record.ttl),
            "priority": record.form_priority(),
            "weight": "",
            "port": "",
            "page": "",
        })

        page = self._transport.execute(
            "GET",
            self._urls.login_url,
            operation="DeleteRecord",
            params=params,
            headers={"Referer": self._urls.login_url},
        )

        outcome = self._parser.dns_outcome(page.body)
        if outcome.error:
            raise RegistrarRejectedError(
                code="delete_failed",
                message="DeleteRecord failed",
                details={"domain": domain, "console_message": outcome.message},
            )
        if not outcome.success:
            raise RegistrarRejectedError(
                code="not_success",
                message="DeleteRecord not success",
                details={"domain": domain},
            )

        self._log_info("Deleted DNS record", {"domain": domain, "record": vars(record)})
        self._refresh_after_change("DeleteRecord", domain)

    def _dns_params(self, domain: str, info: DomainInfo) -> dict[str, str]:
        return {"managedns": domain, "domainid": info.domain_id}

    def _submit_dns_form(
        self,
        operation: str,
        domain: str,
        info: DomainInfo,
        form: dict[str, str],
    ) -> None:
        params = self._dns_params(domain, info)
        referer = str(httpx.URL(self._urls.login_url, params=params))

        page = self._transport.execute(
            "POST",
            self._urls.login_url,
            operation=operation,
            params=params,
            data=form,
            headers={"Referer": referer},
        )

        outcome = self._parser.dns_outcome(page.body)
        if not outcome.success:
            if outcome.message:
                raise RegistrarRejectedError(
                    code="registrar_rejected",
                    message=outcome.message,
                    details={"domain": domain, "operation": operation},
                )
            raise RegistrarRejectedError(
                code="not_success",
                message=f"{operation} not success",
                details={"domain": domain},
            )

        self._log_info(f"{operation} succeeded", {"domain": domain})
        self._refresh_after_change(operation, domain)

    def _refresh_after_change(self, operation: str, domain: str) -> None:
        # The change itself is already confirmed; a failed refresh only
        # leaves the previous record list in the cache.
        try:
            self.get_domain_info(domain)
        except FreenomError as e:
            self._log_error(f"{operation}: cache refresh failed", e, {"domain": domain})

    # ------------------------------------------------------------------
    # Renewal and availability
    # ------------------------------------------------------------------

    def renew_free_domain(self, domain: str = "", months: int = 12) -> dict[str, str]:
        """
        Renew free domains that are inside the renewal window.

        Args:
            domain: Only renew this domain (case-insensitive); empty renews all
            months: Renewal period, 1 to 12 months

        Returns:
            Mapping of domain name to a RenewOutcome value

        Raises:
            TransportError: On the first failed renewal submission; results
                gathered so far are in details["partial_results"]
        """
        self._require_login()
        if months < self.MIN_RENEW_MONTHS or months > self.MAX_RENEW_MONTHS:
            raise ValidationError(
                code="months_out_of_range",
                message="months should be between 1 and 12",
                details={"months": months},
            )

        page = self._transport.execute(
            "GET",
            self._urls.domains_url,
            operation="RenewFreeDomain (renewals)",
            params={"a": "renewals"},
            headers={"Referer": self._urls.login_url},
        )

        results: dict[str, str] = {}
        candidates = []
        for row in self._parser.renewal_candidates(page.body):
            if row.days_until_expiry > self.RENEWABLE_DAYS:
                results[row.domain] = RenewOutcome.NOT_RENEWABLE_YET.value
                continue
            if domain and domain.lower() != row.domain.lower():
                results[row.domain] = RenewOutcome.NOT_IN_PLAN.value
                continue
            candidates.append(row)

        for row in candidates:
            form = {
                "token": self._store.token,
                "renewalid": row.renewal_id,
                f"renewalperiod[{row.renewal_id}]": f"{months}M",
                "paymentmethod": self.PAYMENT_METHOD,
            }
            referer = str(httpx.URL(
                self._urls.domains_url,
                params={"a": "renewdomain", "domain": row.renewal_id},
            ))
            try:
                # Renewal orders are not idempotent: one attempt only.
                result = self._transport.execute(
                    "POST",
                    self._urls.domains_url,
                    operation=f"RenewFreeDomain (submit {row.domain})",
                    params={"submitrenewals": "true"},
                    data=form,
                    headers={"Referer": referer},
                    max_attempts=1,
                )
            except TransportError as e:
                e.details["partial_results"] = dict(results)
                self._log_error("Renewal submission failed", e, {"domain": row.domain})
                raise

            # The console answers a failed free renewal with its order
            # confirmation page.
            if self._parser.has_order_confirmation(result.body):
                results[row.domain] = RenewOutcome.FAILED.value
            else:
                results[row.domain] = RenewOutcome.SUCCESS.value
            self._log_info(
                "Renewal submitted",
                {"domain": row.domain, "months": months, "result": results[row.domain]},
            )

        return results

    def check_free_domain_purchasable(self, domain_prefix: str) -> list[str]:
        """
        List free TLD variants of a name that can currently be registered.

        Does not require a login.

        Returns:
            Full domain names such as "example.tk"
        """
        page = self._transport.execute(
            "POST",
            self._urls.check_available_url,
            operation="CheckFreeDomainPurchasable",
            data={"domain": domain_prefix, "tld": ""},
            headers={"Referer": self._urls.domains_url},
        )

        try:
            result = AvailabilityResult.from_dict(json.loads(page.text))
        except (ValueError, TypeError) as e:
            raise ParseError(
                code="bad_payload",
                message=f"CheckFreeDomainPurchasable Unmarshal err: {e}",
            ) from e

        if result.status.upper() != "OK":
            raise RegistrarRejectedError(
                code="availability_status",
                message=f"CheckFreeDomainPurchasable status err: {result.status}",
                details={"status": result.status},
            )

        return [
            status.full_name
            for status in result.free_domains
            if status.is_free_and_available()
        ]

    def purchase_free_domain(self, domain: str) -> None:
        """
        Not supported.

        Checkout is protected by an interactive bot challenge, and the
        account's region must match the requesting IP's location.
        """
        raise NotImplementedFeatureError(
            code="not_implemented",
            message="To be implemented",
            details={"domain": domain},
        )

    # ------------------------------------------------------------------
    # Logging helpers
    # ------------------------------------------------------------------

    def _log(self, level: LogLevel, message: str, data: Optional[dict] = None) -> None:
        if self._logger:
            self._logger.log(level, "SessionEngine", message, data)

    def _log_info(self, message: str, data: Optional[dict] = None) -> None:
        self._log(LogLevel.INFO, message, data)

    def _log_error(
        self,
        message: str,
        error: Exception,
        data: Optional[dict] = None,
    ) -> None:
        if self._logger:
            self._logger.log_error("SessionEngine", message, error=error, additional_data=data)
