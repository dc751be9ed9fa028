"""
Command-line interface for the Freenom client.

Commands:
- domains: List owned domains and their expiry dates
- records: Show the DNS records of a domain
- add-record / modify-record / delete-record: Edit DNS records
- renew: Renew free domains inside the renewal window
- check: List free TLD variants of a name that can be registered
- watch: Log in and renew on a fixed interval, forever or for N cycles

Credentials and defaults come from FREENOM_* environment variables or a
.env file.
"""

import argparse
import sys
import time
from pathlib import Path
from typing import Callable, Optional

import httpx

from . import __version__
from .audit_logger import AuditLogger
from .config import ClientConfig, load_config_from_env
from .enums import LogLevel, RecordType
from .exceptions import FreenomError, ValidationError
from .models import DomainRecord
from .session_engine import SessionEngine


def _load_config(args: argparse.Namespace) -> ClientConfig:
    env_file = Path(args.env_file) if getattr(args, "env_file", None) else None
    return load_config_from_env(env_file)


def _create_logger(config: ClientConfig, args: argparse.Namespace) -> AuditLogger:
    level = "debug" if getattr(args, "verbose", False) else config.logging.level
    output_format = config.logging.output_format
    if output_format not in ("json", "text", "both"):
        output_format = "text"
    return AuditLogger.from_level_name(level, output_format=output_format)


def _open_engine(
    config: ClientConfig,
    logger: AuditLogger,
    args: argparse.Namespace,
) -> SessionEngine:
    http_transport: Optional[httpx.BaseTransport] = getattr(args, "http_transport", None)
    return SessionEngine(config, logger=logger, http_transport=http_transport)


def _login(engine: SessionEngine, config: ClientConfig) -> None:
    if config.credentials is None or not config.credentials.password:
        raise ValidationError(
            code="missing_credentials",
            message="FREENOM_USERNAME and FREENOM_PASSWORD must be set",
        )
    engine.login(config.credentials.username, config.credentials.password)


def _record_from_args(args: argparse.Namespace) -> DomainRecord:
    return DomainRecord(
        type=args.type.upper(),
        name=args.name,
        ttl=args.ttl,
        value=args.value,
        priority=args.priority,
    )


def _print_records(domain: str, engine: SessionEngine) -> None:
    info = engine.get_domain_info(domain)
    print(f"{info.domain} (id {info.domain_id}) registered {info.reg_date}, expires {info.exp_date}")
    if not info.records:
        print("  no DNS records")
    for index, record in enumerate(info.records):
        line = f"  [{index}] {record.type:<6} {record.name or '@':<20} {record.ttl:>6} {record.value}"
        if record.is_mx:
            line += f" (priority {record.priority})"
        print(line)


def _run(
    args: argparse.Namespace,
    action: Callable[[SessionEngine, ClientConfig, AuditLogger], int],
) -> int:
    config = _load_config(args)
    logger = _create_logger(config, args)
    try:
        with _open_engine(config, logger, args) as engine:
            return action(engine, config, logger)
    except FreenomError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


def cmd_domains(args: argparse.Namespace) -> int:
    """Handle the 'domains' command."""

    def action(engine: SessionEngine, config: ClientConfig, logger: AuditLogger) -> int:
        _login(engine, config)
        domains = engine.list_domains()
        if not domains:
            print("No domains found.")
        for domain, exp_date in sorted(domains.items()):
            print(f"{domain}\t{exp_date}")
        return 0

    return _run(args, action)


def cmd_records(args: argparse.Namespace) -> int:
    """Handle the 'records' command."""

    def action(engine: SessionEngine, config: ClientConfig, logger: AuditLogger) -> int:
        _login(engine, config)
        _print_records(args.domain, engine)
        return 0

    return _run(args, action)


def cmd_add_record(args: argparse.Namespace) -> int:
    """Handle the 'add-record' command."""

    def action(engine: SessionEngine, config: ClientConfig, logger: AuditLogger) -> int:
        _login(engine, config)
        engine.add_record(args.domain, [_record_from_args(args)])
        _print_records(args.domain, engine)
        return 0

    return _run(args, action)


def cmd_modify_record(args: argparse.Namespace) -> int:
    """Handle the 'modify-record' command."""

    def action(engine: SessionEngine, config: ClientConfig, logger: AuditLogger) -> int:
        _login(engine, config)
        info = engine.get_domain_info(args.domain)
        if args.index < 0 or args.index >= len(info.records):
            raise ValidationError(
                code="index_out_of_range",
                message=f"Record index {args.index} out of range (0..{len(info.records) - 1})",
            )
        engine.modify_record(args.domain, info.records[args.index], _record_from_args(args))
        _print_records(args.domain, engine)
        return 0

    return _run(args, action)


def cmd_delete_record(args: argparse.Namespace) -> int:
    """Handle the 'delete-record' command."""

    def action(engine: SessionEngine, config: ClientConfig, logger: AuditLogger) -> int:
        _login(engine, config)
        engine.get_domain_info(args.domain)
        engine.delete_record_by_index(args.domain, args.index)
        _print_records(args.domain, engine)
        return 0

    return _run(args, action)


def cmd_renew(args: argparse.Namespace) -> int:
    """Handle the 'renew' command."""

    def action(engine: SessionEngine, config: ClientConfig, logger: AuditLogger) -> int:
        _login(engine, config)
        months = args.months if args.months is not None else config.renewal.months
        domain = args.domain if args.domain is not None else config.renewal.domain
        results = engine.renew_free_domain(domain, months)
        if not results:
            print("No domains in the renewals list.")
        for name, outcome in sorted(results.items()):
            print(f"{name}\t{outcome}")
        return 0

    return _run(args, action)


def cmd_check(args: argparse.Namespace) -> int:
    """Handle the 'check' command."""

    def action(engine: SessionEngine, config: ClientConfig, logger: AuditLogger) -> int:
        available = engine.check_free_domain_purchasable(args.prefix)
        if not available:
            print(f"No free domains available for {args.prefix}.")
            return 1
        for name in available:
            print(name)
        return 0

    return _run(args, action)


def run_renewal_loop(
    engine: SessionEngine,
    config: ClientConfig,
    logger: AuditLogger,
    cycles: Optional[int] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Log in and renew eligible domains every `interval_seconds`.

    A login failure stops the loop (exit code 1); renewal errors are
    logged and the loop carries on with the next cycle.

    Args:
        engine: Session engine to drive
        config: Client configuration (credentials and renewal defaults)
        logger: Audit logger
        cycles: Number of cycles to run; None runs forever
        sleep: Sleep function (replaceable in tests)

    Returns:
        Exit code
    """
    completed = 0
    while cycles is None or completed < cycles:
        try:
            _login(engine, config)
        except FreenomError as e:
            logger.log_error("RenewalLoop", "Login failed, stopping", error=e)
            return 1

        try:
            results = engine.renew_free_domain(config.renewal.domain, config.renewal.months)
            logger.log(LogLevel.INFO, "RenewalLoop", "Renewal cycle finished", {"results": results})
        except FreenomError as e:
            logger.log_error("RenewalLoop", "Renewal cycle failed", error=e)

        completed += 1
        if cycles is not None and completed >= cycles:
            break
        sleep(config.renewal.interval_seconds)

    return 0


def cmd_watch(args: argparse.Namespace) -> int:
    """Handle the 'watch' command."""

    def action(engine: SessionEngine, config: ClientConfig, logger: AuditLogger) -> int:
        if args.interval is not None:
            config.renewal.interval_seconds = args.interval
        if args.months is not None:
            config.renewal.months = args.months
        if args.domain is not None:
            config.renewal.domain = args.domain
        return run_renewal_loop(engine, config, logger, cycles=args.cycles)

    return _run(args, action)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--env-file", "-e",
        help="Path to a .env file with FREENOM_* settings",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )


def _add_record_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--type", "-t",
        required=True,
        type=str.upper,
        choices=[record_type.value for record_type in RecordType],
        help="Record type",
    )
    parser.add_argument(
        "--name", "-n",
        default="",
        help="Record name (empty for the apex)",
    )
    parser.add_argument(
        "--ttl",
        type=int,
        default=3600,
        help="Time to live in seconds (default: 3600)",
    )
    parser.add_argument(
        "--value",
        required=True,
        help="Record value",
    )
    parser.add_argument(
        "--priority", "-p",
        type=int,
        default=0,
        help="Priority (MX records only)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="freenom-client",
        description="Manage Freenom domains, DNS records and free renewals",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    domains_parser = subparsers.add_parser("domains", help="List owned domains")
    _add_common_arguments(domains_parser)
    domains_parser.set_defaults(func=cmd_domains)

    records_parser = subparsers.add_parser("records", help="Show DNS records of a domain")
    records_parser.add_argument("domain", help="Domain name (e.g., example.tk)")
    _add_common_arguments(records_parser)
    records_parser.set_defaults(func=cmd_records)

    add_parser = subparsers.add_parser("add-record", help="Add a DNS record")
    add_parser.add_argument("domain", help="Domain name")
    _add_record_arguments(add_parser)
    _add_common_arguments(add_parser)
    add_parser.set_defaults(func=cmd_add_record)

    modify_parser = subparsers.add_parser(
        "modify-record",
        help="Replace the DNS record at INDEX (see 'records')",
    )
    modify_parser.add_argument("domain", help="Domain name")
    modify_parser.add_argument("index", type=int, help="Record index")
    _add_record_arguments(modify_parser)
    _add_common_arguments(modify_parser)
    modify_parser.set_defaults(func=cmd_modify_record)

    delete_parser = subparsers.add_parser(
        "delete-record",
        help="Delete the DNS record at INDEX (see 'records')",
    )
    delete_parser.add_argument("domain", help="Domain name")
    delete_parser.add_argument("index", type=int, help="Record index")
    _add_common_arguments(delete_parser)
    delete_parser.set_defaults(func=cmd_delete_record)

    renew_parser = subparsers.add_parser("renew", help="Renew free domains")
    renew_parser.add_argument(
        "--domain", "-d",
        help="Only renew this domain (default: all eligible)",
    )
    renew_parser.add_argument(
        "--months", "-m",
        type=int,
        help="Renewal period in months, 1-12 (default: FREENOM_RENEW_MONTHS or 12)",
    )
    _add_common_arguments(renew_parser)
    renew_parser.set_defaults(func=cmd_renew)

    check_parser = subparsers.add_parser(
        "check",
        help="List free domains that can be registered for a name",
    )
    check_parser.add_argument("prefix", help="Name without TLD (e.g., example)")
    _add_common_arguments(check_parser)
    check_parser.set_defaults(func=cmd_check)

    watch_parser = subparsers.add_parser(
        "watch",
        help="Log in and renew free domains on a fixed interval",
    )
    watch_parser.add_argument(
        "--interval", "-i",
        type=float,
        help="Seconds between cycles (default: FREENOM_RENEW_INTERVAL or 86400)",
    )
    watch_parser.add_argument("--months", "-m", type=int, help="Renewal period in months")
    watch_parser.add_argument("--domain", "-d", help="Only renew this domain")
    watch_parser.add_argument(
        "--cycles", "-n",
        type=int,
        help="Stop after this many cycles (default: run forever)",
    )
    _add_common_arguments(watch_parser)
    watch_parser.set_defaults(func=cmd_watch)

    return parser


def main(
    argv: Optional[list[str]] = None,
    http_transport: Optional[httpx.BaseTransport] = None,
) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])
        http_transport: Optional httpx transport used for every request

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    args.http_transport = http_transport
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
