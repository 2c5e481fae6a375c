"""
Command-line interface for the domain intelligence package.

This module provides the main CLI entry point with commands for:
- whois: WHOIS lookup for a domain
- ssl-check: TLS certificate inspection for a host
- config: Configuration management

Every lookup prints a JSON response body. Failed lookups still print a
well-formed body carrying an "error" field and exit with status 1.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .audit_logger import AuditLogger
from .config import (
    DEFAULT_CONFIG_PATH,
    SystemConfig,
    load_config_from_env,
    load_config_from_file,
    save_config_to_file,
)
from .exceptions import ConfigError
from .orchestrator import create_service


def resolve_config(config_path: Optional[str]) -> SystemConfig:
    """
    Resolve the effective configuration.

    An explicit --config path must exist; the default path is optional.
    Environment variables are applied last.

    Raises:
        ConfigError: If the configuration cannot be loaded
    """
    if config_path:
        base = load_config_from_file(Path(config_path))
    elif DEFAULT_CONFIG_PATH.exists():
        base = load_config_from_file(DEFAULT_CONFIG_PATH)
    else:
        base = SystemConfig()

    return load_config_from_env(base)


def create_logger(config: SystemConfig, verbose: bool) -> Optional[AuditLogger]:
    """Create a stderr logger when verbose output is requested."""
    if not verbose:
        return None
    return AuditLogger.from_config(
        level=config.logging.level,
        output_format=config.logging.output_format,
    )


def print_body(body: dict) -> int:
    """Print a response body and return the matching exit code."""
    print(json.dumps(body, indent=2, ensure_ascii=False))
    return 1 if body.get("error") else 0


def cmd_whois(args: argparse.Namespace) -> int:
    """Handle the 'whois' command."""
    config = resolve_config(args.config)
    service = create_service(config, create_logger(config, args.verbose))

    body = asyncio.run(service.whois_lookup(args.domain, include_raw=args.raw))
    return print_body(body)


def cmd_ssl_check(args: argparse.Namespace) -> int:
    """Handle the 'ssl-check' command."""
    if args.port is not None and not 0 < args.port <= 65535:
        print("Error: Invalid port number", file=sys.stderr)
        return 2

    config = resolve_config(args.config)
    service = create_service(config, create_logger(config, args.verbose))

    body = asyncio.run(service.ssl_check(args.host, args.port))
    return print_body(body)


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command."""
    config_path = Path(args.path) if args.path else DEFAULT_CONFIG_PATH

    if args.action == "show":
        config = load_config_from_env(load_config_from_file(config_path))

        print(f"Configuration from: {config_path}")
        print(f"  WHOIS port: {config.whois.port}")
        print(f"  WHOIS timeouts: connect {config.whois.connect_timeout}s, "
              f"operation {config.whois.operation_timeout}s")
        custom = ", ".join(sorted(config.whois.servers)) or "none"
        print(f"  Custom WHOIS servers: {custom}")
        print(f"  TLS default port: {config.tls.default_port}")
        print(f"  TLS connect timeout: {config.tls.connect_timeout}s")
        print(f"  Log level: {config.logging.level}")
        return 0

    elif args.action == "init":
        if config_path.exists() and not args.force:
            print(f"Configuration already exists at: {config_path}")
            print("Use --force to overwrite.")
            return 1

        save_config_to_file(SystemConfig(), config_path)
        print(f"Configuration created at: {config_path}")
        return 0

    return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="domain-intel",
        description="WHOIS lookups and TLS certificate inspection",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # 'whois' command
    whois_parser = subparsers.add_parser(
        "whois",
        help="Perform a WHOIS lookup for a domain",
    )
    whois_parser.add_argument(
        "domain",
        help="Domain to look up (e.g., example.com)",
    )
    whois_parser.add_argument(
        "--raw",
        action="store_true",
        help="Include the raw WHOIS response in the output",
    )
    whois_parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    whois_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Write logs to stderr",
    )
    whois_parser.set_defaults(func=cmd_whois)

    # 'ssl-check' command
    ssl_parser = subparsers.add_parser(
        "ssl-check",
        help="Inspect the TLS certificate served by a host",
    )
    ssl_parser.add_argument(
        "host",
        help="Host (domain or IP) to inspect",
    )
    ssl_parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to connect to (default: 443)",
    )
    ssl_parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    ssl_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Write logs to stderr",
    )
    ssl_parser.set_defaults(func=cmd_ssl_check)

    # 'config' command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
    )
    config_parser.add_argument(
        "action",
        choices=["show", "init"],
        help="Configuration action",
    )
    config_parser.add_argument(
        "--path", "-p",
        help="Path to configuration file",
    )
    config_parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Force overwrite existing configuration",
    )
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except ConfigError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
