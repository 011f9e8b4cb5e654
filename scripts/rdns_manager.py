#!/usr/bin/env python3
"""
Reverse DNS Manager - Main entry point for PTR record management.

This script converges the PTR record of a single IP address on the
configured reverse DNS provider (Bound by default).

Usage:
    rdns_manager.py update IP HOSTNAME  - Create/update the PTR record
    rdns_manager.py remove IP           - Delete the PTR record
    rdns_manager.py lookup IP           - Show the current PTR record
    rdns_manager.py providers           - List available providers
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

# Add scripts directory to path
sys.path.insert(0, str(Path(__file__).parent))

from rdns_providers.base import ReverseDNSProvider, ReverseDNSProviderError
from rdns_providers.registry import get_provider, list_providers
from utils.ip import is_valid_ip, lookup_ptr


def setup_logging(verbose: bool = False) -> None:
    """Configure logging"""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Reverse DNS (PTR) Manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Don't make actual changes",
    )
    parser.add_argument(
        "--provider",
        default=os.environ.get("RDNS_PROVIDER", "bound"),
        help="Reverse DNS provider (default: $RDNS_PROVIDER or bound)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    update_parser = subparsers.add_parser("update", help="Create/update PTR record")
    update_parser.add_argument("ip", help="IPv4 or IPv6 address")
    update_parser.add_argument("hostname", help="PTR hostname")

    remove_parser = subparsers.add_parser("remove", help="Delete PTR record")
    remove_parser.add_argument("ip", help="IPv4 or IPv6 address")

    lookup_parser = subparsers.add_parser("lookup", help="Show current PTR record")
    lookup_parser.add_argument("ip", help="IPv4 or IPv6 address")
    lookup_parser.add_argument(
        "--resolve",
        action="store_true",
        help="Also query the PTR record via DNS",
    )
    lookup_parser.add_argument(
        "--nameserver",
        default=None,
        help="Nameserver to query with --resolve (default: system resolver)",
    )

    subparsers.add_parser("providers", help="List available providers")

    return parser


def run_lookup(
    provider: ReverseDNSProvider,
    ip: str,
    resolve: bool = False,
    nameserver: Optional[str] = None,
) -> None:
    """Print the PTR record known to the provider (and DNS, if requested)"""
    current = provider.get_ptr(ip)
    print(f"{ip} -> {current or '(none)'}")

    if resolve:
        published = lookup_ptr(ip, nameserver)
        print(f"{ip} -> {published or '(none)'} (DNS)")


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if args.command == "providers":
        for name, description in list_providers().items():
            print(f"{name}: {description}")
        sys.exit(0)

    if not is_valid_ip(args.ip):
        logger.error(f"Invalid IP address: {args.ip}")
        sys.exit(1)

    # Set dry run mode
    if args.dry_run:
        os.environ["RDNS_DRY_RUN"] = "true"

    try:
        provider = get_provider(args.provider)
    except ValueError as e:
        logger.error(f"Invalid provider configuration: {e}")
        sys.exit(1)

    if not provider:
        logger.error("Failed to initialize reverse DNS provider")
        sys.exit(1)

    try:
        if args.command == "update":
            provider.update(args.ip, args.hostname)
        elif args.command == "remove":
            provider.remove(args.ip)
        elif args.command == "lookup":
            run_lookup(provider, args.ip, args.resolve, args.nameserver)
    except ReverseDNSProviderError as e:
        logger.error(f"✗ {e}")
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
