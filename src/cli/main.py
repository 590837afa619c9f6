"""Promoload CLI entry points.

This module exposes commands for coupon ingestion, lookups, and feed
discovery. It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
from pathlib import Path
import sys
from typing import Any, Sequence

from core.config import PromoConfig
from core.errors import PromoError
from ingest.source_discovery import collect_gzip_files
from store.coupon_sdk import PromoClient

DEFAULT_CONFIG_PATH = "config/config.yaml"


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="promoload", description="Promoload coupon CLI")
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to YAML config file (default: {DEFAULT_CONFIG_PATH})",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_ingest_command(subparsers)
    _add_check_command(subparsers)
    _add_collect_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Promoload CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        if args.command == "collect":
            return _run_collect_command(args)
        client = PromoClient(PromoConfig.load(args.config))
        try:
            if args.command == "ingest":
                return _run_ingest_command(client)
            if args.command == "check":
                return _run_check_command(client, args)
        finally:
            client.close()
    except PromoError as error:
        print(f"error: {error}", file=sys.stderr)
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _run_ingest_command(client: PromoClient) -> int:
    """Handle ingest command.

    Args:
        client: SDK client.

    Returns:
        Exit code.
    """
    summary = client.ingest()
    print(f"confirmed={summary.confirmed_count}")
    print(f"files={len(summary.processed_files)}")
    print(f"skipped={len(summary.skipped_files)}")
    print(f"batches={summary.flushed_batches}")
    print(f"cache_hit={str(summary.cache_hit).lower()}")
    return 0


def _run_check_command(client: PromoClient, args: argparse.Namespace) -> int:
    """Handle check command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Zero when the code is usable, one otherwise.
    """
    usable = client.is_usable(args.code.strip(), exact=args.exact)
    print("usable" if usable else "unusable")
    return 0 if usable else 1


def _run_collect_command(args: argparse.Namespace) -> int:
    """Handle collect command.

    Args:
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    for path in collect_gzip_files(Path(args.directory).expanduser()):
        print(path)
    return 0


def _add_ingest_command(subparsers: Any) -> None:
    subparsers.add_parser("ingest", help="Confirm coupon codes and populate the store")


def _add_check_command(subparsers: Any) -> None:
    check_parser = subparsers.add_parser("check", help="Check whether a coupon code is usable")
    check_parser.add_argument("code", help="Coupon code to look up")
    check_parser.add_argument(
        "--exact",
        action="store_true",
        help="Confirm filter hits against the exact set",
    )


def _add_collect_command(subparsers: Any) -> None:
    collect_parser = subparsers.add_parser("collect", help="List gzip feeds under a directory")
    collect_parser.add_argument("directory", help="Directory to search for .gz feeds")
