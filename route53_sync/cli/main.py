#!/usr/bin/env python3
"""
Route53 Sync - Command Line Interface

Main entry point for the route53-sync CLI.
"""

import argparse
import logging
import sys
from typing import Dict

import yaml

from ..core.sync_manager import SyncManager
from ..core.synchronizer import SYNC_MODES

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="route53-sync",
        description="Route53 Sync - Keep a local DNS mirror and Route 53 consistent",
    )

    parser.add_argument(
        "--config",
        "-c",
        default="configs/config.yaml",
        help="Configuration file path (default: configs/config.yaml)",
    )

    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    for command, help_text in (
        ("pull", "Mirror remote hosted zones and record sets locally"),
        ("push", "Push local record set changes to the remote side"),
        ("sync", "Synchronize both directions under a conflict mode"),
    ):
        subparser = subparsers.add_parser(command, help=help_text)
        subparser.add_argument(
            "--account",
            "-a",
            help="Comma separated account names, account ids or UUIDs (default: all enabled)",
        )
        subparser.add_argument("--zone", "-z", help="Hosted zone id to synchronize")
        subparser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be changed without making changes",
        )
        subparser.add_argument(
            "--output-file",
            "-o",
            help="File to save dry run output (only used with --dry-run)",
        )
        if command == "sync":
            subparser.add_argument(
                "--mode",
                "-m",
                choices=SYNC_MODES,
                default="local_wins",
                help="Conflict mode (default: local_wins)",
            )

    accounts_parser = subparsers.add_parser("accounts", help="List configured accounts")
    accounts_parser.add_argument(
        "--account", "-a", help="Comma separated account names, account ids or UUIDs"
    )

    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    if getattr(args, "output_file", None) and not args.dry_run:
        print("Error: --output-file can only be used with --dry-run")
        sys.exit(1)

    config = load_config(args.config)
    config_logger(config, args.verbose)

    try:
        sync_manager = SyncManager(config)

        if args.command == "accounts":
            sync_manager.list_accounts(args.account)
            sys.exit(0)

        success = sync_manager.run(
            args.command,
            account_filter=args.account,
            zone_id=args.zone,
            dry_run=args.dry_run,
            mode=getattr(args, "mode", "local_wins"),
            output_file=args.output_file if args.dry_run else None,
        )

        if success:
            print(f"Route53 {args.command} completed successfully")
            sys.exit(0)
        else:
            print(f"Route53 {args.command} failed")
            sys.exit(1)

    except Exception as e:
        print(f"Error: {e}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)


def load_config(config_path: str) -> Dict:
    """Load configuration from YAML file."""
    try:
        with open(config_path, "r") as f:
            config = yaml.safe_load(f) or {}
        logger.info(f"Configuration loaded from {config_path}")
        return config
    except FileNotFoundError:
        logger.warning(f"Config file {config_path} not found, using defaults")
        return get_default_config()
    except yaml.YAMLError as e:
        print(f"Error parsing config file: {e}")
        sys.exit(1)


def get_default_config() -> Dict:
    """Return default configuration."""
    return {
        "provider": "mock",
        "accounts": [{"name": "default", "credentials": {"type": "env"}}],
        "logging": {"level": "INFO", "file": "route53_sync.log"},
    }


def config_logger(config: Dict, verbose: bool = False):
    """Configure logging."""
    logging_config = config.get("logging", None)
    if logging_config:
        log_level = "DEBUG" if verbose else logging_config.get("level", "INFO")
        log_file = logging_config.get("file", "route53_sync.log")

        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            handlers=[
                logging.FileHandler(log_file),
                logging.StreamHandler(sys.stdout),
            ],
        )
        return

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


if __name__ == "__main__":
    main()
