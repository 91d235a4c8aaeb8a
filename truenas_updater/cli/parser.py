"""CLI argument parser for truenas-updater.

This module handles the parsing of command-line arguments and provides
a clean interface for defining the updater's options.
"""

import argparse
from argparse import Namespace
from collections.abc import Sequence
from typing import Any


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {value}")
    return number


class CLIParser:
    """Command-line argument parser for truenas-updater."""

    def __init__(self, global_config: dict[str, Any]) -> None:
        """Initialize the CLI parser with global configuration.

        Args:
            global_config: Global configuration dictionary, used for
                defaults shown in help text

        """
        self.global_config = global_config

    def parse_args(self, argv: Sequence[str] | None = None) -> Namespace:
        """Parse command-line arguments.

        Args:
            argv: Arguments to parse, defaults to ``sys.argv[1:]``

        Returns:
            Parsed arguments namespace

        """
        parser = self._create_main_parser()
        self._add_connection_options(parser)
        self._add_behavior_options(parser)
        self._add_plex_options(parser)
        return parser.parse_args(argv)

    def _create_main_parser(self) -> argparse.ArgumentParser:
        """Create the main argument parser.

        Returns:
            The configured main ArgumentParser instance

        """
        return argparse.ArgumentParser(
            prog="truenas-updater",
            description="Update all applications on TrueNAS Scale",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  %(prog)s --api-key your-api-key-here
  %(prog)s --host 192.168.1.100 --api-key your-key --dry-run
  %(prog)s --api-key your-key --plex-token your-plex-token --force

The API key may also be supplied through the TRUENAS_API_KEY environment
variable, and the Plex token through PLEX_TOKEN.

To create an API key:
  1. Log into TrueNAS Scale web interface
  2. Click the user icon -> My API Keys
  3. Click Add to create a new key
  4. Copy the generated key and use it with this script
            """,
        )

    def _add_connection_options(self, parser: argparse.ArgumentParser) -> None:
        truenas = self.global_config.get("truenas", {})
        parser.add_argument(
            "-H",
            "--host",
            default=None,
            help=(
                "TrueNAS host/IP "
                f"(default: {truenas.get('host', 'localhost')})"
            ),
        )
        parser.add_argument(
            "-k", "--api-key", default=None, help="API key for authentication"
        )
        parser.add_argument(
            "--version", action="store_true", help="Show version and exit"
        )
        parser.add_argument(
            "--verbose", action="store_true", help="Show detailed logging"
        )

    def _add_behavior_options(self, parser: argparse.ArgumentParser) -> None:
        poll = self.global_config.get("poll", {})
        parser.add_argument(
            "-d",
            "--dry-run",
            action="store_true",
            help="Show what would be updated without actually updating",
        )
        parser.add_argument(
            "-f",
            "--force",
            action="store_true",
            help="Force update even if no updates appear available",
        )
        parser.add_argument(
            "-w",
            "--wait",
            action="store_true",
            help="Wait for each update to complete before starting the next",
        )
        parser.add_argument(
            "--max-wait",
            type=_positive_int,
            default=None,
            help=(
                "Seconds to wait for each update with --wait "
                f"(default: {poll.get('max_wait_seconds', 600)})"
            ),
        )
        parser.add_argument(
            "--poll-interval",
            type=_positive_int,
            default=None,
            help=(
                "Seconds between status checks with --wait "
                f"(default: {poll.get('interval_seconds', 10)})"
            ),
        )

    def _add_plex_options(self, parser: argparse.ArgumentParser) -> None:
        plex = self.global_config.get("plex", {})
        parser.add_argument(
            "-t",
            "--plex-token",
            default=None,
            help="Plex authentication token for session checking",
        )
        parser.add_argument(
            "--plex-host", default=None, help="Override Plex server IP"
        )
        parser.add_argument(
            "--plex-port",
            type=_positive_int,
            default=None,
            help=f"Override Plex server port (default: {plex.get('port', 32400)})",
        )
        parser.add_argument(
            "--skip-plex-check",
            action="store_true",
            help="Skip Plex session detection entirely",
        )
