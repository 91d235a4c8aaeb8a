"""CLI runner for truenas-updater.

This module turns parsed arguments into an ``UpdateConfig``, runs the
update workflow and maps fatal errors to exit codes.
"""

import sys
from argparse import Namespace
from collections.abc import Mapping, Sequence

import aiohttp

from .. import __version__
from ..config import ConfigManager, UpdateConfig, build_update_config
from ..constants import LOG_FILE_NAME
from ..exceptions import TrueNASError
from ..logger import ConfigurationError, get_logger
from ..update import execute_update_run
from ..utils import display_banner, display_error, display_run_summary
from .parser import CLIParser

logger = get_logger(__name__)
app_logger = get_logger()


class CLIRunner:
    """CLI command runner and orchestrator."""

    def __init__(self, config_manager: ConfigManager | None = None) -> None:
        """Initialize CLI runner with shared dependencies.

        Args:
            config_manager: Optional configuration manager

        """
        self.config_manager = config_manager or ConfigManager()
        self.global_config = self.config_manager.load_global_config()

        self._setup_logging()

    def _setup_logging(self) -> None:
        """Apply log levels and file logging from global configuration."""
        app_logger.set_console_level(self.global_config["console_log_level"])
        log_file = self.global_config["directory"]["logs"] / LOG_FILE_NAME
        try:
            app_logger.setup_file_logging(
                log_file, self.global_config["log_level"]
            )
        except ConfigurationError as e:
            print(f"Warning: {e}")

    def build_config(
        self, args: Namespace, environ: Mapping[str, str] | None = None
    ) -> UpdateConfig:
        """Build the run configuration from parsed arguments.

        Args:
            args: Parsed command-line arguments
            environ: Optional environment mapping

        Returns:
            Immutable run configuration

        """
        return build_update_config(
            self.global_config,
            host=args.host,
            api_key=args.api_key,
            dry_run=args.dry_run,
            force=args.force,
            wait=args.wait,
            plex_token=args.plex_token,
            plex_host=args.plex_host,
            plex_port=args.plex_port,
            skip_plex_check=args.skip_plex_check,
            max_wait_seconds=args.max_wait,
            poll_interval_seconds=args.poll_interval,
            environ=environ,
        )

    async def run(self, argv: Sequence[str] | None = None) -> None:
        """Run the CLI application.

        Args:
            argv: Optional argument list, defaults to ``sys.argv[1:]``

        """
        try:
            parser = CLIParser(self.global_config)
            args = parser.parse_args(argv)

            if args.version:
                print(__version__)
                return

            if args.verbose:
                app_logger.set_console_level_temporarily("DEBUG")

            try:
                await self._execute(self.build_config(args))
            finally:
                if args.verbose:
                    app_logger.restore_console_level()

        except KeyboardInterrupt:
            print("\nOperation cancelled by user")
            sys.exit(1)

    async def _execute(self, config: UpdateConfig) -> None:
        """Validate the configuration and execute one update run."""
        display_banner()

        if not config.api_key:
            display_error("Error: TrueNAS API key is required")
            print(
                "Set TRUENAS_API_KEY environment variable or use "
                "--api-key option (see --help for how to create one)"
            )
            sys.exit(1)

        try:
            async with aiohttp.ClientSession() as session:
                summary = await execute_update_run(config, session)
        except TrueNASError as e:
            logger.error("Update run aborted: %s", e)
            display_error(f"Error: {e}")
            sys.exit(1)

        display_run_summary(summary)
