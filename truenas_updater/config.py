"""Configuration management for truenas-updater.

This module handles the global INI settings file and the immutable
``UpdateConfig`` that a single update run is driven by. Values resolve in
this order: command-line flag, environment variable, settings file, built-in
default. Secrets (the TrueNAS API key and the Plex token) are only ever read
from flags or the environment and are never written to the settings file.
"""

import configparser
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TypedDict

from truenas_updater.constants import (
    CONFIG_DIR_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_CONFIG_SUBDIR,
    DEFAULT_CONSOLE_LOG_LEVEL,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_WAIT_SECONDS,
    DEFAULT_PLEX_PORT,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_TRUENAS_HOST,
    ENV_API_KEY,
    ENV_API_KEY_FALLBACK,
    ENV_PLEX_TOKEN,
    KEY_CHECK_SESSIONS,
    KEY_CONSOLE_LOG_LEVEL,
    KEY_HOST,
    KEY_INTERVAL_SECONDS,
    KEY_LOG_LEVEL,
    KEY_LOGS,
    KEY_MAX_WAIT_SECONDS,
    KEY_PORT,
    SECTION_DEFAULT,
    SECTION_DIRECTORY,
    SECTION_PLEX,
    SECTION_POLL,
    SECTION_TRUENAS,
)


class TrueNASSettings(TypedDict):
    """Management API connection settings."""

    host: str


class PlexSettings(TypedDict):
    """Plex session check settings."""

    host: str
    port: int
    check_sessions: bool


class PollSettings(TypedDict):
    """Completion polling settings."""

    max_wait_seconds: int
    interval_seconds: int


class DirectoryConfig(TypedDict):
    """Directory paths configuration."""

    logs: Path


class GlobalConfig(TypedDict):
    """Global application configuration."""

    log_level: str
    console_log_level: str
    truenas: TrueNASSettings
    plex: PlexSettings
    poll: PollSettings
    directory: DirectoryConfig


@dataclass(slots=True, frozen=True)
class UpdateConfig:
    """Immutable settings for one update run.

    Attributes:
        host: TrueNAS host or IP
        api_key: TrueNAS API key sent as a bearer token
        dry_run: Report what would be updated without triggering anything
        force: Update regardless of state, update flag, or Plex sessions
        wait: Poll each upgrade until it settles before moving on
        plex_check_sessions: Check Plex for active playback before updating it
        plex_host: Plex host override, empty to auto-detect
        plex_port: Plex server port
        plex_token: Plex authentication token
        max_wait_seconds: Upper bound for completion polling
        poll_interval_seconds: Delay between completion polls

    """

    host: str
    api_key: str
    dry_run: bool = False
    force: bool = False
    wait: bool = False
    plex_check_sessions: bool = True
    plex_host: str = ""
    plex_port: int = DEFAULT_PLEX_PORT
    plex_token: str = ""
    max_wait_seconds: int = DEFAULT_MAX_WAIT_SECONDS
    poll_interval_seconds: int = DEFAULT_POLL_INTERVAL_SECONDS


def _parse_bool(value: str | bool, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    normalized = value.strip().lower()
    if normalized in ("true", "yes", "on", "1"):
        return True
    if normalized in ("false", "no", "off", "0"):
        return False
    return default


class DirectoryManager:
    """Manages directory operations and path resolution."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize directory manager.

        Args:
            config_dir: Optional custom config directory. Defaults to
                ~/.config/truenas-updater/

        """
        self._config_dir: Path = (
            config_dir or Path.home() / CONFIG_DIR_NAME / DEFAULT_CONFIG_SUBDIR
        )
        self._settings_file: Path = self._config_dir / CONFIG_FILE_NAME

    @property
    def config_dir(self) -> Path:
        """Get the configuration directory path."""
        return self._config_dir

    @property
    def settings_file(self) -> Path:
        """Get the settings file path."""
        return self._settings_file

    def expand_path(self, path_str: str) -> Path:
        """Expand and resolve path with ~ and relative path support."""
        return Path(path_str).expanduser().resolve()

    def ensure_user_directories(self) -> None:
        """Create the config directory if it doesn't exist."""
        self._config_dir.mkdir(parents=True, exist_ok=True)


class GlobalConfigManager:
    """Manages global INI configuration."""

    def __init__(self, directory_manager: DirectoryManager) -> None:
        self.directory_manager = directory_manager

    def get_default_global_config(self) -> dict[str, str | dict[str, str]]:
        """Get default global configuration values.

        Returns:
            Default configuration dictionary

        """
        return {
            KEY_LOG_LEVEL: DEFAULT_LOG_LEVEL,
            KEY_CONSOLE_LOG_LEVEL: DEFAULT_CONSOLE_LOG_LEVEL,
            SECTION_TRUENAS: {KEY_HOST: DEFAULT_TRUENAS_HOST},
            SECTION_PLEX: {
                KEY_HOST: "",
                KEY_PORT: str(DEFAULT_PLEX_PORT),
                KEY_CHECK_SESSIONS: "true",
            },
            SECTION_POLL: {
                KEY_MAX_WAIT_SECONDS: str(DEFAULT_MAX_WAIT_SECONDS),
                KEY_INTERVAL_SECONDS: str(DEFAULT_POLL_INTERVAL_SECONDS),
            },
            SECTION_DIRECTORY: {
                KEY_LOGS: str(self.directory_manager.config_dir / "logs"),
            },
        }

    def load_global_config(self) -> GlobalConfig:
        """Load global configuration from INI file.

        A settings file with default values is written on first use.

        Returns:
            Loaded global configuration

        """
        config = configparser.ConfigParser()

        defaults = self.get_default_global_config()
        flat_defaults = {
            key: value
            for key, value in defaults.items()
            if not isinstance(value, dict)
        }
        config.read_dict({SECTION_DEFAULT: flat_defaults})

        for key, value in defaults.items():
            if isinstance(value, dict):
                config.add_section(key)
                for subkey, subvalue in value.items():
                    config.set(key, subkey, str(subvalue))

        if self.directory_manager.settings_file.exists():
            config.read(self.directory_manager.settings_file, encoding="utf-8")
        else:
            self.save_global_config(self._convert_to_global_config(config))

        return self._convert_to_global_config(config)

    def save_global_config(self, config: GlobalConfig) -> None:
        """Save global configuration to INI file.

        Args:
            config: Global configuration to save

        """
        parser = configparser.ConfigParser()

        parser[SECTION_DEFAULT] = {
            KEY_LOG_LEVEL: config["log_level"],
            KEY_CONSOLE_LOG_LEVEL: config["console_log_level"],
        }
        parser[SECTION_TRUENAS] = {KEY_HOST: config["truenas"]["host"]}
        parser[SECTION_PLEX] = {
            KEY_HOST: config["plex"]["host"],
            KEY_PORT: str(config["plex"]["port"]),
            KEY_CHECK_SESSIONS: str(config["plex"]["check_sessions"]).lower(),
        }
        parser[SECTION_POLL] = {
            KEY_MAX_WAIT_SECONDS: str(config["poll"]["max_wait_seconds"]),
            KEY_INTERVAL_SECONDS: str(config["poll"]["interval_seconds"]),
        }
        parser[SECTION_DIRECTORY] = {
            KEY_LOGS: str(config["directory"]["logs"]),
        }

        self.directory_manager.ensure_user_directories()
        with open(
            self.directory_manager.settings_file, "w", encoding="utf-8"
        ) as f:
            parser.write(f)

    def _convert_to_global_config(
        self, config: configparser.ConfigParser
    ) -> GlobalConfig:
        """Convert a populated configparser into a typed GlobalConfig.

        Args:
            config: Configuration to convert

        Returns:
            Typed global configuration

        """
        return GlobalConfig(
            log_level=config.get(SECTION_DEFAULT, KEY_LOG_LEVEL).upper(),
            console_log_level=config.get(
                SECTION_DEFAULT, KEY_CONSOLE_LOG_LEVEL
            ).upper(),
            truenas=TrueNASSettings(
                host=config.get(SECTION_TRUENAS, KEY_HOST).strip()
                or DEFAULT_TRUENAS_HOST,
            ),
            plex=PlexSettings(
                host=config.get(SECTION_PLEX, KEY_HOST).strip(),
                port=config.getint(
                    SECTION_PLEX, KEY_PORT, fallback=DEFAULT_PLEX_PORT
                ),
                check_sessions=_parse_bool(
                    config.get(SECTION_PLEX, KEY_CHECK_SESSIONS), True
                ),
            ),
            poll=PollSettings(
                max_wait_seconds=config.getint(
                    SECTION_POLL,
                    KEY_MAX_WAIT_SECONDS,
                    fallback=DEFAULT_MAX_WAIT_SECONDS,
                ),
                interval_seconds=config.getint(
                    SECTION_POLL,
                    KEY_INTERVAL_SECONDS,
                    fallback=DEFAULT_POLL_INTERVAL_SECONDS,
                ),
            ),
            directory=DirectoryConfig(
                logs=self.directory_manager.expand_path(
                    config.get(SECTION_DIRECTORY, KEY_LOGS)
                ),
            ),
        )


class ConfigManager:
    """Facade over directory and global settings management."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize configuration manager.

        Args:
            config_dir: Optional custom config directory

        """
        self.directory_manager = DirectoryManager(config_dir)
        self.global_config_manager = GlobalConfigManager(
            self.directory_manager
        )

    @property
    def config_dir(self) -> Path:
        return self.directory_manager.config_dir

    @property
    def settings_file(self) -> Path:
        return self.directory_manager.settings_file

    def load_global_config(self) -> GlobalConfig:
        return self.global_config_manager.load_global_config()


def resolve_api_key(
    flag_value: str | None, environ: Mapping[str, str] | None = None
) -> str:
    """Resolve the TrueNAS API key from a flag or the environment.

    Args:
        flag_value: Value given on the command line, if any
        environ: Environment mapping, defaults to ``os.environ``

    Returns:
        API key, or an empty string when none is configured

    """
    env = os.environ if environ is None else environ
    if flag_value:
        return flag_value
    return env.get(ENV_API_KEY) or env.get(ENV_API_KEY_FALLBACK) or ""


def build_update_config(
    global_config: GlobalConfig,
    *,
    host: str | None = None,
    api_key: str | None = None,
    dry_run: bool = False,
    force: bool = False,
    wait: bool = False,
    plex_token: str | None = None,
    plex_host: str | None = None,
    plex_port: int | None = None,
    skip_plex_check: bool = False,
    max_wait_seconds: int | None = None,
    poll_interval_seconds: int | None = None,
    environ: Mapping[str, str] | None = None,
) -> UpdateConfig:
    """Merge command-line values, environment and settings into UpdateConfig.

    Returns:
        Frozen configuration for one run

    """
    env = os.environ if environ is None else environ
    plex = global_config["plex"]
    poll = global_config["poll"]

    return UpdateConfig(
        host=host or global_config["truenas"]["host"],
        api_key=resolve_api_key(api_key, env),
        dry_run=dry_run,
        force=force,
        wait=wait,
        plex_check_sessions=plex["check_sessions"] and not skip_plex_check,
        plex_host=plex_host if plex_host is not None else plex["host"],
        plex_port=plex_port if plex_port is not None else plex["port"],
        plex_token=plex_token or env.get(ENV_PLEX_TOKEN, ""),
        max_wait_seconds=(
            max_wait_seconds
            if max_wait_seconds is not None
            else poll["max_wait_seconds"]
        ),
        poll_interval_seconds=(
            poll_interval_seconds
            if poll_interval_seconds is not None
            else poll["interval_seconds"]
        ),
    )
