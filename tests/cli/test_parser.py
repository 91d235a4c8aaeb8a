"""Tests for the CLI argument parser."""

import pytest

from truenas_updater.cli.parser import CLIParser


@pytest.fixture
def parser() -> CLIParser:
    return CLIParser(
        {
            "truenas": {"host": "localhost"},
            "plex": {"port": 32400},
            "poll": {"max_wait_seconds": 600, "interval_seconds": 10},
        }
    )


def test_defaults(parser):
    args = parser.parse_args([])

    assert args.host is None
    assert args.api_key is None
    assert not args.dry_run
    assert not args.force
    assert not args.wait
    assert not args.skip_plex_check
    assert args.plex_port is None
    assert args.max_wait is None


def test_short_flags(parser):
    args = parser.parse_args(
        ["-H", "10.0.0.2", "-k", "key", "-d", "-f", "-w", "-t", "tok"]
    )

    assert args.host == "10.0.0.2"
    assert args.api_key == "key"
    assert args.dry_run and args.force and args.wait
    assert args.plex_token == "tok"


def test_plex_options(parser):
    args = parser.parse_args(
        ["--plex-host", "10.0.0.3", "--plex-port", "32401", "--skip-plex-check"]
    )

    assert args.plex_host == "10.0.0.3"
    assert args.plex_port == 32401
    assert args.skip_plex_check


def test_polling_options(parser):
    args = parser.parse_args(["--max-wait", "120", "--poll-interval", "5"])

    assert args.max_wait == 120
    assert args.poll_interval == 5


@pytest.mark.parametrize(
    "argv", [["--poll-interval", "0"], ["--plex-port", "-1"], ["--bogus"]]
)
def test_invalid_arguments_exit(parser, argv):
    with pytest.raises(SystemExit) as exc_info:
        parser.parse_args(argv)

    assert exc_info.value.code == 2
