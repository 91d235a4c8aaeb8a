"""Tests for Plex session detection."""

from unittest.mock import AsyncMock, MagicMock

import aiohttp
import orjson
import pytest

from truenas_updater.exceptions import (
    FetchFailedError,
    MissingCredentialError,
    SessionCheckUnavailableError,
)
from truenas_updater.models import (
    AppRecord,
    AppState,
    PayloadFormat,
    SessionCheckStatus,
)
from truenas_updater.plex_sessions import (
    PlexSessionChecker,
    parse_sessions_payload,
)

from tests.helpers import make_response, make_undecodable_response

EXPECTED_SESSION_COUNT = 2


@pytest.fixture
def truenas_client() -> MagicMock:
    client = MagicMock()
    client.list_applications = AsyncMock(return_value=[])
    client.get_application_status = AsyncMock()
    return client


class TestParseSessionsPayload:
    """Test cases for the dual-format session parser."""

    def test_json_with_partial_metadata(self):
        payload = orjson.dumps(
            {
                "MediaContainer": {
                    "size": 2,
                    "Metadata": [
                        {
                            "User": {"title": "alice"},
                            "title": "Movie A",
                            "Player": {"state": "playing"},
                        },
                        {},
                    ],
                }
            }
        ).decode()

        snapshot = parse_sessions_payload(payload)

        assert snapshot.source is PayloadFormat.JSON
        assert snapshot.size == EXPECTED_SESSION_COUNT
        assert snapshot.active is True
        first, second = snapshot.sessions
        assert (first.user, first.title, first.player_state) == (
            "alice",
            "Movie A",
            "playing",
        )
        assert (second.user, second.title, second.player_state) == (
            "Unknown",
            "Unknown",
            "unknown",
        )

    def test_json_example_with_single_described_entry(self):
        payload = (
            '{"MediaContainer":{"size":2,"Metadata":[{"User":{"title":"alice"},'
            '"title":"Movie A","Player":{"state":"playing"}}]}}'
        )

        snapshot = parse_sessions_payload(payload)

        assert snapshot.size == EXPECTED_SESSION_COUNT
        assert len(snapshot.sessions) == 1
        assert str(snapshot.sessions[0]) == (
            "User: alice | Title: Movie A | State: playing"
        )

    def test_grandparent_title_fallback(self):
        payload = orjson.dumps(
            {
                "MediaContainer": {
                    "size": 1,
                    "Metadata": [{"grandparentTitle": "Some Show"}],
                }
            }
        ).decode()

        snapshot = parse_sessions_payload(payload)

        assert snapshot.sessions[0].title == "Some Show"

    def test_json_without_size_is_idle(self):
        snapshot = parse_sessions_payload('{"MediaContainer": {}}')

        assert snapshot.size == 0
        assert snapshot.active is False

    def test_json_with_string_size(self):
        snapshot = parse_sessions_payload('{"MediaContainer": {"size": "3"}}')

        assert snapshot.size == 3

    def test_legacy_zero_size_is_idle(self):
        snapshot = parse_sessions_payload(
            '<?xml version="1.0"?><MediaContainer size="0"></MediaContainer>'
        )

        assert snapshot.source is PayloadFormat.LEGACY
        assert snapshot.size == 0
        assert snapshot.active is False

    def test_legacy_active_size(self):
        snapshot = parse_sessions_payload('<MediaContainer size="4">')

        assert snapshot.size == 4
        assert snapshot.active is True
        assert snapshot.sessions == ()

    def test_unrecognized_text_is_unavailable(self):
        with pytest.raises(SessionCheckUnavailableError):
            parse_sessions_payload("<html>Unauthorized</html>")

    def test_json_array_is_unavailable(self):
        with pytest.raises(SessionCheckUnavailableError):
            parse_sessions_payload("[1, 2]")

    def test_invalid_size_is_unavailable(self):
        with pytest.raises(SessionCheckUnavailableError):
            parse_sessions_payload('{"MediaContainer": {"size": "many"}}')


class TestPlexSessionChecker:
    """Test cases for PlexSessionChecker."""

    @pytest.mark.asyncio
    async def test_disabled_check_short_circuits(
        self, make_config, mock_session, truenas_client
    ):
        checker = PlexSessionChecker(
            make_config(plex_check_sessions=False), mock_session, truenas_client
        )

        result = await checker.check_sessions()

        assert result.status is SessionCheckStatus.DISABLED
        assert result.active is False
        mock_session.get.assert_not_called()
        truenas_client.list_applications.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_token_raises(
        self, make_config, mock_session, truenas_client
    ):
        checker = PlexSessionChecker(
            make_config(plex_token=""), mock_session, truenas_client
        )

        with pytest.raises(MissingCredentialError):
            await checker.check_sessions()

        mock_session.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_active_sessions(
        self, make_config, mock_session, truenas_client
    ):
        mock_session.get.return_value = make_response(
            {
                "MediaContainer": {
                    "size": 1,
                    "Metadata": [{"User": {"title": "bob"}, "title": "Film"}],
                }
            }
        )
        checker = PlexSessionChecker(
            make_config(plex_host="10.0.0.5", plex_port=32401),
            mock_session,
            truenas_client,
        )

        result = await checker.check_sessions()

        assert result.status is SessionCheckStatus.ACTIVE
        assert result.session_count == 1
        assert result.sessions[0].user == "bob"
        assert result.host == "10.0.0.5"
        args, kwargs = mock_session.get.call_args
        assert args[0] == "http://10.0.0.5:32401/status/sessions"
        assert kwargs["params"] == {"X-Plex-Token": "plex-token"}
        assert kwargs["headers"] == {"Accept": "application/json"}
        truenas_client.list_applications.assert_not_called()

    @pytest.mark.asyncio
    async def test_idle_sessions(self, make_config, mock_session, truenas_client):
        mock_session.get.return_value = make_response('<MediaContainer size="0">')
        checker = PlexSessionChecker(
            make_config(plex_host="10.0.0.5"), mock_session, truenas_client
        )

        result = await checker.check_sessions()

        assert result.status is SessionCheckStatus.IDLE
        assert result.active is False

    @pytest.mark.asyncio
    async def test_unreachable_server_raises(
        self, make_config, mock_session, truenas_client
    ):
        mock_session.get.side_effect = aiohttp.ClientConnectionError("refused")
        checker = PlexSessionChecker(
            make_config(plex_host="10.0.0.5"), mock_session, truenas_client
        )

        with pytest.raises(SessionCheckUnavailableError) as exc_info:
            await checker.check_sessions()

        assert exc_info.value.target == "10.0.0.5:32400"

    @pytest.mark.asyncio
    async def test_unauthorized_status_raises(
        self, make_config, mock_session, truenas_client
    ):
        mock_session.get.return_value = make_response(
            "<html>401 Unauthorized</html>", status=401
        )
        checker = PlexSessionChecker(
            make_config(plex_host="10.0.0.5"), mock_session, truenas_client
        )

        with pytest.raises(SessionCheckUnavailableError):
            await checker.check_sessions()

    @pytest.mark.asyncio
    async def test_undecodable_body_raises(
        self, make_config, mock_session, truenas_client
    ):
        mock_session.get.return_value = make_undecodable_response()
        checker = PlexSessionChecker(
            make_config(plex_host="10.0.0.5"), mock_session, truenas_client
        )

        with pytest.raises(SessionCheckUnavailableError) as exc_info:
            await checker.check_sessions()

        assert exc_info.value.target == "10.0.0.5:32400"

    @pytest.mark.asyncio
    async def test_empty_body_raises(
        self, make_config, mock_session, truenas_client
    ):
        mock_session.get.return_value = make_response("")
        checker = PlexSessionChecker(
            make_config(plex_host="10.0.0.5"), mock_session, truenas_client
        )

        with pytest.raises(SessionCheckUnavailableError):
            await checker.check_sessions()


class TestResolveHost:
    """Test cases for Plex host resolution."""

    @pytest.mark.asyncio
    async def test_override_wins(self, make_config, mock_session, truenas_client):
        checker = PlexSessionChecker(
            make_config(plex_host="192.168.1.50"), mock_session, truenas_client
        )

        assert await checker.resolve_host() == "192.168.1.50"

    @pytest.mark.asyncio
    async def test_auto_detect_falls_back_to_truenas_host(
        self, make_config, mock_session, truenas_client
    ):
        plex = AppRecord(
            id="plex", name="plex", state=AppState.RUNNING, raw_state="RUNNING"
        )
        truenas_client.list_applications.return_value = [plex]
        truenas_client.get_application_status.return_value = plex
        checker = PlexSessionChecker(make_config(), mock_session, truenas_client)

        host = await checker.resolve_host()

        assert host == "truenas.local"
        truenas_client.get_application_status.assert_awaited_once_with("plex")

    @pytest.mark.asyncio
    async def test_auto_detect_matches_id_substring(
        self, make_config, mock_session, truenas_client
    ):
        plex = AppRecord(
            id="plex-media",
            name="Media Server",
            state=AppState.RUNNING,
            raw_state="RUNNING",
        )
        truenas_client.list_applications.return_value = [plex]
        checker = PlexSessionChecker(make_config(), mock_session, truenas_client)

        await checker.resolve_host()

        truenas_client.get_application_status.assert_awaited_once_with(
            "plex-media"
        )

    @pytest.mark.asyncio
    async def test_auto_detect_failure_falls_back(
        self, make_config, mock_session, truenas_client
    ):
        truenas_client.list_applications.side_effect = FetchFailedError("down")
        checker = PlexSessionChecker(make_config(), mock_session, truenas_client)

        assert await checker.resolve_host() == "truenas.local"
