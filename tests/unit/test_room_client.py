"""
Tests for the LiveKit room client adapter.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from livekit import api

from livekit_healthcheck.room_client import LiveKitRoomSession, build_token, connect_to_room

API_KEY = "APIhealthcheck"
API_SECRET = "0123456789abcdef0123456789abcdef"


class TestBuildToken:
    """Tests for build_token."""

    def test_token_grants_single_room(self):
        token = build_token(API_KEY, API_SECRET, "healthroom", "livekit-healthcheck")

        claims = api.TokenVerifier(API_KEY, API_SECRET).verify(token)

        assert claims.identity == "livekit-healthcheck"
        assert claims.video.room == "healthroom"
        assert claims.video.room_join is True

    @pytest.mark.parametrize("api_key,api_secret", [("", API_SECRET), (API_KEY, ""), ("", "")])
    def test_empty_credentials_rejected(self, api_key, api_secret):
        with pytest.raises(ValueError):
            build_token(api_key, api_secret, "healthroom", "livekit-healthcheck")


class TestConnectToRoom:
    """Tests for connect_to_room."""

    @pytest.fixture
    def mock_room(self):
        room = MagicMock()
        room.connect = AsyncMock()
        room.disconnect = AsyncMock()
        room.local_participant.identity = "livekit-healthcheck"
        return room

    @pytest.mark.asyncio
    async def test_connects_with_signed_token(self, mock_room, host):
        with patch("livekit_healthcheck.room_client.rtc.Room", return_value=mock_room):
            session = await connect_to_room(
                host, API_KEY, API_SECRET, "healthroom", "livekit-healthcheck"
            )

        mock_room.connect.assert_awaited_once()
        url, token = mock_room.connect.call_args.args
        assert url == host
        assert api.TokenVerifier(API_KEY, API_SECRET).verify(token).identity == "livekit-healthcheck"

        assert isinstance(session, LiveKitRoomSession)
        assert session.identity == "livekit-healthcheck"

        await session.disconnect()
        mock_room.disconnect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_connect_error_propagates(self, mock_room, host):
        mock_room.connect.side_effect = RuntimeError("failed to connect")

        with patch("livekit_healthcheck.room_client.rtc.Room", return_value=mock_room):
            with pytest.raises(RuntimeError, match="failed to connect"):
                await connect_to_room(host, API_KEY, API_SECRET, "healthroom", "livekit-healthcheck")

    @pytest.mark.asyncio
    async def test_empty_credentials_fail_before_connect(self, mock_room, host):
        with patch("livekit_healthcheck.room_client.rtc.Room", return_value=mock_room):
            with pytest.raises(ValueError):
                await connect_to_room(host, "", "", "healthroom", "livekit-healthcheck")

        mock_room.connect.assert_not_awaited()
