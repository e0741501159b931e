"""
LiveKit room client used by the healthcheck.

Thin adapter over the LiveKit SDKs:
- ``livekit-api`` signs the access token (room_join grant)
- ``livekit`` (rtc) opens the room connection
"""

import logging
from typing import Awaitable, Callable, Optional, Protocol

from livekit import api, rtc

logger = logging.getLogger(__name__)


class RoomSession(Protocol):
    """Connected session as seen by the healthcheck."""

    @property
    def identity(self) -> str:
        ...

    async def disconnect(self) -> None:
        ...


# connector(host, api_key, api_secret, room_name, identity) -> RoomSession
Connector = Callable[[str, str, str, str, str], Awaitable[RoomSession]]


class LiveKitRoomSession:
    """Wraps an ``rtc.Room`` after a successful connect."""

    def __init__(self, room: rtc.Room):
        self._room = room

    @property
    def identity(self) -> str:
        return self._room.local_participant.identity

    async def disconnect(self) -> None:
        await self._room.disconnect()


def build_token(
    api_key: str,
    api_secret: str,
    room_name: str,
    identity: str,
    name: Optional[str] = None,
) -> str:
    """Sign a join token for a single room."""
    # AccessToken falls back to LIVEKIT_API_KEY/SECRET env vars when empty
    if not api_key or not api_secret:
        raise ValueError("api key and secret must be set")

    grants = api.VideoGrants(room_join=True, room=room_name)
    token = (
        api.AccessToken(api_key, api_secret)
        .with_identity(identity)
        .with_name(name or identity)
        .with_grants(grants)
    )
    return token.to_jwt()


async def connect_to_room(
    host: str,
    api_key: str,
    api_secret: str,
    room_name: str,
    identity: str,
) -> LiveKitRoomSession:
    """
    Join ``room_name`` on ``host`` as ``identity``.

    Raises whatever the SDK raises (ValueError for empty credentials,
    ``rtc.ConnectError`` for network/auth failures).
    """
    token = build_token(api_key, api_secret, room_name, identity)

    room = rtc.Room()
    logger.debug(f"Connecting to {host} (room={room_name}, identity={identity})")
    await room.connect(host, token)
    return LiveKitRoomSession(room)
