"""
Health Check for a LiveKit server.

Joins a throwaway room with a fixed participant identity and checks that the
server admitted us under that identity. The connection attempt runs as its own
task and hands its outcome back through a single-slot queue; the caller races
that queue against the timeout.

On timeout the attempt is abandoned, not cancelled. This is fine for a
one-shot CLI (the process exits right after) but a long-running service that
embeds ``run_healthcheck`` should cancel the attempt itself.
"""

import asyncio
import random
import string
import time
from dataclasses import dataclass
from typing import Optional, Set

import structlog

from .errors import (
    HealthcheckError,
    HealthcheckTimeoutError,
    IdentityMismatchError,
    TransportError,
)
from .keys import ApiCredentials, parse_keys
from .room_client import Connector, connect_to_room
from .settings import HealthcheckSettings

logger = structlog.get_logger()

HEALTHCHECK_IDENTITY = "livekit-healthcheck"
ROOM_NAME_LENGTH = 16

# Time the attempt task gets to disconnect after the outcome was consumed
RELEASE_GRACE_SECONDS = 1.0

SUCCESS_MESSAGE = "successfully connected to host"

# Abandoned attempts, referenced so the loop does not garbage-collect them
_abandoned_attempts: Set[asyncio.Task] = set()


def random_room_name(length: int = ROOM_NAME_LENGTH) -> str:
    return "".join(random.choices(string.ascii_letters, k=length))


@dataclass
class ConnectOutcome:
    """
    Result of one connection attempt.

    Exactly one of ``identity`` / ``error`` is set.
    """

    identity: Optional[str] = None
    error: Optional[HealthcheckError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class HealthcheckResult:
    """Verdict of a run that passed. Failures raise instead."""

    message: str
    room_name: str
    identity: str
    elapsed: float


def deliver_outcome(handoff: "asyncio.Queue[ConnectOutcome]", outcome: ConnectOutcome) -> bool:
    """Put the outcome in the handoff slot without blocking. False if it was dropped."""
    try:
        handoff.put_nowait(outcome)
        return True
    except asyncio.QueueFull:
        logger.warning("Outcome dropped, handoff slot already full", ok=outcome.ok)
        return False


async def attempt_connection(
    connector: Connector,
    host: str,
    credentials: ApiCredentials,
    room_name: str,
    identity: str,
    handoff: "asyncio.Queue[ConnectOutcome]",
) -> None:
    """
    Connect once, report the outcome, then release the session.

    Never raises: connector failures are wrapped in TransportError and handed
    off like any other outcome.
    """
    try:
        session = await connector(
            host,
            credentials.api_key,
            credentials.api_secret,
            room_name,
            identity,
        )
    except Exception as e:
        error = TransportError(f"failed to connect to host; {e}")
        error.__cause__ = e
        logger.debug("Connection attempt failed", host=host, error=repr(e))
        deliver_outcome(handoff, ConnectOutcome(error=error))
        return

    deliver_outcome(handoff, ConnectOutcome(identity=session.identity))

    try:
        await session.disconnect()
        logger.debug("Session released", room=room_name)
    except Exception as e:
        logger.warning("Failed to disconnect healthcheck session", room=room_name, error=str(e))


async def _release(attempt: asyncio.Task) -> None:
    """Give the attempt a moment to disconnect; abandon it if it takes longer."""
    done, _ = await asyncio.wait({attempt}, timeout=RELEASE_GRACE_SECONDS)
    if not done:
        logger.warning("Session release still pending", grace=RELEASE_GRACE_SECONDS)
        _abandon(attempt)


def _abandon(attempt: asyncio.Task) -> None:
    _abandoned_attempts.add(attempt)
    attempt.add_done_callback(_abandoned_attempts.discard)


async def run_healthcheck(
    settings: HealthcheckSettings,
    connector: Optional[Connector] = None,
    room_name: Optional[str] = None,
) -> HealthcheckResult:
    """
    Run one healthcheck against ``settings.host``.

    Args:
        settings: Run configuration (host, keys, timeout).
        connector: Opens the room; defaults to the LiveKit SDK client.
        room_name: Room to join; random when omitted.

    Returns:
        HealthcheckResult on success.

    Raises:
        ConfigError: host or keys missing.
        KeyParseError: keys could not be parsed.
        TransportError: the client failed to connect.
        IdentityMismatchError: joined under a different identity.
        HealthcheckTimeoutError: no outcome within ``settings.timeout``.
    """
    settings.require()
    credentials = parse_keys(settings.keys, strict=settings.strict_keys)

    connector = connector or connect_to_room
    room_name = room_name or random_room_name()
    identity = HEALTHCHECK_IDENTITY
    log = logger.bind(host=settings.host, room=room_name, identity=identity)
    if credentials.is_empty:
        log.warning("No usable key pair in keys, the connection will be refused")

    handoff: "asyncio.Queue[ConnectOutcome]" = asyncio.Queue(maxsize=1)
    started = time.monotonic()
    attempt = asyncio.create_task(
        attempt_connection(connector, settings.host, credentials, room_name, identity, handoff),
        name="livekit-healthcheck-attempt",
    )
    log.debug("Connection attempt started", timeout=settings.timeout)

    try:
        outcome = await asyncio.wait_for(handoff.get(), timeout=settings.timeout)
    except asyncio.TimeoutError:
        _abandon(attempt)
        log.debug("Timed out waiting for host", timeout=settings.timeout)
        raise HealthcheckTimeoutError("failed to connect to host; timeout waiting for host")

    elapsed = time.monotonic() - started
    if not outcome.ok:
        raise outcome.error

    await _release(attempt)

    if outcome.identity != identity:
        log.debug("Identity mismatch", got=outcome.identity)
        raise IdentityMismatchError(
            "failed to connect to host; identity did not match expected result"
        )

    log.debug("Healthcheck passed", elapsed=round(elapsed, 3))
    return HealthcheckResult(
        message=SUCCESS_MESSAGE,
        room_name=room_name,
        identity=outcome.identity,
        elapsed=elapsed,
    )
