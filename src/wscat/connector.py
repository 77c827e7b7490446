"""WebSocket connection establishment.

The handshake always targets the session's logical address: its host goes
into the Host header and TLS server name, its path into the request line,
and the derived origin into the Origin header. An override address only
replaces the TCP destination, so a peer can be reached at a literal
``ip:port`` without changing what it sees.

Examples:
    Resolve where the TCP connection actually goes::

        >>> resolve_destination("ws://example.test/path", "203.0.113.5:9000")
        Destination(host='203.0.113.5', port=9000, secure=False)
        >>> resolve_destination("wss://example.test/path", None)
        Destination(host='example.test', port=443, secure=True)

    Open a connection for a session::

        >>> connection = await open_connection(session)
        >>> await connection.send("ping")
"""

import logging
from typing import NamedTuple
from urllib.parse import urlsplit

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import WebSocketException
from websockets.typing import Origin, Subprotocol

from wscat.config import Settings, settings
from wscat.errors import ConnectError
from wscat.session import Session, is_secure

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {"ws": 80, "wss": 443}


class Destination(NamedTuple):
    """Physical TCP endpoint of a connection."""

    host: str
    port: int
    secure: bool


def _override_url(target_address: str, override_address: str) -> str:
    if override_address.startswith(("ws://", "wss://")):
        return override_address
    scheme = "wss" if is_secure(target_address) else "ws"
    return f"{scheme}://{override_address}"


def resolve_destination(
    target_address: str, override_address: str | None
) -> Destination:
    """Work out the host and port the TCP connection should use.

    The override's scheme decides whether the physical connection uses TLS,
    even when it differs from the target's.

    Args:
        target_address: Logical WebSocket URL of the session.
        override_address: Optional physical destination. Used verbatim when
            it carries a ws/wss scheme, otherwise prefixed with the target's
            scheme.

    Raises:
        ConnectError: The override is malformed.
    """
    url = target_address
    if override_address:
        url = _override_url(target_address, override_address)

    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError as e:
        raise ConnectError(target_address, f"bad address {url}: {e}") from e
    if not parts.hostname:
        raise ConnectError(target_address, f"bad address {url}: missing host")

    return Destination(
        host=parts.hostname,
        port=port or DEFAULT_PORTS[parts.scheme],
        secure=parts.scheme == "wss",
    )


def handshake_uri(target_address: str, destination: Destination) -> str:
    """URI for the handshake: the target, with the destination's ws/wss scheme.

    Host, port and path stay those of the target, so the Host header and
    TLS server name keep naming the logical host.
    """
    if destination.secure == is_secure(target_address):
        return target_address
    scheme = "wss" if destination.secure else "ws"
    return urlsplit(target_address)._replace(scheme=scheme).geturl()


async def open_connection(
    session: Session, config: Settings = settings
) -> ClientConnection:
    """Establish the WebSocket connection for a session.

    No timeout, keepalive, proxy or retry is applied: the first failure is
    final.

    Raises:
        ConnectError: DNS, TCP, TLS or handshake failure.
    """
    destination = resolve_destination(
        session.target_address, session.override_address
    )
    subprotocols = [Subprotocol(session.subprotocol)] if session.subprotocol else None
    logger.info(
        "Connecting to %s via %s:%d%s (origin %s)",
        session.target_address,
        destination.host,
        destination.port,
        " with TLS" if destination.secure else "",
        session.origin,
    )

    try:
        connection = await connect(
            handshake_uri(session.target_address, destination),
            origin=Origin(session.origin),
            subprotocols=subprotocols,
            open_timeout=None,
            ping_interval=None,
            max_size=config.max_size,
            proxy=None,
            host=destination.host,
            port=destination.port,
        )
    except (OSError, WebSocketException, ValueError) as e:
        raise ConnectError(session.target_address, str(e) or type(e).__name__) from e

    logger.debug(
        "Connected to %s (subprotocol %s)",
        session.target_address,
        connection.subprotocol,
    )
    return connection
