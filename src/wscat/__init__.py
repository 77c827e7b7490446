"""WebSocket cat: relay a local text stream over a WebSocket connection.

Each input line is sent as one text message and each received message is
written as one output line. The run succeeds when the server closes the
connection cleanly and, optionally, the last message matches a given
string.

Modules:
- session: Immutable run parameters (Session), URL validation
- connector: Destination override resolution and the WebSocket handshake
- relay: Outbound/inbound loops and the termination state machine
- formatting: Highlight vs raw presentation of inbound lines
- outcome: Diagnostics and exit codes
- errors: Outcome enum and RelayError hierarchy
- config: Ambient settings via pydantic-settings
- cli: typer entry point (``wscat``)
"""

from wscat.errors import (
    ConfigurationError,
    ConnectError,
    FileOpenError,
    Outcome,
    ReceiveError,
    RelayError,
    SendError,
    UrlParseError,
)
from wscat.relay import Relay, TerminationState, run_session
from wscat.session import Session
from wscat.version import VERSION

__all__ = [
    # Errors
    "ConfigurationError",
    "ConnectError",
    "FileOpenError",
    "Outcome",
    "ReceiveError",
    "RelayError",
    "SendError",
    "UrlParseError",
    # Relay
    "Relay",
    "TerminationState",
    "run_session",
    # Session
    "Session",
    "VERSION",
]
