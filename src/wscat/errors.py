"""Failure taxonomy for a relay run.

Every fatal condition is raised as a ``RelayError`` subclass at the point
it happens and travels unchanged to the CLI, which hands it to
``wscat.outcome`` for the one process-ending action.

Examples:
    >>> err = ConnectError("ws://bad.invalid/", "Name or service not known")
    >>> err.outcome
    <Outcome.CONNECT_FAILURE: 'connect failure'>
"""

from enum import StrEnum
from typing import ClassVar


class Outcome(StrEnum):
    """Terminal state of a run."""

    SUCCESS = "success"
    CONFIGURATION_ERROR = "configuration error"
    URL_PARSE_ERROR = "URL parse error"
    CONNECT_FAILURE = "connect failure"
    SEND_ERROR = "send error"
    RECEIVE_ERROR = "receive error"


class RelayError(Exception):
    """Base class for fatal relay failures.

    Args:
        detail: Human-readable explanation, shown after the diagnostic.
    """

    outcome: ClassVar[Outcome]

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail)
        self.detail = detail


class ConfigurationError(RelayError):
    """Missing address or an unusable local file."""

    outcome = Outcome.CONFIGURATION_ERROR


class UrlParseError(RelayError):
    """The target address is not a WebSocket URI."""

    outcome = Outcome.URL_PARSE_ERROR


class ConnectError(RelayError):
    """The connection could not be established."""

    outcome = Outcome.CONNECT_FAILURE

    def __init__(self, target_address: str, detail: str = "") -> None:
        super().__init__(detail)
        self.target_address = target_address


class SendError(RelayError):
    """Reading the local input failed."""

    outcome = Outcome.SEND_ERROR


class ReceiveError(RelayError):
    """The connection failed, or closed without the expected last message."""

    outcome = Outcome.RECEIVE_ERROR


class FileOpenError(ConfigurationError):
    """An input or output file could not be opened."""

    def __init__(self, path: str, detail: str = "") -> None:
        super().__init__(detail)
        self.path = path
