"""Resolved, immutable parameters for one relay run.

A ``Session`` is built once from the command line and passed explicitly
to the connector and both relay loops. The target address is validated
on construction, and the ``Origin`` header value is always derived from
it.

Examples:
    >>> import io
    >>> s = Session(
    ...     target_address="wss://example.test:8443/feed",
    ...     input_stream=io.StringIO(),
    ...     output_stream=io.StringIO(),
    ... )
    >>> s.origin
    'https://example.test:8443'
"""

from typing import TextIO
from urllib.parse import SplitResult, urlsplit

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SkipValidation,
    computed_field,
    field_validator,
)

from wscat.errors import ConfigurationError, UrlParseError

WEBSOCKET_SCHEMES = ("ws", "wss")


def parse_target(address: str) -> SplitResult:
    """Parse a WebSocket address, raising the matching configuration error.

    Raises:
        ConfigurationError: The address is empty.
        UrlParseError: The address is not a ws/wss URI with a host.
    """
    if not address:
        raise ConfigurationError("no WebSocket URL given")
    try:
        parts = urlsplit(address)
    except ValueError as e:
        raise UrlParseError(f"{address}: {e}") from e
    if parts.scheme not in WEBSOCKET_SCHEMES:
        raise UrlParseError(f"{address}: scheme must be ws or wss")
    if not parts.netloc:
        raise UrlParseError(f"{address}: missing host")
    return parts


def is_secure(address: str) -> bool:
    """Whether the address uses the TLS variant of the WebSocket scheme."""
    return address.lower().startswith("wss:")


class Session(BaseModel):
    """Parameters for one relay run.

    Empty strings for the optional text fields mean "not set", so
    ``-e ""`` on the command line behaves like leaving ``-e`` out.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    target_address: str = Field(description="Logical WebSocket URL")
    override_address: str | None = Field(
        default=None, description="Physical destination (host:port or ws[s]:// URL)"
    )
    success_match: str | None = Field(
        default=None, description="Required last inbound message for success"
    )
    raw_output: bool = Field(default=False, description="Write lines unhighlighted")
    subprotocol: str | None = Field(
        default=None, description="WebSocket subprotocol to request"
    )
    input_stream: SkipValidation[TextIO]
    output_stream: SkipValidation[TextIO]

    @field_validator("target_address")
    @classmethod
    def validate_target(cls, value: str) -> str:
        parse_target(value)
        return value

    @field_validator("override_address", "success_match", "subprotocol", mode="before")
    @classmethod
    def empty_is_unset(cls, value: str | None) -> str | None:
        return value or None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def origin(self) -> str:
        """Origin header value: http(s) plus the target's host and port."""
        scheme = "https" if self.secure else "http"
        host = urlsplit(self.target_address).netloc.rpartition("@")[2]
        return f"{scheme}://{host}"

    @property
    def secure(self) -> bool:
        return is_secure(self.target_address)
