"""Fixtures for driving the relay without a network.

- ``make_connection``: the ``FakeConnection`` class, a scripted peer that
  records what was sent and ends with a clean or abnormal close.
- ``make_session``: builds a ``Session`` over in-memory input and output
  streams.
"""

import asyncio
import io
from collections.abc import Callable, Iterable
from typing import TextIO

import pytest
from websockets.exceptions import ConnectionClosedError, ConnectionClosedOK
from websockets.frames import Close, CloseCode

from wscat.session import Session

SessionFactory = Callable[..., Session]


def clean_close() -> ConnectionClosedOK:
    frame = Close(CloseCode.NORMAL_CLOSURE, "")
    return ConnectionClosedOK(frame, frame, True)


def abnormal_close() -> ConnectionClosedError:
    return ConnectionClosedError(None, None)


class FakeConnection:
    """In-memory connection with scripted inbound messages.

    ``recv`` first waits until ``wait_for_sends`` messages were sent, then
    returns each scripted message in order, then raises ``close``.
    """

    def __init__(
        self,
        incoming: Iterable[str | bytes] = (),
        *,
        close: Exception | None = None,
        wait_for_sends: int = 0,
    ) -> None:
        self.sent: list[str] = []
        self._incoming = list(incoming)
        self._close = close if close is not None else clean_close()
        self._wait_for_sends = wait_for_sends
        self._enough_sent = asyncio.Event()
        if wait_for_sends == 0:
            self._enough_sent.set()

    async def send(self, message: str) -> None:
        self.sent.append(message)
        if len(self.sent) >= self._wait_for_sends:
            self._enough_sent.set()

    async def recv(self) -> str | bytes:
        await self._enough_sent.wait()
        if self._incoming:
            return self._incoming.pop(0)
        raise self._close


@pytest.fixture
def make_session() -> SessionFactory:
    """Build a Session over in-memory streams."""

    def factory(
        input_text: str | TextIO = "",
        *,
        target_address: str = "ws://example.test/path",
        **kwargs: object,
    ) -> Session:
        return Session(
            target_address=target_address,
            input_stream=(
                io.StringIO(input_text) if isinstance(input_text, str) else input_text
            ),
            output_stream=io.StringIO(),
            **kwargs,
        )

    return factory


@pytest.fixture
def make_connection() -> type[FakeConnection]:
    """The FakeConnection class, for building scripted peers."""
    return FakeConnection
