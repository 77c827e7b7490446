"""Duplex relay between a local text stream and a WebSocket connection.

Two loops share one connection, split by direction:

- The outbound loop reads the input stream line by line and sends each
  line as one text message. It runs as a background task and simply stops
  at end of input.
- The inbound loop receives messages, writes each one as a line to the
  output stream and remembers the last one. Its termination ends the run:
  a clean close succeeds when no success string was given or the last
  message equals it, anything else is a ``ReceiveError``.

Reading the input happens on a daemon thread so a blocking read on a
terminal never holds up the event loop or process exit.

Examples:
    Relay a session over an established connection::

        >>> relay = Relay(session, connection)
        >>> await relay.run()
        >>> relay.state.last_message
        'ping'

    Connect and relay in one call::

        >>> await run_session(session)
"""

import asyncio
import concurrent.futures
import logging
import threading
from typing import Protocol, TextIO

import typer
from pydantic import BaseModel, Field
from websockets.exceptions import (
    ConnectionClosed,
    ConnectionClosedOK,
    WebSocketException,
)

from wscat.config import Settings, settings
from wscat.connector import open_connection
from wscat.errors import ReceiveError, SendError
from wscat.formatting import Formatter, select_formatter
from wscat.session import Session

logger = logging.getLogger(__name__)


class Connection(Protocol):
    """The parts of a WebSocket connection the relay uses."""

    async def send(self, message: str) -> None: ...

    async def recv(self) -> str | bytes: ...


def strip_line_ending(line: str) -> str:
    """Drop a trailing newline and the carriage return before it."""
    return line.removesuffix("\n").removesuffix("\r")


class LineReader:
    """Feeds lines from a blocking text stream into the running event loop.

    The hand-off queue holds a single line, so the thread reads at most one
    line ahead of the sender. A read error is passed through the queue and
    raised from ``get()`` as a ``SendError``.

    Must be created from inside a running event loop.
    """

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._loop = asyncio.get_running_loop()
        self._queue: asyncio.Queue[str | Exception | None] = asyncio.Queue(maxsize=1)
        self._thread = threading.Thread(
            target=self._pump, name="wscat-reader", daemon=True
        )

    def start(self) -> None:
        self._thread.start()

    async def get(self) -> str | None:
        """Next line without its line ending, or None at end of input."""
        item = await self._queue.get()
        if isinstance(item, Exception):
            raise SendError(f"reading input failed: {item}") from item
        return item

    def _put(self, item: str | Exception | None) -> bool:
        try:
            future = asyncio.run_coroutine_threadsafe(self._queue.put(item), self._loop)
            future.result()
        except (RuntimeError, concurrent.futures.CancelledError):
            # Event loop gone: the run is over.
            return False
        return True

    def _pump(self) -> None:
        try:
            for line in self._stream:
                if not self._put(strip_line_ending(line)):
                    return
        except (OSError, ValueError) as e:
            self._put(e)
            return
        self._put(None)


class TerminationState(BaseModel):
    """What the inbound loop has seen so far."""

    last_message: str | None = Field(default=None, description="Most recent message")
    closed_cleanly: bool = False

    def record(self, message: str) -> None:
        self.last_message = message

    def succeeded(self, success_match: str | None) -> bool:
        """Clean close, and the last message matches when a match is required."""
        if not self.closed_cleanly:
            return False
        return success_match is None or self.last_message == success_match


class Relay:
    """Runs the outbound and inbound loops over one connection.

    Args:
        session: Parameters for this run.
        connection: Established connection, owned by the relay for the run.
        formatter: Presentation of inbound lines. Defaults to the one
            selected by ``session.raw_output``.
    """

    def __init__(
        self,
        session: Session,
        connection: Connection,
        formatter: Formatter | None = None,
    ) -> None:
        self._session = session
        self._connection = connection
        self._format = formatter or select_formatter(session.raw_output)
        self.state = TerminationState()
        self.lines_sent = 0

    async def run(self) -> None:
        """Relay until the inbound loop finishes.

        Raises:
            SendError: Reading the input failed.
            ReceiveError: The connection failed, or closed cleanly without
                the required last message.
        """
        outbound = asyncio.create_task(self._outbound(), name="wscat-outbound")
        inbound = asyncio.create_task(self._inbound(), name="wscat-inbound")
        pending: set[asyncio.Task[None]] = {outbound, inbound}
        try:
            while inbound in pending:
                done, pending = await asyncio.wait(
                    pending, return_when=asyncio.FIRST_COMPLETED
                )
                if outbound in done:
                    outbound.result()
            inbound.result()
        finally:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

    async def _outbound(self) -> None:
        reader = LineReader(self._session.input_stream)
        reader.start()
        while (line := await reader.get()) is not None:
            try:
                await self._connection.send(line)
            except ConnectionClosed:
                logger.debug("Connection closed after %d lines sent", self.lines_sent)
                return
            self.lines_sent += 1
            logger.debug("> %s", line)
        logger.debug("End of input after %d lines", self.lines_sent)

    async def _inbound(self) -> None:
        while True:
            try:
                message = await self._connection.recv()
            except ConnectionClosedOK as e:
                logger.info("Connection closed cleanly: %s", e)
                self.state.closed_cleanly = True
                break
            except (WebSocketException, OSError) as e:
                raise ReceiveError(str(e) or type(e).__name__) from e

            if isinstance(message, bytes):
                message = message.decode("utf-8", errors="replace")
            logger.debug("< %s", message)
            self.state.record(message)
            self._write(message)

        if not self.state.succeeded(self._session.success_match):
            raise ReceiveError(
                f"last message {self.state.last_message!r} "
                f"does not match {self._session.success_match!r}"
            )

    def _write(self, message: str) -> None:
        try:
            typer.echo(
                self._format(message), file=self._session.output_stream, color=True
            )
        except OSError as e:
            raise ReceiveError(f"writing output failed: {e}") from e


async def run_session(session: Session, config: Settings = settings) -> None:
    """Connect, relay until the peer closes, and close the connection.

    Raises:
        ConnectError: The connection could not be established.
        SendError: Reading the input failed.
        ReceiveError: See ``Relay.run``.
    """
    connection = await open_connection(session, config)
    async with connection:
        relay = Relay(session, connection)
        await relay.run()
    logger.info(
        "Relay finished: %d lines sent, last message %r",
        relay.lines_sent,
        relay.state.last_message,
    )
