"""Command-line entry point.

Relays lines between a local file (or stdin/stdout) and a WebSocket
server. Exits 0 when the server closes the connection cleanly and, if
``-e`` was given, the last message received equals it.

Usage:
    wscat ws://echo.example.test/
    wscat -c wss://example.test/feed -e done -i requests.txt -o replies.txt
    wscat -resolve 203.0.113.5:9000 ws://example.test/path
"""

import asyncio
import logging
import sys
from contextlib import ExitStack
from typing import Annotated, TextIO

import typer

from wscat.config import settings
from wscat.errors import FileOpenError, RelayError
from wscat.outcome import report
from wscat.relay import run_session
from wscat.session import Session, parse_target
from wscat.version import VERSION

logger = logging.getLogger(__name__)

DEFAULT_SUBPROTOCOL = "tcp"

app = typer.Typer(
    name="wscat",
    help="Relay lines between a local stream and a WebSocket connection.",
    add_completion=False,
    pretty_exceptions_show_locals=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"wscat {VERSION}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else settings.log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _open(stack: ExitStack, path: str, mode: str, default: TextIO) -> TextIO:
    """Open a local file, or fall back to a standard stream when no path is set."""
    if not path:
        return default
    # Input lines end only at "\n", as on stdin; a bare "\r" stays in the line.
    newline = "\n" if mode == "r" else None
    try:
        return stack.enter_context(
            open(path, mode, encoding="utf-8", newline=newline)
        )
    except OSError as e:
        raise FileOpenError(path, e.strerror or str(e)) from e


def _build_session(
    stack: ExitStack,
    *,
    target: str,
    input_file: str,
    output_file: str,
    success_match: str,
    raw: str,
    resolve: str,
    protocol: str,
) -> Session:
    # The URL is checked before any file is opened or created.
    parse_target(target)
    return Session(
        target_address=target,
        override_address=resolve,
        success_match=success_match,
        raw_output=bool(raw),
        subprotocol=protocol,
        input_stream=_open(stack, input_file, "r", sys.stdin),
        output_stream=_open(stack, output_file, "w", sys.stdout),
    )


@app.command()
def main(
    urls: Annotated[
        list[str] | None,
        typer.Argument(
            help="WebSocket URL; the last one is used when -c is not given",
            show_default=False,
        ),
    ] = None,
    connect: Annotated[
        str,
        typer.Option("-c", help="WebSocket URL to connect to, e.g. ws://echo.example.test/"),
    ] = "",
    input_file: Annotated[
        str,
        typer.Option("-i", help="File to read outbound lines from (default: stdin)"),
    ] = "",
    output_file: Annotated[
        str,
        typer.Option("-o", help="File to write inbound messages to (default: stdout)"),
    ] = "",
    success_match: Annotated[
        str,
        typer.Option("-e", help="Succeed only if the last inbound message equals this"),
    ] = "",
    raw: Annotated[
        str,
        typer.Option("-r", help="Any non-empty value disables colored output"),
    ] = "",
    resolve: Annotated[
        str,
        typer.Option(
            "-resolve",
            "--resolve",
            help="Physical destination (ip:port or ws[s]:// URL) for the URL's host",
        ),
    ] = "",
    protocol: Annotated[
        str,
        typer.Option(
            "-protocol",
            "--protocol",
            help='WebSocket subprotocol to request; pass "" to request none',
        ),
    ] = DEFAULT_SUBPROTOCOL,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit",
        ),
    ] = False,
) -> None:
    """Relay lines between a local stream and a WebSocket connection."""
    _configure_logging(verbose)
    target = connect or (urls[-1] if urls else "")

    error: RelayError | None = None
    with ExitStack() as stack:
        try:
            session = _build_session(
                stack,
                target=target,
                input_file=input_file,
                output_file=output_file,
                success_match=success_match,
                raw=raw,
                resolve=resolve,
                protocol=protocol,
            )
            asyncio.run(run_session(session))
        except RelayError as e:
            logger.debug("Relay failed", exc_info=True)
            error = e

    raise typer.Exit(report(error))


if __name__ == "__main__":
    app()
