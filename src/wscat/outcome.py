"""Map the end of a run to a diagnostic and a process exit code.

This is the only place that decides exit codes. The CLI passes whatever
the run raised (or None on success) and exits with the returned code.

Examples:
    >>> exit_code(None)
    0
    >>> describe(SendError("reading input failed: boom"))
    '[Fatal] send error: reading input failed: boom'
"""

import logging
from typing import TextIO

import typer

from wscat.errors import ConnectError, FileOpenError, Outcome, RelayError

logger = logging.getLogger(__name__)

EXIT_CODES: dict[Outcome, int] = {
    Outcome.SUCCESS: 0,
    Outcome.CONFIGURATION_ERROR: 2,
    Outcome.URL_PARSE_ERROR: 2,
    Outcome.CONNECT_FAILURE: 3,
    Outcome.SEND_ERROR: 4,
    Outcome.RECEIVE_ERROR: 5,
}

_HEADLINES: dict[Outcome, str] = {
    Outcome.CONFIGURATION_ERROR: "invalid URL",
    Outcome.URL_PARSE_ERROR: "URL parsing",
    Outcome.SEND_ERROR: "send error",
    Outcome.RECEIVE_ERROR: "receive error",
}


def outcome_of(error: RelayError | None) -> Outcome:
    return Outcome.SUCCESS if error is None else error.outcome


def exit_code(error: RelayError | None) -> int:
    return EXIT_CODES[outcome_of(error)]


def describe(error: RelayError) -> str:
    """One-line diagnostic for a failed run."""
    match error:
        case ConnectError():
            headline = f"cannot connect to server: {error.target_address}"
        case FileOpenError():
            headline = f"cannot open {error.path}"
        case _:
            headline = _HEADLINES[error.outcome]
    if error.detail:
        return f"[Fatal] {headline}: {error.detail}"
    return f"[Fatal] {headline}"


def report(error: RelayError | None, err_stream: TextIO | None = None) -> int:
    """Emit the diagnostic for a failed run and return its exit code.

    Args:
        error: What the run raised, or None when it succeeded.
        err_stream: Where to write the diagnostic. Defaults to stderr.
    """
    code = exit_code(error)
    if error is None:
        logger.debug("Run succeeded")
        return code

    logger.debug("Run failed (%s), exit code %d", error.outcome, code)
    typer.secho(describe(error), file=err_stream, fg=typer.colors.RED, err=True)
    return code
