"""Presentation of inbound messages.

A formatter turns a received message into the line written to the output
stream. It never changes what the relay compares for success.
"""

from collections.abc import Callable

import typer

Formatter = Callable[[str], str]


def highlight(message: str) -> str:
    """Wrap a message in green terminal color codes."""
    return typer.style(message, fg=typer.colors.GREEN)


def plain(message: str) -> str:
    return message


def select_formatter(raw_output: bool) -> Formatter:
    """Pick ``plain`` for raw output, ``highlight`` otherwise."""
    return plain if raw_output else highlight
