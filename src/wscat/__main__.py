"""Allow ``python -m wscat``."""

from wscat.cli import app

app(prog_name="wscat")
