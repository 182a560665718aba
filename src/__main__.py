"""Allow ``python -m topstories``."""

from topstories.cli import app

app()
