"""Allow ``python -m teampad``."""

from teampad.cli import app

app()
