"""Allow ``python -m projctl``."""

from projctl.cli import cli

cli()
