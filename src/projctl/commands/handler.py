"""Command: list registered project handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from projctl.commands._base import ProjCommand

if TYPE_CHECKING:
    from projctl.commands._context import AppContext


@click.command(
    cls=ProjCommand,
    examples="""\
  projctl handlers
  projctl handlers --path vendor/lib
  projctl --json handlers""",
)
@click.option("--path", default=None, help="Only handlers whose rules accept this entry.")
@click.pass_obj
def handlers(app: AppContext, path: str | None) -> None:
    """List project handlers contributed by plugins."""
    app.emit(app.projects.list_handlers(path))
