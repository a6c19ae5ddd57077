"""Command group: dependency management (add, remove, resolve)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from projctl.commands._base import ProjGroup

if TYPE_CHECKING:
    from projctl.commands._context import AppContext


_DEP_EXAMPLES = """\
  projctl dep add app file lib/utils.py
  projctl dep add app git https://example.com/acme/lib.git --name lib
  projctl dep remove app file lib/utils.py
  projctl --json dep resolve app"""


@click.group(cls=ProjGroup, examples=_DEP_EXAMPLES)
def dep() -> None:
    """Declare, remove, and resolve project dependencies."""


@dep.command(
    examples="""\
  projctl dep add app file lib/utils.py
  projctl dep add app git https://example.com/acme/lib.git --name lib"""
)
@click.argument("folder")
@click.argument("dep_type", metavar="TYPE")
@click.argument("location")
@click.option("--name", default=None, help="Display name (defaults to LOCATION).")
@click.pass_obj
def add(app: AppContext, folder: str, dep_type: str, location: str, name: str | None) -> None:
    """Add a TYPE dependency on LOCATION to FOLDER's project."""
    app.emit(app.projects.add_dependency(folder, dep_type, location, name=name))


@dep.command(
    examples="""\
  projctl dep remove app file lib/utils.py"""
)
@click.argument("folder")
@click.argument("dep_type", metavar="TYPE")
@click.argument("location")
@click.pass_obj
def remove(app: AppContext, folder: str, dep_type: str, location: str) -> None:
    """Remove every TYPE dependency on LOCATION from FOLDER's project."""
    app.emit(app.projects.remove_dependency(folder, dep_type, location))


@dep.command(
    examples="""\
  projctl dep resolve app
  projctl --json dep resolve app"""
)
@click.argument("folder")
@click.pass_obj
def resolve(app: AppContext, folder: str) -> None:
    """Resolve each dependency of FOLDER's project to a workspace entry."""
    app.emit(app.projects.resolve_dependencies(folder))
