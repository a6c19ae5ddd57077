"""Commands: list, show, init, create, set."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from projctl.commands._base import KEY_VALUE, ProjCommand

if TYPE_CHECKING:
    from projctl.commands._context import AppContext


def _properties(pairs: tuple[tuple[str, Any], ...]) -> dict[str, Any]:
    return dict(pairs)


@click.command(
    "list",
    cls=ProjCommand,
    examples="""\
  projctl list
  projctl --json list
  projctl -q list""",
)
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List every project in the workspace."""
    app.emit(app.projects.list_projects())


@click.command(
    cls=ProjCommand,
    examples="""\
  projctl show app
  projctl show app/src/main.py
  projctl --json show app""",
)
@click.argument("path")
@click.pass_obj
def show(app: AppContext, path: str) -> None:
    """Show the project that PATH belongs to."""
    app.emit(app.projects.show_project(path))


@click.command(
    "init",
    cls=ProjCommand,
    examples="""\
  projctl init app
  projctl init app --name App
  projctl init app --name App --set Version=1 --set Owner=platform""",
)
@click.argument("folder")
@click.option("--name", default=None, help="Project name written to project.json.")
@click.option(
    "--set",
    "pairs",
    type=KEY_VALUE,
    multiple=True,
    help="Initial property (repeatable). Values are parsed as JSON when possible.",
)
@click.pass_obj
def init_cmd(app: AppContext, folder: str, name: str | None, pairs: tuple) -> None:
    """Create project.json in an existing FOLDER."""
    app.emit(app.projects.init_project(folder, name=name, properties=_properties(pairs)))


@click.command(
    cls=ProjCommand,
    examples="""\
  projctl create api
  projctl create api --set Version=1
  projctl --json create web --set 'Tags=["frontend"]'""",
)
@click.argument("name")
@click.option(
    "--set",
    "pairs",
    type=KEY_VALUE,
    multiple=True,
    help="Initial property (repeatable). Values are parsed as JSON when possible.",
)
@click.pass_obj
def create(app: AppContext, name: str, pairs: tuple) -> None:
    """Create a new top-level project folder NAME."""
    app.emit(app.projects.create_project(name, properties=_properties(pairs)))


@click.command(
    "set",
    cls=ProjCommand,
    examples="""\
  projctl set app Version=2
  projctl set app Owner=platform 'Tags=["core"]'""",
)
@click.argument("folder")
@click.argument("pairs", type=KEY_VALUE, nargs=-1, required=True)
@click.pass_obj
def set_cmd(app: AppContext, folder: str, pairs: tuple) -> None:
    """Merge KEY=VALUE properties into FOLDER's project.json."""
    app.emit(app.projects.set_properties(folder, _properties(pairs)))
