"""Subcommand modules for projctl.

register_commands() imports lazily so ``projctl --help`` stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the ``dep`` group and the standalone commands on the root group."""
    from projctl.commands.dependency import dep

    cli.add_command(dep)

    from projctl.commands.handler import handlers
    from projctl.commands.project import create, init_cmd, list_cmd, set_cmd, show

    cli.add_command(list_cmd)
    cli.add_command(show)
    cli.add_command(init_cmd)
    cli.add_command(create)
    cli.add_command(set_cmd)
    cli.add_command(handlers)
