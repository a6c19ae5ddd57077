"""Root CLI group for projctl with global flags and command registration."""

from __future__ import annotations

from pathlib import Path

import click

from projctl import __version__
from projctl.commands import register_commands
from projctl.commands._base import ProjGroup
from projctl.commands._context import AppContext
from projctl.config.settings import ProjSettings


@click.group(
    cls=ProjGroup,
    invoke_without_command=True,
    examples="""\
  projctl list
  projctl -w ~/work/repo init app --name App
  projctl --json dep resolve app""",
)
@click.version_option(version=__version__, prog_name="projctl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logging.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "-w",
    "--workspace",
    "root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Workspace root (default: the config file's directory, else CWD).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    root: Path | None,
) -> None:
    """projctl: project descriptor and dependency CLI."""
    settings = ProjSettings.from_cli(
        config_path=config_path,
        root=root,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
