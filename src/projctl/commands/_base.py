"""Click base classes and shared parameter types.

ProjCommand and ProjGroup accept an ``examples`` string; when ``--examples``
is passed the command prints it and exits, keeping ``--help`` short.
"""

from __future__ import annotations

import json
from typing import Any

import click


def _add_examples_option(cmd: click.Command, examples: str) -> None:
    """Attach an eager ``--examples`` flag to a Click command or group."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


class ProjCommand(click.Command):
    """Command with an ``--examples`` flag."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


class ProjGroup(click.Group):
    """Group with an ``--examples`` flag.

    Subcommands default to :class:`ProjCommand`.
    """

    command_class = ProjCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


class KeyValueType(click.ParamType):
    """``KEY=VALUE`` pair; the value is read as JSON when it parses, else kept as text.

    Examples:
        >>> KeyValueType().convert("Version=2", None, None)
        ('Version', 2)
        >>> KeyValueType().convert("Owner=platform team", None, None)
        ('Owner', 'platform team')
    """

    name = "key=value"

    def convert(
        self,
        value: Any,
        param: click.Parameter | None,
        ctx: click.Context | None,
    ) -> tuple[str, Any]:
        if isinstance(value, tuple):
            return value
        key, sep, raw = str(value).partition("=")
        if not sep or not key.strip():
            self.fail(f"{value!r} is not KEY=VALUE", param, ctx)
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            parsed = raw
        return key.strip(), parsed


KEY_VALUE = KeyValueType()
