"""Rich Console factory and theme for projctl output.

Consoles render into a StringIO buffer so renderers keep a plain
``-> str`` contract. In non-TTY environments (tests, pipes) Rich drops
color codes on its own.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

PROJ_THEME = Theme(
    {
        "proj.ok": "bold green",
        "proj.error": "bold red",
        "proj.warning": "bold yellow",
        "proj.op": "bold cyan",
        "proj.key": "dim",
        "proj.name": "bold",
        "proj.location": "dim",
        "proj.type": "magenta",
        "proj.missing": "red",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=PROJ_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
