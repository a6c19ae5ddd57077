"""Adapt a ServiceResult to the requested output mode.

``--json`` dumps the full result; ``--quiet`` prints one line per item (or
a status line); the default renders with Rich.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

from projctl.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from projctl.services.result import ServiceResult


class OutputSettings(BaseModel):
    """Output mode flags, frozen after construction."""

    model_config = {"frozen": True}

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display."""
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
