"""AppContext: shared Click context for all commands.

Created once by the root CLI group and handed to subcommands via
``@click.pass_obj``. Builds the workbench lazily and routes results to
stdout/stderr with the right exit code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from projctl.config.logging import configure_logging
from projctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from projctl.config.settings import ProjSettings
    from projctl.infrastructure.workbench import Workbench
    from projctl.services.project import ProjectService
    from projctl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The workbench (and with it plugin discovery) is only created on first
    use, so ``--help`` and ``--version`` never touch the workspace.
    """

    def __init__(self, settings: ProjSettings) -> None:
        self.settings = settings
        self._workbench: Workbench | None = None
        configure_logging(
            verbose=settings.verbose,
            quiet=settings.quiet,
            log_json=settings.log_json,
        )

    @property
    def workbench(self) -> Workbench:
        if self._workbench is None:
            from projctl.infrastructure.workbench import Workbench

            self._workbench = Workbench(self.settings)
            self._workbench.init_plugins()
        return self._workbench

    @property
    def projects(self) -> ProjectService:
        from projctl.services.project import ProjectService

        return ProjectService(self.workbench)

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: stdout; warnings go to stderr outside JSON mode.
        * Failure: stderr, exit code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)

    def close(self) -> None:
        if self._workbench is not None:
            self._workbench.close()
            self._workbench = None
