"""Pluggy hook specifications for projctl.

One setup-time hook lets plugins contribute project handlers. Handlers
receive the active file client so they can inspect workspace items.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from projctl.infrastructure.filesystem import FileClient

hookspec = pluggy.HookspecMarker("projctl")


class ProjctlHookSpec:
    """Hook specifications for the projctl plugin system."""

    @hookspec
    def project_handlers(self, file_client: FileClient) -> list[object] | None:
        """Return handler objects, each exposing ``type`` and ``get_dependency_description``."""
