"""Workbench: the single dependency injected into every service.

Owns the file client serving the workspace directory, the service
registry, and the plugin manager that publishes project handlers into it.
Constructed once at CLI startup from :class:`ProjSettings`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from projctl.infrastructure.filesystem import LocalFileClient
from projctl.plugins.registry import ServiceRegistry

if TYPE_CHECKING:
    from projctl.config.settings import ProjSettings
    from projctl.infrastructure.filesystem import FileClient
    from projctl.plugins.manager import PluginManager
    from projctl.plugins.registry import ServiceRegistration

logger = logging.getLogger(__name__)

BUILTIN_GIT_PLUGIN = "git-builtin"


class Workbench:
    """File service, service registry, and plugins for one workspace."""

    def __init__(
        self,
        settings: ProjSettings,
        *,
        file_client: FileClient | None = None,
        registry: ServiceRegistry | None = None,
    ) -> None:
        self._settings = settings
        self._file_client = file_client or LocalFileClient(settings.workspace_path)
        self._registry = registry or ServiceRegistry()
        self._plugins: PluginManager | None = None
        self._registrations: list[ServiceRegistration] = []

    @property
    def root(self) -> Path:
        """The workspace directory."""
        return self._settings.workspace_path

    @property
    def settings(self) -> ProjSettings:
        return self._settings

    @property
    def file_client(self) -> FileClient:
        return self._file_client

    @property
    def registry(self) -> ServiceRegistry:
        return self._registry

    @property
    def plugins(self) -> PluginManager | None:
        """The plugin manager (None until :meth:`init_plugins`)."""
        return self._plugins

    def init_plugins(self) -> list[str]:
        """Discover plugins and publish their project handlers.

        Registers the built-in git plugin unless disabled, then loads
        entry-point and local-directory plugins. Returns the loaded names.
        """
        from projctl.plugins.builtins.git import GitPlugin
        from projctl.plugins.manager import PluginManager

        config = self._settings.plugins
        pm = PluginManager()
        if config.builtins and BUILTIN_GIT_PLUGIN not in config.disabled:
            pm.register_plugin(GitPlugin(), name=BUILTIN_GIT_PLUGIN)
        names = pm.discover_and_load(
            local_dir=self._settings.local_plugin_dir,
            blocked=config.disabled,
        )
        self._registrations = pm.publish_handlers(self._registry, self._file_client)
        self._plugins = pm
        logger.debug("Loaded plugins: %s", ", ".join(names) or "(none)")
        return names

    def close(self) -> None:
        """Unregister every published handler."""
        for registration in self._registrations:
            registration.unregister()
        self._registrations.clear()
