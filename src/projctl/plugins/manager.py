"""Plugin discovery and handler publication.

Plugins come from two places: distributions advertising the
``projctl.plugins`` entry point group, and single-file ``*.py`` modules in a
local plugin directory. Either kind contributes project handlers through the
``project_handlers`` hook; :meth:`PluginManager.publish_handlers` puts them
into the service registry.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from collections.abc import Iterable, Iterator
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING

import pluggy

from projctl.plugins.handlers import handler_properties
from projctl.plugins.hookspecs import ProjctlHookSpec
from projctl.plugins.registry import HANDLER_CATEGORY

if TYPE_CHECKING:
    from projctl.infrastructure.filesystem import FileClient
    from projctl.plugins.registry import HandlerRegistry, ServiceRegistration

PROJECT_NAME = "projctl"
ENTRY_POINT_GROUP = "projctl.plugins"
LOCAL_MODULE_PREFIX = "projctl_local_plugin_"

logger = logging.getLogger(__name__)


class PluginManager:
    """pluggy manager specialised for project handler plugins."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(ProjctlHookSpec)
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def discover_and_load(
        self,
        *,
        local_dir: Path | None = None,
        blocked: Iterable[str] = (),
    ) -> list[str]:
        """Load entry-point plugins, then local plugins from *local_dir*.

        Names in *blocked* are never registered. Returns the names of all
        registered plugins.
        """
        for name in blocked:
            self._pm.set_blocked(name)
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._instantiate_registered_classes()
        if local_dir is not None and local_dir.is_dir():
            for path in sorted(local_dir.glob("*.py")):
                if not path.name.startswith("_"):
                    self._load_local(path)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        plugin_name = name or type(plugin).__name__
        self._pm.register(plugin, name=plugin_name)
        logger.debug("Registered plugin: %s", plugin_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    def get_plugins(self) -> list[object]:
        # Blocked names can leave a None placeholder behind.
        return [p for p in self._pm.get_plugins() if p is not None]

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or type(p).__name__ for p in self.get_plugins()]

    # ------------------------------------------------------------------
    # Handler publication
    # ------------------------------------------------------------------

    def collect_handlers(self, file_client: FileClient) -> list[object]:
        """Call every ``project_handlers`` implementation and flatten the results.

        Implementations are called one at a time. A plugin that raises, or
        returns something other than a list, is logged and skipped while the
        other plugins still contribute.
        """
        handlers: list[object] = []
        for impl in self._pm.hook.project_handlers.get_hookimpls():
            try:
                contributed = impl.function(file_client=file_client)
            except Exception:
                logger.warning(
                    "Plugin %s failed to provide project handlers",
                    impl.plugin_name,
                    exc_info=True,
                )
                continue
            if contributed is None:
                continue
            if not isinstance(contributed, (list, tuple)):
                logger.warning("Plugin %s returned non-list project handlers", impl.plugin_name)
                continue
            handlers.extend(contributed)
        return handlers

    def publish_handlers(
        self,
        registry: HandlerRegistry,
        file_client: FileClient,
    ) -> list[ServiceRegistration]:
        """Register every contributed handler under ``project.handler``.

        Handlers without a ``type`` or without ``get_dependency_description``
        are skipped with a warning.
        """
        registrations: list[ServiceRegistration] = []
        for handler in self.collect_handlers(file_client):
            props = handler_properties(handler)
            handler_type = props.get("type")
            if not handler_type:
                logger.warning("Skipping project handler without a type: %r", handler)
                continue
            if not callable(getattr(handler, "get_dependency_description", None)):
                logger.warning(
                    "Skipping project handler %r: no get_dependency_description",
                    handler_type,
                )
                continue
            registrations.append(registry.register_service(HANDLER_CATEGORY, handler, props))
            logger.debug("Published project handler: %s", handler_type)
        return registrations

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _load_local(self, path: Path) -> None:
        """Import *path* and register each hook-carrying class under the file stem."""
        module = _import_file(path)
        if module is None:
            return
        for cls in _plugin_classes(module):
            try:
                self.register_plugin(cls(), name=path.stem)
            except Exception:
                logger.warning(
                    "Could not instantiate %s from %s", cls.__name__, path, exc_info=True
                )

    def _instantiate_registered_classes(self) -> None:
        """Replace plugin classes registered by entry points with instances.

        An entry point may name a class rather than an instance, and pluggy
        would then call its hooks with ``self`` unbound.
        """
        for plugin in self.get_plugins():
            if not (inspect.isclass(plugin) and _has_hook_impls(plugin)):
                continue
            name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning("Could not instantiate entry-point plugin %s", name, exc_info=True)
                continue
            self._pm.register(instance, name=name)
            logger.debug("Instantiated entry-point plugin: %s", name)


def _import_file(path: Path) -> ModuleType | None:
    """Import a single-file plugin. Failures are logged and yield None."""
    module_name = f"{LOCAL_MODULE_PREFIX}{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        logger.warning("Cannot import local plugin %s", path)
        return None
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        logger.warning("Failed to load local plugin %s", path, exc_info=True)
        sys.modules.pop(module_name, None)
        return None
    return module


def _plugin_classes(module: ModuleType) -> Iterator[type]:
    """Classes defined in *module* (not imported into it) that carry hook implementations."""
    for _name, obj in inspect.getmembers(module, inspect.isclass):
        if obj.__module__ == module.__name__ and _has_hook_impls(obj):
            yield obj


def _has_hook_impls(cls: type) -> bool:
    """True when a public attribute of *cls* is marked with ``@hookimpl``.

    ``HookimplMarker("projctl")`` tags decorated functions with a
    ``projctl_impl`` attribute.
    """
    marker = f"{PROJECT_NAME}_impl"
    return any(
        callable(getattr(cls, name, None)) and getattr(getattr(cls, name), marker, None)
        for name in dir(cls)
        if not name.startswith("_")
    )
