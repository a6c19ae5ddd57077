"""Tests for PluginManager: registration, discovery, and handler publication."""

from __future__ import annotations

from pathlib import Path

import anyio
import pluggy

from projctl.plugins.handlers import ProjectHandler, handler_properties
from projctl.plugins.manager import PluginManager
from projctl.plugins.registry import HANDLER_CATEGORY, ServiceRegistry

hookimpl = pluggy.HookimplMarker("projctl")


class _NpmHandler:
    type = "npm"
    id = "test.handler.npm"
    add_dependency_tooltip = "Depend on an npm package"
    validation_properties = [{"source": "Directory", "match": True}]

    def __init__(self, file_client: object) -> None:
        self.file_client = file_client

    async def get_dependency_description(self, item: object) -> dict:
        return {"Type": "npm", "Location": "left-pad"}


class _NpmPlugin:
    @hookimpl
    def project_handlers(self, file_client: object) -> list[object]:
        return [_NpmHandler(file_client)]


class _BrokenPlugin:
    @hookimpl
    def project_handlers(self, file_client: object) -> list[object]:
        msg = "boom"
        raise RuntimeError(msg)


class _NonListPlugin:
    @hookimpl
    def project_handlers(self, file_client: object) -> object:
        return _NpmHandler(file_client)


class _UntypedPlugin:
    @hookimpl
    def project_handlers(self, file_client: object) -> list[object]:
        return [object()]


_LOCAL_PLUGIN_SRC = """\
import pluggy

hookimpl = pluggy.HookimplMarker("projctl")


class CargoHandler:
    type = "cargo"

    async def get_dependency_description(self, item):
        return None


class CargoPlugin:
    @hookimpl
    def project_handlers(self, file_client):
        return [CargoHandler()]
"""

_SYNTAX_ERROR_SRC = """\
def broken(
"""

_NO_HOOKS_SRC = """\
class PlainClass:
    def hello(self):
        return "world"
"""


class TestPluginManager:
    def test_hook_relay_accessible(self) -> None:
        pm = PluginManager()
        assert hasattr(pm.hook, "project_handlers")

    def test_register_plugin(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_NpmPlugin(), name="npm")
        assert "npm" in pm.list_plugin_names()

    def test_register_plugin_default_name(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_NpmPlugin())
        assert "_NpmPlugin" in pm.list_plugin_names()

    def test_unregister_plugin(self) -> None:
        pm = PluginManager()
        plugin = _NpmPlugin()
        pm.register_plugin(plugin, name="npm")
        pm.unregister(plugin)
        assert "npm" not in pm.list_plugin_names()

    def test_discover_and_load_marks_loaded(self, tmp_path: Path) -> None:
        pm = PluginManager()
        assert not pm.is_loaded
        pm.discover_and_load(local_dir=tmp_path / "missing")
        assert pm.is_loaded


class TestCollectHandlers:
    def test_passes_file_client(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_NpmPlugin(), name="npm")
        client = object()
        handlers = pm.collect_handlers(client)
        assert len(handlers) == 1
        assert handlers[0].file_client is client

    def test_failing_plugin_is_skipped(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_BrokenPlugin(), name="broken")
        pm.register_plugin(_NpmPlugin(), name="npm")
        assert [h.type for h in pm.collect_handlers(object())] == ["npm"]

    def test_non_list_result_is_skipped(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_NonListPlugin(), name="odd")
        assert pm.collect_handlers(object()) == []


class TestPublishHandlers:
    def test_publishes_under_handler_category(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_NpmPlugin(), name="npm")
        registry = ServiceRegistry()

        registrations = pm.publish_handlers(registry, object())

        assert len(registrations) == 1
        (ref,) = registry.get_service_references(HANDLER_CATEGORY)
        assert ref.get_property("type") == "npm"
        assert ref.get_property("id") == "test.handler.npm"
        assert ref.get_property("addDependencyTooltip") == "Depend on an npm package"
        assert isinstance(registry.get_service(ref), _NpmHandler)

    def test_skips_handlers_without_type(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_UntypedPlugin(), name="untyped")
        registry = ServiceRegistry()
        assert pm.publish_handlers(registry, object()) == []
        assert registry.get_service_references(HANDLER_CATEGORY) == []

    def test_reference_round_trips_to_project_handler(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_NpmPlugin(), name="npm")
        registry = ServiceRegistry()
        pm.publish_handlers(registry, object())
        (ref,) = registry.get_service_references(HANDLER_CATEGORY)

        handler = ProjectHandler.from_reference(ref, registry)

        assert handler.type == "npm"
        assert handler.validation_properties == [{"source": "Directory", "match": True}]
        assert handler.describe()["addDependencyTooltip"] == "Depend on an npm package"
        assert "service" not in handler.describe()
        description = anyio.run(handler.get_dependency_description, {"Name": "x"})
        assert description == {"Type": "npm", "Location": "left-pad"}


class TestHandlerProperties:
    def test_only_declared_attributes(self) -> None:
        props = handler_properties(_NpmHandler(None))
        assert set(props) == {"type", "id", "addDependencyTooltip", "validationProperties"}


class TestLocalDiscovery:
    def test_discovers_local_plugin(self, tmp_path: Path) -> None:
        (tmp_path / "cargo.py").write_text(_LOCAL_PLUGIN_SRC, encoding="utf-8")
        pm = PluginManager()
        names = pm.discover_and_load(local_dir=tmp_path)
        assert "cargo" in names
        assert [h.type for h in pm.collect_handlers(object())] == ["cargo"]

    def test_blocked_local_plugin_is_not_registered(self, tmp_path: Path) -> None:
        (tmp_path / "cargo.py").write_text(_LOCAL_PLUGIN_SRC, encoding="utf-8")
        pm = PluginManager()
        names = pm.discover_and_load(local_dir=tmp_path, blocked=["cargo"])
        assert "cargo" not in names
        assert pm.collect_handlers(object()) == []

    def test_skips_bad_plugin_gracefully(self, tmp_path: Path) -> None:
        (tmp_path / "broken.py").write_text(_SYNTAX_ERROR_SRC, encoding="utf-8")
        pm = PluginManager()
        assert pm.discover_and_load(local_dir=tmp_path) == []

    def test_ignores_classes_without_hooks(self, tmp_path: Path) -> None:
        (tmp_path / "plain.py").write_text(_NO_HOOKS_SRC, encoding="utf-8")
        pm = PluginManager()
        assert pm.discover_and_load(local_dir=tmp_path) == []

    def test_skips_underscore_files(self, tmp_path: Path) -> None:
        (tmp_path / "_private.py").write_text(_LOCAL_PLUGIN_SRC, encoding="utf-8")
        pm = PluginManager()
        assert pm.discover_and_load(local_dir=tmp_path) == []
