"""ProjectService: ServiceResult facade over the async ProjectStore.

Paths taken by this service are workspace-relative (``"app"``,
``"app/src/main.py"``); they are mapped onto file-client locations here so
the CLI never deals with locations directly.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine, Mapping
from typing import TYPE_CHECKING, Any

from projctl.domain.errors import NotFoundError, ProjectError
from projctl.domain.types import Dependency, Entry, ProjectDescriptor
from projctl.plugins.registry import CLIENT_CATEGORY
from projctl.services.base import BaseService
from projctl.services.result import ServiceResult
from projctl.services.store import ProjectStore

if TYPE_CHECKING:
    from projctl.infrastructure.workbench import Workbench

logger = logging.getLogger(__name__)


def folder_location(path: str) -> str:
    """Map a workspace-relative folder path to a folder location.

    Examples:
        >>> folder_location("app")
        '/app/'
        >>> folder_location("/app/lib/")
        '/app/lib/'
    """
    stripped = path.strip("/")
    return f"/{stripped}/" if stripped else "/"


def file_location(path: str) -> str:
    """Map a workspace-relative path to a location without a trailing slash."""
    return "/" + path.strip("/")


class ProjectService(BaseService):
    """Project operations for the CLI, one event loop per call."""

    def __init__(self, workbench: Workbench) -> None:
        super().__init__(workbench)
        self._store: ProjectStore | None = None

    @property
    def store(self) -> ProjectStore:
        """The registered project client, created on first use."""
        if self._store is None:
            registry = self._workbench.registry
            refs = registry.get_service_references(CLIENT_CATEGORY)
            if refs:
                self._store = registry.get_service(refs[0])
            else:
                self._store = ProjectStore(self._workbench.file_client, registry)
        return self._store

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def list_projects(self) -> ServiceResult:
        """All projects in the workspace, sorted by name."""

        async def _list() -> dict[str, Any]:
            workspace = await self.store.file_client.load_workspace()
            projects = await self.store.read_all_projects(workspace)
            projects.sort(key=lambda p: (p.name or "").lower())
            return {
                "workspace": workspace.location,
                "count": len(projects),
                "items": [p.to_json() for p in projects],
            }

        return self._call("list_projects", _list())

    def show_project(self, path: str) -> ServiceResult:
        """The project that the file or folder at *path* belongs to."""

        async def _show() -> dict[str, Any]:
            entry = await self._entry_at(path)
            project = await self.store.read_project(entry)
            if project is None:
                msg = f"{path} is not inside a project"
                raise NotFoundError(msg, location=entry.location)
            return {"project": project.to_json()}

        return self._call("show_project", _show())

    # ------------------------------------------------------------------
    # Creating
    # ------------------------------------------------------------------

    def init_project(
        self,
        folder: str,
        *,
        name: str | None = None,
        properties: Mapping[str, Any] | None = None,
    ) -> ServiceResult:
        """Create ``project.json`` in an existing folder.

        Without *name* or *properties* the file is left empty.
        """
        payload: dict[str, Any] | None = None
        if name or properties:
            payload = dict(properties or {})
            if name:
                payload["Name"] = name

        async def _init() -> dict[str, Any]:
            result = await self.store.init_project(folder_location(folder), payload)
            return result.model_dump(mode="json", by_alias=True, exclude_none=True)

        return self._call("init_project", _init())

    def create_project(
        self,
        name: str,
        *,
        properties: Mapping[str, Any] | None = None,
    ) -> ServiceResult:
        """Create a new top-level project folder with a descriptor."""
        payload = {**(properties or {}), "Name": name}

        async def _create() -> dict[str, Any]:
            result = await self.store.create_project("/", payload)
            return result.model_dump(mode="json", by_alias=True, exclude_none=True)

        return self._call("create_project", _create())

    # ------------------------------------------------------------------
    # Mutating
    # ------------------------------------------------------------------

    def set_properties(self, folder: str, properties: Mapping[str, Any]) -> ServiceResult:
        """Shallow-merge *properties* into the project's descriptor."""
        warnings: list[str] = []

        async def _set() -> dict[str, Any]:
            project = await self._require_project(folder)
            updated = await self.store.change_project_properties(project, properties)
            if updated is None:
                warnings.append("No properties changed")
                return {"project": project.to_json(), "changed": []}
            return {"project": updated.to_json(), "changed": sorted(properties)}

        return self._call("set_properties", _set(), warnings)

    def add_dependency(
        self,
        folder: str,
        dep_type: str,
        location: str,
        *,
        name: str | None = None,
    ) -> ServiceResult:
        """Declare a dependency; a duplicate ``Location`` is left as is."""
        warnings: list[str] = []

        async def _add() -> dict[str, Any]:
            dependency = Dependency(type=dep_type, name=name or location, location=location)
            project = await self._require_project(folder)
            existed = project.has_dependency(location)
            updated = await self.store.add_project_dependency(project, dependency)
            if existed:
                warnings.append(f"Dependency {location} already declared")
            return {"project": updated.to_json(), "added": not existed}

        return self._call("add_dependency", _add(), warnings)

    def remove_dependency(self, folder: str, dep_type: str, location: str) -> ServiceResult:
        """Remove every dependency matching *dep_type* and *location*."""
        warnings: list[str] = []

        async def _remove() -> dict[str, Any]:
            dependency = Dependency(type=dep_type, location=location)
            project = await self._require_project(folder)
            before = len(project.dependencies)
            updated = await self.store.remove_project_dependency(project, dependency)
            removed = before - len(updated.dependencies)
            if removed == 0:
                warnings.append(f"No {dep_type} dependency on {location}")
            return {"project": updated.to_json(), "removed": removed}

        return self._call("remove_dependency", _remove(), warnings)

    # ------------------------------------------------------------------
    # Dependency resolution & handlers
    # ------------------------------------------------------------------

    def resolve_dependencies(self, folder: str) -> ServiceResult:
        """Resolve every declared dependency to a workspace entry."""
        warnings: list[str] = []

        async def _resolve() -> dict[str, Any]:
            project = await self._require_project(folder)
            outcomes = await asyncio.gather(
                *(
                    self.store.get_dependency_file_metadata(dep, project.workspace_location)
                    for dep in project.dependencies
                ),
                return_exceptions=True,
            )
            items: list[dict[str, Any]] = []
            for dep, outcome in zip(project.dependencies, outcomes, strict=True):
                item: dict[str, Any] = {"dependency": dep.to_json()}
                if isinstance(outcome, ProjectError):
                    item["error"] = {"code": outcome.code, "message": outcome.message}
                    warnings.append(outcome.message)
                elif isinstance(outcome, BaseException):
                    raise outcome
                else:
                    item["resolved"] = _entry_summary(outcome)
                items.append(item)
            resolved = sum(1 for item in items if "resolved" in item)
            return {"project": project.name, "resolved": resolved, "items": items}

        return self._call("resolve_dependencies", _resolve(), warnings)

    def list_handlers(self, path: str | None = None) -> ServiceResult:
        """Registered handlers, or only those accepting the entry at *path*."""

        async def _handlers() -> dict[str, Any]:
            if path is None:
                handlers = [
                    self.store.get_project_handler(handler_type)
                    for handler_type in self.store.get_project_handler_types()
                ]
            else:
                entry = await self._entry_at(path)
                handlers = self.store.get_matching_project_handlers(entry)
            items = [h.describe() for h in handlers if h is not None]
            return {"count": len(items), "items": items}

        return self._call("list_handlers", _handlers())

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _entry_at(self, path: str) -> Entry:
        metadata = await self.store.file_client.read(file_location(path), metadata=True)
        if isinstance(metadata, Entry):
            return metadata
        return Entry.model_validate(metadata)

    async def _require_project(self, folder: str) -> ProjectDescriptor:
        entry = await self._entry_at(folder)
        project = await self.store.read_project(entry)
        if project is None:
            msg = f"No project.json in {folder}"
            raise NotFoundError(msg, location=entry.location)
        return project

    def _call(
        self,
        op: str,
        coro: Coroutine[Any, Any, dict[str, Any]],
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        try:
            data = self._run(coro)
        except (ProjectError, ValueError) as exc:
            logger.debug("%s failed: %s", op, exc)
            return ServiceResult.failure(op, exc)
        return ServiceResult.success(op, data, warnings)


def _entry_summary(entry: Entry) -> dict[str, Any]:
    return {"Name": entry.name, "Location": entry.location, "Directory": entry.directory}
