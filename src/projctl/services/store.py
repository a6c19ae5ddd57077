"""ProjectStore: client-side API for ``project.json`` descriptors.

The store is stateless request orchestration over two collaborators passed
in at construction: a :class:`FileClient` that owns all durable state, and
a :class:`HandlerRegistry` from which it snapshots project handler
references. It registers itself under ``project.client`` so other
components can find it by lookup.

Mutations re-read the live file, edit the raw JSON object, and write the
whole document back. There is no locking: concurrent writers against the
same descriptor race and the last write wins.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from projctl.domain.descriptor import (
    add_dependency,
    merge_properties,
    parse_document,
    remove_dependency,
    render_document,
    stamp,
)
from projctl.domain.errors import NotFoundError, UnsupportedTypeError
from projctl.domain.types import (
    DESCRIPTOR_FILENAME,
    Dependency,
    DependencyType,
    Entry,
    InitResult,
    ProjectDescriptor,
    Workspace,
)
from projctl.plugins.handlers import ProjectHandler
from projctl.plugins.registry import CLIENT_CATEGORY, HANDLER_CATEGORY
from projctl.plugins.validation import make_validator

if TYPE_CHECKING:
    from projctl.infrastructure.filesystem import FileClient
    from projctl.plugins.registry import HandlerRegistry, ServiceReference

logger = logging.getLogger(__name__)


class ProjectStore:
    """Reads, creates, and mutates project descriptors through a file client.

    Handler references are snapshotted at construction. Handlers registered
    later stay invisible until :meth:`refresh_handlers` is called.
    """

    def __init__(self, file_client: FileClient, registry: HandlerRegistry) -> None:
        self._file_client = file_client
        self._registry = registry
        self._handler_refs: list[ServiceReference] = registry.get_service_references(
            HANDLER_CATEGORY
        )
        self._registration = registry.register_service(CLIENT_CATEGORY, self)

    @property
    def file_client(self) -> FileClient:
        return self._file_client

    def refresh_handlers(self) -> list[str]:
        """Re-read handler references from the registry; returns their types."""
        self._handler_refs = self._registry.get_service_references(HANDLER_CATEGORY)
        return self.get_project_handler_types()

    def close(self) -> None:
        """Withdraw the ``project.client`` registration."""
        if self._registration is not None:
            self._registration.unregister()
            self._registration = None

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    async def locate_descriptor(
        self,
        folder: Entry,
        children: list[Entry],
        workspace: Workspace | None = None,
    ) -> ProjectDescriptor | None:
        """Read ``project.json`` from *children*, stamped for *folder*.

        Returns None when *children* holds no descriptor file.
        """
        descriptor_file = _find_descriptor_file(children)
        if descriptor_file is None:
            return None
        content = await self._file_client.read(descriptor_file.location)
        document = parse_document(_as_text(content), location=descriptor_file.location)
        return stamp(
            document,
            name=folder.name,
            content_location=folder.location,
            workspace_location=workspace.location if workspace else None,
            project_json_location=descriptor_file.location,
        )

    async def read_project(
        self,
        entry: Entry,
        workspace: Workspace | None = None,
    ) -> ProjectDescriptor | None:
        """Return the descriptor of the project *entry* belongs to.

        Only the top-level ancestor is consulted, so a ``project.json`` in
        an intermediate folder is never found. An entry with no parents is
        its own top-level folder.
        """
        if workspace is None:
            workspace = await self._file_client.load_workspace()

        folder = entry.top_level_folder or entry
        if folder.children is not None:
            children = folder.children
        elif folder.children_location:
            children = await self._file_client.fetch_children(folder.children_location)
        else:
            return None
        return await self.locate_descriptor(folder, children, workspace)

    async def read_all_projects(self, workspace: Workspace) -> list[ProjectDescriptor]:
        """Read every top-level child concurrently; non-projects are skipped.

        A child whose read fails is dropped rather than failing the batch.
        Results come back in completion order, not workspace order.
        """
        children = workspace.children or []
        if not children:
            return []

        projects: list[ProjectDescriptor] = []
        pending = [self._read_project_or_none(child, workspace) for child in children]
        for next_done in asyncio.as_completed(pending):
            project = await next_done
            if project is not None:
                projects.append(project)
        return projects

    async def _read_project_or_none(
        self,
        child: Entry,
        workspace: Workspace,
    ) -> ProjectDescriptor | None:
        try:
            return await self.read_project(child, workspace)
        except Exception:
            logger.debug("Skipping unreadable project %s", child.location, exc_info=True)
            return None

    # ------------------------------------------------------------------
    # Creating
    # ------------------------------------------------------------------

    async def init_project(
        self,
        content_location: str,
        descriptor: ProjectDescriptor | Mapping[str, Any] | None = None,
    ) -> InitResult:
        """Create ``project.json`` under *content_location*.

        With a *descriptor* payload the file is written and the result
        carries the payload; otherwise the result carries the new file's
        metadata.
        """
        file_entry = await self._file_client.create_file(content_location, DESCRIPTOR_FILENAME)
        if descriptor is None:
            return InitResult(file_metadata=file_entry)

        payload = _as_document(descriptor)
        await self._file_client.write(file_entry.location, render_document(payload))
        logger.debug("Initialized project in %s", content_location)
        return InitResult(content_location=content_location, project_metadata=payload)

    async def create_project(
        self,
        workspace_location: str,
        descriptor: ProjectDescriptor | Mapping[str, Any],
    ) -> InitResult:
        """Create a project folder named after the descriptor and initialize it.

        ``Name`` is dropped from the written document; it is derived from
        the folder name on every read.
        """
        payload = _as_document(descriptor)
        name = payload.pop("Name", None)
        if not name:
            msg = "A project name is required to create a project"
            raise ValueError(msg)
        folder = await self._file_client.create_project(workspace_location, name, None, True)
        content_location = folder.content_location or folder.location
        return await self.init_project(content_location, payload)

    # ------------------------------------------------------------------
    # Mutating
    # ------------------------------------------------------------------

    async def add_project_dependency(
        self,
        descriptor: ProjectDescriptor,
        dependency: Dependency | Mapping[str, Any],
    ) -> ProjectDescriptor:
        """Append *dependency* unless its ``Location`` is already declared.

        Returns the live document; on change, only after the write finished.
        """
        dep = _as_dependency(dependency)
        descriptor_file, document = await self._load_live_document(descriptor)
        if not add_dependency(document, dep, location=descriptor_file.location):
            logger.debug("Dependency %s already declared", dep.location)
            return self._restamp(document, descriptor, descriptor_file.location)
        updated = self._restamp(document, descriptor, descriptor_file.location)
        await self._file_client.write(descriptor_file.location, render_document(document))
        return updated

    async def remove_project_dependency(
        self,
        descriptor: ProjectDescriptor,
        dependency: Dependency | Mapping[str, Any],
    ) -> ProjectDescriptor:
        """Remove every dependency matching both ``Location`` and ``Type``."""
        dep = _as_dependency(dependency)
        descriptor_file, document = await self._load_live_document(descriptor)
        removed = remove_dependency(document, dep, location=descriptor_file.location)
        updated = self._restamp(document, descriptor, descriptor_file.location)
        await self._file_client.write(descriptor_file.location, render_document(document))
        logger.debug("Removed %d dependency entries for %s", removed, dep.location)
        return updated

    async def change_project_properties(
        self,
        descriptor: ProjectDescriptor,
        properties: Mapping[str, Any] | None,
    ) -> ProjectDescriptor | None:
        """Shallow-merge *properties* into the live document and write it.

        Returns None without touching storage when *properties* is empty or
        the descriptor does not know its ``ProjectJsonLocation``.
        """
        if not properties:
            logger.debug("No properties to change")
            return None
        location = descriptor.project_json_location
        if not location:
            logger.warning(
                "Cannot change properties of %s: descriptor location unknown",
                descriptor.name or descriptor.content_location,
            )
            return None

        content = await self._file_client.read(location)
        document = parse_document(_as_text(content), location=location)
        merge_properties(document, properties)
        updated = self._restamp(document, descriptor, location)
        await self._file_client.write(location, render_document(document))
        return updated

    async def _load_live_document(
        self,
        descriptor: ProjectDescriptor,
    ) -> tuple[Entry, dict[str, Any]]:
        content_location = descriptor.content_location
        if not content_location:
            msg = f"Project {descriptor.name!r} has no content location"
            raise NotFoundError(msg)
        children = await self._file_client.fetch_children(content_location)
        descriptor_file = _find_descriptor_file(children)
        if descriptor_file is None:
            msg = f"No {DESCRIPTOR_FILENAME} in {content_location}"
            raise NotFoundError(msg, location=content_location)
        content = await self._file_client.read(descriptor_file.location)
        document = parse_document(_as_text(content), location=descriptor_file.location)
        return descriptor_file, document

    @staticmethod
    def _restamp(
        document: Mapping[str, Any],
        descriptor: ProjectDescriptor,
        project_json_location: str,
    ) -> ProjectDescriptor:
        """Stamp *document*; raises ParseError when it is not a valid descriptor."""
        return stamp(
            document,
            name=descriptor.name,
            content_location=descriptor.content_location,
            workspace_location=descriptor.workspace_location,
            project_json_location=project_json_location,
        )

    # ------------------------------------------------------------------
    # Dependency resolution
    # ------------------------------------------------------------------

    async def get_dependency_file_metadata(
        self,
        dependency: Dependency | Mapping[str, Any],
        workspace_location: str | None = None,
    ) -> Entry:
        """Resolve *dependency* to the workspace entry it points at.

        ``file`` dependencies name a path whose first segment is a top-level
        workspace child. Any other type is resolved by asking its handler to
        describe every top-level child the handler accepts; the first
        description to come back with a matching ``Location`` wins.
        """
        dep = _as_dependency(dependency)
        if dep.type == DependencyType.FILE:
            return await self._resolve_file_dependency(dep, workspace_location)

        handler = self.get_project_handler(dep.type)
        if handler is None:
            msg = f"{dep.type} is not supported."
            raise UnsupportedTypeError(msg, detail={"type": dep.type})

        validator = None
        if handler.validation_properties:
            validator = make_validator(handler, self._registry, [])

        workspace = await self._file_client.load_workspace(workspace_location)
        candidates = [
            child
            for child in workspace.children or []
            if validator is not None and validator.validation_function(child)
        ]
        match = await self._first_described(handler, candidates, dep.location)
        if match is None:
            msg = f"{dep.name or dep.location} could not be found in your workspace"
            raise NotFoundError(msg, location=dep.location, detail={"type": dep.type})
        return match

    async def _resolve_file_dependency(
        self,
        dep: Dependency,
        workspace_location: str | None,
    ) -> Entry:
        workspace = await self._file_client.load_workspace(workspace_location)
        top, _, rest = dep.location.partition("/")
        child = workspace.find_child(top)
        if child is None:
            msg = f"{dep.location} could not be found in your workspace"
            raise NotFoundError(msg, location=dep.location)
        metadata = await self._file_client.read(child.location + rest, metadata=True)
        if not isinstance(metadata, Entry):
            metadata = Entry.model_validate(metadata)
        return metadata

    async def _first_described(
        self,
        handler: ProjectHandler,
        candidates: list[Entry],
        location: str,
    ) -> Entry | None:
        if not candidates:
            return None
        tasks = [
            asyncio.ensure_future(self._describes(handler, child, location))
            for child in candidates
        ]
        try:
            for next_done in asyncio.as_completed(tasks):
                child = await next_done
                if child is not None:
                    return child
        finally:
            for task in tasks:
                task.cancel()
        return None

    @staticmethod
    async def _describes(handler: ProjectHandler, child: Entry, location: str) -> Entry | None:
        """Return *child* when *handler* describes it with *location*."""
        try:
            description = await handler.get_dependency_description(child)
        except Exception:
            logger.warning(
                "Handler %s failed to describe %s",
                handler.type,
                child.location,
                exc_info=True,
            )
            return None
        if description and description.get("Location") == location:
            return child
        return None

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def get_project_handler_types(self) -> list[str]:
        return [ref.get_property("type") for ref in self._handler_refs]

    def get_project_handler(self, handler_type: str) -> ProjectHandler | None:
        """The first handler registered for *handler_type*, if any."""
        for ref in self._handler_refs:
            if ref.get_property("type") == handler_type:
                return ProjectHandler.from_reference(ref, self._registry)
        return None

    def get_matching_project_handlers(
        self, item: Entry | Mapping[str, Any]
    ) -> list[ProjectHandler]:
        """Every handler whose validation properties accept *item*."""
        handlers: list[ProjectHandler] = []
        for ref in self._handler_refs:
            validator = make_validator(ref.properties, self._registry, [])
            if validator.validation_function(item):
                handlers.append(ProjectHandler.from_reference(ref, self._registry))
        return handlers


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _find_descriptor_file(children: list[Entry]) -> Entry | None:
    for child in children:
        if child.name == DESCRIPTOR_FILENAME:
            return child
    return None


def _as_text(content: Any) -> str:
    if isinstance(content, bytes):
        return content.decode("utf-8")
    return content or ""


def _as_document(descriptor: ProjectDescriptor | Mapping[str, Any]) -> dict[str, Any]:
    """A deep copy of *descriptor* in its JSON wire form."""
    if isinstance(descriptor, ProjectDescriptor):
        return descriptor.to_json()
    return copy.deepcopy(dict(descriptor))


def _as_dependency(dependency: Dependency | Mapping[str, Any]) -> Dependency:
    if isinstance(dependency, Dependency):
        return dependency
    return Dependency.model_validate(dependency)
