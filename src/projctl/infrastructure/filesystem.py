"""File service contract and a local-directory implementation.

INVARIANT: The file service owns all durable state. The project store
only orchestrates reads and writes through :class:`FileClient`.

Locations handed out by :class:`LocalFileClient` are ``/``-rooted strings
relative to the client root. Folder locations end with ``/`` so that
``folder.location + "sub/file.txt"`` addresses a descendant. The workspace
itself lives at ``/``.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from projctl.domain.errors import StorageError
from projctl.domain.types import Entry, Workspace

logger = logging.getLogger(__name__)

WORKSPACE_LOCATION = "/"


@runtime_checkable
class FileClient(Protocol):
    """Asynchronous, location-addressed document store."""

    async def read(self, location: str, *, metadata: bool = False) -> str | Entry:
        """Return file content, or the entry describing *location* when *metadata*."""
        ...

    async def write(self, location: str, content: str) -> None: ...

    async def create_file(self, parent_location: str, name: str) -> Entry: ...

    async def create_project(
        self,
        workspace_location: str,
        name: str,
        params: dict[str, Any] | None = None,
        create: bool = True,
    ) -> Entry: ...

    async def fetch_children(self, children_location: str) -> list[Entry]: ...

    async def load_workspace(self, location: str | None = None) -> Workspace: ...


class LocalFileClient:
    """:class:`FileClient` over a directory tree.

    Blocking filesystem calls run in a worker thread via
    :func:`asyncio.to_thread`. Every ``OSError`` surfaces as
    :class:`StorageError`.
    """

    def __init__(self, root: Path) -> None:
        self._root = root.resolve()

    @property
    def root(self) -> Path:
        return self._root

    # ------------------------------------------------------------------
    # FileClient API
    # ------------------------------------------------------------------

    async def read(self, location: str, *, metadata: bool = False) -> str | Entry:
        path = self._resolve(location)
        if metadata:
            return await asyncio.to_thread(self._entry_for, path, with_parents=True)
        return await asyncio.to_thread(self._read_text, path, location)

    async def write(self, location: str, content: str) -> None:
        path = self._resolve(location)
        await asyncio.to_thread(self._write_text, path, location, content)
        logger.debug("Wrote %s (%d chars)", location, len(content))

    async def create_file(self, parent_location: str, name: str) -> Entry:
        parent = self._resolve(parent_location)
        path = self._resolve_child(parent, name)
        await asyncio.to_thread(self._touch, path, parent_location)
        return await asyncio.to_thread(self._entry_for, path, with_parents=True)

    async def create_project(
        self,
        workspace_location: str,
        name: str,
        params: dict[str, Any] | None = None,
        create: bool = True,
    ) -> Entry:
        workspace = self._resolve(workspace_location)
        path = self._resolve_child(workspace, name)
        if create:
            await asyncio.to_thread(self._mkdir, path, name)
        elif not path.is_dir():
            msg = f"Project folder does not exist: {name}"
            raise StorageError(msg, location=self._location_for(path))
        entry = await asyncio.to_thread(self._entry_for, path, with_parents=True)
        return entry.model_copy(update={"content_location": entry.location})

    async def fetch_children(self, children_location: str) -> list[Entry]:
        path = self._resolve(children_location)
        return await asyncio.to_thread(self._list_children, path, children_location)

    async def load_workspace(self, location: str | None = None) -> Workspace:
        path = self._resolve(location or WORKSPACE_LOCATION)
        children = await asyncio.to_thread(self._list_children, path, location or "/")
        return Workspace(
            name=self._root.name,
            location=self._location_for(path),
            children=children,
        )

    # ------------------------------------------------------------------
    # Location mapping
    # ------------------------------------------------------------------

    def _resolve(self, location: str) -> Path:
        """Map a ``/``-rooted location to a path under the root."""
        relative = location.strip("/")
        path = (self._root / relative).resolve() if relative else self._root
        if not path.is_relative_to(self._root):
            msg = f"Location escapes the file service root: {location}"
            raise StorageError(msg, location=location)
        return path

    def _resolve_child(self, parent: Path, name: str) -> Path:
        if not name or "/" in name or name in (".", ".."):
            msg = f"Invalid file name: {name!r}"
            raise StorageError(msg, location=self._location_for(parent))
        return parent / name

    def _location_for(self, path: Path) -> str:
        relative = path.relative_to(self._root).as_posix()
        if relative == ".":
            return WORKSPACE_LOCATION
        location = f"/{relative}"
        return f"{location}/" if path.is_dir() else location

    # ------------------------------------------------------------------
    # Blocking helpers (run in worker threads)
    # ------------------------------------------------------------------

    def _entry_for(self, path: Path, *, with_parents: bool) -> Entry:
        if not path.exists():
            msg = f"No such file or folder: {self._location_for_missing(path)}"
            raise StorageError(msg, location=self._location_for_missing(path))
        location = self._location_for(path)
        parents: list[Entry] | None = None
        if with_parents:
            parents = [
                self._entry_for(ancestor, with_parents=False)
                for ancestor in path.parents
                if ancestor != self._root and ancestor.is_relative_to(self._root)
            ]
        if path.is_dir():
            return Entry(
                name=path.name,
                location=location,
                directory=True,
                children_location=location,
                parents=parents,
            )
        return Entry(name=path.name, location=location, directory=False, parents=parents)

    def _location_for_missing(self, path: Path) -> str:
        return "/" + path.relative_to(self._root).as_posix()

    def _list_children(self, path: Path, location: str) -> list[Entry]:
        try:
            items = sorted(path.iterdir(), key=lambda p: p.name)
        except OSError as exc:
            msg = f"Cannot list {location}: {exc.strerror or exc}"
            raise StorageError(msg, location=location) from exc
        entries: list[Entry] = []
        for item in items:
            if not item.exists():
                logger.debug("Skipping dangling entry %s/%s", location.rstrip("/"), item.name)
                continue
            try:
                entries.append(self._entry_for(item, with_parents=True))
            except StorageError:
                logger.debug("Skipping vanished entry %s", item, exc_info=True)
        return entries

    @staticmethod
    def _read_text(path: Path, location: str) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Cannot read {location}: {exc.strerror or exc}"
            raise StorageError(msg, location=location) from exc

    @staticmethod
    def _write_text(path: Path, location: str, content: str) -> None:
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            msg = f"Cannot write {location}: {exc.strerror or exc}"
            raise StorageError(msg, location=location) from exc

    @staticmethod
    def _touch(path: Path, parent_location: str) -> None:
        try:
            path.touch(exist_ok=True)
        except OSError as exc:
            msg = f"Cannot create {path.name} in {parent_location}: {exc.strerror or exc}"
            raise StorageError(msg, location=parent_location) from exc

    @staticmethod
    def _mkdir(path: Path, name: str) -> None:
        try:
            path.mkdir()
        except FileExistsError as exc:
            msg = f"Project folder already exists: {name}"
            raise StorageError(msg, location=name) from exc
        except OSError as exc:
            msg = f"Cannot create project folder {name}: {exc.strerror or exc}"
            raise StorageError(msg, location=name) from exc
