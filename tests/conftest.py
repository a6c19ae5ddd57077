"""Shared pytest fixtures for projctl tests."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from projctl.config.settings import ProjSettings
from projctl.domain.types import Entry, Workspace
from projctl.infrastructure.filesystem import LocalFileClient
from projctl.infrastructure.workbench import Workbench
from projctl.plugins.registry import ServiceRegistry
from projctl.services.store import ProjectStore

GIT_CONFIG = """\
[core]
\trepositoryformatversion = 0
\tbare = false
[remote "origin"]
\turl = https://example.com/acme/lib.git
\tfetch = +refs/heads/*:refs/remotes/origin/*
"""


class RecordingFileClient:
    """Wraps a file client and records every call by method name."""

    def __init__(self, inner: Any) -> None:
        self.inner = inner
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def count(self, method: str) -> int:
        return sum(1 for name, _args in self.calls if name == method)

    async def read(self, location: str, *, metadata: bool = False) -> str | Entry:
        self.calls.append(("read", (location, metadata)))
        return await self.inner.read(location, metadata=metadata)

    async def write(self, location: str, content: str) -> None:
        self.calls.append(("write", (location, content)))
        await self.inner.write(location, content)

    async def create_file(self, parent_location: str, name: str) -> Entry:
        self.calls.append(("create_file", (parent_location, name)))
        return await self.inner.create_file(parent_location, name)

    async def create_project(
        self,
        workspace_location: str,
        name: str,
        params: dict[str, Any] | None = None,
        create: bool = True,
    ) -> Entry:
        self.calls.append(("create_project", (workspace_location, name)))
        return await self.inner.create_project(workspace_location, name, params, create)

    async def fetch_children(self, children_location: str) -> list[Entry]:
        self.calls.append(("fetch_children", (children_location,)))
        return await self.inner.fetch_children(children_location)

    async def load_workspace(self, location: str | None = None) -> Workspace:
        self.calls.append(("load_workspace", (location,)))
        return await self.inner.load_workspace(location)


def write_descriptor(folder: Path, document: dict[str, Any] | str) -> Path:
    """Write ``project.json`` into *folder* (created if needed)."""
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / "project.json"
    text = document if isinstance(document, str) else json.dumps(document, indent=2)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    """Temporary workspace with two projects, a plain folder, and a git clone.

    Layout::

        app/project.json        {"Version": 1, "Dependencies": [file lib/utils.py]}
        app/src/main.py
        lib/utils.py
        tools/project.json      {"Name": "Tooling"}
        vendor/.git/config      origin -> https://example.com/acme/lib.git
        vendor/README.md
    """
    root = tmp_path / "ws"
    (root / "app" / "src").mkdir(parents=True)
    (root / "app" / "src" / "main.py").write_text("print('hi')\n", encoding="utf-8")
    write_descriptor(
        root / "app",
        {
            "Version": 1,
            "Dependencies": [{"Type": "file", "Name": "utils", "Location": "lib/utils.py"}],
        },
    )
    (root / "lib").mkdir()
    (root / "lib" / "utils.py").write_text("", encoding="utf-8")
    write_descriptor(root / "tools", {"Name": "Tooling"})
    (root / "vendor" / ".git").mkdir(parents=True)
    (root / "vendor" / ".git" / "config").write_text(GIT_CONFIG, encoding="utf-8")
    (root / "vendor" / "README.md").write_text("# vendor\n", encoding="utf-8")
    return root


@pytest.fixture
def file_client(workspace_root: Path) -> LocalFileClient:
    return LocalFileClient(workspace_root)


@pytest.fixture
def recording_client(file_client: LocalFileClient) -> RecordingFileClient:
    return RecordingFileClient(file_client)


@pytest.fixture
def registry() -> ServiceRegistry:
    return ServiceRegistry()


@pytest.fixture
def store(
    recording_client: RecordingFileClient, registry: ServiceRegistry
) -> Iterator[ProjectStore]:
    """ProjectStore over the recording client, with no handlers registered."""
    s = ProjectStore(recording_client, registry)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def workbench(workspace_root: Path) -> Iterator[Workbench]:
    """Workbench on the temp workspace with the built-in plugins published."""
    settings = ProjSettings.from_cli(root=workspace_root)
    wb = Workbench(settings)
    wb.init_plugins()
    try:
        yield wb
    finally:
        wb.close()


@pytest.fixture
def _isolated_workspace(workspace_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run CLI tests from inside the temp workspace, ignoring ambient config."""
    monkeypatch.delenv("PROJCTL_CONFIG", raising=False)
    monkeypatch.chdir(workspace_root)
