"""Built-in git project handler.

Recognizes workspace folders that are git checkouts and describes them by
the URL of their ``origin`` remote, so a descriptor can declare
``{"Type": "git", "Location": "<remote url>"}`` and have it resolved to
whichever top-level folder holds that clone.

The checkout is inspected through the file client (``.git/config``), never
by running git, so the handler works against any file service.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import pluggy

from projctl.domain.types import Entry

if TYPE_CHECKING:
    from projctl.infrastructure.filesystem import FileClient

hookimpl = pluggy.HookimplMarker("projctl")

logger = logging.getLogger(__name__)

GIT_DIR = ".git"
GIT_CONFIG = "config"
DEFAULT_REMOTE = "origin"

_SECTION_RE = re.compile(r'^\s*\[\s*([^\]\s"]+)(?:\s+"([^"]*)")?\s*\]')
_KEY_RE = re.compile(r"^\s*([A-Za-z][A-Za-z0-9-]*)\s*=\s*(.*?)\s*$")


def parse_remote_url(config_text: str, remote: str = DEFAULT_REMOTE) -> str | None:
    """Return ``remote.<remote>.url`` from git config text, if set.

    Examples:
        >>> parse_remote_url('[remote "origin"]\\n\\turl = git@host:a/b.git\\n')
        'git@host:a/b.git'
        >>> parse_remote_url("[core]\\n\\tbare = false\\n") is None
        True
    """
    in_remote = False
    for line in config_text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(("#", ";")):
            continue
        section = _SECTION_RE.match(line)
        if section:
            in_remote = section.group(1).lower() == "remote" and section.group(2) == remote
            continue
        if not in_remote:
            continue
        key = _KEY_RE.match(line)
        if key and key.group(1).lower() == "url":
            return key.group(2).strip('"') or None
    return None


class GitProjectHandler:
    """Handler for ``git`` dependencies."""

    type = "git"
    id = "projctl.handler.git"
    add_dependency_name = "Git repository"
    add_dependency_tooltip = "Depend on a git checkout in the workspace"
    add_project_name = "Git repository"
    add_project_tooltip = "Create a project from a git checkout"
    add_parameters = [{"id": "url", "type": "url", "name": "Remote URL"}]
    validation_properties = [{"source": "Directory", "match": True}]

    def __init__(self, file_client: FileClient) -> None:
        self._file_client = file_client

    async def get_dependency_description(
        self, item: Entry | Mapping[str, Any]
    ) -> dict[str, Any] | None:
        """Describe *item* by its origin URL; None when it is not a git checkout."""
        entry = item if isinstance(item, Entry) else Entry.model_validate(item)
        config = await self._find_config(entry)
        if config is None:
            return None
        content = await self._file_client.read(config.location)
        url = parse_remote_url(str(content))
        if url is None:
            logger.debug("No %s remote in %s", DEFAULT_REMOTE, config.location)
            return None
        return {"Type": self.type, "Name": entry.name, "Location": url}

    async def _find_config(self, entry: Entry) -> Entry | None:
        children = entry.children
        if children is None:
            children = await self._file_client.fetch_children(
                entry.children_location or entry.location
            )
        git_dir = next((c for c in children if c.name == GIT_DIR and c.directory), None)
        if git_dir is None:
            return None
        git_children = await self._file_client.fetch_children(
            git_dir.children_location or git_dir.location
        )
        return next((c for c in git_children if c.name == GIT_CONFIG and not c.directory), None)


class GitPlugin:
    """Contributes :class:`GitProjectHandler`."""

    @hookimpl
    def project_handlers(self, file_client: FileClient) -> list[object]:
        return [GitProjectHandler(file_client)]
