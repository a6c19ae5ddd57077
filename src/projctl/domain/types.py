"""Workspace entries, project descriptors, and dependencies.

Wire names are the capitalized JSON keys used by file services and by
``project.json`` (``Name``, ``Location``, ``ContentLocation`` ...). Python
code uses the snake_case attributes; ``to_json()`` restores the wire form.
Unknown keys are allowed everywhere and survive a validate/dump round trip.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DESCRIPTOR_FILENAME = "project.json"


class DependencyType(StrEnum):
    """Dependency types understood without a registered handler."""

    FILE = "file"


class Entry(BaseModel):
    """A file or folder as reported by a file service.

    ``parents`` is ordered nearest-first: the last element is the top-level
    folder directly under the workspace.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = Field(alias="Name")
    location: str = Field(alias="Location")
    directory: bool = Field(default=False, alias="Directory")
    parents: list[Entry] | None = Field(default=None, alias="Parents")
    children: list[Entry] | None = Field(default=None, alias="Children")
    children_location: str | None = Field(default=None, alias="ChildrenLocation")
    content_location: str | None = Field(default=None, alias="ContentLocation")

    @property
    def top_level_folder(self) -> Entry | None:
        """The outermost ancestor, or None for top-level entries."""
        if self.parents:
            return self.parents[-1]
        return None

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class Workspace(BaseModel):
    """Root container of all top-level entries."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = Field(default="", alias="Name")
    location: str = Field(alias="Location")
    children: list[Entry] | None = Field(default=None, alias="Children")

    def find_child(self, name: str) -> Entry | None:
        """Return the top-level child called *name*, if any."""
        for child in self.children or []:
            if child.name == name:
                return child
        return None

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class Dependency(BaseModel):
    """One entry of a descriptor's ``Dependencies`` list.

    ``location`` is handler-specific: a workspace path for ``file``
    dependencies, an opaque identifier (for example a remote URL) otherwise.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    type: str = Field(alias="Type")
    name: str = Field(default="", alias="Name")
    location: str = Field(alias="Location")

    def same_target(self, other: Dependency) -> bool:
        """Removal key: location and type both match."""
        return self.location == other.location and self.type == other.type

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class ProjectDescriptor(BaseModel):
    """A parsed ``project.json`` stamped with where it lives.

    The location stamps are derived by the store on every read and are
    never written back to the file.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str | None = Field(default=None, alias="Name")
    content_location: str | None = Field(default=None, alias="ContentLocation")
    workspace_location: str | None = Field(default=None, alias="WorkspaceLocation")
    project_json_location: str | None = Field(default=None, alias="ProjectJsonLocation")
    dependencies: list[Dependency] = Field(default_factory=list, alias="Dependencies")

    def has_dependency(self, location: str) -> bool:
        return any(dep.location == location for dep in self.dependencies)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class InitResult(BaseModel):
    """Outcome of initializing ``project.json`` in a folder.

    Exactly one shape is populated: ``content_location`` plus
    ``project_metadata`` when a descriptor payload was written, or
    ``file_metadata`` when only the empty file was created.
    """

    content_location: str | None = None
    project_metadata: dict[str, Any] | None = None
    file_metadata: Entry | None = None
