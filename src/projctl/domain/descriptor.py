"""Pure operations on the raw ``project.json`` document.

The store reads the file into a plain ``dict``, edits it with these
helpers, and writes the same ``dict`` back, so keys this package knows
nothing about are preserved verbatim. Only :func:`stamp` produces a typed
:class:`ProjectDescriptor`, and its location stamps never reach the file.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from projctl.domain.errors import ParseError
from projctl.domain.types import Dependency, ProjectDescriptor

DEPENDENCIES_KEY = "Dependencies"

# Keys derived from where the file lives; stripped before every write.
LOCATION_KEYS = ("ContentLocation", "WorkspaceLocation", "ProjectJsonLocation")


def parse_document(
    content: str | bytes | None,
    *,
    location: str | None = None,
) -> dict[str, Any]:
    """Parse descriptor text into a dict. Empty content parses to ``{}``."""
    if not content:
        return {}
    try:
        document = json.loads(content)
    except json.JSONDecodeError as exc:
        msg = f"Malformed project.json: {exc}"
        raise ParseError(msg, location=location) from exc
    if not isinstance(document, dict):
        msg = f"project.json must hold a JSON object, got {type(document).__name__}"
        raise ParseError(msg, location=location)
    return document


def render_document(document: Mapping[str, Any]) -> str:
    """Serialize a document for writing."""
    payload = {key: value for key, value in document.items() if key not in LOCATION_KEYS}
    return json.dumps(payload, indent=2, ensure_ascii=False)


def dependency_list(document: dict[str, Any], *, location: str | None = None) -> list[Any]:
    """Return the document's dependency list, creating it when absent."""
    deps = document.setdefault(DEPENDENCIES_KEY, [])
    if not isinstance(deps, list):
        msg = f"{DEPENDENCIES_KEY} must be a list, got {type(deps).__name__}"
        raise ParseError(msg, location=location)
    return deps


def add_dependency(
    document: dict[str, Any],
    dependency: Dependency,
    *,
    location: str | None = None,
) -> bool:
    """Append *dependency* unless one with the same ``Location`` exists.

    Returns True when the document changed.
    """
    deps = dependency_list(document, location=location)
    for existing in deps:
        if isinstance(existing, Mapping) and existing.get("Location") == dependency.location:
            return False
    deps.append(dependency.to_json())
    return True


def remove_dependency(
    document: dict[str, Any],
    dependency: Dependency,
    *,
    location: str | None = None,
) -> int:
    """Remove every entry matching both ``Location`` and ``Type``.

    Returns the number of entries removed.
    """
    deps = dependency_list(document, location=location)
    removed = 0
    for idx in range(len(deps) - 1, -1, -1):
        existing = deps[idx]
        if not isinstance(existing, Mapping):
            continue
        try:
            candidate = Dependency.model_validate(existing)
        except ValidationError:
            continue
        if candidate.same_target(dependency):
            del deps[idx]
            removed += 1
    return removed


def merge_properties(document: dict[str, Any], properties: Mapping[str, Any]) -> list[str]:
    """Shallow-merge *properties* into *document*; nested values are replaced.

    Returns the keys that were written.
    """
    changed: list[str] = []
    for key, value in properties.items():
        document[key] = value
        changed.append(key)
    return changed


def stamp(
    document: Mapping[str, Any],
    *,
    name: str | None,
    content_location: str | None,
    workspace_location: str | None = None,
    project_json_location: str | None = None,
) -> ProjectDescriptor:
    """Build a :class:`ProjectDescriptor` from *document* plus location stamps.

    The document's own ``Name`` wins over *name*.
    """
    data = dict(document)
    data["Name"] = data.get("Name") or name
    data["ContentLocation"] = content_location
    data["WorkspaceLocation"] = workspace_location
    data["ProjectJsonLocation"] = project_json_location
    try:
        return ProjectDescriptor.model_validate(data)
    except ValidationError as exc:
        msg = f"Invalid project.json content: {exc.error_count()} validation error(s)"
        errors = exc.errors(include_url=False, include_context=False)
        raise ParseError(msg, location=project_json_location, detail={"errors": errors}) from exc
