"""Error kinds raised by the project store and its collaborators.

Every error carries a stable ``code`` that the service layer copies into
``ServiceError.code``.
"""

from __future__ import annotations

from typing import Any


class ProjectError(Exception):
    """Base class for all projctl errors."""

    code = "PROJECT_ERROR"

    def __init__(
        self,
        message: str,
        *,
        location: str | None = None,
        detail: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.location = location
        self.detail = dict(detail or {})
        if location is not None:
            self.detail.setdefault("location", location)


class ParseError(ProjectError):
    """An existing ``project.json`` does not hold a JSON object."""

    code = "PARSE_ERROR"


class NotFoundError(ProjectError):
    """A descriptor, dependency, or location is absent."""

    code = "NOT_FOUND"


class UnsupportedTypeError(ProjectError):
    """No project handler is registered for a dependency type."""

    code = "UNSUPPORTED_TYPE"


class StorageError(ProjectError):
    """The file service failed; raised by file clients, passed through unchanged."""

    code = "STORAGE_ERROR"
