"""ServiceResult and ServiceError: the universal service contract.

INVARIANT: All ProjectService methods return ServiceResult.
The CLI consumes this type; the async ProjectStore underneath raises.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from projctl.domain.errors import ProjectError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: Exception) -> ServiceError:
        """Map a raised error onto a payload; ``ProjectError`` keeps its code."""
        if isinstance(exc, ProjectError):
            return cls(code=exc.code, message=exc.message, detail=exc.detail)
        if isinstance(exc, ValueError):
            return cls(code="INVALID_INPUT", message=str(exc))
        return cls(code="UNEXPECTED", message=str(exc) or exc.__class__.__name__)


class ServiceResult(BaseModel):
    """Return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"add_dependency"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @classmethod
    def success(
        cls,
        op: str,
        data: dict[str, Any] | None = None,
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        return cls(ok=True, op=op, data=data or {}, warnings=warnings or [])

    @classmethod
    def failure(cls, op: str, exc: Exception) -> ServiceResult:
        return cls(ok=False, op=op, error=ServiceError.from_exception(exc))
