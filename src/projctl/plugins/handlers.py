"""Project handlers: pluggable describers for one dependency type.

A plugin contributes handler objects through the ``project_handlers`` hook.
Each object exposes ``type`` plus optional display metadata attributes and
an async ``get_dependency_description(item)`` returning a mapping with the
dependency's ``Location`` (or None when the item is not one of its
dependencies). The metadata is published as service-reference properties
under the wire names below; :class:`ProjectHandler` materializes a
reference back into a typed handle.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from projctl.plugins.registry import HandlerRegistry, ServiceReference

# Wire property name -> handler attribute name.
HANDLER_PROPERTIES: dict[str, str] = {
    "id": "id",
    "type": "type",
    "addParameters": "add_parameters",
    "optionalParameters": "optional_parameters",
    "addDependencyName": "add_dependency_name",
    "addDependencyTooltip": "add_dependency_tooltip",
    "actionComment": "action_comment",
    "addProjectName": "add_project_name",
    "addProjectTooltip": "add_project_tooltip",
    "validationProperties": "validation_properties",
}


def handler_properties(handler: object) -> dict[str, Any]:
    """Collect the declared metadata of a plugin-provided handler object."""
    props: dict[str, Any] = {}
    for wire_name, attr in HANDLER_PROPERTIES.items():
        value = getattr(handler, attr, None)
        if value is not None:
            props[wire_name] = value
    return props


@dataclass
class ProjectHandler:
    """A registered handler service together with its declared metadata."""

    service: Any
    type: str
    id: str | None = None
    add_parameters: list[Any] | None = None
    optional_parameters: list[Any] | None = None
    add_dependency_name: str | None = None
    add_dependency_tooltip: str | None = None
    action_comment: str | None = None
    add_project_name: str | None = None
    add_project_tooltip: str | None = None
    validation_properties: list[Mapping[str, Any]] = field(default_factory=list)

    @classmethod
    def from_reference(
        cls,
        reference: ServiceReference,
        registry: HandlerRegistry,
    ) -> ProjectHandler:
        kwargs = {
            attr: reference.get_property(wire_name)
            for wire_name, attr in HANDLER_PROPERTIES.items()
        }
        kwargs["validation_properties"] = list(kwargs["validation_properties"] or [])
        return cls(service=registry.get_service(reference), **kwargs)

    async def get_dependency_description(self, item: Any) -> Mapping[str, Any] | None:
        return await self.service.get_dependency_description(item)

    def describe(self) -> dict[str, Any]:
        """Metadata as a JSON-friendly dict (wire names, no service)."""
        return {
            wire_name: getattr(self, attr)
            for wire_name, attr in HANDLER_PROPERTIES.items()
            if getattr(self, attr) not in (None, [])
        }
