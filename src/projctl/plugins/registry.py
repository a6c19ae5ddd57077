"""Category-keyed service registry.

Services are registered under a category name together with a dict of
properties (for project handlers: ``type``, ``validationProperties`` and
display metadata). Consumers look services up by category and read the
properties from the returned :class:`ServiceReference` without having to
touch the service itself.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Mapping
from typing import Any, Protocol

logger = logging.getLogger(__name__)

HANDLER_CATEGORY = "project.handler"
CLIENT_CATEGORY = "project.client"


class ServiceReference:
    """Handle to one registered service and its properties."""

    def __init__(self, service_id: int, category: str, properties: Mapping[str, Any]) -> None:
        self.service_id = service_id
        self.category = category
        self.properties: dict[str, Any] = dict(properties)

    def get_property(self, name: str) -> Any:
        return self.properties.get(name)

    def __repr__(self) -> str:
        return f"ServiceReference({self.service_id}, {self.category!r})"


class ServiceRegistration:
    """Returned by :meth:`ServiceRegistry.register_service`."""

    def __init__(self, registry: ServiceRegistry, reference: ServiceReference) -> None:
        self._registry = registry
        self.reference = reference

    def unregister(self) -> None:
        self._registry._unregister(self.reference)


class HandlerRegistry(Protocol):
    """The registry surface the project store depends on."""

    def get_service_references(self, category: str) -> list[ServiceReference]: ...

    def get_service(self, reference: ServiceReference) -> Any: ...

    def register_service(
        self,
        category: str,
        service: Any,
        properties: Mapping[str, Any] | None = None,
    ) -> ServiceRegistration: ...


class ServiceRegistry:
    """In-process :class:`HandlerRegistry` implementation."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self._services: dict[int, Any] = {}
        self._references: dict[int, ServiceReference] = {}

    def register_service(
        self,
        category: str,
        service: Any,
        properties: Mapping[str, Any] | None = None,
    ) -> ServiceRegistration:
        """Register *service* under *category*; references keep registration order."""
        service_id = next(self._ids)
        reference = ServiceReference(service_id, category, properties or {})
        self._services[service_id] = service
        self._references[service_id] = reference
        logger.debug("Registered service %s under %s", service_id, category)
        return ServiceRegistration(self, reference)

    def get_service_references(self, category: str) -> list[ServiceReference]:
        return [ref for ref in self._references.values() if ref.category == category]

    def get_service(self, reference: ServiceReference) -> Any:
        """Return the service behind *reference*, or None once unregistered."""
        return self._services.get(reference.service_id)

    def _unregister(self, reference: ServiceReference) -> None:
        self._services.pop(reference.service_id, None)
        self._references.pop(reference.service_id, None)
        logger.debug("Unregistered service %s from %s", reference.service_id, reference.category)
