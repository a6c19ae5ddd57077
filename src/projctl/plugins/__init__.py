"""Extension layer: project handlers via pluggy and a service registry.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus single-file plugins from a local directory.
INVARIANT: Plugin failures are warnings, never errors.
"""

from projctl.plugins.manager import PluginManager
from projctl.plugins.registry import ServiceReference, ServiceRegistration, ServiceRegistry

__all__ = ["PluginManager", "ServiceReference", "ServiceRegistration", "ServiceRegistry"]
