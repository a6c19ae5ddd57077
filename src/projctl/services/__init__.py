"""Service layer: the async ProjectStore and ServiceResult facades over it.

Services may import from domain, infrastructure, and plugins.
They must never import from commands or output.
"""
