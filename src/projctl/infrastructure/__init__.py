"""Infrastructure layer: file service contract and implementations.

This layer may import from domain (entries, errors).
It must never import from services, commands, or output.
"""
