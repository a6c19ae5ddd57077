"""Domain layer: workspace entries, descriptors, dependencies, errors.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
