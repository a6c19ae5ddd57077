"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, projctl.toml only contains
overrides. A fresh workspace needs no config file at all.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- projctl.toml sections ---


class WorkspaceConfig(BaseModel):
    """[workspace] section."""

    model_config = {"frozen": True}

    # Relative to the directory holding projctl.toml.
    path: str = "."


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    builtins: bool = True
    local_dir: str = ".projctl/plugins"
    disabled: list[str] = Field(default_factory=list)
