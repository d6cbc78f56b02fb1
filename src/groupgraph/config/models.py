"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, groupgraph.toml only contains
overrides. A fresh workspace needs no config file at all.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class DatabaseConfig(BaseModel):
    """[database] section."""

    model_config = {"frozen": True}

    filename: str = "groupgraph.db"


class TraversalConfig(BaseModel):
    """[traversal] section — resource budget per visibility query."""

    model_config = {"frozen": True}

    max_nodes: int = Field(default=10_000, ge=1)
    max_depth: int = Field(default=256, ge=1)


class DefaultsConfig(BaseModel):
    """[defaults] section — values used when the caller omits them."""

    model_config = {"frozen": True}

    owner_id: int = 1
    inclusion_mode: str = "all"
    include_direct_profiles: bool = True


class GroupGraphConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    traversal: TraversalConfig = Field(default_factory=TraversalConfig)
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
