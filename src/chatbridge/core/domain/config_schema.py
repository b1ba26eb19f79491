"""
Configuration Schema Validation

Pydantic models for the bridge configuration file. Every section has
defaults, so an empty file (or no file at all) yields a working config.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WorkspaceSettings(BaseModel):
    """Where per-conversation workspaces live."""

    model_config = ConfigDict(extra="forbid")

    repo_path: str = Field(".", description="Base directory of the bridge data")
    workspaces_dir: str = Field(
        "workspaces",
        min_length=1,
        description="Workspaces root, relative to repo_path",
    )


class MemorySettings(BaseModel):
    """Defaults for memory recall."""

    model_config = ConfigDict(extra="forbid")

    search_limit: int = Field(10, gt=0, description="Maximum search results")
    max_chars: int = Field(2000, gt=0, description="Character budget for raw line search")


class LoggingSettings(BaseModel):
    """structlog output options."""

    model_config = ConfigDict(extra="forbid")

    level: str = Field("INFO", description="Log level name")
    json_output: bool = Field(False, description="Render log lines as JSON")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Accept any standard level name, case-insensitively."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level


class BridgeConfig(BaseModel):
    """Root configuration."""

    model_config = ConfigDict(extra="forbid")

    workspace: WorkspaceSettings = Field(default_factory=WorkspaceSettings)
    memory: MemorySettings = Field(default_factory=MemorySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
