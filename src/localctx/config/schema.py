"""
Pydantic models for localctx configuration.

Defines all configuration schemas using Pydantic v2 for validation,
defaults, and serialization.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from ..indexer.languages import DEFAULT_FILE_EXTENSIONS


class ContextConfig(BaseModel):
    """Context-index configuration, as sent by the editor client.

    Field aliases follow the client's camelCase names; snake_case names
    are accepted too. A size cap of None means unbounded.
    """

    ignore_file_patterns: list[str] = Field(
        default_factory=list,
        alias="ignoreFilePatterns",
        description="Gitignore-style patterns excluded from the index",
    )
    include_symlinks: bool = Field(
        default=False,
        alias="includeSymLinks",
        description=(
            "If True, symlinked files are reported by their link path; "
            "otherwise by their resolved real path"
        ),
    )
    max_file_size_mb: float | None = Field(
        default=10,
        alias="maxFileSizeMb",
        description="Largest file to index, in MB (None = unbounded)",
    )
    max_index_size_mb: float | None = Field(
        default=100,
        alias="maxIndexSizeMb",
        description="Total size of all indexed files, in MB (None = unbounded)",
    )
    file_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FILE_EXTENSIONS),
        alias="fileExtensions",
        description="Extensions to index (default: every known source language)",
    )

    model_config = {"extra": "forbid", "populate_by_name": True}

    @field_validator("max_file_size_mb", "max_index_size_mb")
    @classmethod
    def _positive_size(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("size caps must be positive (use null for unbounded)")
        return v

    @field_validator("file_extensions")
    @classmethod
    def _dotted_extensions(cls, v: list[str]) -> list[str]:
        return [ext if ext.startswith(".") else f".{ext}" for ext in v]


class LoggingConfig(BaseModel):
    """Logging system configuration."""

    level: Literal["debug", "info", "warn", "error"] = "warn"
    file: Path | None = None
    verbose: int = 0

    model_config = {"extra": "forbid"}


class WorkspaceConfig(BaseModel):
    """Workspace folders to index (paths or file:// URIs)."""

    folders: list[str] = Field(default_factory=list)

    model_config = {"extra": "forbid"}


class DiscoveryConfig(BaseModel):
    """Tuning of the discovery walk."""

    workers: int = Field(
        default=1,
        ge=1,
        le=32,
        description="Threads used to walk subtrees of each folder (1 = sequential)",
    )

    model_config = {"extra": "forbid"}


class AppConfig(BaseModel):
    """Complete application configuration.

    This is the root of the configuration tree. It combines all sections
    and is the entry point for validation.
    """

    context: ContextConfig = Field(default_factory=ContextConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)

    model_config = {"extra": "forbid"}
