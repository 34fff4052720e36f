"""
Configuration module for localctx.

Exports the main components for convenient imports.
"""

from .loader import load_config
from .schema import (
    AppConfig,
    ContextConfig,
    DiscoveryConfig,
    LoggingConfig,
    WorkspaceConfig,
)

__all__ = [
    "load_config",
    "AppConfig",
    "ContextConfig",
    "DiscoveryConfig",
    "LoggingConfig",
    "WorkspaceConfig",
]
