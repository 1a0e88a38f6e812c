from __future__ import annotations

from shipyard.models.cache import CacheEntry
from shipyard.models.config import (
    ChangelogConfig,
    ChangeTypeConfig,
    ConfigFormat,
    GitConfig,
    Package,
    ProjectConfig,
    RepoType,
    ResolvedConfig,
)
from shipyard.models.reference import DEFAULT_REF, ReferenceScheme, RemoteReference

__all__ = [
    # reference
    "DEFAULT_REF",
    "ReferenceScheme",
    "RemoteReference",
    # cache
    "CacheEntry",
    # config
    "ChangeTypeConfig",
    "ChangelogConfig",
    "ConfigFormat",
    "GitConfig",
    "Package",
    "ProjectConfig",
    "RepoType",
    "ResolvedConfig",
]
