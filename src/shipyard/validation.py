"""Validation rules for base (remote) and concrete (local) project configs.

A base configuration is abstract: it carries shared settings such as change
types and the changelog template, and must not name packages. A concrete
project configuration must name them.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from shipyard.errors import ConfigValidationError
from shipyard.models.config import Package, ProjectConfig, RepoType

SUPPORTED_ECOSYSTEMS: tuple[str, ...] = ("npm", "go", "helm")

_REPO_TYPES = frozenset(t.value for t in RepoType)


def to_project_config(document: dict[str, Any]) -> ProjectConfig:
    """Build a ProjectConfig, turning schema failures into ConfigValidationError."""
    try:
        return ProjectConfig.model_validate(document)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "config"
        raise ConfigValidationError(field, first["msg"]) from exc


def validate_base(document: dict[str, Any], *, require_type: bool = False) -> None:
    """Reject documents that cannot serve as an ``extends`` target."""
    if document.get("extends"):
        raise ConfigValidationError(
            "extends",
            "remote base configurations cannot extend another configuration; "
            "only a single level of inheritance is supported",
        )

    repo_type = document.get("type")
    if repo_type is None or repo_type == "":
        if require_type:
            raise ConfigValidationError("type", "repository type is required")
    elif repo_type not in _REPO_TYPES:
        raise ConfigValidationError("type", "repository type must be 'monorepo' or 'single-repo'")

    if document.get("packages"):
        raise ConfigValidationError(
            "packages",
            "remote base configurations should not contain packages - "
            "packages should be defined in the extending project",
        )

    package = document.get("package")
    if package and (not isinstance(package, dict) or package.get("name")):
        raise ConfigValidationError(
            "package",
            "remote base configurations should not contain package definition - "
            "package should be defined in the extending project",
        )


def _validate_package(pkg: Package, field: str) -> None:
    if not pkg.name:
        raise ConfigValidationError(f"{field}.name", "package name is required")
    if not pkg.path:
        raise ConfigValidationError(f"{field}.path", "package path is required")
    if not pkg.ecosystem:
        raise ConfigValidationError(f"{field}.ecosystem", "package ecosystem is required")
    if pkg.ecosystem not in SUPPORTED_ECOSYSTEMS:
        raise ConfigValidationError(
            f"{field}.ecosystem", f"unsupported ecosystem: {pkg.ecosystem}"
        )


def validate_project(config: ProjectConfig) -> None:
    """Check that *config* describes a concrete, releasable project."""
    if not config.repo:
        raise ConfigValidationError("repo", "repository URL is required")

    if config.type is RepoType.MONOREPO:
        if not config.packages:
            raise ConfigValidationError("packages", "monorepo must have at least one package")
        seen: set[str] = set()
        for i, pkg in enumerate(config.packages):
            _validate_package(pkg, f"packages[{i}]")
            if pkg.name in seen:
                raise ConfigValidationError(
                    f"packages[{i}].name", f"duplicate package name: {pkg.name}"
                )
            seen.add(pkg.name)
        return

    if config.package is None:
        raise ConfigValidationError("package", "single-repo must define a package")
    _validate_package(config.package, "package")
